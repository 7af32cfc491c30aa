"""
Tests for execution contexts and the context resolver.
Covers the privilege-switch and remote-shell argument conventions.
"""

import pytest

from pipexec.context import (
    ContextResolver,
    Direct,
    Invocation,
    LocalImpersonated,
    Remote,
    Stage,
)


class TestContextTypes:
    """Test context value validation."""

    def test_local_requires_user(self):
        with pytest.raises(ValueError):
            LocalImpersonated("")

    def test_remote_requires_host(self):
        with pytest.raises(ValueError):
            Remote("")

    def test_remote_rejects_option_like_host(self):
        """A host starting with '-' would be parsed as an ssh option."""
        with pytest.raises(ValueError):
            Remote("-oProxyCommand=touch /tmp/x")

    def test_remote_rejects_empty_optional_fields(self):
        with pytest.raises(ValueError):
            Remote("host", config="")

    def test_contexts_are_values(self):
        assert LocalImpersonated("alice") == LocalImpersonated("alice")
        assert Remote("h", config="c") == Remote("h", config="c")
        assert Direct() == Direct()
        assert hash(Remote("h")) == hash(Remote("h"))


class TestStage:
    """Test stage construction and coercion."""

    def test_none_context_means_direct(self):
        stage = Stage("ls", ["-l"])
        assert stage.context == Direct()
        assert stage.args == ("-l",)

    def test_coerce_tuples(self):
        assert Stage.coerce(("ls", ["-l"])) == Stage("ls", ("-l",))
        assert Stage.coerce(("ls", [], LocalImpersonated("bob"))).context == LocalImpersonated("bob")

    def test_coerce_passes_stage_through(self):
        stage = Stage("cat")
        assert Stage.coerce(stage) is stage

    def test_coerce_rejects_garbage(self):
        with pytest.raises(TypeError):
            Stage.coerce("ls -l")

    def test_string_args_rejected(self):
        """A string would otherwise be split into characters."""
        with pytest.raises(ValueError):
            Stage("ls", "-l")

    def test_non_string_arg_rejected(self):
        with pytest.raises(ValueError):
            Stage("echo", [1])

    def test_unknown_context_rejected(self):
        with pytest.raises(TypeError):
            Stage("ls", [], {"type": "direct"})


class TestContextResolver:
    """Test resolution of each context variant."""

    @pytest.fixture
    def resolver(self):
        return ContextResolver()

    def test_direct_unchanged(self, resolver):
        invocation = resolver.resolve(Stage("grep", ["-n", "needle"], Direct()))
        assert invocation == Invocation("grep", ("-n", "needle"))
        assert invocation.argv == ["grep", "-n", "needle"]

    def test_none_context_is_direct(self, resolver):
        assert resolver.resolve_command("ls", ["a"], None) == Invocation("ls", ("a",))

    def test_local_impersonated(self, resolver):
        invocation = resolver.resolve(Stage("ls", ["-la", "/root"], LocalImpersonated("alice")))
        assert invocation.argv == ["sudo", "-n", "-u", "alice", "--", "ls", "-la", "/root"]

    def test_local_user_is_single_argument(self, resolver):
        """Shell metacharacters in the user name stay inside one argv item."""
        invocation = resolver.resolve_command("id", [], LocalImpersonated("bob; rm -rf /"))
        assert invocation.args[2] == "bob; rm -rf /"
        assert invocation.args[3] == "--"

    def test_remote_minimal(self, resolver):
        invocation = resolver.resolve_command("uptime", [], Remote("web01"))
        assert invocation.argv == ["ssh", "web01", "uptime"]

    def test_remote_config_precedes_host(self, resolver):
        invocation = resolver.resolve_command("ls", ["-l"], Remote("web01", config="/etc/pipexec/ssh_config"))
        assert invocation.argv == ["ssh", "-F", "/etc/pipexec/ssh_config", "web01", "ls", "-l"]

    def test_remote_user_and_identity(self, resolver):
        context = Remote("web01", config="cfg", user="deploy", identity="/keys/id_ed25519")
        invocation = resolver.resolve_command("ls", [], context)
        assert invocation.argv == [
            "ssh", "-F", "cfg", "-i", "/keys/id_ed25519", "deploy@web01", "ls",
        ]

    def test_remote_payload_passed_through(self, resolver):
        """Remote globs reach the remote shell unchanged."""
        invocation = resolver.resolve_command("ls", ["/var/log/*.log"], Remote("h"))
        assert invocation.argv == ["ssh", "h", "ls", "/var/log/*.log"]

    def test_custom_programs(self):
        resolver = ContextResolver(privilege_program="doas-wrapper", remote_program="/usr/bin/ssh")
        assert resolver.resolve_command("id", [], LocalImpersonated("x")).program == "doas-wrapper"
        assert resolver.resolve_command("id", [], Remote("h")).program == "/usr/bin/ssh"

    def test_resolution_is_deterministic(self, resolver):
        stages = [
            Stage("cat", ["f"], Direct()),
            Stage("cat", ["f"], LocalImpersonated("alice")),
            Stage("cat", ["f"], Remote("h", config="c", user="u", identity="i")),
        ]
        for stage in stages:
            assert resolver.resolve(stage) == resolver.resolve(stage)

    def test_unknown_context_type(self, resolver):
        with pytest.raises(TypeError):
            resolver.resolve_command("ls", [], object())
