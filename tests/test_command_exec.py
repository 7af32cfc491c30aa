"""
Tests for the exec / exec_piped entry points.
Exercises real pipelines, including mixed execution contexts.
"""

import pytest

import pipexec
from pipexec.context import ContextResolver, Direct, LocalImpersonated, Remote, Stage
from pipexec.exceptions import (
    ChainingError,
    ExecError,
    IoError,
    TerminationWithError,
)
from pipexec.exec import CommandExec, Exec


class TestCommandExec:
    """Test pipelines of local commands."""

    @pytest.fixture
    def command_exec(self):
        return CommandExec()

    def test_is_exec(self, command_exec):
        assert isinstance(command_exec, Exec)

    def test_single_command(self, command_exec):
        assert command_exec.exec("echo", ["hello", "world"]) == "hello world\n"

    def test_cat_into_grep(self, command_exec, haystack):
        output = command_exec.exec_piped([
            ("cat", [str(haystack)], Direct()),
            ("grep", ["needle"], Direct()),
        ])

        assert output == "the needle is here\n"

    def test_stage_objects_and_short_tuples(self, command_exec, haystack):
        output = command_exec.exec_piped([
            Stage("cat", [str(haystack)]),
            ("grep", ["line"]),
            ("wc", ["-l"], None),
        ])

        assert output.strip() == "2"

    def test_single_stage_equivalence(self, command_exec, haystack):
        cases = [
            ("cat", [str(haystack)], None),
            ("printf", ["%s-%s", "a", "b"], Direct()),
        ]
        for command, args, context in cases:
            assert command_exec.exec(command, args, context) == command_exec.exec_piped([(command, args, context)])

    def test_single_stage_equivalence_on_failure(self, command_exec):
        with pytest.raises(TerminationWithError) as single:
            command_exec.exec("sh", ["-c", "echo nope >&2; exit 7"])
        with pytest.raises(TerminationWithError) as piped:
            command_exec.exec_piped([("sh", ["-c", "echo nope >&2; exit 7"], None)])

        assert (single.value.code, single.value.message) == (piped.value.code, piped.value.message)

    def test_empty_pipeline(self, command_exec):
        with pytest.raises(ChainingError):
            command_exec.exec_piped([])

    def test_only_final_output_is_returned(self, command_exec):
        output = command_exec.exec_piped([
            ("echo", ["upstream"]),
            ("sh", ["-c", "cat >/dev/null; echo downstream"]),
        ])

        assert output == "downstream\n"

    def test_upstream_is_not_buffered_to_completion(self, command_exec):
        """An endless producer stops once the consumer exits."""
        output = command_exec.exec_piped([("yes", []), ("head", ["-n", "3"])])

        assert output == "y\ny\ny\n"

    def test_large_stream(self, command_exec):
        output = command_exec.exec_piped([
            ("seq", ["1", "200000"]),
            ("tail", ["-n", "1"]),
        ])

        assert output == "200000\n"

    def test_final_failure_is_reported(self, command_exec, haystack):
        with pytest.raises(TerminationWithError) as exc_info:
            command_exec.exec_piped([
                ("cat", [str(haystack)]),
                ("grep", ["absent-word"]),
            ])

        assert exc_info.value.code == 1

    def test_middle_spawn_failure(self, command_exec):
        with pytest.raises(IoError):
            command_exec.exec_piped([
                ("echo", ["x"]),
                ("/nonexistent/pipexec-program", []),
                ("cat", []),
            ])

    def test_errors_share_base_class(self, command_exec):
        with pytest.raises(ExecError):
            command_exec.exec("/nonexistent/pipexec-program")


class TestMixedContexts:
    """Test per-stage context resolution with stand-in programs."""

    def test_impersonated_then_direct(self, fake_sudo, haystack):
        command_exec = CommandExec(ContextResolver(privilege_program=fake_sudo))

        output = command_exec.exec_piped([
            ("cat", [str(haystack)], LocalImpersonated("alice")),
            ("grep", ["needle"], Direct()),
        ])

        assert output == "the needle is here\n"

    def test_remote_glob_expands_on_remote_side(self, fake_ssh, tmp_path):
        (tmp_path / "a.log").write_text("")
        (tmp_path / "b.txt").write_text("")
        command_exec = CommandExec(ContextResolver(remote_program=fake_ssh))
        context = Remote("web01", config="/dev/null", identity="/dev/null")

        output = command_exec.exec("ls", [str(tmp_path) + "/*.log"], context)

        assert output == str(tmp_path / "a.log") + "\n"

    def test_remote_pipe_runs_on_remote_side(self, fake_ssh):
        command_exec = CommandExec(ContextResolver(remote_program=fake_ssh))

        output = command_exec.exec("echo", ["remote", "|", "tr", "a-z", "A-Z"], Remote("web01"))

        assert output == "REMOTE\n"

    def test_all_three_contexts(self, fake_sudo, fake_ssh, haystack):
        resolver = ContextResolver(privilege_program=fake_sudo, remote_program=fake_ssh)
        command_exec = CommandExec(resolver)

        output = command_exec.exec_piped([
            ("cat", [str(haystack)], Remote("files.example", user="deploy")),
            ("grep", ["line"], LocalImpersonated("bob")),
            ("tr", ["a-z", "A-Z"], None),
        ])

        assert output == "FIRST LINE\nLAST LINE\n"


class TestModuleFunctions:
    """Test the package-level convenience functions."""

    def test_exec_command(self):
        assert pipexec.exec_command("echo", ["hi"]) == "hi\n"

    def test_exec_piped(self):
        assert pipexec.exec_piped([("echo", ["a b"]), ("tr", [" ", "_"])]) == "a_b\n"
