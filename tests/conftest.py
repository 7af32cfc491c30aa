"""Shared fixtures: stand-in privilege-switch and remote-shell programs."""

import stat
from pathlib import Path

import pytest


def _write_script(path: Path, body: str) -> str:
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def fake_sudo(tmp_path):
    """Accepts sudo-style options up to '--' and runs the rest as given."""
    return _write_script(
        tmp_path / "fake-sudo",
        "#!/bin/sh\n"
        "while [ $# -gt 0 ] && [ \"$1\" != \"--\" ]; do shift; done\n"
        "shift\n"
        "exec \"$@\"\n",
    )


@pytest.fixture
def fake_ssh(tmp_path):
    """Skips -F/-i options and the host, then runs the payload through sh like sshd."""
    return _write_script(
        tmp_path / "fake-ssh",
        "#!/bin/sh\n"
        "while [ $# -gt 0 ]; do\n"
        "  case \"$1\" in\n"
        "    -F|-i) shift 2 ;;\n"
        "    *) break ;;\n"
        "  esac\n"
        "done\n"
        "shift\n"
        "exec sh -c \"$*\"\n",
    )


@pytest.fixture
def haystack(tmp_path):
    """A small text file with one matching line."""
    path = tmp_path / "file.txt"
    path.write_text("first line\nthe needle is here\nlast line\n")
    return path
