import sys

import pytest

from execution import sandbox, toolchain
from execution.models import LanguageId
from execution.toolchain import ResolvedToolchain


@pytest.fixture
def workspace_root(tmp_path, monkeypatch):
    # every workspace of the test lands here so leaks are easy to spot
    root = tmp_path / "workspaces"
    root.mkdir()
    monkeypatch.setattr(sandbox, "WORKSPACE_ROOT", str(root))
    return root


@pytest.fixture
def host_python(monkeypatch):
    """Run python code with the interpreter running the tests"""
    original = toolchain.ensure_available

    def ensure_available(profile):
        if profile.language == LanguageId.PYTHON:
            return ResolvedToolchain(compile_argv=None,
                                     run_argv=(sys.executable,
                                               profile.source_file_name))
        return original(profile)

    monkeypatch.setattr(toolchain, "ensure_available", ensure_available)


@pytest.fixture
def fake_toolchain(monkeypatch):
    """Install a hand-made ResolvedToolchain for every language"""

    def install(compile_argv, run_argv):
        monkeypatch.setattr(
            toolchain, "ensure_available",
            lambda profile: ResolvedToolchain(compile_argv=compile_argv,
                                              run_argv=run_argv))

    return install
