import os
import stat

import pytest

from execution import toolchain
from execution.errors import ToolchainUnavailable
from execution.languages import profile_for


def _fake_which(available):

    def which(name):
        return f"/usr/bin/{name}" if name in available else None

    return which


def _make_executable(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def test_interpreter_resolved_from_path(monkeypatch):
    monkeypatch.setattr(toolchain.shutil, "which", _fake_which({"node"}))
    resolved = toolchain.ensure_available(profile_for("javascript"))
    assert resolved.compile_argv is None
    assert resolved.run_argv == ("/usr/bin/node", "main.js")


def test_python_falls_back_to_aliases(monkeypatch):
    monkeypatch.setattr(toolchain.shutil, "which", _fake_which({"py"}))
    resolved = toolchain.ensure_available(profile_for("python"))
    assert resolved.run_argv == ("/usr/bin/py", "main.py")


def test_missing_python_names_the_toolchain(monkeypatch):
    monkeypatch.setattr(toolchain.shutil, "which", _fake_which(set()))
    with pytest.raises(ToolchainUnavailable) as err:
        toolchain.ensure_available(profile_for("python"))
    assert err.value.language == "python"
    assert "python" in err.value.message
    assert "python3, python, py" in err.value.hint


def test_compiled_artifact_is_not_probed(monkeypatch):
    monkeypatch.setattr(toolchain.shutil, "which", _fake_which({"g++"}))
    resolved = toolchain.ensure_available(profile_for("cpp"))
    assert resolved.compile_argv[0] == "/usr/bin/g++"
    assert resolved.compile_argv[1:] == profile_for("cpp").compile_command[1:]
    assert resolved.run_argv == profile_for("cpp").run_command


def test_missing_compiler_is_reported(monkeypatch):
    monkeypatch.setattr(toolchain.shutil, "which", _fake_which(set()))
    with pytest.raises(ToolchainUnavailable) as err:
        toolchain.ensure_available(profile_for("c"))
    assert err.value.binary == "gcc"
    assert "GCC C Compiler" in err.value.hint


@pytest.mark.skipif(os.name == "nt", reason="POSIX executable bits")
def test_java_uses_pinned_jdk(monkeypatch, tmp_path):
    jdk = tmp_path / "jdk-17"
    _make_executable(jdk / "bin" / "javac")
    _make_executable(jdk / "bin" / "java")
    monkeypatch.setattr(toolchain, "JDK_HOME", str(jdk))
    monkeypatch.setattr(toolchain.shutil, "which", _fake_which({"javac", "java"}))

    resolved = toolchain.ensure_available(profile_for("java"))
    assert resolved.compile_argv == (str(jdk / "bin" / "javac"), "Main.java")
    assert resolved.run_argv == (str(jdk / "bin" / "java"), "Main")


def test_java_falls_back_to_path_when_pinned_jdk_missing(monkeypatch, tmp_path):
    monkeypatch.setattr(toolchain, "JDK_HOME", str(tmp_path / "missing-jdk"))
    monkeypatch.setattr(toolchain.shutil, "which", _fake_which({"javac", "java"}))

    resolved = toolchain.ensure_available(profile_for("java"))
    assert resolved.compile_argv == ("/usr/bin/javac", "Main.java")
    assert resolved.run_argv == ("/usr/bin/java", "Main")


def test_java_hint_names_expected_jdk_path(monkeypatch, tmp_path):
    jdk = tmp_path / "missing-jdk"
    monkeypatch.setattr(toolchain, "JDK_HOME", str(jdk))
    monkeypatch.setattr(toolchain.shutil, "which", _fake_which(set()))

    with pytest.raises(ToolchainUnavailable) as err:
        toolchain.ensure_available(profile_for("java"))
    assert err.value.binary == "javac"
    assert str(jdk / "bin" / "javac") in err.value.hint
