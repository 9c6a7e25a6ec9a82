import pytest

from execution.errors import UnsupportedLanguage
from execution.languages import (parse_diagnostics, profile_for,
                                 resolve_language, supported_languages)
from execution.models import LanguageId


@pytest.mark.parametrize("language, file_name, compiled", [
    ("python", "main.py", False),
    ("javascript", "main.js", False),
    ("c", "main.c", True),
    ("cpp", "main.cpp", True),
    ("java", "Main.java", True),
])
def test_profile_for_supported_languages(language, file_name, compiled):
    profile = profile_for(language)
    assert profile.language == LanguageId(language)
    assert profile.source_file_name == file_name
    assert profile.compiled is compiled


def test_profile_for_is_case_insensitive():
    assert profile_for(" Python ") is profile_for(LanguageId.PYTHON)


@pytest.mark.parametrize("language", ["rust", "", "py", "C#"])
def test_unknown_language_is_rejected(language):
    with pytest.raises(UnsupportedLanguage) as err:
        profile_for(language)
    assert err.value.status_code == 400
    assert "python" in err.value.details


def test_profiles_are_immutable():
    profile = profile_for("java")
    with pytest.raises(Exception):
        profile.source_file_name = "Other.java"


def test_java_compiles_then_runs_class_main():
    profile = profile_for("java")
    assert profile.compile_command == ("javac", "Main.java")
    assert profile.run_command == ("java", "Main")


def test_python_has_interpreter_fallbacks():
    assert profile_for("python").aliases == ("python", "py")


def test_every_language_is_registered():
    names = [lang["name"] for lang in supported_languages()]
    assert names == [lang.value for lang in LanguageId]
    assert resolve_language("CPP") == LanguageId.CPP


def test_gcc_diagnostics():
    stderr = (
        "main.cpp: In function 'int main()':\n"
        "main.cpp:1:12: error: expected '}' at end of input\n"
        "main.cpp:3:5: warning: unused variable 'x' [-Wunused-variable]\n"
    )
    diagnostics = parse_diagnostics("cpp", stderr)
    assert [(d.line, d.column, d.severity) for d in diagnostics] == [
        (1, 12, "error"),
        (3, 5, "warning"),
    ]
    assert diagnostics[0].message == "expected '}' at end of input"


def test_gcc_fatal_error_is_an_error():
    stderr = "main.c:1:10: fatal error: nothing.h: No such file or directory\n"
    [diagnostic] = parse_diagnostics("c", stderr)
    assert diagnostic.severity == "error"
    assert diagnostic.line == 1


def test_javac_diagnostics():
    stderr = (
        "Main.java:1: error: class Other is public, should be declared in a file named Other.java\n"
        "public class Other {\n"
        "       ^\n"
        "1 error\n"
    )
    [diagnostic] = parse_diagnostics("java", stderr)
    assert diagnostic.line == 1
    assert diagnostic.message.startswith("class Other is public")


def test_python_traceback_uses_innermost_frame():
    stderr = (
        "Traceback (most recent call last):\n"
        '  File "/tmp/code-1/main.py", line 5, in <module>\n'
        "    f()\n"
        '  File "/tmp/code-1/main.py", line 2, in f\n'
        "    return 1 / 0\n"
        "ZeroDivisionError: division by zero\n"
    )
    [diagnostic] = parse_diagnostics("python", stderr)
    assert diagnostic.line == 2
    assert diagnostic.message == "ZeroDivisionError: division by zero"


def test_javascript_stack_frame():
    stderr = (
        "/tmp/code-1/main.js:3\n"
        "    foo();\n"
        "    ^\n\n"
        "ReferenceError: foo is not defined\n"
        "    at Object.<anonymous> (/tmp/code-1/main.js:3:5)\n"
    )
    [diagnostic] = parse_diagnostics("javascript", stderr)
    assert diagnostic.line == 3
    assert diagnostic.message == "ReferenceError: foo is not defined"


def test_unparseable_stderr_gives_no_diagnostics():
    assert parse_diagnostics("python", "Killed\n") == []
    assert parse_diagnostics("c", "") == []
