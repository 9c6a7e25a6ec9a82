"""
Java language profile

javac requires a public class to live in a file of the same name, so the
source is always written to Main.java and run as class Main.
"""

import re
from typing import List
from ..models import Diagnostic, LanguageId, LanguageProfile

PROFILE = LanguageProfile(
    language=LanguageId.JAVA,
    label='Java JDK',
    source_file_name='Main.java',
    compile_command=('javac', 'Main.java'),
    run_command=('java', 'Main'),
)

# javac format: Main.java:5: error: ';' expected
JAVAC_DIAGNOSTIC = re.compile(
    r'^[^:\n]*\.java:(\d+):\s*(error|warning):\s*(.+)$',
    re.MULTILINE
)


def parse_diagnostics(stderr: str) -> List[Diagnostic]:
    """
    Extract javac diagnostics. javac reports no column on the
    message line, so the whole line is marked.
    """
    diagnostics = []
    for match in JAVAC_DIAGNOSTIC.finditer(stderr):
        line = int(match.group(1))
        diagnostics.append(Diagnostic(
            line=line,
            column=1,
            endLine=line,
            endColumn=200,
            message=match.group(3).strip(),
            severity='warning' if match.group(2) == 'warning' else 'error'
        ))
    return diagnostics
