"""
C language profile
"""

import os
import re
from typing import List
from ..models import Diagnostic, LanguageId, LanguageProfile

# Name of the binary the compile phase leaves in the workspace
ARTIFACT = 'main.exe' if os.name == 'nt' else 'main'

PROFILE = LanguageProfile(
    language=LanguageId.C,
    label='GCC C Compiler',
    source_file_name='main.c',
    compile_command=('gcc', 'main.c', '-O2', '-pipe', '-o', ARTIFACT, '-lm'),
    run_command=(f'./{ARTIFACT}',),
)

# gcc / g++ format: main.c:3:5: error: expected ';' before '}' token
GCC_DIAGNOSTIC = re.compile(
    r'^[^:\n]*:(\d+):(\d+):\s*(fatal error|error|warning):\s*(.+)$',
    re.MULTILINE
)


def parse_gcc_diagnostics(stderr: str) -> List[Diagnostic]:
    """
    Extract gcc-style diagnostics from compiler output

    Args:
        stderr: Compiler standard error

    Returns:
        One Diagnostic per error or warning line
    """
    diagnostics = []
    for match in GCC_DIAGNOSTIC.finditer(stderr):
        line, column = int(match.group(1)), int(match.group(2))
        diagnostics.append(Diagnostic(
            line=line,
            column=column,
            endLine=line,
            endColumn=column + 1,
            message=match.group(4).strip(),
            severity='warning' if match.group(3) == 'warning' else 'error'
        ))
    return diagnostics


def parse_diagnostics(stderr: str) -> List[Diagnostic]:
    return parse_gcc_diagnostics(stderr)
