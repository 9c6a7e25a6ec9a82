"""
Python language profile
"""

import re
from typing import List
from ..models import Diagnostic, LanguageId, LanguageProfile

PROFILE = LanguageProfile(
    language=LanguageId.PYTHON,
    label='Python',
    source_file_name='main.py',
    run_command=('python3', 'main.py'),
    aliases=('python', 'py'),
)

TRACEBACK_FRAME = re.compile(r'File "([^"]*)", line (\d+)')


def parse_diagnostics(stderr: str) -> List[Diagnostic]:
    """
    Report the innermost traceback frame inside main.py, with the
    exception line (the last line of the traceback) as the message.
    """
    frames = [
        int(match.group(2))
        for match in TRACEBACK_FRAME.finditer(stderr)
        if match.group(1).endswith(PROFILE.source_file_name)
    ]
    if not frames:
        return []

    lines = [line for line in stderr.splitlines() if line.strip()]
    line = frames[-1] or 1
    return [Diagnostic(
        line=line,
        column=1,
        endLine=line,
        endColumn=200,
        message=lines[-1].strip() if lines else 'Error',
    )]
