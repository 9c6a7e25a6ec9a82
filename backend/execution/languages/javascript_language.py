"""
JavaScript (Node.js) language profile
"""

import re
from typing import List
from ..models import Diagnostic, LanguageId, LanguageProfile

PROFILE = LanguageProfile(
    language=LanguageId.JAVASCRIPT,
    label='Node.js',
    source_file_name='main.js',
    run_command=('node', 'main.js'),
)

# Stack frames look like (/tmp/code-.../main.js:3:5); syntax errors print main.js:3
LOCATION = re.compile(re.escape(PROFILE.source_file_name) + r':(\d+)(?::(\d+))?')
ERROR_LINE = re.compile(r'^\w*Error\b.*$', re.MULTILINE)


def parse_diagnostics(stderr: str) -> List[Diagnostic]:
    match = LOCATION.search(stderr)
    if not match:
        return []

    line = int(match.group(1))
    column = int(match.group(2)) if match.group(2) else 1
    error_line = ERROR_LINE.search(stderr)
    return [Diagnostic(
        line=line,
        column=column,
        endLine=line,
        endColumn=column + 1,
        message=error_line.group(0).strip() if error_line else stderr.strip(),
    )]
