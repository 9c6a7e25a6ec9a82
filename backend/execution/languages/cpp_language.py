"""
C++ language profile
"""

from typing import List
from ..models import Diagnostic, LanguageId, LanguageProfile
from .c_language import ARTIFACT, parse_gcc_diagnostics

PROFILE = LanguageProfile(
    language=LanguageId.CPP,
    label='GCC C++ Compiler',
    source_file_name='main.cpp',
    compile_command=('g++', '-std=c++17', 'main.cpp', '-O2', '-pipe', '-o', ARTIFACT),
    run_command=(f'./{ARTIFACT}',),
)


def parse_diagnostics(stderr: str) -> List[Diagnostic]:
    return parse_gcc_diagnostics(stderr)
