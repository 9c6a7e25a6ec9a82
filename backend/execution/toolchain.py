"""
Toolchain availability checks

Resolves each compiler / interpreter to an executable path before any
workspace is created, so a missing toolchain fails fast with a hint the
operator can act on. A toolchain removed between the check and the spawn is
still reported, as a SpawnError, by the runner.
"""

import os
import shutil
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import ToolchainUnavailable
from .models import LanguageId, LanguageProfile

logger = logging.getLogger(__name__)

# Pin the JVM toolchain to one install instead of whatever PATH finds first
JDK_HOME = os.getenv('EXECUTION_JDK_HOME') or None

EXE_SUFFIX = '.exe' if os.name == 'nt' else ''


@dataclass(frozen=True)
class ResolvedToolchain:
    """Commands for one request with their programs resolved to paths"""
    compile_argv: Optional[Tuple[str, ...]]
    run_argv: Tuple[str, ...]


def _is_workspace_artifact(program: str) -> bool:
    return program.startswith('./')


def _jdk_binary(name: str) -> Optional[str]:
    if not JDK_HOME:
        return None
    candidate = os.path.join(JDK_HOME, 'bin', name + EXE_SUFFIX)
    if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
        return candidate
    logger.warning(f"{name} not found at pinned JDK path {candidate}, falling back to PATH")
    return None


def _missing(profile: LanguageProfile, program: str) -> ToolchainUnavailable:
    language = profile.language.value
    if profile.language == LanguageId.JAVA and JDK_HOME:
        expected = os.path.join(JDK_HOME, 'bin', program + EXE_SUFFIX)
        hint = (f'{profile.label} not found at {expected} or in PATH. '
                f'Install a JDK or point EXECUTION_JDK_HOME at one to run {language} code.')
    else:
        candidates = ', '.join((program,) + profile.aliases)
        hint = (f'{profile.label} is not installed or not in PATH (looked for: {candidates}). '
                f'Please install {profile.label} to run {language} code.')
    return ToolchainUnavailable(language, program, hint)


def resolve_program(profile: LanguageProfile, program: str, use_aliases: bool = False) -> str:
    """
    Find the executable for one program of a language's toolchain

    Raises:
        ToolchainUnavailable: If neither the pinned path nor PATH has it
    """
    if profile.language == LanguageId.JAVA:
        pinned = _jdk_binary(program)
        if pinned:
            return pinned

    names = (program,) + (profile.aliases if use_aliases else ())
    for name in names:
        path = shutil.which(name)
        if path:
            return path

    raise _missing(profile, program)


def _resolve_argv(profile: LanguageProfile, argv: Tuple[str, ...], use_aliases: bool) -> Tuple[str, ...]:
    program = argv[0]
    if _is_workspace_artifact(program):
        return argv
    return (resolve_program(profile, program, use_aliases),) + tuple(argv[1:])


def ensure_available(profile: LanguageProfile) -> ResolvedToolchain:
    """
    Check that every program a language needs is installed

    Args:
        profile: Language profile from the registry

    Returns:
        ResolvedToolchain with absolute program paths

    Raises:
        ToolchainUnavailable: Naming the first missing program
    """
    compile_argv = None
    if profile.compile_command:
        compile_argv = _resolve_argv(profile, profile.compile_command, use_aliases=False)

    # Interpreter fallbacks (python3 -> python -> py) only apply to the run phase
    run_argv = _resolve_argv(profile, profile.run_command, use_aliases=not profile.compiled)

    logger.info(f"Toolchain for {profile.language.value}: compile={compile_argv} run={run_argv[0]}")
    return ResolvedToolchain(compile_argv=compile_argv, run_argv=run_argv)
