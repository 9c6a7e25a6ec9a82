"""
Local execution: probe the toolchain, write the workspace, compile if the
language needs it, then run
"""

import os
import time
import asyncio
import logging
from typing import Optional, Sequence, Union

from . import toolchain
from .errors import SpawnError
from .languages import parse_diagnostics, profile_for
from .models import ExecutionResult, LanguageId, LanguageProfile, ProcessOutput
from .sandbox import run_process, workspace

logger = logging.getLogger(__name__)

# Per-phase wall clock limit in milliseconds; 0 disables it. Callers may
# only ask for a shorter limit, never a longer one or none at all
DEFAULT_TIMEOUT_MS = int(os.getenv('EXECUTION_TIMEOUT_MS', '10000'))

# Local executions allowed to run at once
MAX_CONCURRENCY = int(os.getenv('EXECUTION_MAX_CONCURRENCY', '4'))


def _timeout_seconds(timeout_ms: Optional[int]) -> Optional[float]:
    limit = DEFAULT_TIMEOUT_MS
    if timeout_ms is not None and timeout_ms > 0:
        limit = min(timeout_ms, limit) if limit > 0 else timeout_ms
    if limit <= 0:
        return None
    return limit / 1000


async def _spawn(
    profile: LanguageProfile,
    argv: Sequence[str],
    workdir: str,
    stdin: Optional[str],
    timeout_seconds: Optional[float]
) -> ProcessOutput:
    program = argv[0]
    if program.startswith('./'):
        # Build artifacts are addressed by absolute path inside the workspace
        argv = [os.path.join(workdir, program[2:])] + list(argv[1:])

    try:
        return await run_process(argv, cwd=workdir, stdin=stdin, timeout_seconds=timeout_seconds)
    except OSError as e:
        logger.error(f"Failed to spawn {argv[0]} for {profile.language.value}: {e}")
        raise SpawnError(profile.language.value, os.path.basename(argv[0]), f'{profile.label}: {e}') from e


async def compile_phase(
    profile: LanguageProfile,
    argv: Sequence[str],
    workdir: str,
    timeout_seconds: Optional[float]
) -> ProcessOutput:
    """Run the compiler in the workspace"""
    logger.info(f"Compiling {profile.language.value} in {workdir}")
    output = await _spawn(profile, argv, workdir, None, timeout_seconds)
    logger.info(f"{profile.language.value} compilation finished with exit code {output.exitCode} "
                f"({output.elapsedMs:.0f}ms)")
    return output


async def run_phase(
    profile: LanguageProfile,
    argv: Sequence[str],
    workdir: str,
    stdin: Optional[str],
    timeout_seconds: Optional[float]
) -> ProcessOutput:
    """Run the interpreter or the built program in the workspace"""
    logger.info(f"Running {profile.language.value} in {workdir}")
    output = await _spawn(profile, argv, workdir, stdin, timeout_seconds)
    logger.info(f"{profile.language.value} execution finished with exit code {output.exitCode} "
                f"({output.elapsedMs:.0f}ms)")
    return output


def _to_result(
    profile: LanguageProfile,
    output: ProcessOutput,
    start_time: float,
    timeout_seconds: Optional[float]
) -> ExecutionResult:
    stderr = output.stderr
    if output.timedOut:
        notice = f'[Execution timed out after {int(timeout_seconds * 1000)}ms]'
        stderr = f'{stderr}\n{notice}' if stderr else notice

    diagnostics = [] if output.exitCode == 0 else parse_diagnostics(profile.language, output.stderr)

    return ExecutionResult(
        stdout=output.stdout,
        stderr=stderr,
        exitCode=output.exitCode,
        diagnostics=diagnostics,
        executionTime=(time.monotonic() - start_time) * 1000,
        timedOut=output.timedOut,
    )


async def run_local(
    language: Union[str, LanguageId],
    code: str,
    stdin: Optional[str] = None,
    timeout_ms: Optional[int] = None
) -> ExecutionResult:
    """
    Execute code with the host's own toolchains

    A failed compile is returned as the result and the program is never
    run. The workspace is removed before this returns or raises.

    Args:
        language: Language identifier
        code: Source code
        stdin: Text for the program's standard input
        timeout_ms: Per-phase limit, capped at EXECUTION_TIMEOUT_MS
            (None, 0 or a negative value use the configured limit)

    Returns:
        ExecutionResult

    Raises:
        UnsupportedLanguage, ToolchainUnavailable, WorkspaceWriteFailed, SpawnError
    """
    profile = profile_for(language)
    resolved = toolchain.ensure_available(profile)
    timeout_seconds = _timeout_seconds(timeout_ms)

    if stdin and not stdin.endswith('\n'):
        stdin += '\n'

    start_time = time.monotonic()
    with workspace(profile.source_file_name, code) as workdir:
        if resolved.compile_argv:
            compiled = await compile_phase(profile, resolved.compile_argv, workdir, timeout_seconds)
            if compiled.timedOut or compiled.exitCode != 0:
                logger.info(f"{profile.language.value} compilation failed, skipping run")
                return _to_result(profile, compiled, start_time, timeout_seconds)

        output = await run_phase(profile, resolved.run_argv, workdir, stdin or None, timeout_seconds)
        return _to_result(profile, output, start_time, timeout_seconds)


class LocalRunner:
    """
    Gate around run_local that bounds how many local executions
    (and so how many compilers and programs) run at once
    """

    def __init__(self, max_concurrency: Optional[int] = None, timeout_ms: Optional[int] = None):
        self.max_concurrency = max_concurrency or MAX_CONCURRENCY
        self.timeout_ms = timeout_ms
        self._slots = asyncio.Semaphore(self.max_concurrency)

    async def run(
        self,
        language: Union[str, LanguageId],
        code: str,
        stdin: Optional[str] = None,
        timeout_ms: Optional[int] = None
    ) -> ExecutionResult:
        # Reject unknown languages before queueing for a slot
        profile = profile_for(language)
        async with self._slots:
            return await run_local(
                profile.language,
                code,
                stdin=stdin,
                timeout_ms=timeout_ms if timeout_ms is not None else self.timeout_ms
            )
