"""
Workspace and child-process utilities for local code execution
"""

import os
import re
import shutil
import tempfile
import asyncio
import logging
import time
import uuid
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from .errors import WorkspaceWriteFailed
from .models import ProcessOutput

logger = logging.getLogger(__name__)

# Parent directory for per-request workspaces (system temp dir when unset)
WORKSPACE_ROOT = os.getenv('EXECUTION_WORKSPACE_ROOT') or None

# How long to keep reading pipes after the child is gone; a grandchild
# holding the pipe open must not stall the request
PIPE_DRAIN_GRACE_SECONDS = 2
READ_CHUNK_SIZE = 4096


def sanitize_path(path: str) -> str:
    """
    Sanitize file path to prevent path traversal attacks

    Args:
        path: The file path to sanitize

    Returns:
        Sanitized path with no traversal components
    """
    parts = path.replace('\\', '/').split('/')
    sanitized_parts = [
        part for part in parts
        if part and part != '..' and part != '.'
    ]
    return '/'.join(sanitized_parts)


def validate_filename(filename: str) -> bool:
    """
    Validate that a source file name is a plain name inside the workspace

    Args:
        filename: The filename to validate

    Returns:
        True if the filename is safe
    """
    return bool(re.match(r'^[a-zA-Z0-9_\-.]+$', filename)) and sanitize_path(filename) == filename


def write_source_file(workspace_dir: str, source_file_name: str, code: str) -> str:
    """
    Write the source file, replacing anything already there, and check
    that it landed on disk whole

    Returns:
        Path to the written file

    Raises:
        WorkspaceWriteFailed: If the file is missing, empty or truncated
    """
    file_path = os.path.join(workspace_dir, source_file_name)
    expected_size = len(code.encode('utf-8'))

    with open(file_path, 'w', encoding='utf-8', newline='') as f:
        f.write(code)

    if not os.path.isfile(file_path):
        raise WorkspaceWriteFailed(f'Failed to create file: {source_file_name}')

    actual_size = os.path.getsize(file_path)
    if actual_size == 0:
        raise WorkspaceWriteFailed(f'File was created but is empty: {source_file_name}')
    if actual_size != expected_size:
        raise WorkspaceWriteFailed(
            f'File was truncated: {source_file_name}',
            f'expected {expected_size} bytes, found {actual_size}'
        )

    return file_path


def cleanup_temp_directory(temp_dir: str) -> None:
    """
    Clean up the temporary directory

    Args:
        temp_dir: Path to the temporary directory
    """
    if not os.path.exists(temp_dir):
        return
    try:
        shutil.rmtree(temp_dir)
    except Exception as e:
        logger.warning(f"Failed to cleanup temp directory {temp_dir}: {e}")


@contextmanager
def workspace(source_file_name: str, code: str, root: Optional[str] = None) -> Iterator[str]:
    """
    Create a private directory holding one source file for the duration
    of the block, then remove it however the block exits

    Args:
        source_file_name: Name the toolchain expects, e.g. "Main.java"
        code: Source code to write
        root: Parent directory (defaults to WORKSPACE_ROOT or the system temp dir)

    Yields:
        Path to the workspace directory

    Raises:
        WorkspaceWriteFailed: If the directory or file cannot be written,
            including code that is not encodable as UTF-8
    """
    if not validate_filename(source_file_name):
        raise WorkspaceWriteFailed(f'Invalid source file name: {source_file_name}')

    parent = root or WORKSPACE_ROOT or tempfile.gettempdir()
    temp_dir = os.path.join(parent, f'code-{uuid.uuid4()}')

    try:
        try:
            os.makedirs(temp_dir, exist_ok=True)
            write_source_file(temp_dir, source_file_name, code)
        except (OSError, UnicodeError) as e:
            raise WorkspaceWriteFailed(f'Failed to prepare workspace for {source_file_name}', str(e)) from e

        logger.info(f"Workspace ready: {temp_dir} ({source_file_name}, {len(code)} chars)")
        yield temp_dir

    finally:
        cleanup_temp_directory(temp_dir)


async def _drain(stream: asyncio.StreamReader, chunks: List[bytes]) -> None:
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)


async def _feed(stream: asyncio.StreamWriter, data: bytes) -> None:
    try:
        stream.write(data)
        await stream.drain()
    except (BrokenPipeError, ConnectionResetError):
        # The program exited without reading all of its input
        pass
    finally:
        stream.close()


def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass


async def run_process(
    argv: Sequence[str],
    cwd: str,
    stdin: Optional[str] = None,
    timeout_seconds: Optional[float] = None
) -> ProcessOutput:
    """
    Spawn a command without a shell and collect its output

    stdout and stderr are read incrementally while the child runs. Without
    stdin the child reads from the null device so input() sees EOF.

    Args:
        argv: Program and arguments
        cwd: Working directory for the child
        stdin: Text to send on standard input
        timeout_seconds: Kill the child after this long (None waits forever)

    Returns:
        ProcessOutput; exitCode is None when the child was killed on timeout

    Raises:
        OSError: If the program cannot be started
        UnicodeEncodeError: If stdin is not encodable as UTF-8
    """
    # Fail on unencodable stdin before any child exists
    stdin_bytes = stdin.encode('utf-8') if stdin is not None else None

    start_time = time.monotonic()
    process = await asyncio.create_subprocess_exec(
        *argv,
        cwd=cwd,
        stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    stdout_chunks: List[bytes] = []
    stderr_chunks: List[bytes] = []
    tasks = [
        asyncio.ensure_future(_drain(process.stdout, stdout_chunks)),
        asyncio.ensure_future(_drain(process.stderr, stderr_chunks)),
    ]
    if stdin_bytes is not None:
        tasks.append(asyncio.ensure_future(_feed(process.stdin, stdin_bytes)))

    timed_out = False
    try:
        try:
            await asyncio.wait_for(process.wait(), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            timed_out = True
            logger.warning(f"Process {argv[0]} timed out after {timeout_seconds}s, killing it")
            _kill(process)
            await process.wait()

        await asyncio.wait(tasks, timeout=PIPE_DRAIN_GRACE_SECONDS)

    finally:
        # Also reached when the awaiting request is cancelled
        if process.returncode is None:
            _kill(process)
            await process.wait()
        for task in tasks:
            if not task.done():
                task.cancel()

    return ProcessOutput(
        stdout=b''.join(stdout_chunks).decode('utf-8', errors='replace'),
        stderr=b''.join(stderr_chunks).decode('utf-8', errors='replace'),
        exitCode=None if timed_out else process.returncode,
        timedOut=timed_out,
        elapsedMs=(time.monotonic() - start_time) * 1000,
    )
