"""
Data types for code execution
"""

from dataclasses import dataclass
from enum import Enum
from pydantic import BaseModel
from typing import Optional, Literal, List, Tuple


class LanguageId(str, Enum):
    """Languages the service can execute"""
    JAVASCRIPT = 'javascript'
    PYTHON = 'python'
    C = 'c'
    CPP = 'cpp'
    JAVA = 'java'


@dataclass(frozen=True)
class LanguageProfile:
    """How one language is written to disk, built and run"""
    language: LanguageId
    label: str
    source_file_name: str
    run_command: Tuple[str, ...]
    compile_command: Optional[Tuple[str, ...]] = None
    aliases: Tuple[str, ...] = ()  # fallback interpreter names, tried in order

    @property
    def compiled(self) -> bool:
        return self.compile_command is not None


class Diagnostic(BaseModel):
    """A compiler or runtime error positioned in the source file"""
    line: int
    column: int = 1
    endLine: int
    endColumn: int
    message: str
    severity: Literal['error', 'warning'] = 'error'


class ProcessOutput(BaseModel):
    """Captured output of one child process"""
    stdout: str
    stderr: str
    exitCode: Optional[int]
    timedOut: bool = False
    elapsedMs: float = 0


class ExecutionResult(BaseModel):
    """Normalized result shared by the local runner and the remote judge"""
    stdout: str = ''
    stderr: str = ''
    exitCode: Optional[int] = None
    diagnostics: List[Diagnostic] = []
    executionTime: float = 0  # milliseconds
    timedOut: bool = False


class RemoteStatus(BaseModel):
    id: int
    description: str


class RemoteExecutionResult(ExecutionResult):
    """Remote judge response plus the shared result fields"""
    status: RemoteStatus
    compile_output: Optional[str] = None
    time: Optional[str] = None
    memory: Optional[int] = None
