"""
Code execution module: local toolchains and a remote Judge0 backend
"""

from .executor import LocalRunner, run_local
from .judge import RemoteJudgeClient
from .models import ExecutionResult, RemoteExecutionResult, LanguageId

__all__ = [
    'LocalRunner', 'run_local', 'RemoteJudgeClient',
    'ExecutionResult', 'RemoteExecutionResult', 'LanguageId'
]
