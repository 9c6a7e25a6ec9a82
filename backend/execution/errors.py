"""
Exceptions raised by the execution layer

Compile failures and non-zero exits of user programs are not errors here:
they come back as normal results. These exceptions cover input problems and
environment or infrastructure failures, each carrying the HTTP status the
router should answer with.
"""

from typing import Optional


class ExecutionError(Exception):
    """Base class for execution failures reported to the caller"""

    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class UnsupportedLanguage(ExecutionError):
    status_code = 400

    def __init__(self, language: str, supported: Optional[list] = None):
        supported_list = ', '.join(supported or [])
        super().__init__(
            f'Unsupported language: {language}',
            f'Supported languages: {supported_list}' if supported_list else None
        )
        self.language = language


class ToolchainUnavailable(ExecutionError):
    """The compiler or interpreter for a language is missing on this host"""

    def __init__(self, language: str, binary: str, hint: str):
        super().__init__(
            f'{binary} is not available for {language}',
            hint
        )
        self.language = language
        self.binary = binary
        self.hint = hint


class WorkspaceWriteFailed(ExecutionError):
    pass


class SpawnError(ExecutionError):
    """The OS refused to start a compiler, interpreter or built program"""

    def __init__(self, language: str, binary: str, reason: str):
        super().__init__(
            f'Failed to start {binary} for {language}',
            reason
        )
        self.language = language
        self.binary = binary


class RemoteUnavailable(ExecutionError):
    status_code = 503


class RemoteTimeout(ExecutionError):
    status_code = 504


class InvalidSubmission(ExecutionError):
    status_code = 400


class RemoteJudgeError(ExecutionError):
    status_code = 502
