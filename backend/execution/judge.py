"""
Remote execution through a Judge0 instance

The remote judge runs code in its own sandbox; this module only maps
languages to Judge0 ids, checks the service is up, submits in wait mode and
translates the answer into the result shape the local runner uses.
"""

import os
import json
import logging
from typing import Dict, Optional, Union
from urllib.parse import urlparse

import httpx

from .errors import InvalidSubmission, RemoteJudgeError, RemoteTimeout, RemoteUnavailable
from .languages import parse_diagnostics, resolve_language
from .models import LanguageId, RemoteExecutionResult, RemoteStatus

logger = logging.getLogger(__name__)

JUDGE0_URL = os.getenv('JUDGE0_URL', 'https://judge0-ce.p.rapidapi.com').rstrip('/')
JUDGE0_API_KEY = os.getenv('JUDGE0_API_KEY') or None
JUDGE0_API_HOST = os.getenv('JUDGE0_API_HOST') or None
PREFLIGHT_TIMEOUT = float(os.getenv('JUDGE0_PREFLIGHT_TIMEOUT', '3'))
SUBMIT_TIMEOUT = float(os.getenv('JUDGE0_SUBMIT_TIMEOUT', '30'))

# Judge0 CE catalog ids. These must follow the remote instance's
# /languages list; a catalog upgrade silently changes what runs.
LANGUAGE_IDS: Dict[LanguageId, int] = {
    LanguageId.JAVASCRIPT: 63,  # JavaScript (Node.js 12.14.0)
    LanguageId.PYTHON: 71,      # Python (3.8.1)
    LanguageId.C: 50,           # C (GCC 9.2.0)
    LanguageId.CPP: 54,         # C++ (GCC 9.2.0)
    LanguageId.JAVA: 62,        # Java (OpenJDK 13.0.1)
}

# Judge0 status id for a run that finished normally
STATUS_ACCEPTED = 3


def language_id_for(language: Union[str, LanguageId]) -> int:
    """
    Judge0 language id for a language

    Raises:
        UnsupportedLanguage: If the language is unknown
    """
    return LANGUAGE_IDS[resolve_language(language)]


def to_result(language: LanguageId, data: dict) -> RemoteExecutionResult:
    """Translate a Judge0 submission response"""
    status = data.get('status') or {'id': 0, 'description': 'Unknown'}
    stdout = data.get('stdout') or ''
    stderr = data.get('stderr') or ''
    compile_output = data.get('compile_output')
    time_taken = data.get('time')

    diagnostics = []
    if status.get('id') != STATUS_ACCEPTED:
        diagnostics = parse_diagnostics(language, compile_output or stderr)

    execution_time = 0.0
    if time_taken:
        try:
            execution_time = float(time_taken) * 1000
        except (TypeError, ValueError):
            pass

    return RemoteExecutionResult(
        status=RemoteStatus(id=status.get('id') or 0, description=status.get('description') or 'Unknown'),
        stdout=stdout,
        stderr=stderr or compile_output or '',
        exitCode=data.get('exit_code'),
        diagnostics=diagnostics,
        executionTime=execution_time,
        compile_output=compile_output,
        time=str(time_taken) if time_taken is not None else None,
        memory=data.get('memory'),
    )


class RemoteJudgeClient:
    """
    Async client for a Judge0 instance

    Uses the RapidAPI headers when an API key is configured.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        api_host: Optional[str] = None,
        preflight_timeout: Optional[float] = None,
        submit_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or JUDGE0_URL).rstrip('/')
        self.preflight_timeout = preflight_timeout if preflight_timeout is not None else PREFLIGHT_TIMEOUT
        self.submit_timeout = submit_timeout if submit_timeout is not None else SUBMIT_TIMEOUT

        headers = {'Content-Type': 'application/json'}
        api_key = api_key or JUDGE0_API_KEY
        if api_key:
            headers['X-RapidAPI-Key'] = api_key
            headers['X-RapidAPI-Host'] = api_host or JUDGE0_API_HOST or urlparse(self.base_url).hostname or ''

        self._client = httpx.AsyncClient(base_url=self.base_url, headers=headers, transport=transport)

    async def check_reachable(self) -> None:
        """
        Fail fast when the judge is down instead of waiting out the
        submission timeout

        Raises:
            RemoteUnavailable: On connection failure, timeout or a 5xx answer
        """
        try:
            response = await self._client.get('/about', timeout=self.preflight_timeout)
        except httpx.TimeoutException as e:
            raise RemoteUnavailable(
                f'Remote judge at {self.base_url} did not respond within {self.preflight_timeout}s',
                str(e)
            ) from e
        except httpx.TransportError as e:
            raise RemoteUnavailable(
                f'Remote judge is not running. Start the Judge0 service at {self.base_url}',
                str(e)
            ) from e

        if response.status_code >= 500:
            raise RemoteUnavailable(
                f'Remote judge at {self.base_url} is unhealthy (HTTP {response.status_code})',
                response.text
            )

    async def submit(self, language_id: int, source: str, stdin: Optional[str] = None) -> dict:
        """
        Submit code and wait for the verdict

        Raises:
            RemoteUnavailable, RemoteTimeout, InvalidSubmission, RemoteJudgeError
        """
        payload = {
            'source_code': source,
            'language_id': language_id,
            'stdin': stdin or '',
        }
        try:
            body = json.dumps(payload, ensure_ascii=False).encode('utf-8')
        except UnicodeError as e:
            raise InvalidSubmission('Source or stdin is not valid UTF-8 text', str(e)) from e

        try:
            response = await self._client.post(
                '/submissions',
                params={'base64_encoded': 'false', 'wait': 'true'},
                content=body,
                timeout=self.submit_timeout
            )
        except httpx.TimeoutException as e:
            raise RemoteTimeout('Remote judge timed out, please try again', str(e)) from e
        except httpx.ConnectError as e:
            raise RemoteUnavailable(
                f'Remote judge is not running. Start the Judge0 service at {self.base_url}',
                str(e)
            ) from e
        except httpx.HTTPError as e:
            raise RemoteJudgeError('Remote judge request failed', str(e)) from e

        if 400 <= response.status_code < 500:
            raise InvalidSubmission('Invalid code submission', response.text)
        if not response.is_success:
            raise RemoteJudgeError(f'Remote judge failed with HTTP {response.status_code}', response.text)

        try:
            return response.json()
        except ValueError as e:
            raise RemoteJudgeError('Remote judge returned an unreadable response', response.text) from e

    async def run(
        self,
        language: Union[str, LanguageId],
        source: str,
        stdin: Optional[str] = None
    ) -> RemoteExecutionResult:
        """
        Execute code on the remote judge

        Args:
            language: Language identifier
            source: Source code
            stdin: Text for the program's standard input

        Returns:
            RemoteExecutionResult
        """
        lang = resolve_language(language)
        language_id = language_id_for(lang)

        await self.check_reachable()

        logger.info(f"Submitting {lang.value} code to {self.base_url} (language_id={language_id})")
        data = await self.submit(language_id, source, stdin)
        result = to_result(lang, data)
        logger.info(f"Remote judge verdict for {lang.value}: {result.status.description}")
        return result

    async def close(self) -> None:
        await self._client.aclose()

