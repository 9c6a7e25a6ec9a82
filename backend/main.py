from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
import logging
import os
import traceback

# Load environment variables before the execution package reads its settings
load_dotenv()

from models import HealthResponse, LocalRunRequest, RemoteRunRequest, LanguagesResponse, ErrorResponse  # noqa: E402
from execution import LocalRunner, RemoteJudgeClient, ExecutionResult, RemoteExecutionResult  # noqa: E402
from execution.errors import ExecutionError, InvalidSubmission  # noqa: E402
from execution.languages import supported_languages  # noqa: E402

"""
FastAPI server for code execution
Runs code with local toolchains or forwards it to a Judge0 instance
"""

VERSION = "0.1.0"

# Include stack traces in error responses (never enable in production)
DEBUG = os.getenv("EXECUTION_DEBUG", "false").lower() == "true"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://localhost:8080"
    ).split(",")
    if origin.strip()
]

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

local_runner = LocalRunner()
judge_client = RemoteJudgeClient()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await judge_client.close()


app = FastAPI(
    title="Code Execution Backend",
    description="Runs submitted code locally or on a remote Judge0 judge",
    version=VERSION,
    lifespan=lifespan
)

# CORS middleware to allow requests from the editor frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


def get_local_runner() -> LocalRunner:
    return local_runner


def get_judge_client() -> RemoteJudgeClient:
    return judge_client


def require_utf8(**fields: Optional[str]) -> None:
    """
    Reject text that cannot be encoded as UTF-8, such as a lone surrogate
    escaped in the JSON body
    """
    for name, value in fields.items():
        if value is None:
            continue
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidSubmission(f"{name} is not valid UTF-8 text", str(e)) from e


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Incoming request: {request.method} {request.url.path}")
    response = await call_next(request)
    return response


@app.exception_handler(ExecutionError)
async def execution_error_handler(request: Request, exc: ExecutionError):
    """
    Turn execution-layer failures into {error, details} responses.
    Code that fails to compile or exits non-zero never gets here.
    """
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.message} ({exc.details})")
    else:
        logger.info(f"{request.url.path} rejected: {exc.message}")

    content = {"error": exc.message, "details": exc.details}
    if DEBUG:
        content["traceback"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint
    Returns the service status
    """
    return HealthResponse(status="ok", version=VERSION)


@app.get("/languages", response_model=LanguagesResponse)
async def list_languages():
    """Languages accepted by both /run-local and /run-remote"""
    languages = supported_languages()
    return {"languages": languages, "count": len(languages)}


@app.post("/run-local", response_model=ExecutionResult,
          responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def run_local_endpoint(
    payload: LocalRunRequest,
    runner: LocalRunner = Depends(get_local_runner)
):
    """
    Execute code with the toolchains installed on this host

    Example:
        POST /run-local
        {"language": "python", "code": "print('hi')"}

        Response:
        {
            "stdout": "hi\\n",
            "stderr": "",
            "exitCode": 0,
            "diagnostics": [],
            "executionTime": 41.2,
            "timedOut": false
        }
    """
    if not payload.code.strip():
        raise HTTPException(status_code=400, detail="Code is required")
    require_utf8(code=payload.code, stdin=payload.stdin)

    logger.info(f"Local run: language={payload.language}, {len(payload.code)} chars, "
                f"stdin={'yes' if payload.stdin else 'no'}")
    return await runner.run(
        payload.language,
        payload.code,
        stdin=payload.stdin,
        timeout_ms=payload.timeout
    )


@app.post("/run-remote", response_model=RemoteExecutionResult,
          responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}, 504: {"model": ErrorResponse}})
async def run_remote_endpoint(
    payload: RemoteRunRequest,
    client: RemoteJudgeClient = Depends(get_judge_client)
):
    """
    Execute code on the remote judge. A 503 means the judge is
    unreachable, not that the code is wrong.
    """
    if not payload.source.strip():
        raise HTTPException(status_code=400, detail="Source code is required")
    require_utf8(source=payload.source, stdin=payload.stdin)

    logger.info(f"Remote run: language={payload.language}, {len(payload.source)} chars")
    return await client.run(payload.language, payload.source, payload.stdin)
