from __future__ import annotations

from pydantic import BaseModel
from typing import Optional, List

"""
Pydantic models for request/response validation
"""

class HealthResponse(BaseModel):
    status: str
    version: str = "0.1.0"

class LocalRunRequest(BaseModel):
    language: str
    code: str
    stdin: Optional[str] = None
    timeout: Optional[int] = None  # milliseconds, only shortens the server limit

class RemoteRunRequest(BaseModel):
    language: str
    source: str
    stdin: Optional[str] = None

class LanguageInfo(BaseModel):
    name: str
    label: str
    sourceFileName: str
    compiled: bool

class LanguagesResponse(BaseModel):
    languages: List[LanguageInfo]
    count: int

class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    traceback: Optional[str] = None
