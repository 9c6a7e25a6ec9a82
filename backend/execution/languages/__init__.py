"""
Language registry: maps a language identifier to its profile and
diagnostics parser
"""

from typing import List, Union
from ..errors import UnsupportedLanguage
from ..models import Diagnostic, LanguageId, LanguageProfile
from . import c_language, cpp_language, java_language, javascript_language, python_language


def resolve_language(language: Union[str, LanguageId]) -> LanguageId:
    """
    Normalize a client-supplied language name

    Raises:
        UnsupportedLanguage: If the name is not one of LanguageId
    """
    if isinstance(language, LanguageId):
        return language
    try:
        return LanguageId(str(language).strip().lower())
    except ValueError:
        raise UnsupportedLanguage(str(language), [lang.value for lang in LanguageId]) from None


def _module_for(language: LanguageId):
    if language == LanguageId.PYTHON:
        return python_language
    elif language == LanguageId.JAVASCRIPT:
        return javascript_language
    elif language == LanguageId.C:
        return c_language
    elif language == LanguageId.CPP:
        return cpp_language
    elif language == LanguageId.JAVA:
        return java_language
    raise UnsupportedLanguage(str(language), [lang.value for lang in LanguageId])


def profile_for(language: Union[str, LanguageId]) -> LanguageProfile:
    """Look up the profile for a language, rejecting unknown identifiers"""
    return _module_for(resolve_language(language)).PROFILE


def parse_diagnostics(language: Union[str, LanguageId], stderr: str) -> List[Diagnostic]:
    """Best-effort structured errors from compiler or runtime stderr"""
    if not stderr:
        return []
    return _module_for(resolve_language(language)).parse_diagnostics(stderr)


def supported_languages() -> List[dict]:
    return [
        {
            'name': profile.language.value,
            'label': profile.label,
            'sourceFileName': profile.source_file_name,
            'compiled': profile.compiled,
        }
        for profile in (profile_for(lang) for lang in LanguageId)
    ]


__all__ = ['profile_for', 'parse_diagnostics', 'resolve_language', 'supported_languages']
