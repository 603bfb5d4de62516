from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.utils import translation

_DEFAULT_LANGUAGE = (
    (getattr(settings, "LANGUAGE_CODE", "en") or "en").split("-")[0].lower()
)
_SUPPORTED_LANGUAGES = {
    (code or "en").split("-")[0].lower()
    for code, _name in getattr(settings, "LANGUAGES", [("en", "English")])
} or {_DEFAULT_LANGUAGE}


def iso_code(language_code: Optional[str]) -> str:
    """Return the two-letter part of a locale (``fr-FR`` -> ``fr``), lowercased."""
    return (language_code or "").replace("_", "-").split("-")[0].strip().lower()


def normalize_language_code(language_code: Optional[str]) -> str:
    """
    Normalize a language code to its lowercase ISO part.
    Unknown languages fall back to the project default.
    """

    if not language_code:
        language_code = translation.get_language()
    if not language_code:
        return _DEFAULT_LANGUAGE
    normalized = iso_code(language_code)
    return normalized if normalized in _SUPPORTED_LANGUAGES else _DEFAULT_LANGUAGE


def resolve_language(request=None, fallback: Optional[str] = None) -> str:
    """
    Resolve the interface language of the current back-office request.
    """

    language_code = None
    if request is not None:
        language_code = getattr(request, "LANGUAGE_CODE", None)
        if not language_code:
            language_code = translation.get_language_from_request(request)
    language_code = language_code or translation.get_language() or fallback
    return normalize_language_code(language_code)


__all__ = [
    "iso_code",
    "normalize_language_code",
    "resolve_language",
]
