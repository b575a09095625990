"""
backend/app/core/i18n.py

Content language resolution.

Catalog rows carry Romanian text (always present) and optional English text.
The request language is picked from `?lang=`, then the `language` cookie, then
the Accept-Language header, and finally the configured default.
"""

from typing import Annotated

from fastapi import Depends, Query, Request

from app.core.config import settings

LANGUAGE_COOKIE = "language"


def _normalize(code: str | None) -> str | None:
    """Reduce 'en-US;q=0.8' style values to a supported primary subtag."""
    if not code:
        return None
    primary = code.split(";")[0].strip().split("-")[0].lower()
    return primary if primary in settings.supported_languages else None


def parse_accept_language(header: str | None) -> str | None:
    """First supported language in an Accept-Language header, honouring q-values."""
    if not header:
        return None
    candidates: list[tuple[float, int, str]] = []
    for position, part in enumerate(header.split(",")):
        pieces = part.strip().split(";")
        quality = 1.0
        for param in pieces[1:]:
            name, _, value = param.strip().partition("=")
            if name == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        candidates.append((-quality, position, pieces[0]))
    for neg_quality, _, code in sorted(candidates):
        if neg_quality >= 0:
            continue
        lang = _normalize(code)
        if lang:
            return lang
    return None


def resolve_language(
    query_lang: str | None, cookie_lang: str | None, accept_language: str | None
) -> str:
    return (
        _normalize(query_lang)
        or _normalize(cookie_lang)
        or parse_accept_language(accept_language)
        or settings.DEFAULT_LANGUAGE
    )


def get_language(
    request: Request,
    lang: str | None = Query(None, description="Content language (ro or en)"),
) -> str:
    """FastAPI dependency returning the language for the current request."""
    return resolve_language(
        lang, request.cookies.get(LANGUAGE_COOKIE), request.headers.get("accept-language")
    )


LanguageDep = Annotated[str, Depends(get_language)]


def localize(text_ro: str, text_en: str | None, lang: str) -> str:
    """English text when requested and available, Romanian otherwise."""
    if lang == "en" and text_en:
        return text_en
    return text_ro
