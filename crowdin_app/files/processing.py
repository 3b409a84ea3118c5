"""String extraction from flat JSON documents and translated document rebuild.

Only string values are translatable. Other values are skipped when
extracting and passed through untouched when building.
"""

from __future__ import annotations

from typing import Any, Sequence

from ..errors import EmptyOrInvalidContentError, MissingTargetLanguageError
from ..schemas.files import PreviewString, TranslationEntry, TranslationText

CONTEXT_PREFIX = "Some context: \n "


def extract_strings(
    document: Any,
    language_id: str | None = None,
) -> tuple[list[TranslationEntry], dict[str, PreviewString]]:
    """Build translation entries and the preview projection for ``document``.

    Keys are visited in document order; ``previewId`` counts included
    entries only. With ``language_id`` every entry is seeded with its own
    source text as the translation for that language.
    """
    entries: list[TranslationEntry] = []
    preview: dict[str, PreviewString] = {}

    if not isinstance(document, dict):
        return entries, preview

    index = 0
    for key, value in document.items():
        if not isinstance(value, str):
            continue

        translations: dict[str, TranslationText | None] = {}
        if language_id:
            translations[language_id] = TranslationText(text=value)

        entries.append(
            TranslationEntry(
                identifier=key,
                context=f"{CONTEXT_PREFIX}{value}",
                custom_data="",
                preview_id=index,
                labels=[],
                is_hidden=False,
                text=value,
                translations=translations,
            )
        )
        preview[key] = PreviewString(text=value, id=index)
        index += 1

    return entries, preview


def get_translation(
    entries: Sequence[TranslationEntry],
    identifier: str,
    language_id: str,
    fallback: str,
) -> str:
    """Translated text for ``identifier`` or ``fallback``.

    The first entry in list order that has a translation for the language
    wins, so duplicate identifiers resolve to the earliest one.
    """
    for entry in entries:
        if entry.identifier != identifier:
            continue
        translation = entry.translations.get(language_id)
        if translation is None:
            continue
        return translation.text or fallback
    return fallback


def translate_document(
    document: Any,
    entries: Sequence[TranslationEntry],
    language_id: str | None,
) -> dict[str, Any]:
    """Return a copy of ``document`` with every string value translated."""
    if not language_id:
        raise MissingTargetLanguageError("Target language ID is missing")
    if not isinstance(document, dict) or not document:
        raise EmptyOrInvalidContentError("No content to translate or invalid file content format")

    translated: dict[str, Any] = {}
    for key, value in document.items():
        if isinstance(value, str):
            translated[key] = get_translation(entries, key, language_id, value)
        else:
            translated[key] = value
    return translated
