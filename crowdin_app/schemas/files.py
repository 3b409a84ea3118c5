"""Pydantic models for the custom file format API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TranslationText(BaseModel):
    text: str | None = ""


class TranslationEntry(BaseModel):
    """One translatable string, serialized with the platform's camelCase names."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    identifier: str
    context: str = ""
    custom_data: str = Field(default="", alias="customData")
    preview_id: int = Field(default=0, alias="previewId")
    labels: list[str] = Field(default_factory=list)
    is_hidden: bool = Field(default=False, alias="isHidden")
    text: str = ""
    translations: dict[str, TranslationText | None] = Field(default_factory=dict)

    @field_validator("translations", mode="before")
    @classmethod
    def _null_translations(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class PreviewString(BaseModel):
    text: str
    id: int


class FileInfo(BaseModel):
    content: str | None = None  # base64
    content_url: str | None = Field(default=None, alias="contentUrl")
    name: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class LanguageInfo(BaseModel):
    id: str | None = None


class FileProcessRequest(BaseModel):
    """Body of ``POST /api/file/process``.

    Everything is optional here so missing fields can be reported with the
    same messages the platform expects, before any I/O happens.
    """

    model_config = ConfigDict(populate_by_name=True)

    job_type: Any = Field(default=None, alias="jobType")
    file: FileInfo | None = None
    target_languages: list[LanguageInfo] = Field(default_factory=list, alias="targetLanguages")
    strings: list[TranslationEntry] | None = None
    strings_url: str | None = Field(default=None, alias="stringsUrl")

    @property
    def target_language_id(self) -> str | None:
        if self.target_languages and self.target_languages[0].id:
            return self.target_languages[0].id
        return None
