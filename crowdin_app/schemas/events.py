"""Pydantic models for platform app events."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class InstalledEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    app_id: str = Field(alias="appId")
    app_secret: str = Field(alias="appSecret")
    domain: str | None = None
    organization_id: int = Field(alias="organizationId")
    user_id: int = Field(alias="userId")
    base_url: str = Field(default="", alias="baseUrl")


class UninstallEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    domain: str | None = None
    organization_id: int = Field(alias="organizationId")
