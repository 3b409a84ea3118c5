"""Installed organization with its app credentials and cached access token."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Organization(Base):
    __tablename__ = "organization"
    __table_args__ = (
        Index("ix_organization_domain_org", "domain", "organization_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    organization_id: Mapped[int] = mapped_column(Integer)
    app_id: Mapped[str] = mapped_column(String(255))
    app_secret: Mapped[str] = mapped_column(Text)
    user_id: Mapped[int] = mapped_column(Integer)
    base_url: Mapped[str] = mapped_column(String(500))
    access_token: Mapped[str | None] = mapped_column(Text, default=None, nullable=True)
    # Unix timestamp (seconds)
    access_token_expires: Mapped[int | None] = mapped_column(Integer, default=None, nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Organization {self.domain or '-'}:{self.organization_id}>"
