"""Declarative base for the app's tables."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    type_annotation_map = {
        uuid.UUID: Uuid,
        datetime: DateTime(timezone=True),
    }
