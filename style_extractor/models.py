"""SQLAlchemy ORM models for the application."""
from __future__ import annotations

import datetime as dt

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class RecentUrl(Base):
    __tablename__ = "recent_urls"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False)
    used_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
