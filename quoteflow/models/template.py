"""Mapping template model."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quoteflow.database import Base
from quoteflow.utils import utcnow


class Template(Base):
    __tablename__ = "templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    # Canonical MappingSpecification JSON
    mapping_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
