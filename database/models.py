"""
SQLAlchemy ORM models for accounts and the food catalog.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, String, Uuid
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    user_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Case-sensitive lookup key; the unique index is what actually enforces
    # one account per email.
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(128))
    language = Column(String(16), nullable=False, default="en")
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class FoodItem(Base):
    __tablename__ = "food_items"

    item_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(128), nullable=False)
    category = Column(String(64))
    reaction_type = Column(String(32))   # e.g. "critic", "sensitiv"
    emoji = Column(String(16))

    __table_args__ = (
        Index("ix_food_items_category_reaction", "category", "reaction_type"),
    )
