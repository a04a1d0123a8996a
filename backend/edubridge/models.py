"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Table names follow the existing EduBridge schema (`organizations`,
`opportunities`, `profiles`, `certificates`).
"""

from typing import Optional
from sqlalchemy import Column, ForeignKey, Integer
from sqlmodel import SQLModel, Field
from datetime import datetime, date, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Organization(SQLModel, table=True):
    """An organization offering opportunities. Managed outside this service."""
    __tablename__ = "organizations"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)


class Opportunity(SQLModel, table=True):
    """A listed opportunity.

    `skills` is stored as comma-separated text; the API exposes it as a
    list.
    """
    __tablename__ = "opportunities"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str
    skills: str = ""
    duration: str
    deadline: date
    organization_id: Optional[int] = Field(default=None, foreign_key="organizations.id", index=True)


class Profile(SQLModel, table=True):
    """A tracked person profile.

    `email` is written once at creation and never updated.
    """
    __tablename__ = "profiles"

    id: Optional[int] = Field(default=None, primary_key=True)
    full_name: str
    email: str = Field(index=True)
    phone: Optional[str] = None
    skills: Optional[str] = None
    education: Optional[str] = None
    experience: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Certificate(SQLModel, table=True):
    """An uploaded certificate file owned by a `Profile`.

    Deleting the profile keeps the row (and the file); the reference is
    cleared by the database.
    """
    __tablename__ = "certificates"

    id: Optional[int] = Field(default=None, primary_key=True)
    profile_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), index=True),
    )
    file_name: str
    file_path: str
    uploaded_at: datetime = Field(default_factory=_utcnow)
