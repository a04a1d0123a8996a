"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable. JSON field names are
camelCase (`fullName`, `organizationId`); inputs also accept the
snake_case column names.
"""

from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def split_skills(value) -> List[str]:
    """Normalize a skills value (list or comma-separated text) to a list."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = value
    return [str(s).strip() for s in items if str(s).strip()]


class OpportunityIn(ApiModel):
    """Create/update payload. Every field is required; update overwrites all."""
    title: str
    description: str
    skills: Union[List[str], str]
    duration: str
    deadline: date
    organization_id: int

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be empty")
        return v

    @field_validator("skills")
    @classmethod
    def normalize_skills(cls, v) -> List[str]:
        # stored comma-separated, so a list entry may not carry its own comma
        if isinstance(v, list) and any("," in s for s in v):
            raise ValueError("skill entries must not contain commas")
        return split_skills(v)

    def to_row(self) -> dict:
        """Column values for the `opportunities` table."""
        return {
            "title": self.title,
            "description": self.description,
            "skills": ", ".join(self.skills),
            "duration": self.duration,
            "deadline": self.deadline,
            "organization_id": self.organization_id,
        }


class OpportunityOut(ApiModel):
    id: int
    title: str
    description: str
    skills: List[str]
    duration: str
    deadline: date
    organization_id: Optional[int] = None
    organization_name: Optional[str] = None


class ProfileIn(ApiModel):
    """Payload for profile creation."""
    full_name: str
    email: str
    phone: Optional[str] = None
    skills: Optional[str] = None
    education: Optional[str] = None
    experience: Optional[str] = None


class ProfileUpdate(ApiModel):
    """Payload for profile updates.

    Only the fields sent are changed; `email` is not part of the shape so
    it cannot be modified.
    """
    full_name: Optional[str] = None
    phone: Optional[str] = None
    skills: Optional[str] = None
    education: Optional[str] = None
    experience: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def full_name_not_null(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("fullName must not be empty")
        return v


class ProfileOut(ApiModel):
    id: int
    full_name: str
    email: str
    phone: Optional[str] = None
    skills: Optional[str] = None
    education: Optional[str] = None
    experience: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CertificateOut(ApiModel):
    id: int
    profile_id: Optional[int] = None
    file_name: str
    file_path: str
    uploaded_at: datetime


class ProfileDetailOut(ProfileOut):
    certificates: List[CertificateOut] = Field(default_factory=list)


class OrganizationOut(ApiModel):
    id: int
    name: str


class UploadedFileOut(BaseModel):
    """Metadata of a stored upload, keyed like the original upload middleware."""
    fieldname: str
    originalname: str
    mimetype: Optional[str] = None
    destination: str
    filename: str
    path: str
    size: int
    kind: str
