"""Repository classes encapsulating database operations.

Each repository is small and focused on a single table. The CRUD
resources (opportunities, profiles) share `ResourceRepository`, which
exposes create/list/get/update/delete and translates database failures
into `StorageError` and missing rows into `NotFound`. Repositories
return SQLModel objects and commit on every write.
"""

import logging
from datetime import datetime, timezone
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from . import models
from .errors import NotFound, StorageError

logger = logging.getLogger("edubridge.repositories")

ModelT = TypeVar("ModelT", bound=SQLModel)


def _storage_error(exc: SQLAlchemyError, table: str) -> StorageError:
    logger.exception("storage failure on %s", table)
    # surface the driver message, not the SQL statement
    orig = getattr(exc, "orig", None)
    return StorageError(str(orig) if orig is not None else str(exc))


class ResourceRepository(Generic[ModelT]):
    """CRUD operations for one table model.

    Subclasses set `model` and `label`; `label` is used in `NotFound`
    messages ("Profile not found").
    """
    model: Type[ModelT]
    label: str = "Record"

    def __init__(self, session: Session):
        self.session = session

    def create(self, values: dict) -> ModelT:
        """Insert a row built from `values` and return it with its id."""
        obj = self.model(**values)
        self._commit(obj)
        return obj

    def list(self) -> List[ModelT]:
        """Return every row."""
        return self._all(select(self.model))

    def find(self, record_id: int) -> Optional[ModelT]:
        """Get a row by primary key or `None`."""
        try:
            return self.session.get(self.model, record_id)
        except SQLAlchemyError as e:
            raise _storage_error(e, self.model.__tablename__)

    def get(self, record_id: int) -> ModelT:
        """Get a row by primary key or raise `NotFound`."""
        obj = self.find(record_id)
        if obj is None:
            raise NotFound(f"{self.label} not found")
        return obj

    def update(self, record_id: int, values: dict) -> ModelT:
        """Overwrite the given columns of an existing row."""
        obj = self.get(record_id)
        for field, value in values.items():
            setattr(obj, field, value)
        self._commit(obj)
        return obj

    def delete(self, record_id: int) -> ModelT:
        """Delete a row and return a detached copy of its prior contents."""
        obj = self.get(record_id)
        snapshot = self.model(**{name: getattr(obj, name) for name in self.model.model_fields})
        try:
            self.session.delete(obj)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise _storage_error(e, self.model.__tablename__)
        return snapshot

    def _all(self, stmt) -> List[ModelT]:
        try:
            return list(self.session.exec(stmt).all())
        except SQLAlchemyError as e:
            raise _storage_error(e, self.model.__tablename__)

    def _commit(self, obj: ModelT) -> None:
        try:
            self.session.add(obj)
            self.session.commit()
            self.session.refresh(obj)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise _storage_error(e, self.model.__tablename__)


class OpportunityRepository(ResourceRepository[models.Opportunity]):
    """Opportunities, listed in ascending id order."""
    model = models.Opportunity
    label = "Opportunity"

    def list(self) -> List[models.Opportunity]:
        return self._all(select(models.Opportunity).order_by(models.Opportunity.id))


class ProfileRepository(ResourceRepository[models.Profile]):
    """Profiles. Updates stamp `updated_at` and never change `email`."""
    model = models.Profile
    label = "Profile"

    def update(self, record_id: int, values: dict) -> models.Profile:
        values = {k: v for k, v in values.items() if k not in ("id", "email", "created_at")}
        values["updated_at"] = datetime.now(timezone.utc)
        return super().update(record_id, values)


class CertificateRepository:
    """Certificate rows attached to profiles."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, certificate: models.Certificate) -> models.Certificate:
        """Persist a certificate row and return it with its id.

        Rolls back and raises `StorageError` on any database failure so
        the caller can discard the stored file.
        """
        try:
            self.session.add(certificate)
            self.session.commit()
            self.session.refresh(certificate)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise _storage_error(e, "certificates")
        return certificate

    def list_for_profile(self, profile_id: int) -> List[models.Certificate]:
        """List all certificates for `profile_id` in upload order."""
        stmt = (
            select(models.Certificate)
            .where(models.Certificate.profile_id == profile_id)
            .order_by(models.Certificate.id)
        )
        try:
            return list(self.session.exec(stmt).all())
        except SQLAlchemyError as e:
            raise _storage_error(e, "certificates")


class OrganizationRepository:
    """Read-only access to organizations."""
    def __init__(self, session: Session):
        self.session = session

    def list(self) -> List[models.Organization]:
        stmt = select(models.Organization).order_by(models.Organization.name)
        try:
            return list(self.session.exec(stmt).all())
        except SQLAlchemyError as e:
            raise _storage_error(e, "organizations")

    def names_by_id(self) -> dict:
        """Return an `{id: name}` map used to decorate opportunities."""
        return {o.id: o.name for o in self.list()}
