"""Business logic services used by HTTP controllers.

Services are thin: they validate input, call repositories and shape the
output models. Repositories are passed in so the HTTP layer can build
them from the request session (or tests can pass fakes).
"""

import logging
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from . import models, repositories
from .errors import ValidationError
from .schemas import (
    CertificateOut,
    OpportunityIn,
    OpportunityOut,
    OrganizationOut,
    ProfileDetailOut,
    ProfileIn,
    ProfileOut,
    ProfileUpdate,
    UploadedFileOut,
    split_skills,
)
from .utils.uploads import UploadStore, sniff_upload_kind, validate_upload_filename

logger = logging.getLogger("edubridge.services")


def parse_payload(schema, data):
    """Validate `data` against `schema`, raising the API `ValidationError`.

    The message lists each failing field, e.g. `deadline: Field required`.
    """
    if not isinstance(data, dict):
        raise ValidationError("Invalid or missing JSON data")
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        parts = []
        for err in e.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg"))
        raise ValidationError("; ".join(parts))


class OrganizationService:
    def __init__(self, repo: repositories.OrganizationRepository):
        self.repo = repo

    def list(self) -> List[OrganizationOut]:
        return [OrganizationOut.model_validate(o) for o in self.repo.list()]


class OpportunityService:
    """Create, list, read, update and delete opportunities."""
    def __init__(self, repo: repositories.OpportunityRepository, org_repo: repositories.OrganizationRepository):
        self.repo = repo
        self.org_repo = org_repo

    def _to_out(self, opp: models.Opportunity, org_names: dict) -> OpportunityOut:
        return OpportunityOut(
            id=opp.id,
            title=opp.title,
            description=opp.description,
            skills=split_skills(opp.skills),
            duration=opp.duration,
            deadline=opp.deadline,
            organization_id=opp.organization_id,
            organization_name=org_names.get(opp.organization_id),
        )

    def create(self, data: dict) -> int:
        payload = parse_payload(OpportunityIn, data)
        opp = self.repo.create(payload.to_row())
        logger.info("opportunity created id=%s", opp.id)
        return opp.id

    def list(self) -> List[OpportunityOut]:
        opps = self.repo.list()
        names = self.org_repo.names_by_id() if opps else {}
        return [self._to_out(o, names) for o in opps]

    def get(self, opportunity_id: int) -> OpportunityOut:
        opp = self.repo.get(opportunity_id)
        return self._to_out(opp, self.org_repo.names_by_id())

    def update(self, opportunity_id: int, data: dict) -> None:
        payload = parse_payload(OpportunityIn, data)
        self.repo.update(opportunity_id, payload.to_row())
        logger.info("opportunity updated id=%s", opportunity_id)

    def delete(self, opportunity_id: int) -> None:
        self.repo.delete(opportunity_id)
        logger.info("opportunity deleted id=%s", opportunity_id)


class ProfileService:
    """Profile CRUD plus the certificate list attached on single reads."""
    def __init__(self, repo: repositories.ProfileRepository, cert_repo: repositories.CertificateRepository):
        self.repo = repo
        self.cert_repo = cert_repo

    def create(self, data) -> ProfileOut:
        payload = parse_payload(ProfileIn, data)
        profile = self.repo.create(payload.model_dump())
        logger.info("profile created id=%s", profile.id)
        return ProfileOut.model_validate(profile)

    def list(self) -> List[ProfileOut]:
        return [ProfileOut.model_validate(p) for p in self.repo.list()]

    def get(self, profile_id: int) -> ProfileDetailOut:
        profile = self.repo.get(profile_id)
        certs = self.cert_repo.list_for_profile(profile_id)
        out = ProfileDetailOut.model_validate(profile)
        out.certificates = [CertificateOut.model_validate(c) for c in certs]
        return out

    def update(self, profile_id: int, data) -> ProfileOut:
        payload = parse_payload(ProfileUpdate, data)
        # only the fields the client actually sent
        profile = self.repo.update(profile_id, payload.model_dump(exclude_unset=True))
        return ProfileOut.model_validate(profile)

    def delete(self, profile_id: int) -> ProfileOut:
        deleted = self.repo.delete(profile_id)
        logger.info("profile deleted id=%s", profile_id)
        return ProfileOut.model_validate(deleted)


class CertificateService:
    """Store uploaded certificate files and record them against profiles."""
    def __init__(
        self,
        profile_repo: repositories.ProfileRepository,
        cert_repo: repositories.CertificateRepository,
        store: UploadStore,
        max_bytes: int,
    ):
        self.profile_repo = profile_repo
        self.cert_repo = cert_repo
        self.store = store
        self.max_bytes = max_bytes

    def upload(
        self,
        profile_id: int,
        filename: Optional[str],
        payload: bytes,
        content_type: Optional[str],
        fieldname: str = "certificate",
    ):
        """Write the file and insert its certificate row.

        The profile is checked before anything touches the disk. If the
        row insert fails the written file is removed again, so a failed
        upload leaves neither a row nor a file behind.
        """
        filename = validate_upload_filename(filename)
        if len(payload) > self.max_bytes:
            raise ValidationError("file too large")
        self.profile_repo.get(profile_id)

        stored_name = self.store.unique_name(filename)
        path = self.store.save(stored_name, payload)
        try:
            cert = self.cert_repo.create(
                models.Certificate(profile_id=profile_id, file_name=filename, file_path=str(path))
            )
        except Exception:
            self.store.discard(path)
            raise
        logger.info("certificate stored profile_id=%s path=%s size=%d", profile_id, path, len(payload))
        info = UploadedFileOut(
            fieldname=fieldname,
            originalname=filename,
            mimetype=content_type,
            destination=str(self.store.directory),
            filename=stored_name,
            path=str(path),
            size=len(payload),
            kind=sniff_upload_kind(payload, filename, content_type),
        )
        return info, CertificateOut.model_validate(cert)
