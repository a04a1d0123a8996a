"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the EduBridge records
backend. Controllers are intentionally thin: they accept requests,
delegate to services, and return JSON responses. Services and
repositories are built per request from the injected database session.

Endpoints implemented:
- GET /api/organizations
- GET, POST /api/opportunities
- GET, PUT, DELETE /api/opportunities/{id}
- GET, POST /opportunities?action=create|read|update|delete
- GET, POST /api/profiles
- GET, PUT, DELETE /api/profiles/{id}
- POST /api/profiles/{id}/upload
"""

from fastapi import FastAPI, Depends, UploadFile, File, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, HTMLResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlmodel import Session
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import json
import logging
import time
import uuid
from pathlib import Path
from .database import create_db_and_tables, get_session
from . import services, repositories
from .errors import ServiceError, ValidationError
from .utils.uploads import UploadStore
from .config import settings

app = FastAPI(title="EduBridge Records API")
logger = logging.getLogger("edubridge.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

# The browser script may be opened from file:// or another local port.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Serve the list/form pages and their script
static_dir = Path(__file__).resolve().parent / "static"
if static_dir.exists():
    app.mount("/static", StaticFiles(directory=static_dir), name="static")

if settings.DB_CREATE_TABLES:
    create_db_and_tables()

upload_store = UploadStore(settings.UPLOAD_DIR)

_LOGGED_PREFIXES = ("/api", "/opportunities")


def _request_log_line(request: Request, req_id: str, started: float, **extra) -> str:
    fields = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        **extra,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
        "client": request.client.host if request.client else "unknown",
    }
    return json.dumps(fields, ensure_ascii=True)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_failed %s", _request_log_line(request, req_id, started))
        raise
    response.headers["X-Request-ID"] = req_id
    if request.url.path.startswith(_LOGGED_PREFIXES):
        logger.info(
            "request_done %s",
            _request_log_line(request, req_id, started, status_code=response.status_code),
        )
    return response


@app.exception_handler(ServiceError)
async def handle_service_error(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "path", "query"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg"))
    return JSONResponse(status_code=400, content={"error": "; ".join(parts) or "invalid request"})


# -------------------------
# Dependencies
# -------------------------

def get_upload_store() -> UploadStore:
    return upload_store


def get_organization_service(db: Session = Depends(get_session)) -> services.OrganizationService:
    return services.OrganizationService(repositories.OrganizationRepository(db))


def get_opportunity_service(db: Session = Depends(get_session)) -> services.OpportunityService:
    return services.OpportunityService(
        repositories.OpportunityRepository(db),
        repositories.OrganizationRepository(db),
    )


def get_profile_service(db: Session = Depends(get_session)) -> services.ProfileService:
    return services.ProfileService(repositories.ProfileRepository(db), repositories.CertificateRepository(db))


def get_certificate_service(
    db: Session = Depends(get_session),
    store: UploadStore = Depends(get_upload_store),
) -> services.CertificateService:
    return services.CertificateService(
        repositories.ProfileRepository(db),
        repositories.CertificateRepository(db),
        store,
        settings.MAX_UPLOAD_BYTES,
    )


async def opportunity_body(request: Request) -> dict:
    """Read an opportunity payload from a JSON, urlencoded or multipart body.

    File fields in form submissions (the form page sends `documents`) are
    dropped. Raises `ValidationError` when the body is absent or not a
    JSON object.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        return {k: v for k, v in form.items() if not isinstance(v, StarletteUploadFile)}
    data = await _read_json(request)
    if not isinstance(data, dict):
        raise ValidationError("Invalid or missing JSON data")
    return data


async def json_body(request: Request):
    """Return the parsed JSON body, or `None` when it is absent or malformed."""
    return await _read_json(request)


async def _read_json(request: Request):
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


# -------------------------
# Organizations
# -------------------------

@app.get('/api/organizations')
def list_organizations(svc: services.OrganizationService = Depends(get_organization_service)):
    """List organizations (id and name) for filter and select controls."""
    return [o.model_dump(by_alias=True, mode="json") for o in svc.list()]


# -------------------------
# Opportunities
# -------------------------

@app.get('/api/opportunities')
def list_opportunities(svc: services.OpportunityService = Depends(get_opportunity_service)):
    """Return every opportunity ordered by ascending id.

    No filtering happens here; the list page filters client-side.
    """
    return [o.model_dump(by_alias=True, mode="json") for o in svc.list()]


@app.get('/api/opportunities/{opportunity_id}')
def get_opportunity(opportunity_id: int, svc: services.OpportunityService = Depends(get_opportunity_service)):
    return svc.get(opportunity_id).model_dump(by_alias=True, mode="json")


@app.post('/api/opportunities', status_code=201)
def create_opportunity(
    data: dict = Depends(opportunity_body),
    svc: services.OpportunityService = Depends(get_opportunity_service),
):
    """Create an opportunity from JSON or form fields.

    Required: title, description, skills, duration, deadline,
    organizationId.
    """
    new_id = svc.create(data)
    return {"message": "Opportunity created successfully", "id": new_id}


@app.put('/api/opportunities/{opportunity_id}')
def update_opportunity(
    opportunity_id: int,
    data: dict = Depends(opportunity_body),
    svc: services.OpportunityService = Depends(get_opportunity_service),
):
    """Overwrite every field of an existing opportunity."""
    svc.update(opportunity_id, data)
    return {"message": "Opportunity updated successfully"}


@app.delete('/api/opportunities/{opportunity_id}')
def delete_opportunity(opportunity_id: int, svc: services.OpportunityService = Depends(get_opportunity_service)):
    svc.delete(opportunity_id)
    return {"message": "Opportunity deleted successfully"}


_LEGACY_KEYS = {"skillsrequired": "skills", "organization": "organizationId"}


def _legacy_payload(data: dict) -> dict:
    out = dict(data)
    for old, new in _LEGACY_KEYS.items():
        if old in out and new not in out:
            out[new] = out.pop(old)
    return out


def _legacy_id(data: dict) -> int:
    raw = data.get("opportunityid", data.get("id"))
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError("opportunityid is required")


@app.api_route('/opportunities', methods=["GET", "POST", "PUT", "DELETE"])
def opportunities_action(
    action: Optional[str] = None,
    data=Depends(json_body),
    svc: services.OpportunityService = Depends(get_opportunity_service),
):
    """Action-style interface to the same four opportunity operations.

    `?action=read` lists; `create`, `update` and `delete` take a JSON body
    using the `opportunityid`, `skillsrequired` and `organization` keys
    (the REST names are accepted too).
    """
    if action == "read":
        return [o.model_dump(by_alias=True, mode="json") for o in svc.list()]
    if action not in ("create", "update", "delete"):
        raise ValidationError("Invalid or missing action")
    if not isinstance(data, dict) or not data:
        raise ValidationError("Invalid or missing JSON data")
    if action == "create":
        new_id = svc.create(_legacy_payload(data))
        return JSONResponse(status_code=201, content={"message": "Opportunity created successfully", "id": new_id})
    opportunity_id = _legacy_id(data)
    if action == "update":
        svc.update(opportunity_id, _legacy_payload(data))
        return {"message": "Opportunity updated successfully"}
    svc.delete(opportunity_id)
    return {"message": "Opportunity deleted successfully"}


# -------------------------
# Profiles
# -------------------------

@app.post('/api/profiles', status_code=201)
def create_profile(data=Depends(json_body), svc: services.ProfileService = Depends(get_profile_service)):
    """Create a profile and return the stored row including its id."""
    return svc.create(data).model_dump(by_alias=True, mode="json")


@app.get('/api/profiles')
def list_profiles(svc: services.ProfileService = Depends(get_profile_service)):
    return [p.model_dump(by_alias=True, mode="json") for p in svc.list()]


@app.get('/api/profiles/{profile_id}')
def get_profile(profile_id: int, svc: services.ProfileService = Depends(get_profile_service)):
    """Return a profile with its `certificates` array (empty when none)."""
    return svc.get(profile_id).model_dump(by_alias=True, mode="json")


@app.put('/api/profiles/{profile_id}')
def update_profile(profile_id: int, data=Depends(json_body), svc: services.ProfileService = Depends(get_profile_service)):
    """Update the sent fields of a profile; `email` cannot be changed."""
    return svc.update(profile_id, data).model_dump(by_alias=True, mode="json")


@app.delete('/api/profiles/{profile_id}')
def delete_profile(profile_id: int, svc: services.ProfileService = Depends(get_profile_service)):
    deleted = svc.delete(profile_id)
    return {"message": "Profile deleted successfully", "deletedProfile": deleted.model_dump(by_alias=True, mode="json")}


@app.post('/api/profiles/{profile_id}/upload', status_code=201)
def upload_certificate(
    profile_id: int,
    certificate: UploadFile = File(...),
    svc: services.CertificateService = Depends(get_certificate_service),
):
    """Store one certificate file for a profile.

    The multipart field must be named `certificate`. Returns the stored
    file metadata and the certificate row.
    """
    payload = certificate.file.read(settings.MAX_UPLOAD_BYTES + 1)
    info, cert = svc.upload(profile_id, certificate.filename, payload, certificate.content_type)
    return {
        "message": "File uploaded successfully",
        "file": info.model_dump(),
        "certificate": cert.model_dump(by_alias=True, mode="json"),
    }


# -------------------------
# Pages
# -------------------------

@app.get("/", response_class=HTMLResponse)
def home():
    """Minimal homepage for quick manual testing."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
      <meta charset="UTF-8" />
      <title>EduBridge</title>
      <style>
        body { font-family: Arial, sans-serif; margin: 32px; }
        a { color: #0a6; }
        .card { max-width: 640px; padding: 16px; border: 1px solid #ddd; border-radius: 8px; }
      </style>
    </head>
    <body>
      <div class="card">
        <h1>EduBridge Records API</h1>
        <ul>
          <li><a href="/static/index.html">Opportunities</a></li>
          <li><a href="/static/form.html">New opportunity</a></li>
          <li><a href="/docs">Swagger UI</a></li>
        </ul>
      </div>
    </body>
    </html>
    """


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
