"""FastAPI application entrypoint and HTTP controllers.

Controllers are intentionally thin: they accept requests, delegate to
the `RegistryService` held on `app.state`, and return JSON responses.
Registry failures are mapped to 400 (`InvalidPayload`) and 404
(`NotFound`) with a `{kind, detail}` body.

Endpoints implemented:
- POST /institutions, GET /institutions, GET /institutions/{id}
- POST /students, GET /students, GET /students/{id}
- POST /credentials, GET /credentials, GET /credentials/{id}
- POST /credentials/verify
- GET /health
"""

import json
import logging
import time
import uuid
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from . import models
from .config import settings
from .database import create_db_and_tables, engine
from .errors import InvalidPayload, NotFound, RegistryError
from .schemas import CredentialPayload, InstitutionPayload, StudentPayload, VerifyPayload
from .services import RegistryService

logger = logging.getLogger("registry.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

_STATUS_BY_ERROR = {
    InvalidPayload: 400,
    NotFound: 404,
}


def get_registry(request: Request) -> RegistryService:
    """FastAPI dependency returning the application's `RegistryService`."""
    return request.app.state.registry


def create_app(registry: Optional[RegistryService] = None) -> FastAPI:
    """Build the API around `registry`.

    When no service is given, one is created on the configured database
    engine and its tables are created if missing.
    """
    if registry is None:
        create_db_and_tables(engine)
        registry = RegistryService(engine, id_start=settings.ID_START)

    api = FastAPI(title="Academic Credential Registry API")
    api.state.registry = registry

    @api.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        request.state.error_kind = exc.kind
        status = _STATUS_BY_ERROR.get(type(exc), 400)
        return JSONResponse(status_code=status, content=exc.to_dict())

    @api.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Tag each request with an id and log its outcome.

        Registry failures are surfaced as `X-Error-Kind` so clients and logs
        can tell an empty collection from a rejected payload without parsing
        the body.
        """
        req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
        request.state.request_id = req_id
        started = time.perf_counter()

        def _event(**extra) -> str:
            event = {
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
            }
            event.update(extra)
            return json.dumps(event, ensure_ascii=True)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_failed %s", _event())
            raise
        response.headers["X-Request-ID"] = req_id
        error_kind = getattr(request.state, "error_kind", None)
        if error_kind:
            response.headers["X-Error-Kind"] = error_kind
            logger.info("request_rejected %s", _event(status_code=response.status_code, error_kind=error_kind))
        else:
            logger.info("request_done %s", _event(status_code=response.status_code))
        return response

    @api.post('/institutions', response_model=models.Institution)
    def create_institution(payload: InstitutionPayload, registry: RegistryService = Depends(get_registry)):
        """Register an institution and return the stored record."""
        return registry.create_institution(payload.name, payload.address)

    @api.get('/institutions', response_model=List[models.Institution])
    def list_institutions(registry: RegistryService = Depends(get_registry)):
        return registry.get_institutions()

    @api.get('/institutions/{institution_id}', response_model=models.Institution)
    def get_institution(institution_id: int, registry: RegistryService = Depends(get_registry)):
        return registry.get_institution(institution_id)

    @api.post('/students', response_model=models.Student)
    def create_student(payload: StudentPayload, registry: RegistryService = Depends(get_registry)):
        """Register a student and return the stored record."""
        return registry.create_student(payload.name, payload.email)

    @api.get('/students', response_model=List[models.Student])
    def list_students(registry: RegistryService = Depends(get_registry)):
        return registry.get_students()

    @api.get('/students/{student_id}', response_model=models.Student)
    def get_student(student_id: int, registry: RegistryService = Depends(get_registry)):
        return registry.get_student(student_id)

    @api.post('/credentials', response_model=models.Credential)
    def create_credential(payload: CredentialPayload, registry: RegistryService = Depends(get_registry)):
        """Issue a credential.

        The student and institution must already exist; see
        `RegistryService.create_credential` for the order of checks.
        """
        return registry.create_credential(
            payload.student_id,
            payload.institution_id,
            payload.course,
            payload.degree,
            payload.graduation_year,
        )

    @api.get('/credentials', response_model=List[models.Credential])
    def list_credentials(registry: RegistryService = Depends(get_registry)):
        return registry.get_credentials()

    @api.post('/credentials/verify', response_model=models.Credential)
    def verify_credential(payload: VerifyPayload, registry: RegistryService = Depends(get_registry)):
        """Return the credential held by the student from the institution, if any."""
        return registry.verify_credential(payload.student_id, payload.institution_id)

    @api.get('/credentials/{credential_id}', response_model=models.Credential)
    def get_credential(credential_id: int, registry: RegistryService = Depends(get_registry)):
        return registry.get_credential(credential_id)

    @api.get("/health")
    def health():
        """Lightweight health check for uptime monitoring."""
        return {"status": "ok"}

    return api


app = create_app()
