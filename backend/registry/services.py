"""Business logic for the credential registry.

`RegistryService` is the single owner of registry state: it holds the
engine, the clock and the identifier start value, and is constructed
once at process start and handed to whoever needs it. Every operation
runs in its own short session: validation first, then existence checks,
then id allocation and insert, committed as one unit. Creations are
serialized by a lock owned by the service, so concurrent callers (such
as FastAPI's threadpool) never read the same counter value.
"""

import logging
import threading
import time
from typing import Callable, List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from . import models, repositories
from .errors import InvalidPayload, NotFound

logger = logging.getLogger("registry.service")

Clock = Callable[[], int]


def _missing(*values: Optional[str]) -> bool:
    # whitespace-only strings count as provided
    return any(v is None or v == "" for v in values)


class RegistryService:
    """Create, list, look up and verify registry records."""
    def __init__(self, engine: Engine, clock: Clock = time.time_ns, id_start: int = 1):
        self.engine = engine
        self.clock = clock
        self.id_start = id_start
        self._write_lock = threading.Lock()

    def _session(self) -> Session:
        return Session(self.engine)

    def _create(self, session: Session, model, **fields):
        """Allocate an id, build the record and insert it in `session`."""
        new_id = repositories.IdGenerator(session, self.id_start).next_id()
        record = model(id=new_id, **fields)
        created = repositories.EntityRepository(session, model).insert(record)
        logger.info("created %s id=%s", model.__name__.lower(), created.id)
        return created

    def peek_next_id(self) -> int:
        """Return the id the next successful creation will receive."""
        with self._session() as session:
            return repositories.IdGenerator(session, self.id_start).peek()

    def _reject(self, error):
        logger.info("rejected %s: %s", error.kind, error.message)
        return error

    def create_institution(self, name: str, address: str) -> models.Institution:
        """Register an institution. Raises `InvalidPayload` if a field is empty."""
        if _missing(name, address):
            raise self._reject(InvalidPayload("Ensure 'name' and 'address' are provided."))
        with self._write_lock, self._session() as session:
            return self._create(session, models.Institution, name=name, address=address, created_at=self.clock())

    def create_student(self, name: str, email: str) -> models.Student:
        """Register a student. Raises `InvalidPayload` if a field is empty."""
        if _missing(name, email):
            raise self._reject(InvalidPayload("Ensure 'name' and 'email' are provided."))
        with self._write_lock, self._session() as session:
            return self._create(session, models.Student, name=name, email=email, created_at=self.clock())

    def create_credential(self, student_id: int, institution_id: int, course: str, degree: str, graduation_year: int) -> models.Credential:
        """Issue a credential to an existing student from an existing institution.

        Checks run in a fixed order and the first failure wins:
        empty `course`/`degree` (`InvalidPayload`), unknown student
        (`NotFound`), unknown institution (`NotFound`). Nothing is written
        and no id is consumed when a check fails.
        """
        if _missing(course, degree):
            raise self._reject(InvalidPayload("Ensure 'course' and 'degree' are provided."))
        with self._write_lock, self._session() as session:
            if not repositories.EntityRepository(session, models.Student).exists(student_id):
                raise self._reject(NotFound("Student not found"))
            if not repositories.EntityRepository(session, models.Institution).exists(institution_id):
                raise self._reject(NotFound("Institution not found"))
            return self._create(
                session,
                models.Credential,
                student_id=student_id,
                institution_id=institution_id,
                course=course,
                degree=degree,
                graduation_year=graduation_year,
                issued_at=self.clock(),
            )

    def get_all(self, kind: models.EntityKind) -> list:
        """Return every record of `kind` in id order; `NotFound` when there are none."""
        kind = models.EntityKind(kind)
        with self._session() as session:
            records = repositories.EntityRepository(session, kind.model).list()
        if not records:
            raise NotFound(f"No {kind.plural} found")
        return records

    def get_by_id(self, kind: models.EntityKind, record_id: int):
        kind = models.EntityKind(kind)
        with self._session() as session:
            record = repositories.EntityRepository(session, kind.model).get(record_id)
        if record is None:
            raise NotFound(f"{kind.value.capitalize()} not found")
        return record

    def verify_credential(self, student_id: int, institution_id: int) -> models.Credential:
        """Return the first credential held by `student_id` from `institution_id`."""
        if not (repositories.storable_id(student_id) and repositories.storable_id(institution_id)):
            raise NotFound("Credential not found")
        with self._session() as session:
            credential = repositories.EntityRepository(session, models.Credential).find_by(
                models.Credential.student_id == student_id,
                models.Credential.institution_id == institution_id,
            )
        if credential is None:
            raise NotFound("Credential not found")
        return credential

    def get_institutions(self) -> List[models.Institution]:
        return self.get_all(models.EntityKind.INSTITUTION)

    def get_institution(self, institution_id: int) -> models.Institution:
        return self.get_by_id(models.EntityKind.INSTITUTION, institution_id)

    def get_students(self) -> List[models.Student]:
        return self.get_all(models.EntityKind.STUDENT)

    def get_student(self, student_id: int) -> models.Student:
        return self.get_by_id(models.EntityKind.STUDENT, student_id)

    def get_credentials(self) -> List[models.Credential]:
        return self.get_all(models.EntityKind.CREDENTIAL)

    def get_credential(self, credential_id: int) -> models.Credential:
        return self.get_by_id(models.EntityKind.CREDENTIAL, credential_id)
