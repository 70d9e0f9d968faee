"""Repository classes encapsulating database operations.

`EntityRepository` is the ordered, durable key-value table used for
every entity kind: records are keyed by their generator-issued id and
always read back in ascending id order. `IdGenerator` owns the single
counter row shared by all kinds.
"""

from typing import Generic, List, Optional, Type, TypeVar

from sqlmodel import Session, SQLModel, select

from . import models
from .errors import DuplicateRecord, IdentifierExhausted

T = TypeVar("T", bound=SQLModel)

# ids are stored in a signed 64-bit INTEGER column
MAX_ID = 2 ** 63 - 1
COUNTER_NAME = "global"


def storable_id(value: int) -> bool:
    """Return True if `value` fits the id column; larger ids can never be stored."""
    return 0 <= value <= MAX_ID


class EntityRepository(Generic[T]):
    """Insert, scan and lookup operations for one entity table."""
    def __init__(self, session: Session, model: Type[T]):
        self.session = session
        self.model = model

    def insert(self, record: T) -> T:
        """Persist a new record and return the managed instance.

        Re-inserting at an existing id is a logic error and raises
        `DuplicateRecord` instead of overwriting. The commit also covers
        any pending identifier counter update in the same session.
        """
        if self.session.get(self.model, record.id) is not None:
            raise DuplicateRecord(f"{self.model.__name__} {record.id} already exists")
        self.session.add(record)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(record)
        return record

    def get(self, record_id: int) -> Optional[T]:
        """Get a record by primary key."""
        if not storable_id(record_id):
            return None
        return self.session.get(self.model, record_id)

    def exists(self, record_id: int) -> bool:
        return self.get(record_id) is not None

    def list(self) -> List[T]:
        """Return all records in ascending id order."""
        stmt = select(self.model).order_by(self.model.id)
        return list(self.session.exec(stmt).all())

    def find_by(self, *criteria) -> Optional[T]:
        """Return the first record (in id order) matching every criterion, or `None`."""
        stmt = select(self.model).where(*criteria).order_by(self.model.id).limit(1)
        return self.session.exec(stmt).first()


class IdGenerator:
    """Shared, strictly increasing identifier source.

    `next_id` returns the current counter value and advances the stored
    counter by one. The advance is only flushed; it becomes durable when
    the session commits, normally together with the insert that uses the
    id. A rolled-back session therefore leaves the counter untouched.
    Callers sharing a database must serialize allocation;
    `RegistryService` does so with its write lock.
    """
    def __init__(self, session: Session, start: int = 1):
        self.session = session
        self.start = start

    def _counter(self) -> models.IdentityCounter:
        counter = self.session.get(models.IdentityCounter, COUNTER_NAME)
        if counter is None:
            counter = models.IdentityCounter(name=COUNTER_NAME, next_value=self.start)
        return counter

    def peek(self) -> int:
        """Return the id the next call to `next_id` would issue."""
        return self._counter().next_value

    def next_id(self) -> int:
        counter = self._counter()
        value = counter.next_value
        if value >= MAX_ID:
            raise IdentifierExhausted(f"identifier counter exhausted at {value}")
        counter.next_value = value + 1
        self.session.add(counter)
        self.session.flush()
        return value
