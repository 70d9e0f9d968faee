import pytest
from sqlmodel import Session

from registry.errors import DuplicateRecord, IdentifierExhausted
from registry.models import Credential, IdentityCounter, Institution
from registry.repositories import COUNTER_NAME, MAX_ID, EntityRepository, IdGenerator


def _institution(id, name="Inst"):
    return Institution(id=id, name=name, address="Somewhere", created_at=id * 10)


def test_id_generator_is_strictly_increasing_and_durable(engine):
    with Session(engine) as session:
        gen = IdGenerator(session)
        assert [gen.next_id(), gen.next_id(), gen.next_id()] == [1, 2, 3]
        session.commit()
    with Session(engine) as session:
        assert IdGenerator(session).next_id() == 4


def test_id_generator_respects_start_value(engine):
    with Session(engine) as session:
        assert IdGenerator(session, start=0).next_id() == 0
        assert IdGenerator(session, start=0).next_id() == 1


def test_rolled_back_ids_are_not_consumed(engine):
    with Session(engine) as session:
        IdGenerator(session).next_id()
        session.rollback()
    with Session(engine) as session:
        assert IdGenerator(session).peek() == 1


def test_id_generator_exhaustion_is_fatal(engine):
    with Session(engine) as session:
        session.add(IdentityCounter(name=COUNTER_NAME, next_value=MAX_ID))
        session.commit()
        with pytest.raises(IdentifierExhausted):
            IdGenerator(session).next_id()


def test_list_is_in_key_order(engine):
    with Session(engine) as session:
        repo = EntityRepository(session, Institution)
        for i in (5, 2, 9):
            repo.insert(_institution(i))
        assert [r.id for r in repo.list()] == [2, 5, 9]


def test_get_and_exists(engine):
    with Session(engine) as session:
        repo = EntityRepository(session, Institution)
        repo.insert(_institution(7, name="MIT"))
        assert repo.get(7).name == "MIT"
        assert repo.get(8) is None
        assert repo.exists(7)
        assert not repo.exists(8)


def test_reinsert_at_existing_key_raises(engine):
    with Session(engine) as session:
        repo = EntityRepository(session, Institution)
        repo.insert(_institution(1, name="Original"))
        with pytest.raises(DuplicateRecord):
            repo.insert(_institution(1, name="Replacement"))
    with Session(engine) as session:
        assert EntityRepository(session, Institution).get(1).name == "Original"


def test_find_by_returns_first_match_in_key_order(engine):
    with Session(engine) as session:
        repo = EntityRepository(session, Credential)
        for cid, course in ((4, "CS101"), (3, "CS101"), (6, "MATH")):
            repo.insert(Credential(id=cid, student_id=1, institution_id=2, course=course, degree="BSc", graduation_year=2024, issued_at=0))
        assert repo.find_by(Credential.course == "CS101").id == 3
        assert repo.find_by(Credential.student_id == 1, Credential.course == "MATH").id == 6
        assert repo.find_by(Credential.institution_id == 99) is None


def test_empty_list(engine):
    with Session(engine) as session:
        repo = EntityRepository(session, Institution)
        assert repo.list() == []


def test_get_beyond_storage_range_is_none(engine):
    with Session(engine) as session:
        repo = EntityRepository(session, Institution)
        repo.insert(_institution(1))
        assert repo.get(MAX_ID + 1) is None
        assert not repo.exists(2 ** 64 - 1)
