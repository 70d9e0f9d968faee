import os
import pytest

# the module-level app must never touch the on-disk default database
os.environ["REGISTRY_DATABASE_URL"] = "sqlite://"

from fastapi.testclient import TestClient

from registry.database import make_engine, create_db_and_tables
from registry.main import create_app
from registry.services import RegistryService


class FakeClock:
    """Deterministic nanosecond clock advancing 1000ns per reading."""
    def __init__(self, start: int = 1_700_000_000_000_000_000):
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


@pytest.fixture
def engine(tmp_path):
    """A fresh SQLite file database with the registry tables."""
    eng = make_engine(f"sqlite:///{tmp_path / 'registry.db'}")
    create_db_and_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(engine, clock):
    return RegistryService(engine, clock=clock)


@pytest.fixture
def client(registry):
    return TestClient(create_app(registry))
