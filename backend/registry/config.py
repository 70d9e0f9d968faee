"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    DATABASE_URL: str
    ID_START: int
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("REGISTRY_DATABASE_URL", f"sqlite:///{BASE / 'registry.db'}")
        self.ID_START = int(os.getenv("REGISTRY_ID_START", "1"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if self.ID_START < 0:
            raise RuntimeError("REGISTRY_ID_START must be >= 0")
        if self.ENV != "dev" and self.DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
            raise RuntimeError("an in-memory database is not durable; set REGISTRY_DATABASE_URL outside dev")


settings = Settings()
