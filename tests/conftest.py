from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from qoh_ledger.services.configuration_service import ConfigurationService
from qoh_ledger.services.game_service import GameService
from qoh_ledger.services.ledger_service import LedgerService
from qoh_ledger.services.locks import GameLocks
from qoh_ledger.services.reports import ReportService
from qoh_ledger.storage import models  # noqa: F401
from qoh_ledger.storage.database import Base

TODAY = date(2024, 3, 1)


@pytest.fixture
def session_factory() -> sessionmaker[Session]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False, future=True)


@pytest.fixture
def locks() -> GameLocks:
    return GameLocks()


@pytest.fixture
def ledger(session_factory: sessionmaker[Session], locks: GameLocks) -> LedgerService:
    return LedgerService(session_factory, locks)


@pytest.fixture
def games(session_factory: sessionmaker[Session], locks: GameLocks) -> GameService:
    return GameService(session_factory, locks, today=lambda: TODAY)


@pytest.fixture
def configuration(session_factory: sessionmaker[Session]) -> ConfigurationService:
    return ConfigurationService(session_factory)


@pytest.fixture
def reports(session_factory: sessionmaker[Session]) -> ReportService:
    return ReportService(session_factory)
