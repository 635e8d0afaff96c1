from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from qoh_ledger.services.configuration_service import ConfigurationService
from qoh_ledger.services.game_service import GameService
from qoh_ledger.services.ledger_service import LedgerService
from qoh_ledger.services.reports import ReportService
from qoh_ledger.storage.database import SessionLocal


def get_session_factory() -> sessionmaker[Session]:
    return SessionLocal


def get_configuration_service(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
) -> ConfigurationService:
    return ConfigurationService(session_factory)


def get_ledger_service(session_factory: sessionmaker[Session] = Depends(get_session_factory)) -> LedgerService:
    return LedgerService(session_factory)


def get_game_service(session_factory: sessionmaker[Session] = Depends(get_session_factory)) -> GameService:
    return GameService(session_factory)


def get_report_service(session_factory: sessionmaker[Session] = Depends(get_session_factory)) -> ReportService:
    return ReportService(session_factory)

