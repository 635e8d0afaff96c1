from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from qoh_ledger.domain import DEFAULT_CONFIGURATION, Configuration, InvalidInputError
from qoh_ledger.storage.repository import LedgerRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "ticket_price",
        "organization_percentage",
        "jackpot_percentage",
        "penalty_percentage",
        "minimum_starting_jackpot",
        "minimum_payout_guarantee",
        "card_payouts",
    }
)


class ConfigurationService:
    """Admin surface over the per-organization configuration record.

    Games copy the configuration when they are created, so saving here never
    changes the math of an existing game.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, organization_id: str) -> Configuration:
        with self._session_factory() as db:
            return LedgerRepository(db).get_configuration(organization_id) or DEFAULT_CONFIGURATION

    def update(self, organization_id: str, **changes: Any) -> Configuration:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidInputError(f"unknown configuration fields: {', '.join(sorted(unknown))}")

        with self._session_factory() as db, db.begin():
            repo = LedgerRepository(db)
            current = repo.get_configuration(organization_id) or DEFAULT_CONFIGURATION
            updated = replace(current, **{key: value for key, value in changes.items() if value is not None})
            repo.save_configuration(organization_id, updated)
        logger.info("organization %s: configuration updated (%s)", organization_id, ", ".join(sorted(changes)))
        return updated
