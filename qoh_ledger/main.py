from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from qoh_ledger.api.configuration import router as configuration_router
from qoh_ledger.api.games import router as games_router
from qoh_ledger.api.weeks import router as weeks_router
from qoh_ledger.logging import configure_logging
from qoh_ledger.storage.database import init_db

logger = configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    init_db()
    logger.info("ledger database ready")
    yield


app = FastAPI(title="Queen of Hearts Ledger API", lifespan=lifespan)
app.include_router(configuration_router)
app.include_router(games_router)
app.include_router(weeks_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
