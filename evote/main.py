# main.py
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from .auth import SessionRegistry
from .config import CORS_ORIGINS, HOST, LOG_LEVEL, PORT, STORAGE_BACKEND
from .errors import LedgerError, register_error_handlers
from .ledger import Ledger, build_ledger
from .routes.auth_routes import router as auth_router
from .routes.candidate_routes import router as candidate_router
from .routes.ledger_routes import router as ledger_router
from .routes.vote_routes import vote_router
from .routes.voter_routes import router as voter_router
from .storage import MemoryStorage, Storage

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


# ==============================================================================
# STORAGE & LEDGER
# ==============================================================================
def build_storage(backend: str = STORAGE_BACKEND) -> Storage:
    if backend == "memory":
        return MemoryStorage()
    if backend == "mongo":
        from .storage_mongo import MongoStorage
        return MongoStorage()
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")


async def sync_ledger_candidates(storage: Storage, ledger: Ledger) -> None:
    """Register every stored candidate on the ledger."""
    for candidate in await storage.list_candidates():
        try:
            await ledger.add_candidate(candidate.id, candidate.name, candidate.party_name, candidate.party_logo)
        except LedgerError as e:
            logger.warning(f"Candidate {candidate.id} not registered on ledger: {e.message}")


# ==============================================================================
# FASTAPI APPLICATION
# ==============================================================================
def create_app(storage: Optional[Storage] = None, ledger: Optional[Ledger] = None) -> FastAPI:
    """
    Build the API around a store and a ledger.
    Both default to the backends named in config; tests pass their own.
    """
    storage = storage or build_storage()
    ledger = ledger or build_ledger()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await storage.initialize()
        await ledger.initialize()
        await sync_ledger_candidates(storage, ledger)
        logger.info(f"Voting API ready ({type(storage).__name__}, {type(ledger).__name__})")
        yield
        await storage.close()

    app = FastAPI(title="EVOTE - Electronic Voting API", lifespan=lifespan)
    app.state.storage = storage
    app.state.ledger = ledger
    app.state.sessions = SessionRegistry()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} in {duration:.0f}ms")
        return response

    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(voter_router)
    app.include_router(candidate_router)
    app.include_router(vote_router)
    app.include_router(ledger_router)

    # --- General Endpoints ---

    @app.get("/", tags=["Root"])
    def read_root():
        return {"message": "Welcome to the EVOTE API"}

    @app.get("/health", tags=["Root"])
    async def health_check():
        return {"status": "healthy", "storage": type(storage).__name__}

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=204)

    return app


def run() -> None:
    import uvicorn
    uvicorn.run("evote.main:create_app", factory=True, host=HOST, port=PORT)


if __name__ == "__main__":
    run()
