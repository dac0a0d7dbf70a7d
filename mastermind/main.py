'''
Mastermind 1A2B API

Endpoints:
POST /games                  -> start a round under a new game id
GET  /games/{id}             -> read the round (secret only shown after a win)
POST /games/{id}/guess       -> submit raw guess text
POST /games/{id}/reset       -> abandon the round and start a new one

Each game id is one storage key in round_snapshots (DBRoundStore), so a
reload of the UI picks the round back up.
'''

import logging
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware

from .config import APP_ENV, DEBUG_SECRET, LOG_LEVEL, SECRET_SOURCE
from .db import get_db                  # SQLAlchemy Session dependency
from .repository import DBRoundStore    # DB-backed round store
from .bootstrap_db import create_all    # dev-only: create tables
from .persistence import check_key
from .random_client import secret_source
from .session import GameSession, log_secret

from .schemas import (
    GameState,
    GuessRequest,
    SubmitResult,
)

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# Looked up per request, so tests can monkeypatch a fixed secret
generate_code = secret_source(SECRET_SOURCE)

app = FastAPI(title="Mastermind 1A2B API", version="1.0.0")

# Allow everything in dev so the docs and front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

if DEBUG_SECRET:
    logger.warning("MASTERMIND_DEBUG_SECRET is on: secrets will be logged at DEBUG level")

# --- Dev convenience: auto-create tables locally ---
if APP_ENV == "local":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()

# Per-request store bound to the current DB session and game id
def get_store(game_id: str, db = Depends(get_db)) -> DBRoundStore:
    try:
        check_key(game_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Game not found")
    store = DBRoundStore(db, key=game_id)
    if not store.exists():
        raise HTTPException(status_code=404, detail="Game not found")
    return store

def _session_for(store: DBRoundStore) -> GameSession:
    return GameSession(
        store,
        generate=generate_code,
        on_secret=log_secret if DEBUG_SECRET else None,
    )

# ---------------- Routes ----------------

@app.post("/games", response_model=GameState, summary="Start a new round")
def start_game(db = Depends(get_db)) -> GameState:
    game_id = str(uuid4())
    view = _session_for(DBRoundStore(db, key=game_id)).start_new_round()
    return GameState(game_id=game_id, **view.model_dump())

@app.get("/games/{game_id}", response_model=GameState, summary="Get the current round")
def get_game(store: DBRoundStore = Depends(get_store)) -> GameState:
    # An unreadable snapshot is replaced by a fresh round here
    view = _session_for(store).ensure_round()
    return GameState(game_id=store.key, **view.model_dump())

@app.post("/games/{game_id}/guess", response_model=SubmitResult, summary="Submit a guess")
def submit_guess(
    payload: GuessRequest,
    store: DBRoundStore = Depends(get_store),
) -> SubmitResult:
    # Rejections (bad input, finished round) are a normal 200 with status="rejected"
    session = _session_for(store)
    session.ensure_round()
    return session.submit_guess(payload.guess)

@app.post("/games/{game_id}/reset", response_model=GameState, summary="Start over with a new secret")
def reset_game(store: DBRoundStore = Depends(get_store)) -> GameState:
    # load first so an unfinished round is logged as abandoned
    session = _session_for(store)
    session.ensure_round()
    view = session.start_new_round()
    return GameState(game_id=store.key, **view.model_dump())
