from __future__ import annotations

import logging
from typing import Dict, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from duckchess import __version__
from duckchess.config import EngineSettings
from duckchess.engine.board import STARTPOS_FEN
from duckchess.engine.errors import CapacityError, IllegalMoveError, UnmakeOrderError
from duckchess.engine.game import Game
from duckchess.engine.perft import perft as perft_nodes
from duckchess.engine.piece import NO_COLOR, color_name
from duckchess.search.service import SearchService

from .error import (
    engine_error_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore


logger = logging.getLogger(__name__)


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string; 'D' marks the duck")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Move text, e.g. e2e4, e7e8q or @d5")


class SearchRequest(BaseModel):
    engine: Optional[Literal["alphabeta", "mcts", "mixed"]] = None
    depth: Optional[int] = Field(default=None, ge=1, le=8)
    iterations: Optional[int] = Field(default=None, ge=1, le=200_000)
    movetime_ms: Optional[int] = Field(default=None, ge=1)
    seed: Optional[int] = None
    apply: bool = Field(default=False, description="Play the best move on the game")


class GameState(BaseModel):
    game_id: str
    fen: str
    turn: str
    duck_turn: bool
    ply: int
    legal_moves: list[str]
    game_over: bool
    winner: Optional[str]
    last_move: Optional[str]


class SearchResponse(BaseModel):
    best_move: Optional[str]
    score: Optional[int]
    engine: str
    nodes: int
    depth: int
    iterations: int
    ticks: int
    time_ms: int
    state: Optional[GameState] = None


class PerftRequest(BaseModel):
    fen: str = STARTPOS_FEN
    depth: int = Field(default=1, ge=0, le=4)


def _state(game_id: str, game: Game) -> GameState:
    board = game.board
    winner: Optional[str] = None
    if board.is_game_over:
        winner = "draw" if board.winner == NO_COLOR else color_name(board.winner)
    last = game.last_move
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        turn=color_name(board.turn_color),
        duck_turn=board.duck_turn,
        ply=board.ply,
        legal_moves=[m.to_uci() for m in game.legal_moves()],
        game_over=board.is_game_over,
        winner=winner,
        last_move=last.to_uci() if last is not None else None,
    )


def create_app(settings: Optional[EngineSettings] = None) -> FastAPI:
    app = FastAPI(title="Duck Chess Engine API", version=__version__)

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    for exc_type in (IllegalMoveError, UnmakeOrderError, CapacityError):
        app.add_exception_handler(exc_type, engine_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    service = SearchService(settings or EngineSettings.from_env())
    app.state.store = store
    app.state.search_service = service

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game() -> CreateGameResponse:
        game_id = store.create(Game.new())
        game = _require_game(store, game_id)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _state(game_id, _require_game(store, game_id))

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, bool]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"deleted": True}

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_game(store, game_id)
        try:
            game = Game.from_fen(req.fen)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"invalid FEN: {e}")
        store.set(game_id, game)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        game = _require_game(store, game_id)
        if game.is_game_over():
            raise HTTPException(status_code=409, detail="game is over")
        try:
            game.play(req.move)
        except IllegalMoveError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/search", response_model=SearchResponse)
    async def search(game_id: str, req: SearchRequest) -> SearchResponse:
        game = _require_game(store, game_id)
        res = service.search(
            game,
            engine=req.engine,
            depth=req.depth,
            iterations=req.iterations,
            movetime_ms=req.movetime_ms,
            seed=req.seed,
        )
        state = None
        if req.apply and res.best_move is not None:
            game.apply_move(res.best_move)
            state = _state(game_id, game)
        return SearchResponse(
            best_move=res.best_move.to_uci() if res.best_move else None,
            score=res.score,
            engine=res.engine,
            nodes=res.nodes,
            depth=res.depth,
            iterations=res.iterations,
            ticks=res.ticks,
            time_ms=res.time_ms,
            state=state,
        )

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        game = _require_game(store, game_id)
        try:
            game.undo_move()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state(game_id, game)

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            game = Game.from_fen(req.fen)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"invalid FEN: {e}")
        return {"depth": req.depth, "nodes": perft_nodes(game.board, req.depth)}

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game
