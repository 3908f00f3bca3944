"""FastAPI REST interface for the engine.

Serve with any ASGI server, e.g. ``uvicorn interface.api:app``.
"""

import threading

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Optional

from treebot.config import CONFIG
from treebot.core.search import SearchEngine, SearchError
from treebot.core.timer import TurnTimer

app = FastAPI(title=CONFIG.ui.engine_name, version="1.3.0")

# Shared engine instance (keeps the position store across requests for one match).
engine = SearchEngine()
board = chess.Board()
_board_lock = threading.Lock()


class FenRequest(BaseModel):
    fen: str


class MoveRequest(BaseModel):
    move: str  # UCI format e.g. "e2e4"


class SearchRequest(BaseModel):
    depth: Optional[int] = None
    time_limit_ms: Optional[int] = None


@app.get("/board")
def get_board():
    with _board_lock:
        return {
            "fen": board.fen(),
            "turn": "white" if board.turn == chess.WHITE else "black",
            "legal_moves": [m.uci() for m in board.legal_moves],
            "is_game_over": board.is_game_over(),
            "result": board.result() if board.is_game_over() else None,
        }


@app.post("/position")
def set_position(req: FenRequest):
    with _board_lock:
        try:
            board.set_fen(req.fen)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid FEN: {e}")
        engine.new_match()
        return {"fen": board.fen()}


@app.post("/move")
def make_move(req: MoveRequest):
    with _board_lock:
        try:
            move = chess.Move.from_uci(req.move)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid UCI move: {req.move}")
        if move not in board.legal_moves:
            raise HTTPException(status_code=400, detail=f"Illegal move: {req.move}")
        board.push(move)
        return {"fen": board.fen(), "move": req.move}


@app.post("/search")
def search_move(req: SearchRequest = SearchRequest()):
    with _board_lock:
        if board.is_game_over():
            raise HTTPException(status_code=400, detail="Game is already over")
        engine.max_depth = req.depth if req.depth is not None else CONFIG.search.max_depth
        # an explicit null asks for an unlimited search
        if "time_limit_ms" in req.model_fields_set:
            engine.time_limit_ms = req.time_limit_ms
        else:
            engine.time_limit_ms = CONFIG.search.time_limit_ms
        try:
            best = engine.think(board, TurnTimer())
        except SearchError as e:
            raise HTTPException(status_code=500, detail=str(e))
        root = engine.root_node(board)
        return {
            "best_move": best.uci(),
            "best_moves": sorted(m.uci() for m in root.best_moves),
            "score": root.value,
            "complete": root.is_search_complete,
            "fen": board.fen(),
        }


@app.post("/reset")
def reset_board():
    with _board_lock:
        board.reset()
        engine.new_match()
        return {"fen": board.fen()}
