"""
Integration test suite for the TreeBot chess engine.

Tests components working together end-to-end:
- Full game simulations (bot vs bot)
- Table reuse across turns of one match
- Engine wrapper
- UCI protocol integration
- FastAPI REST API integration
- Terminal front end
"""

import io
from unittest.mock import patch

import chess
import pytest

from treebot.config import CONFIG, Config, SearchConfig
from treebot.core.search import SearchEngine
from treebot.core.timer import TurnTimer
from treebot.main import Engine


def make_config(max_depth=1, time_limit_ms=2000, seed=None):
    return Config(search=SearchConfig(max_depth=max_depth, time_limit_ms=time_limit_ms, seed=seed))


# ════════════════════════════════════════════════════════════════════════════
#  BOT VS BOT: GAME SIMULATIONS
# ════════════════════════════════════════════════════════════════════════════


class TestGames:
    def test_bot_vs_bot_plays_legal_moves(self):
        """Two bots alternate for a few dozen plies; every move is legal."""
        white = SearchEngine(config=make_config(seed=1))
        black = SearchEngine(config=make_config(seed=2))
        board = chess.Board()
        plies = 0

        while not board.is_game_over() and plies < 16:
            engine = white if board.turn == chess.WHITE else black
            move = engine.think(board, TurnTimer())
            assert move in board.legal_moves, f"Illegal move {move} at ply {plies}"
            board.push(move)
            plies += 1

        assert plies == 16 or board.is_game_over()

    def test_bot_converts_mate_in_one_from_midgame(self):
        board = chess.Board("r1bqkb1r/pppp1ppp/2n2n2/4p2Q/2B1P3/8/PPPP1PPP/RNB1K1NR w KQkq - 4 4")
        engine = SearchEngine(config=make_config(max_depth=1, time_limit_ms=None))
        move = engine.think(board, TurnTimer())
        board.push(move)
        assert board.is_checkmate()

    def test_bot_answers_every_opponent_move(self):
        """A scripted opponent plays; the bot always has a legal reply."""
        engine = SearchEngine(config=make_config(seed=3))
        board = chess.Board()
        for uci in ("e2e4", "d2d4", "g1f3", "f1c4"):
            move = chess.Move.from_uci(uci)
            if move not in board.legal_moves:
                move = min(board.legal_moves, key=chess.Move.uci)
            board.push(move)
            reply = engine.think(board, TurnTimer())
            assert reply in board.legal_moves
            board.push(reply)


# ════════════════════════════════════════════════════════════════════════════
#  TABLE REUSE ACROSS TURNS
# ════════════════════════════════════════════════════════════════════════════


class TestTableReuse:
    def test_table_is_kept_between_turns(self):
        engine = SearchEngine(config=make_config(max_depth=1, time_limit_ms=None, seed=0))
        board = chess.Board()
        sizes = []
        for _ in range(4):
            board.push(engine.think(board))
            sizes.append(len(engine.store))
        assert sizes == sorted(sizes)
        assert sizes[0] > 0

    def test_position_seen_as_child_is_already_known(self):
        engine = SearchEngine(config=make_config(max_depth=1, time_limit_ms=None, seed=0))
        board = chess.Board()
        engine.think(board)
        board.push_uci("e2e4")
        node = engine.root_node(board)
        assert node is not None
        assert node.transitions

    def test_repeated_thinking_never_loses_the_mate(self):
        engine = SearchEngine(config=make_config(max_depth=2, time_limit_ms=None, seed=0))
        board = chess.Board("6k1/5ppp/8/8/8/8/8/R3K3 w - - 0 1")
        mate = chess.Move.from_uci("a1a8")
        for _ in range(3):
            assert engine.think(board) == mate


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE WRAPPER
# ════════════════════════════════════════════════════════════════════════════


class TestEngineWrapper:
    def test_full_exchange_via_wrapper(self):
        engine = Engine(config=make_config(seed=4))
        assert engine.make_move("e2e4") is True
        move, value = engine.get_best_move()
        assert isinstance(value, float)
        assert engine.make_move(move) is True

    def test_wrapper_rejects_invalid_move(self):
        engine = Engine(config=make_config())
        assert engine.make_move("e2e5") is False
        assert engine.make_move("garbage") is False

    def test_game_over_returns_none(self):
        engine = Engine(fen="rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 0 1",
                        config=make_config())
        assert engine.get_best_move() is None

    def test_undo_move_takes_back_one_ply(self):
        engine = Engine(config=make_config())
        assert engine.undo_move() is False
        engine.make_move("e2e4")
        engine.make_move("e7e5")
        assert engine.undo_move() is True
        assert engine.board.move_history == ["e2e4"]
        assert engine.board.board.peek() == chess.Move.from_uci("e2e4")

    def test_new_game_drops_table(self):
        engine = Engine(config=make_config())
        engine.get_best_move()
        assert len(engine.search.store) > 0
        engine.new_game()
        assert len(engine.search.store) == 0
        assert engine.board.get_fen() == chess.STARTING_FEN


# ════════════════════════════════════════════════════════════════════════════
#  UCI PROTOCOL INTEGRATION
# ════════════════════════════════════════════════════════════════════════════


class TestUCIIntegration:
    """Tests UCI protocol parsing and state management."""

    def _make_uci(self):
        from interface.uci import UCI

        self.out = io.StringIO()
        return UCI(out=self.out)

    def test_uci_handshake(self):
        uci = self._make_uci()
        assert uci.handle("uci") is True
        assert uci.handle("isready") is True
        lines = self.out.getvalue().splitlines()
        assert lines[0] == f"id name {CONFIG.ui.engine_name}"
        assert "uciok" in lines
        assert lines[-1] == "readyok"

    def test_quit_stops_loop(self):
        uci = self._make_uci()
        assert uci.handle("quit") is False

    def test_unknown_and_empty_commands_ignored(self):
        uci = self._make_uci()
        assert uci.handle("") is True
        assert uci.handle("setoption name Hash value 64") is True

    def test_position_startpos(self):
        uci = self._make_uci()
        uci._parse_position(["startpos"])
        assert uci.board.fen() == chess.STARTING_FEN

    def test_position_startpos_moves(self):
        uci = self._make_uci()
        uci._parse_position(["startpos", "moves", "e2e4", "e7e5"])
        expected = chess.Board()
        expected.push_uci("e2e4")
        expected.push_uci("e7e5")
        assert uci.board.fen() == expected.fen()
        assert len(uci.board.move_stack) == 2

    def test_position_fen_with_moves(self):
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
        uci = self._make_uci()
        uci._parse_position(["fen"] + fen.split() + ["moves", "e7e5"])
        expected = chess.Board(fen)
        expected.push_uci("e7e5")
        assert uci.board.fen() == expected.fen()

    def test_position_invalid_fen_keeps_board(self):
        uci = self._make_uci()
        uci._parse_position(["startpos", "moves", "e2e4"])
        old_fen = uci.board.fen()
        uci._parse_position(["fen", "invalid", "fen", "string"])
        assert uci.board.fen() == old_fen

    def test_position_illegal_moves_stop(self):
        uci = self._make_uci()
        uci._parse_position(["startpos", "moves", "e2e4", "e2e4", "d7d5"])
        expected = chess.Board()
        expected.push_uci("e2e4")
        assert uci.board.fen() == expected.fen()

    def test_go_parsing(self):
        uci = self._make_uci()
        params = uci._parse_go(["wtime", "60000", "btime", "30000", "winc", "100",
                                "movestogo", "10", "depth", "3"])
        assert params == {"wtime": 60000, "btime": 30000, "winc": 100,
                          "movestogo": 10, "depth": 3}
        assert uci._parse_go(["infinite"]) == {"infinite": 1}
        assert uci._parse_go(["movetime", "abc"]) == {}

    def test_time_limit_per_side(self):
        uci = self._make_uci()
        params = {"wtime": 60_000, "btime": 20_000, "movestogo": 20}
        assert uci._time_limit(params) == min(3000, CONFIG.search.time_limit_ms)
        uci._parse_position(["startpos", "moves", "e2e4"])
        assert uci._time_limit(params) == min(1000, CONFIG.search.time_limit_ms)

    def test_time_limit_movetime_and_infinite(self):
        uci = self._make_uci()
        assert uci._time_limit({"movetime": 250}) == 250
        assert uci._time_limit({"infinite": 1}) is None

    def test_go_prints_legal_bestmove(self):
        uci = self._make_uci()
        uci.handle("position startpos moves e2e4")
        uci.handle("go depth 1 movetime 3000")
        lines = self.out.getvalue().splitlines()
        assert lines[-2].startswith("info depth")
        assert lines[-1].startswith("bestmove ")
        move = chess.Move.from_uci(lines[-1].split()[1])
        assert move in uci.board.legal_moves

    def test_ucinewgame_clears_table(self):
        uci = self._make_uci()
        uci.handle("go depth 1 movetime 3000")
        assert len(uci.engine.store) > 0
        uci.handle("ucinewgame")
        assert len(uci.engine.store) == 0
        assert uci.board.fen() == chess.STARTING_FEN


# ════════════════════════════════════════════════════════════════════════════
#  REST API INTEGRATION
# ════════════════════════════════════════════════════════════════════════════


class TestAPIIntegration:
    def setup_method(self):
        from fastapi.testclient import TestClient
        from interface.api import app

        self.client = TestClient(app)
        self.client.post("/reset")

    def test_get_board_initial(self):
        data = self.client.get("/board").json()
        assert data["fen"] == chess.STARTING_FEN
        assert data["turn"] == "white"
        assert len(data["legal_moves"]) == 20
        assert data["is_game_over"] is False
        assert data["result"] is None

    def test_post_move_valid(self):
        resp = self.client.post("/move", json={"move": "e2e4"})
        assert resp.status_code == 200
        assert resp.json()["move"] == "e2e4"
        assert self.client.get("/board").json()["turn"] == "black"

    def test_post_move_illegal(self):
        assert self.client.post("/move", json={"move": "e2e5"}).status_code == 400

    def test_post_move_invalid_format(self):
        assert self.client.post("/move", json={"move": "zz"}).status_code == 400

    def test_set_position_valid(self):
        fen = "6k1/5ppp/8/8/8/8/8/R3K3 w - - 0 1"
        resp = self.client.post("/position", json={"fen": fen})
        assert resp.status_code == 200
        assert resp.json()["fen"] == fen

    def test_set_position_invalid(self):
        assert self.client.post("/position", json={"fen": "bogus"}).status_code == 400

    def test_search_returns_move(self):
        resp = self.client.post("/search", json={"depth": 1, "time_limit_ms": 3000})
        assert resp.status_code == 200
        data = resp.json()
        assert data["best_move"] in data["best_moves"]
        assert chess.Move.from_uci(data["best_move"]) in chess.Board().legal_moves

    def test_search_null_time_limit_is_unlimited(self):
        from interface import api

        resp = self.client.post("/search", json={"depth": 1, "time_limit_ms": None})
        assert resp.status_code == 200
        assert api.engine.time_limit_ms is None

    def test_search_omitted_time_limit_uses_config(self):
        from interface import api

        assert self.client.post("/search", json={"depth": 1}).status_code == 200
        assert api.engine.time_limit_ms == CONFIG.search.time_limit_ms

    def test_search_zero_time_limit_is_kept(self):
        from interface import api

        resp = self.client.post("/search", json={"depth": 1, "time_limit_ms": 0})
        assert resp.status_code == 200
        assert api.engine.time_limit_ms == 0
        assert chess.Move.from_uci(resp.json()["best_move"]) in chess.Board().legal_moves

    def test_search_finds_mate(self):
        self.client.post("/position", json={"fen": "6k1/5ppp/8/8/8/8/8/R3K3 w - - 0 1"})
        data = self.client.post("/search", json={"depth": 1, "time_limit_ms": 3000}).json()
        assert data["best_move"] == "a1a8"
        assert data["complete"] is True
        assert data["score"] > 1000

    def test_search_game_over_returns_400(self):
        self.client.post("/position", json={
            "fen": "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 0 1"})
        assert self.client.post("/search", json={"depth": 1}).status_code == 400

    def test_reset_board(self):
        self.client.post("/move", json={"move": "e2e4"})
        resp = self.client.post("/reset")
        assert resp.json()["fen"] == chess.STARTING_FEN


# ════════════════════════════════════════════════════════════════════════════
#  TERMINAL FRONT END
# ════════════════════════════════════════════════════════════════════════════


class TestCLI:
    @pytest.fixture(autouse=True)
    def shallow_search(self, monkeypatch):
        monkeypatch.setattr(CONFIG.search, "max_depth", 1)
        monkeypatch.setattr(CONFIG.search, "time_limit_ms", 2000)

    def test_human_move_then_engine_reply(self, capsys):
        from interface.cli import main

        with patch("builtins.input", side_effect=["e2e4", "quit"]):
            main([])
        out = capsys.readouterr().out
        assert "Engine plays:" in out
        assert "Game Over" in out

    def test_illegal_move_is_reported(self, capsys):
        from interface.cli import main

        with patch("builtins.input", side_effect=["e2e5", "quit"]):
            main([])
        assert "Illegal move, try again." in capsys.readouterr().out

    def test_undo_takes_back_full_move(self, capsys):
        from interface.cli import main

        with patch("builtins.input", side_effect=["undo", "e2e4", "undo", "quit"]):
            main([])
        out = capsys.readouterr().out
        assert "Nothing to take back." in out
        assert "Engine plays:" in out
        assert "Move taken back." in out
