import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

from cluegrid.core.constants import GameStatus, PuzzleStatus
from cluegrid.core.exceptions import PuzzleLoadError
from cluegrid.core.models import Crosser, MainWord, Puzzle, SessionState
from cluegrid.engine.game import GameController
from cluegrid.engine.session import GameSession
from cluegrid.engine.stats import StatsTracker
from cluegrid.io.puzzle_client import PuzzleClient, load_puzzle_file, puzzle_from_payload
from cluegrid.io.session_store import SessionStore
from cluegrid.io.stats_store import StatsStore
from cluegrid.io.storage import MemoryStorage
from cluegrid.utils.pretty import format_board, generate_share_text, puzzle_number
import main as cli


def beach_puzzle() -> Puzzle:
    return Puzzle(
        id="beach",
        date="2024-01-15",
        main_word=MainWord(text="BEACH", row=2, col=0),
        rows=6,
        cols=5,
        crossers=[
            Crosser("c1", "SHELL", "A hard outer covering found on the shore", 0, 1, 2),
            Crosser("c2", "CRAB", "A crustacean that walks sideways", 0, 2, 2),
            Crosser("c3", "OCEAN", "A vast body of salt water", 1, 3, 1),
        ],
        theme="At the beach",
    )


def fixed_clock():
    return datetime(2024, 1, 15, 9, tzinfo=timezone.utc)


def guess(session: GameSession, word: str, target: str = "main"):
    session.select_target(target)
    for letter in word:
        session.append_letter(letter)
    return session.submit_guess()


class ControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = MemoryStorage()

    def controller(self, client=None) -> GameController:
        stats = StatsTracker(StatsStore(self.backend), clock=fixed_clock)
        return GameController(SessionStore(self.backend), stats, client=client)

    def test_load_valid_puzzle(self) -> None:
        controller = self.controller()
        self.assertTrue(controller.load(puzzle=beach_puzzle()))
        self.assertTrue(controller.has_puzzle)
        self.assertIsNone(controller.error)
        self.assertTrue(controller.warnings)
        self.assertEqual(controller.session.status, GameStatus.PLAYING)

    def test_invalid_geometry_is_refused(self) -> None:
        puzzle = beach_puzzle()
        puzzle.crossers[0] = Crosser("c1", "SHALL", "", 0, 1, 2)
        controller = self.controller()
        with self.assertLogs("cluegrid.engine.game", level="ERROR"):
            self.assertFalse(controller.load(puzzle=puzzle))
        self.assertIsNone(controller.session)
        self.assertIn("Letter mismatch", controller.error)

    def test_fetch_failure_then_retry(self) -> None:
        client = MagicMock()
        client.fetch.side_effect = [PuzzleLoadError("Puzzle request failed: timeout"), beach_puzzle()]
        controller = self.controller(client=client)

        self.assertFalse(controller.load(date="2024-01-15"))
        self.assertIn("timeout", controller.error)
        self.assertTrue(controller.retry())
        self.assertEqual(controller.session.puzzle.id, "beach")
        self.assertEqual(client.fetch.call_count, 2)
        client.fetch.assert_called_with("2024-01-15")

    def test_fetch_defaults_to_today(self) -> None:
        client = MagicMock()
        client.fetch.return_value = beach_puzzle()
        controller = self.controller(client=client)
        self.assertTrue(controller.load())
        client.fetch.assert_called_once_with("2024-01-15")

    def test_no_source_is_a_load_error(self) -> None:
        controller = self.controller()
        self.assertFalse(controller.load())
        self.assertIn("No puzzle source", controller.error)

    def test_resumed_win_is_not_counted_twice(self) -> None:
        controller = self.controller()
        controller.load(puzzle=beach_puzzle())
        outcome = guess(controller.session, "BEACH")
        self.assertEqual(outcome.status, GameStatus.WON)
        self.assertIn("first_win", [badge.id for badge in outcome.badges])
        self.assertEqual(controller.stats.stats.games_played, 1)

        resumed = self.controller()
        self.assertTrue(resumed.load(puzzle=beach_puzzle()))
        self.assertEqual(resumed.session.status, GameStatus.WON)
        self.assertEqual(resumed.pending_badges, [])
        self.assertEqual(resumed.stats.stats.games_played, 1)

    def test_unrecorded_finished_game_is_recorded_on_load(self) -> None:
        store = SessionStore(self.backend)
        store.save(SessionState(puzzle_id="beach", status=GameStatus.WON, main_guess_count=1))

        controller = self.controller()
        self.assertTrue(controller.load(puzzle=beach_puzzle()))
        self.assertEqual(controller.stats.stats.games_won, 1)
        self.assertEqual(controller.stats.stats.guess_distribution[1], 1)
        self.assertIn("first_win", [badge.id for badge in controller.pending_badges])
        self.assertTrue(store.load("beach").stats_recorded)

        again = self.controller()
        again.load(puzzle=beach_puzzle())
        self.assertEqual(again.stats.stats.games_won, 1)

    def test_reset_needs_a_session(self) -> None:
        controller = self.controller()
        self.assertFalse(controller.reset())
        controller.load(puzzle=beach_puzzle())
        guess(controller.session, "CRANE")
        self.assertTrue(controller.reset())
        self.assertEqual(controller.session.state.guesses, ())


class PuzzleClientTests(unittest.TestCase):
    @patch("cluegrid.io.puzzle_client.requests.get")
    def test_fetch_parses_payload(self, mock_get) -> None:
        response = MagicMock()
        response.json.return_value = {"puzzle": beach_puzzle().to_jsonable()}
        mock_get.return_value = response

        client = PuzzleClient(base_url="http://api.test/")
        puzzle = client.fetch("2024-01-15", bust_cache=True)

        mock_get.assert_called_once_with(
            "http://api.test/api/puzzle/2024-01-15", params={"bust": "1"}, timeout=10.0
        )
        self.assertEqual(puzzle.main_word.text, "BEACH")
        self.assertEqual([crosser.id for crosser in puzzle.crossers], ["c1", "c2", "c3"])
        self.assertEqual(puzzle.theme, "At the beach")

    @patch("cluegrid.io.puzzle_client.requests.get")
    def test_network_error_becomes_load_error(self, mock_get) -> None:
        mock_get.side_effect = requests.ConnectionError("connection refused")
        client = PuzzleClient(base_url="http://api.test")
        with self.assertRaises(PuzzleLoadError):
            client.fetch("2024-01-15")

    @patch("cluegrid.io.puzzle_client.requests.get")
    def test_non_json_body_becomes_load_error(self, mock_get) -> None:
        response = MagicMock()
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response
        with self.assertRaises(PuzzleLoadError):
            PuzzleClient(base_url="http://api.test").fetch("2024-01-15")

    def test_base_url_from_environment(self) -> None:
        with patch.dict(os.environ, {"CLUEGRID_API_URL": "http://env.test/"}):
            self.assertEqual(PuzzleClient().base_url, "http://env.test")
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(PuzzleLoadError):
                PuzzleClient()

    def test_admin_shaped_payload(self) -> None:
        payload = {
            "id": "draft-1",
            "date": "2024-02-01",
            "mainWord": "beach",
            "mainWordRow": 2,
            "mainWordCol": 0,
            "gridRows": 6,
            "gridCols": 5,
            "status": "draft",
            "crossers": [
                {
                    "id": "c1",
                    "word": "shell",
                    "clue": "Shore covering",
                    "startPosition": {"row": 0, "col": 1},
                    "intersectionIndex": 2,
                }
            ],
        }
        puzzle = puzzle_from_payload(payload)
        self.assertEqual(puzzle.main_word, MainWord(text="BEACH", row=2, col=0))
        self.assertEqual((puzzle.rows, puzzle.cols), (6, 5))
        self.assertEqual(puzzle.status, PuzzleStatus.DRAFT)
        self.assertEqual(puzzle.crossers[0].word, "SHELL")
        self.assertEqual(puzzle.crossers[0].start_row, 0)

    def test_malformed_payload(self) -> None:
        with self.assertRaises(PuzzleLoadError):
            puzzle_from_payload({"puzzle": {"id": "x"}})
        with self.assertRaises(PuzzleLoadError):
            puzzle_from_payload(["not", "an", "object"])

    def test_wrongly_typed_nested_objects(self) -> None:
        good = beach_puzzle().to_jsonable()
        broken = [
            dict(good, crossers=["oops"]),
            dict(good, gridSize="6x5"),
            dict(good, crossers=[dict(good["crossers"][0], startRow=None, startPosition="0,1")]),
            dict(good, crossers="c1"),
        ]
        for payload in broken:
            with self.assertRaises(PuzzleLoadError):
                puzzle_from_payload({"puzzle": payload})

    def test_undecodable_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.json"
            path.write_bytes(b'{"id": "\xff\xfe"}')
            with self.assertRaises(PuzzleLoadError):
                load_puzzle_file(path)
            out = io.StringIO()
            with redirect_stdout(out):
                code = cli.main(["validate", str(path)])
        self.assertEqual(code, 2)
        self.assertTrue(out.getvalue().startswith("error:"))

    def test_controller_reports_malformed_fetch(self) -> None:
        client = MagicMock()
        client.fetch.side_effect = lambda date: puzzle_from_payload({"puzzle": {"id": "x", "date": date, "gridSize": 3}})
        backend = MemoryStorage()
        controller = GameController(
            SessionStore(backend), StatsTracker(StatsStore(backend), clock=fixed_clock), client=client
        )
        self.assertFalse(controller.load(date="2024-01-15"))
        self.assertIsNone(controller.session)
        self.assertIn("Malformed puzzle payload", controller.error)


class ShareTextTests(unittest.TestCase):
    def test_puzzle_number_counts_from_epoch(self) -> None:
        self.assertEqual(puzzle_number("2024-01-01"), 1)
        self.assertEqual(puzzle_number("2024-01-15"), 15)
        self.assertEqual(puzzle_number("not a date"), 0)

    def test_win_share_text(self) -> None:
        session = GameSession(beach_puzzle())
        guess(session, "SHELL", "c1")
        guess(session, "CRANE")
        guess(session, "BEACH")
        lines = generate_share_text(session.puzzle, session.state).splitlines()
        self.assertEqual(lines[0], "Cluegrid #15 2/6")
        self.assertEqual(lines[-1], "Crossers: 1/3")
        self.assertEqual(len([line for line in lines[1:-1] if line]), 2)
        self.assertNotIn("BEACH", "\n".join(lines))

    def test_loss_share_text(self) -> None:
        session = GameSession(beach_puzzle())
        for _ in range(6):
            guess(session, "CRANE")
        self.assertTrue(generate_share_text(session.puzzle, session.state).startswith("Cluegrid #15 X/6"))

    def test_board_hides_unsolved_letters(self) -> None:
        session = GameSession(beach_puzzle())
        hidden = format_board(session.puzzle, session.state)
        self.assertNotIn("B", hidden)
        self.assertIn("B", format_board(session.puzzle, reveal_all=True))


class CliTests(unittest.TestCase):
    def test_validate_command(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "beach.json"
            path.write_text(json.dumps({"puzzle": beach_puzzle().to_jsonable()}), encoding="utf-8")
            out = io.StringIO()
            with redirect_stdout(out):
                code = cli.main(["validate", str(path)])
        self.assertEqual(code, 0)
        self.assertTrue(json.loads(out.getvalue())["valid"])

    def test_stats_and_grace_save_commands(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            out = io.StringIO()
            with redirect_stdout(out):
                self.assertEqual(cli.main(["--store-dir", tmp, "stats"]), 0)
                self.assertEqual(cli.main(["--store-dir", tmp, "grace-save"]), 1)
        self.assertIn("Played: 0", out.getvalue())
        self.assertIn("No grace save available.", out.getvalue())

    def test_play_without_loaded_puzzle(self) -> None:
        backend = MemoryStorage()
        controller = GameController(SessionStore(backend), StatsTracker(StatsStore(backend)))
        controller.load()
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.run_play(controller, read=lambda prompt: self.fail("should not prompt"))
        self.assertEqual(code, 2)
        self.assertIn("No puzzle source configured", out.getvalue())

    def test_play_loop_until_win(self) -> None:
        backend = MemoryStorage()
        controller = GameController(
            SessionStore(backend), StatsTracker(StatsStore(backend), clock=fixed_clock)
        )
        controller.load(puzzle=beach_puzzle())
        answers = iter([":select c1", "shell", ":main", "beac", "beach"])
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.run_play(controller, read=lambda prompt: next(answers))
        self.assertEqual(code, 0)
        text = out.getvalue()
        self.assertIn("Revealed E at column 1", text)
        self.assertIn("Not enough letters", text)
        self.assertIn("Cluegrid #15 1/6", text)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
