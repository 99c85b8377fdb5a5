import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from main import main, play
from trichromino.engine.session import Session


class PlayTests(unittest.TestCase):
    def test_hint_on_empty_game_is_reported(self) -> None:
        out = io.StringIO()
        play(Session.empty(2, 2), io.StringIO("hint\nright\nquit\n"), out)
        text = out.getvalue()
        self.assertIn("Cannot hint", text)
        self.assertIn("Cannot right", text)

    def test_unknown_command(self) -> None:
        out = io.StringIO()
        play(Session.empty(2, 2), io.StringIO("jump\n"), out)
        self.assertIn("Unknown command 'jump'", out.getvalue())


class MainTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store_dir = Path(self._tmp.name) / "games"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def run_main(self, *argv: str) -> str:
        out = io.StringIO()
        with redirect_stdout(out):
            main([*argv, "--store-dir", str(self.store_dir), "--log-level", "WARNING"])
        return out.getvalue()

    def test_saving_a_board_without_pieces(self) -> None:
        text = self.run_main("--height", "1", "--width", "2", "--save")
        self.assertIn("Nothing to save", text)
        self.assertEqual(list(self.store_dir.glob("*.json")), [])

    def test_save_then_list(self) -> None:
        text = self.run_main("--height", "6", "--width", "6", "--seed", "4", "--save")
        self.assertIn("Saved as", text)
        listing = self.run_main("--list")
        self.assertEqual(len(listing.split()), 1)


if __name__ == "__main__":
    unittest.main()
