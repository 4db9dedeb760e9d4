import io
import random
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from roadquiz.app.cli import main, play_run
from roadquiz.app.game import QuizGame
from roadquiz.config.config import GameConfig
from roadquiz.progress.kv import MemoryStore
from roadquiz.questions.bank import QuestionBank

from support import make_questions


def run_cli(*argv: str):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        code = main(list(argv))
    return code, out.getvalue(), err.getvalue()


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = self._tmp.name

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_version(self) -> None:
        code, out, _ = run_cli("--version")
        self.assertEqual(code, 0)
        self.assertIn("roadquiz", out)

    def test_stages_listing(self) -> None:
        code, out, _ = run_cli("stages", "--data-dir", self.data_dir, "--chapter", "2")
        self.assertEqual(code, 0)
        self.assertIn("boss", out)
        self.assertIn("review", out)

    def test_unlock_all_requires_dev(self) -> None:
        code, _, err = run_cli("unlock-all", "--data-dir", self.data_dir)
        self.assertEqual(code, 2)
        self.assertIn("--dev", err)
        code, _, _ = run_cli("unlock-all", "--data-dir", self.data_dir, "--dev")
        self.assertEqual(code, 0)
        code, out, _ = run_cli("progress", "--data-dir", self.data_dir)
        self.assertEqual(code, 0)
        self.assertIn("chapter 5, stage 105", out)

    def test_reset(self) -> None:
        run_cli("unlock-all", "--data-dir", self.data_dir, "--dev")
        code, _, _ = run_cli("reset", "--data-dir", self.data_dir)
        self.assertEqual(code, 0)
        _, out, _ = run_cli("progress", "--data-dir", self.data_dir)
        self.assertIn("chapter 1, stage 1", out)

    def test_bank_summary_uses_bundled_questions(self) -> None:
        code, out, _ = run_cli("bank", "--data-dir", self.data_dir)
        self.assertEqual(code, 0)
        self.assertIn("questions", out)

    def test_empty_wrong_review(self) -> None:
        code, _, err = run_cli("review", "--data-dir", self.data_dir, "--mode", "wrong")
        self.assertEqual(code, 1)
        self.assertIn("No questions available", err)

    def test_locked_stage(self) -> None:
        code, _, err = run_cli("play", "--data-dir", self.data_dir, "--stage", "5")
        self.assertEqual(code, 2)
        self.assertIn("locked", err)

    def test_bad_ratio(self) -> None:
        code, _, err = run_cli("review", "--data-dir", self.data_dir, "--mode", "full", "--ratio", "x")
        self.assertEqual(code, 2)
        self.assertIn("chapter=ratio", err)


class PlayRunTests(unittest.TestCase):
    def test_scripted_run(self) -> None:
        game = QuizGame(GameConfig(), MemoryStore(), bank=QuestionBank(make_questions(3)), rng=random.Random(5))
        engine = game.start_run(stage=1)
        lines = []
        replies = iter(["h", "h", "9", "right"])

        def ask(prompt: str) -> str:
            reply = next(replies, "right")
            if reply != "right":
                return reply
            for line in reversed(lines):
                if line.endswith(". right"):
                    return line.strip().split(".", 1)[0]
            raise AssertionError("no options shown")

        play_run(engine, game, ask=ask, inform=lines.append)
        self.assertTrue(engine.state.is_complete)
        self.assertEqual(engine.state.correctly_answered_count, 3)
        self.assertEqual(engine.state.hints_used_this_run, 1)
        self.assertEqual(lines.count("Hint: kw"), 2)
        summary = game.finish_run(engine)
        self.assertTrue(summary.unlocked)


if __name__ == "__main__":
    unittest.main()
