import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest import mock

from fair_dice.core.die import parse_dice
from fair_dice.core.engine import GameEngine
from fair_dice.core.protocol import JointDraw
from fair_dice.core.commitment import CommitRevealGenerator
from fair_dice.persistence import csv_io
from UI import cli

TRIO = ["2,2,4,4,9,9", "1,1,6,6,8,8", "3,3,5,5,7,7"]


def scripted(*answers):
    it = iter(answers)
    return lambda prompt="": next(it)


class TestHelpTable(unittest.TestCase):

    def test_render(self):
        dice = parse_dice(TRIO)
        engine = GameEngine(dice)
        table = cli.render_help_table(engine.help_matrix(), dice)
        self.assertIn("55.56%", table)
        self.assertIn("44.44%", table)
        self.assertIn("[3,3,5,5,7,7]", table)
        self.assertIn(" - ", table)


class TestMain(unittest.TestCase):
    """
    End-to-end runs of the console game with scripted input, checking the exit codes:
    0 for a finished game or an exit, 1 for bad dice configuration.
    """

    def run_main(self, argv, input_fn):
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.main(argv, input_fn=input_fn)
        return code, out.getvalue()

    def test_full_game_exit_code_zero(self):
        code, out = self.run_main(TRIO, lambda prompt="": "0")
        self.assertEqual(code, 0)
        self.assertIn("HMAC=", out)
        self.assertIn("(mod 6)", out)
        self.assertTrue("win (" in out or "Tie (" in out)

    def test_help_then_invalid_then_valid(self):
        answers = ["?", "7", "abc", "0", "0", "0", "0"]
        code, out = self.run_main(TRIO, scripted(*answers))
        self.assertEqual(code, 0)
        self.assertIn("Probability of the win for the user", out)
        self.assertIn("Invalid selection.", out)

    def test_exit(self):
        code, out = self.run_main(TRIO, scripted("x"))
        self.assertEqual(code, 0)
        self.assertIn("Farewell", out)

    def test_too_few_dice(self):
        code, out = self.run_main(TRIO[:2], scripted())
        self.assertEqual(code, 1)
        self.assertIn("at least 3", out)

    def test_malformed_die(self):
        code, out = self.run_main(["1,2,3", "1,2,3,4,5,6", "2,3,4,5,6,7"], scripted())
        self.assertEqual(code, 1)
        self.assertIn("invalid dice config '1,2,3'", out)

    def test_bad_trials_rejected_before_any_draw(self):
        code, out = self.run_main(TRIO + ["--estimator", "monte_carlo", "--trials", "0"], scripted("?"))
        self.assertEqual(code, 1)
        self.assertIn("trials must be >= 1", out)
        self.assertNotIn("HMAC=", out)

    def test_transcript_written(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "out", "transcript.csv")
            code, _ = self.run_main(TRIO + ["--transcript", path, "--estimator", "monte_carlo", "--seed", "3"],
                                    lambda prompt="": "1")
            self.assertEqual(code, 0)
            rows = csv_io.read_transcript(path)
        self.assertEqual(len([r for r in rows if r["event_type"] == "Verified"]), 3)
        self.assertEqual(rows[-1]["event_type"], "RoundEnded")

    def test_verification_failure_exit_code_one(self):
        class CheatingGenerator(CommitRevealGenerator):
            def reveal(self):
                index, key = super().reveal()
                return (index + 1) % (self.max_value + 1), key

        real_init = JointDraw.__init__

        def cheating_init(draw, max_value, generator=None, **kwargs):
            real_init(draw, max_value, generator=CheatingGenerator(max_value), **kwargs)

        with mock.patch.object(JointDraw, "__init__", cheating_init):
            code, out = self.run_main(TRIO, lambda prompt="": "0")
        self.assertEqual(code, 1)
        self.assertIn("Commitment verification failed", out)
        self.assertNotIn("roll result", out)


if __name__ == '__main__':
    unittest.main()
