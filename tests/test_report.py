import math
import os
import tempfile
import unittest
from contextlib import redirect_stdout
import io

from fair_dice.core.die import parse_dice
from fair_dice.estimators.exact import ExactEstimator
from scripts import win_matrix_report as report

TRIO = ["2,2,4,4,9,9", "1,1,6,6,8,8", "3,3,5,5,7,7"]
LADDER = ["1,1,1,1,1,1", "2,2,2,2,2,2", "3,3,3,3,3,3"]


class TestWinMatrixReport(unittest.TestCase):
    """
    Tests for the report script: the matrix CSV and heatmap PNG are written to the data directory,
    and the cycle listing finds the classic non-transitive trio but nothing in a strict ladder of dice.
    """

    def test_run_report_writes_csv_and_png(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = io.StringIO()
            with redirect_stdout(out):
                matrix = report.run_report(TRIO, "exact", 5000, None, tmp)
            csv_path = os.path.join(tmp, "win_matrix.csv")
            png_path = os.path.join(tmp, "win_matrix.png")
            self.assertTrue(os.path.exists(csv_path))
            self.assertTrue(os.path.exists(png_path))
            self.assertGreater(os.path.getsize(png_path), 0)
            with open(csv_path, encoding="utf-8") as f:
                self.assertEqual(len(f.read().splitlines()), 1 + 9)
        self.assertEqual(len(matrix), 9)
        self.assertIn("Non-transitive cycle", out.getvalue())

    def test_trio_has_exactly_one_cycle(self):
        dice = parse_dice(TRIO)
        names = dice.names()
        cycles = report.non_transitive_cycles(ExactEstimator().compute_matrix(dice), names)
        self.assertEqual(cycles, [(names[0], names[1], names[2])])

    def test_ladder_has_no_cycle(self):
        dice = parse_dice(LADDER)
        cycles = report.non_transitive_cycles(ExactEstimator().compute_matrix(dice), dice.names())
        self.assertEqual(cycles, [])

    def test_grid_blank_diagonal(self):
        dice = parse_dice(LADDER)
        names = dice.names()
        grid = report.matrix_grid(ExactEstimator().compute_matrix(dice), names)
        for i in range(len(names)):
            self.assertTrue(math.isnan(grid[i][i]))
        self.assertEqual(grid[2][0], 1.0)
        self.assertEqual(grid[0][2], 0.0)


if __name__ == '__main__':
    unittest.main()
