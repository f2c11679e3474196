from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..core.die import Die, DiceSet

Matrix = Dict[Tuple[str, str], Optional[float]]


@dataclass(frozen=True)
class Comparison:
    """
    Outcome counts of die A against die B.
    Fields:
        wins_a (int): Comparisons where A showed the higher face.
        wins_b (int): Comparisons where B showed the higher face.
        ties (int): Comparisons with equal faces.
    """
    wins_a: int
    wins_b: int
    ties: int

    @property
    def total(self) -> int:
        return self.wins_a + self.wins_b + self.ties

    @property
    def win_rate(self) -> float:
        """Probability of A beating B, with ties counted in the denominator."""
        return self.wins_a / self.total if self.total else 0.0


class WinProbabilityEstimator(ABC):
    """
    Abstract base class for pairwise win-probability estimators.
    Estimators must implement compare(a, b); compute_matrix builds the help table from it.
    """

    @abstractmethod
    def compare(self, die_a: Die, die_b: Die) -> Comparison:
        """
        Compare two dice.
        Args:
            die_a (Die): Row die.
            die_b (Die): Column die.
        Returns:
            Comparison: Win/loss/tie counts for die_a.
        """
        raise NotImplementedError

    @classmethod
    def from_config(cls, config, rng=None):
        """Build an estimator from a GameConfig. Deterministic estimators ignore both arguments."""
        return cls()

    def compute_matrix(self, dice_set: DiceSet) -> Matrix:
        """
        Probability of each die beating each other die, keyed by (name_a, name_b) in display order.
        Each cell comes from a single compare() call. Diagonal cells are None.
        """
        items = dice_set.items()
        matrix: Matrix = {}
        for name_a, die_a in items:
            for name_b, die_b in items:
                if name_a == name_b:
                    matrix[(name_a, name_b)] = None
                else:
                    matrix[(name_a, name_b)] = self.compare(die_a, die_b).win_rate
        return matrix
