from itertools import product

from .base import WinProbabilityEstimator, Comparison
from . import register_estimator


@register_estimator("exact")
class ExactEstimator(WinProbabilityEstimator):
    """
    Enumerates all 36 ordered face pairs, each with weight 1/36. Deterministic and free of sampling noise.
    """
    def compare(self, die_a, die_b):
        wins_a = wins_b = ties = 0
        for fa, fb in product(die_a.faces, die_b.faces):
            if fa > fb:
                wins_a += 1
            elif fb > fa:
                wins_b += 1
            else:
                ties += 1
        return Comparison(wins_a, wins_b, ties)
