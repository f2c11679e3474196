import random

from .base import WinProbabilityEstimator, Comparison
from . import register_estimator


@register_estimator("monte_carlo")
class MonteCarloEstimator(WinProbabilityEstimator):
    """
    Samples independent face indices for both dice `trials` times.
    Uses a non-cryptographic RNG; pass a seed (or an rng) for reproducible tables.
    """
    def __init__(self, trials=5000, seed=None, rng=None):
        """
        Args:
            trials (int): Sample batch size per compare() call (>= 1).
            seed (int|None): Seed for a private random.Random.
            rng: Optional random.Random instance; takes precedence over seed.
        """
        if trials < 1:
            raise ValueError("trials must be >= 1")
        self.trials = trials
        self.rng = rng or random.Random(seed)

    def compare(self, die_a, die_b):
        wins_a = wins_b = ties = 0
        n_a = len(die_a.faces)
        n_b = len(die_b.faces)
        for _ in range(self.trials):
            fa = die_a.face(self.rng.randrange(n_a))
            fb = die_b.face(self.rng.randrange(n_b))
            if fa > fb:
                wins_a += 1
            elif fb > fa:
                wins_b += 1
            else:
                ties += 1
        return Comparison(wins_a, wins_b, ties)

    @classmethod
    def from_config(cls, config, rng=None):
        trials = config.trials_per_pair if config is not None else 5000
        seed = config.rng_seed if config is not None else None
        return cls(trials=trials, seed=seed, rng=rng)
