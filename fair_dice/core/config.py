"""
config.py
Defines the GameConfig dataclass, which centralizes the numeric constraints and estimator options for a fair dice game.
Related modules:
- die.py: Uses GameConfig for the minimum number of dice (the face count is fixed by FACES_PER_DIE).
- engine.py: Uses GameConfig to build the help matrix and seed the computer's die choice.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GameConfig:
    """
    Centralizes all rule options and numeric constraints for a fair dice game.
    Fields:
        min_dice (int): Minimum number of dice required to play.
        estimator (str): Win-probability estimator name ("exact" or "monte_carlo").
        trials_per_pair (int): Sample batch size per cell for the Monte-Carlo estimator.
        rng_seed (int|None): Seed for the non-cryptographic RNG (estimator, computer's die pick).
    """
    min_dice: int = 3
    estimator: str = "exact"
    trials_per_pair: int = 5000
    # never used by the commit-reveal draws, which always read the CSPRNG
    rng_seed: Optional[int] = None
