"""
die.py
Defines the Die value type, the insertion-ordered DiceSet registry and the parsing of
command-line dice tokens.
Related modules:
- estimators: Compare dice from a DiceSet.
- engine.py: Resolves a drawn face index to a face value.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Tuple

from .config import GameConfig
from .errors import ConfigurationError, DieNotFoundError, DuplicateNameError

FACES_PER_DIE = 6

_FACE_RE = re.compile(r"^-?\d+$")


@dataclass(frozen=True)
class Die:
    """
    An immutable die with exactly six signed integer faces.
    Args:
        faces (tuple[int]): Face values in display order.
    """
    faces: Tuple[int, ...]

    def __post_init__(self):
        faces = tuple(self.faces)
        if len(faces) != FACES_PER_DIE:
            raise ConfigurationError(f"a die must have exactly {FACES_PER_DIE} faces, got {len(faces)}")
        if not all(isinstance(f, int) and not isinstance(f, bool) for f in faces):
            raise ConfigurationError("die faces must be integers")
        object.__setattr__(self, "faces", faces)

    def face(self, index: int) -> int:
        """
        Return the face value at position index (0-5).
        Raises:
            IndexError: If index is outside [0, 5]. Negative indexes are not accepted.
        """
        if not 0 <= index < len(self.faces):
            raise IndexError(f"face index {index} out of range 0..{len(self.faces) - 1}")
        return self.faces[index]

    def __str__(self) -> str:
        return ",".join(str(f) for f in self.faces)


class DiceSet:
    """
    Named registry of dice. Iteration order is insertion order, which defines the
    numbering shown in selection menus and the help table.
    """
    def __init__(self):
        self._dice: Dict[str, Die] = {}

    def add(self, name: str, die: Die) -> None:
        if name in self._dice:
            raise DuplicateNameError(f"die named {name!r} already exists")
        self._dice[name] = die

    def get(self, name: str) -> Die:
        try:
            return self._dice[name]
        except KeyError:
            raise DieNotFoundError(f"no die named {name!r}") from None

    def names(self) -> List[str]:
        return list(self._dice)

    def name_at(self, index: int) -> str:
        """Display-order name lookup; raises IndexError when out of range."""
        names = self.names()
        if not 0 <= index < len(names):
            raise IndexError(f"die index {index} out of range 0..{len(names) - 1}")
        return names[index]

    def items(self) -> List[Tuple[str, Die]]:
        return list(self._dice.items())

    def __contains__(self, name) -> bool:
        return name in self._dice

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._dice))

    def __len__(self) -> int:
        return len(self._dice)


def parse_die(token: str) -> Die:
    """
    Parse a token of exactly six comma-separated signed decimal integers, e.g. "2,2,4,4,9,9".
    Raises:
        ConfigurationError: If the token is malformed.
    """
    parts = token.split(",")
    if len(parts) != FACES_PER_DIE or not all(_FACE_RE.match(p) for p in parts):
        raise ConfigurationError(
            f"invalid dice config '{token}'. Must be {FACES_PER_DIE} comma-separated integers."
        )
    return Die(tuple(int(p) for p in parts))


def parse_dice(tokens: Sequence[str], config: GameConfig = None) -> DiceSet:
    """
    Build a DiceSet from command-line tokens. Each die is named "[<token>]".
    Args:
        tokens (list[str]): Dice tokens.
        config (GameConfig, optional): Supplies the minimum number of dice.
    Returns:
        DiceSet: Dice in argument order.
    Raises:
        ConfigurationError: Too few tokens, a malformed token or a repeated token.
    """
    config = config or GameConfig()
    if len(tokens) < config.min_dice:
        raise ConfigurationError(f"at least {config.min_dice} dice configurations required, got {len(tokens)}")
    dice = [parse_die(t) for t in tokens]
    dice_set = DiceSet()
    for token, die in zip(tokens, dice):
        try:
            dice_set.add(f"[{token}]", die)
        except DuplicateNameError as e:
            raise ConfigurationError(f"dice config '{token}' given more than once") from e
    return dice_set
