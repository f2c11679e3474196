"""
engine.py
Implements the GameEngine class, which sequences a round of the non-transitive dice game:
a fair coin draw for the first move, die selection, one fair roll per side, and the winner.
Related modules:
- protocol.py: JointDraw runs each commit-reveal draw.
- die.py: DiceSet holds the dice; Die resolves a drawn index to a face value.
- estimators: Build the win-probability matrix shown as help.
"""

import logging
import random
import secrets
from typing import Optional, Tuple

from .config import GameConfig
from .die import DiceSet
from .protocol import JointDraw, DrawResult
from .commitment import RandomBytes
from ..estimators import choose_estimator
from ..persistence.events import ProtocolEvent
from ..persistence.recorder import InMemoryRecorder

logger = logging.getLogger(__name__)

USER = "user"
COMPUTER = "computer"

COIN_MAX = 1
ROLL_MAX = 5


class IllegalMoveError(Exception):
    """
    Raised when a game step is attempted in the wrong phase or with an invalid die choice.
    """
    pass


class GameEngine:
    """
    State machine for one round. Phases:
    NOT_STARTED -> FIRST_MOVE -> SELECTION -> COMPUTER_ROLL -> USER_ROLL -> ENDED.
    The engine never blocks: callers show each commitment, collect the player's number,
    and pass it back in.
    """
    def __init__(self, dice_set: DiceSet, config: Optional[GameConfig] = None,
                 rng: Optional[random.Random] = None,
                 random_bytes: RandomBytes = secrets.token_bytes,
                 recorder: Optional[InMemoryRecorder] = None):
        """
        Args:
            dice_set (DiceSet): Dice to choose from (at least two).
            config (GameConfig, optional): Game configuration.
            rng (random.Random, optional): Non-cryptographic RNG for the computer's die pick.
            random_bytes (callable): CSPRNG for every commit-reveal draw.
            recorder (InMemoryRecorder, optional): Event sink; a fresh one is created if omitted.
        """
        if len(dice_set) < 2:
            raise ValueError("at least two dice are needed to play")
        self.config = config or GameConfig()
        self.dice_set = dice_set
        self.rng = rng or random.Random(self.config.rng_seed)
        self._random_bytes = random_bytes
        self.recorder = recorder if recorder is not None else InMemoryRecorder()
        self.status = "NOT_STARTED"
        self.first_player: Optional[str] = None
        self.user_die: Optional[str] = None
        self.computer_die: Optional[str] = None
        self.rolls = {}
        self._draw: Optional[JointDraw] = None
        self._matrix = None

    def _emit(self, event_type: str, **payload):
        logger.debug("round %s %s", event_type, payload)
        self.recorder.record(ProtocolEvent(label="round", event_type=event_type, payload=payload))

    def _require(self, status: str):
        if self.status != status:
            raise IllegalMoveError(f"expected phase {status}, game is in {self.status}")

    def help_matrix(self):
        """
        Win-probability matrix for the help table, computed once and cached.
        Sampling estimators get their own RNG from config.rng_seed, so the computer's die pick
        does not depend on whether help was shown.
        Raises:
            ValueError: If the estimator settings are invalid (unknown name, trials < 1).
        """
        if self._matrix is None:
            estimator = choose_estimator(self.config.estimator, config=self.config)
            self._matrix = estimator.compute_matrix(self.dice_set)
        return self._matrix

    # first move

    def start_first_move(self) -> str:
        """Commit to a coin value in 0..1 and return the commitment."""
        self._require("NOT_STARTED")
        self._emit("RoundStarted", dice=self.dice_set.names())
        self._draw = JointDraw(COIN_MAX, recorder=self.recorder, label="first_move",
                               random_bytes=self._random_bytes)
        self.status = "FIRST_MOVE"
        return self._draw.begin()

    def resolve_first_move(self, guess: int) -> DrawResult:
        """
        Fix the player's guess, reveal and verify. The user moves first when (guess + index) is even.
        Raises:
            VerificationError: If the reveal does not match the commitment.
        """
        self._require("FIRST_MOVE")
        self._draw.contribute(guess)
        draw = self._draw.finish()
        self.first_player = USER if draw.result == 0 else COMPUTER
        self._emit("FirstMoveDecided", first=self.first_player)
        self.status = "SELECTION"
        return draw

    # die selection

    def available_dice(self):
        """Names the user may still pick, in display order."""
        return [n for n in self.dice_set.names() if n != self.computer_die]

    def computer_choose_first(self) -> str:
        """When the computer moves first it picks a die at random."""
        self._require("SELECTION")
        if self.first_player != COMPUTER or self.computer_die is not None:
            raise IllegalMoveError("computer does not choose first in this round")
        self.computer_die = self.rng.choice(self.dice_set.names())
        self._emit("DieChosen", player=COMPUTER, die=self.computer_die)
        return self.computer_die

    def choose_user_die(self, name: str) -> Tuple[str, str]:
        """
        Record the user's die. If the user moved first, the computer then takes the first
        remaining die in display order.
        Returns:
            tuple: (user_die, computer_die).
        """
        self._require("SELECTION")
        if self.first_player == COMPUTER and self.computer_die is None:
            raise IllegalMoveError("computer has not chosen its die yet")
        if name not in self.available_dice():
            raise IllegalMoveError(f"die {name!r} is not available")
        self.user_die = name
        self._emit("DieChosen", player=USER, die=name)
        if self.computer_die is None:
            self.computer_die = next(n for n in self.dice_set.names() if n != name)
            self._emit("DieChosen", player=COMPUTER, die=self.computer_die)
        self.status = "COMPUTER_ROLL"
        return self.user_die, self.computer_die

    # rolls

    def roller(self) -> str:
        """Whose roll is in progress: the computer rolls first, then the user."""
        if self.status == "COMPUTER_ROLL":
            return COMPUTER
        if self.status == "USER_ROLL":
            return USER
        raise IllegalMoveError(f"no roll in phase {self.status}")

    def start_roll(self) -> str:
        """Commit to a face index in 0..5 for the current roll and return the commitment."""
        side = self.roller()
        if self._draw is not None and self._draw.commitment is not None and self._draw.label == f"{side}_roll":
            raise IllegalMoveError(f"{side} roll already committed")
        self._draw = JointDraw(ROLL_MAX, recorder=self.recorder, label=f"{side}_roll",
                               random_bytes=self._random_bytes)
        return self._draw.begin()

    def resolve_roll(self, contribution: int) -> Tuple[DrawResult, int]:
        """
        Fix the player's number, reveal, verify and resolve the face.
        Returns:
            tuple: (DrawResult, face value).
        Raises:
            VerificationError: If the reveal does not match; no face is resolved.
        """
        side = self.roller()
        if self._draw is None or self._draw.label != f"{side}_roll":
            raise IllegalMoveError(f"{side} roll has not been committed")
        self._draw.contribute(contribution)
        draw = self._draw.finish()
        die_name = self.computer_die if side == COMPUTER else self.user_die
        value = self.dice_set.get(die_name).face(draw.result)
        self.rolls[side] = value
        self._emit("RollResolved", player=side, die=die_name, face_index=draw.result, value=value)
        self.status = "USER_ROLL" if side == COMPUTER else "ENDED"
        if self.status == "ENDED":
            self._emit("RoundEnded", winner=self.winner(), computer=self.rolls[COMPUTER], user=self.rolls[USER])
        return draw, value

    def is_terminal(self) -> bool:
        return self.status == "ENDED"

    def winner(self) -> Optional[str]:
        """'computer', 'user', or None on a tie."""
        self._require("ENDED")
        c, u = self.rolls[COMPUTER], self.rolls[USER]
        if c > u:
            return COMPUTER
        if u > c:
            return USER
        return None
