"""
protocol.py
Implements the joint draw: a committed house secret combined with an externally supplied contribution
by modular addition, so that neither party alone controls the result.
Related modules:
- commitment.py: CommitRevealGenerator supplies the commitment and the reveal.
- engine.py: Runs one joint draw for the first move and one per roll.
- persistence/recorder.py: Optional sink for the protocol events.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from .commitment import CommitRevealGenerator, RandomBytes
from .errors import InvalidStateError, VerificationError
from ..persistence.events import ProtocolEvent

logger = logging.getLogger(__name__)


def combine(index: int, contribution: int, modulus: int) -> int:
    """
    Combine the house index and the external contribution.
    For a fixed index, contribution -> result is a bijection on [0, modulus).
    """
    return (index + contribution) % modulus


@dataclass(frozen=True)
class DrawResult:
    """
    Everything an observer needs to recheck one joint draw.
    Fields:
        commitment (str): Hex HMAC published before the contribution.
        index (int): Revealed house index.
        key (bytes): Revealed HMAC key.
        contribution (int): External contribution.
        modulus (int): Size of the draw range (max + 1).
        result (int): (index + contribution) mod modulus.
    """
    commitment: str
    index: int
    key: bytes
    contribution: int
    modulus: int
    result: int

    @property
    def key_hex(self) -> str:
        return self.key.hex()

    def announcement(self) -> str:
        return f"{self.index} + {self.contribution} = {self.result} (mod {self.modulus})"


def verify_draw(draw: DrawResult) -> bool:
    """Recheck a finished draw: the reveal must match the commitment and the arithmetic must hold."""
    if not CommitRevealGenerator.verify(draw.commitment, draw.index, draw.key):
        return False
    return draw.result == combine(draw.index, draw.contribution, draw.modulus)


class JointDraw:
    """
    One commit -> contribute -> reveal -> verify cycle over [0, max_value].
    The contribution must be fixed before the reveal; finish() refuses to run otherwise.
    """
    def __init__(self, max_value: int, generator: Optional[CommitRevealGenerator] = None,
                 recorder=None, label: str = "draw",
                 random_bytes: RandomBytes = secrets.token_bytes):
        """
        Args:
            max_value (int): Inclusive upper bound of both the secret and the contribution.
            generator (CommitRevealGenerator, optional): Unused generator; a fresh one is created if omitted.
            recorder (InMemoryRecorder, optional): Receives a ProtocolEvent per step.
            label (str): Name of this draw in recorded events.
            random_bytes (callable): CSPRNG for the fresh generator.
        """
        self.generator = generator or CommitRevealGenerator(max_value, random_bytes=random_bytes)
        if self.generator.max_value != max_value:
            raise ValueError("generator range does not match the draw range")
        self.max_value = max_value
        self.modulus = max_value + 1
        self.recorder = recorder
        self.label = label
        self._commitment: Optional[str] = None
        self._contribution: Optional[int] = None
        self._result: Optional[DrawResult] = None

    def _emit(self, event_type: str, **payload):
        logger.debug("%s %s %s", self.label, event_type, payload)
        if self.recorder is not None:
            self.recorder.record(ProtocolEvent(label=self.label, event_type=event_type, payload=payload))

    @property
    def commitment(self) -> Optional[str]:
        return self._commitment

    def begin(self) -> str:
        """Commit to the house secret and return the commitment to display."""
        self._commitment = self.generator.commit()
        self._emit("Committed", commitment=self._commitment, max=self.max_value)
        return self._commitment

    def contribute(self, contribution: int) -> None:
        """
        Fix the external contribution. Allowed once, after begin().
        Raises:
            InvalidStateError: Before begin() or on a second contribution.
            ValueError: If contribution is not an integer in [0, max_value].
        """
        if self._commitment is None:
            raise InvalidStateError("contribution solicited before the commitment was published")
        if self._contribution is not None:
            raise InvalidStateError("contribution already fixed")
        if isinstance(contribution, bool) or not isinstance(contribution, int):
            raise ValueError("contribution must be an integer")
        if not 0 <= contribution <= self.max_value:
            raise ValueError(f"contribution must be in 0..{self.max_value}")
        self._contribution = contribution
        self._emit("Contributed", contribution=contribution)

    def finish(self) -> DrawResult:
        """
        Reveal, verify and combine. Idempotent once finished.
        Raises:
            InvalidStateError: If the contribution has not been fixed.
            VerificationError: If the reveal does not reproduce the commitment.
        """
        if self._result is not None:
            return self._result
        if self._contribution is None:
            raise InvalidStateError("reveal requested before the contribution was fixed")
        index, key = self.generator.reveal()
        self._emit("Revealed", index=index, key=key)
        if not CommitRevealGenerator.verify(self._commitment, index, key):
            self._emit("VerificationFailed", commitment=self._commitment)
            raise VerificationError(
                f"{self.label}: revealed index {index} does not match commitment {self._commitment}"
            )
        result = combine(index, self._contribution, self.modulus)
        self._result = DrawResult(
            commitment=self._commitment,
            index=index,
            key=key,
            contribution=self._contribution,
            modulus=self.modulus,
            result=result,
        )
        self._emit("Verified", result=result, announcement=self._result.announcement())
        return self._result

    def run(self, solicit: Callable[[str], int]) -> DrawResult:
        """
        Run the full cycle. solicit receives the commitment and must return the contribution;
        it is the only blocking step and belongs to the caller.
        """
        commitment = self.begin()
        self.contribute(solicit(commitment))
        return self.finish()
