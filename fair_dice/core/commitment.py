"""
commitment.py
Implements the commit-reveal generator: the house draws a secret index, publishes an HMAC commitment,
and later reveals the index and key so anyone can verify the commitment.
Related modules:
- protocol.py: Wraps a generator into a joint draw with an external contribution.
- errors.py: InvalidStateError for lifecycle misuse.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple, Union

from .errors import InvalidStateError

KEY_BYTES = 32
DRAW_BITS = 256

RandomBytes = Callable[[int], bytes]


@dataclass(frozen=True)
class Secret:
    """
    The hidden part of a draw.
    Fields:
        key (bytes): 256-bit HMAC key.
        index (int): Drawn value in [0, max].
    """
    key: bytes = field(repr=False)
    index: int = field(repr=False)


@dataclass(frozen=True)
class Uncommitted:
    pass


@dataclass(frozen=True)
class Committed:
    commitment: str


@dataclass(frozen=True)
class Revealed:
    commitment: str
    index: int
    key: bytes


GeneratorState = Union[Uncommitted, Committed, Revealed]


def generate_key(random_bytes: RandomBytes = secrets.token_bytes) -> bytes:
    return random_bytes(KEY_BYTES)


def generate_index(max_value: int, random_bytes: RandomBytes = secrets.token_bytes) -> int:
    """
    Draw an integer uniformly from [0, max_value] by rejection sampling.
    A 256-bit draw r is accepted only when r < floor(2**256 / range) * range, so the
    final r % range has no modulo bias.
    Args:
        max_value (int): Inclusive upper bound.
        random_bytes (callable): Source of cryptographically secure bytes.
    Returns:
        int: Uniform value in [0, max_value].
    """
    span = max_value + 1
    threshold = ((1 << DRAW_BITS) // span) * span
    while True:
        r = int.from_bytes(random_bytes(DRAW_BITS // 8), "big")
        if r < threshold:
            return r % span


def compute_hmac(index: int, key: bytes) -> str:
    """HMAC-SHA3-256 of the decimal string of index, keyed by key, as lowercase hex."""
    return hmac.new(key, str(index).encode("ascii"), hashlib.sha3_256).hexdigest()


class CommitRevealGenerator:
    """
    Single-use commit-reveal generator for one draw in [0, max].
    State flows Uncommitted -> Committed -> Revealed; each transition replaces the state
    with a new immutable value and illegal transitions raise InvalidStateError.
    Until reveal() the secret lives only in a private attribute; Committed carries the commitment alone.
    """
    def __init__(self, max_value: int, random_bytes: RandomBytes = secrets.token_bytes):
        """
        Args:
            max_value (int): Inclusive upper bound of the draw range.
            random_bytes (callable): CSPRNG byte source, injectable for tests.
        Raises:
            ValueError: If max_value is not a non-negative integer.
        """
        if isinstance(max_value, bool) or not isinstance(max_value, int) or max_value < 0:
            raise ValueError("max_value must be a non-negative integer")
        self.max_value = max_value
        self._random_bytes = random_bytes
        self._state: GeneratorState = Uncommitted()
        self._secret: Optional[Secret] = None

    @property
    def state(self) -> GeneratorState:
        return self._state

    def commit(self) -> str:
        """
        Draw the secret and return its commitment (64 hex characters).
        Raises:
            InvalidStateError: If this generator has already committed.
        """
        if not isinstance(self._state, Uncommitted):
            raise InvalidStateError("generator has already committed")
        key = generate_key(self._random_bytes)
        index = generate_index(self.max_value, self._random_bytes)
        commitment = compute_hmac(index, key)
        self._secret = Secret(key=key, index=index)
        self._state = Committed(commitment=commitment)
        return commitment

    def reveal(self) -> Tuple[int, bytes]:
        """
        Return (index, key) used for the commitment. Idempotent once revealed.
        Raises:
            InvalidStateError: If called before commit().
        """
        if isinstance(self._state, Uncommitted):
            raise InvalidStateError("cannot reveal before commit")
        if isinstance(self._state, Committed):
            self._state = Revealed(commitment=self._state.commitment,
                                   index=self._secret.index, key=self._secret.key)
        return self._state.index, self._state.key

    @property
    def commitment(self) -> str:
        if isinstance(self._state, Uncommitted):
            raise InvalidStateError("no commitment yet")
        return self._state.commitment

    @staticmethod
    def verify(commitment: str, index: int, key: bytes) -> bool:
        """
        Recompute the HMAC over index with key and compare it to commitment.
        A False result means the reveal does not match and must be treated as fatal.
        """
        expected = compute_hmac(index, key)
        return hmac.compare_digest(expected.encode("utf-8"), commitment.encode("utf-8"))
