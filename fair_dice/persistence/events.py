"""
events.py
The single record type written by the draw protocol and the game engine.
One event per protocol step (Committed, Contributed, Revealed, Verified) and per game step
(RoundStarted, DieChosen, RollResolved, RoundEnded).
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class ProtocolEvent:
    """
    Fields:
        label (str): Draw or round that produced the event ('first_move', 'computer_roll', 'round', ...).
        event_type (str): Step name.
        payload (dict): Step data. Bytes values are written as hex by serializer.py.
    """
    label: str
    event_type: str
    payload: Dict[str, Any] = field(default_factory=dict)
