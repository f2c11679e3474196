"""
recorder.py
Collects the ProtocolEvent stream of a round so the draws can be rechecked after play.
GameEngine and JointDraw write here; csv_io.append_transcript reads it out to disk.
"""

from typing import List
from .events import ProtocolEvent


class InMemoryRecorder:
    """
    Append-only list of ProtocolEvent objects, in the order the protocol produced them.
    The sequence number written to the transcript is the position in this list.
    """
    def __init__(self):
        self._events: List[ProtocolEvent] = []

    def record(self, event: ProtocolEvent) -> None:
        self._events.append(event)

    def events(self) -> List[ProtocolEvent]:
        """Copy of every event so far."""
        return list(self._events)

    def of_type(self, event_type: str) -> List[ProtocolEvent]:
        """Events of one type, e.g. all 'Verified' draws of the round."""
        return [e for e in self._events if e.event_type == event_type]

    def __len__(self):
        return len(self._events)
