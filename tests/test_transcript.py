import os
import tempfile
import unittest

from fair_dice.core.commitment import CommitRevealGenerator
from fair_dice.core.die import parse_dice
from fair_dice.estimators.exact import ExactEstimator
from fair_dice.core.protocol import JointDraw
from fair_dice.persistence import csv_io, serializer
from fair_dice.persistence.events import ProtocolEvent
from fair_dice.persistence.recorder import InMemoryRecorder


class TestTranscript(unittest.TestCase):
    """
    Tests for writing recorded protocol events to CSV: an observer reading the transcript back
    must be able to recheck the commitment from the revealed index and hex key.
    """

    def test_observer_can_verify_from_transcript(self):
        recorder = InMemoryRecorder()
        draw = JointDraw(5, recorder=recorder, label="computer_roll")
        draw.begin()
        draw.contribute(4)
        result = draw.finish()

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "transcript.csv")
            n = csv_io.append_transcript(recorder.events(), path, "g1", "2026-01-01T00:00:00+00:00")
            self.assertEqual(n, 4)
            rows = csv_io.read_transcript(path, game_id="g1")

        self.assertEqual([r["seq"] for r in rows], [0, 1, 2, 3])
        committed = next(r for r in rows if r["event_type"] == "Committed")
        revealed = next(r for r in rows if r["event_type"] == "Revealed")
        verified = next(r for r in rows if r["event_type"] == "Verified")
        key = bytes.fromhex(revealed["payload"]["key"])
        self.assertTrue(CommitRevealGenerator.verify(committed["payload"]["commitment"],
                                                     revealed["payload"]["index"], key))
        self.assertEqual(verified["payload"]["result"], result.result)
        self.assertEqual(verified["payload"]["announcement"], result.announcement())

    def test_recorder_keeps_protocol_order(self):
        recorder = InMemoryRecorder()
        for label in ("first_move", "computer_roll"):
            draw = JointDraw(1, recorder=recorder, label=label)
            draw.begin()
            draw.contribute(0)
            draw.finish()
        self.assertEqual(len(recorder), 8)
        self.assertEqual([e.event_type for e in recorder.events()[:4]],
                         ["Committed", "Contributed", "Revealed", "Verified"])
        self.assertEqual([e.label for e in recorder.of_type("Verified")], ["first_move", "computer_roll"])
        recorder.events().clear()
        self.assertEqual(len(recorder), 8)

    def test_append_keeps_single_header(self):
        events = [ProtocolEvent("x", "Committed", {"commitment": "ab"})]
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "t.csv")
            csv_io.append_transcript(events, path, "g1", "t")
            csv_io.append_transcript(events, path, "g2", "t")
            with open(path, encoding="utf-8") as f:
                lines = f.read().splitlines()
            self.assertEqual(lines[0], ",".join(csv_io.get_transcript_header()))
            self.assertEqual(len(lines), 3)
            self.assertEqual(len(csv_io.read_transcript(path, game_id="g2")), 1)

    def test_write_matrix(self):
        dice = parse_dice(["2,2,4,4,9,9", "1,1,6,6,8,8", "3,3,5,5,7,7"])
        matrix = ExactEstimator().compute_matrix(dice)
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "m.csv")
            csv_io.write_matrix(matrix, path)
            with open(path, encoding="utf-8") as f:
                lines = f.read().splitlines()
        self.assertEqual(len(lines), 1 + 9)
        self.assertIn('[2,2,4,4,9,9]","[1,1,6,6,8,8]",0.555556', lines[2])

    def test_serializer_hex_bytes(self):
        self.assertEqual(serializer.loads(serializer.dumps({"key": b"\x01\xff"})), {"key": "01ff"})


if __name__ == '__main__':
    unittest.main()
