"""
csv_io.py
Persistence utilities for writing draw transcripts and win-probability matrices to CSV files.
"""

import os
import csv
from typing import Any, Dict, Iterable, List, Optional

from .events import ProtocolEvent
from . import serializer

TRANSCRIPT_HEADER = ["game_id", "timestamp", "seq", "label", "event_type", "payload"]
MATRIX_HEADER = ["die_a", "die_b", "probability"]


def append_rows_to_csv(rows: List[Dict[str, Any]], csv_path: str, header: List[str]):
    write_header = not os.path.exists(csv_path)
    with open(csv_path, "a", newline='', encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=header)
        if write_header:
            writer.writeheader()
        for row in rows:
            writer.writerow(row)


def event_rows(events: Iterable[ProtocolEvent], game_id: str, timestamp: str) -> List[Dict[str, Any]]:
    return [
        {
            "game_id": game_id,
            "timestamp": timestamp,
            "seq": seq,
            "label": ev.label,
            "event_type": ev.event_type,
            "payload": serializer.dumps(ev.payload),
        }
        for seq, ev in enumerate(events)
    ]


def append_transcript(events: Iterable[ProtocolEvent], csv_path: str, game_id: str, timestamp: str) -> int:
    """
    Append recorded events to a transcript CSV, creating it with a header if missing.
    Returns:
        int: Number of rows written.
    """
    rows = event_rows(events, game_id, timestamp)
    append_rows_to_csv(rows, csv_path, TRANSCRIPT_HEADER)
    return len(rows)


def read_transcript(csv_path: str, game_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Read transcript rows back, decoding the payload column. Optionally filter by game_id."""
    with open(csv_path, newline='', encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    out = []
    for row in rows:
        if game_id is not None and row["game_id"] != game_id:
            continue
        row["seq"] = int(row["seq"])
        row["payload"] = serializer.loads(row["payload"])
        out.append(row)
    return out


def write_matrix(matrix: Dict[tuple, Optional[float]], csv_path: str):
    """Write a pairwise probability matrix, one row per ordered pair. Diagonal cells are left empty."""
    with open(csv_path, "w", newline='', encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=MATRIX_HEADER)
        writer.writeheader()
        for (a, b), p in matrix.items():
            writer.writerow({"die_a": a, "die_b": b, "probability": "" if p is None else f"{p:.6f}"})


def get_transcript_header():
    return TRANSCRIPT_HEADER.copy()
