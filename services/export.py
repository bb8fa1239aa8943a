"""CSV rendering for the in-memory reading log."""

from __future__ import annotations

import csv
import io
from typing import Iterable

from models.records import Reading

CSV_HEADER = ("Timestamp", "Temperature (°C)")
CSV_FILENAME = "temperature-log.csv"


def render_csv(readings: Iterable[Reading]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for reading in readings:
        writer.writerow(
            (reading.timestamp.isoformat().replace("+00:00", "Z"), reading.temperature)
        )
    return buffer.getvalue()
