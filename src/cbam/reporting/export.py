"""CSV export of batch findings."""

from __future__ import annotations

import io
from typing import Mapping

from src.cbam.rules.batch import findings_frame
from src.cbam.rules.findings import EntryValidationResult


def findings_csv_bytes(results: Mapping[str, EntryValidationResult]) -> bytes:
    """Render one CSV row per finding (header only when there are none)."""

    buffer = io.StringIO()
    findings_frame(results).to_csv(buffer, index=False)
    return buffer.getvalue().encode("utf-8")


__all__ = ["findings_csv_bytes"]
