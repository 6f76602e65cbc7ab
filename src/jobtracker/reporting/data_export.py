"""JSON / CSV export of the job collection."""

from __future__ import annotations

import csv
import io
import json
import logging
from pathlib import Path
from typing import Sequence

from jobtracker.models import Job

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv")


def export_json(jobs: Sequence[Job]) -> str:
    return json.dumps([job.to_record() for job in jobs], indent=2)


def export_csv(jobs: Sequence[Job]) -> str:
    """CSV with one row per job; empty string when there are no jobs."""
    if not jobs:
        return ""
    rows = [job.to_record() for job in jobs]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=list(rows[0].keys()), lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue()


def export_to_file(
    jobs: Sequence[Job],
    output_dir: str | Path,
    fmt: str = "json",
) -> Path:
    """Write an export file and return its path.

    *fmt* is ``"json"`` or ``"csv"``.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt!r}")
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if fmt == "csv":
        content = export_csv(jobs)
    else:
        content = export_json(jobs)

    dest = output_dir / f"jobs_export.{fmt}"
    dest.write_text(content, encoding="utf-8")
    logger.info("Exported %d job(s) as %s to %s.", len(jobs), fmt.upper(), dest)
    return dest
