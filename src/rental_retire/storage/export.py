"""Export projection results to CSV and JSON."""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from pathlib import Path

from ..models import ExtendedKPIs, SimulationResult, YearRow


def export_csv(result: SimulationResult, path: Path | str) -> None:
    """Export the yearly projection table to CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = list(YearRow.__dataclass_fields__)

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for row in result.rows:
            writer.writerow(row.to_dict())


def export_json(
    result: SimulationResult,
    path: Path | str,
    extended: ExtendedKPIs | None = None,
) -> None:
    """Export parameters, rows, KPIs and optional analytics to JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "run_at": datetime.now(timezone.utc).isoformat(),
        **result.to_dict(),
        "extended_kpis": extended.to_dict() if extended else None,
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
