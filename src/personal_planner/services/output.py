"""
Output service for planner exports and reports.

Writes the pretty-printed JSON backup and a flat daily CSV report.
"""

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from personal_planner.services.planner_store import PlannerStore
from personal_planner.utils.parameters import OutputConfig

logger = logging.getLogger(__name__)

DAILY_COLUMNS = [
    "date",
    "weight",
    "sleep_hours",
    "energy",
    "water_glasses",
    "checks_done",
    "checks_total",
    "workout_key",
    "workout_completed",
]


class OutputService:
    """
    Service for writing planner data to output files.

    Handles the JSON backup and the daily CSV report.
    """

    def __init__(self, config: OutputConfig) -> None:
        """
        Initialize output service.

        Args:
            config: Output configuration.
        """
        self.config = config
        self.output_dir = Path(config.dir)

    def write_export(self, store: PlannerStore, path: Path | None = None) -> Path:
        """
        Write the full document as pretty-printed JSON.

        Args:
            store: Store holding the document.
            path: Optional target path (defaults to the configured export file).

        Returns:
            Path written.
        """
        export_path = path or self.output_dir / self.config.export_json
        export_path.parent.mkdir(parents=True, exist_ok=True)

        with open(export_path, "w", encoding="utf-8") as f:
            f.write(store.export_json())
            f.write("\n")

        logger.info(f"Wrote planner export to {export_path}")
        return export_path

    def build_daily_rows(self, store: PlannerStore) -> list[dict[str, Any]]:
        """
        Flatten daily entries into report rows, oldest first.

        Args:
            store: Store holding the document.

        Returns:
            One row per daily entry.
        """
        rows: list[dict[str, Any]] = []

        for date_key in sorted(store.document.daily):
            entry = store.document.daily[date_key]
            visible_ids = {item.id for item in store.checklist_for_date(date_key)}
            rows.append(
                {
                    "date": date_key,
                    "weight": entry.weight,
                    "sleep_hours": entry.sleep_hours,
                    "energy": entry.energy,
                    "water_glasses": entry.water_glasses,
                    "checks_done": sum(
                        1 for item_id, done in entry.checks.items()
                        if done and item_id in visible_ids
                    ),
                    "checks_total": len(visible_ids),
                    "workout_key": store.workout_key_for(date_key).value,
                    "workout_completed": store.is_workout_completed(date_key),
                }
            )

        return rows

    def write_daily_csv(self, store: PlannerStore, path: Path | None = None) -> Path | None:
        """
        Write the daily report to CSV.

        Args:
            store: Store holding the document.
            path: Optional target path (defaults to the configured CSV file).

        Returns:
            Path written, or None if there are no daily entries.
        """
        rows = self.build_daily_rows(store)
        if not rows:
            logger.warning("No daily entries to write")
            return None

        csv_path = path or self.output_dir / self.config.daily_csv
        csv_path.parent.mkdir(parents=True, exist_ok=True)

        df = pd.DataFrame(rows, columns=DAILY_COLUMNS)
        df.to_csv(csv_path, index=False, encoding="utf-8")

        logger.info(f"Wrote {len(rows)} daily rows to {csv_path}")
        return csv_path
