"""
Planner store owning the current document.

Holds the single in-memory document, exposes the derived "today" views
that lazily extend it, and notifies subscribers after every committed
mutation. Persistence is one such subscriber.
"""

import json
import logging
from collections.abc import Callable
from datetime import date

from personal_planner.domain.defaults import WORKOUT_CHECKLIST_ID, default_document
from personal_planner.domain.planner import (
    ChecklistItem,
    DailyEntry,
    DayLog,
    ExerciseLog,
    PlannerDocument,
    Template,
    WorkoutKey,
    workout_key_for_date,
)
from personal_planner.infrastructure.storage.local_storage import StorageBackend
from personal_planner.services.normalizer import DocumentNormalizer
from personal_planner.utils.parameters import PlannerConfig, StorageConfig
from personal_planner.utils.timezone_utils import local_today, parse_iso_date

logger = logging.getLogger(__name__)

Listener = Callable[[PlannerDocument], None]


class PlannerStore:
    """
    Owner of the planner document.

    Constructed once per session and passed to every consumer. All reads
    of daily data go through ``ensure_today``/``ensure_workout_log``; all
    writes end with ``commit``.
    """

    def __init__(
        self,
        planner_config: PlannerConfig,
        storage_config: StorageConfig,
        storage: StorageBackend,
        today_provider: Callable[[], date] | None = None,
    ) -> None:
        """
        Initialize the store with the default document.

        Args:
            planner_config: Planner configuration.
            storage_config: Storage configuration (storage key).
            storage: Storage backend the document is persisted to.
            today_provider: Optional callable returning the local date.
        """
        self.config = planner_config
        self.storage_key = storage_config.key
        self.storage = storage
        self.today_provider = today_provider or (lambda: local_today(planner_config.timezone))
        self.normalizer = DocumentNormalizer(planner_config, self.today_provider)
        self.document: PlannerDocument = default_document()
        self._listeners: list[Listener] = [self._persist]
        self._loaded = False

    @property
    def today(self) -> str:
        """Today's local date key."""
        return self.today_provider().isoformat()

    def load(self) -> PlannerDocument:
        """
        Load the persisted document once and write back its normalized form.

        A missing, unreadable or unparseable stored document leaves the
        default document in place.

        Returns:
            The current document.
        """
        if self._loaded:
            return self.document
        self._loaded = True

        try:
            raw = self.storage.get_item(self.storage_key)
        except Exception as e:
            logger.warning(f"Could not read stored planner, starting from defaults: {e}")
            raw = None

        if raw:
            loaded = self.normalizer.normalize(raw)
            if loaded is not None:
                self.document = loaded
                logger.info(f"Loaded planner document from storage key {self.storage_key!r}")

        self.ensure_today()
        self.commit()
        return self.document

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked after every commit.

        Args:
            listener: Callable receiving the committed document.

        Returns:
            Function removing the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def commit(self) -> None:
        """Notify subscribers (persistence included) of the current state."""
        for listener in list(self._listeners):
            listener(self.document)

    def _persist(self, document: PlannerDocument) -> None:
        try:
            payload = json.dumps(document.to_dict(), ensure_ascii=False)
            self.storage.set_item(self.storage_key, payload)
        except Exception as e:
            # In-memory state stays authoritative; the next commit retries.
            logger.warning(f"Failed to persist planner document: {e}")

    def replace_document(self, document: PlannerDocument) -> None:
        """Swap in a new document (already normalized) and commit."""
        self.document = document
        self.ensure_today()
        self.commit()

    def ensure_today(self, date_key: str | None = None) -> DailyEntry:
        """
        Get the daily entry for a date, creating and backfilling it.

        Every checklist item gets a ``False`` check if it has none yet.

        Args:
            date_key: ISO date (defaults to today).

        Returns:
            The mutable daily entry stored in the document.
        """
        date_key = date_key or self.today

        entry = self.document.daily.get(date_key)
        if entry is None:
            entry = DailyEntry()
            self.document.daily[date_key] = entry

        for item in self.document.routine.checklist:
            entry.checks.setdefault(item.id, False)

        return entry

    def workout_key_for(self, date_key: str | None = None) -> WorkoutKey:
        """Get the scheduled workout key for a date (REST for invalid dates)."""
        day = parse_iso_date(date_key or self.today)
        if day is None:
            return WorkoutKey.REST
        return workout_key_for_date(day)

    def template_for_date(self, date_key: str | None = None) -> Template:
        """Get the workout template scheduled for a date."""
        return self.document.workout.templates[self.workout_key_for(date_key).value]

    def ensure_workout_log(self, date_key: str | None = None) -> DayLog:
        """
        Get the workout log for a date, creating missing exercise rows.

        The log key is always re-stamped to the template scheduled for the
        calendar day.

        Args:
            date_key: ISO date (defaults to today).

        Returns:
            The mutable day log stored in the document.
        """
        date_key = date_key or self.today
        key = self.workout_key_for(date_key)

        log = self.document.workout.logs.get(date_key)
        if log is None:
            log = DayLog(key=key.value)
            self.document.workout.logs[date_key] = log
        log.key = key.value

        for exercise in self.document.workout.templates[key.value].exercises:
            if exercise.id not in log.exercises:
                log.exercises[exercise.id] = ExerciseLog()

        return log

    def is_workout_completed(self, date_key: str | None = None) -> bool:
        """
        Check whether the workout scheduled for a date was completed.

        True when the template has exercises and each one has a done row in
        the day's log. Without a log, or with an empty template, the legacy
        ``workout.done`` flag decides.

        Args:
            date_key: ISO date (defaults to today).

        Returns:
            Completion flag.
        """
        date_key = date_key or self.today
        template = self.template_for_date(date_key)
        log = self.document.workout.logs.get(date_key)

        if log is None or not template.exercises:
            return bool(self.document.workout.done.get(date_key, False))

        return all(
            exercise.id in log.exercises and log.exercises[exercise.id].done
            for exercise in template.exercises
        )

    def checklist_for_date(self, date_key: str | None = None) -> list[ChecklistItem]:
        """Get the checklist for a date; the workout step only shows on training days."""
        checklist = self.document.routine.checklist
        if self.workout_key_for(date_key) == WorkoutKey.REST:
            return [item for item in checklist if item.id != WORKOUT_CHECKLIST_ID]
        return list(checklist)

    def export_json(self) -> str:
        """Serialize the whole document as pretty-printed JSON."""
        return json.dumps(self.document.to_dict(), indent=2, ensure_ascii=False)

    def import_json(self, raw: str | bytes) -> bool:
        """
        Replace the document with normalized imported JSON.

        Args:
            raw: JSON text in the persisted document shape.

        Returns:
            True if imported, False if the text was not a JSON object (the
            current document is left untouched).
        """
        loaded = self.normalizer.normalize(raw)
        if loaded is None:
            logger.warning("Import skipped: not a planner JSON document")
            return False

        self.replace_document(loaded)
        logger.info("Imported planner document")
        return True
