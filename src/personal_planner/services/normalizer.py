"""
Document normalizer for stored and imported planner JSON.

Takes arbitrary untrusted JSON, overlays every valid field onto the default
document section by section, applies legacy migrations and returns a
complete document. Malformed fields fall back to their defaults; only input
that is not a JSON object at all is rejected.
"""

import json
import logging
import math
from collections.abc import Callable
from datetime import date
from typing import Any

from personal_planner.domain.defaults import (
    default_document,
    default_grocery,
    exercises_from_labels,
    labels_from_exercises,
)
from personal_planner.domain.planner import (
    ENERGY_RANGE,
    HEIGHT_CM_RANGE,
    SETS_RANGE,
    ChecklistItem,
    DailyEntry,
    DayLog,
    Exercise,
    ExerciseLog,
    Goal,
    GroceryItem,
    MealPlan,
    PlannerDocument,
    Profile,
    Routine,
    RoutineRow,
    Sex,
    Template,
    Tone,
    Workout,
    WorkoutKey,
    workout_key_for_date,
)
from personal_planner.utils.coercion import (
    clamp_int,
    clamp_int_or_null,
    date_string_or_null,
    enum_or_default,
    int_or_null,
    is_plain_object,
    number_or_null,
    string_or_default,
    text_or_empty,
)
from personal_planner.utils.ids import make_checklist_id, make_id
from personal_planner.utils.parameters import PlannerConfig
from personal_planner.utils.timezone_utils import days_between_middays, local_today, parse_iso_date

logger = logging.getLogger(__name__)

SEX_VALUES = tuple(sex.value for sex in Sex)
TONE_VALUES = tuple(tone.value for tone in Tone)
WORKOUT_KEY_VALUES = tuple(key.value for key in WorkoutKey)


def weeks_from_deadline(deadline: str, today: date) -> int | None:
    """
    Derive a goal duration in weeks from a legacy deadline date.

    Args:
        deadline: Deadline as ``YYYY-MM-DD``.
        today: Current local calendar date.

    Returns:
        Whole weeks (rounded up), or None if the deadline is invalid or
        not in the future.
    """
    end = parse_iso_date(deadline)
    if end is None:
        return None

    diff_days = days_between_middays(today, end)
    weeks = math.ceil(diff_days / 7)
    return weeks if weeks >= 1 else None


def _dedupe_ids(items: list[Any], new_id: Callable[[Any], str]) -> list[Any]:
    seen: set[str] = set()
    result = []

    for item in items:
        if not item.id or item.id in seen:
            item = item.model_copy(update={"id": new_id(item)})
        seen.add(item.id)
        result.append(item)

    return result


def sanitize_ids(document: PlannerDocument) -> None:
    """
    Repair missing or duplicate ids in place.

    Checklist ids are regenerated from the item label, grocery and exercise
    ids from the generic scheme. Order is preserved and the first occurrence
    of an id keeps it.

    Args:
        document: Document to repair.
    """
    document.routine.checklist = _dedupe_ids(
        document.routine.checklist,
        lambda item: make_checklist_id(item.label or "step"),
    )
    document.meal_plan.grocery = _dedupe_ids(document.meal_plan.grocery, lambda _: make_id())

    for template in document.workout.templates.values():
        template.exercises = _dedupe_ids(template.exercises, lambda _: make_id())


class DocumentNormalizer:
    """
    Normalizer turning raw planner JSON into a current document.

    Each section is validated independently against the default document;
    a bad section or field never aborts the whole load.
    """

    def __init__(
        self,
        config: PlannerConfig | None = None,
        today_provider: Callable[[], date] | None = None,
    ) -> None:
        """
        Initialize the normalizer.

        Args:
            config: Planner configuration (timezone, water target).
            today_provider: Optional callable returning the local date,
                used for deadline migration.
        """
        self.config = config or PlannerConfig()
        self.today_provider = today_provider or (lambda: local_today(self.config.timezone))

    def normalize(self, raw: str | bytes) -> PlannerDocument | None:
        """
        Parse and normalize raw JSON text.

        Args:
            raw: JSON text.

        Returns:
            Normalized document, or None if the text is not a JSON object.
        """
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, TypeError, ValueError, RecursionError) as e:
            logger.warning(f"Ignoring unparseable planner document: {e}")
            return None

        return self.normalize_payload(payload)

    def normalize_payload(self, payload: Any) -> PlannerDocument | None:
        """
        Normalize an already decoded JSON value.

        Args:
            payload: Decoded JSON value.

        Returns:
            Normalized document, or None if the payload is not an object.
        """
        if not is_plain_object(payload):
            logger.warning(f"Ignoring planner document with {type(payload).__name__} root")
            return None

        base = default_document()

        setup_completed = payload.get("setupCompleted")
        if isinstance(setup_completed, bool):
            base.setup_completed = setup_completed

        base.profile = self._normalize_profile(payload.get("profile"), base.profile)
        base.goal = self._normalize_goal(payload.get("goal"), base.goal)
        base.workout = self._normalize_workout(payload.get("workout"), base.workout)
        base.meal_plan = self._normalize_meal_plan(payload.get("mealPlan"), base.meal_plan)
        base.routine = self._normalize_routine(payload.get("routine"), base.routine)
        base.daily = self._normalize_daily(payload.get("daily"))

        sanitize_ids(base)

        return base

    def _normalize_profile(self, value: Any, base: Profile) -> Profile:
        if not is_plain_object(value):
            return base

        age = int_or_null(value.get("age"))
        height_cm = number_or_null(value.get("heightCm"))
        if height_cm is not None and not HEIGHT_CM_RANGE[0] <= height_cm <= HEIGHT_CM_RANGE[1]:
            height_cm = None

        return Profile(
            name=string_or_default(value.get("name"), base.name),
            age=age if age is not None and age >= 0 else None,
            sex=enum_or_default(value.get("sex"), SEX_VALUES, Sex.NA.value),
            start_weight=number_or_null(value.get("startWeight")),
            height_cm=height_cm,
            tone=enum_or_default(value.get("tone"), TONE_VALUES, Tone.GENTLE.value),
        )

    def _normalize_goal(self, value: Any, base: Goal) -> Goal:
        if not is_plain_object(value):
            return base

        weeks = int_or_null(value.get("weeks"))
        if weeks is not None and weeks < 1:
            weeks = None

        # Older saves stored a deadline date instead of a duration
        if weeks is None:
            deadline = date_string_or_null(value.get("deadline"))
            if deadline:
                weeks = weeks_from_deadline(deadline, self.today_provider())
                logger.debug(f"Migrated goal deadline {deadline} to weeks={weeks}")

        return Goal(
            enabled=bool(value.get("enabled")),
            target_weight=number_or_null(value.get("targetWeight")),
            weeks=weeks,
        )

    def _normalize_workout(self, value: Any, base: Workout) -> Workout:
        if not is_plain_object(value):
            return base

        raw_templates = value.get("templates")
        if not is_plain_object(raw_templates):
            raw_templates = {}

        templates = {
            key: self._normalize_template(raw_templates.get(key), template)
            for key, template in base.templates.items()
        }

        return Workout(
            templates=templates,
            logs=self._normalize_logs(value.get("logs")),
            done=self._normalize_bool_map(value.get("done")),
        )

    def _normalize_template(self, value: Any, base: Template) -> Template:
        if not is_plain_object(value):
            return base

        title = string_or_default(value.get("title"), base.title)
        subtitle = string_or_default(value.get("subtitle"), base.subtitle)
        raw_exercises = value.get("exercises")
        raw_items = value.get("items")

        if isinstance(raw_exercises, list):
            candidates = [row for row in raw_exercises if is_plain_object(row)]
            if any(text_or_empty(row.get("name")).strip() for row in candidates):
                exercises = [self._normalize_exercise(row) for row in candidates]
                return Template(
                    title=title,
                    subtitle=subtitle,
                    exercises=exercises,
                    items=labels_from_exercises(exercises),
                )

        if isinstance(raw_items, list):
            labels = [item for item in raw_items if isinstance(item, str)]
            if any(label.strip() for label in labels):
                existing_ids = []
                if isinstance(raw_exercises, list):
                    existing_ids = [
                        string_or_default(row.get("id"), "") if is_plain_object(row) else ""
                        for row in raw_exercises
                    ]
                exercises = exercises_from_labels(labels, existing_ids)
                logger.debug(f"Migrated {len(labels)} legacy labels for template {title!r}")
                return Template(
                    title=title,
                    subtitle=subtitle,
                    exercises=exercises,
                    items=labels_from_exercises(exercises),
                )

        return base.model_copy(update={"title": title, "subtitle": subtitle})

    def _normalize_exercise(self, value: dict[str, Any]) -> Exercise:
        exercise_id = value.get("id")
        rest_seconds = int_or_null(value.get("restSeconds"))

        return Exercise(
            id=exercise_id if isinstance(exercise_id, str) and exercise_id.strip() else make_id(),
            name=text_or_empty(value.get("name")).strip(),
            rest_seconds=rest_seconds if rest_seconds is not None and rest_seconds >= 0 else None,
            sets=clamp_int_or_null(value.get("sets"), SETS_RANGE[0], SETS_RANGE[1]),
            reps_target=self._reps_or_null(value.get("repsTarget")),
        )

    @staticmethod
    def _reps_or_null(value: Any) -> str | None:
        number = number_or_null(value)
        if not isinstance(value, str) and number is not None:
            return f"{number:g}"
        text = string_or_default(value, "").strip()
        return text or None

    def _normalize_logs(self, value: Any) -> dict[str, DayLog]:
        if not is_plain_object(value):
            return {}

        logs: dict[str, DayLog] = {}

        for date_key, entry in value.items():
            day = parse_iso_date(date_string_or_null(date_key) or "")
            if day is None or not is_plain_object(entry):
                continue

            key = enum_or_default(entry.get("key"), WORKOUT_KEY_VALUES, None)
            if key is None:
                key = workout_key_for_date(day).value

            exercises: dict[str, ExerciseLog] = {}
            raw_exercises = entry.get("exercises")
            if is_plain_object(raw_exercises):
                for exercise_id, row in raw_exercises.items():
                    if not is_plain_object(row):
                        continue
                    exercises[str(exercise_id)] = ExerciseLog(
                        done=bool(row.get("done")),
                        weight=number_or_null(row.get("weight")),
                        reps=number_or_null(row.get("reps")),
                    )

            logs[day.isoformat()] = DayLog(key=key, exercises=exercises)

        return logs

    @staticmethod
    def _normalize_bool_map(value: Any) -> dict[str, bool]:
        if not is_plain_object(value):
            return {}
        return {str(key): bool(flag) for key, flag in value.items()}

    def _normalize_meal_plan(self, value: Any, base: MealPlan) -> MealPlan:
        if not is_plain_object(value):
            return base

        items = base.items
        if isinstance(value.get("items"), list):
            items = [item for item in value["items"] if isinstance(item, str)]

        grocery = base.grocery
        if isinstance(value.get("grocery"), list):
            grocery = [
                self._normalize_grocery_item(row)
                for row in value["grocery"]
                if is_plain_object(row)
            ]
            grocery = [row for row in grocery if row.name.strip()]
            if not grocery:
                logger.info("Grocery list empty after normalization, restoring defaults")
                grocery = default_grocery()

        return MealPlan(
            title=string_or_default(value.get("title"), base.title),
            items=items,
            grocery=grocery,
        )

    @staticmethod
    def _normalize_grocery_item(value: dict[str, Any]) -> GroceryItem:
        item_id = value.get("id")
        price = value.get("price")

        return GroceryItem(
            id=item_id if isinstance(item_id, str) else make_id(),
            name=text_or_empty(value.get("name")),
            qty=text_or_empty(value.get("qty")),
            price=None if price is None else number_or_null(price),
        )

    def _normalize_routine(self, value: Any, base: Routine) -> Routine:
        if not is_plain_object(value):
            return base

        schedule = base.schedule
        if isinstance(value.get("schedule"), list):
            schedule = [
                RoutineRow(time=text_or_empty(row.get("time")), text=text_or_empty(row.get("text")))
                for row in value["schedule"]
                if is_plain_object(row)
            ]
            schedule = [row for row in schedule if row.time.strip() and row.text.strip()]

        checklist = base.checklist
        if isinstance(value.get("checklist"), list):
            checklist = [
                ChecklistItem(
                    id=text_or_empty(row.get("id")),
                    label=text_or_empty(row.get("label")),
                )
                for row in value["checklist"]
                if is_plain_object(row)
            ]
            checklist = [item for item in checklist if item.label.strip()]

        return Routine(schedule=schedule, checklist=checklist)

    def _normalize_daily(self, value: Any) -> dict[str, DailyEntry]:
        if not is_plain_object(value):
            return {}

        daily: dict[str, DailyEntry] = {}

        for date_key, entry in value.items():
            day = parse_iso_date(date_string_or_null(date_key) or "")
            if day is None or not is_plain_object(entry):
                continue

            daily[day.isoformat()] = DailyEntry(
                checks=self._normalize_bool_map(entry.get("checks")),
                weight=number_or_null(entry.get("weight")),
                sleep_hours=number_or_null(entry.get("sleepHours")),
                energy=clamp_int_or_null(entry.get("energy"), ENERGY_RANGE[0], ENERGY_RANGE[1]),
                water_glasses=clamp_int(
                    entry.get("waterGlasses"), 0, self.config.water_glasses_target, 0
                ),
            )

        return daily


def safe_load_planner(
    raw: str | bytes,
    config: PlannerConfig | None = None,
    today_provider: Callable[[], date] | None = None,
) -> PlannerDocument | None:
    """
    Normalize raw planner JSON with a one-off normalizer.

    Args:
        raw: JSON text.
        config: Optional planner configuration.
        today_provider: Optional callable returning the local date.

    Returns:
        Normalized document, or None if the text is not a JSON object.
    """
    return DocumentNormalizer(config, today_provider).normalize(raw)
