"""
Planner mutation service.

Every operation mutates the store's document in place, keeps the document
invariants (ids, lock-step template lists, non-empty grocery list) and then
commits once. Unknown ids and out-of-range indices are no-ops.
"""

import logging

from personal_planner.domain.defaults import (
    default_checklist,
    default_grocery,
    labels_from_exercises,
)
from personal_planner.domain.labels import parse_label
from personal_planner.domain.planner import (
    SETS_RANGE,
    ChecklistItem,
    Exercise,
    ExercisePatch,
    Goal,
    GroceryItem,
    GroceryPatch,
    PlannerDocument,
    Profile,
    SetupPayload,
    Template,
    WorkoutKey,
)
from personal_planner.services.planner_store import PlannerStore
from personal_planner.utils.coercion import clamp_int_or_null
from personal_planner.utils.ids import make_checklist_id, make_id

logger = logging.getLogger(__name__)

DEFAULT_CHECKLIST_LABEL = "New step"
DEFAULT_GROCERY_NAME = "New item"


class PlannerService:
    """
    Mutation API over a planner store.

    Handles setup, daily logging, checklist, meal plan, grocery and
    workout template edits.
    """

    def __init__(self, store: PlannerStore) -> None:
        """
        Initialize planner service.

        Args:
            store: Store owning the document.
        """
        self.store = store

    @property
    def document(self) -> PlannerDocument:
        """The document owned by the store."""
        return self.store.document

    # setup

    def complete_setup(self, payload: SetupPayload) -> None:
        """
        Store profile and goal from the first-run setup.

        Today's weight is prefilled with the start weight if still empty.

        Args:
            payload: Setup values.
        """
        self.document.profile = Profile(
            name=payload.name,
            age=payload.age,
            sex=payload.sex,
            start_weight=payload.start_weight,
            height_cm=payload.height_cm,
            tone=payload.tone,
        )
        self._set_goal(payload.goal_enabled, payload.target_weight, payload.weeks)
        self.document.setup_completed = True

        entry = self.store.ensure_today()
        if entry.weight is None and payload.start_weight is not None:
            entry.weight = payload.start_weight

        logger.info("Setup completed")
        self.store.commit()

    def update_goal(self, enabled: bool, target_weight: float | None, weeks: int | None) -> None:
        """Replace the goal; a disabled goal drops its target and duration."""
        self._set_goal(enabled, target_weight, weeks)
        self.store.commit()

    def _set_goal(self, enabled: bool, target_weight: float | None, weeks: int | None) -> None:
        if weeks is not None and weeks < 1:
            weeks = None
        self.document.goal = Goal(
            enabled=enabled,
            target_weight=target_weight if enabled else None,
            weeks=weeks if enabled else None,
        )

    # daily

    def toggle_daily(self, item_id: str, date_key: str | None = None) -> None:
        """Flip a checklist check for a date."""
        entry = self.store.ensure_today(date_key)
        entry.checks[item_id] = not entry.checks.get(item_id, False)
        self.store.commit()

    def set_daily_weight(self, value: float | None, date_key: str | None = None) -> None:
        self.store.ensure_today(date_key).weight = value
        self.store.commit()

    def set_daily_sleep_hours(self, value: float | None, date_key: str | None = None) -> None:
        self.store.ensure_today(date_key).sleep_hours = value
        self.store.commit()

    def set_daily_energy(self, value: int | None, date_key: str | None = None) -> None:
        self.store.ensure_today(date_key).energy = value
        self.store.commit()

    def toggle_daily_water_glass(self, index: int, date_key: str | None = None) -> None:
        """
        Fill the water tracker up to a glass.

        Selecting glass ``index`` sets the count to ``index + 1``; selecting
        it again when the count is exactly ``index + 1`` steps back to ``index``.

        Args:
            index: Zero-based glass index.
            date_key: ISO date (defaults to today).
        """
        entry = self.store.ensure_today(date_key)
        if index < 0 or index >= self.store.config.water_glasses_target:
            return

        target = index + 1
        entry.water_glasses = index if entry.water_glasses == target else target
        self.store.commit()

    # checklist

    def add_checklist_item(self, label: str) -> ChecklistItem:
        """Append a checklist step (blank labels become "New step")."""
        final_label = label.strip() or DEFAULT_CHECKLIST_LABEL
        item = ChecklistItem(id=make_checklist_id(final_label), label=final_label)
        self.document.routine.checklist.append(item)
        self.store.ensure_today()
        self.store.commit()
        return item

    def update_checklist_item(self, item_id: str, label: str) -> None:
        """Rename a checklist step; blank labels are ignored."""
        if not label.strip():
            return

        for item in self.document.routine.checklist:
            if item.id == item_id:
                item.label = label
                self.store.commit()
                return

    def remove_checklist_item(self, item_id: str) -> None:
        self.document.routine.checklist = [
            item for item in self.document.routine.checklist if item.id != item_id
        ]
        self.store.commit()

    def reset_checklist_template(self) -> None:
        """Restore the default checklist steps."""
        self.document.routine.checklist = default_checklist()
        self.store.ensure_today()
        self.store.commit()

    # meal plan

    def add_meal_item(self, text: str = "") -> None:
        self.document.meal_plan.items.append(text)
        self.store.commit()

    def update_meal_item(self, index: int, text: str) -> None:
        items = self.document.meal_plan.items
        if 0 <= index < len(items):
            items[index] = text
            self.store.commit()

    def remove_meal_item(self, index: int) -> None:
        items = self.document.meal_plan.items
        if 0 <= index < len(items):
            del items[index]
            self.store.commit()

    # grocery

    def add_grocery_item(self) -> GroceryItem:
        item = GroceryItem(id=make_id(), name=DEFAULT_GROCERY_NAME)
        self.document.meal_plan.grocery.append(item)
        self.store.commit()
        return item

    def update_grocery_item(self, item_id: str, patch: GroceryPatch) -> None:
        """
        Apply the explicitly set fields of a patch to a grocery row.

        Args:
            item_id: Grocery row id.
            patch: Partial update.
        """
        for item in self.document.meal_plan.grocery:
            if item.id == item_id:
                fields = patch.model_fields_set
                if "name" in fields and patch.name and patch.name.strip():
                    item.name = patch.name
                if "qty" in fields and patch.qty is not None:
                    item.qty = patch.qty
                if "price" in fields:
                    item.price = patch.price
                self.store.commit()
                return

    def remove_grocery_item(self, item_id: str) -> None:
        """Remove a grocery row; removing the last one restores the defaults."""
        grocery = [item for item in self.document.meal_plan.grocery if item.id != item_id]
        if not grocery:
            logger.info("Grocery list emptied, restoring defaults")
            grocery = default_grocery()
        self.document.meal_plan.grocery = grocery
        self.store.commit()

    # workout log

    def toggle_exercise(self, exercise_id: str, date_key: str | None = None) -> None:
        """
        Flip the done flag of an exercise in a day's workout log.

        The legacy ``workout.done`` flag is re-derived afterwards.

        Args:
            exercise_id: Exercise id in the scheduled template.
            date_key: ISO date (defaults to today).
        """
        date_key = date_key or self.store.today
        log = self.store.ensure_workout_log(date_key)
        row = log.exercises.get(exercise_id)
        if row is None:
            return

        row.done = not row.done
        self.document.workout.done[date_key] = self.store.is_workout_completed(date_key)
        self.store.commit()

    def set_exercise_log(
        self,
        exercise_id: str,
        weight: float | None,
        reps: float | None,
        date_key: str | None = None,
    ) -> None:
        """Record the weight and reps used for an exercise on a date."""
        log = self.store.ensure_workout_log(date_key)
        row = log.exercises.get(exercise_id)
        if row is None:
            return

        row.weight = weight
        row.reps = reps
        self.store.commit()

    # workout templates

    def _template(self, key: WorkoutKey | str) -> Template | None:
        if isinstance(key, WorkoutKey):
            key = key.value
        return self.document.workout.templates.get(key)

    def update_template(
        self,
        key: WorkoutKey | str,
        title: str | None = None,
        subtitle: str | None = None,
    ) -> None:
        template = self._template(key)
        if template is None:
            return

        if title is not None:
            template.title = title
        if subtitle is not None:
            template.subtitle = subtitle
        self.store.commit()

    def update_template_item(self, key: WorkoutKey | str, index: int, label: str) -> None:
        """
        Edit one legacy label of a template and re-derive its exercise.

        Editing past the end grows the list with blank placeholders. Only
        the edited exercise is re-parsed; it keeps its id and rest time.

        Args:
            key: Workout key.
            index: Label index.
            label: New label text.
        """
        template = self._template(key)
        if template is None or index < 0:
            return

        while len(template.exercises) <= index:
            template.exercises.append(Exercise(id=make_id()))

        current = template.exercises[index]
        parsed = parse_label(label)
        template.exercises[index] = Exercise(
            id=current.id,
            name=parsed.name,
            rest_seconds=current.rest_seconds,
            sets=parsed.sets,
            reps_target=parsed.reps_target,
        )
        template.items = labels_from_exercises(template.exercises)
        self.store.commit()

    def update_template_exercise(
        self, key: WorkoutKey | str, index: int, patch: ExercisePatch
    ) -> None:
        """
        Edit one structured exercise of a template and regenerate the labels.

        Editing past the end grows the list with blank placeholders.

        Args:
            key: Workout key.
            index: Exercise index.
            patch: Partial update; only explicitly set fields apply.
        """
        template = self._template(key)
        if template is None or index < 0:
            return

        while len(template.exercises) <= index:
            template.exercises.append(Exercise(id=make_id()))

        exercise = template.exercises[index]
        fields = patch.model_fields_set

        if "name" in fields:
            exercise.name = (patch.name or "").strip()
        if "rest_seconds" in fields:
            rest = patch.rest_seconds
            exercise.rest_seconds = rest if rest is not None and rest >= 0 else None
        if "sets" in fields:
            exercise.sets = clamp_int_or_null(patch.sets, SETS_RANGE[0], SETS_RANGE[1])
        if "reps_target" in fields:
            exercise.reps_target = (patch.reps_target or "").strip() or None

        template.items = labels_from_exercises(template.exercises)
        self.store.commit()

    def add_template_exercise(self, key: WorkoutKey | str, name: str = "") -> Exercise | None:
        template = self._template(key)
        if template is None:
            return None

        exercise = Exercise(id=make_id(), name=name.strip())
        template.exercises.append(exercise)
        template.items = labels_from_exercises(template.exercises)
        self.store.commit()
        return exercise

    def remove_template_exercise(self, key: WorkoutKey | str, index: int) -> None:
        template = self._template(key)
        if template is None or not 0 <= index < len(template.exercises):
            return

        del template.exercises[index]
        template.items = labels_from_exercises(template.exercises)
        self.store.commit()

    # backup

    def export_json(self) -> str:
        return self.store.export_json()

    def import_json(self, raw: str | bytes) -> bool:
        return self.store.import_json(raw)
