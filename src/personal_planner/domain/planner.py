"""
Planner domain models and canonical document schema.

This module defines the single persisted planner document: profile, goal,
workout templates and logs, meal plan, routine and daily entries.
Attributes are snake_case; the persisted JSON uses camelCase aliases.
"""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Sex(str, Enum):
    """Enumeration of profile sex values."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    NA = "na"


class Tone(str, Enum):
    """Enumeration of coaching tone preferences."""

    GENTLE = "gentle"
    TOUGH = "tough"


class WorkoutKey(str, Enum):
    """Enumeration of workout template keys."""

    A = "A"
    B = "B"
    C = "C"
    REST = "REST"


# Monday, Wednesday, Friday
_TRAINING_WEEKDAYS: dict[int, WorkoutKey] = {
    0: WorkoutKey.A,
    2: WorkoutKey.B,
    4: WorkoutKey.C,
}

WATER_GLASSES_TARGET = 7
HEIGHT_CM_RANGE = (80.0, 250.0)
ENERGY_RANGE = (1, 4)
SETS_RANGE = (1, 10)


def workout_key_for_date(day: date) -> WorkoutKey:
    """Resolve the scheduled workout key for a calendar date."""
    return _TRAINING_WEEKDAYS.get(day.weekday(), WorkoutKey.REST)


class PlannerModel(BaseModel):
    """Base model: camelCase JSON aliases, population by attribute name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted JSON-compatible representation."""
        return self.model_dump(by_alias=True, mode="json")


class Profile(PlannerModel):
    """User profile."""

    name: str = ""
    age: int | None = None
    sex: Sex = Sex.NA
    start_weight: float | None = None
    height_cm: float | None = None
    tone: Tone = Tone.GENTLE


class Goal(PlannerModel):
    """Weight goal. A disabled goal carries no target or duration."""

    enabled: bool = False
    target_weight: float | None = None
    weeks: int | None = Field(None, ge=1)


class Exercise(PlannerModel):
    """One structured exercise of a workout template."""

    id: str
    name: str = ""
    rest_seconds: int | None = Field(None, ge=0)
    sets: int | None = Field(None, ge=SETS_RANGE[0], le=SETS_RANGE[1])
    reps_target: str | None = None


class Template(PlannerModel):
    """
    Reusable workout definition for one workout key.

    ``items`` is the legacy label view of ``exercises`` and is always
    regenerated from it.
    """

    title: str = ""
    subtitle: str = ""
    exercises: list[Exercise] = Field(default_factory=list)
    items: list[str] = Field(default_factory=list)


class ExerciseLog(PlannerModel):
    """Per-exercise result for one day."""

    done: bool = False
    weight: float | None = None
    reps: float | None = None


class DayLog(PlannerModel):
    """Per-date workout log."""

    key: WorkoutKey
    exercises: dict[str, ExerciseLog] = Field(default_factory=dict)


class Workout(PlannerModel):
    """Workout templates, per-date logs and the legacy completion map."""

    templates: dict[str, Template] = Field(default_factory=dict)
    logs: dict[str, DayLog] = Field(default_factory=dict)
    done: dict[str, bool] = Field(default_factory=dict)


class GroceryItem(PlannerModel):
    """Grocery list row."""

    id: str
    name: str
    qty: str = ""
    price: float | None = None


class MealPlan(PlannerModel):
    """Fixed meal plan and grocery list."""

    title: str = ""
    items: list[str] = Field(default_factory=list)
    grocery: list[GroceryItem] = Field(default_factory=list)


class RoutineRow(PlannerModel):
    """One row of the daily schedule."""

    time: str
    text: str


class ChecklistItem(PlannerModel):
    """One step of the daily checklist."""

    id: str
    label: str


class Routine(PlannerModel):
    """Daily schedule and checklist template."""

    schedule: list[RoutineRow] = Field(default_factory=list)
    checklist: list[ChecklistItem] = Field(default_factory=list)


class DailyEntry(PlannerModel):
    """Per-date checklist state and wellbeing log."""

    checks: dict[str, bool] = Field(default_factory=dict)
    weight: float | None = None
    sleep_hours: float | None = None
    energy: int | None = None
    water_glasses: int = 0


class PlannerDocument(PlannerModel):
    """Complete persisted planner state."""

    setup_completed: bool = False
    profile: Profile = Field(default_factory=Profile)
    goal: Goal = Field(default_factory=Goal)
    workout: Workout = Field(default_factory=Workout)
    meal_plan: MealPlan = Field(default_factory=MealPlan)
    routine: Routine = Field(default_factory=Routine)
    daily: dict[str, DailyEntry] = Field(default_factory=dict)


class SetupPayload(BaseModel):
    """Values collected by the first-run setup."""

    name: str = ""
    age: int | None = None
    sex: Sex = Sex.NA
    start_weight: float | None = None
    height_cm: float | None = None
    tone: Tone = Tone.GENTLE
    goal_enabled: bool = False
    target_weight: float | None = None
    weeks: int | None = None

    model_config = ConfigDict(use_enum_values=True)


class GroceryPatch(BaseModel):
    """Partial update of a grocery row; only explicitly set fields apply."""

    name: str | None = None
    qty: str | None = None
    price: float | None = None


class ExercisePatch(BaseModel):
    """Partial update of a template exercise; only explicitly set fields apply."""

    name: str | None = None
    rest_seconds: int | None = None
    sets: int | None = None
    reps_target: str | None = None
