"""Unit tests for the document normalizer."""

import json
from datetime import date
from typing import Any

from personal_planner.domain.defaults import default_document
from personal_planner.domain.labels import serialize_exercise
from personal_planner.services.normalizer import (
    DocumentNormalizer,
    safe_load_planner,
    weeks_from_deadline,
)
from personal_planner.utils.parameters import PlannerConfig

TODAY = date(2024, 1, 15)


def _make_normalizer() -> DocumentNormalizer:
    return DocumentNormalizer(PlannerConfig(timezone="Europe/Rome"), lambda: TODAY)


def _strip_ids(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _strip_ids(v) for k, v in value.items() if k != "id"}
    if isinstance(value, list):
        return [_strip_ids(v) for v in value]
    return value


LEGACY_DOCUMENT = {
    "setupCompleted": True,
    "profile": {"name": "Matt", "age": "34", "sex": "Male", "startWeight": "82.4", "heightCm": 300},
    "goal": {"enabled": 1, "targetWeight": 76, "deadline": "2024-02-12"},
    "workout": {
        "templates": {
            "A": {"title": "Push", "items": ["Bench press — 4×6-8", "Dips - 3 sets", 5]},
            "B": {
                "exercises": [
                    {"id": "x1", "name": "Deadlift", "sets": 14, "repsTarget": 5},
                    {"id": "x1", "name": "Row", "restSeconds": -10},
                ],
            },
            "C": {"exercises": [{"name": "   "}], "items": []},
        },
        "logs": {
            "2024-01-15": {"key": "Z", "exercises": {"x1": {"done": 1, "weight": "100", "reps": "x"}}},
            "not-a-date": {"key": "A"},
        },
        "done": {"2024-01-10": 1},
    },
    "mealPlan": {
        "title": 7,
        "items": ["Breakfast", None, "Dinner"],
        "grocery": [{"id": "g1", "name": "Eggs", "qty": 12, "price": "2.5"}, {"name": "  "}],
    },
    "routine": {
        "schedule": [{"time": "07:00", "text": "Wake"}, {"time": "", "text": "Nope"}],
        "checklist": [
            {"id": "water", "label": "Drink"},
            {"id": "water", "label": "Walk"},
            {"label": "Read a book"},
            {"id": "empty", "label": ""},
        ],
    },
    "daily": {
        "2024-01-14": {"checks": {"water": 1}, "weight": "81", "energy": 9, "waterGlasses": 12, "mood": "ok"},
        "14/01/2024": {"weight": 80},
    },
    "extra": "dropped",
}


def test_unparseable_input_returns_none() -> None:
    """Test that non-JSON and non-object JSON are rejected."""
    normalizer = _make_normalizer()

    for raw in ("", "{not json", "[]", "42", '"text"', "null"):
        if normalizer.normalize(raw) is not None:
            raise AssertionError(f"Expected None for {raw!r}")


def test_empty_object_matches_default_document() -> None:
    """Test that {} normalizes to the default document modulo ids."""
    result = _make_normalizer().normalize("{}")

    if result is None:
        raise AssertionError("Expected a document for {}")
    if _strip_ids(result.to_dict()) != _strip_ids(default_document().to_dict()):
        raise AssertionError("Expected normalized {} to equal the default document")


def test_wrong_typed_sections_fall_back_to_defaults() -> None:
    """Test that wrong-typed sections never abort normalization."""
    raw = json.dumps({"profile": [], "goal": "x", "workout": 5, "mealPlan": None, "routine": True, "daily": []})
    result = _make_normalizer().normalize(raw)

    if result is None:
        raise AssertionError("Expected a document")
    if _strip_ids(result.to_dict()) != _strip_ids(default_document().to_dict()):
        raise AssertionError("Expected defaults for every wrong-typed section")


def test_profile_fields_are_coerced() -> None:
    """Test profile coercion."""
    result = _make_normalizer().normalize(json.dumps(LEGACY_DOCUMENT))
    profile = result.profile

    if profile.name != "Matt":
        raise AssertionError(f"Expected name 'Matt', got {profile.name!r}")
    if profile.age != 34:
        raise AssertionError(f"Expected age 34, got {profile.age}")
    if profile.sex != "na":
        raise AssertionError(f"Expected invalid sex to fall back to 'na', got {profile.sex}")
    if profile.start_weight != 82.4:
        raise AssertionError(f"Expected start weight 82.4, got {profile.start_weight}")
    if profile.height_cm is not None:
        raise AssertionError("Expected implausible height to be dropped")
    if profile.tone != "gentle":
        raise AssertionError(f"Expected default tone, got {profile.tone}")


def test_goal_weeks_derived_from_deadline() -> None:
    """Test the deadline to weeks migration (today + 14 days -> 2 weeks)."""
    raw = json.dumps({"goal": {"deadline": "2024-01-29"}})
    result = _make_normalizer().normalize(raw)

    if result.goal.weeks != 2:
        raise AssertionError(f"Expected weeks=2, got {result.goal.weeks}")


def test_goal_prefers_weeks_over_deadline() -> None:
    """Test that an explicit weeks value wins over a legacy deadline."""
    raw = json.dumps({"goal": {"enabled": True, "weeks": 10, "deadline": "2024-01-29"}})
    result = _make_normalizer().normalize(raw)

    if result.goal.weeks != 10 or not result.goal.enabled:
        raise AssertionError(f"Unexpected goal {result.goal}")


def test_weeks_from_deadline_edges() -> None:
    """Test rounding and rejection of past or malformed deadlines."""
    if weeks_from_deadline("2024-01-16", TODAY) != 1:
        raise AssertionError("Expected one day ahead to round up to 1 week")
    if weeks_from_deadline("2024-01-30", TODAY) != 3:
        raise AssertionError("Expected 15 days to round up to 3 weeks")
    if weeks_from_deadline("2024-01-15", TODAY) is not None:
        raise AssertionError("Expected today to yield None")
    if weeks_from_deadline("2024-02-30", TODAY) is not None:
        raise AssertionError("Expected impossible date to yield None")


def test_goal_legacy_document() -> None:
    """Test goal truthiness and deadline migration together."""
    result = _make_normalizer().normalize(json.dumps(LEGACY_DOCUMENT))

    if result.goal.enabled is not True:
        raise AssertionError("Expected truthy enabled to become True")
    if result.goal.target_weight != 76.0:
        raise AssertionError(f"Expected target 76, got {result.goal.target_weight}")
    if result.goal.weeks != 4:
        raise AssertionError(f"Expected 28 days -> 4 weeks, got {result.goal.weeks}")


def test_template_items_migrate_to_exercises() -> None:
    """Test that legacy label items become structured exercises."""
    result = _make_normalizer().normalize(json.dumps(LEGACY_DOCUMENT))
    template = result.workout.templates["A"]

    if template.title != "Push":
        raise AssertionError(f"Expected title 'Push', got {template.title!r}")
    if [e.name for e in template.exercises] != ["Bench press", "Dips"]:
        raise AssertionError(f"Unexpected exercises {template.exercises}")
    if template.exercises[0].sets != 4 or template.exercises[0].reps_target != "6-8":
        raise AssertionError("Expected structured sets/reps for bench press")
    if template.items != ["Bench press — 4×6-8", "Dips — 3 sets"]:
        raise AssertionError(f"Unexpected items {template.items}")


def test_template_exercises_win_and_regenerate_items() -> None:
    """Test that structured exercises are adopted and labels regenerated."""
    result = _make_normalizer().normalize(json.dumps(LEGACY_DOCUMENT))
    template = result.workout.templates["B"]

    if len(template.exercises) != 2:
        raise AssertionError(f"Expected 2 exercises, got {len(template.exercises)}")

    deadlift, row = template.exercises
    if deadlift.sets != 10:
        raise AssertionError(f"Expected sets clamped to 10, got {deadlift.sets}")
    if deadlift.reps_target != "5":
        raise AssertionError(f"Expected numeric reps stringified, got {deadlift.reps_target!r}")
    if row.rest_seconds is not None:
        raise AssertionError("Expected negative rest to be dropped")
    if template.items != [serialize_exercise(e) for e in template.exercises]:
        raise AssertionError("Expected items regenerated from exercises")
    if template.title != "Workout B":
        raise AssertionError("Expected default title when none supplied")


def test_template_without_usable_lists_keeps_default() -> None:
    """Test that blank exercises and empty items keep the default template."""
    result = _make_normalizer().normalize(json.dumps(LEGACY_DOCUMENT))
    template = result.workout.templates["C"]
    default = default_document().workout.templates["C"]

    if template.items != default.items:
        raise AssertionError("Expected default items for template C")
    if len(template.exercises) != len(default.exercises):
        raise AssertionError("Expected default exercises for template C")


def test_exercise_ids_are_unique_within_template() -> None:
    """Test that duplicate exercise ids are regenerated, first wins."""
    result = _make_normalizer().normalize(json.dumps(LEGACY_DOCUMENT))
    ids = [e.id for e in result.workout.templates["B"].exercises]

    if ids[0] != "x1":
        raise AssertionError(f"Expected first occurrence to keep its id, got {ids[0]}")
    if len(set(ids)) != len(ids):
        raise AssertionError(f"Expected unique ids, got {ids}")


def test_logs_are_validated() -> None:
    """Test workout log normalization."""
    result = _make_normalizer().normalize(json.dumps(LEGACY_DOCUMENT))
    logs = result.workout.logs

    if set(logs) != {"2024-01-15"}:
        raise AssertionError(f"Expected only valid date keys, got {set(logs)}")

    log = logs["2024-01-15"]
    if log.key != "A":
        raise AssertionError(f"Expected Monday to recompute key 'A', got {log.key}")

    row = log.exercises["x1"]
    if row.done is not True or row.weight != 100.0 or row.reps is not None:
        raise AssertionError(f"Unexpected exercise log {row}")

    if result.workout.done != {"2024-01-10": True}:
        raise AssertionError(f"Expected legacy done map copied, got {result.workout.done}")


def test_meal_plan_and_grocery() -> None:
    """Test meal plan coercion and grocery filtering."""
    result = _make_normalizer().normalize(json.dumps(LEGACY_DOCUMENT))
    meal_plan = result.meal_plan

    if meal_plan.title != default_document().meal_plan.title:
        raise AssertionError("Expected non-string title to fall back")
    if meal_plan.items != ["Breakfast", "Dinner"]:
        raise AssertionError(f"Unexpected items {meal_plan.items}")
    if len(meal_plan.grocery) != 1:
        raise AssertionError(f"Expected blank grocery rows dropped, got {meal_plan.grocery}")

    eggs = meal_plan.grocery[0]
    if eggs.id != "g1" or eggs.qty != "12" or eggs.price != 2.5:
        raise AssertionError(f"Unexpected grocery row {eggs}")


def test_empty_grocery_falls_back_to_defaults() -> None:
    """Test that a grocery list with no valid rows is never left empty."""
    raw = json.dumps({"mealPlan": {"grocery": [{"name": ""}, "eggs"]}})
    result = _make_normalizer().normalize(raw)

    expected = [row.name for row in default_document().meal_plan.grocery]
    if [row.name for row in result.meal_plan.grocery] != expected:
        raise AssertionError("Expected default grocery list")


def test_routine_rows_and_checklist_ids() -> None:
    """Test schedule filtering and checklist id sanitization."""
    result = _make_normalizer().normalize(json.dumps(LEGACY_DOCUMENT))
    routine = result.routine

    if [(r.time, r.text) for r in routine.schedule] != [("07:00", "Wake")]:
        raise AssertionError(f"Unexpected schedule {routine.schedule}")

    labels = [item.label for item in routine.checklist]
    if labels != ["Drink", "Walk", "Read a book"]:
        raise AssertionError(f"Expected order preserved and blank label dropped, got {labels}")

    ids = [item.id for item in routine.checklist]
    if ids[0] != "water":
        raise AssertionError("Expected first 'water' id kept")
    if len(set(ids)) != 3 or not all(ids):
        raise AssertionError(f"Expected unique non-empty ids, got {ids}")
    if not ids[1].startswith("walk-") or not ids[2].startswith("read-a-book-"):
        raise AssertionError(f"Expected regenerated ids derived from labels, got {ids}")


def test_daily_entries_are_clamped_and_filtered() -> None:
    """Test daily entry coercion."""
    result = _make_normalizer().normalize(json.dumps(LEGACY_DOCUMENT))

    if set(result.daily) != {"2024-01-14"}:
        raise AssertionError(f"Expected invalid date keys dropped, got {set(result.daily)}")

    entry = result.daily["2024-01-14"]
    if entry.checks != {"water": True}:
        raise AssertionError(f"Unexpected checks {entry.checks}")
    if entry.weight != 81.0 or entry.sleep_hours is not None:
        raise AssertionError(f"Unexpected weight/sleep {entry.weight}/{entry.sleep_hours}")
    if entry.energy != 4:
        raise AssertionError(f"Expected energy clamped to 4, got {entry.energy}")
    if entry.water_glasses != 7:
        raise AssertionError(f"Expected water clamped to 7, got {entry.water_glasses}")
    if "mood" in entry.to_dict():
        raise AssertionError("Expected unknown fields dropped")


def test_unknown_top_level_fields_dropped() -> None:
    """Test that extra top-level keys do not survive."""
    result = _make_normalizer().normalize(json.dumps(LEGACY_DOCUMENT))

    if "extra" in result.to_dict():
        raise AssertionError("Expected unknown top-level key dropped")
    if result.setup_completed is not True:
        raise AssertionError("Expected setupCompleted kept")


def test_normalization_is_idempotent() -> None:
    """Test normalize(serialize(normalize(x))) == normalize(x)."""
    normalizer = _make_normalizer()

    for raw in (json.dumps(LEGACY_DOCUMENT), "{}", '{"workout": {"done": {"2024-01-01": true}}}'):
        first = normalizer.normalize(raw)
        second = normalizer.normalize(json.dumps(first.to_dict()))
        if second.to_dict() != first.to_dict():
            raise AssertionError(f"Normalization not idempotent for {raw[:40]!r}")


def test_all_ids_unique_after_normalization() -> None:
    """Test id uniqueness across checklist, grocery and templates."""
    raw = json.dumps(
        {
            "mealPlan": {"grocery": [{"id": "g", "name": "A"}, {"id": "g", "name": "B"}, {"name": "C"}]},
            "routine": {"checklist": [{"id": "", "label": "One"}, {"id": "", "label": "Two"}]},
        }
    )
    result = _make_normalizer().normalize(raw)

    collections = [
        [row.id for row in result.meal_plan.grocery],
        [item.id for item in result.routine.checklist],
    ] + [[e.id for e in t.exercises] for t in result.workout.templates.values()]

    for ids in collections:
        if len(set(ids)) != len(ids) or not all(ids):
            raise AssertionError(f"Expected unique non-empty ids, got {ids}")


def test_safe_load_planner_helper() -> None:
    """Test the one-off helper."""
    result = safe_load_planner('{"setupCompleted": true}', today_provider=lambda: TODAY)

    if result is None or result.setup_completed is not True:
        raise AssertionError("Expected setupCompleted loaded")
    if safe_load_planner("nope") is not None:
        raise AssertionError("Expected None for invalid JSON")


def test_oversized_numbers_fall_back_to_defaults() -> None:
    """Test that integers beyond float range never abort normalization."""
    huge = "1" + "0" * 400
    raw = (
        '{"profile": {"age": ' + huge + ', "startWeight": 80}, '
        '"daily": {"2024-01-14": {"weight": ' + huge + ', "waterGlasses": ' + huge + "}}}"
    )
    result = _make_normalizer().normalize(raw)

    if result is None:
        raise AssertionError("Expected a document")
    if result.profile.age is not None or result.profile.start_weight != 80.0:
        raise AssertionError(f"Unexpected profile {result.profile}")

    entry = result.daily["2024-01-14"]
    if entry.weight is not None or entry.water_glasses != 0:
        raise AssertionError(f"Unexpected daily entry {entry}")
