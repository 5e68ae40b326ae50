"""
Default planner document factory.

Builds the canonical, fully populated document used for fresh installs and
as the base every loaded document is merged onto.
"""

from personal_planner.domain.labels import parse_label, serialize_exercise
from personal_planner.domain.planner import (
    ChecklistItem,
    Exercise,
    GroceryItem,
    MealPlan,
    PlannerDocument,
    Routine,
    RoutineRow,
    Template,
    Workout,
    WorkoutKey,
)
from personal_planner.utils.ids import make_id

DEFAULT_MEAL_PLAN_TITLE = "Meal plan (sempre uguale) ~1.800 kcal"

DEFAULT_MEAL_ITEMS = [
    "Colazione: yogurt greco 0% 250 g + avena 30 g + 1 frutto.",
    "Pranzo: pollo/tacchino 200 g (cotto) + riso 70 g (crudo) + verdure + olio 10 g.",
    "Snack 16:30: whey 30 g OR yogurt greco 200 g.",
    "Cena: pesce magro 250 g + patate 300 g (o pane 80 g) + verdure + olio 10 g.",
    "2 giorni/sett: salmone 180-200 g (riduci i carbo).",
    "Treat: max 200 kcal, solo post-cena.",
]

# (name, qty, price)
DEFAULT_GROCERY_ROWS: list[tuple[str, str, float | None]] = [
    ("Greek yogurt 0% (1kg)", "1 tub", 1.95),
    ("Porridge oats (1kg)", "1 bag", 1.25),
    ("Bananas (5 pack)", "1 pack", 0.78),
    ("Chicken breast fillets (1kg, frozen)", "1 bag", 7.0),
    ("Basmati rice (1kg)", "1 bag", 1.79),
    ("Potatoes (2.5kg)", "1 bag", 1.29),
    ("White fish fillets (e.g. basa 500g)", "2 packs", 5.0),
    ("Extra virgin olive oil (1L)", "1 bottle", 7.0),
    ("Whey protein (1kg)", "1 bag", 24.49),
    ("Mixed veg / salad", "7 portions", None),
    ("Fruit (your choice)", "7 portions", None),
]

DEFAULT_SCHEDULE = [
    ("07:00-07:30", "Luce fuori 10 min + acqua. Ultimo caffè entro le 14:00."),
    ("08:00", "Colazione fissa."),
    ("12:30", "Snack pre-wo (banana o whey o yogurt)."),
    ("13:00", "Allenamento (2-3 giorni): A/B + C opzionale."),
    ("14:15", "Pranzo fisso."),
    ("16:30-17:30", "Snack proteico “blocco fame”."),
    ("19:00-20:00", "Cena fissa (molta verdura)."),
    ("22:30", "Shutdown: luci basse, niente scroll infinito."),
]

DEFAULT_CHECKLIST = [
    ("morning_checkin", "Inserisci peso + sleep + energy"),
    ("sunlight", "Luce fuori 10 min"),
    ("breakfast", "Colazione"),
    ("steps", "8.000-10.000 passi"),
    ("lunch", "Pranzo"),
    ("snack", "Snack proteico (16:30-17:30)"),
    ("workout", "Allenamento (Mon/Wed/Fri)"),
    ("dinner", "Cena"),
    ("shutdown", "Shutdown alle 22:30"),
    ("treat", "Treat solo post-cena (se serve)"),
]

WORKOUT_CHECKLIST_ID = "workout"

# key -> (title, subtitle, legacy labels)
DEFAULT_TEMPLATE_LABELS: dict[WorkoutKey, tuple[str, str, list[str]]] = {
    WorkoutKey.A: (
        "Workout A",
        "Full body, squat focus",
        [
            "Goblet squat — 4×8-10",
            "Bench press — 4×6-8",
            "Seated cable row — 3×10-12",
            "Romanian deadlift — 3×8-10",
            "Plank — 3×30-45s",
        ],
    ),
    WorkoutKey.B: (
        "Workout B",
        "Full body, hinge focus",
        [
            "Trap bar deadlift — 4×5-6",
            "Overhead press — 3×8-10",
            "Lat pulldown — 3×10-12",
            "Walking lunges — 3×10-12",
            "Dead bug — 3 sets",
        ],
    ),
    WorkoutKey.C: (
        "Workout C",
        "Optional conditioning",
        [
            "Incline dumbbell press — 3×10-12",
            "Leg press — 3×12-15",
            "Face pull — 3×12-15",
            "Bike intervals — 10 min",
        ],
    ),
    WorkoutKey.REST: (
        "Rest day",
        "Active recovery",
        [
            "Walk — 30-45 min",
            "Mobility — 10 min",
        ],
    ),
}


def exercises_from_labels(
    labels: list[str], existing_ids: list[str] | None = None
) -> list[Exercise]:
    """
    Build structured exercises from legacy labels.

    Args:
        labels: Legacy label strings.
        existing_ids: Optional ids to reuse by position.

    Returns:
        One exercise per label, in order.
    """
    existing_ids = existing_ids or []
    exercises: list[Exercise] = []

    for index, label in enumerate(labels):
        parsed = parse_label(label)
        exercise_id = existing_ids[index] if index < len(existing_ids) else ""
        exercises.append(
            Exercise(
                id=exercise_id or make_id(),
                name=parsed.name,
                sets=parsed.sets,
                reps_target=parsed.reps_target,
            )
        )

    return exercises


def labels_from_exercises(exercises: list[Exercise]) -> list[str]:
    """Regenerate the legacy label list from structured exercises."""
    return [serialize_exercise(exercise) for exercise in exercises]


def template_from_labels(title: str, subtitle: str, labels: list[str]) -> Template:
    """Build a template whose structured list is parsed from labels."""
    exercises = exercises_from_labels(labels)
    return Template(
        title=title,
        subtitle=subtitle,
        exercises=exercises,
        items=labels_from_exercises(exercises),
    )


def default_template(key: WorkoutKey | str) -> Template:
    """Build the default template for one workout key."""
    title, subtitle, labels = DEFAULT_TEMPLATE_LABELS[WorkoutKey(key)]
    return template_from_labels(title, subtitle, labels)


def default_templates() -> dict[str, Template]:
    """Build the default templates for every workout key."""
    return {key.value: default_template(key) for key in WorkoutKey}


def default_grocery() -> list[GroceryItem]:
    """Build the default grocery list with fresh ids."""
    return [
        GroceryItem(id=make_id(), name=name, qty=qty, price=price)
        for name, qty, price in DEFAULT_GROCERY_ROWS
    ]


def default_checklist() -> list[ChecklistItem]:
    """Build the default checklist (fixed ids)."""
    return [ChecklistItem(id=item_id, label=label) for item_id, label in DEFAULT_CHECKLIST]


def default_schedule() -> list[RoutineRow]:
    """Build the default daily schedule."""
    return [RoutineRow(time=time, text=text) for time, text in DEFAULT_SCHEDULE]


def default_document() -> PlannerDocument:
    """
    Build the canonical default planner document.

    Returns:
        Fully populated document with seed content and no daily entries.
    """
    return PlannerDocument(
        setup_completed=False,
        workout=Workout(templates=default_templates()),
        meal_plan=MealPlan(
            title=DEFAULT_MEAL_PLAN_TITLE,
            items=list(DEFAULT_MEAL_ITEMS),
            grocery=default_grocery(),
        ),
        routine=Routine(
            schedule=default_schedule(),
            checklist=default_checklist(),
        ),
    )
