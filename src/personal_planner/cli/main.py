"""
Command-line interface for Personal Planner.

Provides commands for viewing today's plan, logging the day, ticking
workout exercises and backing up the planner document.
"""

from pathlib import Path

import typer

from personal_planner.domain.planner import SetupPayload, Sex, Tone
from personal_planner.infrastructure.storage.local_storage import LocalFileStorage
from personal_planner.services.output import OutputService
from personal_planner.services.planner_service import PlannerService
from personal_planner.services.planner_store import PlannerStore
from personal_planner.utils.exceptions import PersonalPlannerError
from personal_planner.utils.logging_config import get_logger, setup_logging
from personal_planner.utils.parameters import ParameterLoader
from personal_planner.utils.timezone_utils import parse_date_argument

app = typer.Typer(help="Personal Planner - Local-first health and fitness planner")

logger = get_logger(__name__)


def init_config(config_path: str = "config/config.yaml") -> ParameterLoader:
    """
    Initialize configuration and logging.

    Args:
        config_path: Path to configuration file.

    Returns:
        Parameter loader instance.
    """
    param_loader = ParameterLoader(config_path)
    setup_logging(param_loader.get_logging_config(), "personal_planner")
    return param_loader


def open_planner(param_loader: ParameterLoader) -> PlannerService:
    """
    Build the store for the configured storage and load the document.

    Args:
        param_loader: Loaded configuration.

    Returns:
        Planner service over the loaded store.
    """
    storage_config = param_loader.get_storage_config()
    store = PlannerStore(
        param_loader.get_planner_config(),
        storage_config,
        LocalFileStorage(storage_config),
    )
    store.load()
    return PlannerService(store)


def resolve_date(value: str | None) -> str | None:
    """Turn an optional --date argument into an ISO key."""
    if value is None:
        return None
    try:
        return parse_date_argument(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def show(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    date: str | None = typer.Option(None, help="Day to show (defaults to today)"),
) -> None:
    """
    Show the checklist, daily log and workout for a day.
    """
    try:
        planner = open_planner(init_config(config_path))
        store = planner.store
        date_key = resolve_date(date) or store.today

        entry = store.ensure_today(date_key)
        template = store.template_for_date(date_key)
        log = store.ensure_workout_log(date_key)

        typer.echo(f"=== {date_key} ===")
        for item in store.checklist_for_date(date_key):
            mark = "x" if entry.checks.get(item.id) else " "
            typer.echo(f"  [{mark}] {item.label}  ({item.id})")

        typer.echo(f"\nWeight: {entry.weight if entry.weight is not None else '-'}")
        typer.echo(f"Sleep: {entry.sleep_hours if entry.sleep_hours is not None else '-'} h")
        typer.echo(f"Energy: {entry.energy if entry.energy is not None else '-'}")
        typer.echo(f"Water: {entry.water_glasses}/{store.config.water_glasses_target}")

        typer.echo(f"\n{template.title} - {template.subtitle}")
        for exercise, label in zip(template.exercises, template.items):
            row = log.exercises.get(exercise.id)
            mark = "x" if row is not None and row.done else " "
            typer.echo(f"  [{mark}] {label}  ({exercise.id})")

        status = "completed" if store.is_workout_completed(date_key) else "not completed"
        typer.echo(f"Workout {status}")

        store.commit()

    except PersonalPlannerError as e:
        logger.error(f"Show failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def setup(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    name: str = typer.Option("", help="Your name"),
    age: int | None = typer.Option(None, help="Age in years"),
    sex: Sex = typer.Option(Sex.NA, help="Sex"),
    start_weight: float | None = typer.Option(None, help="Starting weight in kg"),
    height_cm: float | None = typer.Option(None, help="Height in cm"),
    tone: Tone = typer.Option(Tone.GENTLE, help="Coaching tone"),
    target_weight: float | None = typer.Option(None, help="Goal weight in kg"),
    weeks: int | None = typer.Option(None, help="Goal duration in weeks"),
) -> None:
    """
    Complete the first-run setup (profile and optional weight goal).
    """
    try:
        planner = open_planner(init_config(config_path))
        payload = SetupPayload(
            name=name,
            age=age,
            sex=sex,
            start_weight=start_weight,
            height_cm=height_cm,
            tone=tone,
            goal_enabled=target_weight is not None,
            target_weight=target_weight,
            weeks=weeks,
        )
        planner.complete_setup(payload)
        typer.echo("Setup completed")

    except PersonalPlannerError as e:
        logger.error(f"Setup failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def check(
    item_id: str = typer.Argument(..., help="Checklist item id"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    date: str | None = typer.Option(None, help="Day to update (defaults to today)"),
) -> None:
    """
    Toggle a checklist step.
    """
    try:
        planner = open_planner(init_config(config_path))
        date_key = resolve_date(date)
        planner.toggle_daily(item_id, date_key)
        done = planner.store.ensure_today(date_key).checks.get(item_id, False)
        typer.echo(f"{item_id}: {'done' if done else 'not done'}")

    except PersonalPlannerError as e:
        logger.error(f"Check failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def water(
    glass: int = typer.Argument(..., help="Glass number (1-based)"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    date: str | None = typer.Option(None, help="Day to update (defaults to today)"),
) -> None:
    """
    Fill the water tracker up to a glass (repeat to step back one).
    """
    try:
        planner = open_planner(init_config(config_path))
        date_key = resolve_date(date)
        planner.toggle_daily_water_glass(glass - 1, date_key)
        entry = planner.store.ensure_today(date_key)
        typer.echo(f"Water: {entry.water_glasses}/{planner.store.config.water_glasses_target}")

    except PersonalPlannerError as e:
        logger.error(f"Water update failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def log(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    date: str | None = typer.Option(None, help="Day to update (defaults to today)"),
    weight: float | None = typer.Option(None, help="Body weight in kg"),
    sleep: float | None = typer.Option(None, help="Hours slept"),
    energy: int | None = typer.Option(None, min=1, max=4, help="Energy level (1-4)"),
) -> None:
    """
    Record weight, sleep and energy for a day.
    """
    try:
        planner = open_planner(init_config(config_path))
        date_key = resolve_date(date)

        if weight is not None:
            planner.set_daily_weight(weight, date_key)
        if sleep is not None:
            planner.set_daily_sleep_hours(sleep, date_key)
        if energy is not None:
            planner.set_daily_energy(energy, date_key)

        entry = planner.store.ensure_today(date_key)
        typer.echo(
            f"Weight: {entry.weight}  Sleep: {entry.sleep_hours}  Energy: {entry.energy}"
        )

    except PersonalPlannerError as e:
        logger.error(f"Log failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def exercise(
    exercise_id: str = typer.Argument(..., help="Exercise id from `show`"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    date: str | None = typer.Option(None, help="Day to update (defaults to today)"),
    weight: float | None = typer.Option(None, help="Load used in kg"),
    reps: float | None = typer.Option(None, help="Reps performed"),
) -> None:
    """
    Toggle a workout exercise, or record its load and reps.
    """
    try:
        planner = open_planner(init_config(config_path))
        date_key = resolve_date(date) or planner.store.today

        if weight is None and reps is None:
            planner.toggle_exercise(exercise_id, date_key)
        else:
            planner.set_exercise_log(exercise_id, weight, reps, date_key)

        row = planner.store.ensure_workout_log(date_key).exercises.get(exercise_id)
        if row is None:
            typer.echo(f"Exercise {exercise_id} is not in the workout for {date_key}", err=True)
            raise typer.Exit(code=1)

        typer.echo(
            f"{exercise_id}: {'done' if row.done else 'not done'}"
            f"  weight={row.weight}  reps={row.reps}"
        )

    except PersonalPlannerError as e:
        logger.error(f"Exercise update failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command("export")
def export_document(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    output: str | None = typer.Option(None, help="Write to this file instead of stdout"),
) -> None:
    """
    Export the planner document as pretty-printed JSON.
    """
    try:
        param_loader = init_config(config_path)
        planner = open_planner(param_loader)

        if output is None:
            typer.echo(planner.export_json())
            return

        output_service = OutputService(param_loader.get_output_config())
        path = output_service.write_export(planner.store, Path(output))
        typer.echo(f"Export written to {path}", err=True)

    except PersonalPlannerError as e:
        logger.error(f"Export failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command("import")
def import_document(
    input_file: str = typer.Argument(..., help="JSON backup to import"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """
    Import a JSON backup, replacing the current planner document.
    """
    try:
        planner = open_planner(init_config(config_path))

        try:
            raw = Path(input_file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersonalPlannerError(f"Cannot read {input_file}: {e}") from e

        if not planner.import_json(raw):
            raise PersonalPlannerError(f"{input_file} is not a planner JSON document")

        typer.echo(f"Imported {input_file}")

    except PersonalPlannerError as e:
        logger.error(f"Import failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command("daily-csv")
def daily_csv(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    output: str | None = typer.Option(None, help="Override output CSV path"),
) -> None:
    """
    Write one CSV row per logged day.
    """
    try:
        param_loader = init_config(config_path)
        planner = open_planner(param_loader)

        output_service = OutputService(param_loader.get_output_config())
        path = output_service.write_daily_csv(planner.store, Path(output) if output else None)

        if path is None:
            typer.echo("No daily entries to write")
        else:
            typer.echo(f"Daily report written to {path}")

    except PersonalPlannerError as e:
        logger.error(f"Daily report failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
