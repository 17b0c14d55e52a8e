"""vocab-srs CLI: schedule reviews and inspect records from YAML/JSON files."""

import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml

from vocab_srs.application.config import resolve_config
from vocab_srs.domain.srs.errors import RecordFormatError

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="vocab-srs: spaced-repetition scheduling for vocabulary cards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage vocab-srs configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_document(path: Path) -> Any:
    """Read a YAML or JSON file (JSON is valid YAML)."""
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        typer.secho(f"Cannot read {path}: {e}", fg="red", err=True)
        raise typer.Exit(1)
    except yaml.YAMLError as e:
        typer.secho(f"Invalid YAML/JSON in {path}: {e}", fg="red", err=True)
        raise typer.Exit(1)


def _build_scheduler(now: str | None):
    from vocab_srs.application.srs.scheduler import Scheduler
    from vocab_srs.application.utils.timestamps import to_datetime
    from vocab_srs.domain.srs.ports import FixedClock

    settings = resolve_config()
    clock = None
    if now:
        try:
            clock = FixedClock(to_datetime(now, settings.tzinfo))
        except (TypeError, ValueError) as e:
            typer.secho(f"Invalid --now value {now!r}: {e}", fg="red", err=True)
            raise typer.Exit(2)
    return Scheduler(settings=settings, clock=clock)


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, default=_json_default))


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


NowOption = Annotated[
    str | None,
    typer.Option("--now", help="Override the current time (ISO-8601 or epoch ms)."),
]
AdvancedOption = Annotated[
    bool | None,
    typer.Option("--advanced/--basic", help="Adaptive (minutes) or basic SM-2 (days)."),
]
EpochOption = Annotated[
    bool, typer.Option("--epoch-ms", help="Write timestamps as epoch milliseconds.")
]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def new(
    advanced: AdvancedOption = None,
    now: NowOption = None,
    epoch_ms: EpochOption = False,
):
    """Print the default record for a newly added card."""
    from vocab_srs.infrastructure.serialization import record_to_dict

    scheduler = _build_scheduler(now)
    record = scheduler.new_record(use_advanced=advanced)
    _echo_json(record_to_dict(record, "epoch_ms" if epoch_ms else "iso"))


@app.command()
def review(
    record_file: Annotated[Path, typer.Argument(help="YAML/JSON file holding the card's record.")],
    quality: Annotated[int, typer.Option("--quality", "-q", help="Recall quality, 0-5.")],
    advanced: AdvancedOption = None,
    category: Annotated[str | None, typer.Option(help="Card category.")] = None,
    difficulty: Annotated[
        str | None, typer.Option(help="Card difficulty: easy, medium, hard.")
    ] = None,
    response_time: Annotated[
        float | None, typer.Option("--response-time", help="Answer time in milliseconds.")
    ] = None,
    stats_file: Annotated[
        Path | None, typer.Option("--stats", help="YAML/JSON file with learner stats.")
    ] = None,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the new record here.")
    ] = None,
    explain: Annotated[
        bool, typer.Option("--explain", help="Print algorithm diagnostics to stderr.")
    ] = False,
    now: NowOption = None,
    epoch_ms: EpochOption = False,
):
    """[bold green]Review[/bold green] a card and print its next scheduling record."""
    from vocab_srs.application.srs.scheduler import ReviewOptions
    from vocab_srs.infrastructure.serialization import record_to_dict

    raw_record = _load_document(record_file)
    user_stats = _load_document(stats_file) if stats_file else None

    scheduler = _build_scheduler(now)
    outcome = scheduler.review(
        raw_record,
        quality,
        ReviewOptions(
            use_advanced=advanced,
            category=category,
            difficulty=difficulty,
            response_time_ms=response_time,
            user_stats=user_stats,
        ),
    )

    if explain:
        typer.echo(f"Algorithm: {outcome.algorithm}", err=True)
        if outcome.fell_back:
            typer.secho(f"Fell back: {outcome.error}", fg="yellow", err=True)
        if outcome.metadata:
            for key, value in asdict(outcome.metadata).items():
                typer.echo(f"  {key}: {value}", err=True)

    data = record_to_dict(outcome.record, "epoch_ms" if epoch_ms else "iso")
    if output:
        output.write_text(json.dumps(data, indent=2), encoding="utf-8")
        typer.secho(f"Wrote {output}", fg="green", err=True)
    else:
        _echo_json(data)


@app.command()
def due(
    records_file: Annotated[
        Path, typer.Argument(help="YAML/JSON mapping of card id to record.")
    ],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
    now: NowOption = None,
):
    """List due cards, earliest first."""
    from vocab_srs.application.srs.timing import due_records, time_until_next_review
    from vocab_srs.infrastructure.serialization import record_from_dict

    document = _load_document(records_file) or {}
    if not isinstance(document, dict):
        typer.secho("Expected a mapping of card id to record.", fg="red", err=True)
        raise typer.Exit(1)

    scheduler = _build_scheduler(now)
    current = scheduler.now()

    records = []
    invalid = []
    for card_id, raw in document.items():
        if raw is None:
            records.append((str(card_id), None))
            continue
        try:
            records.append((str(card_id), record_from_dict(raw)))
        except RecordFormatError as e:
            invalid.append(str(card_id))
            logger.warning(f"Skipping card {card_id}: {e}")

    selected = due_records(records, current)

    if json_output:
        _echo_json(
            {
                "due": [card_id for card_id, _ in selected],
                "total": len(records),
                "invalid": invalid,
            }
        )
        return

    typer.echo(f"Due: {len(selected)} of {len(records)}")
    for card_id, record in selected:
        when = record.next_review.isoformat() if record else "never scheduled"
        typer.echo(f"  {card_id}  ({when})")
    for card_id, record in records:
        if (card_id, record) not in selected:
            typer.echo(f"  {card_id}  in {time_until_next_review(record, current)}")
    if invalid:
        typer.secho(f"Invalid records: {', '.join(invalid)}", fg="yellow")


@app.command()
def insights(
    stats_file: Annotated[Path, typer.Argument(help="YAML/JSON file with learner stats.")],
    history_file: Annotated[
        Path | None,
        typer.Option("--history", help="Record file whose review history is analysed."),
    ] = None,
):
    """Show learning insights derived from learner stats."""
    from vocab_srs.application.srs.insights import generate_learning_insights
    from vocab_srs.application.srs.normalizer import normalize_record

    settings = resolve_config()
    history = ()
    if history_file:
        raw = _load_document(history_file)
        history = normalize_record(raw, datetime.now(settings.tzinfo)).review_history

    try:
        found = generate_learning_insights(_load_document(stats_file), history, settings)
    except (TypeError, ValueError) as e:
        typer.secho(f"Invalid stats: {e}", fg="red", err=True)
        raise typer.Exit(1)

    if not found:
        typer.echo("No insights yet.")
    for insight in found:
        typer.echo(f"[{insight.priority}] {insight.type}: {insight.message}")


@app.command("batch-size")
def batch_size(
    stats_file: Annotated[Path, typer.Argument(help="YAML/JSON file with learner stats.")],
    minutes: Annotated[float, typer.Option(help="Time available for the session.")] = 15,
):
    """Suggest how many cards to study in the time available."""
    from vocab_srs.application.srs.insights import suggest_optimal_batch_size

    try:
        size = suggest_optimal_batch_size(
            _load_document(stats_file), minutes * 60 * 1000, resolve_config()
        )
    except (TypeError, ValueError) as e:
        typer.secho(f"Invalid stats: {e}", fg="red", err=True)
        raise typer.Exit(1)
    typer.echo(size)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    _echo_json(config.model_dump())
