"""CLI interface for NowPlay."""

from __future__ import annotations

import json
import logging
import random
import sys
import time
from pathlib import Path
from typing import Any, NoReturn

import click

from nowplay.core.engine import NowPlayEngine
from nowplay.core.errors import NowPlayError
from nowplay.core.launcher import LAUNCHER_KINDS, CastLauncher, MediaLauncher, create_launcher
from nowplay.core.media import MediaTypes
from nowplay.core.selector import SizeUnit
from nowplay.models.copy_result import CopyPlan, CopyResult
from nowplay.settings import Settings
from nowplay.utils import bytes_to_human, format_elapsed

log = logging.getLogger(__name__)

_UNIT_LABELS = [unit.label.lower() for unit in SizeUnit]


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _media_types(settings: Settings) -> MediaTypes:
    return MediaTypes.from_lists(
        audio=settings.get("media.audio_extensions"),
        video=settings.get("media.video_extensions"),
        playlist=settings.get("media.playlist_extensions"),
    )


def _build_engine(settings: Settings, seed: int | None = None) -> NowPlayEngine:
    rng = random.Random(seed) if seed is not None else None
    return NowPlayEngine(media=_media_types(settings), rng=rng)


def _build_launcher(kind: str, settings: Settings) -> MediaLauncher:
    executable = settings.get(f"player.{kind}_path")
    if kind == "cast":
        return create_launcher(kind, executable, subtitle_scale=float(settings.get("player.subtitle_scale")))
    return create_launcher(kind, executable)


def _fail(message: str) -> NoReturn:
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(1)


def _resolve_base(base: str | None, settings: Settings) -> Path:
    """Use the given base directory and remember it, or fall back to the stored one."""
    if base:
        path = Path(base).expanduser().resolve()
        settings.set("library.base_dir", str(path))
        return path
    stored = settings.get("library.base_dir")
    if not stored:
        _fail("No base directory given and none remembered.")
    return Path(stored)


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """NowPlay: play or copy a random pick of your media directories."""
    _setup_logging(verbose)


# ── list ─────────────────────────────────────────────────────────────────

@main.command("list")
@click.argument("base", required=False)
@click.option("--sizes", "-s", is_flag=True, help="Compute playable content size of each directory")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(base: str | None, sizes: bool, as_json: bool) -> None:
    """List the subdirectories of BASE."""
    settings = Settings.instance()
    base_dir = _resolve_base(base, settings)
    engine = _build_engine(settings)
    catalog = engine.catalog(base_dir, compute_sizes=sizes)

    if as_json:
        data = [{"path": str(e.path), "size": e.size} for e in catalog]
        click.echo(json.dumps(data, indent=2))
        return

    if not catalog:
        click.echo("No sub-directories to select from.")
        return

    click.echo(f"\n{click.style(str(base_dir), bold=True)} has {len(catalog)} directories.\n")
    for entry in catalog:
        if sizes:
            size_str = bytes_to_human(entry.size) if entry.size else click.style("empty", fg="bright_black")
            click.echo(f"  {entry.name:50s} {size_str:>10s}")
        else:
            click.echo(f"  {entry.name}")
    if sizes:
        total = sum(e.size for e in catalog)
        click.echo(f"\nTotal: {click.style(bytes_to_human(total), fg='green', bold=True)}\n")


# ── play ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("base", required=False)
@click.option("--player", "-p", type=click.Choice(LAUNCHER_KINDS), default=None, help="Player to launch")
@click.option("--dry-run", is_flag=True, help="Show the selected directory without playing it")
def play(base: str | None, player: str | None, dry_run: bool) -> None:
    """Play a randomly selected subdirectory of BASE."""
    settings = Settings.instance()
    base_dir = _resolve_base(base, settings)
    if player:
        settings.set("player.kind", player)
    kind = player or settings.get("player.kind")

    engine = _build_engine(settings)
    try:
        directory, files = engine.select_play_files(base_dir)
    except NowPlayError as exc:
        _fail(str(exc))

    click.echo(f"Selected: {click.style(directory.name or str(directory), fg='cyan', bold=True)}")
    if dry_run:
        for media_file in files:
            click.echo(f"  {media_file.kind:8s} {media_file.path.name}")
        return

    try:
        launcher = _build_launcher(kind, settings)
        _launch(launcher, files)
    except NowPlayError as exc:
        _fail(str(exc))


def _launch(launcher: MediaLauncher, files: list) -> None:
    if not isinstance(launcher, CastLauncher):
        launcher.launch(files, on_log=click.echo)
        return
    try:
        launcher.launch(files, on_log=click.echo)
    except KeyboardInterrupt:
        launcher.stop()
        click.echo("\nStopped.")


# ── copy ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("base", required=False)
@click.argument("destination", required=False)
@click.option("--size", "amount", default=None, help="Amount of content to copy")
@click.option("--unit", "-u", type=click.Choice(_UNIT_LABELS, case_sensitive=False), default=None,
              help="Unit of --size")
@click.option("--seed", type=int, default=None, help="Seed the random selection (repeatable picks)")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show the selection without copying")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def copy(
    base: str | None,
    destination: str | None,
    amount: str | None,
    unit: str | None,
    seed: int | None,
    yes: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Copy a random selection of BASE subdirectories into DESTINATION."""
    settings = Settings.instance()
    base_dir = _resolve_base(base, settings)

    if destination:
        destination = str(Path(destination).expanduser().resolve())
        settings.set("copy.destination", destination)
    else:
        destination = settings.get("copy.destination")
    if amount is not None:
        settings.set("copy.amount", amount)
    else:
        amount = str(settings.get("copy.amount"))
    if unit is not None:
        size_unit = SizeUnit.from_label(unit)
        settings.set("copy.unit", int(size_unit))
    else:
        size_unit = SizeUnit.coerce(settings.get("copy.unit"))

    engine = _build_engine(settings, seed)
    try:
        plan = engine.plan_copy(base_dir, destination, amount, size_unit)
    except NowPlayError as exc:
        if as_json:
            click.echo(json.dumps({"status": "error", "error": str(exc)}))
            sys.exit(1)
        _fail(str(exc))

    if not as_json:
        _print_plan(plan)

    if dry_run:
        if as_json:
            click.echo(json.dumps({"status": "dry_run", "plan": _plan_data(plan)}, indent=2))
        else:
            click.echo("(dry run: nothing was copied)")
        return

    if not yes and not as_json:
        if not click.confirm(f"Copy {len(plan.selected)} directories?", default=True):
            click.echo("Aborted.")
            return

    start = time.monotonic()
    on_log = None if as_json else (lambda message: click.echo(f"  {message}"))
    future = engine.start_copy(plan, on_log=on_log)
    try:
        result = future.result()
    except KeyboardInterrupt:
        engine.stop_copy()
        if not as_json:
            click.echo("\nStopping...")
        # the job stops before its next directory
        result = future.result()
    finally:
        engine.shutdown()
    elapsed = time.monotonic() - start

    if as_json:
        click.echo(json.dumps({"status": _status(result), "plan": _plan_data(plan),
                               "result": _result_data(result)}, indent=2))
        if result.errors:
            sys.exit(1)
        return

    for error in result.errors:
        click.echo(f"  {click.style('✗', fg='red')} {error}", err=True)
    if result.errors:
        sys.exit(1)
    if result.aborted:
        click.echo("Copy stopped.")
        return
    click.echo(
        f"\nCopied {click.style(bytes_to_human(result.bytes_copied), fg='green', bold=True)} "
        f"({result.files_copied:,} files in {result.directories_copied} directories) "
        f"in {format_elapsed(elapsed)}\n"
    )


def _print_plan(plan: CopyPlan) -> None:
    click.echo(f"\nSelecting from {plan.base_dir} for {plan.target_bytes} bytes...\n")
    for entry in plan.selected:
        click.echo(f"  {click.style('✓', fg='green')} {entry.name:50s} {bytes_to_human(entry.size):>10s}")
    click.echo(
        f"\nTotal: {click.style(bytes_to_human(plan.total_bytes), fg='green', bold=True)} "
        f"of {bytes_to_human(plan.target_bytes)} in {len(plan.selected)} directories\n"
    )


def _plan_data(plan: CopyPlan) -> dict[str, Any]:
    return {
        "base_dir": str(plan.base_dir),
        "destination": str(plan.destination),
        "target_bytes": plan.target_bytes,
        "total_bytes": plan.total_bytes,
        "selected": [{"path": str(e.path), "size": e.size} for e in plan.selected],
    }


def _result_data(result: CopyResult) -> dict[str, Any]:
    return {
        "directories_copied": result.directories_copied,
        "files_copied": result.files_copied,
        "bytes_copied": result.bytes_copied,
        "errors": result.errors,
        "aborted": result.aborted,
    }


def _status(result: CopyResult) -> str:
    if result.errors:
        return "error"
    if result.aborted:
        return "aborted"
    return "copied"


# ── settings ─────────────────────────────────────────────────────────────

@main.group("settings")
def settings_group() -> None:
    """Settings management commands."""


@settings_group.command("show")
def settings_show() -> None:
    """Show all effective settings."""
    settings = Settings.instance()
    click.echo(f"# {settings.path}")
    click.echo(json.dumps(settings.as_dict(), indent=2))


@settings_group.command("get")
@click.argument("key")
def settings_get(key: str) -> None:
    """Print the value of KEY (dot notation, e.g. copy.unit)."""
    click.echo(json.dumps(Settings.instance().get(key)))


@settings_group.command("set")
@click.argument("key")
@click.argument("value")
def settings_set(key: str, value: str) -> None:
    """Store VALUE under KEY. VALUE is parsed as JSON when possible."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    Settings.instance().set(key, parsed)
    click.echo(f"{key} = {json.dumps(parsed)}")
