from __future__ import annotations

"""Command line interface for footflow using Typer."""

from pathlib import Path
from typing import Dict, List, Optional

import json
import logging
from collections import Counter

import typer
from pydantic import ValidationError

from .config import Settings, load_settings
from .core.reconcile import StaleSnapshotError
from .core.tables import export_view
from .dashboard import DashboardView, TrafficDashboard
from .ingest import SnapshotParseError, load_snapshot, read_snapshots
from .types import SnapshotMismatchError
from .utils.logging import get_logger
from .utils.timeparse import InvalidLabelFormat, available_hours

app = typer.Typer(help="Windowed foot-traffic metrics from snapshot feeds")
logger = logging.getLogger(__name__)


def _parse_override_value(raw: str) -> object:
    lower = raw.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"null", "none"}:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    if raw.startswith("[") or raw.startswith("{"):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise typer.BadParameter(f"invalid JSON override value: {raw}") from None
    return raw


def _ensure_path(settings: Settings, keys: List[str]) -> None:
    current: object = settings
    for key in keys:
        if not hasattr(current, key):
            raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")
        current = getattr(current, key)


def _apply_override(data: Dict[str, object], keys: List[str], value: object) -> None:
    target = data
    for key in keys[:-1]:
        existing = target.get(key)
        if not isinstance(existing, dict):
            existing = {}
            target[key] = existing
        target = existing
    target[keys[-1]] = value


def _feed_path(cfg: Settings, source: Optional[Path]) -> Path:
    if source is not None:
        return source
    if cfg.feed.path:
        return Path(cfg.feed.path)
    raise typer.BadParameter("no snapshot file given and feed.path is not configured")


def _summarise(view: DashboardView) -> List[str]:
    window = view.window
    lines = []
    span = f" ({window.labels[0]} .. {window.labels[-1]})" if window.labels else ""
    lines.append(f"mode={window.mode.value} labels={len(window)}{span}")
    summary = view.metrics.summary
    lines.append(
        f"efficiency={summary.efficiency}% total_traffic={summary.total_traffic:g} "
        f"avg_dwell={summary.average_dwell:.1f}s top={summary.top_location}"
    )
    for stat in view.metrics.stats:
        marker = "*" if stat.name in view.selection else " "
        lines.append(
            f"{marker} {stat.name}: ratio={stat.current_ratio:.2f} avg={stat.average_ratio:.2f}"
        )
    for path in view.metrics.ranking.best:
        lines.append(f"best  {path.label} {path.score:.2f}")
    for path in view.metrics.ranking.worst:
        lines.append(f"worst {path.label} {path.score:.2f}")
    return lines


def _emit(view: DashboardView, as_json: bool, export: Optional[Path]) -> None:
    if export is not None:
        with open(export, "w", encoding="utf8") as fh:
            json.dump(export_view(view), fh, indent=2)
        if not as_json:
            typer.echo(f"Exported view to {export}")
    if as_json:
        typer.echo(json.dumps(export_view(view)))
    else:
        for line in _summarise(view):
            typer.echo(line)


@app.callback()
def init(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        dir_okay=False,
        file_okay=True,
        exists=False,
        help="Path to a YAML or JSON configuration file.",
    ),
    set_overrides: List[str] = typer.Option(
        [],
        "--set",
        help="Override configuration values using dotted paths, e.g. window.capacity=12",
    ),
) -> None:
    """Initialise the Typer context with validated settings."""

    if config is not None and not config.exists():
        raise typer.BadParameter(f"configuration file not found: {config}")

    try:
        settings = load_settings(config) if config else Settings()
    except (FileNotFoundError, RuntimeError, TypeError, ValueError) as exc:
        raise typer.BadParameter(f"failed to load configuration: {exc}") from exc

    if set_overrides:
        data = settings.model_dump()
        for override in set_overrides:
            if "=" not in override:
                raise typer.BadParameter(
                    "overrides must be of the form --set section.key=value"
                )
            key, raw_value = override.split("=", 1)
            if not key:
                raise typer.BadParameter("override key cannot be empty")
            keys = key.split(".")
            _ensure_path(settings, keys)
            _apply_override(data, keys, _parse_override_value(raw_value))
        try:
            settings = Settings.model_validate(data)
        except ValidationError as exc:
            raise typer.BadParameter(f"invalid configuration override: {exc}") from exc

    get_logger("footflow", settings.logging.level, settings.logging.format)
    ctx.obj = settings


@app.command()
def replay(
    ctx: typer.Context,
    source: Optional[Path] = typer.Argument(None, help="JSON or JSON-lines snapshot file"),
    start: Optional[int] = typer.Option(
        None, "--start", help="Finish with a range selection starting at this hour (0-23)"
    ),
    end: Optional[int] = typer.Option(
        None, "--end", help="Last hour (inclusive) of the final range selection"
    ),
    capacity: Optional[int] = typer.Option(None, "--capacity", "-k", min=1),
    as_json: bool = typer.Option(False, "--json", help="Print the view as JSON"),
    export: Optional[Path] = typer.Option(None, "--export", "-e"),
    strict: bool = typer.Option(False, "--strict", help="Stop at the first rejected snapshot"),
) -> None:
    """Feed snapshots through a dashboard in file order and print the view.

    Snapshots that violate the feed contract (misaligned values, stale
    sequence numbers) are reported and skipped; the held window is never
    modified by a rejected snapshot.  With ``--strict`` the first rejection
    ends the command with exit code 1.
    """

    cfg: Settings = ctx.obj
    if (start is None) != (end is None):
        raise typer.BadParameter("--start and --end must be given together")
    path = _feed_path(cfg, source)
    if not path.exists():
        raise typer.BadParameter(f"snapshot file not found: {path}")

    dashboard = TrafficDashboard(cfg, capacity=capacity)
    actions: Counter[str] = Counter()
    try:
        for n, snapshot in enumerate(read_snapshots(path), start=1):
            try:
                result = dashboard.on_snapshot(snapshot)
            except (SnapshotMismatchError, StaleSnapshotError, InvalidLabelFormat) as exc:
                typer.secho(f"snapshot {n} rejected: {exc}", err=True)
                if strict:
                    raise typer.Exit(code=1)
                actions["rejected"] += 1
                continue
            actions[result.action.value] += 1
    except SnapshotParseError as exc:
        typer.secho(str(exc), err=True)
        raise typer.Exit(code=1)

    total = sum(actions.values())
    detail = " ".join(f"{k}={v}" for k, v in sorted(actions.items()))
    if not as_json:
        typer.echo(f"applied {total} snapshots: {detail}")

    if start is not None and end is not None:
        try:
            dashboard.select_range(start, end)
        except InvalidLabelFormat as exc:
            typer.secho(f"range selection failed: {exc}", err=True)
            raise typer.Exit(code=1)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--start/--end") from exc
        except RuntimeError as exc:
            typer.secho(str(exc), err=True)
            raise typer.Exit(code=1)

    _emit(dashboard.view(), as_json, export)


@app.command()
def metrics(
    ctx: typer.Context,
    source: Optional[Path] = typer.Argument(None, help="JSON snapshot file"),
    as_json: bool = typer.Option(False, "--json", help="Print the view as JSON"),
) -> None:
    """Compute the live-tail metrics of a single snapshot."""

    cfg: Settings = ctx.obj
    path = _feed_path(cfg, source)
    try:
        snapshot = load_snapshot(path)
        dashboard = TrafficDashboard(cfg)
        dashboard.on_snapshot(snapshot)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"snapshot file not found: {path}") from exc
    except (SnapshotParseError, SnapshotMismatchError, InvalidLabelFormat) as exc:
        typer.secho(str(exc), err=True)
        raise typer.Exit(code=1)
    _emit(dashboard.view(), as_json, None)


@app.command()
def hours(
    ctx: typer.Context,
    source: Optional[Path] = typer.Argument(None, help="JSON snapshot file"),
) -> None:
    """List the hours of day available for range selection."""

    cfg: Settings = ctx.obj
    path = _feed_path(cfg, source)
    try:
        snapshot = load_snapshot(path)
        options = available_hours(snapshot.labels)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"snapshot file not found: {path}") from exc
    except (SnapshotParseError, InvalidLabelFormat) as exc:
        typer.secho(str(exc), err=True)
        raise typer.Exit(code=1)
    for hour, label in options:
        typer.echo(f"{hour:2d}  {label}")


def main() -> None:
    """Execute the Typer application."""

    app()


if __name__ == "__main__":
    main()
