from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from .errors import SettingsValidationError, SnapshotValidationError
from .filters import resolve_status_filter
from .parse_snapshot import load_snapshot
from .project_models import ALL, FlatRenderRow
from .render_rows import to_render_rows
from .settings import VIEW_MODES, TimelineSettings, load_settings, parse_settings
from .timeline import TimelineView, ViewState

logger = logging.getLogger("gantt_timeline")


def _parse_date(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from exc


def _parse_status_filter(value: str) -> str:
    try:
        resolve_status_filter(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Gantt timeline layout engine",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("snapshot", help="Path to snapshot YAML (departments, elements, tasks)")
    parser.add_argument("--settings", help="Settings YAML; defaults to the snapshot's 'settings' block")
    parser.add_argument("--view", choices=VIEW_MODES, help="View mode; defaults to the configured default")
    parser.add_argument("--offset", type=int, default=0, help="Initial scroll offset in days")
    parser.add_argument(
        "--scroll",
        action="append",
        choices=("left", "right"),
        default=[],
        help="Pan one step in the given direction (repeatable, applied in order)",
    )
    parser.add_argument("--department", default=ALL, help="Department id filter")
    parser.add_argument("--status", type=_parse_status_filter, default=ALL, help="Status filter (todo, in_progress, done)")
    parser.add_argument("--today", type=_parse_date, default=dt.date.today(), help="Reference date (YYYY-MM-DD)")
    parser.add_argument("--rows", action="store_true", help="Include flattened render rows in the output")
    parser.add_argument("--format", choices=("yaml", "json"), default="yaml", help="Output format")
    parser.add_argument("--out", help="Output file; stdout when omitted")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _load_settings(args: argparse.Namespace, snapshot_path: Path) -> TimelineSettings:
    if args.settings:
        return load_settings(args.settings)
    with snapshot_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if isinstance(raw, dict):
        return parse_settings(raw.get("settings"))
    return parse_settings(None)


def _row_to_dict(row: FlatRenderRow) -> dict[str, Any]:
    return {
        "order": row.order,
        "indent": row.indent,
        "node_type": row.node_type,
        "node_id": row.node_id,
        "name": row.name,
        "department_id": row.department_id,
        "position": row.position.as_style() if row.position else None,
        "start_date": row.start_date.isoformat() if row.start_date else None,
        "finish_date": row.finish_date.isoformat() if row.finish_date else None,
        "status": row.status,
        "progress": row.progress,
        "color": row.color,
    }


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    snapshot_path = Path(args.snapshot)

    try:
        snapshot = load_snapshot(str(snapshot_path))
        settings = _load_settings(args, snapshot_path)
    except (yaml.YAMLError, SnapshotValidationError, SettingsValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError as exc:
        print(f"Error: file not found: {exc.filename}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading snapshot: {exc}", file=sys.stderr)
        return 1

    logger.info(
        "Loaded %d departments and %d elements from %s",
        len(snapshot.departments),
        len(snapshot.elements),
        snapshot_path,
    )

    state = ViewState(
        view_mode=args.view or settings.default_view_mode,
        scroll_offset=args.offset,
        department_filter=args.department,
        status_filter=args.status,
    )
    view = TimelineView(snapshot, today=args.today, settings=settings, state=state)
    layout = view.layout()
    for direction in args.scroll:
        layout = view.scroll(direction)

    if layout.is_empty:
        logger.warning("No dated tasks match the current filters; the timeline is empty")

    payload = layout.to_dict()
    if args.rows:
        payload["rows"] = [_row_to_dict(row) for row in to_render_rows(layout)]

    if args.format == "json":
        text = json.dumps(payload, indent=2)
    else:
        text = yaml.safe_dump(payload, sort_keys=False)

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
        logger.info("Wrote layout to %s", out_path)
    else:
        sys.stdout.write(text)

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
