"""Command line shipment tracking.

Usage:
  kargo-takip 1234567890
  kargo-takip 1234567890 --json
  kargo-takip 1234567890 --state-file state/last_result.json --history-log reports/history.log

With ``--state-file`` the last result per tracking number is kept and the
report lists what changed since the previous run; ``--history-log`` appends
every report to a text log.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import TrackerSettings
from .errors import KargoTakipError, ProviderCloseError
from .models import TrackingResult
from .tracker import ARAS_KARGO, CargoTracker

logger = logging.getLogger(__name__)

COMPARED_FIELDS = ["status", "sender_branch", "receiver_branch", "delivery_date", "recipient"]
HISTORY_SEPARATOR = "-" * 60


def summarize(result: TrackingResult) -> dict:
    """Flat view of a result used for state files and change detection."""
    summary = {"tracking_status": result.status.name, "error": result.error}
    data = result.data
    for field in COMPARED_FIELDS:
        summary[field] = getattr(data, field) if data is not None else None
    summary["last_movement"] = None
    if data is not None and data.movements:
        last = data.movements[-1]
        summary["last_movement"] = f"{last.date} {last.location} {last.status}"
    return summary


def _display(value) -> str:
    if value is None:
        return "-"
    return textwrap.shorten(str(value), width=120, placeholder="...")


def compare_with_previous(previous: dict, current: dict) -> list[str]:
    """Human readable differences between two summaries; nothing on a first run."""
    if not previous:
        return []
    return [
        f"{field}: {_display(previous.get(field))} -> {_display(current.get(field))}"
        for field in ["tracking_status", *COMPARED_FIELDS, "last_movement", "error"]
        if previous.get(field) != current.get(field)
    ]


def load_state(path: Path) -> dict:
    if not path.exists():
        return {}
    return json.loads(path.read_text(encoding="utf-8"))


def save_state(path: Path, state: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state, indent=2, ensure_ascii=False), encoding="utf-8")


def append_history(path: Path, report: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(f"{report}\n{HISTORY_SEPARATOR}\n")


def build_report(provider: str, tracking_number: str, result: TrackingResult, checked_at: str, changes: list[str]) -> str:
    lines = [
        f"Check timestamp (UTC): {checked_at}",
        f"Provider: {provider}",
        f"Tracking number: {tracking_number}",
        f"Result: {result.status.name}",
    ]
    data = result.data
    if data is not None:
        lines += [
            f"Status: {data.status or 'N/A'}",
            f"Sender branch: {data.sender_branch or 'N/A'}",
            f"Receiver branch: {data.receiver_branch or 'N/A'}",
            f"Shipment date: {data.shipment_date or 'N/A'}",
            f"Delivery date: {data.delivery_date or 'N/A'}",
            f"Recipient: {data.recipient or 'N/A'}",
            f"Cargo type: {data.cargo_type or 'N/A'}",
            f"Weight: {data.weight or 'N/A'}",
            f"Package count: {data.package_count or 'N/A'}",
            f"Payment type: {data.payment_type or 'N/A'}",
        ]
        if data.failure_reasons:
            lines.append("Failed delivery attempts:")
            lines.extend(f"- {f.date} {f.reason}: {f.description}" for f in data.failure_reasons)
        if data.movements:
            lines.append("Movements:")
            lines.extend(f"- {m.date} | {m.location} | {m.status}" for m in data.movements)
    else:
        lines.append(f"Error: {result.error or 'None'}")

    if changes:
        lines.append("Changes from previous run:")
        lines.extend(f"- {c}" for c in changes)
    else:
        lines.append("No changes from previous run.")

    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kargo-takip", description="Track a shipment through the carrier's web page")
    parser.add_argument("tracking_number", nargs="?")
    parser.add_argument("--provider", default=ARAS_KARGO, help="carrier name (default: %(default)s)")
    parser.add_argument("--list-providers", action="store_true", help="list registered carriers and exit")
    parser.add_argument("--json", action="store_true", help="print the result as JSON")
    parser.add_argument("--state-file", help="JSON file keeping the last result per tracking number")
    parser.add_argument("--history-log", help="text file every report is appended to")
    parser.add_argument("--headful", action="store_true", help="show the browser window")
    parser.add_argument("--timeout-ms", type=int, help="navigation timeout in milliseconds")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


async def run(args: argparse.Namespace, settings: TrackerSettings) -> TrackingResult:
    tracker = CargoTracker(settings=settings)
    try:
        return await tracker.track_with_provider(args.provider, args.tracking_number)
    finally:
        try:
            await tracker.close()
        except ProviderCloseError as exc:
            logger.error("%s", exc)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    if args.headful:
        overrides["headless"] = False
    if args.timeout_ms is not None:
        overrides["navigation_timeout_ms"] = args.timeout_ms
    try:
        settings = TrackerSettings.from_env(**overrides)
    except KargoTakipError as exc:
        parser.error(str(exc))

    if args.list_providers:
        for name in CargoTracker(settings=settings).get_providers():
            print(name)
        return 0
    if not args.tracking_number:
        parser.error("tracking_number is required")

    state_path = Path(args.state_file) if args.state_file else None
    state = {}
    if state_path is not None:
        try:
            state = load_state(state_path)
        except json.JSONDecodeError as exc:
            parser.exit(2, f"{parser.prog}: error: cannot read state file {state_path}: {exc}\n")

    checked_at = datetime.now(timezone.utc).replace(microsecond=0).isoformat()
    result = asyncio.run(run(args, settings))

    changes: list[str] = []
    if state_path is not None:
        key = f"{args.provider.lower()}:{args.tracking_number}"
        current = summarize(result)
        changes = compare_with_previous(state.get(key, {}), current)
        state[key] = current
        save_state(state_path, state)

    report = build_report(args.provider, args.tracking_number, result, checked_at, changes)

    if args.history_log:
        append_history(Path(args.history_log), report)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(report)

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
