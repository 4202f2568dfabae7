"""Pure interpretation of text scraped from the Aras Kargo tracking page.

Everything here works on plain strings and lists of cell texts so it can be
exercised without a browser.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence

from .models import FailureReason, MovementInfo, ServiceInfo, TrackingStatus

DELIVERED_MARKER = "TESLİM EDİLDİ"
IN_TRANSIT_MARKER = "YOLDA"

NO_RESULT_TEXT = "Girdiğiniz bilgiler için bir sonuç bulunamamıştır."
RESULT_PAGE_PATH = "kargotakip.aspx"

SERVICE_TYPE = "Aras Kargo Hizmetleri"

DATE_PATTERN = re.compile(r"^\d{1,2}\.\d{1,2}\.\d{4}")

# Header labels, per column, of the movement tables.
DATE_HEADERS = ("İŞLEM TARİHİ", "TARIH")
LOCATION_HEADERS = ("İL", "KARGO TİPİ")
STATUS_HEADERS = ("BIRIM", "KARGO DURUMU")


def normalize_text(text: Optional[str]) -> str:
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def classify_status(raw_status: str) -> TrackingStatus:
    if DELIVERED_MARKER in raw_status:
        return TrackingStatus.DELIVERED
    if IN_TRANSIT_MARKER in raw_status:
        return TrackingStatus.IN_TRANSIT
    return TrackingStatus.ERROR


def is_no_result(label_text: Optional[str]) -> bool:
    return normalize_text(label_text) == NO_RESULT_TEXT


def is_result_page(url: str) -> bool:
    return RESULT_PAGE_PATH in url


def _cell(cells: Sequence[str], index: int) -> str:
    if index < len(cells):
        return normalize_text(cells[index])
    return ""


def is_header_row(cells: Sequence[str]) -> bool:
    date, location, status = _cell(cells, 0), _cell(cells, 1), _cell(cells, 2)
    return (
        any(h in date for h in DATE_HEADERS)
        or any(h in location for h in LOCATION_HEADERS)
        or any(h in status for h in STATUS_HEADERS)
    )


def is_movement_row(cells: Sequence[str]) -> bool:
    """A row is a movement when it has a leading ``d.m.yyyy`` date, is not a
    header and has date, location and status filled in."""
    if len(cells) < 3:
        return False
    date, location, status = _cell(cells, 0), _cell(cells, 1), _cell(cells, 2)
    if not (date and location and status):
        return False
    if is_header_row(cells):
        return False
    return DATE_PATTERN.match(date) is not None


def parse_movements(rows: Iterable[Sequence[str]]) -> tuple[MovementInfo, ...]:
    movements = []
    for cells in rows:
        if not is_movement_row(cells):
            continue
        movements.append(
            MovementInfo(
                date=_cell(cells, 0),
                location=_cell(cells, 1),
                status=_cell(cells, 2),
                description=_cell(cells, 3) or None,
            )
        )
    return tuple(movements)


def parse_failure_reasons(rows: Iterable[Sequence[str]]) -> tuple[FailureReason, ...]:
    return tuple(
        FailureReason(date=_cell(cells, 0), reason=_cell(cells, 1), description=_cell(cells, 2))
        for cells in rows
        if len(cells) >= 3
    )


def parse_sms_notifications(rows: Iterable[Sequence[str]]) -> tuple[str, ...]:
    notifications = []
    for cells in rows:
        if len(cells) < 4:
            continue
        status, unit, date, kind = (_cell(cells, i) for i in range(4))
        if status and unit and date and kind:
            notifications.append(f"{kind}: {status} - {unit} ({date})")
    return tuple(notifications)


def parse_additional_services(rows: Iterable[Sequence[str]]) -> tuple[str, ...]:
    services = []
    for cells in rows:
        if len(cells) < 2:
            continue
        name, count = _cell(cells, 0), _cell(cells, 1)
        if name and count:
            services.append(f"{name} ({count})")
    return tuple(services)


def build_service_info(sms_rows: Iterable[Sequence[str]], service_rows: Iterable[Sequence[str]]) -> ServiceInfo:
    return ServiceInfo(
        service_type=SERVICE_TYPE,
        sms_notifications=parse_sms_notifications(sms_rows),
        additional_services=parse_additional_services(service_rows),
    )
