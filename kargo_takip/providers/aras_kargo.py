from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..browser import BrowserSession
from ..config import TrackerSettings
from ..models import CargoInfo, MovementInfo, ServiceInfo, TrackingResult, TrackingStatus
from .. import parsing

logger = logging.getLogger(__name__)

NO_RESULT_SELECTOR = "#Label1"

FIELD_SELECTORS = {
    "status": "#Son_Durum",
    "sender_branch": "#LabelIlkCikis",
    "receiver_branch": "#varis_subesi",
    "shipment_date": "#cikis_tarihi",
    "delivery_date": "#Teslim_Tarihi",
    "recipient": "#Teslim_Alan",
    "sender": "#gonderici_adi_soyadi",
    "cargo_type": "#LabelCargoType",
    "weight": "#LabelCargoVolume",
    "package_count": "#LabelPackageCount",
    "waybill_number": "#labelTradingWaybillNumber",
    "payment_type": "#fatura_turu",
    "delivery_method": "#Teslimat_Kodu",
    "sms_code": "#Teslimat_Kodu",
}
OPTIONAL_FIELDS = ("delivery_date", "recipient", "sender", "delivery_method", "sms_code")

FAILURE_TABLE = "#notDeliveredDataGrid"
MOVEMENTS_TAB = 'a[href="#ui-tabs-2"]'
MOVEMENTS_TABLES = "#ui-tabs-2 table"
SERVICES_TAB = 'a[href="#ui-tabs-3"]'
SMS_TABLE = "#smsDataGrid"
SERVICES_TABLE = "#servicesDataGrid"

# Cell texts of every matched table, the first (header) row of each dropped.
TABLE_ROWS_JS = """
tables => tables.map(table =>
    Array.from(table.querySelectorAll('tr')).slice(1).map(row =>
        Array.from(row.querySelectorAll('td')).map(cell => (cell.textContent || '').trim())
    )
)
"""


class ArasKargo:
    """Aras Kargo integration driving the public tracking page."""

    name = "Aras Kargo"

    def __init__(self, settings: Optional[TrackerSettings] = None, session: Optional[BrowserSession] = None):
        self.settings = settings or TrackerSettings()
        self.session = session or BrowserSession(self.settings)

    def tracking_url(self, tracking_number: str) -> str:
        return f"{self.settings.base_url}?{urlencode({'code': tracking_number})}"

    async def track(self, tracking_number: str) -> TrackingResult:
        try:
            async with self.session.new_page() as page:
                return await self._track_on_page(page, tracking_number)
        except PlaywrightTimeoutError as exc:
            logger.warning("Timed out tracking %s: %s", tracking_number, exc)
            return TrackingResult.failed(TrackingStatus.ERROR, f"Sayfa zaman aşımına uğradı: {exc}")
        except Exception as exc:
            logger.exception("Tracking %s failed", tracking_number)
            return TrackingResult.failed(TrackingStatus.ERROR, f"Scraping hatası: {exc}")

    async def _track_on_page(self, page: Page, tracking_number: str) -> TrackingResult:
        url = self.tracking_url(tracking_number)
        logger.debug("Opening %s", url)
        await page.goto(url, wait_until="networkidle", timeout=self.settings.navigation_timeout_ms)

        if parsing.is_no_result(await _read_text(page, NO_RESULT_SELECTOR)):
            return TrackingResult.failed(TrackingStatus.NOT_FOUND, "Kargo numarası bulunamadı")

        if not parsing.is_result_page(page.url):
            logger.warning("Unexpected redirect for %s: %s", tracking_number, page.url)
            return TrackingResult.failed(TrackingStatus.ERROR, "Beklenmeyen sayfa yönlendirmesi")

        cargo = await self.extract_cargo_info(page, tracking_number)
        return TrackingResult.found(parsing.classify_status(cargo.status), cargo)

    async def extract_cargo_info(self, page: Page, tracking_number: str) -> CargoInfo:
        fields = {}
        for key, selector in FIELD_SELECTORS.items():
            fields[key] = await _read_text(page, selector)
        for key in OPTIONAL_FIELDS:
            fields[key] = fields[key] or None

        failure_reasons = parsing.parse_failure_reasons(await _table_rows(page, FAILURE_TABLE))
        movements = await self.extract_movements(page)
        service_info = await self.extract_service_info(page)

        return CargoInfo(
            tracking_number=tracking_number,
            failure_reasons=failure_reasons,
            movements=movements,
            service_info=service_info,
            **fields,
        )

    async def extract_movements(self, page: Page) -> tuple[MovementInfo, ...]:
        try:
            await self._open_tab(page, MOVEMENTS_TAB)
            return parsing.parse_movements(await _table_rows(page, MOVEMENTS_TABLES))
        except Exception as exc:
            logger.warning("Could not read movements: %s", exc)
            return ()

    async def extract_service_info(self, page: Page) -> ServiceInfo:
        try:
            await self._open_tab(page, SERVICES_TAB)
            return parsing.build_service_info(
                await _table_rows(page, SMS_TABLE),
                await _table_rows(page, SERVICES_TABLE),
            )
        except Exception as exc:
            logger.warning("Could not read service info: %s", exc)
            return ServiceInfo()

    async def _open_tab(self, page: Page, selector: str) -> None:
        await page.click(selector, timeout=self.settings.tab_timeout_ms)
        await page.wait_for_timeout(self.settings.settle_delay_ms)

    async def close(self) -> None:
        await self.session.close()


async def _read_text(page: Page, selector: str) -> str:
    element = await page.query_selector(selector)
    if element is None:
        return ""
    return parsing.normalize_text(await element.text_content())


async def _table_rows(page: Page, selector: str) -> list[list[str]]:
    tables = await page.eval_on_selector_all(selector, TABLE_ROWS_JS)
    return [row for table in tables for row in table]
