from contextlib import asynccontextmanager

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from kargo_takip.config import TrackerSettings
from kargo_takip.models import ServiceInfo, TrackingStatus
from kargo_takip.providers import ArasKargo
from kargo_takip.providers.aras_kargo import MOVEMENTS_TAB, SERVICES_TAB

from .conftest import RESULT_URL, FakePage, FakeSession


def _provider(page):
    session = FakeSession(page)
    return ArasKargo(TrackerSettings(settle_delay_ms=0), session=session), session


class TestArasKargoTrack:

    @pytest.mark.asyncio
    async def test_delivered_shipment(self, delivered_page):
        provider, session = _provider(delivered_page)
        result = await provider.track("VALIDCODE")

        assert result.success
        assert result.status is TrackingStatus.DELIVERED
        data = result.data
        assert data.tracking_number == "VALIDCODE"
        assert data.status == "TESLİM EDİLDİ"
        assert data.sender_branch == "ISTANBUL"
        assert data.receiver_branch == "ANKARA"
        assert data.delivery_date == "03.03.2024 14:20"
        assert data.sms_code is None
        assert [m.location for m in data.movements] == ["ISTANBUL", "ANKARA"]
        assert data.movements[1].description == "Aktarma merkezinde"
        assert data.failure_reasons[0].description == "Alıcı adreste bulunamadı"
        assert data.service_info.additional_services == ("SMS BİLGİLENDİRME (2)",)
        assert delivered_page.visited == [
            "https://kargotakip.araskargo.com.tr/mainpage.aspx?code=VALIDCODE"
        ]
        assert session.pages_opened == session.pages_closed == 1

    @pytest.mark.asyncio
    async def test_not_found(self, not_found_page):
        provider, session = _provider(not_found_page)
        result = await provider.track("MISSING")

        assert not result.success
        assert result.status is TrackingStatus.NOT_FOUND
        assert result.error == "Kargo numarası bulunamadı"
        assert result.data is None
        assert not_found_page.clicked == []
        assert session.pages_closed == 1

    @pytest.mark.asyncio
    async def test_unexpected_redirect(self):
        page = FakePage("https://www.araskargo.com.tr/", texts={"#Son_Durum": "YOLDA"})
        provider, _ = _provider(page)
        result = await provider.track("123")

        assert result.status is TrackingStatus.ERROR
        assert result.error == "Beklenmeyen sayfa yönlendirmesi"

    @pytest.mark.asyncio
    async def test_unmatched_status_is_success_with_error_status(self):
        page = FakePage(RESULT_URL, texts={"#Son_Durum": "ŞUBEDE"})
        provider, _ = _provider(page)
        result = await provider.track("123")

        assert result.success
        assert result.status is TrackingStatus.ERROR
        assert result.data.movements == ()

    @pytest.mark.asyncio
    async def test_secondary_views_degrade(self, delivered_page):
        delivered_page.broken_tabs = {MOVEMENTS_TAB, SERVICES_TAB}
        provider, _ = _provider(delivered_page)
        result = await provider.track("VALIDCODE")

        assert result.success
        assert result.status is TrackingStatus.DELIVERED
        assert result.data.movements == ()
        assert result.data.service_info == ServiceInfo()

    @pytest.mark.asyncio
    async def test_tab_clicks_use_short_timeout(self, delivered_page):
        page = delivered_page
        provider = ArasKargo(
            TrackerSettings(settle_delay_ms=0, navigation_timeout_ms=30000, tab_timeout_ms=2000),
            session=FakeSession(page),
        )
        await provider.track("VALIDCODE")

        assert page.clicked == [MOVEMENTS_TAB, SERVICES_TAB]
        assert page.click_timeouts == [2000, 2000]

    @pytest.mark.asyncio
    async def test_navigation_error_becomes_result(self, delivered_page, monkeypatch):
        async def boom(*args, **kwargs):
            raise RuntimeError("net::ERR_NAME_NOT_RESOLVED")

        monkeypatch.setattr(delivered_page, "goto", boom)
        provider, session = _provider(delivered_page)
        result = await provider.track("123")

        assert not result.success
        assert result.status is TrackingStatus.ERROR
        assert "net::ERR_NAME_NOT_RESOLVED" in result.error
        assert session.pages_closed == 1

    @pytest.mark.asyncio
    async def test_timeout_becomes_result(self, delivered_page, monkeypatch):
        async def slow(*args, **kwargs):
            raise PlaywrightTimeoutError("Timeout 30000ms exceeded")

        monkeypatch.setattr(delivered_page, "goto", slow)
        provider, _ = _provider(delivered_page)
        result = await provider.track("123")

        assert result.status is TrackingStatus.ERROR
        assert result.error.startswith("Sayfa zaman aşımına uğradı")

    @pytest.mark.asyncio
    async def test_session_failure_becomes_result(self):
        class BrokenSession:
            @asynccontextmanager
            async def new_page(self):
                raise RuntimeError("browser crashed")
                yield

        provider = ArasKargo(session=BrokenSession())
        result = await provider.track("123")

        assert result.status is TrackingStatus.ERROR
        assert result.error == "Scraping hatası: browser crashed"


@pytest.mark.asyncio
async def test_close_delegates_to_session(delivered_page):
    provider, session = _provider(delivered_page)
    await provider.close()
    await provider.close()
    assert session.closed == 2


def test_tracking_url_encodes_number():
    provider = ArasKargo()
    assert provider.tracking_url("AB 12") == "https://kargotakip.araskargo.com.tr/mainpage.aspx?code=AB+12"
