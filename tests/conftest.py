from contextlib import asynccontextmanager

import pytest

from kargo_takip.parsing import NO_RESULT_TEXT


class FakeElement:
    def __init__(self, text):
        self._text = text

    async def text_content(self):
        return self._text


class FakePage:
    """Just enough of a Playwright page for the Aras Kargo integration."""

    def __init__(self, url, texts=None, tables=None, broken_tabs=()):
        self._landing_url = url
        self.url = "about:blank"
        self.texts = texts or {}
        self.tables = tables or {}
        self.broken_tabs = set(broken_tabs)
        self.visited = []
        self.clicked = []
        self.click_timeouts = []

    async def goto(self, url, wait_until=None, timeout=None):
        self.visited.append(url)
        self.url = self._landing_url

    async def query_selector(self, selector):
        if selector in self.texts:
            return FakeElement(self.texts[selector])
        return None

    async def click(self, selector, timeout=None):
        self.click_timeouts.append(timeout)
        if selector in self.broken_tabs:
            raise RuntimeError(f"cannot click {selector}")
        self.clicked.append(selector)

    async def wait_for_timeout(self, ms):
        return None

    async def eval_on_selector_all(self, selector, script):
        return self.tables.get(selector, [])


class FakeSession:
    def __init__(self, page):
        self.page = page
        self.pages_opened = 0
        self.pages_closed = 0
        self.closed = 0

    @asynccontextmanager
    async def new_page(self):
        self.pages_opened += 1
        try:
            yield self.page
        finally:
            self.pages_closed += 1

    async def close(self):
        self.closed += 1


RESULT_URL = "https://kargotakip.araskargo.com.tr/kargotakip.aspx?code=VALIDCODE"
MAIN_URL = "https://kargotakip.araskargo.com.tr/mainpage.aspx?code=MISSING"


@pytest.fixture
def delivered_page():
    return FakePage(
        RESULT_URL,
        texts={
            "#Son_Durum": "TESLİM EDİLDİ",
            "#LabelIlkCikis": "ISTANBUL",
            "#varis_subesi": "ANKARA",
            "#cikis_tarihi": "01.03.2024",
            "#Teslim_Tarihi": "03.03.2024 14:20",
            "#Teslim_Alan": "AHMET Y.",
            "#gonderici_adi_soyadi": "MEHMET K.",
            "#LabelCargoType": "PAKET",
            "#LabelCargoVolume": "2,5",
            "#LabelPackageCount": "1",
            "#labelTradingWaybillNumber": "IRS123",
            "#fatura_turu": "GÖNDERİCİ ÖDEMELİ",
            "#Teslimat_Kodu": "",
        },
        tables={
            "#notDeliveredDataGrid": [[["02.03.2024", "ADRESTE YOK", "Alıcı adreste bulunamadı"]]],
            "#ui-tabs-2 table": [
                [
                    ["İŞLEM TARİHİ", "İL", "BIRIM"],
                    ["01.03.2024 10:00", "ISTANBUL", "KARGO KABUL"],
                    ["02.03.2024 08:15", "ANKARA", "TRANSFER", "Aktarma merkezinde"],
                    ["", "", ""],
                ]
            ],
            "#smsDataGrid": [[["GÖNDERİLDİ", "ANKARA", "03.03.2024", "TESLİMAT SMS"]]],
            "#servicesDataGrid": [[["SMS BİLGİLENDİRME", "2"]]],
        },
    )


@pytest.fixture
def not_found_page():
    return FakePage(MAIN_URL, texts={"#Label1": NO_RESULT_TEXT})
