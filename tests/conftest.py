"""Shared fixtures: a browser-free fake page, a fixed clock, and zero delays."""

from __future__ import annotations

import dataclasses
from contextlib import contextmanager
from datetime import datetime, timezone

import pytest
from bs4 import BeautifulSoup
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from perkscraper.config import Settings, settings

FIXED_MOMENT = datetime(2025, 7, 6, 3, 41, 33, 584000, tzinfo=timezone.utc)
FIXED_STAMP = "2025-07-06T03-41-33-584Z"


class FakePage:
    """Stand-in for a Playwright ``Page`` serving canned HTML per URL.

    A URL mapped to an exception makes ``goto`` raise it; an unknown URL
    loads an empty document.
    """

    def __init__(self, pages: dict[str, str | Exception] | None = None) -> None:
        self.pages = dict(pages or {})
        self.visits: list[str] = []
        self.goto_kwargs: list[dict] = []
        self.html = ""

    def goto(self, url: str, **kwargs) -> None:
        self.visits.append(url)
        self.goto_kwargs.append(kwargs)
        outcome = self.pages.get(url, "")
        if isinstance(outcome, Exception):
            raise outcome
        self.html = outcome

    def wait_for_selector(self, selector: str, timeout: float | None = None) -> None:
        if BeautifulSoup(self.html, "html.parser").select_one(selector) is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    def content(self) -> str:
        return self.html


class FakeSession:
    """Session factory yielding one :class:`FakePage` and recording its lifecycle."""

    def __init__(self, page: FakePage) -> None:
        self.page = page
        self.opened = 0
        self.closed = 0

    @contextmanager
    def __call__(self, config: Settings):
        self.opened += 1
        try:
            yield self.page
        finally:
            self.closed += 1


def craft_mod_html(item_name: str = "Iron Ingot") -> str:
    """A perk detail page carrying the full Craft Mod DOM chain."""
    return f"""\
<html><body>
<div class="stats-container">
  <span class="container-sub-panel-header">Perk Details</span>
  <div class="container-sub-panel"><a href="/db/item/other"><span class="table-item-name">Decoy</span></a></div>
  <span class="container-sub-panel-header"> Craft Mod </span>
  <div class="container-sub-panel">
    <a href="/db/perk/unrelated">Unrelated perk</a>
    <a href="/db/item/craftmod-item">
      <img src="icon.png">
      <span class="table-item-name">  {item_name}  </span>
    </a>
  </div>
</div>
</body></html>
"""


NO_CRAFT_MOD_HTML = """\
<html><body>
<div class="stats-container">
  <span class="container-sub-panel-header">Perk Details</span>
  <div class="container-sub-panel"><p>Nothing to craft.</p></div>
</div>
</body></html>
"""


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_MOMENT


@pytest.fixture
def fast_config(tmp_path) -> Settings:
    """Global settings with every delay zeroed and output under *tmp_path*."""
    return dataclasses.replace(
        settings,
        output_dir=tmp_path / "output",
        dataset_name=None,
        settle_delay_ms=0,
        inter_record_delay_ms=0,
        list_render_delay_ms=0,
        inter_page_delay_ms=0,
        perks_base_url="https://nwdb.info/db/perks",
    )


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def no_sleep() -> SleepRecorder:
    return SleepRecorder()
