"""Tests for page capture, with Playwright replaced by fakes."""

import pytest
from playwright.async_api import Error as PlaywrightError

from readwell_core import browser
from readwell_core.browser import capture_page
from readwell_core.cli import main
from readwell_core.errors import CaptureError


class _FakePage:
    def __init__(self, fail_on=None):
        self.url = "https://example.com/story"
        self.fail_on = fail_on

    async def goto(self, url, **kwargs):
        if self.fail_on == "goto":
            raise PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

    async def evaluate(self, script, arg):
        if self.fail_on == "evaluate":
            raise PlaywrightError("Execution context was destroyed")
        return 2

    async def content(self):
        return "<html><body><p>hello</p></body></html>"


class _FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.closed = False

    async def new_page(self, **kwargs):
        return self.page

    async def close(self):
        self.closed = True


class _FakeChromium:
    def __init__(self, browser_, fail_launch=False):
        self.browser = browser_
        self.fail_launch = fail_launch

    async def launch(self, headless=True):
        if self.fail_launch:
            raise PlaywrightError("Executable doesn't exist")
        return self.browser


class _FakePlaywright:
    def __init__(self, chromium):
        self.chromium = chromium

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def _install(monkeypatch, fail_on=None, fail_launch=False):
    fake_browser = _FakeBrowser(_FakePage(fail_on))
    chromium = _FakeChromium(fake_browser, fail_launch)
    monkeypatch.setattr(browser, "async_playwright", lambda: _FakePlaywright(chromium))
    return fake_browser


class TestCapturePage:
    """Test snapshot capture and error wrapping."""

    @pytest.mark.asyncio
    async def test_snapshot(self, monkeypatch):
        fake_browser = _install(monkeypatch)
        snapshot = await capture_page("https://example.com/story", viewport_height=600)

        assert snapshot.images_measured == 2
        assert snapshot.viewport_height == 600
        assert "<p>hello</p>" in snapshot.html
        assert fake_browser.closed is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fail_on", ["goto", "evaluate"])
    async def test_page_failures_become_capture_errors(self, monkeypatch, fail_on):
        fake_browser = _install(monkeypatch, fail_on=fail_on)
        with pytest.raises(CaptureError):
            await capture_page("https://example.com/story")
        assert fake_browser.closed is True

    @pytest.mark.asyncio
    async def test_launch_failure_becomes_capture_error(self, monkeypatch):
        _install(monkeypatch, fail_launch=True)
        with pytest.raises(CaptureError, match="Executable"):
            await capture_page("https://example.com/story")

    def test_cli_reports_launch_failure(self, monkeypatch, tmp_path, capsys):
        _install(monkeypatch, fail_launch=True)
        code = main(["--settings", str(tmp_path / "s.json"), "enhance", "https://example.com/story"])
        assert code == 1
        assert "Cannot read" in capsys.readouterr().err
