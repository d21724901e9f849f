"""Tests for the Playwright page fetcher, with Playwright mocked out."""

from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

pytest_plugins = ('pytest_asyncio',)

from sitecheck.browser_config import BrowserConfig
from sitecheck.browser_crawler import BrowserCrawler
from sitecheck.exceptions import FatalError, FetchError


def make_response(url, status, redirected_from=None):
    response = Mock()
    response.url = url
    response.status = status
    response.request = Mock(redirected_from=redirected_from)
    return response


def make_page(response=None, goto_error=None, html="<html></html>"):
    page = MagicMock()
    page.handlers = {}
    page.on = Mock(side_effect=lambda event, handler: page.handlers.__setitem__(event, handler))
    page.goto = AsyncMock(return_value=response, side_effect=goto_error)
    page.content = AsyncMock(return_value=html)
    page.close = AsyncMock()
    page.url = response.url if response else "about:blank"
    return page


def running_crawler(page):
    crawler = BrowserCrawler(BrowserConfig(timeout=5000))
    crawler._context = MagicMock()
    crawler._context.new_page = AsyncMock(return_value=page)
    return crawler


class TestBrowserCrawlerLifecycle:
    """Test cases for launching and closing the browser."""

    @pytest.mark.asyncio
    async def test_launch_failure_is_fatal(self):
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(side_effect=PlaywrightError("Executable doesn't exist"))
        playwright.stop = AsyncMock()
        starter = MagicMock()
        starter.start = AsyncMock(return_value=playwright)

        with patch("sitecheck.browser_crawler.async_playwright", return_value=starter):
            with pytest.raises(FatalError):
                async with BrowserCrawler():
                    pass

        playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fetch_requires_context_manager(self):
        with pytest.raises(RuntimeError):
            await BrowserCrawler().fetch("http://localhost:4000/")


class TestBrowserCrawlerFetch:
    """Test cases for BrowserCrawler.fetch()."""

    @pytest.mark.asyncio
    async def test_successful_fetch(self):
        page = make_page(make_response("http://localhost:4000/", 200), html="<a href='/a'>A</a>")
        crawler = running_crawler(page)

        result = await crawler.fetch("http://localhost:4000/")

        assert result.status_code == 200
        assert result.final_url == "http://localhost:4000/"
        assert result.html == "<a href='/a'>A</a>"
        assert result.redirect_status is None
        page.goto.assert_awaited_once_with(
            "http://localhost:4000/", wait_until="domcontentloaded", timeout=5000
        )
        page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_non_200_skips_content(self):
        page = make_page(make_response("http://localhost:4000/gone", 404))
        crawler = running_crawler(page)

        result = await crawler.fetch("http://localhost:4000/gone")

        assert result.status_code == 404
        assert result.html == ""
        page.content.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_redirect_reports_first_hop_status(self):
        first_request = Mock(redirected_from=None)
        first_request.response = AsyncMock(return_value=Mock(status=301))
        page = make_page(make_response("http://localhost:4000/new", 200, redirected_from=first_request))
        crawler = running_crawler(page)

        result = await crawler.fetch("http://localhost:4000/old")

        assert result.final_url == "http://localhost:4000/new"
        assert result.redirect_status == 301

    @pytest.mark.asyncio
    async def test_navigation_error_becomes_fetch_error(self):
        page = make_page(goto_error=PlaywrightError("net::ERR_CONNECTION_REFUSED"))
        crawler = running_crawler(page)

        with pytest.raises(FetchError) as exc:
            await crawler.fetch("http://localhost:4000/")

        assert "ERR_CONNECTION_REFUSED" in exc.value.message
        page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_images_collected(self):
        page = make_page(make_response("http://localhost:4000/", 200))
        crawler = running_crawler(page)

        async def goto(url, **kwargs):
            page.handlers["requestfailed"](Mock(resource_type="image", url="http://localhost:4000/a.png"))
            page.handlers["requestfailed"](Mock(resource_type="script", url="http://localhost:4000/app.js"))
            page.handlers["response"](Mock(
                url="http://localhost:4000/b.png", status=404, request=Mock(resource_type="image")
            ))
            page.handlers["response"](Mock(
                url="http://localhost:4000/c.png", status=200, request=Mock(resource_type="image")
            ))
            return make_response(url, 200)

        page.goto = AsyncMock(side_effect=goto)

        result = await crawler.fetch("http://localhost:4000/")

        assert result.failed_images == {"http://localhost:4000/a.png", "http://localhost:4000/b.png"}

    @pytest.mark.asyncio
    async def test_page_creation_error_becomes_fetch_error(self):
        crawler = BrowserCrawler(BrowserConfig(timeout=5000))
        crawler._context = MagicMock()
        crawler._context.new_page = AsyncMock(
            side_effect=PlaywrightError("Target page, context or browser has been closed")
        )

        with pytest.raises(FetchError) as exc:
            await crawler.fetch("http://localhost:4000/")

        assert "has been closed" in exc.value.message

    @pytest.mark.asyncio
    async def test_close_error_does_not_hide_result(self):
        page = make_page(make_response("http://localhost:4000/", 200))
        page.close = AsyncMock(side_effect=PlaywrightError("Target closed"))
        crawler = running_crawler(page)

        result = await crawler.fetch("http://localhost:4000/")

        assert result.status_code == 200
        page.close.assert_awaited_once()
