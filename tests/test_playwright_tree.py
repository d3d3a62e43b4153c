"""Tests for the Playwright-backed render tree, with mocked handles."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from formfiller.components.exceptions import ElementStaleError
from formfiller.components.tree import PlaywrightRenderTree


@pytest.fixture
def page():
    page = MagicMock()
    page.query_selector = AsyncMock()
    page.query_selector_all = AsyncMock(return_value=[])
    page.evaluate = AsyncMock()
    return page


@pytest.fixture
def element():
    element = MagicMock()
    element.evaluate = AsyncMock()
    element.get_attribute = AsyncMock()
    element.text_content = AsyncMock()
    element.focus = AsyncMock()
    element.dispatch_event = AsyncMock()
    element.scroll_into_view_if_needed = AsyncMock()
    return element


class TestReads:
    @pytest.mark.asyncio
    async def test_query_scoped_to_root(self, page, element):
        inner = MagicMock()
        element.query_selector = AsyncMock(return_value=inner)
        tree = PlaywrightRenderTree(page)

        assert await tree.query('[role="option"]', root=element) is inner
        page.query_selector.assert_not_called()

    @pytest.mark.asyncio
    async def test_query_uses_page_without_root(self, page):
        tree = PlaywrightRenderTree(page)

        await tree.query_all("input")

        page.query_selector_all.assert_awaited_once_with("input")

    @pytest.mark.asyncio
    async def test_missing_text_is_empty_string(self, page, element):
        element.text_content.return_value = None

        assert await PlaywrightRenderTree(page).text_content(element) == ""

    @pytest.mark.asyncio
    async def test_handler_names_pass_props_key(self, page, element):
        element.evaluate.return_value = ["onChange", "onBlur"]

        names = await PlaywrightRenderTree(page).handler_names(element, "__reactProps$abc")

        assert names == ["onChange", "onBlur"]
        assert element.evaluate.await_args.args[1] == "__reactProps$abc"


class TestWrites:
    @pytest.mark.asyncio
    async def test_detached_handle_becomes_stale_error(self, page, element):
        element.focus.side_effect = PlaywrightError("Element is not attached to the DOM")

        with pytest.raises(ElementStaleError, match="focus"):
            await PlaywrightRenderTree(page).focus(element)

    @pytest.mark.asyncio
    async def test_other_exceptions_propagate(self, page, element):
        element.dispatch_event.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await PlaywrightRenderTree(page).dispatch(element, "change")

    @pytest.mark.asyncio
    async def test_set_value_uses_native_setter_script(self, page, element):
        await PlaywrightRenderTree(page).set_value(element, "Tucson")

        script, value = element.evaluate.await_args.args
        assert "getOwnPropertyDescriptor" in script
        assert value == "Tucson"

    @pytest.mark.asyncio
    async def test_invoke_handler_reports_outcome(self, page, element):
        tree = PlaywrightRenderTree(page)
        event = {"kind": "change", "value": "x", "name": None, "checked": None}

        element.evaluate.return_value = {"ok": True, "error": None}
        assert await tree.invoke_handler(element, "__reactProps$a", "onChange", event) is True
        payload = element.evaluate.await_args.args[1]
        assert payload == {"propsKey": "__reactProps$a", "handlerName": "onChange", "event": event}

        element.evaluate.return_value = {"ok": False, "error": "Cannot read properties of null"}
        assert await tree.invoke_handler(element, "__reactProps$a", "onChange", event) is False

    @pytest.mark.asyncio
    async def test_click_is_dom_click(self, page, element):
        tree = PlaywrightRenderTree(page)

        await tree.click(element)
        await tree.click_outside()

        element.evaluate.assert_awaited_once_with("el => el.click()")
        page.evaluate.assert_awaited_once_with("() => document.body.click()")

    @pytest.mark.asyncio
    async def test_is_same_node_compares_in_page(self, page, element):
        other = MagicMock()
        element.evaluate.return_value = True
        tree = PlaywrightRenderTree(page)

        assert await tree.is_same_node(element, other) is True
        element.evaluate.assert_awaited_once_with("(el, other) => el === other", other)
