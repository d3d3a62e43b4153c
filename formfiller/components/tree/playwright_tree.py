"""
RenderTree over a Playwright Page or Frame.

Nodes are ElementHandles. Writes go through small in-page scripts rather than
Playwright's actionability-checked helpers, because the form's overlays
intercept pointer events and the framework listens to the DOM, not to input
devices.
"""
import functools
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import ElementHandle, Error as PlaywrightError, Frame, Page

from formfiller.components.exceptions import ElementStaleError
from formfiller.components.tree.render_tree import RenderTree

_IS_CHECKED_JS = """
el => el.checked === true || el.getAttribute('aria-checked') === 'true'
"""

_GET_VALUE_JS = """
el => ('value' in el) ? String(el.value ?? '') : (el.textContent || '')
"""

_PROPERTY_KEYS_JS = "el => Object.keys(el)"

_HANDLER_NAMES_JS = """
(el, key) => {
    const bag = el[key];
    if (!bag) return [];
    return Object.keys(bag).filter(name => typeof bag[name] === 'function');
}
"""

# Native setter so the framework's own value tracker sees a real change
_SET_VALUE_JS = """
(el, value) => {
    const descriptor = Object.getOwnPropertyDescriptor(Object.getPrototypeOf(el), 'value');
    if (descriptor && descriptor.set) {
        descriptor.set.call(el, value);
    } else {
        el.value = value;
    }
}
"""

_INVOKE_HANDLER_JS = """
(el, {propsKey, handlerName, event}) => {
    const bag = el[propsKey];
    const handler = bag && bag[handlerName];
    if (typeof handler !== 'function') return { ok: false, error: null };

    const target = event.kind === 'click' ? el : {
        value: event.value,
        name: event.name || el.name || el.id,
        checked: event.checked,
        type: el.type
    };
    try {
        handler({
            type: event.kind,
            target: target,
            currentTarget: el,
            bubbles: true,
            preventDefault: () => {},
            stopPropagation: () => {},
            persist: () => {},
            nativeEvent: new Event(event.kind, { bubbles: true })
        });
    } catch (err) {
        return { ok: false, error: String(err && err.message || err) };
    }
    return { ok: true, error: null };
}
"""


def _stale_on_error(method):
    """Translate Playwright failures on a node into ElementStaleError."""
    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except PlaywrightError as e:
            raise ElementStaleError(detail=f"{method.__name__}: {e}") from e
    return wrapper


class PlaywrightRenderTree(RenderTree):
    """RenderTree backed by a live Playwright page or frame."""

    def __init__(self, page: Page | Frame):
        self.page = page

    @_stale_on_error
    async def query(self, selector: str, root: Optional[ElementHandle] = None) -> Optional[ElementHandle]:
        return await (root or self.page).query_selector(selector)

    @_stale_on_error
    async def query_all(self, selector: str, root: Optional[ElementHandle] = None) -> List[ElementHandle]:
        return await (root or self.page).query_selector_all(selector)

    @_stale_on_error
    async def get_attribute(self, node: ElementHandle, name: str) -> Optional[str]:
        return await node.get_attribute(name)

    @_stale_on_error
    async def text_content(self, node: ElementHandle) -> str:
        return await node.text_content() or ""

    @_stale_on_error
    async def is_visible(self, node: ElementHandle) -> bool:
        return await node.is_visible()

    @_stale_on_error
    async def is_checked(self, node: ElementHandle) -> bool:
        return bool(await node.evaluate(_IS_CHECKED_JS))

    @_stale_on_error
    async def get_value(self, node: ElementHandle) -> str:
        return await node.evaluate(_GET_VALUE_JS)

    @_stale_on_error
    async def is_same_node(self, node: ElementHandle, other: ElementHandle) -> bool:
        return bool(await node.evaluate("(el, other) => el === other", other))

    @_stale_on_error
    async def property_keys(self, node: ElementHandle) -> List[str]:
        return await node.evaluate(_PROPERTY_KEYS_JS)

    @_stale_on_error
    async def handler_names(self, node: ElementHandle, props_key: str) -> List[str]:
        return await node.evaluate(_HANDLER_NAMES_JS, props_key)

    @_stale_on_error
    async def focus(self, node: ElementHandle) -> None:
        await node.focus()

    @_stale_on_error
    async def blur(self, node: ElementHandle) -> None:
        await node.evaluate("el => el.blur()")

    @_stale_on_error
    async def set_value(self, node: ElementHandle, value: str) -> None:
        await node.evaluate(_SET_VALUE_JS, value)

    @_stale_on_error
    async def dispatch(self, node: ElementHandle, event_type: str) -> None:
        await node.dispatch_event(event_type)

    @_stale_on_error
    async def click(self, node: ElementHandle) -> None:
        await node.evaluate("el => el.click()")

    @_stale_on_error
    async def click_outside(self) -> None:
        await self.page.evaluate("() => document.body.click()")

    @_stale_on_error
    async def invoke_handler(
        self,
        node: ElementHandle,
        props_key: str,
        handler_name: str,
        event: Dict[str, Any]
    ) -> bool:
        outcome = await node.evaluate(
            _INVOKE_HANDLER_JS,
            {"propsKey": props_key, "handlerName": handler_name, "event": event}
        )
        if outcome.get("error"):
            logger.debug(f"{handler_name} threw inside the page: {outcome['error']}")
        return bool(outcome.get("ok"))

    @_stale_on_error
    async def scroll_into_view(self, node: ElementHandle) -> None:
        await node.scroll_into_view_if_needed()
