"""
Write values into controlled form fields so the framework's state sees them.

The framework's internal state, not the visible markup, is what the form
submits. Values therefore go through the component's own handler when the
configured bridge can find one, and are always mirrored through native
events as well, since some controls re-derive from the DOM on blur.
"""
from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger

from formfiller.components.bridges.handler_bridge import (
    BoundHandler,
    HandlerBridge,
    ReactHandlerBridge,
    get_handler_bridge,
)
from formfiller.components.models import EventKind, FillErrorKind, StrategyUsed
from formfiller.components.tree.render_tree import RenderTree
from formfiller.components.utils.waiter import Waiter
from formfiller.config import FillerConfig


@dataclass
class InjectionResult:
    """Whether the write happened and through which channel."""
    succeeded: bool
    strategy_used: StrategyUsed

    def __bool__(self) -> bool:
        return self.succeeded

    @property
    def degraded(self) -> bool:
        return self.strategy_used is StrategyUsed.NATIVE_EVENT_FALLBACK


class StateInjector:
    """Best-effort value writer for text inputs, checkboxes, radios and buttons."""

    def __init__(
        self,
        tree: RenderTree,
        bridge: Optional[HandlerBridge] = None,
        waiter: Optional[Waiter] = None,
        focus_delay_ms: int = 100,
        handler_settle_ms: int = 50,
        blur_delay_ms: int = 300,
        click_settle_ms: int = 200
    ):
        self.tree = tree
        self.bridge = bridge or ReactHandlerBridge()
        self.waiter = waiter or Waiter()
        self.focus_delay_ms = focus_delay_ms
        self.handler_settle_ms = handler_settle_ms
        self.blur_delay_ms = blur_delay_ms
        self.click_settle_ms = click_settle_ms

    @classmethod
    def from_config(cls, tree: RenderTree, config: FillerConfig, waiter: Optional[Waiter] = None) -> "StateInjector":
        return cls(
            tree,
            bridge=get_handler_bridge(config.handler_bridge),
            waiter=waiter,
            focus_delay_ms=config.focus_delay_ms,
            handler_settle_ms=config.handler_settle_ms,
            blur_delay_ms=config.blur_delay_ms,
            click_settle_ms=config.click_settle_ms,
        )

    async def _field_name(self, node: Any) -> Optional[str]:
        return await self.tree.get_attribute(node, "name") or await self.tree.get_attribute(node, "id")

    async def _invoke(self, handler: BoundHandler, node: Any, event, field_label: str) -> bool:
        invoked = await handler.invoke(self.tree, node, event)
        if not invoked:
            logger.debug(f"{handler.handler_name} on '{field_label}' did not run")
        return invoked

    async def inject(
        self,
        node: Any,
        value: str,
        event_kind: EventKind = EventKind.CHANGE,
        field_label: str = "field"
    ) -> InjectionResult:
        """
        Write `value` into a text-like node.

        Never fails for framework reasons; the returned strategy says how much
        to trust the write. A node detached mid-write raises ElementStaleError
        so the caller can re-resolve it.
        """
        value = str(value)
        strategy = StrategyUsed.NATIVE_EVENT_FALLBACK

        await self.tree.focus(node)
        await self.waiter.sleep(self.focus_delay_ms)

        handler = await self.bridge.try_get_handler(self.tree, node, event_kind)
        if handler:
            await self.tree.set_value(node, "")
            event = self.bridge.build_event(handler.kind, value=value, name=await self._field_name(node))
            if await self._invoke(handler, node, event, field_label):
                strategy = StrategyUsed.INTERNAL_STATE
            await self.waiter.sleep(self.handler_settle_ms)

        # Native mirror, always
        await self.tree.set_value(node, value)
        await self.tree.dispatch(node, "input")
        await self.tree.dispatch(node, "change")

        await self.waiter.sleep(self.blur_delay_ms)
        await self._blur(node, value, field_label)
        await self._check_value(node, value, field_label)

        if strategy is StrategyUsed.INTERNAL_STATE:
            logger.debug(f"✍️ '{field_label}' set through {handler.handler_name}")
        else:
            logger.warning(
                f"⚠️ '{field_label}' set through native events only "
                f"({FillErrorKind.INJECTION_DEGRADED.value}: no internal handler)"
            )
        return InjectionResult(succeeded=True, strategy_used=strategy)

    async def _blur(self, node: Any, value: Optional[str], field_label: str) -> None:
        blur_handler = await self.bridge.try_get_handler(self.tree, node, EventKind.BLUR)
        if blur_handler:
            event = self.bridge.build_event(EventKind.BLUR, value=value, name=await self._field_name(node))
            await self._invoke(blur_handler, node, event, field_label)
        await self.tree.blur(node)

    async def _check_value(self, node: Any, value: str, field_label: str) -> None:
        # Masked inputs may reformat the value; only an emptied field is reported
        current = await self.tree.get_value(node)
        if value and not current:
            logger.warning(f"⚠️ '{field_label}' was empty after blur, the form may have reset it")
        elif current != value:
            logger.debug(f"'{field_label}' reformatted by the form after blur")

    async def click_strategy(self, node: Any) -> StrategyUsed:
        for kind in (EventKind.CLICK, EventKind.CHANGE):
            if await self.bridge.try_get_handler(self.tree, node, kind):
                return StrategyUsed.INTERNAL_STATE
        return StrategyUsed.NATIVE_EVENT_FALLBACK

    async def set_checked(self, node: Any, desired: bool, field_label: str = "checkbox") -> InjectionResult:
        """
        Bring a checkbox or radio to the desired state with a simulated click.

        The checked property is never assigned directly: that would leave the
        framework's state and the rendered state out of sync. When the node is
        already in the desired state nothing is clicked.
        """
        strategy = await self.click_strategy(node)
        if await self.tree.is_checked(node) == desired:
            logger.debug(f"☑️ '{field_label}' already {'checked' if desired else 'unchecked'}")
            return InjectionResult(succeeded=True, strategy_used=strategy)

        await self.tree.click(node)
        await self.waiter.sleep(self.click_settle_ms)

        now_checked = await self.tree.is_checked(node)
        if now_checked != desired:
            logger.warning(f"⚠️ '{field_label}' still {'checked' if now_checked else 'unchecked'} after click")
            return InjectionResult(succeeded=False, strategy_used=strategy)

        logger.debug(f"☑️ '{field_label}' {'checked' if desired else 'unchecked'}")
        return InjectionResult(succeeded=True, strategy_used=strategy)

    async def activate(self, node: Any, field_label: str = "button") -> InjectionResult:
        """
        Press a button-like node once.

        Uses the internal click handler when present, otherwise a native click.
        Never both: a second activation of an "Add" button would add a second
        section instance.
        """
        await self.tree.scroll_into_view(node)

        handler = await self.bridge.try_get_handler(self.tree, node, EventKind.CLICK)
        if handler and await self._invoke(handler, node, self.bridge.build_event(EventKind.CLICK), field_label):
            strategy = StrategyUsed.INTERNAL_STATE
        else:
            await self.tree.click(node)
            strategy = StrategyUsed.NATIVE_EVENT_FALLBACK

        await self.waiter.sleep(self.click_settle_ms)
        logger.debug(f"👆 Activated '{field_label}'")
        return InjectionResult(succeeded=True, strategy_used=strategy)
