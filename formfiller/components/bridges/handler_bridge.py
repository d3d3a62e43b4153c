"""
Capability bridges to UI-framework internal event handlers.

A reactive framework keeps a controlled field's real value in its own state and
only learns about changes through the handlers it attached to the node. A
bridge knows, for one framework, where those handlers live and what shape of
event they expect. Which bridge is used is a configuration choice.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from formfiller.components.models import EventKind
from formfiller.components.tree.render_tree import RenderTree


@dataclass(frozen=True)
class SyntheticEvent:
    """Hand-built event envelope passed straight to an internal handler."""
    kind: EventKind
    value: Optional[str] = None
    name: Optional[str] = None
    checked: Optional[bool] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "value": self.value,
            "name": self.name,
            "checked": self.checked,
        }


@dataclass(frozen=True)
class BoundHandler:
    """An internal handler found on a specific node."""
    props_key: str
    handler_name: str
    kind: EventKind

    async def invoke(self, tree: RenderTree, node: Any, event: SyntheticEvent) -> bool:
        return await tree.invoke_handler(node, self.props_key, self.handler_name, event.to_payload())


class HandlerBridge(ABC):
    """Base class for framework-specific handler bridges."""

    name = "base"

    @abstractmethod
    async def try_get_handler(self, tree: RenderTree, node: Any, kind: EventKind) -> Optional[BoundHandler]:
        """Return the node's internal handler for `kind`, or None."""

    def build_event(
        self,
        kind: EventKind,
        value: Optional[str] = None,
        name: Optional[str] = None,
        checked: Optional[bool] = None
    ) -> SyntheticEvent:
        return SyntheticEvent(kind=kind, value=value, name=name, checked=checked)


class ReactHandlerBridge(HandlerBridge):
    """
    React attaches each host node's current props under an own property named
    `__reactProps$<random>` (older releases: `__reactEventHandlers$<random>`).
    The handlers in that bag are the component's real onChange/onInput/onBlur.
    """

    name = "react"

    PROPS_KEY_PREFIXES: Tuple[str, ...] = ("__reactProps$", "__reactEventHandlers$")

    HANDLER_NAMES = {
        EventKind.INPUT: "onInput",
        EventKind.CHANGE: "onChange",
        EventKind.CLICK: "onClick",
        EventKind.BLUR: "onBlur",
    }

    # Text fields wired to only one of the two still accept the other's payload
    ALTERNATES = {
        EventKind.INPUT: EventKind.CHANGE,
        EventKind.CHANGE: EventKind.INPUT,
    }

    async def _props_key(self, tree: RenderTree, node: Any) -> Optional[str]:
        for key in await tree.property_keys(node):
            if key.startswith(self.PROPS_KEY_PREFIXES):
                return key
        return None

    async def try_get_handler(self, tree: RenderTree, node: Any, kind: EventKind) -> Optional[BoundHandler]:
        props_key = await self._props_key(tree, node)
        if not props_key:
            return None

        available = set(await tree.handler_names(node, props_key))
        for candidate in (kind, self.ALTERNATES.get(kind)):
            if candidate is None:
                continue
            handler_name = self.HANDLER_NAMES[candidate]
            if handler_name in available:
                if candidate != kind:
                    logger.debug(f"No {self.HANDLER_NAMES[kind]} on node, using {handler_name}")
                return BoundHandler(props_key=props_key, handler_name=handler_name, kind=candidate)
        return None


class NativeOnlyBridge(HandlerBridge):
    """For pages without a supported framework: every write goes through native events."""

    name = "native"

    async def try_get_handler(self, tree: RenderTree, node: Any, kind: EventKind) -> Optional[BoundHandler]:
        return None


_BRIDGES = {
    ReactHandlerBridge.name: ReactHandlerBridge,
    NativeOnlyBridge.name: NativeOnlyBridge,
}


def bridge_names() -> List[str]:
    """Names accepted by get_handler_bridge."""
    return sorted(_BRIDGES)


def get_handler_bridge(name: str) -> HandlerBridge:
    """Instantiate the bridge registered under `name`."""
    try:
        return _BRIDGES[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown handler bridge '{name}'. Available: {', '.join(sorted(_BRIDGES))}"
        ) from None
