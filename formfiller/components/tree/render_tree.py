"""
Boundary between the fill engine and the live, externally owned page.

The engine never creates nodes. It only reads from and writes to nodes the page
already rendered, and it must assume any node may be replaced by a re-render
between two awaits.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class RenderTree(ABC):
    """Side-effecting read/write operations against a rendered page."""

    # Reads

    @abstractmethod
    async def query(self, selector: str, root: Any = None) -> Optional[Any]:
        """First node matching a CSS selector, scoped to `root` when given."""

    @abstractmethod
    async def query_all(self, selector: str, root: Any = None) -> List[Any]:
        """All nodes matching a CSS selector, in document order."""

    @abstractmethod
    async def get_attribute(self, node: Any, name: str) -> Optional[str]:
        ...

    @abstractmethod
    async def text_content(self, node: Any) -> str:
        ...

    @abstractmethod
    async def is_visible(self, node: Any) -> bool:
        ...

    @abstractmethod
    async def is_checked(self, node: Any) -> bool:
        """Checked state from the `checked` property or `aria-checked`."""

    @abstractmethod
    async def get_value(self, node: Any) -> str:
        ...

    @abstractmethod
    async def is_same_node(self, node: Any, other: Any) -> bool:
        """True when both handles point at the same element."""

    @abstractmethod
    async def property_keys(self, node: Any) -> List[str]:
        """Own property names of the node object (not its attributes)."""

    @abstractmethod
    async def handler_names(self, node: Any, props_key: str) -> List[str]:
        """Names of the callable members of the property bag under `props_key`."""

    # Writes

    @abstractmethod
    async def focus(self, node: Any) -> None:
        ...

    @abstractmethod
    async def blur(self, node: Any) -> None:
        ...

    @abstractmethod
    async def set_value(self, node: Any, value: str) -> None:
        """Assign the visible value without dispatching any event."""

    @abstractmethod
    async def dispatch(self, node: Any, event_type: str) -> None:
        """Dispatch a bubbling native event of the given type."""

    @abstractmethod
    async def click(self, node: Any) -> None:
        """Simulate a user click on the node."""

    @abstractmethod
    async def click_outside(self) -> None:
        """Click the document body, which closes open popups."""

    @abstractmethod
    async def invoke_handler(
        self,
        node: Any,
        props_key: str,
        handler_name: str,
        event: Dict[str, Any]
    ) -> bool:
        """
        Call a framework-internal handler directly with a synthetic event.

        Returns:
            False when the handler is no longer present on the node or threw.
        """

    @abstractmethod
    async def scroll_into_view(self, node: Any) -> None:
        ...
