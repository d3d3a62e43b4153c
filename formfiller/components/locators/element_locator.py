"""
Resolve a logical field to a node on the live page.

Strategies are tried in their declared order and the first match wins. When a
timeout is given and nothing matches, the whole ordered list is re-run on every
poll, so once the field renders the earliest satisfied strategy is still the
one chosen, regardless of which selector happened to appear first.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from loguru import logger

from formfiller.components.exceptions import ElementStaleError
from formfiller.components.locators.selectors import (
    ByCss,
    BySectionId,
    SectionAnchor,
    SelectorSpec,
)
from formfiller.components.models import FieldDescriptor
from formfiller.components.tree.render_tree import RenderTree
from formfiller.components.utils.waiter import Waiter

LocatorTarget = Union[FieldDescriptor, SelectorSpec, str, Iterable[Union[SelectorSpec, str]]]


@dataclass
class Resolution:
    """A located node and the strategy that found it. Valid until the next await."""
    node: Any
    spec: SelectorSpec
    index: int


@dataclass
class GroupResolution:
    """Every node matched by the first strategy that matched any."""
    nodes: List[Any]
    spec: SelectorSpec
    index: int


class ElementLocator:
    """Ordered multi-strategy element lookup with optional bounded polling."""

    def __init__(
        self,
        tree: RenderTree,
        waiter: Optional[Waiter] = None,
        sections: Iterable[SectionAnchor] = ()
    ):
        self.tree = tree
        self.waiter = waiter or Waiter()
        self.sections: Dict[str, SectionAnchor] = {}
        self._prefixes: Dict[str, str] = {}
        self._degraded: Set[str] = set()
        for anchor in sections:
            self.register_section(anchor)

    def register_section(self, anchor: SectionAnchor) -> None:
        self.sections[anchor.name] = anchor
        self._prefixes.pop(anchor.name, None)

    def forget_sections(self, name: Optional[str] = None) -> None:
        """Drop derived prefixes, e.g. after a page change or a new section instance."""
        if name is None:
            self._prefixes.clear()
            self._degraded.clear()
        else:
            self._prefixes.pop(name, None)
            self._degraded.discard(name)

    async def section_prefix(self, name: str) -> Optional[str]:
        """
        Derive the runtime id prefix of a section from its anchor field.

        Falls back to the anchor's last-known-good prefix when the anchor field
        is not on the page. The fallback is a guess, so it is never cached.
        """
        if name in self._prefixes:
            return self._prefixes[name]

        anchor = self.sections.get(name)
        if anchor is None:
            logger.error(f"❌ No section anchor registered for '{name}'")
            return None

        element_id = None
        try:
            node = await self.tree.query(anchor.anchor_css())
            if node is not None:
                element_id = await self.tree.get_attribute(node, "id")
        except ElementStaleError as e:
            logger.debug(f"Anchor for section '{name}' went stale: {e}")

        if element_id:
            prefix = anchor.prefix_from_id(element_id)
            self._prefixes[name] = prefix
            self._degraded.discard(name)
            logger.debug(f"🧭 Section '{name}' prefix: {prefix}")
            return prefix

        if name not in self._degraded:
            logger.warning(
                f"⚠️ Anchor for section '{name}' not found, "
                f"guessing prefix '{anchor.fallback_prefix}' (degraded mode)"
            )
            self._degraded.add(name)
        return anchor.fallback_prefix

    def _normalize(self, target: LocatorTarget) -> List[SelectorSpec]:
        if isinstance(target, FieldDescriptor):
            items = list(target.candidate_selectors)
        elif isinstance(target, (SelectorSpec, str)):
            items = [target]
        else:
            items = list(target)
        return [ByCss(item) if isinstance(item, str) else item for item in items]

    async def _concrete(self, spec: SelectorSpec) -> Optional[SelectorSpec]:
        if isinstance(spec, BySectionId):
            prefix = await self.section_prefix(spec.section)
            return spec.bind(prefix) if prefix else None
        return spec

    async def _first_match(self, specs: List[SelectorSpec], root: Any) -> Optional[Resolution]:
        for index, spec in enumerate(specs):
            concrete = await self._concrete(spec)
            if concrete is None:
                continue
            try:
                node = await concrete.find(self.tree, root)
            except ElementStaleError as e:
                logger.debug(f"Lookup {spec.describe()} failed: {e}")
                continue
            if node is not None:
                return Resolution(node=node, spec=spec, index=index)
        return None

    async def _first_group(self, specs: List[SelectorSpec], root: Any) -> Optional[GroupResolution]:
        for index, spec in enumerate(specs):
            concrete = await self._concrete(spec)
            if concrete is None:
                continue
            try:
                nodes = await concrete.find_all(self.tree, root)
            except ElementStaleError as e:
                logger.debug(f"Lookup {spec.describe()} failed: {e}")
                continue
            if nodes:
                return GroupResolution(nodes=nodes, spec=spec, index=index)
        return None

    async def resolve(
        self,
        target: LocatorTarget,
        timeout_ms: Optional[int] = None,
        root: Any = None
    ) -> Optional[Resolution]:
        """
        Locate a node.

        Args:
            target: a FieldDescriptor, one SelectorSpec, a raw CSS string, or a
                sequence of specs/strings in priority order.
            timeout_ms: keep re-running the ordered list for this long when
                nothing matches. None or 0 means a single pass.
            root: optional node to scope the lookup to.

        Returns:
            The Resolution, or None when nothing matched (NOT_FOUND).
        """
        specs = self._normalize(target)
        resolution = await self.waiter.poll(lambda: self._first_match(specs, root), timeout_ms)
        if resolution is None:
            logger.debug(f"🔍 Not found: {[s.describe() for s in specs]}")
        elif resolution.index > 0:
            logger.debug(f"🔍 Found via fallback #{resolution.index}: {resolution.spec.describe()}")
        return resolution

    async def resolve_group(
        self,
        target: LocatorTarget,
        timeout_ms: Optional[int] = None,
        root: Any = None
    ) -> Optional[GroupResolution]:
        """Like resolve, but keeps every node the winning strategy matched (radio groups)."""
        specs = self._normalize(target)
        group = await self.waiter.poll(lambda: self._first_group(specs, root), timeout_ms)
        if group is None:
            logger.debug(f"🔍 No group found: {[s.describe() for s in specs]}")
        elif group.index > 0:
            logger.debug(f"🔍 Group found via fallback #{group.index}: {group.spec.describe()}")
        return group
