"""
Option selection for list and combobox style controls.

Opens the control, waits for the option list to render, enumerates options
inside that list only (stale lists from other controls may still be in the
page) and picks one through a tiered matching policy. A failed match always
closes the control again.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from formfiller.components.exceptions import ElementStaleError
from formfiller.components.executors.state_injector import StateInjector
from formfiller.components.locators.element_locator import ElementLocator, LocatorTarget
from formfiller.components.locators.selectors import ByExactId
from formfiller.components.models import (
    FillErrorKind,
    MatchTier,
    OptionCandidate,
    StrategyUsed,
)
from formfiller.components.tree.render_tree import RenderTree
from formfiller.components.utils.waiter import Waiter
from formfiller.config import FillerConfig

# Abbreviations seen in profiles vs. the wording used by option lists
DEFAULT_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "masters": ("master",),
    "bachelors": ("bachelor",),
    "associates": ("associate",),
    "doctorate": ("doctor", "phd", "ph.d"),
}


def normalize_text(text: Optional[str]) -> str:
    return " ".join((text or "").split())


def _loose(text: str) -> str:
    return normalize_text(text).casefold().replace("'", "").replace("’", "")


def match_option(
    candidates: Sequence[OptionCandidate],
    desired_text: str,
    desired_code: Optional[str] = None,
    fallback_index: Optional[int] = None,
    synonyms: Optional[Dict[str, Tuple[str, ...]]] = None
) -> Optional[Tuple[OptionCandidate, MatchTier]]:
    """
    Pick an option. Tiers, first success wins:

    1. value code, only when `desired_code` is given (codes are stable while
       texts get localized or abbreviated),
    2. exact visible text,
    3. case-insensitive substring, widened by the synonym table,
    4. the configured fallback position (a guess, reported as such).
    """
    synonyms = DEFAULT_SYNONYMS if synonyms is None else synonyms

    if desired_code:
        for candidate in candidates:
            if candidate.internal_value_code == desired_code:
                return candidate, MatchTier.VALUE_CODE

    target = normalize_text(desired_text)
    if target:
        for candidate in candidates:
            if normalize_text(candidate.visible_text) == target:
                return candidate, MatchTier.EXACT_TEXT

        loose_target = _loose(target)
        needles = [loose_target] + [_loose(s) for s in synonyms.get(loose_target, ())]
        for candidate in candidates:
            loose_text = _loose(candidate.visible_text)
            if any(needle and needle in loose_text for needle in needles):
                return candidate, MatchTier.CONTAINS

    if fallback_index is not None and 0 <= fallback_index < len(candidates):
        return candidates[fallback_index], MatchTier.POSITIONAL

    return None


@dataclass
class OptionSelection:
    """Outcome of one select_option call. Truthy when an option was clicked."""
    selected: bool
    tier: Optional[MatchTier] = None
    chosen_text: Optional[str] = None
    low_confidence: bool = False
    error: Optional[FillErrorKind] = None
    strategy_used: Optional[StrategyUsed] = None
    selector_index: Optional[int] = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.selected


class OptionMatcher:
    """Opens a list control and selects the best matching option."""

    LISTBOX_SELECTOR = '[role="listbox"]'
    OPTION_SELECTOR = '[role="option"]'

    def __init__(
        self,
        tree: RenderTree,
        locator: ElementLocator,
        injector: StateInjector,
        waiter: Optional[Waiter] = None,
        option_settle_ms: int = 800,
        option_click_settle_ms: int = 500,
        listbox_timeout_ms: int = 3000,
        synonyms: Optional[Dict[str, Tuple[str, ...]]] = None
    ):
        self.tree = tree
        self.locator = locator
        self.injector = injector
        self.waiter = waiter or locator.waiter
        self.option_settle_ms = option_settle_ms
        self.option_click_settle_ms = option_click_settle_ms
        self.listbox_timeout_ms = listbox_timeout_ms
        self.synonyms = dict(DEFAULT_SYNONYMS if synonyms is None else synonyms)

    @classmethod
    def from_config(
        cls,
        tree: RenderTree,
        locator: ElementLocator,
        injector: StateInjector,
        config: FillerConfig
    ) -> "OptionMatcher":
        return cls(
            tree,
            locator,
            injector,
            option_settle_ms=config.option_settle_ms,
            option_click_settle_ms=config.option_click_settle_ms,
            listbox_timeout_ms=config.listbox_timeout_ms,
        )

    async def enumerate_options(self, container: Any) -> List[OptionCandidate]:
        candidates = []
        for index, node in enumerate(await self.tree.query_all(self.OPTION_SELECTOR, container)):
            candidates.append(OptionCandidate(
                visible_text=normalize_text(await self.tree.text_content(node)),
                internal_value_code=await self.tree.get_attribute(node, "data-value"),
                node=node,
                index=index,
            ))
        return candidates

    async def _owned_list(self, control: LocatorTarget) -> Optional[Any]:
        resolution = await self.locator.resolve(control)
        if resolution is None:
            return None
        for attr in ("aria-controls", "aria-owns"):
            owned_id = await self.tree.get_attribute(resolution.node, attr)
            if owned_id:
                owned = await self.tree.query(ByExactId(owned_id).css())
                if owned is not None:
                    return owned
        return None

    async def _visible_listboxes(self) -> List[Any]:
        visible = []
        for box in await self.tree.query_all(self.LISTBOX_SELECTOR):
            if await self.tree.is_visible(box):
                visible.append(box)
        return visible

    async def _opened_since(self, box: Any, before: Sequence[Any]) -> bool:
        for old in before:
            try:
                if await self.tree.is_same_node(old, box):
                    return False
            except ElementStaleError:
                continue
        return True

    async def _find_container(self, control: LocatorTarget, before: Sequence[Any] = ()) -> Optional[Any]:
        """
        The list the control just opened. Without aria-controls/aria-owns this
        is the last visible listbox that was not already open before the
        click; lists left over from other controls never qualify.
        """
        async def attempt():
            try:
                owned = await self._owned_list(control)
                if owned is not None:
                    return owned
                for box in reversed(await self._visible_listboxes()):
                    if await self._opened_since(box, before):
                        return box
                return None
            except ElementStaleError:
                return None

        return await self.waiter.poll(attempt, self.listbox_timeout_ms)

    async def _close(self, field_label: str) -> None:
        try:
            await self.tree.click_outside()
        except ElementStaleError as e:
            logger.debug(f"Closing '{field_label}' failed: {e}")

    async def select_option(
        self,
        control: LocatorTarget,
        desired_text: str,
        desired_code: Optional[str] = None,
        fallback_index: Optional[int] = None,
        field_label: Optional[str] = None,
        timeout_ms: Optional[int] = None
    ) -> OptionSelection:
        """
        Open `control` and click the option matching `desired_text`/`desired_code`.

        Returns:
            OptionSelection. A missing control is NODE_NOT_FOUND (worth a
            retry); an open list without an acceptable option is
            NO_MATCHING_OPTION (not worth one).
        """
        label = field_label or desired_text
        logger.debug(f"🔽 Selecting '{desired_text}' in '{label}'")

        resolution = await self.locator.resolve(control, timeout_ms)
        if resolution is None:
            return OptionSelection(
                selected=False,
                error=FillErrorKind.NODE_NOT_FOUND,
                detail="control not found",
            )

        try:
            already_open = await self._visible_listboxes()
            await self.injector.activate(resolution.node, label)
            await self.waiter.sleep(self.option_settle_ms)

            container = await self._find_container(control, already_open)
            if container is None:
                logger.warning(f"⚠️ Option list for '{label}' did not open")
                await self._close(label)
                return OptionSelection(
                    selected=False,
                    error=FillErrorKind.NO_MATCHING_OPTION,
                    selector_index=resolution.index,
                    detail="option list did not open",
                )

            candidates = await self.enumerate_options(container)
            logger.debug(f"  Found {len(candidates)} options: {[c.visible_text for c in candidates]}")

            match = match_option(candidates, desired_text, desired_code, fallback_index, self.synonyms)
            if match is None:
                logger.warning(f"❌ No option matching '{desired_text}' in '{label}'")
                await self._close(label)
                return OptionSelection(
                    selected=False,
                    error=FillErrorKind.NO_MATCHING_OPTION,
                    selector_index=resolution.index,
                    detail=f"no option matching '{desired_text}' among {len(candidates)}",
                )

            candidate, tier = match
            if tier is MatchTier.POSITIONAL:
                logger.warning(
                    f"⚠️ '{label}': guessing option #{candidate.index} "
                    f"('{candidate.visible_text}') for '{desired_text}'"
                )

            strategy = await self.injector.click_strategy(candidate.node)
            await self.tree.click(candidate.node)
            await self.waiter.sleep(self.option_click_settle_ms)
        except ElementStaleError:
            await self._close(label)
            raise

        logger.debug(f"✅ '{label}' -> '{candidate.visible_text}' ({tier.value})")
        return OptionSelection(
            selected=True,
            tier=tier,
            chosen_text=candidate.visible_text,
            low_confidence=tier is MatchTier.POSITIONAL,
            strategy_used=strategy,
            selector_index=resolution.index,
        )
