"""
Step Sequencer - fills an ordered list of FieldDescriptors on one page.

Features:
- Strict ordering (a section may only exist after an earlier "add" step)
- Per-step retry with backoff, only when the field could not be located
- Logical mismatches reported once, never retried
- Never aborts the run; every step yields exactly one StepResult
"""
from typing import Any, Iterable, List, Optional, Tuple

from loguru import logger

from formfiller.components.exceptions import (
    DropdownInteractionError,
    FieldInteractionError,
    NodeNotFoundError,
    RadioOptionMissingError,
)
from formfiller.components.executors.option_matcher import OptionMatcher, normalize_text
from formfiller.components.executors.state_injector import InjectionResult, StateInjector
from formfiller.components.locators.element_locator import ElementLocator, LocatorTarget, Resolution
from formfiller.components.locators.selectors import ByAttribute, SectionAnchor
from formfiller.components.models import (
    FieldDescriptor,
    FieldKind,
    FillErrorKind,
    SequenceReport,
    StepResult,
    StrategyUsed,
)
from formfiller.components.tree.render_tree import RenderTree
from formfiller.components.utils.waiter import Waiter
from formfiller.config import FillerConfig, SequencePolicy


def split_date_pair(value: Any) -> Tuple[str, Optional[str]]:
    """'MM/YYYY' -> ('MM', 'YYYY'); 'YYYY' -> ('YYYY', None)."""
    text = str(value).strip()
    if "/" in text:
        month, _, year = text.partition("/")
        return month.strip(), year.strip() or None
    return text, None


class StepSequencer:
    """
    Runs fill steps against a render tree.

    The locator, injector and option matcher are built from one FillerConfig
    and share one Waiter, so every suspension point of a run is paced by the
    same clock.
    """

    def __init__(
        self,
        tree: RenderTree,
        config: Optional[FillerConfig] = None,
        waiter: Optional[Waiter] = None,
        sections: Iterable[SectionAnchor] = ()
    ):
        self.tree = tree
        self.config = config or FillerConfig()
        self.waiter = waiter or Waiter(self.config.poll_interval_ms)
        self.locator = ElementLocator(tree, self.waiter, sections)
        self.injector = StateInjector.from_config(tree, self.config, self.waiter)
        self.matcher = OptionMatcher.from_config(tree, self.locator, self.injector, self.config)

    async def run(
        self,
        steps: Iterable[FieldDescriptor],
        policy: Optional[SequencePolicy] = None
    ) -> SequenceReport:
        """
        Fill every step in order.

        Returns:
            SequenceReport with exactly one StepResult per step, in step order.
        """
        policy = policy or self.config.policy
        steps = list(steps)
        report = SequenceReport()

        logger.info(f"🚀 Filling {len(steps)} fields")
        for position, step in enumerate(steps):
            report.add(await self._run_step(step, policy))
            if position < len(steps) - 1:
                await self.waiter.sleep(policy.inter_step_delay_ms)

        logger.info(f"📊 {report.summary()}")
        return report

    async def _run_step(self, step: FieldDescriptor, policy: SequencePolicy) -> StepResult:
        label = step.logical_name
        logger.debug(f"🔧 Filling '{label}' (Kind: {step.kind.value})")

        attempts = 0
        while True:
            attempts += 1
            try:
                result = await self._fill(step, policy)
                result.attempts = attempts
                break

            except FieldInteractionError as e:
                if e.retryable and attempts < policy.max_attempts:
                    logger.warning(
                        f"🔄 '{label}' attempt {attempts}/{policy.max_attempts} failed: {e.reason}"
                    )
                    await self.waiter.sleep(policy.retry_backoff_ms)
                    continue
                result = StepResult(
                    field_name=label,
                    succeeded=False,
                    attempts=attempts,
                    error=e.error_kind,
                    detail=e.reason,
                )
                break

            except Exception as e:
                logger.error(f"❌ Error filling '{label}': {e}")
                result = StepResult(
                    field_name=label,
                    succeeded=False,
                    attempts=attempts,
                    error=FillErrorKind.SEQUENCE_STEP_FAILED,
                    detail=str(e),
                )
                break

        if result.succeeded:
            note = " (low confidence)" if result.low_confidence else ""
            logger.info(f"✅ '{label}' filled via {result.strategy_used.value}{note}")
        else:
            logger.warning(f"❌ '{label}' failed after {attempts} attempt(s): {result.detail or result.error.value}")
        return result

    async def _fill(self, step: FieldDescriptor, policy: SequencePolicy) -> StepResult:
        # Route to appropriate handler based on kind
        if step.kind in (FieldKind.TEXT, FieldKind.TEXTAREA):
            return await self._fill_text(step, policy)
        if step.kind == FieldKind.CHECKBOX:
            return await self._fill_checkbox(step, policy)
        if step.kind == FieldKind.COMBOBOX:
            return await self._fill_combobox(step, policy)
        if step.kind == FieldKind.DATE_PAIR:
            return await self._fill_date_pair(step, policy)
        if step.kind == FieldKind.RADIO:
            return await self._fill_radio(step, policy)
        if step.kind == FieldKind.CLICK:
            return await self._click(step, policy)
        raise FieldInteractionError(step.logical_name, str(step.kind), "Unsupported field kind")

    async def _locate(
        self,
        target: LocatorTarget,
        step: FieldDescriptor,
        policy: SequencePolicy
    ) -> Resolution:
        resolution = await self.locator.resolve(target, policy.locate_timeout_ms)
        if resolution is None:
            raise NodeNotFoundError(
                step.logical_name,
                timeout_ms=policy.locate_timeout_ms,
                field_type=step.kind.value,
            )
        return resolution

    def _written(self, step: FieldDescriptor, injected: InjectionResult, resolution: Resolution) -> StepResult:
        return StepResult(
            field_name=step.logical_name,
            succeeded=True,
            strategy_used=injected.strategy_used,
            selector_index=resolution.index,
            detail="native events only" if injected.degraded else "",
        )

    async def _fill_text(self, step: FieldDescriptor, policy: SequencePolicy) -> StepResult:
        resolution = await self._locate(step, step, policy)
        injected = await self.injector.inject(resolution.node, str(step.value), step.event_kind, step.logical_name)
        return self._written(step, injected, resolution)

    async def _fill_checkbox(self, step: FieldDescriptor, policy: SequencePolicy) -> StepResult:
        resolution = await self._locate(step, step, policy)
        injected = await self.injector.set_checked(resolution.node, bool(step.value), step.logical_name)
        if not injected:
            raise FieldInteractionError(step.logical_name, "checkbox", "State did not change after click")
        return self._written(step, injected, resolution)

    async def _fill_combobox(self, step: FieldDescriptor, policy: SequencePolicy) -> StepResult:
        selection = await self.matcher.select_option(
            step,
            str(step.value),
            desired_code=step.option_code,
            fallback_index=step.fallback_index,
            field_label=step.logical_name,
            timeout_ms=policy.locate_timeout_ms,
        )
        if selection.error is FillErrorKind.NODE_NOT_FOUND:
            raise NodeNotFoundError(step.logical_name, timeout_ms=policy.locate_timeout_ms, field_type="combobox")
        if not selection:
            raise DropdownInteractionError(step.logical_name, str(step.value), selection.detail)

        return StepResult(
            field_name=step.logical_name,
            succeeded=True,
            strategy_used=selection.strategy_used,
            selector_index=selection.selector_index,
            match_tier=selection.tier,
            low_confidence=selection.low_confidence,
            detail=f"chose '{selection.chosen_text}'",
        )

    async def _fill_date_pair(self, step: FieldDescriptor, policy: SequencePolicy) -> StepResult:
        first, year = split_date_pair(step.value)
        if year is not None and not step.companion_selectors:
            raise FieldInteractionError(step.logical_name, "date_pair", "Month/year value but no year selectors")

        resolution = await self._locate(step, step, policy)
        first_label = f"{step.logical_name} (month)" if year else step.logical_name
        first_part = await self.injector.inject(resolution.node, first, step.event_kind, first_label)
        strategies = [first_part.strategy_used]

        if year is not None:
            await self.waiter.sleep(self.config.click_settle_ms)
            # Re-resolve: the first write may have re-rendered the pair
            companion = await self._locate(step.companion_selectors, step, policy)
            year_part = await self.injector.inject(companion.node, year, step.event_kind, f"{step.logical_name} (year)")
            strategies.append(year_part.strategy_used)

        weakest = (
            StrategyUsed.NATIVE_EVENT_FALLBACK
            if StrategyUsed.NATIVE_EVENT_FALLBACK in strategies
            else StrategyUsed.INTERNAL_STATE
        )
        return self._written(step, InjectionResult(True, weakest), resolution)

    async def _radio_label(self, node: Any) -> str:
        aria_label = await self.tree.get_attribute(node, "aria-label")
        if aria_label:
            return normalize_text(aria_label)
        node_id = await self.tree.get_attribute(node, "id")
        if node_id:
            label = await self.tree.query("label" + ByAttribute("for", node_id).css())
            if label is not None:
                return normalize_text(await self.tree.text_content(label))
        return normalize_text(await self.tree.text_content(node))

    async def _matching_radio(self, nodes: List[Any], value: str) -> Optional[Any]:
        wanted = normalize_text(value).lower()
        for node in nodes:
            element_value = await self.tree.get_attribute(node, "value")
            if element_value and element_value.strip().lower() == wanted:
                logger.debug(f"Radio button matches by value: {element_value} == {value}")
                return node
        for node in nodes:
            element_label = await self._radio_label(node)
            if element_label and element_label.lower() == wanted:
                logger.debug(f"Radio button matches by label: {element_label} == {value}")
                return node
        return None

    async def _fill_radio(self, step: FieldDescriptor, policy: SequencePolicy) -> StepResult:
        group = await self.locator.resolve_group(step, policy.locate_timeout_ms)
        if group is None:
            raise NodeNotFoundError(step.logical_name, timeout_ms=policy.locate_timeout_ms, field_type="radio")

        target = await self._matching_radio(group.nodes, str(step.value))
        if target is None:
            raise RadioOptionMissingError(step.logical_name, str(step.value), context={"options": len(group.nodes)})

        injected = await self.injector.set_checked(target, True, step.logical_name)
        if not injected:
            raise FieldInteractionError(step.logical_name, "radio", "Radio button did not become checked")
        return StepResult(
            field_name=step.logical_name,
            succeeded=True,
            strategy_used=injected.strategy_used,
            selector_index=group.index,
        )

    async def _click(self, step: FieldDescriptor, policy: SequencePolicy) -> StepResult:
        resolution = await self._locate(step, step, policy)
        activated = await self.injector.activate(resolution.node, step.logical_name)
        # Clicks add section instances or change pages; derived prefixes are stale now
        self.locator.forget_sections()
        return self._written(step, activated, resolution)
