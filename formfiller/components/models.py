"""
Core data model shared by the locator, injector, option matcher and sequencer.

Descriptors are immutable configuration. Resolved nodes and option candidates
live only for the duration of one operation and are never stored here.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union


class FieldKind(Enum):
    """What kind of control a descriptor addresses."""
    TEXT = "text"
    TEXTAREA = "textarea"
    CHECKBOX = "checkbox"
    COMBOBOX = "combobox"
    DATE_PAIR = "date_pair"
    RADIO = "radio"
    CLICK = "click"


class EventKind(Enum):
    """Event flavours a synthetic event envelope can carry."""
    INPUT = "input"
    CHANGE = "change"
    CLICK = "click"
    BLUR = "blur"


class StrategyUsed(Enum):
    """Channel through which a value reached the form."""
    INTERNAL_STATE = "internal_state"
    NATIVE_EVENT_FALLBACK = "native_event_fallback"


class FillErrorKind(Enum):
    """Typed failure categories reported per step."""
    NODE_NOT_FOUND = "node_not_found"
    NO_MATCHING_OPTION = "no_matching_option"
    INJECTION_DEGRADED = "injection_degraded"
    SEQUENCE_STEP_FAILED = "sequence_step_failed"


class MatchTier(Enum):
    """Option matching tiers, listed in evaluation order."""
    VALUE_CODE = "value_code"
    EXACT_TEXT = "exact_text"
    CONTAINS = "contains"
    POSITIONAL = "positional"


FieldValue = Union[str, bool]


@dataclass(frozen=True)
class FieldDescriptor:
    """A single logical form field and how to find and fill it."""
    logical_name: str
    candidate_selectors: Tuple[Any, ...]
    value: FieldValue
    kind: FieldKind = FieldKind.TEXT
    event_kind: EventKind = EventKind.CHANGE
    option_code: Optional[str] = None
    fallback_index: Optional[int] = None
    companion_selectors: Tuple[Any, ...] = ()

    def __post_init__(self):
        # Accept lists from configuration code but store tuples
        object.__setattr__(self, "candidate_selectors", tuple(self.candidate_selectors))
        object.__setattr__(self, "companion_selectors", tuple(self.companion_selectors))
        if not self.candidate_selectors:
            raise ValueError(f"Field '{self.logical_name}' has no candidate selectors")
        if self.kind == FieldKind.CHECKBOX and not isinstance(self.value, bool):
            raise ValueError(f"Checkbox field '{self.logical_name}' needs a boolean value")


@dataclass
class OptionCandidate:
    """One entry of an open list control, enumerated fresh on every open."""
    visible_text: str
    internal_value_code: Optional[str]
    node: Any
    index: int = 0


@dataclass
class StepResult:
    """Outcome of filling one FieldDescriptor."""
    field_name: str
    succeeded: bool
    strategy_used: Optional[StrategyUsed] = None
    attempts: int = 0
    error: Optional[FillErrorKind] = None
    selector_index: Optional[int] = None
    match_tier: Optional[MatchTier] = None
    low_confidence: bool = False
    detail: str = ""

    @property
    def via_fallback_selector(self) -> bool:
        """True when a later, looser candidate selector located the node."""
        return bool(self.selector_index)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field_name,
            "succeeded": self.succeeded,
            "strategy": self.strategy_used.value if self.strategy_used else None,
            "attempts": self.attempts,
            "error": self.error.value if self.error else None,
            "selector_index": self.selector_index,
            "match_tier": self.match_tier.value if self.match_tier else None,
            "low_confidence": self.low_confidence,
            "detail": self.detail,
        }


@dataclass
class SequenceReport:
    """Ordered per-field results of one sequencer run. Partial success is normal."""
    results: List[StepResult] = field(default_factory=list)

    def add(self, result: StepResult) -> None:
        self.results.append(result)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[StepResult]:
        return iter(self.results)

    def __getitem__(self, index: int) -> StepResult:
        return self.results[index]

    @property
    def succeeded(self) -> List[StepResult]:
        return [r for r in self.results if r.succeeded]

    @property
    def failed(self) -> List[StepResult]:
        return [r for r in self.results if not r.succeeded]

    @property
    def low_confidence(self) -> List[StepResult]:
        return [r for r in self.results if r.succeeded and r.low_confidence]

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        parts = [f"{len(self.succeeded)}/{len(self)} fields filled"]
        if self.low_confidence:
            parts.append(f"{len(self.low_confidence)} low-confidence")
        if self.failed:
            names = ", ".join(r.field_name for r in self.failed)
            parts.append(f"fill manually: {names}")
        return "; ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": len(self),
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "steps": [r.to_dict() for r in self.results],
        }
