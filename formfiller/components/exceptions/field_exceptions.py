"""
Exception hierarchy for field interaction failures.
Raised inside the executors and converted into typed StepResults by the sequencer.
"""
from typing import Any, Dict, Optional

from formfiller.components.models import FillErrorKind


class FieldInteractionError(Exception):
    """Base exception for all field interaction failures."""

    error_kind = FillErrorKind.SEQUENCE_STEP_FAILED
    retryable = False

    def __init__(
        self,
        field_label: str,
        field_type: str,
        reason: str,
        context: Optional[Dict[str, Any]] = None
    ):
        self.field_label = field_label
        self.field_type = field_type
        self.reason = reason
        self.context = context or {}

        super().__init__(f"Field '{field_label}' ({field_type}): {reason}")


class NodeNotFoundError(FieldInteractionError):
    """Raised when every candidate selector came up empty."""

    error_kind = FillErrorKind.NODE_NOT_FOUND
    retryable = True

    def __init__(self, field_label: str, timeout_ms: Optional[int] = None, **kwargs):
        self.timeout_ms = timeout_ms
        field_type = kwargs.pop('field_type', 'unknown')
        reason = "No candidate selector matched"
        if timeout_ms:
            reason += f" within {timeout_ms}ms"
        super().__init__(
            field_label=field_label,
            field_type=field_type,
            reason=reason,
            **kwargs
        )


class ElementStaleError(FieldInteractionError):
    """Raised when a resolved node was detached by a re-render before use."""

    error_kind = FillErrorKind.NODE_NOT_FOUND
    retryable = True

    def __init__(self, field_label: str = "unknown", detail: str = "", **kwargs):
        self.detail = detail
        field_type = kwargs.pop('field_type', 'unknown')
        super().__init__(
            field_label=field_label,
            field_type=field_type,
            reason=f"Element detached from the page{f': {detail}' if detail else ''}",
            **kwargs
        )


class DropdownInteractionError(FieldInteractionError):
    """Raised when an opened list control offers no acceptable option."""

    error_kind = FillErrorKind.NO_MATCHING_OPTION

    def __init__(self, field_label: str, value: str, reason: str, **kwargs):
        self.value = value
        field_type = kwargs.pop('field_type', 'combobox')
        super().__init__(
            field_label=field_label,
            field_type=field_type,
            reason=reason,
            **kwargs
        )


class RadioOptionMissingError(FieldInteractionError):
    """Raised when a radio group exists but none of its inputs carries the value."""

    error_kind = FillErrorKind.NO_MATCHING_OPTION

    def __init__(self, field_label: str, value: str, **kwargs):
        self.value = value
        super().__init__(
            field_label=field_label,
            field_type='radio',
            reason=f"No radio input with value '{value}'",
            **kwargs
        )
