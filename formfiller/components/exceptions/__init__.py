"""
Exception hierarchy for field interaction failures.
"""
from .field_exceptions import (
    FieldInteractionError,
    NodeNotFoundError,
    ElementStaleError,
    DropdownInteractionError,
    RadioOptionMissingError
)

__all__ = [
    'FieldInteractionError',
    'NodeNotFoundError',
    'ElementStaleError',
    'DropdownInteractionError',
    'RadioOptionMissingError'
]
