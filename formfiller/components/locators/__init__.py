from .selectors import (
    ByAriaLabelSubstring,
    ByAttribute,
    ByCss,
    ByExactId,
    ByIdSuffix,
    ByRolePredicate,
    BySectionId,
    SectionAnchor,
    SelectorSpec,
    text_contains,
    text_equals
)
from .element_locator import ElementLocator, GroupResolution, Resolution

__all__ = [
    'ByAriaLabelSubstring',
    'ByAttribute',
    'ByCss',
    'ByExactId',
    'ByIdSuffix',
    'ByRolePredicate',
    'BySectionId',
    'ElementLocator',
    'GroupResolution',
    'Resolution',
    'SectionAnchor',
    'SelectorSpec',
    'text_contains',
    'text_equals'
]
