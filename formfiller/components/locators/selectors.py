"""
Selector strategies for locating a field.

A descriptor lists several of these from strictest to loosest. The locator
tries them in that order and stops at the first one that matches, so a loose
strategy can never override an exact one.
"""
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union

from formfiller.components.tree.render_tree import RenderTree

TextPredicate = Union[str, Callable[[str], bool]]

# Elements that carry a role implicitly, without a role attribute
IMPLICIT_ROLE_SELECTORS = {
    "button": "button",
    "heading": "h1, h2, h3, h4, h5, h6",
    "checkbox": 'input[type="checkbox"]',
    "radio": 'input[type="radio"]',
    "textbox": 'input[type="text"], textarea',
    "option": "option",
    "link": "a[href]",
}


def css_string(value: str) -> str:
    """Quote a value for use inside a CSS attribute selector."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def text_equals(expected: str) -> Callable[[str], bool]:
    target = " ".join(expected.split()).casefold()
    return lambda text: " ".join(text.split()).casefold() == target


def text_contains(expected: str) -> Callable[[str], bool]:
    target = expected.casefold()
    return lambda text: target in text.casefold()


class SelectorSpec:
    """Base class for a single lookup strategy."""

    def css(self) -> str:
        raise NotImplementedError

    def describe(self) -> str:
        return self.css()

    async def find_all(self, tree: RenderTree, root: Any = None) -> List[Any]:
        return await tree.query_all(self.css(), root)

    async def find(self, tree: RenderTree, root: Any = None) -> Optional[Any]:
        return await tree.query(self.css(), root)


@dataclass(frozen=True)
class ByExactId(SelectorSpec):
    element_id: str

    def css(self) -> str:
        return f"[id={css_string(self.element_id)}]"

    def describe(self) -> str:
        return f"#{self.element_id}"


@dataclass(frozen=True)
class ByIdSuffix(SelectorSpec):
    suffix: str

    def css(self) -> str:
        return f"[id$={css_string(self.suffix)}]"


@dataclass(frozen=True)
class ByAttribute(SelectorSpec):
    name: str
    value: str

    def css(self) -> str:
        return f"[{self.name}={css_string(self.value)}]"


@dataclass(frozen=True)
class ByAriaLabelSubstring(SelectorSpec):
    text: str

    def css(self) -> str:
        return f"[aria-label*={css_string(self.text)} i]"


@dataclass(frozen=True)
class ByCss(SelectorSpec):
    """A raw CSS selector, kept for selectors copied straight from the page."""
    selector: str

    def css(self) -> str:
        return self.selector


@dataclass(frozen=True)
class BySectionId(SelectorSpec):
    """
    A field inside a repeated section whose ids share a runtime prefix,
    e.g. `workExperience-6--jobTitle`. The locator supplies the prefix.
    """
    section: str
    suffix: str

    def bind(self, prefix: str) -> ByExactId:
        return ByExactId(prefix + self.suffix)

    def css(self) -> str:
        raise TypeError("BySectionId must be bound to a section prefix by the locator")

    def describe(self) -> str:
        return f"<{self.section}>{self.suffix}"


@dataclass(frozen=True)
class ByRolePredicate(SelectorSpec):
    """
    Nodes with a role (explicit or implicit) whose visible text satisfies a
    predicate. A plain string predicate is a case-insensitive substring test.
    """
    role: str
    text_predicate: TextPredicate

    def css(self) -> str:
        explicit = f"[role={css_string(self.role)}]"
        implicit = IMPLICIT_ROLE_SELECTORS.get(self.role)
        return f"{implicit}, {explicit}" if implicit else explicit

    def describe(self) -> str:
        label = self.text_predicate if isinstance(self.text_predicate, str) else "<predicate>"
        return f"role={self.role} text~{label}"

    def _matches(self, text: str) -> bool:
        if isinstance(self.text_predicate, str):
            return text_contains(self.text_predicate)(text)
        return bool(self.text_predicate(text))

    async def find_all(self, tree: RenderTree, root: Any = None) -> List[Any]:
        matches = []
        for node in await tree.query_all(self.css(), root):
            if self._matches(await tree.text_content(node)):
                matches.append(node)
        return matches

    async def find(self, tree: RenderTree, root: Any = None) -> Optional[Any]:
        matches = await self.find_all(tree, root)
        return matches[0] if matches else None


@dataclass(frozen=True)
class SectionAnchor:
    """
    How to derive the runtime id prefix of a repeated form section.

    The anchor is a field known to exist in every instance of the section;
    its id is `<id_prefix><n><separator><anchor_suffix>`.
    """
    name: str
    id_prefix: str
    anchor_suffix: str
    fallback_prefix: str
    separator: str = "--"

    def anchor_css(self) -> str:
        return (
            f"[id^={css_string(self.id_prefix)}]"
            f"[id$={css_string(self.separator + self.anchor_suffix)}]"
        )

    def prefix_from_id(self, element_id: str) -> str:
        return element_id.split(self.separator)[0] + self.separator
