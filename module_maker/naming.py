"""Module name validation and derived name forms.

Every derivation here is a pure function of the input string: a validated
module name maps to the same lowercase, snake, camel and plural forms on
every run, independent of configuration or locale.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from module_maker.errors import InvalidNameError

_IDENTIFIER_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

_UNCOUNTABLE: frozenset[str] = frozenset({
    "audio",
    "data",
    "equipment",
    "feedback",
    "information",
    "metadata",
    "money",
    "news",
    "series",
    "sheep",
    "species",
})

_IRREGULAR: dict[str, str] = {
    "child": "children",
    "foot": "feet",
    "goose": "geese",
    "man": "men",
    "mouse": "mice",
    "ox": "oxen",
    "person": "people",
    "tooth": "teeth",
    "woman": "women",
}


def is_valid_name(name: str) -> bool:
    """Return ``True`` when *name* can be used as a class-name fragment."""
    return bool(_IDENTIFIER_RE.match(name))


def validate_name(name: str, what: str = "Module") -> str:
    """Return *name* unchanged, or raise ``InvalidNameError``."""
    if not is_valid_name(name):
        raise InvalidNameError(name, what)
    return name


def snake_case(value: str) -> str:
    """Convert ``BlogPost`` or ``blogPost`` to ``blog_post``.

    Examples::

        snake_case("BlogPost")   -> "blog_post"
        snake_case("HTTPClient") -> "http_client"
        snake_case("Blog_Post")  -> "blog_post"
    """
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"_+", "_", s2).lower()


def camel_case(value: str) -> str:
    """Lowercase the first character: ``BlogPost`` -> ``blogPost``."""
    if not value:
        return ""
    return value[0].lower() + value[1:]


def pluralize(word: str) -> str:
    """Pluralise the final word of *word* using fixed English rules.

    Only the last camel-case segment is inflected, so ``BlogCategory``
    becomes ``BlogCategories``. The case of the original segment is kept.

    Examples::

        pluralize("Post")     -> "Posts"
        pluralize("Category") -> "Categories"
        pluralize("Box")      -> "Boxes"
        pluralize("Person")   -> "People"
        pluralize("News")     -> "News"
    """
    if not word:
        return word

    match = re.search(r"[A-Z]?[a-z0-9]*$", word)
    start = match.start() if match and match.group() else 0
    head, last = word[:start], word[start:]
    lower = last.lower()

    if lower in _UNCOUNTABLE:
        return word

    if lower in _IRREGULAR:
        plural = _IRREGULAR[lower]
        if last[0].isupper():
            plural = plural[0].upper() + plural[1:]
        return head + plural

    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        result = last[:-1] + "ies"
    elif lower.endswith(("s", "sh", "ch", "x", "z")):
        result = last + "es"
    else:
        result = last + "s"

    return head + result


@dataclass(frozen=True)
class ModuleNames:
    """All name forms derived from a validated module name."""

    name: str
    namespace: str

    @property
    def lower(self) -> str:
        return self.name.lower()

    @property
    def snake(self) -> str:
        return snake_case(self.name)

    @property
    def camel(self) -> str:
        return camel_case(self.name)

    @property
    def plural(self) -> str:
        return pluralize(self.name)

    @property
    def plural_lower(self) -> str:
        return self.plural.lower()

    @property
    def plural_snake(self) -> str:
        return snake_case(self.plural)

    @property
    def module_namespace(self) -> str:
        return f"{self.namespace}\\{self.name}"

    @property
    def provider_class(self) -> str:
        """Fully-qualified class name of the module's service provider."""
        return f"{self.module_namespace}\\Providers\\{self.name}ServiceProvider"

    def replacements(self) -> dict[str, str]:
        """Token mapping substituted into stubs and output path patterns."""
        return {
            "{{module}}": self.name,
            "{{moduleLower}}": self.lower,
            "{{moduleSnake}}": self.snake,
            "{{moduleCamel}}": self.camel,
            "{{modulePlural}}": self.plural,
            "{{modulePluralLower}}": self.plural_lower,
            "{{modulePluralSnake}}": self.plural_snake,
            "{{namespace}}": self.namespace,
            "{{moduleNamespace}}": self.module_namespace,
            "{{migrationClass}}": f"Create{self.plural}Table",
            "{{tableName}}": self.plural_snake,
        }
