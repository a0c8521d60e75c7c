"""
Naming convention utilities for the module scaffolder.

Every generated artifact refers to a module through one of the casing
variants computed here, so all of them must come from the same functions.
Pluralization is a small fixed rule set rather than a dictionary lookup:

1. a trailing ``y`` becomes ``ies`` (``category`` -> ``categories``);
2. a trailing sibilant (``s``, ``x``, ``z``, ``ch``, ``sh``) takes ``es``
   (``box`` -> ``boxes``);
3. anything else takes ``s``.

Only the last word of a compound name is pluralized. Irregular nouns,
acronyms and inputs that are already plural are not detected.
"""

import re
from dataclasses import dataclass

from ..exceptions import DeclarationError


SIBILANT_SUFFIXES = ("ch", "sh", "s", "x", "z")


def to_snake_case(name: str) -> str:
    """
    Convert any supported spelling of an identifier to snake_case.

    Accepts snake_case, kebab-case, space separated words, camelCase and
    PascalCase.

    Args:
        name: The string to convert

    Returns:
        The converted snake_case string

    Example:
        >>> to_snake_case("ProductCategory")
        'product_category'
        >>> to_snake_case("blog-post")
        'blog_post'
        >>> to_snake_case("HTTPServer")
        'http_server'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    name = re.sub(r"[\s\-]+", "_", name.strip())
    name = re.sub(r"[^0-9A-Za-z_]", "", name)
    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    name = re.sub("([a-z0-9])([A-Z])", r"\1_\2", name)
    name = re.sub("_+", "_", name)
    return name.strip("_").lower()


def to_pascal_case(name: str) -> str:
    """
    Convert an identifier to PascalCase.

    Example:
        >>> to_pascal_case("product_category")
        'ProductCategory'
        >>> to_pascal_case("parentId")
        'ParentId'
    """
    return "".join(word.capitalize() for word in to_snake_case(name).split("_") if word)


def to_camel_case(name: str) -> str:
    """Convert an identifier to camelCase."""
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def to_kebab_case(name: str) -> str:
    """Convert an identifier to kebab-case."""
    return to_snake_case(name).replace("_", "-")


def to_title_case(name: str) -> str:
    """Convert an identifier to capitalized words ("Product Category")."""
    return " ".join(word.capitalize() for word in to_snake_case(name).split("_") if word)


def pluralize(word: str) -> str:
    """
    Pluralize a single word using the fixed rule set.

    The casing of the input is preserved; only the suffix is inspected.

    Example:
        >>> pluralize("category")
        'categories'
        >>> pluralize("Box")
        'Boxes'
        >>> pluralize("tag")
        'tags'
    """
    if not word:
        return word
    lower = word.lower()
    if lower.endswith("y"):
        return word[:-1] + "ies"
    if lower.endswith(SIBILANT_SUFFIXES):
        return word + "es"
    return word + "s"


def singularize(word: str) -> str:
    """
    Inverse of :func:`pluralize`, used to infer related model names.

    Example:
        >>> singularize("categories")
        'category'
        >>> singularize("boxes")
        'box'
        >>> singularize("tags")
        'tag'
        >>> singularize("address")
        'address'
    """
    lower = word.lower()
    if lower.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if lower.endswith("es") and lower[:-2].endswith(SIBILANT_SUFFIXES):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith("ss") and len(word) > 1:
        return word[:-1]
    return word


def pluralize_identifier(name: str) -> str:
    """Pluralize the last word of a compound identifier, returning snake_case."""
    words = to_snake_case(name).split("_")
    words[-1] = pluralize(words[-1])
    return "_".join(words)


def singularize_identifier(name: str) -> str:
    """Singularize the last word of a compound identifier, returning snake_case."""
    words = to_snake_case(name).split("_")
    words[-1] = singularize(words[-1])
    return "_".join(words)


def trim_id_suffix(name: str) -> str:
    """
    Strip a trailing identifier suffix (``Id`` or ``_id``).

    Example:
        >>> trim_id_suffix("ParentId")
        'Parent'
        >>> trim_id_suffix("author_id")
        'author'
    """
    if name.endswith("_id"):
        return name[:-3]
    if name.endswith("Id"):
        return name[:-2]
    return name


@dataclass(frozen=True)
class NamingConvention:
    """
    Every casing variant of a module name.

    All attributes are pure functions of the singular snake_case form, so a
    convention derived from its own ``model`` attribute is equal to itself.
    """

    display_name: str
    display_plural: str
    model: str
    model_plural: str
    model_camel: str
    plural_camel: str
    model_snake: str
    plural_snake: str
    model_kebab: str
    plural_kebab: str
    dir_name: str

    @classmethod
    def derive(cls, name: str) -> "NamingConvention":
        """
        Derive the naming convention for a module.

        Args:
            name: Module name in any supported casing (singular)

        Returns:
            The complete naming convention

        Raises:
            DeclarationError: If the name contains no identifier characters

        Example:
            >>> NamingConvention.derive("product_category").plural_kebab
            'product-categories'
        """
        snake = to_snake_case(name)
        if not snake:
            raise DeclarationError(
                f"Module name '{name}' contains no identifier characters",
                token=name,
                suggestions=["Pass a singular module name such as 'product' or 'blog_post'"]
            )
        plural_snake = pluralize_identifier(snake)

        return cls(
            display_name=to_title_case(snake),
            display_plural=to_title_case(plural_snake),
            model=to_pascal_case(snake),
            model_plural=to_pascal_case(plural_snake),
            model_camel=to_camel_case(snake),
            plural_camel=to_camel_case(plural_snake),
            model_snake=snake,
            plural_snake=plural_snake,
            model_kebab=to_kebab_case(snake),
            plural_kebab=to_kebab_case(plural_snake),
            dir_name=plural_snake,
        )


def derive_naming(name: str) -> NamingConvention:
    """Shortcut for :meth:`NamingConvention.derive`."""
    return NamingConvention.derive(name)
