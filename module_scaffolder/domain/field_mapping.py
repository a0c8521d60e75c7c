"""
Type alias resolution for field declarations.

This module maps the short type tokens of the declaration language
(``string``, ``int``, ``translation``, ``image``, ``media:image``, ...) to a
canonical type descriptor: semantic category, scalar kind, Go type and the
persistence hints every template emits for it.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ..constants import (
    DEFAULT_MEDIA_KIND,
    FALLBACK_ID_TYPE,
    FALLBACK_TYPE,
    GO_ATTACHMENT_TYPE,
    GO_MEDIA_TYPE,
    GO_SCALAR_TYPES,
    GO_TRANSLATION_TYPE,
    GORM_SCALAR_HINTS,
    ID_NAME_SUFFIX,
    MEDIA_KINDS,
    ScalarTypes,
    SpecialTypes,
    TYPE_ALIASES,
)
from .models import FieldCategory, ScalarKind
from .naming import to_snake_case

logger = logging.getLogger(__name__)


SCALAR_KINDS: Dict[str, ScalarKind] = {
    ScalarTypes.STRING: ScalarKind.STRING,
    ScalarTypes.EMAIL: ScalarKind.STRING,
    ScalarTypes.URL: ScalarKind.STRING,
    ScalarTypes.UUID: ScalarKind.STRING,
    ScalarTypes.TEXT: ScalarKind.TEXT,
    ScalarTypes.INT: ScalarKind.INTEGER,
    ScalarTypes.INT64: ScalarKind.INTEGER,
    ScalarTypes.UINT: ScalarKind.UNSIGNED,
    ScalarTypes.FLOAT: ScalarKind.FLOAT,
    ScalarTypes.DECIMAL: ScalarKind.FLOAT,
    ScalarTypes.BOOL: ScalarKind.BOOLEAN,
    ScalarTypes.DATETIME: ScalarKind.DATETIME,
    ScalarTypes.DATE: ScalarKind.DATE,
    ScalarTypes.JSON: ScalarKind.JSON,
}

# Scalar kinds whose server-side representation may be empty
NULLABLE_SCALAR_KINDS = frozenset({ScalarKind.DATETIME, ScalarKind.DATE, ScalarKind.JSON})

ATTACHMENT_KINDS: Dict[str, str] = {
    SpecialTypes.IMAGE: "image",
    SpecialTypes.FILE: "file",
    SpecialTypes.ATTACHMENT: "file",
}


@dataclass(frozen=True)
class TypeResolution:
    """Canonical descriptor for one type token."""

    token: str
    canonical: str
    category: FieldCategory
    go_type: str
    scalar_kind: Optional[ScalarKind] = None
    attachment_kind: Optional[str] = None
    gorm_hint: str = ""
    is_nullable: bool = False
    is_fallback: bool = False


class TypeAliasResolver:
    """
    Resolves type tokens against the alias table.

    Unknown tokens never raise: a field whose name ends in ``_id`` falls back
    to an unsigned integer and anything else to a string. Such resolutions
    are flagged ``is_fallback`` so the caller can report them.

    Example:
        >>> resolver = TypeAliasResolver()
        >>> resolver.resolve("int", "sort_order").scalar_kind
        <ScalarKind.INTEGER: 'integer'>
        >>> resolver.resolve("foo", "bar").is_fallback
        True
    """

    def __init__(self, aliases: Optional[Dict[str, str]] = None):
        self.aliases = {k.lower(): v for k, v in (aliases or TYPE_ALIASES).items()}

    def canonical_name(self, type_token: str) -> Optional[str]:
        """Return the canonical type name for a token, or None if unknown."""
        return self.aliases.get(type_token.strip().lower())

    def is_media_keyword(self, token: str) -> bool:
        return self.canonical_name(token) == SpecialTypes.MEDIA

    def resolve(self, type_token: str, field_name: str) -> TypeResolution:
        """
        Resolve a type token for a field.

        Args:
            type_token: The type part of the declaration
            field_name: The field name, used for fallback inference

        Returns:
            The canonical type descriptor
        """
        canonical = self.canonical_name(type_token)
        if canonical is None:
            fallback = self.infer_from_name(field_name)
            logger.debug(f"Unknown type '{type_token}' on field '{field_name}', using {fallback.canonical}")
            return TypeResolution(
                token=type_token,
                canonical=fallback.canonical,
                category=fallback.category,
                go_type=fallback.go_type,
                scalar_kind=fallback.scalar_kind,
                gorm_hint=fallback.gorm_hint,
                is_nullable=fallback.is_nullable,
                is_fallback=True,
            )
        if canonical == SpecialTypes.MEDIA:
            return self.resolve_media(DEFAULT_MEDIA_KIND)
        return self._resolve_canonical(type_token, canonical)

    def resolve_media(self, kind_token: Optional[str] = None) -> TypeResolution:
        """
        Resolve a ``media[:kind]`` declaration.

        Unknown media kinds are kept as written; they only label the field.
        """
        kind = (kind_token or DEFAULT_MEDIA_KIND).strip().lower() or DEFAULT_MEDIA_KIND
        if kind not in MEDIA_KINDS:
            logger.debug(f"Media kind '{kind}' is not a standard kind")
        return TypeResolution(
            token=f"{SpecialTypes.MEDIA}:{kind}",
            canonical=SpecialTypes.MEDIA,
            category=FieldCategory.MEDIA,
            go_type=GO_MEDIA_TYPE,
            attachment_kind=kind,
            is_nullable=True,
        )

    def infer_from_name(self, field_name: str) -> TypeResolution:
        """Infer a scalar type from a bare field name."""
        canonical = FALLBACK_ID_TYPE if to_snake_case(field_name).endswith(ID_NAME_SUFFIX) else FALLBACK_TYPE
        return self._resolve_canonical(canonical, canonical)

    def _resolve_canonical(self, token: str, canonical: str) -> TypeResolution:
        if canonical == SpecialTypes.TRANSLATION:
            return TypeResolution(
                token=token,
                canonical=canonical,
                category=FieldCategory.TRANSLATABLE,
                go_type=GO_TRANSLATION_TYPE,
            )

        if canonical in ATTACHMENT_KINDS:
            return TypeResolution(
                token=token,
                canonical=canonical,
                category=FieldCategory.ATTACHMENT,
                go_type=GO_ATTACHMENT_TYPE,
                attachment_kind=ATTACHMENT_KINDS[canonical],
                is_nullable=True,
            )

        scalar_kind = SCALAR_KINDS[canonical]
        return TypeResolution(
            token=token,
            canonical=canonical,
            category=FieldCategory.SCALAR,
            go_type=GO_SCALAR_TYPES[canonical],
            scalar_kind=scalar_kind,
            gorm_hint=GORM_SCALAR_HINTS.get(canonical, ""),
            is_nullable=scalar_kind in NULLABLE_SCALAR_KINDS,
        )
