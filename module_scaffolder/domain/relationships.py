"""
Relationship resolution for field declarations.

This module interprets the multi-part tokens ``name:kind[:Related]`` of the
declaration language: it validates the relation keyword against the alias
table, infers or canonicalizes the related model and decides the stored
shape of the relation.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..constants import RELATIONSHIP_ALIASES
from .models import Multiplicity, RelationKind
from .naming import (
    NamingConvention,
    pluralize_identifier,
    singularize_identifier,
    to_pascal_case,
    to_snake_case,
    trim_id_suffix,
)

logger = logging.getLogger(__name__)


# Relation kind -> (multiplicity, nullable)
RELATION_SHAPES: Dict[RelationKind, Tuple[Multiplicity, bool]] = {
    RelationKind.BELONGS_TO: (Multiplicity.ONE, True),
    RelationKind.HAS_ONE: (Multiplicity.ONE, True),
    RelationKind.HAS_MANY: (Multiplicity.MANY, False),
    RelationKind.MANY_TO_MANY: (Multiplicity.MANY, False),
    RelationKind.BELONGS_TO_OBJECT: (Multiplicity.ONE, True),
}


@dataclass(frozen=True)
class RelationResolution:
    """Canonical description of one relation declaration."""

    kind: RelationKind
    related_model: str
    multiplicity: Multiplicity
    is_nullable: bool
    join_table: Optional[str] = None
    related_explicit: bool = False

    @property
    def is_list(self) -> bool:
        return self.multiplicity == Multiplicity.MANY

    def go_type(self) -> str:
        """
        Server-side type of the relation-valued field.

        Example:
            >>> RelationResolution(RelationKind.HAS_MANY, "Tag", Multiplicity.MANY, False).go_type()
            '[]*Tag'
        """
        if self.is_list:
            return f"[]*{self.related_model}"
        return f"*{self.related_model}"


class RelationshipResolver:
    """
    Resolves relation keywords and related model names.

    Args:
        naming: Naming convention of the module being compiled; needed to
            name many-to-many join tables
        aliases: Optional replacement alias table (surface spelling ->
            canonical kind name)
    """

    def __init__(
        self,
        naming: Optional[NamingConvention] = None,
        aliases: Optional[Dict[str, str]] = None
    ):
        self.naming = naming
        self.aliases = {k.lower(): v for k, v in (aliases or RELATIONSHIP_ALIASES).items()}

    def relation_kind(self, kind_token: str) -> Optional[RelationKind]:
        """Return the canonical relation kind for a keyword, or None if unknown."""
        canonical = self.aliases.get(kind_token.strip().lower())
        if canonical is None:
            return None
        return RelationKind(canonical)

    def is_relation_keyword(self, token: str) -> bool:
        return self.relation_kind(token) is not None

    def resolve(
        self,
        name: str,
        kind_token: str,
        related: Optional[str] = None
    ) -> Optional[RelationResolution]:
        """
        Resolve a relation declaration.

        Args:
            name: Declared field name
            kind_token: Relation keyword as written
            related: Explicit related model name, if given

        Returns:
            The resolution, or None when the keyword is not a known relation
            kind. Callers treat None as a non-relation fallback.

        Example:
            >>> RelationshipResolver().resolve("tags", "m2m").related_model
            'Tag'
            >>> RelationshipResolver().resolve("parent", "belongsTo", "product_category").related_model
            'ProductCategory'
        """
        kind = self.relation_kind(kind_token)
        if kind is None:
            logger.debug(f"'{kind_token}' is not a relation keyword (field '{name}')")
            return None

        related = (related or "").strip()
        if related:
            related_model = to_pascal_case(related)
        else:
            related_model = self.infer_related_model(name)

        multiplicity, nullable = RELATION_SHAPES[kind]
        join_table = None
        if kind == RelationKind.MANY_TO_MANY:
            join_table = self.join_table_name(related_model)

        return RelationResolution(
            kind=kind,
            related_model=related_model,
            multiplicity=multiplicity,
            is_nullable=nullable,
            join_table=join_table,
            related_explicit=bool(related),
        )

    @staticmethod
    def infer_related_model(name: str) -> str:
        """
        Infer a related model from a field name.

        Strips an identifier suffix, singularizes the last word and converts
        to pascal case.

        Example:
            >>> RelationshipResolver.infer_related_model("categories")
            'Category'
            >>> RelationshipResolver.infer_related_model("author_id")
            'Author'
        """
        base = trim_id_suffix(to_snake_case(name)) or to_snake_case(name)
        return to_pascal_case(singularize_identifier(base))

    def join_table_name(self, related_model: str) -> Optional[str]:
        """``<module snake>_<related plural snake>``, or None without a module."""
        if self.naming is None:
            return None
        return f"{self.naming.model_snake}_{pluralize_identifier(related_model)}"
