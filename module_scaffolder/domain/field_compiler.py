"""
Field declaration compiler.

Turns the ordered declaration tokens of a module (``title:translation``,
``parent:belongsTo:Region``, ``avatar:media:image`` ...) into the ordered
``ResolvedField`` list every template consumes.

Grammar (tokens are separated by ``:``)::

    name                      type inferred from the name
    name:type                 type alias, relation keyword or media keyword
    name:relation:Related     relation with an explicit related model
    name:media:kind           media reference of the given kind

``belongs_to`` and ``media`` declarations each expand into two fields: a
foreign key followed by its companion object field. The whole list compiles
before anything is written, so a bad token never leaves partial output.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..constants import (
    DECLARATION_SEPARATOR,
    GO_BELONGS_TO_FK_TYPE,
    GO_MEDIA_FK_TYPE,
    MAX_KEYWORD_ARITY,
    FieldNames,
    ScalarTypes,
)
from ..exceptions import DeclarationError, GenerationWarning, WarningKind
from .field_mapping import TypeAliasResolver, TypeResolution
from .models import (
    FieldAnnotations,
    FieldCategory,
    Multiplicity,
    RelationKind,
    ResolvedField,
    ScalarKind,
    TargetKind,
)
from .naming import NamingConvention, to_pascal_case, to_snake_case, trim_id_suffix
from .relationships import RelationResolution, RelationshipResolver

logger = logging.getLogger(__name__)


STORAGE_REFERENCE_TAG = "foreignKey:ModelId;references:Id"


@dataclass(frozen=True)
class CompilationResult:
    """Compiled fields in declaration order plus non-fatal diagnostics."""

    fields: Tuple[ResolvedField, ...]
    warnings: Tuple[GenerationWarning, ...] = ()


def json_tag(json_key: str, go_type: str) -> str:
    """Pointer and slice valued fields are omitted from JSON when empty."""
    if go_type.startswith("*") or go_type.startswith("[]"):
        return f"{json_key},omitempty"
    return json_key


def is_required(json_key: str, target_kind: TargetKind, scalar_kind: Optional[ScalarKind], nullable: bool) -> bool:
    """
    Decide whether a field must be supplied on create.

    Nullable fields, booleans, relation-valued fields, the id and audit
    columns and anything named ``*optional*`` are never required.
    """
    if nullable:
        return False
    if target_kind not in (TargetKind.SCALAR, TargetKind.TRANSLATABLE):
        return False
    if scalar_kind == ScalarKind.BOOLEAN:
        return False
    if json_key in FieldNames.IDENTIFIER_NAMES or json_key in FieldNames.AUDIT_NAMES:
        return False
    return FieldNames.OPTIONAL_HINT not in json_key


def binding_tag(required: bool, canonical: str) -> str:
    rules = []
    if required:
        rules.append("required")
    elif canonical in (ScalarTypes.EMAIL, ScalarTypes.URL):
        rules.append("omitempty")
    if canonical == ScalarTypes.EMAIL:
        rules.append("email")
    elif canonical == ScalarTypes.URL:
        rules.append("url")
    return ",".join(rules)


class FieldCompiler:
    """
    Compiles field declarations for one module.

    Args:
        naming: Naming convention of the module; used to name join tables
            and the owning foreign key of has-one / has-many relations
        type_resolver: Type alias resolver (default alias table if omitted)
        relationship_resolver: Relationship resolver (created from
            ``naming`` if omitted)

    Example:
        >>> result = FieldCompiler().compile(["parent:belongsTo:Region"])
        >>> [f.json_key for f in result.fields]
        ['parent_id', 'parent']
    """

    def __init__(
        self,
        naming: Optional[NamingConvention] = None,
        type_resolver: Optional[TypeAliasResolver] = None,
        relationship_resolver: Optional[RelationshipResolver] = None
    ):
        self.naming = naming
        self.types = type_resolver or TypeAliasResolver()
        self.relations = relationship_resolver or RelationshipResolver(naming)

    def compile(self, declarations: Iterable[str]) -> CompilationResult:
        """
        Compile all declarations of a module.

        Args:
            declarations: Ordered declaration tokens

        Returns:
            The compiled fields and any warnings

        Raises:
            DeclarationError: For a malformed token or a field name that is
                produced twice
        """
        fields: List[ResolvedField] = []
        warnings: List[GenerationWarning] = []
        declared_by = {}
        declaration_count = 0

        for token in declarations:
            declaration_count += 1
            compiled, token_warnings = self.compile_declaration(token)
            for resolved in compiled:
                if resolved.json_key in declared_by:
                    raise DeclarationError(
                        f"Field '{resolved.json_key}' is declared more than once",
                        token=token,
                        context={'first_declared_by': declared_by[resolved.json_key]}
                    )
                declared_by[resolved.json_key] = token
            fields.extend(compiled)
            warnings.extend(token_warnings)

        logger.debug(f"Compiled {len(fields)} fields from {declaration_count} declarations")
        return CompilationResult(fields=tuple(fields), warnings=tuple(warnings))

    def compile_declaration(self, token: str) -> Tuple[List[ResolvedField], List[GenerationWarning]]:
        """
        Compile a single declaration into one or two fields.

        Raises:
            DeclarationError: If the token is malformed
        """
        raw = token.strip()
        parts = [part.strip() for part in raw.split(DECLARATION_SEPARATOR)]
        name = parts[0]

        if not name or not to_snake_case(name):
            raise DeclarationError(f"Field declaration '{token}' has an empty name", token=token)
        if any(not part for part in parts[1:]):
            raise DeclarationError(f"Field declaration '{token}' has an empty type", token=token)

        if len(parts) == 1:
            return [self._plain_field(name, self.types.infer_from_name(name), raw)], []

        keyword = parts[1]
        related = parts[2] if len(parts) > 2 else None
        is_media = self.types.is_media_keyword(keyword)
        relation_kind = self.relations.relation_kind(keyword)

        if len(parts) > MAX_KEYWORD_ARITY and (is_media or relation_kind is not None):
            raise DeclarationError(
                f"Field declaration '{token}' has {len(parts)} parts; "
                f"'{keyword}' declarations take at most {MAX_KEYWORD_ARITY}",
                token=token
            )

        if is_media:
            return self._media_fields(name, related, raw), []

        if relation_kind is not None:
            resolution = self.relations.resolve(name, keyword, related)
            if resolution.kind == RelationKind.BELONGS_TO:
                return self._belongs_to_fields(name, resolution, raw), []
            return [self._relation_field(name, resolution, raw)], []

        warnings = []
        resolution = self.types.resolve(keyword, name)
        if len(parts) > 2:
            warnings.append(GenerationWarning(
                WarningKind.UNKNOWN_ALIAS,
                f"'{keyword}' is not a relation kind; treated as a {resolution.canonical} field "
                f"and '{DECLARATION_SEPARATOR.join(parts[2:])}' ignored",
                subject=raw
            ))
        elif resolution.is_fallback:
            warnings.append(GenerationWarning(
                WarningKind.UNKNOWN_ALIAS,
                f"Unknown type '{keyword}'; treated as {resolution.canonical}",
                subject=raw
            ))
        return [self._plain_field(name, resolution, raw)], warnings

    def _plain_field(self, name: str, resolution: TypeResolution, raw: str) -> ResolvedField:
        json_key = to_snake_case(name)

        if resolution.category == FieldCategory.TRANSLATABLE:
            target_kind = TargetKind.TRANSLATABLE
            gorm = STORAGE_REFERENCE_TAG
        elif resolution.category == FieldCategory.ATTACHMENT:
            target_kind = TargetKind.ATTACHMENT
            gorm = STORAGE_REFERENCE_TAG
        else:
            target_kind = TargetKind.SCALAR
            gorm = ";".join(filter(None, [f"column:{json_key}", resolution.gorm_hint]))

        required = is_required(json_key, target_kind, resolution.scalar_kind, resolution.is_nullable)
        return ResolvedField(
            name=to_pascal_case(name),
            json_key=json_key,
            column_name=json_key,
            target_kind=target_kind,
            go_type=resolution.go_type,
            declaration=raw,
            type_name=resolution.canonical,
            scalar_kind=resolution.scalar_kind,
            attachment_kind=resolution.attachment_kind,
            is_nullable=resolution.is_nullable,
            is_required=required,
            annotations=FieldAnnotations(
                gorm=gorm,
                json=json_tag(json_key, resolution.go_type),
                binding=binding_tag(required, resolution.canonical),
            ),
        )

    def _belongs_to_fields(self, name: str, resolution: RelationResolution, raw: str) -> List[ResolvedField]:
        pascal = to_pascal_case(name)
        fk_name = pascal if pascal.endswith("Id") else f"{pascal}Id"
        object_name = trim_id_suffix(fk_name)
        if not object_name:
            raise DeclarationError(
                f"Field declaration '{raw}' leaves no name for the related object",
                token=raw,
                suggestions=["Name belongs-to fields after the relation, e.g. 'author:belongsTo:User'"]
            )

        fk_key = to_snake_case(fk_name)
        object_key = to_snake_case(object_name)
        object_type = resolution.go_type()

        foreign_key = ResolvedField(
            name=fk_name,
            json_key=fk_key,
            column_name=fk_key,
            target_kind=TargetKind.FOREIGN_KEY,
            go_type=GO_BELONGS_TO_FK_TYPE,
            declaration=raw,
            type_name=ScalarTypes.UINT,
            scalar_kind=ScalarKind.UNSIGNED,
            multiplicity=Multiplicity.ONE,
            owner_field=object_name,
            relation_kind=RelationKind.BELONGS_TO,
            related_model=resolution.related_model,
            is_nullable=True,
            annotations=FieldAnnotations(
                gorm=f"column:{fk_key};index",
                json=json_tag(fk_key, GO_BELONGS_TO_FK_TYPE),
            ),
        )
        relation_object = ResolvedField(
            name=object_name,
            json_key=object_key,
            column_name=object_key,
            target_kind=TargetKind.RELATION_OBJECT,
            go_type=object_type,
            declaration=raw,
            type_name=resolution.related_model,
            multiplicity=Multiplicity.ONE,
            relation_kind=RelationKind.BELONGS_TO_OBJECT,
            related_model=resolution.related_model,
            is_nullable=True,
            annotations=FieldAnnotations(
                gorm=f"foreignKey:{fk_name}",
                json=json_tag(object_key, object_type),
            ),
        )
        return [foreign_key, relation_object]

    def _relation_field(self, name: str, resolution: RelationResolution, raw: str) -> ResolvedField:
        json_key = to_snake_case(name)
        go_type = resolution.go_type()

        if resolution.kind == RelationKind.MANY_TO_MANY:
            gorm = f"many2many:{resolution.join_table}" if resolution.join_table else ""
        else:
            gorm = f"foreignKey:{self.naming.model}Id" if self.naming else ""

        return ResolvedField(
            name=to_pascal_case(name),
            json_key=json_key,
            column_name=json_key,
            target_kind=TargetKind.RELATION_OBJECT,
            go_type=go_type,
            declaration=raw,
            type_name=resolution.related_model,
            multiplicity=resolution.multiplicity,
            relation_kind=resolution.kind,
            related_model=resolution.related_model,
            join_table=resolution.join_table,
            is_nullable=resolution.is_nullable,
            annotations=FieldAnnotations(gorm=gorm, json=json_tag(json_key, go_type)),
        )

    def _media_fields(self, name: str, kind: Optional[str], raw: str) -> List[ResolvedField]:
        resolution = self.types.resolve_media(kind)
        media_name = trim_id_suffix(to_pascal_case(name))
        if not media_name:
            raise DeclarationError(
                f"Field declaration '{raw}' leaves no name for the media field",
                token=raw,
                suggestions=["Name media fields after what they hold, e.g. 'avatar:media:image'"]
            )
        fk_name = f"{media_name}Id"
        fk_key = to_snake_case(fk_name)
        media_key = to_snake_case(media_name)

        foreign_key = ResolvedField(
            name=fk_name,
            json_key=fk_key,
            column_name=fk_key,
            target_kind=TargetKind.MEDIA_FOREIGN_KEY,
            go_type=GO_MEDIA_FK_TYPE,
            declaration=raw,
            type_name=ScalarTypes.UINT,
            scalar_kind=ScalarKind.UNSIGNED,
            owner_field=media_name,
            attachment_kind=resolution.attachment_kind,
            is_nullable=True,
            annotations=FieldAnnotations(
                gorm=f"column:{fk_key}",
                json=json_tag(fk_key, GO_MEDIA_FK_TYPE),
            ),
        )
        media_field = ResolvedField(
            name=media_name,
            json_key=media_key,
            column_name=media_key,
            target_kind=TargetKind.MEDIA,
            go_type=resolution.go_type,
            declaration=raw,
            type_name=resolution.canonical,
            attachment_kind=resolution.attachment_kind,
            is_nullable=True,
            annotations=FieldAnnotations(
                gorm=f"foreignKey:{fk_name}",
                json=json_tag(media_key, resolution.go_type),
            ),
        )
        return [foreign_key, media_field]


def compile_fields(declarations: Iterable[str], naming: Optional[NamingConvention] = None) -> CompilationResult:
    """Compile declarations with the default alias tables."""
    return FieldCompiler(naming).compile(declarations)
