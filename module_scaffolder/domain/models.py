"""
Core domain models for the module scaffolder.

These records describe a module independently of any output target. The
field compiler produces ``ResolvedField`` values, the aggregator wraps them in
a ``ModuleModel`` and the presentation adapter projects them into
``PresentationField`` values for the client-side templates. All of them are
frozen: once built they are only read.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from ..constants import FieldNames
from ..exceptions import GenerationWarning
from .naming import NamingConvention


class TargetKind(Enum):
    """Shape of a resolved field on the server side."""

    SCALAR = "scalar"
    RELATION_OBJECT = "relation_object"
    FOREIGN_KEY = "foreign_key"
    ATTACHMENT = "attachment"
    MEDIA = "media"
    TRANSLATABLE = "translatable"
    MEDIA_FOREIGN_KEY = "media_foreign_key"


class ScalarKind(Enum):
    """Value category of a scalar field."""

    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    UNSIGNED = "unsigned"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    DATE = "date"
    JSON = "json"

    @property
    def is_numeric(self) -> bool:
        return self in (ScalarKind.INTEGER, ScalarKind.UNSIGNED, ScalarKind.FLOAT)

    @property
    def is_textual(self) -> bool:
        return self in (ScalarKind.STRING, ScalarKind.TEXT)

    @property
    def is_temporal(self) -> bool:
        return self in (ScalarKind.DATETIME, ScalarKind.DATE)


class FieldCategory(Enum):
    """Semantic category reported by the type alias resolver."""

    SCALAR = "scalar"
    RELATION = "relation"
    ATTACHMENT = "attachment"
    TRANSLATABLE = "translatable"
    MEDIA = "media"


class RelationKind(Enum):
    """Types of relationships between modules."""

    BELONGS_TO = "belongs_to"
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    MANY_TO_MANY = "many_to_many"
    BELONGS_TO_OBJECT = "belongs_to_object"
    NONE = "none"


class Multiplicity(Enum):
    """How many related records a relation field holds."""

    ONE = "one"
    MANY = "many"


class Capability(Enum):
    """Support a generated model needs from its imports."""

    ORM = "orm"
    TIMESTAMPS = "timestamps"
    JSON = "json"
    ATTACHMENTS = "attachments"
    TRANSLATION = "translation"
    MEDIA = "media"
    RELATIONS = "relations"


class WidgetKind(Enum):
    """Input widget used for a field in the generated form."""

    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    URL = "url"
    PASSWORD = "password"
    SELECT = "select"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    DATE = "date"
    DATETIME = "datetime"
    FILE = "file"
    RELATION = "relation"
    NONE = "none"


@dataclass(frozen=True)
class FieldAnnotations:
    """
    Persistence and serialization hints for one field.

    The core treats the values as opaque strings; templates emit them as Go
    struct tags.
    """

    gorm: str = ""
    json: str = ""
    binding: str = ""

    def struct_tag(self) -> str:
        """
        Render the annotations as a Go struct tag body.

        Example:
            >>> FieldAnnotations(gorm="index", json="parent_id").struct_tag()
            'gorm:"index" json:"parent_id"'
        """
        parts = []
        if self.gorm:
            parts.append(f'gorm:"{self.gorm}"')
        if self.json:
            parts.append(f'json:"{self.json}"')
        if self.binding:
            parts.append(f'binding:"{self.binding}"')
        return " ".join(parts)


@dataclass(frozen=True)
class ResolvedField:
    """
    A declared or synthesized field, ready to render.

    ``name`` is the pascal identifier used on the server side, ``json_key``
    the wire name shared by every client artifact and ``column_name`` the
    storage column.
    """

    name: str
    json_key: str
    column_name: str
    target_kind: TargetKind
    go_type: str
    declaration: str
    type_name: str = ""
    scalar_kind: Optional[ScalarKind] = None
    multiplicity: Optional[Multiplicity] = None
    owner_field: Optional[str] = None
    attachment_kind: Optional[str] = None
    relation_kind: RelationKind = RelationKind.NONE
    related_model: Optional[str] = None
    join_table: Optional[str] = None
    is_nullable: bool = False
    is_required: bool = False
    annotations: FieldAnnotations = field(default_factory=FieldAnnotations)

    @property
    def is_relation(self) -> bool:
        return self.relation_kind != RelationKind.NONE

    @property
    def is_foreign_key(self) -> bool:
        return self.target_kind in (TargetKind.FOREIGN_KEY, TargetKind.MEDIA_FOREIGN_KEY)

    @property
    def is_list(self) -> bool:
        return self.multiplicity == Multiplicity.MANY

    @property
    def is_identifier(self) -> bool:
        return self.json_key in FieldNames.IDENTIFIER_NAMES

    @property
    def is_audit(self) -> bool:
        """True for the id and timestamp columns every model already carries."""
        return self.is_identifier or self.json_key in FieldNames.AUDIT_NAMES

    @property
    def is_stringish(self) -> bool:
        """True for plain or translatable text usable as a display label."""
        if self.target_kind == TargetKind.TRANSLATABLE:
            return True
        return (
            self.target_kind == TargetKind.SCALAR
            and self.scalar_kind is not None
            and self.scalar_kind.is_textual
        )

    @property
    def struct_tag(self) -> str:
        return self.annotations.struct_tag()

    @property
    def is_pointer(self) -> bool:
        return self.go_type.startswith("*")

    @property
    def update_go_type(self) -> str:
        """Type used in partial updates: every value becomes optional."""
        if self.is_pointer or self.go_type.startswith("[]"):
            return self.go_type
        return f"*{self.go_type}"


@dataclass(frozen=True)
class ModuleModel:
    """
    Everything the templates need to know about one module.

    Built once per generation run by :func:`aggregate`; never persisted.
    ``has_timestamps`` and ``has_soft_delete`` are true for every module
    because every generated model carries the audit and deleted_at columns.
    """

    naming: NamingConvention
    fields: Tuple[ResolvedField, ...]
    go_module: str
    has_relations: bool = False
    has_belongs_to: bool = False
    has_has_many: bool = False
    has_has_one: bool = False
    has_many_to_many: bool = False
    has_attachments: bool = False
    has_images: bool = False
    has_files: bool = False
    has_media: bool = False
    has_translatable_fields: bool = False
    has_json: bool = False
    has_timestamps: bool = True
    has_soft_delete: bool = True
    capabilities: FrozenSet[Capability] = frozenset()
    imports: Tuple[str, ...] = ()
    join_tables: Tuple[str, ...] = ()

    @property
    def model_fields(self) -> List[ResolvedField]:
        """Declared fields minus the id and audit columns the model always carries."""
        return [f for f in self.fields if not f.is_audit]

    @property
    def relation_fields(self) -> List[ResolvedField]:
        return [f for f in self.fields if f.is_relation]

    @property
    def preload_fields(self) -> List[ResolvedField]:
        """Object-valued fields the service layer should eager load."""
        return [
            f for f in self.fields
            if f.target_kind in (TargetKind.RELATION_OBJECT, TargetKind.MEDIA, TargetKind.ATTACHMENT)
        ]

    @property
    def request_fields(self) -> List[ResolvedField]:
        """Fields accepted by the create and update requests."""
        return [
            f for f in self.model_fields
            if f.target_kind in (TargetKind.SCALAR, TargetKind.TRANSLATABLE, TargetKind.FOREIGN_KEY,
                                 TargetKind.MEDIA_FOREIGN_KEY)
        ]

    @property
    def required_fields(self) -> List[ResolvedField]:
        return [f for f in self.fields if f.is_required]

    @property
    def required_text_fields(self) -> List[ResolvedField]:
        return [f for f in self.required_fields if f.target_kind == TargetKind.SCALAR and f.is_stringish]

    def find(self, json_key: str) -> Optional[ResolvedField]:
        for resolved in self.fields:
            if resolved.json_key == json_key:
                return resolved
        return None


@dataclass(frozen=True)
class PresentationField:
    """
    Client-side projection of a ``ResolvedField``.

    The underlying field is kept as ``source`` and never modified.
    """

    source: ResolvedField
    ts_type: str
    form_type: str
    widget: WidgetKind
    label: str
    default_value: str
    show_in_list: bool
    show_in_form: bool
    show_in_detail: bool
    filterable: bool
    sortable: bool
    textarea_rows: int = 0
    related_plural: Optional[str] = None
    related_plural_kebab: Optional[str] = None
    related_plural_snake: Optional[str] = None
    related_singular: Optional[str] = None
    related_snake: Optional[str] = None
    relation_object_name: Optional[str] = None
    related_display_field: Optional[str] = None

    @property
    def json_key(self) -> str:
        return self.source.json_key

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def is_required(self) -> bool:
        return self.source.is_required

    @property
    def is_nullable(self) -> bool:
        return self.source.is_nullable

    @property
    def is_relation(self) -> bool:
        return self.source.is_relation

    @property
    def relation_kind(self) -> RelationKind:
        return self.source.relation_kind

    @property
    def related_model(self) -> Optional[str]:
        return self.source.related_model


@dataclass(frozen=True)
class PresentationModel:
    """Client-side view of a module: its naming plus presented fields."""

    naming: NamingConvention
    fields: Tuple[PresentationField, ...]
    display_field: str
    has_relations: bool = False
    has_media: bool = False
    has_attachments: bool = False
    has_translatable_fields: bool = False
    warnings: Tuple[GenerationWarning, ...] = ()

    @property
    def list_fields(self) -> List[PresentationField]:
        return [f for f in self.fields if f.show_in_list]

    @property
    def form_fields(self) -> List[PresentationField]:
        return [f for f in self.fields if f.show_in_form]

    @property
    def detail_fields(self) -> List[PresentationField]:
        return [f for f in self.fields if f.show_in_detail]

    @property
    def filter_fields(self) -> List[PresentationField]:
        return [f for f in self.fields if f.filterable]

    @property
    def relation_selects(self) -> List[PresentationField]:
        """Foreign keys rendered as relation select inputs."""
        return [f for f in self.fields if f.widget == WidgetKind.RELATION]

    def related_modules(self) -> Dict[str, PresentationField]:
        """Related module plural snake name -> first field that references it."""
        related: Dict[str, PresentationField] = {}
        for presented in self.relation_selects:
            if presented.related_plural_snake and presented.related_plural_snake not in related:
                related[presented.related_plural_snake] = presented
        return related
