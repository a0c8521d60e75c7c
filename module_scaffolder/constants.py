"""
Centralized constants for the module scaffolder.

This module contains the alias tables of the field-declaration language, the
server-side type mappings, well-known field names and the default locations of
every generated artifact. Keeping them in one place makes it easy to add a new
type spelling or relation keyword without touching the compiler.
"""

from typing import Dict, FrozenSet, List, Tuple


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    PROJECT_ROOT = "."
    BACKEND_DIR = "app"

    # Registry (aggregation file) and its manifest
    REGISTRY_FILE = "app/init.go"
    REGISTRY_MANIFEST = "app/modules.yaml"

    # Module catalog used for cross-module display-field lookups
    CATALOG_FILE = ".scaffold/catalog.yaml"

    DEFAULT_DISPLAY_FIELD = "name"
    API_BASE = "/api"
    GO_MODULE_FALLBACK = "base"
    RUN_FORMATTERS = True


# =============================================================================
# FIELD DECLARATION LANGUAGE
# =============================================================================

DECLARATION_SEPARATOR = ":"

# Maximum number of tokens for declarations that use a relation or media keyword
MAX_KEYWORD_ARITY = 3


class ScalarTypes:
    """Canonical scalar type names used by the alias table."""

    STRING = "string"
    TEXT = "text"
    INT = "int"
    UINT = "uint"
    INT64 = "int64"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOL = "bool"
    DATETIME = "datetime"
    DATE = "date"
    JSON = "json"
    UUID = "uuid"
    EMAIL = "email"
    URL = "url"


class SpecialTypes:
    """Canonical non-scalar type names used by the alias table."""

    TRANSLATION = "translation"
    IMAGE = "image"
    FILE = "file"
    ATTACHMENT = "attachment"
    MEDIA = "media"


# Surface spelling -> canonical type name. Lookups are case-insensitive.
TYPE_ALIASES: Dict[str, str] = {
    # Strings
    "string": ScalarTypes.STRING,
    "str": ScalarTypes.STRING,
    "varchar": ScalarTypes.STRING,
    "char": ScalarTypes.STRING,
    "text": ScalarTypes.TEXT,
    "longtext": ScalarTypes.TEXT,
    "richtext": ScalarTypes.TEXT,
    "email": ScalarTypes.EMAIL,
    "url": ScalarTypes.URL,
    "uuid": ScalarTypes.UUID,

    # Numbers
    "int": ScalarTypes.INT,
    "integer": ScalarTypes.INT,
    "int32": ScalarTypes.INT,
    "uint": ScalarTypes.UINT,
    "unsigned": ScalarTypes.UINT,
    "int64": ScalarTypes.INT64,
    "bigint": ScalarTypes.INT64,
    "float": ScalarTypes.FLOAT,
    "float64": ScalarTypes.FLOAT,
    "double": ScalarTypes.FLOAT,
    "number": ScalarTypes.FLOAT,
    "decimal": ScalarTypes.DECIMAL,

    # Booleans
    "bool": ScalarTypes.BOOL,
    "boolean": ScalarTypes.BOOL,

    # Dates
    "datetime": ScalarTypes.DATETIME,
    "timestamp": ScalarTypes.DATETIME,
    "time": ScalarTypes.DATETIME,
    "date": ScalarTypes.DATE,

    # Structured
    "json": ScalarTypes.JSON,
    "jsonb": ScalarTypes.JSON,

    # Translatable text
    "translation": SpecialTypes.TRANSLATION,
    "translatable": SpecialTypes.TRANSLATION,
    "i18n": SpecialTypes.TRANSLATION,

    # Storage attachments
    "image": SpecialTypes.IMAGE,
    "file": SpecialTypes.FILE,
    "attachment": SpecialTypes.ATTACHMENT,

    # Media library references
    "media": SpecialTypes.MEDIA,
}

# Canonical scalar type -> Go type expression of the generated model
GO_SCALAR_TYPES: Dict[str, str] = {
    ScalarTypes.STRING: "string",
    ScalarTypes.TEXT: "string",
    ScalarTypes.EMAIL: "string",
    ScalarTypes.URL: "string",
    ScalarTypes.UUID: "string",
    ScalarTypes.INT: "int",
    ScalarTypes.UINT: "uint",
    ScalarTypes.INT64: "int64",
    ScalarTypes.FLOAT: "float64",
    ScalarTypes.DECIMAL: "float64",
    ScalarTypes.BOOL: "bool",
    ScalarTypes.DATETIME: "time.Time",
    ScalarTypes.DATE: "time.Time",
    ScalarTypes.JSON: "datatypes.JSON",
}

# Extra persistence hints for scalar types that need a column override
GORM_SCALAR_HINTS: Dict[str, str] = {
    ScalarTypes.TEXT: "type:text",
    ScalarTypes.DECIMAL: "type:decimal(12,4)",
    ScalarTypes.DATE: "type:date",
    ScalarTypes.JSON: "type:json",
}

GO_TRANSLATION_TYPE = "translation.Field"
GO_ATTACHMENT_TYPE = "*storage.Attachment"
GO_MEDIA_TYPE = "*media.Media"
GO_MEDIA_FK_TYPE = "*uint"
GO_BELONGS_TO_FK_TYPE = "*uint"

# Fallback types for unknown aliases, keyed by whether the field name looks like an id
FALLBACK_ID_TYPE = ScalarTypes.UINT
FALLBACK_TYPE = ScalarTypes.STRING
ID_NAME_SUFFIX = "_id"

# Media kinds accepted after the ``media`` keyword
MEDIA_KINDS: FrozenSet[str] = frozenset({"image", "file", "video", "audio", "document"})
DEFAULT_MEDIA_KIND = "file"


# =============================================================================
# RELATIONSHIPS
# =============================================================================

class RelationKinds:
    """Canonical relationship kind names."""

    BELONGS_TO = "belongs_to"
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    MANY_TO_MANY = "many_to_many"
    BELONGS_TO_OBJECT = "belongs_to_object"
    NONE = "none"


# Surface spelling -> canonical relation kind. Lookups are case-insensitive.
RELATIONSHIP_ALIASES: Dict[str, str] = {
    "belongsto": RelationKinds.BELONGS_TO,
    "belongs_to": RelationKinds.BELONGS_TO,
    "belongs": RelationKinds.BELONGS_TO,
    "ref": RelationKinds.BELONGS_TO,
    "references": RelationKinds.BELONGS_TO,
    "hasone": RelationKinds.HAS_ONE,
    "has_one": RelationKinds.HAS_ONE,
    "one": RelationKinds.HAS_ONE,
    "hasmany": RelationKinds.HAS_MANY,
    "has_many": RelationKinds.HAS_MANY,
    "many": RelationKinds.HAS_MANY,
    "manytomany": RelationKinds.MANY_TO_MANY,
    "many_to_many": RelationKinds.MANY_TO_MANY,
    "m2m": RelationKinds.MANY_TO_MANY,
    "belongstomany": RelationKinds.MANY_TO_MANY,
    "tomany": RelationKinds.MANY_TO_MANY,
}


# =============================================================================
# FIELD NAMES
# =============================================================================

class FieldNames:
    """Common field names and patterns."""

    IDENTIFIER_NAMES: FrozenSet[str] = frozenset({"id"})

    AUDIT_NAMES: FrozenSet[str] = frozenset({"created_at", "updated_at", "deleted_at"})

    TIMESTAMP_NAMES: FrozenSet[str] = frozenset({"created_at", "updated_at"})
    SOFT_DELETE_NAME = "deleted_at"

    # Name fragments that drive widget selection, checked in order
    MULTILINE_HINTS: Tuple[str, ...] = ("content", "description", "bio")
    EMAIL_HINTS: Tuple[str, ...] = ("email",)
    URL_HINTS: Tuple[str, ...] = ("url", "link")
    SECRET_HINTS: Tuple[str, ...] = ("password",)
    CHOICE_HINTS: Tuple[str, ...] = ("status", "category", "type")

    # Large text never shown in list views
    LIST_HIDDEN_HINTS: Tuple[str, ...] = ("content", "description")

    OPTIONAL_HINT = "optional"

    TEXTAREA_ROWS: Dict[str, int] = {
        "content": 6,
        "description": 3,
        "excerpt": 3,
    }
    DEFAULT_TEXTAREA_ROWS = 4


# =============================================================================
# GENERATED ARTIFACT LAYOUT
# =============================================================================

class GoImports:
    """Go import paths keyed by required capability."""

    TIME = "time"
    GORM = "gorm.io/gorm"
    DATATYPES = "gorm.io/datatypes"
    # Paths below are relative to the Go module of the generated project
    STORAGE = "core/storage"
    TRANSLATION = "core/translation"
    MEDIA = "core/app/media"


class Registry:
    """Aggregation file (app/init.go) conventions."""

    ANCHOR = "return modules"
    IMPORT_BLOCK_START = "import ("
    MODULE_CORE_IMPORT = "core/module"


class BackendLayout:
    """Shared directories under the backend dir."""

    MODELS_DIR = "models"
    # A module package may not take over one of these.
    RESERVED_DIRS: List[str] = ["models"]


class FrontendLayout:
    """Where the client-side project usually lives."""

    NUXT_CONFIG = "nuxt.config.ts"
    APP_DIR = "app"
    APP_DIR_SUFFIX = "-app"
    STANDARD_NAMES: List[str] = ["admin-template", "admin", "frontend", "app"]


class FileExtensions:
    """Common file extensions."""

    GO = ".go"
    TYPESCRIPT = ".ts"
    VUE = ".vue"
    YAML = ".yaml"
    JINJA2 = ".j2"
