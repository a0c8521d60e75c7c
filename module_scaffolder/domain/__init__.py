"""
Domain module for the module scaffolder.

This module contains the field-declaration compiler and the records it
produces, separated from template rendering and file-system concerns.
"""

from .models import (
    Capability,
    FieldAnnotations,
    FieldCategory,
    ModuleModel,
    Multiplicity,
    PresentationField,
    PresentationModel,
    RelationKind,
    ResolvedField,
    ScalarKind,
    TargetKind,
    WidgetKind
)

from .naming import (
    NamingConvention,
    derive_naming,
    pluralize,
    singularize,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
    to_title_case,
    trim_id_suffix
)

from .field_mapping import (
    TypeAliasResolver,
    TypeResolution
)

from .relationships import (
    RelationResolution,
    RelationshipResolver
)

from .field_compiler import (
    CompilationResult,
    FieldCompiler,
    compile_fields
)

from .aggregator import aggregate

from .presentation import (
    DisplayFieldLookup,
    PresentationAdapter
)

__all__ = [
    # Core models
    'Capability',
    'FieldAnnotations',
    'FieldCategory',
    'ModuleModel',
    'Multiplicity',
    'PresentationField',
    'PresentationModel',
    'RelationKind',
    'ResolvedField',
    'ScalarKind',
    'TargetKind',
    'WidgetKind',

    # Naming
    'NamingConvention',
    'derive_naming',
    'pluralize',
    'singularize',
    'to_camel_case',
    'to_kebab_case',
    'to_pascal_case',
    'to_snake_case',
    'to_title_case',
    'trim_id_suffix',

    # Type aliases
    'TypeAliasResolver',
    'TypeResolution',

    # Relationships
    'RelationResolution',
    'RelationshipResolver',

    # Compilation
    'CompilationResult',
    'FieldCompiler',
    'compile_fields',
    'aggregate',

    # Presentation
    'DisplayFieldLookup',
    'PresentationAdapter'
]
