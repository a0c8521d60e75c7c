"""
Model aggregation: module-wide flags, capabilities and imports.
"""

import logging
from typing import Dict, Iterable, List, Set

from ..constants import GoImports
from .models import Capability, ModuleModel, RelationKind, ResolvedField, ScalarKind, TargetKind
from .naming import NamingConvention

logger = logging.getLogger(__name__)


# Import path per capability; entries without a leading module path are standard
CAPABILITY_IMPORTS: Dict[Capability, str] = {
    Capability.TIMESTAMPS: GoImports.TIME,
    Capability.ORM: GoImports.GORM,
    Capability.JSON: GoImports.DATATYPES,
    Capability.ATTACHMENTS: GoImports.STORAGE,
    Capability.TRANSLATION: GoImports.TRANSLATION,
    Capability.MEDIA: GoImports.MEDIA,
}

# Paths relative to the generated project's own Go module
PROJECT_IMPORTS = frozenset({Capability.ATTACHMENTS, Capability.TRANSLATION, Capability.MEDIA})


def required_capabilities(fields: Iterable[ResolvedField]) -> Set[Capability]:
    """
    Collect the capabilities a model with these fields needs.

    Every model carries an id, timestamps and a soft-delete column, so ORM
    and timestamp support are always present.
    """
    capabilities = {Capability.ORM, Capability.TIMESTAMPS}
    for resolved in fields:
        if resolved.is_relation:
            capabilities.add(Capability.RELATIONS)
        if resolved.scalar_kind == ScalarKind.JSON:
            capabilities.add(Capability.JSON)
        if resolved.target_kind == TargetKind.ATTACHMENT:
            capabilities.add(Capability.ATTACHMENTS)
        elif resolved.target_kind == TargetKind.TRANSLATABLE:
            capabilities.add(Capability.TRANSLATION)
        elif resolved.target_kind == TargetKind.MEDIA:
            capabilities.add(Capability.MEDIA)
    return capabilities


def resolve_imports(capabilities: Iterable[Capability], go_module: str) -> List[str]:
    """Map capabilities to sorted Go import paths."""
    imports = set()
    for capability in capabilities:
        path = CAPABILITY_IMPORTS.get(capability)
        if path is None:
            continue
        if capability in PROJECT_IMPORTS:
            path = f"{go_module}/{path}"
        imports.add(path)
    return sorted(imports)


def aggregate(naming: NamingConvention, fields: Iterable[ResolvedField], go_module: str) -> ModuleModel:
    """
    Build the immutable module model.

    Args:
        naming: Naming convention of the module
        fields: Compiled fields in declaration order
        go_module: Go module path of the generated project

    Returns:
        The aggregated module model
    """
    fields = tuple(fields)
    kinds = {f.relation_kind for f in fields}
    targets = {f.target_kind for f in fields}
    attachment_kinds = {f.attachment_kind for f in fields if f.target_kind == TargetKind.ATTACHMENT}

    capabilities = required_capabilities(fields)
    join_tables = []
    for resolved in fields:
        if resolved.join_table and resolved.join_table not in join_tables:
            join_tables.append(resolved.join_table)

    model = ModuleModel(
        naming=naming,
        fields=fields,
        go_module=go_module,
        has_relations=any(f.is_relation for f in fields),
        has_belongs_to=RelationKind.BELONGS_TO in kinds,
        has_has_many=RelationKind.HAS_MANY in kinds,
        has_has_one=RelationKind.HAS_ONE in kinds,
        has_many_to_many=RelationKind.MANY_TO_MANY in kinds,
        has_attachments=TargetKind.ATTACHMENT in targets,
        has_images="image" in attachment_kinds,
        has_files="file" in attachment_kinds,
        has_media=TargetKind.MEDIA in targets,
        has_translatable_fields=TargetKind.TRANSLATABLE in targets,
        has_json=Capability.JSON in capabilities,
        # Always on: the model template embeds CreatedAt/UpdatedAt and DeletedAt.
        has_timestamps=True,
        has_soft_delete=True,
        capabilities=frozenset(capabilities),
        imports=tuple(resolve_imports(capabilities, go_module)),
        join_tables=tuple(join_tables),
    )
    logger.debug(
        f"Aggregated {naming.model}: {len(fields)} fields, "
        f"capabilities={sorted(c.value for c in capabilities)}"
    )
    return model
