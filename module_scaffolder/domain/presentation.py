"""
Presentation adapter for the client-side templates.

Projects every ``ResolvedField`` of a module into a ``PresentationField``
carrying the TypeScript type, input widget, view visibility, filter/sort
flags and default literal the store, form and page templates need. The
underlying fields are never modified.
"""

import logging
from typing import List, Optional, Protocol, Tuple

from ..constants import DefaultConfig, FieldNames
from ..exceptions import GenerationWarning, WarningKind
from .models import (
    ModuleModel,
    PresentationField,
    PresentationModel,
    RelationKind,
    ResolvedField,
    ScalarKind,
    TargetKind,
    WidgetKind,
)
from .naming import NamingConvention, to_snake_case, to_title_case

logger = logging.getLogger(__name__)

# Media is picked by id; attachments and relation objects are read-only views.
FORM_TARGET_KINDS = (
    TargetKind.SCALAR,
    TargetKind.TRANSLATABLE,
    TargetKind.FOREIGN_KEY,
    TargetKind.MEDIA_FOREIGN_KEY,
)


class DisplayFieldLookup(Protocol):
    """Anything that can name the display field of a generated module."""

    def display_field_for(self, model_name: str) -> Optional[str]:
        """Return the display field of a module, or None if unknown."""
        ...


def _contains_any(name: str, hints: Tuple[str, ...]) -> bool:
    return any(hint in name for hint in hints)


def typescript_type(resolved: ResolvedField) -> str:
    """TypeScript type of a field in the generated type description."""
    kind = resolved.target_kind
    if kind in (TargetKind.FOREIGN_KEY, TargetKind.MEDIA_FOREIGN_KEY):
        return "number"
    if kind == TargetKind.ATTACHMENT:
        return "string"
    if kind in (TargetKind.MEDIA, TargetKind.TRANSLATABLE):
        return "any"
    if kind == TargetKind.RELATION_OBJECT:
        return "any[]" if resolved.is_list else "any"

    scalar = resolved.scalar_kind
    if scalar is None or scalar.is_textual or scalar.is_temporal:
        return "string"
    if scalar.is_numeric:
        return "number"
    if scalar == ScalarKind.BOOLEAN:
        return "boolean"
    return "Record<string, any>"


def widget_for(resolved: ResolvedField) -> WidgetKind:
    """Choose the input widget from the field's type and name."""
    kind = resolved.target_kind
    name = resolved.json_key.lower()

    if kind == TargetKind.FOREIGN_KEY:
        return WidgetKind.RELATION
    if kind == TargetKind.RELATION_OBJECT:
        return WidgetKind.NONE
    if kind in (TargetKind.ATTACHMENT, TargetKind.MEDIA, TargetKind.MEDIA_FOREIGN_KEY):
        return WidgetKind.FILE

    scalar = resolved.scalar_kind
    if scalar == ScalarKind.BOOLEAN:
        return WidgetKind.CHECKBOX
    if scalar is not None and scalar.is_numeric:
        return WidgetKind.NUMBER
    if scalar == ScalarKind.DATE:
        return WidgetKind.DATE
    if scalar == ScalarKind.DATETIME:
        if "date" in name and "time" not in name:
            return WidgetKind.DATE
        return WidgetKind.DATETIME
    if scalar == ScalarKind.JSON:
        return WidgetKind.TEXTAREA

    if _contains_any(name, FieldNames.MULTILINE_HINTS):
        return WidgetKind.TEXTAREA
    if _contains_any(name, FieldNames.EMAIL_HINTS) or resolved.type_name == "email":
        return WidgetKind.EMAIL
    if _contains_any(name, FieldNames.URL_HINTS) or resolved.type_name == "url":
        return WidgetKind.URL
    if _contains_any(name, FieldNames.SECRET_HINTS):
        return WidgetKind.PASSWORD
    if _contains_any(name, FieldNames.CHOICE_HINTS):
        return WidgetKind.SELECT
    if scalar == ScalarKind.TEXT:
        return WidgetKind.TEXTAREA
    return WidgetKind.TEXT


def textarea_rows(resolved: ResolvedField) -> int:
    name = resolved.json_key.lower()
    for hint, rows in FieldNames.TEXTAREA_ROWS.items():
        if hint in name:
            return rows
    return FieldNames.DEFAULT_TEXTAREA_ROWS


def default_literal(resolved: ResolvedField) -> str:
    """TypeScript literal used to initialise the field in a new form."""
    if resolved.is_list:
        return "[]"
    if resolved.target_kind != TargetKind.SCALAR:
        return "undefined"

    scalar = resolved.scalar_kind
    if scalar == ScalarKind.BOOLEAN:
        return "false"
    if scalar.is_numeric:
        return "0"
    if scalar.is_textual or scalar.is_temporal:
        return "''"
    if scalar == ScalarKind.JSON:
        return "{}"
    return "undefined"


def show_in_list(resolved: ResolvedField) -> bool:
    if resolved.is_audit:
        return False
    if resolved.target_kind in (
        TargetKind.FOREIGN_KEY,
        TargetKind.MEDIA_FOREIGN_KEY,
        TargetKind.ATTACHMENT,
        TargetKind.MEDIA,
    ):
        return False
    if resolved.scalar_kind in (ScalarKind.TEXT, ScalarKind.JSON):
        return False
    return not _contains_any(resolved.json_key.lower(), FieldNames.LIST_HIDDEN_HINTS)


def show_in_form(resolved: ResolvedField) -> bool:
    """Only keys the create and update requests accept are editable."""
    if resolved.is_audit:
        return False
    return resolved.target_kind in FORM_TARGET_KINDS


def show_in_detail(resolved: ResolvedField) -> bool:
    return resolved.target_kind not in (TargetKind.FOREIGN_KEY, TargetKind.MEDIA_FOREIGN_KEY)


def is_filterable(resolved: ResolvedField) -> bool:
    if resolved.target_kind == TargetKind.FOREIGN_KEY:
        return True
    return resolved.target_kind == TargetKind.SCALAR and resolved.scalar_kind != ScalarKind.JSON


def is_sortable(resolved: ResolvedField) -> bool:
    if resolved.target_kind != TargetKind.SCALAR:
        return False
    return resolved.scalar_kind not in (ScalarKind.BOOLEAN, ScalarKind.JSON)


def module_display_field(model: ModuleModel) -> str:
    """First non-relation, non-key text field of the module, else ``id``."""
    for resolved in model.fields:
        if resolved.is_relation or resolved.is_foreign_key or resolved.is_audit:
            continue
        if resolved.is_stringish:
            return resolved.json_key
    return "id"


class PresentationAdapter:
    """
    Builds the client-side view of a module.

    Args:
        catalog: Lookup used to name the display field of related modules
        default_display_field: Label used when the related module is unknown
    """

    def __init__(
        self,
        catalog: Optional[DisplayFieldLookup] = None,
        default_display_field: str = DefaultConfig.DEFAULT_DISPLAY_FIELD
    ):
        self.catalog = catalog
        self.default_display_field = default_display_field

    def present(self, model: ModuleModel) -> PresentationModel:
        """
        Project every field of the module.

        Never fails on missing related modules: their display field falls back
        to the default label and a warning is attached to the result.
        """
        warnings: List[GenerationWarning] = []
        own_display_field = module_display_field(model)
        display_fields = {}

        presented = []
        for resolved in model.fields:
            related_display = None
            if resolved.relation_kind in (RelationKind.BELONGS_TO, RelationKind.BELONGS_TO_OBJECT):
                related = resolved.related_model
                if related not in display_fields:
                    display_fields[related] = self._related_display_field(model, related, own_display_field,
                                                                          warnings)
                related_display = display_fields[related]
            presented.append(self.present_field(resolved, related_display))

        return PresentationModel(
            naming=model.naming,
            fields=tuple(presented),
            display_field=own_display_field,
            has_relations=model.has_relations,
            has_media=model.has_media,
            has_attachments=model.has_attachments,
            has_translatable_fields=model.has_translatable_fields,
            warnings=tuple(warnings),
        )

    def present_field(self, resolved: ResolvedField, related_display_field: Optional[str] = None) -> PresentationField:
        widget = widget_for(resolved)
        label = to_title_case(resolved.json_key)
        relation = {}

        if resolved.related_model:
            related = NamingConvention.derive(resolved.related_model)
            relation = dict(
                related_plural=related.model_plural,
                related_plural_kebab=related.plural_kebab,
                related_plural_snake=related.plural_snake,
                related_singular=related.model_camel,
                related_snake=related.model_snake,
            )
        if resolved.target_kind == TargetKind.FOREIGN_KEY:
            relation['relation_object_name'] = to_snake_case(resolved.owner_field)
            label = to_title_case(resolved.owner_field)
        elif resolved.target_kind == TargetKind.RELATION_OBJECT:
            relation['relation_object_name'] = resolved.json_key

        return PresentationField(
            source=resolved,
            ts_type=typescript_type(resolved),
            form_type="select" if widget == WidgetKind.RELATION else widget.value,
            widget=widget,
            label=label,
            default_value=default_literal(resolved),
            show_in_list=show_in_list(resolved),
            show_in_form=show_in_form(resolved),
            show_in_detail=show_in_detail(resolved),
            filterable=is_filterable(resolved),
            sortable=is_sortable(resolved),
            textarea_rows=textarea_rows(resolved) if widget == WidgetKind.TEXTAREA else 0,
            related_display_field=related_display_field,
            **relation,
        )

    def _related_display_field(
        self,
        model: ModuleModel,
        related_model: str,
        own_display_field: str,
        warnings: List[GenerationWarning]
    ) -> str:
        if related_model == model.naming.model and own_display_field != "id":
            return own_display_field

        display_field = None
        if self.catalog is not None:
            display_field = self.catalog.display_field_for(related_model)
        if display_field:
            logger.debug(f"Display field of {related_model}: {display_field}")
            return display_field

        warnings.append(GenerationWarning(
            WarningKind.RELATED_ARTIFACT_MISSING,
            f"No generated module with a text field found for '{related_model}'; "
            f"labelling it by '{self.default_display_field}'",
            subject=model.naming.model,
        ))
        return self.default_display_field
