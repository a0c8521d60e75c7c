"""
Module catalog.

Every generated module records a minimal projection of its compiled fields
in ``.scaffold/catalog.yaml``. The presentation adapter reads it to choose
the display field of a related module, so no generated source has to be
parsed back.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from module_scaffolder.constants import DefaultConfig, FieldNames
from module_scaffolder.domain.models import ModuleModel, ScalarKind, TargetKind
from module_scaffolder.domain.naming import to_snake_case
from module_scaffolder.exceptions import ArtifactWriteError

logger = logging.getLogger(__name__)


CATALOG_VERSION = 1

LABEL_TARGET_KINDS = frozenset({TargetKind.SCALAR.value, TargetKind.TRANSLATABLE.value})
LABEL_SCALAR_KINDS = frozenset({ScalarKind.STRING.value, ScalarKind.TEXT.value})


@dataclass
class CatalogField:
    """Catalog projection of one resolved field."""

    json_key: str
    target_kind: str
    scalar_kind: Optional[str] = None
    related_model: Optional[str] = None

    @property
    def is_audit(self) -> bool:
        return self.json_key in FieldNames.IDENTIFIER_NAMES or self.json_key in FieldNames.AUDIT_NAMES

    @property
    def is_label_candidate(self) -> bool:
        """Plain or translatable text, excluding the id and audit columns."""
        if self.is_audit or self.target_kind not in LABEL_TARGET_KINDS:
            return False
        if self.target_kind == TargetKind.TRANSLATABLE.value:
            return True
        return self.scalar_kind in LABEL_SCALAR_KINDS

    def to_dict(self) -> Dict[str, Any]:
        data = {'json_key': self.json_key, 'target_kind': self.target_kind}
        if self.scalar_kind:
            data['scalar_kind'] = self.scalar_kind
        if self.related_model:
            data['related_model'] = self.related_model
        return data


@dataclass
class CatalogEntry:
    """What other modules need to know about a generated module."""

    model: str
    model_snake: str
    model_plural: str
    plural_snake: str
    plural_kebab: str
    fields: List[CatalogField] = field(default_factory=list)

    @classmethod
    def from_model(cls, model: ModuleModel) -> "CatalogEntry":
        naming = model.naming
        return cls(
            model=naming.model,
            model_snake=naming.model_snake,
            model_plural=naming.model_plural,
            plural_snake=naming.plural_snake,
            plural_kebab=naming.plural_kebab,
            fields=[
                CatalogField(
                    json_key=f.json_key,
                    target_kind=f.target_kind.value,
                    scalar_kind=f.scalar_kind.value if f.scalar_kind else None,
                    related_model=f.related_model,
                )
                for f in model.fields
            ],
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogEntry":
        return cls(
            model=data['model'],
            model_snake=data['model_snake'],
            model_plural=data['model_plural'],
            plural_snake=data['plural_snake'],
            plural_kebab=data['plural_kebab'],
            fields=[CatalogField(**f) for f in data.get('fields') or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'model': self.model,
            'model_snake': self.model_snake,
            'model_plural': self.model_plural,
            'plural_snake': self.plural_snake,
            'plural_kebab': self.plural_kebab,
            'fields': [f.to_dict() for f in self.fields],
        }

    def display_field(self) -> Optional[str]:
        """First non-identifier, non-audit text field, or None."""
        for catalog_field in self.fields:
            if catalog_field.is_label_candidate:
                return catalog_field.json_key
        return None


class ModuleCatalog:
    """
    YAML-backed catalog of generated modules keyed by model snake name.

    Args:
        path: Location of the catalog file
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._entries: Optional[Dict[str, CatalogEntry]] = None

    @property
    def entries(self) -> Dict[str, CatalogEntry]:
        if self._entries is None:
            self._entries = self._load()
        return self._entries

    def _load(self) -> Dict[str, CatalogEntry]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable module catalog {self.path}: {e}")
            return {}

        entries = {}
        for key, raw in (data.get('modules') or {}).items():
            try:
                entries[key] = CatalogEntry.from_dict(raw)
            except (KeyError, TypeError) as e:
                logger.warning(f"Skipping malformed catalog entry '{key}': {e}")
        return entries

    def lookup(self, model_name: str) -> Optional[CatalogEntry]:
        """Find a module by model name in any casing."""
        return self.entries.get(to_snake_case(model_name))

    def display_field_for(self, model_name: str) -> Optional[str]:
        entry = self.lookup(model_name)
        if entry is None:
            return None
        return entry.display_field()

    def record(self, model: ModuleModel) -> CatalogEntry:
        """Add or replace the entry for a module and persist the catalog."""
        entry = CatalogEntry.from_model(model)
        self.entries[entry.model_snake] = entry
        self.save()
        return entry

    def remove(self, model_name: str) -> bool:
        """Drop a module from the catalog; returns whether it was present."""
        key = to_snake_case(model_name)
        if key not in self.entries:
            return False
        del self.entries[key]
        self.save()
        return True

    def save(self) -> None:
        data = {
            'version': CATALOG_VERSION,
            'modules': {key: self.entries[key].to_dict() for key in sorted(self.entries)},
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise ArtifactWriteError(f"Could not write module catalog: {e}", path=str(self.path)) from e
        logger.debug(f"Module catalog saved to {self.path}")


def default_catalog(project_root: Path) -> ModuleCatalog:
    return ModuleCatalog(Path(project_root) / DefaultConfig.CATALOG_FILE)
