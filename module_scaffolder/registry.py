"""
Module registry maintenance for ``app/init.go``.

The list of registered modules lives in a YAML manifest
(``app/modules.yaml``). While ``app/init.go`` is exactly the render of that
manifest it is simply re-rendered after every change. A registry file that
was edited by hand is patched in place instead: the import is added once and
the registration line is inserted before ``return modules``.

Registering the same module twice never changes the registry file.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

import yaml
from jinja2 import Environment

from module_scaffolder.codegen import render_template, setup_jinja_env, write_file
from module_scaffolder.constants import DefaultConfig, Registry
from module_scaffolder.domain.naming import to_title_case
from module_scaffolder.exceptions import ConfigurationError, GenerationWarning, WarningKind

logger = logging.getLogger(__name__)


REGISTRY_TEMPLATE = "backend/init.go.j2"


class RegistryOutcome(Enum):
    """What a register/unregister call did to the registry file."""

    CREATED = "created"
    RENDERED = "rendered"
    PATCHED = "patched"
    UNCHANGED = "unchanged"
    ANCHOR_MISSING = "anchor_missing"
    REMOVED = "removed"
    MANUAL = "manual"


@dataclass(frozen=True)
class ModuleRegistration:
    """One module -> initializer pair of the manifest."""

    name: str
    initializer: str = ""

    def __post_init__(self):
        if not self.initializer:
            object.__setattr__(self, 'initializer', f"{self.name}.Init(deps)")

    @property
    def line(self) -> str:
        """
        Example:
            >>> ModuleRegistration("product").line
            'modules["product"] = product.Init(deps)'
        """
        return f'modules["{self.name}"] = {self.initializer}'

    @property
    def label(self) -> str:
        return to_title_case(self.name)

    def import_path(self, go_module: str, backend_dir: str) -> str:
        return f"{go_module}/{backend_dir}/{self.name}"


@dataclass(frozen=True)
class RegistryResult:
    outcome: RegistryOutcome
    path: Path
    warnings: Tuple[GenerationWarning, ...] = ()

    @property
    def changed(self) -> bool:
        return self.outcome in (
            RegistryOutcome.CREATED,
            RegistryOutcome.RENDERED,
            RegistryOutcome.PATCHED,
            RegistryOutcome.REMOVED,
        )


class RegistryManifest:
    """YAML list of registered modules, in registration order."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> List[ModuleRegistration]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Registry manifest is not valid YAML: {e}",
                config_file=str(self.path),
                suggestions=["Fix or delete the manifest; it is rebuilt from registrations"]
            ) from e

        entries = (data.get('modules') or []) if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise self._shape_error("expected a mapping with a 'modules' list")

        registrations = []
        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get('name'), str):
                raise self._shape_error(f"malformed module entry {entry!r}")
            registrations.append(
                ModuleRegistration(name=entry['name'], initializer=entry.get('initializer') or '')
            )
        return registrations

    def _shape_error(self, detail: str) -> ConfigurationError:
        return ConfigurationError(
            f"Registry manifest has an unexpected layout: {detail}",
            config_file=str(self.path),
            suggestions=[
                "Each entry needs a name, e.g. modules: [{name: products, initializer: products.Init(deps)}]",
                "Fix or delete the manifest; it is rebuilt from registrations"
            ]
        )

    def save(self, registrations: List[ModuleRegistration]) -> None:
        data = {
            'modules': [
                {'name': r.name, 'initializer': r.initializer} for r in registrations
            ]
        }
        content = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        write_file(self.path, content)
        logger.debug(f"Registry manifest saved to {self.path}")


class RegistryPatcher:
    """
    Keeps ``app/init.go`` in sync with the registered modules.

    Args:
        registry_file: Path of the Go registry file
        manifest_file: Path of the YAML manifest
        go_module: Go module path used in import statements
        backend_dir: Directory holding the module packages
        env: Jinja environment used to render the registry file
    """

    def __init__(
        self,
        registry_file: Path,
        manifest_file: Path,
        go_module: str = DefaultConfig.GO_MODULE_FALLBACK,
        backend_dir: str = DefaultConfig.BACKEND_DIR,
        env: Optional[Environment] = None
    ):
        self.registry_file = Path(registry_file)
        self.manifest = RegistryManifest(manifest_file)
        self.go_module = go_module
        self.backend_dir = backend_dir
        self.env = env or setup_jinja_env()

    def render(self, registrations: List[ModuleRegistration]) -> str:
        """Render the registry file for the given modules."""
        imports = sorted(
            [f"{self.go_module}/{Registry.MODULE_CORE_IMPORT}"]
            + [r.import_path(self.go_module, self.backend_dir) for r in registrations]
        )
        return render_template(self.env, REGISTRY_TEMPLATE, {
            'manifest_name': self.manifest.path.name,
            'imports': imports,
            'modules': registrations,
        })

    def register(self, dir_name: str) -> RegistryResult:
        """
        Ensure a module is registered.

        Args:
            dir_name: Module directory (and Go package) name

        Returns:
            The outcome; a missing anchor is reported as a warning, never
            raised
        """
        registration = ModuleRegistration(dir_name)
        registrations = self.manifest.load()
        known = any(r.name == dir_name for r in registrations)

        if not self.registry_file.exists():
            write_file(self.registry_file, self.render([registration]))
            self.manifest.save([registration])
            logger.debug(f"Created {self.registry_file} with module '{dir_name}'")
            return RegistryResult(RegistryOutcome.CREATED, self.registry_file)

        content = self.registry_file.read_text(encoding='utf-8')

        if has_statement(content, registration.line):
            if not known:
                self.manifest.save(registrations + [registration])
            return RegistryResult(RegistryOutcome.UNCHANGED, self.registry_file)

        if content == self.render(registrations):
            updated = registrations + [registration]
            write_file(self.registry_file, self.render(updated))
            self.manifest.save(updated)
            return RegistryResult(RegistryOutcome.RENDERED, self.registry_file)

        patched = self.patch(content, registration)
        if patched is None:
            warning = GenerationWarning(
                WarningKind.REGISTRY_ANCHOR_MISSING,
                f"Could not find '{Registry.ANCHOR}'. "
                f"Manually add to {self.registry_file.name}: {registration.line}",
                subject=str(self.registry_file),
            )
            return RegistryResult(RegistryOutcome.ANCHOR_MISSING, self.registry_file, (warning,))

        write_file(self.registry_file, patched)
        if not known:
            self.manifest.save(registrations + [registration])
        return RegistryResult(RegistryOutcome.PATCHED, self.registry_file)

    def unregister(self, dir_name: str) -> RegistryResult:
        """
        Remove a module from the manifest and, if still managed, the registry file.

        A hand-edited registry file is left alone; the caller is told which
        lines to remove.
        """
        registration = ModuleRegistration(dir_name)
        registrations = self.manifest.load()
        remaining = [r for r in registrations if r.name != dir_name]

        if not self.registry_file.exists():
            if len(remaining) != len(registrations):
                self.manifest.save(remaining)
            return RegistryResult(RegistryOutcome.UNCHANGED, self.registry_file)

        content = self.registry_file.read_text(encoding='utf-8')
        managed = content == self.render(registrations)

        if len(remaining) != len(registrations):
            self.manifest.save(remaining)

        if managed:
            if len(remaining) == len(registrations):
                return RegistryResult(RegistryOutcome.UNCHANGED, self.registry_file)
            write_file(self.registry_file, self.render(remaining))
            return RegistryResult(RegistryOutcome.REMOVED, self.registry_file)

        if not has_statement(content, registration.line):
            return RegistryResult(RegistryOutcome.UNCHANGED, self.registry_file)

        import_path = registration.import_path(self.go_module, self.backend_dir)
        warning = GenerationWarning(
            WarningKind.REGISTRY_MANUAL_EDIT,
            f"Manually remove from {self.registry_file.name}: {registration.line} "
            f"and the import \"{import_path}\"",
            subject=str(self.registry_file),
        )
        return RegistryResult(RegistryOutcome.MANUAL, self.registry_file, (warning,))

    def patch(self, content: str, registration: ModuleRegistration) -> Optional[str]:
        """
        Insert a registration into hand-edited registry source.

        Returns:
            The patched source, or None when the anchor line is missing
        """
        lines = content.split("\n")
        anchor_index = next(
            (i for i, line in enumerate(lines) if line.strip() == Registry.ANCHOR),
            None
        )
        if anchor_index is None:
            return None

        anchor = lines[anchor_index]
        indent = anchor[:len(anchor) - len(anchor.lstrip())]
        lines[anchor_index:anchor_index] = [
            f"{indent}// {registration.label} module",
            f"{indent}{registration.line}",
            "",
        ]
        if anchor_index > 0 and lines[anchor_index - 1].strip():
            lines.insert(anchor_index, "")

        import_path = registration.import_path(self.go_module, self.backend_dir)
        return add_import("\n".join(lines), import_path)


def has_statement(content: str, statement: str) -> bool:
    """
    True when a line of Go source is exactly ``statement``; comments don't count.

    Example:
        >>> has_statement('\t// modules["a"] = a.Init(deps)', 'modules["a"] = a.Init(deps)')
        False
    """
    return any(line.strip() == statement for line in content.split("\n"))


def add_import(content: str, import_path: str) -> str:
    """
    Add an import to Go source unless it is already imported.

    Handles a parenthesised import block, a single-line import and files
    without imports.
    """
    quoted = f'"{import_path}"'
    lines = content.split("\n")

    for line in lines:
        stripped = line.strip()
        if stripped.startswith("//"):
            continue
        if stripped == quoted or stripped.endswith(f" {quoted}"):
            return content

    for i, line in enumerate(lines):
        if line.strip() == Registry.IMPORT_BLOCK_START:
            lines.insert(i + 1, f"\t{quoted}")
            return "\n".join(lines)

    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("import ") and stripped.endswith('"'):
            existing = stripped[len("import "):].strip()
            lines[i:i + 1] = ["import (", f"\t{existing}", f"\t{quoted}", ")"]
            return "\n".join(lines)

    for i, line in enumerate(lines):
        if line.startswith("package "):
            lines[i + 1:i + 1] = ["", "import (", f"\t{quoted}", ")"]
            return "\n".join(lines)

    return "\n".join([f"import {quoted}", ""] + lines)
