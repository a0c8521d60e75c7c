"""
Multi-target emission.

A module is generated in two phases, server side first. Every artifact is an
``ArtifactKind`` naming its template and its output path; the emitter of each
phase renders the artifacts of its target from one shared, immutable
``ModuleModel`` so names, types and relationships agree across files.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

from jinja2 import Environment

from module_scaffolder.catalog import ModuleCatalog
from module_scaffolder.codegen import generate_file_from_template, setup_jinja_env
from module_scaffolder.codegen_utils import format_go_files, tidy_go_module
from module_scaffolder.colored_logging import log_highlight, log_progress, log_section, log_success
from module_scaffolder.config import ScaffoldConfig
from module_scaffolder.constants import BackendLayout, FrontendLayout
from module_scaffolder.domain import (
    FieldCompiler,
    ModuleModel,
    PresentationAdapter,
    PresentationModel,
    aggregate,
    derive_naming,
)
from module_scaffolder.domain.naming import NamingConvention
from module_scaffolder.exceptions import DeclarationError, GenerationReport, GenerationWarning
from module_scaffolder.registry import RegistryOutcome, RegistryPatcher

logger = logging.getLogger(__name__)


class Target(Enum):
    """Side of the project a phase writes to."""

    BACKEND = "backend"
    FRONTEND = "frontend"


TARGET_ALIASES: Dict[str, Target] = {
    "backend": Target.BACKEND,
    "be": Target.BACKEND,
    "api": Target.BACKEND,
    "frontend": Target.FRONTEND,
    "fe": Target.FRONTEND,
    "ui": Target.FRONTEND,
}


def resolve_targets(alias: Optional[str] = None) -> List[Target]:
    """
    Phases to run for a CLI target word; no word means both, backend first.

    Example:
        >>> resolve_targets("fe")
        [<Target.FRONTEND: 'frontend'>]
    """
    if alias is None:
        return [Target.BACKEND, Target.FRONTEND]
    try:
        return [TARGET_ALIASES[alias.lower()]]
    except KeyError:
        raise ValueError(f"Unknown target '{alias}'. Expected one of: {', '.join(TARGET_ALIASES)}") from None


def module_naming(name: str) -> NamingConvention:
    """Derive a module's naming; its package may not be a shared backend directory."""
    naming = derive_naming(name)
    if naming.dir_name in BackendLayout.RESERVED_DIRS:
        raise DeclarationError(
            f"Module '{name}' would be generated into the shared '{naming.dir_name}' directory",
            token=name,
            context={'dir_name': naming.dir_name},
            suggestions=[f"Choose a module name whose plural is not '{naming.dir_name}'"],
        )
    return naming


_MODULE_DIR = f"{FrontendLayout.APP_DIR}/modules/{{naming.plural_snake}}"
_PAGES_DIR = f"{FrontendLayout.APP_DIR}/pages/app/{{naming.plural_kebab}}"


class ArtifactKind(Enum):
    """
    Every generated file: (target, template, output path).

    Output paths are relative to the target's base directory and are
    formatted with the module's ``NamingConvention``.
    """

    GO_MODEL = (Target.BACKEND, "backend/model.go.j2", f"{BackendLayout.MODELS_DIR}/{{naming.model_snake}}.go")
    GO_SERVICE = (Target.BACKEND, "backend/service.go.j2", "{naming.dir_name}/service.go")
    GO_CONTROLLER = (Target.BACKEND, "backend/controller.go.j2", "{naming.dir_name}/controller.go")
    GO_MODULE = (Target.BACKEND, "backend/module.go.j2", "{naming.dir_name}/module.go")
    GO_VALIDATOR = (Target.BACKEND, "backend/validator.go.j2", "{naming.dir_name}/validator.go")

    TS_MODULE_CONFIG = (Target.FRONTEND, "frontend/module.config.ts.j2", _MODULE_DIR + "/module.config.ts")
    TS_TYPES = (Target.FRONTEND, "frontend/types.ts.j2", _MODULE_DIR + "/types/{naming.model_snake}.ts")
    TS_STORE = (Target.FRONTEND, "frontend/store.ts.j2", _MODULE_DIR + "/stores/{naming.plural_snake}.ts")
    VUE_FORM_MODAL = (
        Target.FRONTEND, "frontend/form-modal.vue.j2", _MODULE_DIR + "/components/{naming.model}FormModal.vue"
    )
    TS_FORMATTERS = (Target.FRONTEND, "frontend/formatters.ts.j2", _MODULE_DIR + "/utils/formatters.ts")
    VUE_INDEX_PAGE = (Target.FRONTEND, "frontend/index.vue.j2", _PAGES_DIR + "/index.vue")
    VUE_DETAIL_PAGE = (Target.FRONTEND, "frontend/detail.vue.j2", _PAGES_DIR + "/[id].vue")

    @property
    def target(self) -> Target:
        return self.value[0]

    @property
    def template(self) -> str:
        return self.value[1]

    @property
    def path_pattern(self) -> str:
        return self.value[2]

    def output_path(self, base_dir: Path, naming: NamingConvention) -> Path:
        return Path(base_dir) / self.path_pattern.format(naming=naming)

    @classmethod
    def for_target(cls, target: Target) -> List["ArtifactKind"]:
        return [kind for kind in cls if kind.target == target]


# ---- Strategies ----

class EmitterStrategy(ABC):
    """Renders the artifacts of one target."""

    target: Target

    def __init__(self, config: ScaffoldConfig, env: Environment):
        self.config = config
        self.env = env

    @property
    @abstractmethod
    def base_dir(self) -> Path:
        """Directory the artifact paths are relative to."""

    @abstractmethod
    def build_context(self, model: ModuleModel, view: PresentationModel) -> Dict[str, Any]:
        """Template variables shared by every artifact of the target."""

    def artifacts(self) -> List[ArtifactKind]:
        return ArtifactKind.for_target(self.target)

    def emit(self, model: ModuleModel, view: PresentationModel) -> List[Path]:
        """Render and write every artifact; stops at the first write error."""
        context = self.build_context(model, view)
        base_dir = self.base_dir
        written = []
        for kind in self.artifacts():
            output_path = kind.output_path(base_dir, model.naming)
            generate_file_from_template(self.env, kind.template, context, output_path)
            written.append(output_path)
            if self.config.verbose:
                log_success(logger, f"Created {output_path}")
        return written

    def finalize(self, model: ModuleModel, written: List[Path]) -> List[GenerationWarning]:
        """Post-processing after the files are written; problems are warnings."""
        return []


class BackendEmitter(EmitterStrategy):
    """Go model, service, controller, module and validator, plus registry wiring."""

    target = Target.BACKEND

    @property
    def base_dir(self) -> Path:
        return self.config.backend_path

    def build_context(self, model: ModuleModel, view: PresentationModel) -> Dict[str, Any]:
        return {
            "naming": model.naming,
            "model": model,
            "fields": model.model_fields,
            "go_module": model.go_module,
            "backend_dir": self.config.backend_dir,
        }

    def finalize(self, model: ModuleModel, written: List[Path]) -> List[GenerationWarning]:
        warnings: List[GenerationWarning] = []

        patcher = RegistryPatcher(
            self.config.registry_path,
            self.config.manifest_path,
            go_module=model.go_module,
            backend_dir=self.config.backend_dir,
            env=self.env,
        )
        result = patcher.register(model.naming.dir_name)
        warnings.extend(result.warnings)
        if result.outcome == RegistryOutcome.UNCHANGED:
            log_highlight(logger, f"Module '{model.naming.dir_name}' already registered in {result.path.name}")
        elif result.changed:
            log_success(logger, f"Registered module '{model.naming.dir_name}' in {result.path.name}")

        if self.config.run_formatters:
            go_files = list(written)
            if result.changed:
                go_files.append(result.path)
            warnings.extend(format_go_files(go_files, self.config.root))
            warnings.extend(tidy_go_module(self.config.root))
        return warnings


class FrontendEmitter(EmitterStrategy):
    """Nuxt types, store, form modal, formatters and pages."""

    target = Target.FRONTEND

    @property
    def base_dir(self) -> Path:
        return self.config.frontend_path

    def build_context(self, model: ModuleModel, view: PresentationModel) -> Dict[str, Any]:
        return {
            "naming": model.naming,
            "model": model,
            "view": view,
            "api_base": self.config.api_base,
        }


# ---- Factory ----

class EmitterFactory:
    """Creates the emitter of a target."""

    _registry: Dict[Target, Type[EmitterStrategy]] = {
        Target.BACKEND: BackendEmitter,
        Target.FRONTEND: FrontendEmitter,
    }

    @classmethod
    def register(cls, target: Target, emitter_class: Type[EmitterStrategy]) -> None:
        cls._registry[target] = emitter_class

    @classmethod
    def create(cls, target: Target, config: ScaffoldConfig, env: Environment) -> EmitterStrategy:
        emitter_class = cls._registry.get(target)
        if not emitter_class:
            raise ValueError(f"No emitter registered for target: {target}")
        return emitter_class(config, env)


# ---- Facade ----

class ModuleGenerator:
    """
    Generates one module end to end.

    Declarations are compiled before anything touches the disk, so a bad
    declaration leaves the project untouched. Files already written when a
    later write fails stay on disk.

    Args:
        config: Validated scaffold configuration
        env: Jinja environment (defaults to the packaged templates)
        catalog: Module catalog (defaults to the configured catalog file)
    """

    def __init__(
        self,
        config: ScaffoldConfig,
        env: Optional[Environment] = None,
        catalog: Optional[ModuleCatalog] = None
    ):
        self.config = config
        self.env = env or setup_jinja_env()
        self.catalog = catalog or ModuleCatalog(config.catalog_path)

    def build(self, name: str, declarations: Iterable[str]) -> Tuple[ModuleModel, List[GenerationWarning]]:
        """Compile the declarations into the module model; raises ``DeclarationError``."""
        naming = module_naming(name)
        compilation = FieldCompiler(naming=naming).compile(declarations)
        model = aggregate(naming, compilation.fields, self.config.resolved_go_module())
        return model, list(compilation.warnings)

    def generate(
        self,
        name: str,
        declarations: Iterable[str],
        targets: Optional[List[Target]] = None
    ) -> GenerationReport:
        """
        Generate the requested targets for a module.

        Args:
            name: Module name in any casing
            declarations: Raw ``field:type`` tokens in declaration order
            targets: Phases to run (default: backend then frontend)

        Returns:
            Written files and every warning collected on the way
        """
        targets = targets or resolve_targets()
        report = GenerationReport()

        model, warnings = self.build(name, declarations)
        report.extend(warnings)
        logger.debug(f"Module {model.naming.model}: {len(model.fields)} fields, imports {list(model.imports)}")

        adapter = PresentationAdapter(self.catalog, self.config.default_display_field)
        view = adapter.present(model)
        if Target.FRONTEND in targets:
            report.extend(list(view.warnings))

        for target in sorted(targets, key=lambda t: t != Target.BACKEND):
            log_section(logger, f"{target.value} generation")
            log_progress(logger, f"Generating {target.value} module '{model.naming.display_name}'...")
            emitter = EmitterFactory.create(target, self.config, self.env)
            written = emitter.emit(model, view)
            report.written.extend(str(p) for p in written)
            report.extend(emitter.finalize(model, written))
            log_success(logger, f"{target.value.capitalize()} module '{model.naming.dir_name}' generated "
                                f"({len(written)} files)")

        self.catalog.record(model)
        return report


def generate_module(
    config: ScaffoldConfig,
    name: str,
    declarations: Iterable[str],
    targets: Optional[List[Target]] = None
) -> GenerationReport:
    """Convenience wrapper around ``ModuleGenerator``."""
    return ModuleGenerator(config).generate(name, declarations, targets)
