"""
Removal of a generated module.

Deletes the module's generated paths for the requested targets, unregisters it
from ``app/init.go`` and drops it from the module catalog once nothing of it
is left on disk.
"""

import logging
import shutil
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment

from module_scaffolder.catalog import ModuleCatalog
from module_scaffolder.codegen import setup_jinja_env
from module_scaffolder.colored_logging import log_highlight, log_success
from module_scaffolder.config import ScaffoldConfig
from module_scaffolder.constants import BackendLayout, FileExtensions, FrontendLayout
from module_scaffolder.domain.naming import NamingConvention
from module_scaffolder.emission import Target, module_naming, resolve_targets
from module_scaffolder.exceptions import ArtifactWriteError, GenerationReport
from module_scaffolder.registry import RegistryPatcher

logger = logging.getLogger(__name__)


def module_paths(config: ScaffoldConfig, naming: NamingConvention) -> Dict[Target, List[Path]]:
    """
    Top-level paths owned by a module, per target.

    Example:
        >>> paths = module_paths(ScaffoldConfig(project_root="/p"), module_naming("product"))
        >>> [str(p) for p in paths[Target.BACKEND]]
        ['/p/app/models/product.go', '/p/app/products']
    """
    backend = config.backend_path
    frontend_app = config.frontend_path / FrontendLayout.APP_DIR
    return {
        Target.BACKEND: [
            backend / BackendLayout.MODELS_DIR / f"{naming.model_snake}{FileExtensions.GO}",
            backend / naming.dir_name,
        ],
        Target.FRONTEND: [
            frontend_app / "modules" / naming.plural_snake,
            frontend_app / "pages" / "app" / naming.plural_kebab,
        ],
    }


def remove_path(path: Path) -> bool:
    """Delete a file or directory tree; returns whether anything was there."""
    if not path.exists():
        return False
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise ArtifactWriteError(f"Failed to delete {path}: {e}", path=str(path)) from e
    return True


class ModuleDestroyer:
    """
    Deletes a generated module.

    Args:
        config: Validated scaffold configuration
        env: Jinja environment used to re-render the registry file
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

    def destroy(self, name: str, targets: Optional[List[Target]] = None) -> GenerationReport:
        targets = targets or resolve_targets()
        naming = module_naming(name)
        paths = module_paths(self.config, naming)
        report = GenerationReport()

        for target in targets:
            deleted = 0
            for path in paths[target]:
                if remove_path(path):
                    deleted += 1
                    report.removed.append(str(path))
                    if self.config.verbose:
                        log_success(logger, f"Deleted {path}")

            if deleted:
                log_success(logger, f"{target.value.capitalize()} module destroyed: {naming.model}")
            else:
                logger.warning(f"No {target.value} module found: {naming.model}")

            if target == Target.BACKEND:
                patcher = RegistryPatcher(
                    self.config.registry_path,
                    self.config.manifest_path,
                    go_module=self.config.resolved_go_module(),
                    backend_dir=self.config.backend_dir,
                    env=self.env,
                )
                result = patcher.unregister(naming.dir_name)
                report.extend(list(result.warnings))
                if result.changed:
                    log_success(logger, f"Removed module '{naming.dir_name}' from {result.path.name}")

        leftovers = [p for target_paths in paths.values() for p in target_paths if p.exists()]
        if not leftovers and self.catalog.remove(naming.model):
            log_highlight(logger, f"Dropped {naming.model} from the module catalog")
        return report


def destroy_module(config: ScaffoldConfig, name: str, targets: Optional[List[Target]] = None) -> GenerationReport:
    """Convenience wrapper around ``ModuleDestroyer``."""
    return ModuleDestroyer(config).destroy(name, targets)
