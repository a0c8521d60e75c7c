import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from module_scaffolder.constants import DefaultConfig, FrontendLayout
from module_scaffolder.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


# --- Pydantic Model for Configuration Schema ---


class ScaffoldConfig(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    model_config = ConfigDict(extra="ignore")

    project_root: str = Field(
        DefaultConfig.PROJECT_ROOT,
        min_length=1,
        description="Root of the project receiving generated modules.",
    )
    backend_dir: str = Field(
        DefaultConfig.BACKEND_DIR,
        min_length=1,
        description="Directory (relative to the project root) holding Go modules.",
    )
    frontend_dir: Optional[str] = Field(
        None,
        description="Client project directory; detected from nuxt.config.ts when unset.",
    )
    go_module: Optional[str] = Field(
        None,
        description="Go module path; read from go.mod when unset.",
    )
    registry_file: str = Field(
        DefaultConfig.REGISTRY_FILE,
        min_length=1,
        description="Go file registering every module.",
    )
    registry_manifest: str = Field(
        DefaultConfig.REGISTRY_MANIFEST,
        min_length=1,
        description="YAML manifest the registry file is rendered from.",
    )
    catalog_file: str = Field(
        DefaultConfig.CATALOG_FILE,
        min_length=1,
        description="YAML catalog of generated modules.",
    )
    default_display_field: str = Field(
        DefaultConfig.DEFAULT_DISPLAY_FIELD,
        description="Label field used for related modules that are not in the catalog.",
    )
    api_base: str = Field(
        DefaultConfig.API_BASE,
        min_length=1,
        description="URL prefix the client stores use to reach the server.",
    )
    run_formatters: bool = Field(
        DefaultConfig.RUN_FORMATTERS,
        description="Run goimports, gofmt and go mod tidy after writing Go files.",
    )
    verbose: bool = Field(False, description="Log every written file and debug details.")
    use_colors: bool = Field(True, description="Colorize console output.")

    # --- Custom Validators ---

    @field_validator("default_display_field")
    def check_display_field(cls, v):
        """Display fields are json keys: lowercase snake_case identifiers."""
        if not v or not v.isidentifier() or v != v.lower():
            raise ValueError(f"'{v}' is not a snake_case field name")
        return v

    @field_validator("api_base")
    def check_api_base(cls, v):
        if not v.startswith("/"):
            raise ValueError("api_base must start with '/'")
        return v.rstrip("/")

    @field_validator("go_module")
    def check_go_module(cls, v):
        if v is not None:
            v = v.strip()
            if not v or " " in v:
                raise ValueError(f"'{v}' is not a valid Go module path")
        return v

    # --- Resolved locations ---

    @property
    def root(self) -> Path:
        return Path(self.project_root)

    @property
    def backend_path(self) -> Path:
        return self.root / self.backend_dir

    @property
    def registry_path(self) -> Path:
        return self.root / self.registry_file

    @property
    def manifest_path(self) -> Path:
        return self.root / self.registry_manifest

    @property
    def catalog_path(self) -> Path:
        return self.root / self.catalog_file

    @property
    def frontend_path(self) -> Path:
        if self.frontend_dir:
            return self.root / self.frontend_dir
        return detect_frontend_dir(self.root)

    def resolved_go_module(self) -> str:
        return self.go_module or read_go_module(self.root)


# --- Project inspection helpers ---


def read_go_module(project_root: Path) -> str:
    """Reads the module path from go.mod, falling back to the default module name."""
    go_mod = Path(project_root) / "go.mod"
    if not go_mod.is_file():
        logger.debug(f"No go.mod in {project_root}, using module '{DefaultConfig.GO_MODULE_FALLBACK}'")
        return DefaultConfig.GO_MODULE_FALLBACK

    for line in go_mod.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line.startswith("module "):
            return line[len("module "):].strip()
    return DefaultConfig.GO_MODULE_FALLBACK


def _is_nuxt_project(path: Path) -> bool:
    return (path / FrontendLayout.NUXT_CONFIG).is_file()


def detect_frontend_dir(project_root: Path) -> Path:
    """
    Locates the client project.

    Checked in order: the project root itself (nuxt.config.ts plus
    app/pages), the first ``*-app`` child holding nuxt.config.ts, one of the
    standard directory names holding nuxt.config.ts, else the project root.
    """
    project_root = Path(project_root)
    if _is_nuxt_project(project_root) and (project_root / FrontendLayout.APP_DIR / "pages").is_dir():
        return project_root

    if project_root.is_dir():
        for child in sorted(project_root.iterdir()):
            if child.is_dir() and child.name.endswith(FrontendLayout.APP_DIR_SUFFIX) and _is_nuxt_project(child):
                logger.debug(f"Detected frontend directory: {child}")
                return child

    for name in FrontendLayout.STANDARD_NAMES:
        candidate = project_root / name
        if _is_nuxt_project(candidate):
            logger.debug(f"Detected frontend directory: {candidate}")
            return candidate

    return project_root


# --- Validation Function (Internal) ---
def _validate_and_parse_config(config_dict: Dict[str, Any], config_path: Optional[str] = None) -> ScaffoldConfig:
    """Validates a raw configuration dictionary against the Pydantic schema."""
    try:
        validated_config = ScaffoldConfig.model_validate(config_dict)
        logger.debug("Configuration dictionary parsed and validated successfully.")
        return validated_config
    except ValidationError as e:
        problems = {}
        for error in e.errors():
            loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
            loc_str = " -> ".join(loc_parts) if loc_parts else "Top Level"
            problems[loc_str] = error.get("msg", "Unknown error")
        raise ConfigurationError(
            "Configuration validation failed. Please check your config file or arguments.",
            config_file=config_path,
            context=problems,
        ) from e


# --- Main Configuration Loading Function ---
def load_config(
    config_path: Optional[str] = None,
    cli_args: Optional[Union[argparse.Namespace, Mapping[str, Any]]] = None,
) -> ScaffoldConfig:
    """
    Loads configuration from YAML file, merges with CLI arguments,
    validates the result, and returns a validated Pydantic model instance.
    """
    raw_config: Dict[str, Any] = {}

    # 1. Load from YAML file if path is provided
    if config_path:
        config_file = Path(config_path)
        if config_file.is_file():
            try:
                with open(config_file, "r", encoding="utf-8") as f:
                    yaml_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Error parsing YAML file: {e}", config_file=config_path) from e
            if yaml_config and isinstance(yaml_config, dict):
                raw_config.update(yaml_config)
                logger.debug(f"Loaded configuration from {config_path}")
            elif yaml_config:
                raise ConfigurationError(
                    "Configuration file must contain a mapping of option names to values",
                    config_file=config_path,
                )
        else:
            logger.warning(f"Config file not found at {config_path}. Using defaults and CLI arguments.")

    # 2. Override with CLI arguments (only those explicitly provided)
    if cli_args is not None:
        cli_dict = vars(cli_args) if isinstance(cli_args, argparse.Namespace) else dict(cli_args)
        overridden_keys = set()
        for key, value in cli_dict.items():
            if value is not None and key in ScaffoldConfig.model_fields:
                raw_config[key] = value
                overridden_keys.add(key)
        if overridden_keys:
            logger.debug(f"Overridden config keys from CLI arguments: {sorted(overridden_keys)}")

    # 3. Validate the combined configuration dictionary using Pydantic
    validated_config = _validate_and_parse_config(raw_config, config_path)

    # 4. Resolve the project root so every derived path is absolute
    validated_config.project_root = str(Path(validated_config.project_root).resolve())

    logger.debug("Configuration loaded and validated successfully.")
    return validated_config
