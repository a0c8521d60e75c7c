import logging
from pathlib import Path
from typing import Any, Dict

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    select_autoescape,
    ext as jinja2_extensions,
)

from module_scaffolder.domain.naming import (
    pluralize,
    singularize,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
    to_title_case,
    trim_id_suffix,
)
from module_scaffolder.exceptions import ArtifactWriteError, TemplateRenderError


logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent / "templates"


def setup_jinja_env(template_dir: Path = TEMPLATE_DIR) -> Environment:
    """Sets up and returns the Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml"]),  # generated code is never escaped
        undefined=StrictUndefined,
        trim_blocks=True,  # Remove first newline after a block tag
        lstrip_blocks=True,  # Strip leading whitespace from lines with block tags
        keep_trailing_newline=True,
        extensions=[
            jinja2_extensions.do,
            jinja2_extensions.loopcontrols,
        ],
    )
    # Naming filters share the functions used to build NamingConvention
    env.filters["snake_case"] = to_snake_case
    env.filters["pascal_case"] = to_pascal_case
    env.filters["camel_case"] = to_camel_case
    env.filters["kebab_case"] = to_kebab_case
    env.filters["title_case"] = to_title_case
    env.filters["plural"] = pluralize
    env.filters["singular"] = singularize
    env.filters["trim_id_suffix"] = trim_id_suffix
    return env


def render_template(env: Environment, template_name: str, context: Dict[str, Any]) -> str:
    """Renders a Jinja template to a string."""
    try:
        template = env.get_template(template_name)
        return template.render(context)
    except TemplateError as e:
        logger.error(f"Error rendering template '{template_name}': {e}")
        raise TemplateRenderError(
            f"Template '{template_name}' failed to render: {e}",
            template=template_name
        ) from e


def write_file(output_path: Path, content: str) -> None:
    """Writes content to a file, creating parent directories first."""
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        logger.error(f"Could not write '{output_path}': {e}")
        raise ArtifactWriteError(f"Could not write {output_path}: {e}", path=str(output_path)) from e


def generate_file_from_template(
    env: Environment, template_name: str, context: Dict[str, Any], output_path: Path
) -> Path:
    """Renders a Jinja template and saves the output to the specified path."""
    rendered_content = render_template(env, template_name, context)
    write_file(output_path, rendered_content)
    logger.debug(f"Generated file: {output_path}")
    return output_path
