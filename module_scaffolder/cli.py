import argparse
import logging
import sys
from typing import List, Optional, Tuple

from module_scaffolder import __version__
from module_scaffolder.colored_logging import (
    setup_colored_logging,
    get_colored_logger,
    log_highlight,
    log_progress,
    log_section,
    log_success,
)
from module_scaffolder.config import ScaffoldConfig, load_config
from module_scaffolder.destroy import ModuleDestroyer
from module_scaffolder.emission import TARGET_ALIASES, ModuleGenerator, resolve_targets
from module_scaffolder.exceptions import GenerationReport, ScaffoldError

logger = get_colored_logger(__name__)


def split_target(words: List[str]) -> Tuple[Optional[str], str, List[str]]:
    """
    Separate the optional target word from the module name and field tokens.

    A leading target word only counts as one when a module name follows it,
    so ``generate api`` still generates a module called ``api``.

    Example:
        >>> split_target(["be", "product", "name:string"])
        ('be', 'product', ['name:string'])
    """
    if len(words) >= 2 and words[0].lower() in TARGET_ALIASES:
        return words[0], words[1], words[2:]
    return None, words[0], words[1:]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="module-scaffolder",
        description="Generate Go backend and Nuxt frontend modules from field:type declarations.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "-p",
        "--project-root",
        dest="project_root",
        help="Project receiving the generated module. Overrides config file setting.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose DEBUG logging and list every written file.",
    )
    parser.add_argument(
        "--no-color",
        dest="use_colors",
        action="store_false",
        default=None,
        help="Disable colored output (useful for CI/CD environments).",
    )
    parser.add_argument(
        "--no-format",
        dest="run_formatters",
        action="store_false",
        default=None,
        help="Skip goimports, gofmt and go mod tidy.",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    generate = subparsers.add_parser(
        "generate",
        aliases=["g"],
        help="Generate a module",
        description="Generate a module: generate [backend|be|api|frontend|fe|ui] <name> [field:type ...]",
    )
    generate.add_argument(
        "words",
        nargs="+",
        metavar="word",
        help="Optional target, the module name, then field declarations such as "
             "title:string author:belongs_to:User cover:media:image",
    )

    destroy = subparsers.add_parser(
        "destroy",
        aliases=["d"],
        help="Delete a generated module",
        description="Delete a generated module: destroy [backend|frontend] <name>",
    )
    destroy.add_argument("words", nargs="+", metavar="word", help="Optional target, then the module name")
    return parser


def report_warnings(report: GenerationReport) -> None:
    """Log the warnings collected during a run; they never change the exit status."""
    if not report.has_warnings:
        return
    log_section(logger, "Warnings")
    for warning in report.warnings:
        logger.warning(str(warning))


def run_generate(config: ScaffoldConfig, words: List[str]) -> GenerationReport:
    target, name, declarations = split_target(words)
    targets = resolve_targets(target)
    log_progress(logger, f"Generating module '{name}' with {len(declarations)} field declaration(s)...")
    report = ModuleGenerator(config).generate(name, declarations, targets)
    log_success(logger, f"Module '{name}' generated successfully ({len(report.written)} files)")
    return report


def run_destroy(config: ScaffoldConfig, words: List[str]) -> GenerationReport:
    target, name, extra = split_target(words)
    if extra:
        raise ValueError(f"destroy takes a single module name, got extra arguments: {' '.join(extra)}")
    targets = resolve_targets(target)
    log_progress(logger, f"Destroying module '{name}' ({', '.join(t.value for t in targets)})...")
    report = ModuleDestroyer(config).destroy(name, targets)
    if not report.removed:
        log_highlight(logger, f"Nothing to delete for module '{name}'")
    return report


def main(argv: Optional[List[str]] = None) -> None:
    # --- Argument Parsing ---
    parser = build_parser()
    args = parser.parse_args(argv)

    # --- Logging Setup ---
    verbose = bool(args.verbose)
    setup_colored_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        use_colors=args.use_colors is not False,
    )
    if verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    # --- Main Execution Pipeline ---
    try:
        config = load_config(args.config, args)
        if config.verbose != verbose or not config.use_colors:
            # The config file may turn on verbosity or turn off colors
            verbose = config.verbose
            setup_colored_logging(
                level=logging.DEBUG if verbose else logging.INFO,
                use_colors=config.use_colors,
            )
        logger.debug(f"Effective configuration: {config.model_dump()}")

        if args.command in ("generate", "g"):
            report = run_generate(config, args.words)
        else:
            report = run_destroy(config, args.words)
        report_warnings(report)

    # --- Error Handling ---
    except ScaffoldError as e:
        logger.error(str(e), exc_info=verbose)
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}", exc_info=verbose)
        sys.exit(1)
    except Exception as e:
        logger.error(f"An unexpected error occurred: {e}", exc_info=True)
        sys.exit(1)


# --- Script Entry Point ---
if __name__ == "__main__":
    main()
