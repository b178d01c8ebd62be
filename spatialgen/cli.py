"""
Command-line interface for spatialgen.

Loads a schema bundle, or compiles one from schema directories, generates
code for one package and writes it to a file or stdout. Any generation
error exits with status 1 so build scripts fail.
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .codegen import (
    GenerationResult,
    RegistryError,
    generate_code,
    get_generator,
    get_registry,
    list_supported_languages,
)
from .codegen.core.config import ConfigError, load_config, validate_config
from .codegen.core.errors import GenerationError
from .compiler import SchemaCompilerError, compile_bundle
from .logging_config import get_logger, setup_logging
from .utils import BundleIOError, load_bundle_from_file, write_output

logger = get_logger(__name__)

# Status output goes to stderr so generated code can be piped from stdout
console = Console(stderr=True)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="spatialgen",
        description="Generate typed code from a schema bundle or schema directories.",
    )

    parser.add_argument("bundle", nargs="?", help="Schema bundle JSON file")

    schema = parser.add_argument_group("schema compilation")
    schema.add_argument(
        "--schema-path",
        "-s",
        action="append",
        default=[],
        metavar="DIR",
        help="Compile the schemas in DIR instead of reading a bundle (repeatable)",
    )
    schema.add_argument(
        "--spatial-lib-dir",
        metavar="DIR",
        help="SpatialOS library directory (default: $SPATIAL_LIB_DIR)",
    )

    generation = parser.add_argument_group("code generation")
    generation.add_argument(
        "--package",
        "-p",
        default=None,
        help="Package to generate, e.g. 'example' (default: everything)",
    )
    generation.add_argument(
        "--dependency",
        "-d",
        action="append",
        default=[],
        metavar="PREFIX=ROOT",
        help="Import root of code generated for another package (repeatable)",
    )
    generation.add_argument(
        "--prelude",
        action="append",
        default=None,
        metavar="LINE",
        help=(
            "Line injected at the top of every generated namespace; "
            "import lines go to module scope (repeatable)"
        ),
    )
    generation.add_argument(
        "--language",
        "-l",
        default="python",
        help="Target language (default: python)",
    )
    generation.add_argument(
        "--config", metavar="FILE", help="JSON configuration file for code generation"
    )
    generation.add_argument(
        "--output",
        "-o",
        metavar="FILE",
        help="Output file for generated code (default: stdout)",
    )
    generation.add_argument(
        "--runtime-module",
        metavar="MODULE",
        help="Import path of the runtime package used by generated code",
    )
    generation.add_argument(
        "--no-format",
        action="store_true",
        help="Skip the external formatter",
    )
    generation.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't generate docstrings in output code",
    )

    info = parser.add_argument_group("information")
    info.add_argument(
        "--list-languages",
        action="store_true",
        help="List supported target languages and exit",
    )
    info.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging and generation metadata",
    )

    return parser


def parse_dependencies(values: List[str]) -> Dict[str, str]:
    """
    Parse PREFIX=ROOT dependency arguments.

    Raises:
        CLIError: If an argument is not of the form PREFIX=ROOT
    """
    dependencies = {}
    for value in values:
        prefix, sep, root = value.partition("=")
        prefix, root = prefix.strip(), root.strip()
        if not sep or not prefix or not root:
            raise CLIError(f"Invalid dependency '{value}', expected PREFIX=ROOT")
        dependencies[prefix] = root
    return dependencies


def _build_config(args: argparse.Namespace):
    """Build generator configuration from the config file and arguments."""
    overrides = {}
    if args.package is not None:
        overrides["package"] = args.package
    if args.dependency:
        overrides["dependencies"] = parse_dependencies(args.dependency)
    if args.prelude is not None:
        overrides["prelude"] = list(args.prelude)
    if args.runtime_module:
        overrides["runtime_module"] = args.runtime_module
    if args.no_format:
        overrides["use_formatter"] = False
    if args.no_comments:
        overrides["add_comments"] = False

    language = get_registry().resolve_name(args.language)
    config = load_config(language, custom_config=overrides, config_file=args.config)

    # Merge dependency maps from file and command line
    if args.dependency and args.config:
        file_config = load_config(language, config_file=args.config)
        config.dependencies = {**file_config.dependencies, **config.dependencies}

    for warning in validate_config(config, language):
        console.print(f"[yellow]⚠[/yellow] {warning}")

    return config


def _print_languages():
    table = Table(title="Supported languages", box=box.SIMPLE, header_style="bold cyan")
    table.add_column("Language", style="bold")
    table.add_column("Aliases", style="green")

    registry = get_registry()
    for language in list_supported_languages():
        table.add_row(language, ", ".join(registry.get_aliases_for_language(language)))

    console.print(table)


def _print_metadata(result: GenerationResult):
    table = Table(
        title="Generation Metadata",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Property", style="bold")
    table.add_column("Value", style="green")

    for key, value in result.metadata.items():
        table.add_row(key.replace("_", " ").title(), str(value))

    console.print(table)


def run(args: argparse.Namespace) -> int:
    """Run code generation for parsed arguments and return the exit code."""
    if args.list_languages:
        _print_languages()
        return 0

    if not args.bundle and not args.schema_path:
        console.print(
            "[red]✗[/red] No bundle file given (pass a bundle or --schema-path)"
        )
        return 1

    if args.bundle and args.schema_path:
        console.print("[red]✗[/red] Give either a bundle file or --schema-path, not both")
        return 1

    try:
        config = _build_config(args)
        generator = get_generator(args.language, config)
        if args.schema_path:
            bundle = compile_bundle(args.schema_path, args.spatial_lib_dir)
        else:
            bundle = load_bundle_from_file(args.bundle)
        result = generate_code(generator, bundle)
    except (
        CLIError,
        ConfigError,
        RegistryError,
        BundleIOError,
        SchemaCompilerError,
        FileNotFoundError,
    ) as e:
        console.print(f"[red]✗[/red] {e}")
        return 1
    except GenerationError as e:
        console.print(f"[red]✗ Code generation failed:[/red] {e}")
        return 1

    if not result.success:
        console.print(f"[red]✗ {result.error_message}[/red]")
        return 1

    if args.output:
        try:
            path = write_output(result.code, args.output)
        except BundleIOError as e:
            console.print(f"[red]✗[/red] {e}")
            return 1
        console.print(f"[green]✓[/green] Generated code saved to [cyan]{path}[/cyan]")
    else:
        sys.stdout.write(result.code)

    if args.verbose and result.metadata:
        _print_metadata(result)

    if result.warnings:
        console.print("[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the spatialgen command."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, console=console)
    logger.debug(f"Arguments: {args}")

    return run(args)


if __name__ == "__main__":
    sys.exit(main())
