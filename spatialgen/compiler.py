"""
Wrapper around the external schema compiler.

Builds the schema compiler command line for a project and runs it, either
to produce the bundle JSON used for code generation or the schema
descriptor loaded by the runtime. build() chains compilation, bundle loading
and generation into one step.
"""

import os
import subprocess
import tempfile
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Union

from .codegen import generate
from .codegen.core.bundle import SchemaBundle
from .codegen.core.config import GeneratorConfig
from .logging_config import get_logger
from .utils import load_bundle_from_file, write_output

logger = get_logger(__name__)

SPATIAL_LIB_DIR_ENV = "SPATIAL_LIB_DIR"
DESCRIPTOR_FILE_NAME = "schema.descriptor"

PathLike = Union[str, Path]


class SchemaCompilerError(Exception):
    """Exception raised when the schema compiler cannot be run or fails."""

    pass


def normalize_path(path: PathLike) -> str:
    """
    Normalize the separators of a path and drop "." segments.

    The schema compiler misreads paths that mix "\\" and "/" or contain
    "./" segments, so every path handed to it goes through here.

    Args:
        path: Path to normalize

    Returns:
        Path using "/" separators only
    """
    text = str(path).replace("\\", "/")
    absolute = text.startswith("/")
    segments = [segment for segment in text.split("/") if segment not in ("", ".")]
    normalized = "/".join(segments)
    if absolute:
        return "/" + normalized
    return normalized or "."


def resolve_spatial_lib_dir(spatial_lib_dir: Optional[PathLike] = None) -> str:
    """
    Find the SpatialOS library directory.

    Raises:
        SchemaCompilerError: If neither the argument nor SPATIAL_LIB_DIR is set
    """
    value = spatial_lib_dir or os.environ.get(SPATIAL_LIB_DIR_ENV)
    if not value:
        raise SchemaCompilerError(
            "spatial_lib_dir must be given, or the "
            f"{SPATIAL_LIB_DIR_ENV} environment variable must be set"
        )
    return normalize_path(value)


def build_schema_compiler_command(
    spatial_lib_dir: PathLike,
    schema_paths: Iterable[PathLike],
    bundle_json_out: Optional[PathLike] = None,
    descriptor_dir: Optional[PathLike] = None,
) -> List[str]:
    """
    Build the schema compiler argument list.

    Exactly one of bundle_json_out and descriptor_dir must be given.

    Args:
        spatial_lib_dir: SpatialOS library directory holding the compiler
            and the standard schema library
        schema_paths: Project schema directories
        bundle_json_out: Where to write the bundle JSON
        descriptor_dir: Directory to write the schema descriptor into

    Returns:
        Command line, compiler executable first
    """
    if (bundle_json_out is None) == (descriptor_dir is None):
        raise ValueError("Specify exactly one of bundle_json_out or descriptor_dir")

    lib_dir = normalize_path(spatial_lib_dir)
    compiler = normalize_path(f"{lib_dir}/schema-compiler/schema_compiler")
    std_lib = normalize_path(f"{lib_dir}/std-lib")

    command = [
        compiler,
        f"--schema_path={std_lib}",
        "--load_all_schema_on_schema_path",
    ]

    if bundle_json_out is not None:
        command.append(f"--bundle_json_out={normalize_path(bundle_json_out)}")
    else:
        descriptor = normalize_path(f"{normalize_path(descriptor_dir)}/{DESCRIPTOR_FILE_NAME}")
        command.append(f"--descriptor_set_out={descriptor}")

    for schema_path in schema_paths:
        command.append(f"--schema_path={normalize_path(schema_path)}")

    return command


def compile_schemas(
    schema_paths: Iterable[PathLike],
    spatial_lib_dir: Optional[PathLike] = None,
    bundle_json_out: Optional[PathLike] = None,
    descriptor_dir: Optional[PathLike] = None,
    timeout: Optional[float] = None,
) -> List[str]:
    """
    Run the schema compiler over a project's schema directories.

    Args:
        schema_paths: Project schema directories
        spatial_lib_dir: SpatialOS library directory; defaults to the
            SPATIAL_LIB_DIR environment variable
        bundle_json_out: Where to write the bundle JSON
        descriptor_dir: Directory to write the schema descriptor into;
            created if missing
        timeout: Optional timeout in seconds

    Returns:
        The command that was run

    Raises:
        SchemaCompilerError: If the compiler is missing or reports failure
    """
    lib_dir = resolve_spatial_lib_dir(spatial_lib_dir)

    if descriptor_dir is not None:
        try:
            Path(descriptor_dir).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SchemaCompilerError(f"Failed to create {descriptor_dir}: {e}") from e
        logger.debug(f"Created schema output dir: {descriptor_dir}")

    command = build_schema_compiler_command(
        lib_dir, schema_paths, bundle_json_out, descriptor_dir
    )
    logger.debug(f"Running schema compiler: {' '.join(command)}")

    try:
        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise SchemaCompilerError(f"Schema compiler not found: {command[0]}") from e
    except subprocess.TimeoutExpired as e:
        raise SchemaCompilerError(f"Schema compiler timed out after {timeout}s") from e
    except OSError as e:
        raise SchemaCompilerError(f"Failed to compile schema files: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise SchemaCompilerError(
            f"Schema compilation failed with status {result.returncode}: {stderr}"
        )

    logger.info("Schema compilation finished")
    return command


def compile_bundle(
    schema_paths: Iterable[PathLike],
    spatial_lib_dir: Optional[PathLike] = None,
    timeout: Optional[float] = None,
) -> SchemaBundle:
    """
    Compile a project's schemas and load the resulting bundle.

    The bundle JSON is written to a temporary directory that is removed once
    the bundle has been loaded.

    Raises:
        SchemaCompilerError: If schema compilation fails
        BundleFormatError: If the compiler output is not a valid bundle
    """
    with tempfile.TemporaryDirectory(prefix="spatialgen-") as work_dir:
        bundle_path = Path(work_dir) / "bundle.json"
        compile_schemas(
            schema_paths,
            spatial_lib_dir,
            bundle_json_out=bundle_path,
            timeout=timeout,
        )
        return load_bundle_from_file(bundle_path)


def build(
    package: str,
    schema_paths: Iterable[PathLike],
    output: PathLike,
    dependencies: Optional[Mapping[str, str]] = None,
    prelude: Optional[Iterable[str]] = None,
    spatial_lib_dir: Optional[PathLike] = None,
    config: Optional[GeneratorConfig] = None,
    timeout: Optional[float] = None,
) -> Path:
    """
    Compile a project's schemas and generate code for one package.

    Args:
        package: Dotted package prefix to generate
        schema_paths: Project schema directories
        output: File the generated code is written to
        dependencies: Map from package prefix to import root
        prelude: Lines injected at the top of every generated namespace
        spatial_lib_dir: SpatialOS library directory; defaults to the
            SPATIAL_LIB_DIR environment variable
        config: Base generator configuration
        timeout: Optional schema compiler timeout in seconds

    Returns:
        Path of the written file

    Raises:
        SchemaCompilerError: If schema compilation fails
        GenerationError: If the bundle cannot be turned into code
        BundleIOError: If the bundle or the output cannot be read or written
    """
    bundle = compile_bundle(schema_paths, spatial_lib_dir, timeout)
    code = generate(bundle, package, dependencies, prelude, config=config)
    return write_output(code, output)
