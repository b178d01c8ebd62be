"""
Base generator interface for all code generation targets.

Defines the contract that all language generators must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Any, Optional, Tuple
from pathlib import Path

from .bundle import (
    ComponentDefinition,
    DataReference,
    EnumDefinition,
    SchemaBundle,
    SchemaBundleV1,
    TypeDefinition,
)
from .config import GeneratorConfig
from .errors import GenerationError
from .formatter import format_source
from .identifiers import is_within_package
from .templates import TemplateEngine, create_template_engine
from ...logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PackageContents:
    """Definitions of a bundle that belong to the package being generated."""

    enums: Tuple[EnumDefinition, ...]
    types: Tuple[TypeDefinition, ...]
    components: Tuple[ComponentDefinition, ...]

    def is_empty(self) -> bool:
        return not (self.enums or self.types or self.components)


def select_package(bundle: SchemaBundleV1, package: str) -> PackageContents:
    """
    Pick the definitions whose qualified name lies within a package.

    Args:
        bundle: Bundle to select from
        package: Dotted package name; empty selects everything

    Returns:
        PackageContents in bundle order
    """
    def within(definition) -> bool:
        return is_within_package(definition.identifier.qualified_name, package)

    return PackageContents(
        enums=tuple(d for d in bundle.enum_definitions if within(d)),
        types=tuple(d for d in bundle.type_definitions if within(d)),
        components=tuple(d for d in bundle.component_definitions if within(d)),
    )


class CodeGenerator(ABC):
    """Abstract base class for all code generators."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize generator with optional configuration."""
        self.config = config or GeneratorConfig()
        self._template_engine = None
        self._setup_templates()

    def _setup_templates(self):
        """Setup template engine for this generator."""
        template_dir = self.get_template_directory()
        if template_dir:
            self._template_engine = create_template_engine(template_dir)
        else:
            # Fallback to in-memory templates
            self._template_engine = create_template_engine()

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'python')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.py')."""
        pass

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing templates for this generator.

        Subclasses should override this to provide their template directory.
        Return None to use in-memory templates only.

        Returns:
            Path to template directory or None
        """
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    @abstractmethod
    def generate(self, bundle: SchemaBundle) -> str:
        """
        Generate code for every definition of the configured package.

        Args:
            bundle: Loaded schema bundle

        Returns:
            Generated code as a string

        Raises:
            GenerationError: If the bundle cannot be turned into code
        """
        pass

    def validate_bundle(self, bundle: SchemaBundleV1) -> List[str]:
        """
        Check a bundle for issues that do not stop generation.

        Language generators may override this to add their own checks.

        Args:
            bundle: Bundle payload to inspect

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []
        contents = select_package(bundle, self.config.package)

        if contents.is_empty():
            warnings.append(
                f"No definitions found in package '{self.config.package}'"
            )

        for definition in contents.types:
            if not definition.field_definitions:
                warnings.append(
                    f"Type '{definition.identifier.qualified_name}' has no fields"
                )

        for definition in contents.enums:
            if not definition.value_definitions:
                warnings.append(
                    f"Enum '{definition.identifier.qualified_name}' has no values"
                )

        for component in contents.components:
            if isinstance(component.data_definition, DataReference):
                continue
            if not component.data_definition.field_definitions and not (
                component.event_definitions or component.command_definitions
            ):
                warnings.append(
                    f"Component '{component.identifier.qualified_name}' is empty"
                )

        return warnings

    def format_code(self, code: str) -> str:
        """
        Apply language-specific formatting to generated code.

        Args:
            code: Raw generated code

        Returns:
            Formatted code
        """
        # Basic cleanup - remove excessive blank lines
        lines = code.split("\n")
        formatted_lines = []
        blank_count = 0

        for line in lines:
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 2:  # Allow max 2 consecutive blank lines
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        cleaned = "\n".join(formatted_lines).strip("\n") + "\n"

        if not self.config.use_formatter:
            return cleaned

        return format_source(
            cleaned, self.config.formatter_command, self.config.formatter_timeout
        )

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with context.

        Args:
            template_name: Template file name
            context: Template variables

        Returns:
            Rendered content
        """
        return self.template_engine.render_template(template_name, context)

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        return self.template_engine.template_exists(template_name)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self, code: str, warnings: List[str] = None, metadata: Dict[str, Any] = None
    ):
        """
        Initialize generation result.

        Args:
            code: Generated code
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.code = code
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message: Optional[str] = None
        self.exception: Optional[Exception] = None

    @classmethod
    def error(cls, message: str, exception: Exception = None) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="")
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


def generate_code(generator: CodeGenerator, bundle: SchemaBundle) -> GenerationResult:
    """
    Generate code using the specified generator with error handling.

    Args:
        generator: Code generator instance
        bundle: Loaded schema bundle

    Returns:
        GenerationResult with code, warnings, and metadata
    """
    try:
        v1 = bundle.require_v1()
        warnings = generator.validate_bundle(v1)
        for warning in warnings:
            logger.info(warning)

        code = generator.generate(bundle)
        formatted_code = generator.format_code(code)

        contents = select_package(v1, generator.config.package)
        metadata = {
            "language": generator.language_name,
            "file_extension": generator.file_extension,
            "package": generator.config.package,
            "enum_count": len(contents.enums),
            "type_count": len(contents.types),
            "component_count": len(contents.components),
        }

        return GenerationResult(formatted_code, warnings, metadata)

    except GenerationError as e:
        logger.debug("Code generation failed", exc_info=True)
        return GenerationResult.error(f"Code generation failed: {str(e)}", exception=e)
