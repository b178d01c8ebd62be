"""
Identifier and reference resolution.

Turns qualified schema names into namespace paths of the generated code
and resolves references to enums and types declared in the bundle,
including references into other packages through the dependency map.
"""

import re
from typing import Dict, List, Mapping, Optional, Tuple

from .bundle import EnumDefinition, Identifier, SchemaBundleV1, TypeDefinition
from .errors import MissingDefinitionError, UnresolvedDependencyError
from .naming import NameSanitizer, NamingCase


def is_within_package(qualified_name: str, package: str) -> bool:
    """
    Check whether a qualified name belongs to a package.

    The match is segment-aware: "example" covers "example.Foo" and
    "example.sub.Foo" but not "examples.Foo". An empty package covers
    everything.
    """
    if not package:
        return True
    return qualified_name == package or qualified_name.startswith(package + ".")


def find_dependency(
    qualified_name: str, dependencies: Mapping[str, str]
) -> Tuple[str, str]:
    """
    Find the dependency entry that owns a qualified name.

    All keys that prefix the name are candidates and the longest one wins,
    so "foo.bar.Baz" belongs to "foo.bar" even when "foo" is also listed.

    Returns:
        Tuple of (dependency key, import root)

    Raises:
        UnresolvedDependencyError: If no key covers the name
    """
    best: Optional[Tuple[str, str]] = None
    for key, root in dependencies.items():
        if not is_within_package(qualified_name, key):
            continue
        if best is None or len(key) > len(best[0]):
            best = (key, root)

    if best is None:
        raise UnresolvedDependencyError(qualified_name, dependencies.keys())
    return best


class IdentifierResolver:
    """Maps schema identifiers onto names and paths in generated code."""

    def __init__(
        self,
        sanitizer: NameSanitizer,
        package: str = "",
        dependencies: Optional[Mapping[str, str]] = None,
    ):
        self.sanitizer = sanitizer
        self.package = package
        self.dependencies: Dict[str, str] = dict(dependencies or {})
        # Import root -> module level alias, filled as references resolve
        self.import_aliases: Dict[str, str] = {}

    def module_path(self, identifier: Identifier) -> List[str]:
        """Namespace segments of an identifier, converted to snake_case."""
        return [
            self.sanitizer.sanitize_name(segment, NamingCase.SNAKE_CASE)
            for segment in identifier.namespace
        ]

    def package_path(self, identifier: Identifier) -> List[str]:
        """
        Leading path segments that name the package of the identifier.

        For "foo.bar.Baz.Quux" this is ["foo", "bar"]: the first segment that
        does not start with a lowercase letter begins type scoping.
        """
        segments = []
        for segment in identifier.path:
            if not segment[:1].islower():
                break
            segments.append(segment)
        return segments

    def declaration_name(self, identifier: Identifier) -> str:
        """Name of the declaration generated for an identifier."""
        return self.sanitizer.sanitize_name(
            identifier.name, NamingCase.PRESERVE, check_builtins=False
        )

    def local_path(self, identifier: Identifier) -> str:
        """Path of an identifier relative to the generated module."""
        return ".".join(self.module_path(identifier) + [self.declaration_name(identifier)])

    def reference_path(
        self, identifier: Identifier, dependencies: Optional[Mapping[str, str]] = None
    ) -> str:
        """
        Path used to reference an identifier from another package.

        Args:
            identifier: Identifier being referenced
            dependencies: Map from package prefix to import root; defaults to
                the resolver's dependency map

        Returns:
            Import root followed by the identifier's local path

        Raises:
            UnresolvedDependencyError: If no dependency covers the identifier
        """
        deps = self.dependencies if dependencies is None else dependencies
        _, root = find_dependency(identifier.qualified_name, deps)
        return f"{root}.{self.local_path(identifier)}"

    def import_alias(self, root: str) -> str:
        """
        Module level name an import root is bound to.

        Namespace classes share the module scope with imports, so a root
        such as "game.std" is bound to "_dep_game_std" rather than "game".
        Distinct roots always get distinct aliases.
        """
        alias = self.import_aliases.get(root)
        if alias is not None:
            return alias

        base = "_dep_" + re.sub(r"[^a-zA-Z0-9_]", "_", root)
        taken = set(self.import_aliases.values())
        alias = base
        counter = 1
        while alias in taken:
            alias = f"{base}_{counter}"
            counter += 1

        self.import_aliases[root] = alias
        return alias

    def resolve(self, identifier: Identifier) -> str:
        """
        Path of an identifier as seen from the generated module.

        References into other packages go through the alias of the import
        root that owns them.
        """
        if is_within_package(identifier.qualified_name, self.package):
            return self.local_path(identifier)
        _, root = find_dependency(identifier.qualified_name, self.dependencies)
        return f"{self.import_alias(root)}.{self.local_path(identifier)}"


class TypeReferenceResolver:
    """Looks up type definitions by qualified name."""

    def __init__(self, bundle: SchemaBundleV1):
        self.bundle = bundle

    def resolve(self, qualified_name: str) -> TypeDefinition:
        for definition in self.bundle.type_definitions:
            if definition.identifier.qualified_name == qualified_name:
                return definition
        raise MissingDefinitionError(qualified_name, "type")


class EnumReferenceResolver:
    """Looks up enum definitions by qualified name."""

    def __init__(self, bundle: SchemaBundleV1):
        self.bundle = bundle

    def resolve(self, qualified_name: str) -> EnumDefinition:
        for definition in self.bundle.enum_definitions:
            if definition.identifier.qualified_name == qualified_name:
                return definition
        raise MissingDefinitionError(qualified_name, "enum")
