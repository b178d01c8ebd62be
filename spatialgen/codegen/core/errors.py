"""
Exceptions raised while loading bundles and generating code.

Every non-recoverable failure derives from GenerationError so build
wrappers can catch a single type and fail the build.
"""

from typing import Iterable, Optional


class GenerationError(Exception):
    """Base exception for code generation errors."""

    pass


class BundleError(GenerationError):
    """Malformed or unsupported schema bundle."""

    pass


class BundleFormatError(BundleError):
    """The bundle JSON does not match the expected structure."""

    def __init__(self, message: str, path: str = "$", cause: Optional[Exception] = None):
        super().__init__(f"{message} (at {path})")
        self.path = path
        self.cause = cause


class UnsupportedBundleVersionError(BundleError):
    """The bundle does not carry a supported version payload."""

    def __init__(self, versions_found: Iterable[str]):
        self.versions_found = sorted(versions_found)
        found = ", ".join(self.versions_found) or "none"
        super().__init__(
            f"Only v1 schema bundles are supported (versions found: {found})"
        )


class UnresolvedReferenceError(GenerationError):
    """A type, enum or dependency lookup failed."""

    pass


class MissingDefinitionError(UnresolvedReferenceError):
    """A referenced enum or type is not defined in the bundle."""

    def __init__(self, qualified_name: str, kind: str):
        super().__init__(
            f"Cannot find {kind} definition for reference {qualified_name}"
        )
        self.qualified_name = qualified_name
        self.kind = kind


class UnresolvedDependencyError(UnresolvedReferenceError):
    """No dependency entry covers an identifier outside the target package."""

    def __init__(self, qualified_name: str, dependency_keys: Iterable[str]):
        self.qualified_name = qualified_name
        self.dependency_keys = sorted(dependency_keys)
        tried = ", ".join(self.dependency_keys) or "<none>"
        super().__init__(
            f"No dependency definition found for {qualified_name} "
            f"(dependency keys: {tried}); make sure you have specified all dependencies"
        )


class TemplateError(GenerationError):
    """Exception raised for template-related errors."""

    pass
