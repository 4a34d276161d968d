"""Custom exceptions for pom-tools."""


class PomToolsError(Exception):
    """Base exception for pom-tools."""


class PomNotFoundError(PomToolsError):
    """Raised when a pom.xml file cannot be found."""


class PomParseError(PomToolsError):
    """Raised when a pom.xml file cannot be parsed."""


class PomModelError(PomToolsError):
    """Raised when required Maven model fields are missing or invalid."""


class BrokenParentChainError(PomToolsError):
    """Raised when a declared parent is not present in the project tree."""


class ParentCycleError(PomToolsError):
    """Raised when parent references form a cycle."""


class PropertyCycleError(PomToolsError):
    """Raised when a property placeholder refers back to itself."""


class DuplicateProjectError(PomToolsError):
    """Raised when two descriptors resolve to the same groupId:artifactId."""


class ManifestError(PomToolsError):
    """Raised when a build manifest is malformed."""


class UnknownProjectError(PomToolsError):
    """Raised when a build set names a project missing from the manifest."""
