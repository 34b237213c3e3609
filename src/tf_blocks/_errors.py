"""Exception classes raised by tf-blocks."""

from typing import Any

__all__ = [
    "TfBlocksError",
    "ValidationError",
    "DependencyCycleError",
    "BlueprintError",
    "SettingsError",
]


class TfBlocksError(Exception):
    """Base class for every error raised by this package."""

    pass


class ValidationError(TfBlocksError):
    """A configuration failed validation.

    Attributes:
        issues: The error-severity `ValidationIssue` objects found.
    """

    def __init__(self, issues: list[Any]) -> None:
        self.issues = list(issues)
        lines = [f"{len(self.issues)} validation error(s):"]
        lines.extend(f"  - {issue}" for issue in self.issues)
        super().__init__("\n".join(lines))


class DependencyCycleError(TfBlocksError):
    """Blocks reference each other in a cycle.

    Attributes:
        cycle: Addresses along the cycle, first address repeated at the end.
    """

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = list(cycle)
        super().__init__("Dependency cycle: " + " -> ".join(self.cycle))


class BlueprintError(TfBlocksError):
    """A YAML blueprint could not be turned into a configuration."""

    pass


class SettingsError(TfBlocksError):
    """The settings file is unreadable or has the wrong shape."""

    pass
