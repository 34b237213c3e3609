"""
Referential-integrity checks for configurations.

`validate` collects every problem it can find without raising; `check`
raises `ValidationError` when any of them is an error.

Example:
    ::

        from tf_blocks import Configuration, validate
        from tf_blocks.aws import Instance, KeyPair

        key = KeyPair("deployer", key_name="deployer", public_key="ssh-ed25519 ...")
        config = Configuration([Instance("web", ami="ami-123", key_name=key)])

        for issue in validate(config):
            print(issue)
        # error: aws_instance.web (key_name): references undeclared aws_key_pair.deployer
"""

import logging
from dataclasses import dataclass, is_dataclass
from enum import Enum
from typing import Any

from tf_blocks._configuration import Configuration
from tf_blocks._errors import DependencyCycleError, ValidationError
from tf_blocks._introspection import ReferenceSite, iter_references
from tf_blocks._model import Block, Provider, Resource, Variable, required_fields
from tf_blocks._render import IDENTIFIER

__all__ = ["Severity", "ValidationIssue", "validate", "check"]

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ValidationIssue:
    """One problem found in a configuration.

    Attributes:
        severity: `Severity.ERROR` or `Severity.WARNING`.
        address: Address of the block the problem belongs to.
        message: Human readable description.
        path: Attribute path inside the block, if any.
    """

    severity: Severity
    address: str
    message: str
    path: str | None = None

    def __str__(self) -> str:
        where = f"{self.address} ({self.path})" if self.path else self.address
        return f"{self.severity.value}: {where}: {self.message}"


def _error(address: str, message: str, path: str | None = None) -> ValidationIssue:
    return ValidationIssue(Severity.ERROR, address, message, path)


def _warning(address: str, message: str, path: str | None = None) -> ValidationIssue:
    return ValidationIssue(Severity.WARNING, address, message, path)


def validate(configuration: Configuration) -> list[ValidationIssue]:
    """Check a configuration and return every issue found.

    Errors: invalid labels, duplicate addresses, missing required
    attributes, references to undeclared blocks, references of the wrong
    type or attribute, dependency cycles. Warnings: resources whose provider
    has no ``provider`` block, variables nothing references.
    """
    issues: list[ValidationIssue] = []
    issues += _check_labels(configuration)
    issues += _check_duplicates(configuration)
    for block in configuration:
        issues += _check_required(block, block.address)
        issues += _check_references(block, configuration)
    issues += _check_cycles(configuration)
    issues += _check_providers(configuration)
    issues += _check_unused_variables(configuration)

    logger.debug(
        "Validated %d blocks: %d issue(s)", len(configuration), len(issues)
    )
    return issues


def check(configuration: Configuration) -> list[ValidationIssue]:
    """Validate and raise on errors.

    Returns:
        The warnings, each also logged.

    Raises:
        ValidationError: If any error-severity issue is found.
    """
    issues = validate(configuration)
    errors = [i for i in issues if i.severity is Severity.ERROR]
    warnings = [i for i in issues if i.severity is Severity.WARNING]
    for warning in warnings:
        logger.warning("%s", warning)
    if errors:
        raise ValidationError(errors)
    return warnings


def _labels_to_check(block: Any) -> list[str]:
    if isinstance(block, Resource):
        return [block.local_name]
    if isinstance(block, Provider):
        return [block.name] + ([block.alias] if block.alias else [])
    return list(block.labels)


def _check_labels(configuration: Configuration) -> list[ValidationIssue]:
    issues = []
    for block in configuration:
        for label in _labels_to_check(block):
            if not isinstance(label, str) or not IDENTIFIER.match(label):
                issues.append(
                    _error(
                        block.address,
                        f"invalid name {label!r}: must start with a letter or "
                        "underscore and contain only letters, digits, "
                        "underscores and dashes",
                    )
                )
    return issues


def _check_duplicates(configuration: Configuration) -> list[ValidationIssue]:
    seen: set[str] = set()
    issues = []
    for block in configuration:
        if block.address in seen:
            issues.append(_error(block.address, "duplicate declaration"))
        seen.add(block.address)
    return issues


def _check_required(obj: Any, address: str, prefix: str = "") -> list[ValidationIssue]:
    if not is_dataclass(obj):
        return []
    issues = []
    for name in required_fields(obj):
        if getattr(obj, name) is None:
            issues.append(
                _error(address, "required attribute is missing", prefix + name)
            )
    for name, value in obj.body():
        nested = value if isinstance(value, (list, tuple)) else [value]
        for i, item in enumerate(nested):
            if isinstance(item, Block):
                index = f"[{i}]" if isinstance(value, (list, tuple)) else ""
                issues += _check_required(item, address, f"{prefix}{name}{index}.")
    return issues


def _check_references(block: Any, configuration: Configuration) -> list[ValidationIssue]:
    issues = []
    for site in iter_references(block):
        issue = _check_site(site, block, configuration)
        if issue is not None:
            issues.append(issue)
    if isinstance(block, Resource):
        for i, dep in enumerate(block.depends_on):
            if isinstance(dep, str) and configuration.find(dep) is None:
                issues.append(
                    _error(block.address, f"references undeclared {dep}", f"depends_on[{i}]")
                )
    return issues


def _check_site(
    site: ReferenceSite, block: Any, configuration: Configuration
) -> ValidationIssue | None:
    declared = configuration.find(site.address)
    if declared is None:
        return _error(
            block.address, f"references undeclared {site.address}", site.path
        )

    if site.explicit and site.path.startswith("depends_on["):
        return _error(
            block.address,
            f"depends_on takes whole blocks, not attributes; got {site.address}.{site.attr}",
            site.path,
        )

    info = site.declared
    if info is None or isinstance(site.target, Variable):
        return None

    if isinstance(info.target, type) and not isinstance(site.target, info.target):
        return _error(
            block.address,
            f"expects a reference to {info.target.__name__}, "
            f"got {type(site.target).__name__} {site.address}",
            site.path,
        )

    if site.explicit and info.attr is not None and site.attr != info.attr:
        return _error(
            block.address,
            f"expects attribute {info.attr!r} of {site.address}, got {site.attr!r}",
            site.path,
        )

    return None


def _check_cycles(configuration: Configuration) -> list[ValidationIssue]:
    try:
        configuration.dependency_order()
    except DependencyCycleError as exc:
        return [_error(exc.cycle[0], str(exc))]
    return []


def _check_providers(configuration: Configuration) -> list[ValidationIssue]:
    configured = {p.name for p in configuration.providers}
    reported: set[str] = set()
    issues = []
    for res in configuration.resources:
        name = res.provider_name
        if name in configured or name in reported:
            continue
        reported.add(name)
        issues.append(
            _warning(res.address, f"no provider block for {name!r}; defaults apply")
        )
    return issues


def _check_unused_variables(configuration: Configuration) -> list[ValidationIssue]:
    used = {
        site.address
        for block in configuration
        for site in iter_references(block)
        if isinstance(site.target, Variable)
    }
    return [
        _warning(var.address, "declared but never referenced")
        for var in configuration.variables
        if var.address not in used
    ]
