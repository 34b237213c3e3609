"""
Introspection API for block references.

This module extracts reference information from resource classes and
finds the reference values held by block instances. The renderer uses it
to pick the attribute a reference renders, the validator to check that
references resolve, and `Configuration` to order blocks.

Key functions:

- `get_refs`: Extract all reference fields from a class
- `get_dependencies`: Compute direct or transitive class dependencies
- `iter_references`: Walk an instance and yield every reference value

Example:
    Extracting references from a class::

        from tf_blocks import get_refs, get_dependencies
        from tf_blocks.aws import Instance, KeyPair, SecurityGroup

        refs = get_refs(Instance)
        refs["key_name"].target      # <class 'KeyPair'>
        refs["key_name"].attr        # 'key_name'

        get_dependencies(Instance)   # {AmiLookup, KeyPair, SecurityGroup}
"""

from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Iterator, Literal, get_origin, get_type_hints

from tf_blocks._model import Block, Reference, Resource, Variable
from tf_blocks._types import Attr, Ref, RefList

__all__ = [
    "RefInfo",
    "ReferenceSite",
    "get_refs",
    "get_dependencies",
    "iter_references",
]


@dataclass(frozen=True)
class RefInfo:
    """Metadata about a reference field.

    Attributes:
        field: The name of the field containing the reference.
        target: The referenced class.
        attr: The attribute rendered for the reference, or None for ``id``.
        is_list: True if the field is a `RefList`.
        is_optional: True if the dataclass field defaults to None.

    Example:
        ::

            refs = get_refs(Instance)
            assert refs["security_groups"].target is SecurityGroup
            assert refs["security_groups"].attr == "name"
            assert refs["security_groups"].is_list is True
    """

    field: str
    target: type
    attr: str | None = None
    is_list: bool = False
    is_optional: bool = False


@dataclass(frozen=True)
class ReferenceSite:
    """A reference value found inside a block instance.

    Attributes:
        path: Dotted attribute path, e.g. ``ingress[0].security_groups[1]``.
        target: The referenced resource, data source or variable.
        attr: Attribute referenced, or None for a whole-block reference.
        declared: `RefInfo` of the enclosing reference field, if any.
        explicit: True when the value is a `Reference` naming its attribute.
    """

    path: str
    target: Any
    attr: str | None = None
    declared: RefInfo | None = None
    explicit: bool = False

    @property
    def address(self) -> str:
        return str(self.target.address)


def get_refs(cls: type) -> dict[str, RefInfo]:
    """Extract reference information from a class.

    Analyzes the type hints of a class to find all fields that are `Ref`,
    `Attr` or `RefList` types.

    Args:
        cls: The class to analyze. Should be a dataclass or any class
            with type annotations.

    Returns:
        A dictionary mapping field names to `RefInfo` objects. Fields
        without reference types are not included. Classes whose hints
        cannot be resolved yield an empty dict.
    """
    refs: dict[str, RefInfo] = {}

    try:
        hints = get_type_hints(cls, include_extras=True)
    except Exception:
        # Unresolvable forward references or non-class input
        return refs

    optional = _optional_fields(cls)
    for name, hint in hints.items():
        info = _analyze_type(name, hint, name in optional)
        if info is not None:
            refs[name] = info

    return refs


def _optional_fields(cls: Any) -> set[str]:
    if not is_dataclass(cls):
        return set()
    return {f.name for f in fields(cls) if f.default is None}


def _literal_value(arg: Any) -> Any:
    """Unwrap ``Literal["name"]`` to ``"name"``."""
    if get_origin(arg) is Literal:
        return arg.__args__[0]
    return arg


def _analyze_type(field: str, hint: Any, optional: bool = False) -> RefInfo | None:
    """Return RefInfo if ``hint`` is a reference marker, None otherwise."""
    origin = getattr(hint, "__origin__", None)
    args = getattr(hint, "__args__", ())

    if origin is Ref and args:
        return RefInfo(field=field, target=args[0], is_optional=optional)

    if origin is Attr and len(args) >= 2:
        return RefInfo(
            field=field,
            target=args[0],
            attr=_literal_value(args[1]),
            is_optional=optional,
        )

    if origin is RefList and args:
        attr = _literal_value(args[1]) if len(args) >= 2 else None
        return RefInfo(
            field=field,
            target=args[0],
            attr=attr,
            is_list=True,
            is_optional=optional,
        )

    return None


def get_dependencies(cls: type, transitive: bool = False) -> set[type]:
    """Compute the classes a class references.

    Args:
        cls: The class to analyze.
        transitive: If True, include all transitive dependencies.

    Returns:
        A set of classes that the given class depends on. Targets that
        are not classes (unresolved forward references) are skipped.

    Example:
        ::

            get_dependencies(Instance)
            # {AmiLookup, KeyPair, SecurityGroup}
            get_dependencies(Instance, transitive=True)
            # {AmiLookup, KeyPair, SecurityGroup, DefaultVpc}
    """
    deps = {
        info.target for info in get_refs(cls).values() if isinstance(info.target, type)
    }

    if not transitive:
        return deps

    visited: set[type] = set()
    to_visit = list(deps)

    while to_visit:
        current = to_visit.pop()
        if current in visited:
            continue
        visited.add(current)
        to_visit.extend(get_dependencies(current) - visited)

    return visited


def iter_references(obj: Any) -> Iterator[ReferenceSite]:
    """Yield every model reference held by a block instance.

    Walks the block's body (attributes, nested blocks, lists and maps) and,
    for resources, ``depends_on``. Plain literals and `Expr` values are not
    references and are skipped.

    Args:
        obj: A resource, data source, nested block, variable, output,
            provider or settings block.

    Yields:
        One `ReferenceSite` per reference value, in attribute order.
    """
    refs = get_refs(type(obj))
    for name, value in obj.body():
        yield from _walk(value, name, refs.get(name))
    if isinstance(obj, Resource):
        for i, dep in enumerate(obj.depends_on):
            yield from _walk(dep, f"depends_on[{i}]", None)


def _walk(value: Any, path: str, declared: RefInfo | None) -> Iterator[ReferenceSite]:
    if isinstance(value, Reference):
        yield ReferenceSite(path, value.target, value.attr, declared, explicit=True)
    elif isinstance(value, Resource):
        attr = declared.attr if declared is not None else None
        yield ReferenceSite(path, value, attr, declared)
    elif isinstance(value, Variable):
        yield ReferenceSite(path, value, None, declared)
    elif isinstance(value, Block):
        yield from iter_references_in_block(value, path)
    elif isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            yield from _walk(item, f"{path}[{i}]", declared)
    elif isinstance(value, dict):
        for key, item in value.items():
            yield from _walk(item, f"{path}.{key}", None)


def iter_references_in_block(value: Block, path: str) -> Iterator[ReferenceSite]:
    """Like `iter_references`, prefixing paths with ``path``."""
    for site in iter_references(value):
        yield ReferenceSite(
            f"{path}.{site.path}",
            site.target,
            site.attr,
            site.declared,
            site.explicit,
        )
