"""
Block model for Terraform configurations.

A configuration is built from a handful of top-level block kinds:

- `Resource` and `DataSource`: ``resource``/``data`` blocks, one class per
  Terraform type, declared with the `resource` and `data_source` decorators
- `Variable`, `Output`, `Provider`, `TerraformSettings`
- `Block`: nested blocks such as ``ingress`` or ``root_block_device``,
  declared with the `block` decorator

Attribute values are plain Python values (str, int, float, bool, list,
dict), nested `Block` instances, or model references: another block,
a `Reference` to one of its attributes, a `Variable`, or a raw `Expr`.

Example:
    Declaring and using a resource type::

        from dataclasses import field
        from tf_blocks import Attr, Resource, resource

        @resource("aws_eip")
        class ElasticIp(Resource):
            instance: Ref[Instance] = None
            domain: str = "vpc"
            tags: dict[str, str] = field(default_factory=dict)

        eip = ElasticIp("web", instance=web)
        eip.address          # 'aws_eip.web'
        eip.attr("public_ip")  # Reference to aws_eip.web.public_ip
"""

from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from typing import Any, Callable, ClassVar, TypeVar

__all__ = [
    "Expr",
    "Reference",
    "Block",
    "Resource",
    "DataSource",
    "Variable",
    "Output",
    "Provider",
    "TerraformSettings",
    "block",
    "resource",
    "data_source",
    "resource_class",
    "registered_types",
    "required_fields",
]

C = TypeVar("C", bound=type)

_REGISTRY: dict[tuple[str, str], type] = {}


@dataclass(frozen=True)
class Expr:
    """A raw HCL expression, emitted verbatim.

    Example:
        ::

            KeyPair("deployer", key_name="deployer",
                    public_key=Expr('file("~/.ssh/id_rsa.pub")'))
    """

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Reference:
    """A reference to one attribute of an addressable block.

    Attributes:
        target: The referenced resource or data source.
        attr: The attribute name, e.g. ``public_ip``.
    """

    target: Any
    attr: str

    def __post_init__(self) -> None:
        if not isinstance(getattr(self.target, "address", None), str):
            raise TypeError(
                f"Reference target must be an addressable block, got {self.target!r}"
            )

    @property
    def expression(self) -> str:
        return f"{self.target.address}.{self.attr}"

    def __str__(self) -> str:
        return self.expression


def _field_items(obj: Any, exclude: tuple[str, ...] = ()) -> list[tuple[str, Any]]:
    return [
        (f.name, getattr(obj, f.name))
        for f in fields(obj)
        if f.name not in exclude
    ]


def required_fields(obj: Any) -> list[str]:
    """Return names of dataclass fields that have no default value."""
    if not is_dataclass(obj):
        return []
    return [
        f.name
        for f in fields(obj)
        if f.init and f.default is MISSING and f.default_factory is MISSING
    ]


class Block:
    """Base class for nested blocks (``ingress``, ``root_block_device``, ...).

    Subclasses are declared with the `block` decorator, which makes them
    dataclasses with value semantics.
    """

    block_type: ClassVar[str] = ""

    def body(self) -> list[tuple[str, Any]]:
        """Return the (name, value) pairs rendered inside the block."""
        return _field_items(self)


def block(block_type: str) -> Callable[[C], C]:
    """Declare a nested block class rendered as ``<block_type> { ... }``."""

    def decorator(cls: C) -> C:
        if not issubclass(cls, Block):
            raise TypeError(f"{cls.__name__} must subclass Block")
        cls = dataclass(cls)  # type: ignore[assignment]
        cls.block_type = block_type  # type: ignore[attr-defined]
        return cls

    return decorator


@dataclass(eq=False, repr=False)
class Resource:
    """A ``resource "<type>" "<local_name>"`` block.

    Concrete resource classes are declared with the `resource` decorator.
    Instances hash and compare by identity so they can serve as graph
    nodes.

    Attributes:
        local_name: The block's name label, unique per resource type.
        depends_on: Explicit dependencies (blocks or address strings).
    """

    kind: ClassVar[str] = "resource"
    resource_type: ClassVar[str] = ""
    meta_fields: ClassVar[tuple[str, ...]] = ("local_name", "depends_on")

    local_name: str
    depends_on: list[Any] = field(default_factory=list, kw_only=True)

    @property
    def address(self) -> str:
        return f"{self.resource_type}.{self.local_name}"

    @property
    def labels(self) -> tuple[str, ...]:
        return (self.resource_type, self.local_name)

    @property
    def provider_name(self) -> str:
        """Provider prefix of the resource type (``aws`` for ``aws_instance``)."""
        return self.resource_type.split("_", 1)[0]

    def attr(self, name: str) -> Reference:
        """Return a reference to attribute ``name`` of this block."""
        return Reference(self, name)

    def body(self) -> list[tuple[str, Any]]:
        return _field_items(self, self.meta_fields)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.address}>"


@dataclass(eq=False, repr=False)
class DataSource(Resource):
    """A ``data "<type>" "<local_name>"`` block."""

    kind: ClassVar[str] = "data"

    @property
    def address(self) -> str:
        return f"data.{self.resource_type}.{self.local_name}"


def _register(kind: str, resource_type: str, base: type) -> Callable[[C], C]:
    def decorator(cls: C) -> C:
        if not issubclass(cls, base):
            raise TypeError(f"{cls.__name__} must subclass {base.__name__}")
        cls = dataclass(eq=False, repr=False)(cls)  # type: ignore[assignment]
        cls.resource_type = resource_type  # type: ignore[attr-defined]
        _REGISTRY[(kind, resource_type)] = cls
        return cls

    return decorator


def resource(resource_type: str) -> Callable[[C], C]:
    """Declare a resource class for Terraform type ``resource_type``.

    The class becomes an identity-hashed dataclass and is registered so
    blueprints can refer to it by type name.

    Example:
        ::

            @resource("aws_key_pair")
            class KeyPair(Resource):
                key_name: str
                public_key: str
    """
    return _register("resource", resource_type, Resource)


def data_source(resource_type: str) -> Callable[[C], C]:
    """Declare a data source class for Terraform type ``resource_type``."""
    return _register("data", resource_type, DataSource)


def resource_class(resource_type: str, kind: str = "resource") -> type | None:
    """Look up a registered class by Terraform type name and block kind."""
    return _REGISTRY.get((kind, resource_type))


def registered_types(kind: str = "resource") -> list[str]:
    """Return the sorted Terraform type names registered for ``kind``."""
    return sorted(name for k, name in _REGISTRY if k == kind)


@dataclass(eq=False, repr=False)
class Variable:
    """A ``variable "<name>"`` block, referenced as ``var.<name>``.

    ``type`` is a Terraform type constraint written as HCL, e.g. ``string``
    or ``list(string)``.
    """

    kind: ClassVar[str] = "variable"

    name: str
    type: str | None = None
    default: Any = None
    description: str | None = None
    sensitive: bool = False

    @property
    def address(self) -> str:
        return f"var.{self.name}"

    @property
    def labels(self) -> tuple[str, ...]:
        return (self.name,)

    def body(self) -> list[tuple[str, Any]]:
        return [
            ("description", self.description),
            ("type", Expr(self.type) if self.type else None),
            ("default", self.default),
            ("sensitive", True if self.sensitive else None),
        ]

    def __repr__(self) -> str:
        return f"<Variable {self.address}>"


@dataclass(eq=False, repr=False)
class Output:
    """An ``output "<name>"`` block."""

    kind: ClassVar[str] = "output"

    name: str
    value: Any
    description: str | None = None
    sensitive: bool = False

    @property
    def address(self) -> str:
        return f"output.{self.name}"

    @property
    def labels(self) -> tuple[str, ...]:
        return (self.name,)

    def body(self) -> list[tuple[str, Any]]:
        return [
            ("description", self.description),
            ("value", self.value),
            ("sensitive", True if self.sensitive else None),
        ]

    def __repr__(self) -> str:
        return f"<Output {self.name}>"


@dataclass(eq=False, repr=False)
class Provider:
    """A ``provider "<name>"`` block.

    Attributes:
        name: Provider local name, e.g. ``aws``.
        attributes: Provider arguments such as ``region``.
        alias: Alias for an additional configuration of the same provider.
    """

    kind: ClassVar[str] = "provider"

    name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    alias: str | None = None

    @property
    def address(self) -> str:
        if self.alias:
            return f"provider.{self.name}.{self.alias}"
        return f"provider.{self.name}"

    @property
    def labels(self) -> tuple[str, ...]:
        return (self.name,)

    def body(self) -> list[tuple[str, Any]]:
        return [("alias", self.alias), *self.attributes.items()]

    def __repr__(self) -> str:
        return f"<Provider {self.address}>"


@dataclass(eq=False, repr=False)
class TerraformSettings:
    """The ``terraform { ... }`` settings block.

    Attributes:
        required_version: Terraform CLI version constraint.
        required_providers: Provider name to ``{"source": ..., "version": ...}``.
    """

    kind: ClassVar[str] = "terraform"

    required_version: str | None = None
    required_providers: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def address(self) -> str:
        return "terraform"

    @property
    def labels(self) -> tuple[str, ...]:
        return ()

    def body(self) -> list[tuple[str, Any]]:
        return [("required_version", self.required_version)]

    def __repr__(self) -> str:
        return "<TerraformSettings>"
