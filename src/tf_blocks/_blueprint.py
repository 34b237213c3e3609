"""
Build configurations from YAML blueprints.

A blueprint lists blocks by section. Resources and data sources are keyed
by address; references use custom tags and may point forward::

    terraform:
      required_version: ">= 1.3.0"
    providers:
      aws:
        region: !var region
    variables:
      region:
        type: string
        default: us-east-1
    resources:
      aws_key_pair.deployer:
        key_name: deployer
        public_key: !expr file("~/.ssh/id_rsa.pub")
      aws_instance.web:
        ami: ami-0c55b159cbfafe1f0
        key_name: !ref aws_key_pair.deployer
        root_block_device:
          volume_size: 8
    outputs:
      public_ip:
        value: !ref aws_instance.web.public_ip

Tags:

- ``!ref type.name`` the block itself, ``!ref type.name.attr`` one of its
  attributes, ``!ref data.type.name[.attr]`` for data sources
- ``!var name`` a declared variable
- ``!expr text`` a raw HCL expression
"""

import logging
import types
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Union, get_args, get_origin, get_type_hints

import yaml

from tf_blocks._configuration import Configuration
from tf_blocks._errors import BlueprintError
from tf_blocks._model import (
    Block,
    Expr,
    Output,
    Provider,
    Reference,
    Resource,
    TerraformSettings,
    Variable,
    registered_types,
    resource_class,
)

__all__ = ["load_blueprint", "loads_blueprint"]

logger = logging.getLogger(__name__)

SECTIONS = ("terraform", "providers", "variables", "data", "resources", "outputs")


@dataclass(frozen=True)
class _Pending:
    """A ``!ref`` or ``!var`` tag waiting for its block to be declared."""

    tag: str
    text: str
    line: int

    def __str__(self) -> str:
        return f"{self.tag} {self.text} (line {self.line})"


class _BlueprintLoader(yaml.SafeLoader):
    pass


def _pending_constructor(tag: str) -> Any:
    def construct(loader: yaml.SafeLoader, node: yaml.Node) -> _Pending:
        text = str(loader.construct_scalar(node)).strip()
        return _Pending(tag, text, node.start_mark.line + 1)

    return construct


def _construct_expr(loader: yaml.SafeLoader, node: yaml.Node) -> Expr:
    return Expr(str(loader.construct_scalar(node)))


_BlueprintLoader.add_constructor("!ref", _pending_constructor("!ref"))
_BlueprintLoader.add_constructor("!var", _pending_constructor("!var"))
_BlueprintLoader.add_constructor("!expr", _construct_expr)


def load_blueprint(path: str | Path) -> Configuration:
    """Read a YAML blueprint file into a `Configuration`.

    Raises:
        BlueprintError: If the file is unreadable or the blueprint is invalid.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise BlueprintError(f"Cannot read blueprint {path}: {e}") from e
    return loads_blueprint(text, source=str(path))


def loads_blueprint(text: str, source: str = "<string>") -> Configuration:
    """Parse YAML blueprint text into a `Configuration`.

    Raises:
        BlueprintError: On malformed YAML, unknown sections, types or
            attributes, bad reference syntax or unresolved references.
    """
    try:
        document = yaml.load(text, Loader=_BlueprintLoader)
    except yaml.YAMLError as e:
        raise BlueprintError(f"{source}: invalid YAML: {e}") from e

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise BlueprintError(f"{source}: blueprint must be a mapping of sections")

    unknown = [key for key in document if key not in SECTIONS]
    if unknown:
        raise BlueprintError(
            f"{source}: unknown section(s) {', '.join(map(str, unknown))}; "
            f"expected {', '.join(SECTIONS)}"
        )

    builder = _Builder(source)
    config = builder.build(document)
    logger.debug("Loaded %d blocks from %s", len(config), source)
    return config


def _section(document: dict[str, Any], name: str, source: str) -> dict[str, Any]:
    section = document.get(name) or {}
    if not isinstance(section, dict):
        raise BlueprintError(f"{source}: section {name!r} must be a mapping")
    return section


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise BlueprintError(f"{where}: expected a mapping, got {type(value).__name__}")
    return value


def _block_hint(hint: Any) -> tuple[type, bool] | None:
    """Return (block class, is_list) when ``hint`` describes nested blocks."""
    origin = get_origin(hint)
    if origin in (Union, types.UnionType):
        inner = [arg for arg in get_args(hint) if arg is not type(None)]
        return _block_hint(inner[0]) if len(inner) == 1 else None
    if origin is list:
        args = get_args(hint)
        if args and isinstance(args[0], type) and issubclass(args[0], Block):
            return args[0], True
        return None
    if origin is not None:
        return None
    if isinstance(hint, type) and issubclass(hint, Block):
        return hint, False
    return None


class _Builder:
    def __init__(self, source: str) -> None:
        self.source = source
        self.config = Configuration()

    def build(self, document: dict[str, Any]) -> Configuration:
        if "terraform" in document:
            self._terraform(_mapping(document["terraform"], f"{self.source}: terraform"))
        for key, value in _section(document, "providers", self.source).items():
            self._provider(str(key), value)
        for key, value in _section(document, "variables", self.source).items():
            self._variable(str(key), value)
        for key, value in _section(document, "data", self.source).items():
            self._resource(str(key), value, "data")
        for key, value in _section(document, "resources", self.source).items():
            self._resource(str(key), value, "resource")
        for key, value in _section(document, "outputs", self.source).items():
            self._output(str(key), value)

        for block in self.config:
            self._resolve_block(block)
        return self.config

    def _terraform(self, entry: dict[str, Any]) -> None:
        self._check_keys(entry, {"required_version", "required_providers"}, "terraform")
        providers = _mapping(entry.get("required_providers"), f"{self.source}: terraform")
        self.config.add(
            TerraformSettings(
                required_version=entry.get("required_version"),
                required_providers={str(k): _mapping(v, str(k)) for k, v in providers.items()},
            )
        )

    def _provider(self, key: str, entry: Any) -> None:
        attributes = dict(_mapping(entry, f"{self.source}: provider {key}"))
        name, _, alias = key.partition(".")
        alias = attributes.pop("alias", None) or alias or None
        self.config.add(Provider(name, attributes=attributes, alias=alias))

    def _variable(self, name: str, entry: Any) -> None:
        entry = _mapping(entry, f"{self.source}: variable {name}")
        self._check_keys(entry, {"type", "default", "description", "sensitive"}, f"var.{name}")
        self.config.add(Variable(name, **entry))

    def _output(self, name: str, entry: Any) -> None:
        entry = _mapping(entry, f"{self.source}: output {name}")
        self._check_keys(entry, {"value", "description", "sensitive"}, f"output.{name}")
        if "value" not in entry:
            raise BlueprintError(f"{self.source}: output {name} has no value")
        self.config.add(Output(name, **entry))

    def _resource(self, key: str, entry: Any, kind: str) -> None:
        resource_type, dot, local_name = key.partition(".")
        if not dot or not local_name or "." in local_name:
            raise BlueprintError(
                f"{self.source}: {kind} key {key!r} must look like <type>.<name>"
            )
        cls = resource_class(resource_type, kind)
        if cls is None:
            known = ", ".join(registered_types(kind)) or "none"
            raise BlueprintError(
                f"{self.source}: unknown {kind} type {resource_type!r} (known: {known})"
            )

        attributes = dict(_mapping(entry, f"{self.source}: {key}"))
        depends_on = attributes.pop("depends_on", None) or []
        if not isinstance(depends_on, list):
            raise BlueprintError(f"{self.source}: {key}.depends_on must be a list")

        values = self._coerce_fields(cls, attributes, key, exclude=Resource.meta_fields)
        try:
            block = cls(local_name, depends_on=depends_on, **values)
        except TypeError as e:
            raise BlueprintError(f"{self.source}: {key}: {e}") from e
        self.config.add(block)

    def _coerce_fields(
        self, cls: type, attributes: dict[str, Any], where: str, exclude: tuple[str, ...] = ()
    ) -> dict[str, Any]:
        allowed = {f.name for f in fields(cls) if f.init and f.name not in exclude}
        self._check_keys(attributes, allowed, where)
        hints = get_type_hints(cls)
        return {
            name: self._coerce(hints.get(name), value, f"{where}.{name}")
            for name, value in attributes.items()
        }

    def _coerce(self, hint: Any, value: Any, where: str) -> Any:
        nested = _block_hint(hint)
        if nested is None:
            return value
        block_cls, is_list = nested
        if is_list:
            items = value if isinstance(value, list) else [value]
            return [
                self._nested_block(block_cls, item, f"{where}[{i}]")
                for i, item in enumerate(items)
            ]
        return self._nested_block(block_cls, value, where)

    def _nested_block(self, cls: type, value: Any, where: str) -> Any:
        if value is None or isinstance(value, Block):
            return value
        values = self._coerce_fields(cls, _mapping(value, f"{self.source}: {where}"), where)
        try:
            return cls(**values)
        except TypeError as e:
            raise BlueprintError(f"{self.source}: {where}: {e}") from e

    def _check_keys(self, entry: dict[str, Any], allowed: set[str], where: str) -> None:
        unknown = sorted(str(key) for key in entry if key not in allowed)
        if unknown:
            raise BlueprintError(
                f"{self.source}: {where}: unknown attribute(s) {', '.join(unknown)}"
            )

    def _resolve_block(self, block: Any) -> None:
        for f in fields(block):
            value = getattr(block, f.name)
            setattr(block, f.name, self._resolve(value))

    def _resolve(self, value: Any) -> Any:
        if isinstance(value, _Pending):
            return self._lookup(value)
        if isinstance(value, list):
            return [self._resolve(item) for item in value]
        if isinstance(value, dict):
            return {key: self._resolve(item) for key, item in value.items()}
        if isinstance(value, Block):
            self._resolve_block(value)
        return value

    def _lookup(self, pending: _Pending) -> Any:
        where = f"{self.source}: line {pending.line}"
        if pending.tag == "!var":
            variable = self.config.find(f"var.{pending.text}")
            if variable is None:
                raise BlueprintError(f"{where}: undeclared variable {pending.text!r}")
            return variable

        parts = pending.text.split(".")
        size = 3 if parts[0] == "data" else 2
        if len(parts) < size or not all(parts):
            raise BlueprintError(
                f"{where}: bad reference {pending.text!r}; "
                "expected [data.]<type>.<name>[.<attribute>]"
            )
        address = ".".join(parts[:size])
        target = self.config.find(address)
        if not isinstance(target, Resource):
            raise BlueprintError(f"{where}: reference to undeclared {address}")
        if len(parts) > size:
            return Reference(target, ".".join(parts[size:]))
        return target
