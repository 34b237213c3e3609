"""
Render configurations to Terraform's native syntax (HCL).

Output follows ``terraform fmt`` conventions: two-space indentation,
``=`` aligned across consecutive single-line attributes, attributes before
nested blocks, one blank line between top-level blocks.

Example:
    ::

        from tf_blocks import render
        from tf_blocks.samples import ec2_tutorial

        print(render(ec2_tutorial()))
"""

import logging
import math
import re
from pathlib import Path
from typing import Any

from tf_blocks._introspection import RefInfo, get_refs
from tf_blocks._model import (
    Block,
    DataSource,
    Expr,
    Output,
    Provider,
    Reference,
    Resource,
    TerraformSettings,
    Variable,
)

__all__ = ["render", "render_block", "render_value", "write"]

logger = logging.getLogger(__name__)

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

# Top-level block kinds in output order
_SECTIONS: tuple[type, ...] = (
    TerraformSettings,
    Provider,
    Variable,
    DataSource,
    Resource,
    Output,
)


def _section(block: Any) -> int:
    for index, kind in enumerate(_SECTIONS):
        if isinstance(block, kind):
            return index
    return len(_SECTIONS)


def escape_string(text: str, quoted: bool = True) -> str:
    """Escape ``text`` for a quoted string or heredoc body.

    Template sequences ``${`` and ``%{`` are doubled so the text is taken
    literally.
    """
    if quoted:
        text = (
            text.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
            .replace("\t", "\\t")
        )
    return text.replace("${", "$${").replace("%{", "%%{")


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (list, tuple, dict)) and not value)


def _is_block_value(value: Any) -> bool:
    if isinstance(value, Block):
        return True
    return (
        isinstance(value, (list, tuple))
        and bool(value)
        and all(isinstance(item, Block) for item in value)
    )


class _Renderer:
    def __init__(self, indent: int = 2, align: bool = True) -> None:
        if indent < 1:
            raise ValueError(f"indent must be positive, got {indent}")
        self.pad = " " * indent
        self.align = align

    def _indent(self, lines: list[str]) -> list[str]:
        return [self.pad + line if line else line for line in lines]

    def configuration(self, configuration: Any) -> str:
        blocks = sorted(configuration, key=_section)
        text = "\n\n".join("\n".join(self.block(b)) for b in blocks)
        return text + "\n" if text else ""

    def block(self, block: Any) -> list[str]:
        labels = " ".join(f'"{escape_string(label)}"' for label in block.labels)
        header = f"{block.kind} {labels} {{" if labels else f"{block.kind} {{"

        body = self.body(block.body(), get_refs(type(block)))

        if isinstance(block, TerraformSettings) and block.required_providers:
            providers = self.attributes(list(block.required_providers.items()), {})
            if body:
                body.append("")
            body += ["required_providers {", *self._indent(providers), "}"]

        if isinstance(block, Resource) and block.depends_on:
            deps = ", ".join(self._address(dep) for dep in block.depends_on)
            if body:
                body.append("")
            body.append(f"depends_on = [{deps}]")

        if not body:
            return [header + "}"]
        return [header, *self._indent(body), "}"]

    def nested(self, value: Block) -> list[str]:
        body = self.body(value.body(), get_refs(type(value)))
        if not body:
            return [f"{value.block_type} {{}}"]
        return [f"{value.block_type} {{", *self._indent(body), "}"]

    def body(self, items: list[tuple[str, Any]], refs: dict[str, RefInfo]) -> list[str]:
        attributes = []
        blocks: list[Block] = []
        for name, value in items:
            if _is_empty(value):
                continue
            if _is_block_value(value):
                blocks.extend(value if isinstance(value, (list, tuple)) else [value])
            else:
                attributes.append((name, value))

        lines = self.attributes(attributes, refs)
        for nested in blocks:
            if lines:
                lines.append("")
            lines += self.nested(nested)
        return lines

    def attributes(self, items: list[tuple[str, Any]], refs: dict[str, RefInfo]) -> list[str]:
        """Render ``key = value`` lines, aligning runs of single-line values."""
        rendered = [
            (self.key(name), self.value(value, refs.get(str(name))).split("\n"))
            for name, value in items
        ]
        lines: list[str] = []
        group: list[tuple[str, str]] = []

        def flush() -> None:
            width = max((len(k) for k, _ in group), default=0) if self.align else 0
            lines.extend(f"{k.ljust(width)} = {v}" for k, v in group)
            group.clear()

        for key, value_lines in rendered:
            if len(value_lines) == 1:
                group.append((key, value_lines[0]))
                continue
            flush()
            lines.append(f"{key} = {value_lines[0]}")
            lines.extend(value_lines[1:])
        flush()
        return lines

    def key(self, name: Any) -> str:
        name = str(name)
        if IDENTIFIER.match(name):
            return name
        return f'"{escape_string(name)}"'

    def _address(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, Reference):
            return value.target.address
        if isinstance(value, (Resource, Variable)):
            return value.address
        raise TypeError(f"Cannot use {type(value).__name__} in depends_on: {value!r}")

    def value(self, value: Any, declared: RefInfo | None = None) -> str:
        """Render an attribute value as an HCL expression."""
        if isinstance(value, Expr):
            return value.text
        if isinstance(value, Reference):
            return value.expression
        if isinstance(value, Variable):
            return value.address
        if isinstance(value, Resource):
            attr = declared.attr if declared is not None and declared.attr else "id"
            return f"{value.address}.{attr}"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and not math.isfinite(value):
            raise TypeError(f"Cannot render non-finite number {value!r}")
        if isinstance(value, (int, float)):
            return repr(value)
        if isinstance(value, str):
            if "\n" in value and value.endswith("\n"):
                return self.heredoc(value)
            return f'"{escape_string(value)}"'
        if isinstance(value, (list, tuple)):
            return "[" + ", ".join(self.value(item, declared) for item in value) + "]"
        if isinstance(value, dict):
            if not value:
                return "{}"
            inner = self.attributes(list(value.items()), {})
            return "\n".join(["{", *self._indent(inner), "}"])
        raise TypeError(f"Cannot render {type(value).__name__} value: {value!r}")

    def heredoc(self, text: str) -> str:
        content = text[:-1].split("\n")
        marker = "EOT"
        while any(line.strip() == marker for line in content):
            marker = "_" + marker
        body = self._indent([escape_string(line, quoted=False) for line in content])
        return "\n".join([f"<<-{marker}", *body, marker])


def render(configuration: Any, indent: int = 2, align: bool = True) -> str:
    """Render a configuration as HCL text.

    Blocks are grouped ``terraform``, ``provider``, ``variable``, ``data``,
    ``resource``, ``output``; each group keeps declaration order.

    Args:
        configuration: A `Configuration` or any iterable of blocks.
        indent: Spaces per nesting level.
        align: Align ``=`` across consecutive single-line attributes.

    Returns:
        The HCL text, newline-terminated (empty for no blocks).

    Raises:
        TypeError: If an attribute holds a value with no HCL form.
    """
    blocks = list(configuration)
    text = _Renderer(indent, align).configuration(blocks)
    logger.debug("Rendered %d blocks (%d bytes)", len(blocks), len(text))
    return text


def render_block(block: Any, indent: int = 2, align: bool = True) -> str:
    """Render a single top-level block, without trailing newline."""
    return "\n".join(_Renderer(indent, align).block(block))


def render_value(value: Any, indent: int = 2) -> str:
    """Render a single attribute value as an HCL expression."""
    return _Renderer(indent).value(value)


def write(
    configuration: Any, path: str | Path, indent: int = 2, align: bool = True
) -> Path:
    """Render ``configuration`` into ``path``, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render(configuration, indent, align), encoding="utf-8")
    logger.info("Wrote %s", path)
    return path
