"""
tf-blocks: Typed Terraform configuration for Python.

This package models Terraform blocks as Python dataclasses, renders them to
HCL, and checks that every reference between blocks resolves before
Terraform ever sees the file.

Overview:
    Three reference markers describe how resources point at each other:

    - `Ref[T]`: Reference to a block of type T (renders ``<address>.id``)
    - `Attr[T, "name"]`: Reference to one attribute of a T
    - `RefList[T]` / `RefList[T, "name"]`: List of references to T

    Around them:

    - `Resource`, `DataSource`, `Block` and the `resource`, `data_source`,
      `block` decorators declare resource types
    - `Configuration` collects blocks and orders them by dependency
    - `render` / `write` produce HCL
    - `validate` / `check` verify referential integrity
    - `load_blueprint` builds a configuration from YAML

Quick Start:
    The EC2 getting-started project::

        from tf_blocks import Configuration, Expr, render, check
        from tf_blocks.aws import (
            DefaultVpc, IngressRule, Instance, KeyPair, SecurityGroup,
        )

        config = Configuration()
        key = config.add(KeyPair("my_key", key_name="my-key",
                                 public_key=Expr('file("~/.ssh/id_rsa.pub")')))
        vpc = config.add(DefaultVpc("default"))
        sg = config.add(SecurityGroup("web", name="web", vpc_id=vpc,
                                      ingress=[IngressRule.tcp(22)]))
        config.add(Instance("web", ami="ami-0c7217cdde317cfec",
                            key_name=key, security_groups=[sg]))

        check(config)
        print(render(config))

    which renders, among others::

        resource "aws_instance" "web" {
          ami             = "ami-0c7217cdde317cfec"
          instance_type   = "t2.micro"
          key_name        = aws_key_pair.my_key.key_name
          security_groups = [aws_security_group.web.name]
        }

Exports:
    Types:
        - `Ref`, `Attr`, `RefList`: Reference markers
        - `Resource`, `DataSource`, `Block`: Base classes
        - `Variable`, `Output`, `Provider`, `TerraformSettings`: Other blocks
        - `Expr`, `Reference`: Raw expressions and attribute references

    Functions:
        - `get_refs`, `get_dependencies`, `iter_references`: Introspection
        - `render`, `render_block`, `write`: HCL output
        - `validate`, `check`: Referential integrity
        - `load_blueprint`, `loads_blueprint`: YAML input
"""

from tf_blocks._blueprint import load_blueprint, loads_blueprint
from tf_blocks._configuration import Configuration
from tf_blocks._errors import (
    BlueprintError,
    DependencyCycleError,
    SettingsError,
    TfBlocksError,
    ValidationError,
)
from tf_blocks._introspection import (
    RefInfo,
    ReferenceSite,
    get_dependencies,
    get_refs,
    iter_references,
)
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
    block,
    data_source,
    registered_types,
    resource,
    resource_class,
)
from tf_blocks._render import render, render_block, render_value, write
from tf_blocks._settings import Settings
from tf_blocks._types import Attr, Ref, RefList
from tf_blocks._validate import Severity, ValidationIssue, check, validate

# Register the AWS resource types for blueprints
from tf_blocks import aws  # noqa: E402,F401  isort: skip

__all__ = [
    # Types
    "Ref",
    "Attr",
    "RefList",
    # Model
    "Block",
    "DataSource",
    "Expr",
    "Output",
    "Provider",
    "Reference",
    "Resource",
    "TerraformSettings",
    "Variable",
    "block",
    "data_source",
    "registered_types",
    "resource",
    "resource_class",
    "Configuration",
    # Introspection
    "RefInfo",
    "ReferenceSite",
    "get_refs",
    "get_dependencies",
    "iter_references",
    # Rendering and validation
    "render",
    "render_block",
    "render_value",
    "write",
    "Severity",
    "ValidationIssue",
    "validate",
    "check",
    # Input and settings
    "load_blueprint",
    "loads_blueprint",
    "Settings",
    # Errors
    "TfBlocksError",
    "ValidationError",
    "DependencyCycleError",
    "BlueprintError",
    "SettingsError",
]

__version__ = "0.1.0"
