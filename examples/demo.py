#!/usr/bin/env python3
"""Demo: From Typed Blocks to main.tf

This example walks through what tf-blocks does with a small AWS
configuration: introspect reference fields, catch broken references,
order resources and render HCL.

Run with: python examples/demo.py
"""

from dataclasses import field

from tf_blocks import (
    Configuration,
    Ref,
    Resource,
    get_dependencies,
    get_refs,
    render,
    resource,
    validate,
)
from tf_blocks.aws import Instance, KeyPair, SecurityGroup
from tf_blocks.samples import ec2_tutorial


# =============================================================================
# PART 1: Declaring a Resource Type
# =============================================================================
#
# The @resource decorator turns the class into a dataclass and registers it
# under its Terraform type, so YAML blueprints can use it too.


@resource("aws_eip")
class ElasticIp(Resource):
    """An Elastic IP, optionally attached to an instance."""

    instance: Ref[Instance] = None
    domain: str = "vpc"
    tags: dict[str, str] = field(default_factory=dict)


# =============================================================================
# PART 2: Introspection
# =============================================================================


def demo_introspection() -> None:
    """Show the reference metadata read from annotations."""

    print("=" * 70)
    print("1. get_refs() and get_dependencies() on resource classes")
    print("=" * 70)

    for cls in [KeyPair, SecurityGroup, Instance, ElasticIp]:
        refs = get_refs(cls)
        print(f"\n   {cls.__name__} ({cls.resource_type}):")
        if refs:
            for name, info in refs.items():
                attr = f".{info.attr}" if info.attr else ".id"
                kind = "list of " if info.is_list else ""
                print(f"      .{name} -> {kind}{info.target.__name__}{attr}")
        else:
            print("      (no references)")

        transitive = sorted(d.__name__ for d in get_dependencies(cls, transitive=True))
        print(f"      depends on: {transitive or ['none']}")


# =============================================================================
# PART 3: Validation and Ordering
# =============================================================================


def demo_validation() -> None:
    """Catch a reference to a block that was never added."""

    print("\n" + "=" * 70)
    print("2. validate() finds references to undeclared blocks")
    print("=" * 70)

    config = ec2_tutorial()
    web = config.find("aws_instance.web")

    forgotten = KeyPair("rotated", key_name="rotated", public_key="ssh-ed25519 AAAA")
    web.key_name = forgotten

    for issue in validate(config):
        print(f"\n   {issue}")

    config.add(forgotten)
    print(f"\n   after adding it: {len(validate(config))} issue(s)")

    print("\n   Creation order:")
    for res in config.dependency_order():
        deps = config.dependencies(res)
        print(f"      {res.address}" + (f"  <- {', '.join(deps)}" if deps else ""))


# =============================================================================
# PART 4: Rendering
# =============================================================================


def demo_render() -> None:
    """Extend the sample with an Elastic IP and print main.tf."""

    print("\n" + "=" * 70)
    print("3. render() writes terraform fmt style HCL")
    print("=" * 70 + "\n")

    config: Configuration = ec2_tutorial(region="eu-west-1")
    web = config.find("aws_instance.web")
    config.add(ElasticIp("web", instance=web, tags={"Name": "web"}))

    print(render(config))


if __name__ == "__main__":
    demo_introspection()
    demo_validation()
    demo_render()
