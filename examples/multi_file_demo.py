"""Multi-file Demo

Blocks live in several modules and reference each other by object. The
configuration collects them, checks that every reference is declared and
renders one main.tf.

Run with: python examples/multi_file_demo.py
"""

print("=" * 60)
print("String addresses: nothing checks them")
print("=" * 60)

from tf_blocks import Configuration, Expr, Provider, render, validate
from tf_blocks.aws import Instance

typo = Instance(
    "typo",
    ami="ami-0c7217cdde317cfec",
    vpc_security_group_ids=[Expr("aws_security_group.wbe.id")],  # type: ignore[list-item]
)
print(f"\nCreated: {typo}")
print(f"  validate() issues: {validate(Configuration([Provider('aws'), typo]))}")
print("  The misspelled address only fails at `terraform plan`.")


print("\n" + "=" * 60)
print("Object references across modules")
print("=" * 60)

from multi_file import *
import multi_file

config = Configuration([Provider("aws", attributes={"region": "us-east-1"})])

# Leave one module's blocks out to show what validate() reports
config.extend([web, deployer])
print("\nWith the network module forgotten:")
for issue in validate(config):
    print(f"  {issue}")

config.extend([vpc, web_sg])
print(f"\nWith every module: {len(validate(config))} issue(s)")

print("\nCreation order:")
for res in config.dependency_order():
    print(f"  {res.address}")

print(f"\nmain.tf for {', '.join(multi_file.__all__)}:\n")
print(render(config))
