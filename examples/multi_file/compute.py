"""Compute blocks, referencing the network module by object."""

from tf_blocks import Expr
from tf_blocks.aws import Instance, KeyPair

from .network import web_sg

__all__ = ["deployer", "web"]

deployer = KeyPair(
    "deployer",
    key_name="deployer",
    public_key=Expr('file("~/.ssh/id_ed25519.pub")'),
)

web = Instance(
    "web",
    ami="ami-0c7217cdde317cfec",
    key_name=deployer,
    vpc_security_group_ids=[web_sg],
    tags={"Name": "web"},
)
