"""AWS resource types used by the EC2 getting-started configuration."""

from dataclasses import dataclass, field
from typing import Any

from tf_blocks._model import Block, DataSource, Resource, block, data_source, resource
from tf_blocks._types import Attr, Ref, RefList

__all__ = [
    "AmiFilter",
    "AmiLookup",
    "DefaultVpc",
    "EgressRule",
    "IngressRule",
    "Instance",
    "KeyPair",
    "RootBlockDevice",
    "SecurityGroup",
]

ANYWHERE_IPV4 = "0.0.0.0/0"


@block("filter")
class AmiFilter(Block):
    name: str
    values: list[str]


@data_source("aws_ami")
class AmiLookup(DataSource):
    """Look up an AMI ID by owner and filters."""

    owners: list[str] = field(default_factory=list)
    most_recent: bool | None = None
    filter: list[AmiFilter] = field(default_factory=list)


@resource("aws_key_pair")
class KeyPair(Resource):
    key_name: str
    public_key: Any
    tags: dict[str, Any] = field(default_factory=dict)


@resource("aws_default_vpc")
class DefaultVpc(Resource):
    """Adopts the region's default VPC; Terraform never creates or deletes it."""

    tags: dict[str, Any] = field(default_factory=dict)


@dataclass
class _Rule(Block):
    from_port: int
    to_port: int
    protocol: str = "tcp"
    cidr_blocks: list[str] = field(default_factory=list)
    ipv6_cidr_blocks: list[str] = field(default_factory=list)
    description: str | None = None


@block("ingress")
class IngressRule(_Rule):
    @classmethod
    def tcp(
        cls,
        port: int,
        description: str | None = None,
        cidr_blocks: list[str] | None = None,
    ) -> "IngressRule":
        """Allow inbound TCP on a single port, from anywhere by default."""
        return cls(
            from_port=port,
            to_port=port,
            protocol="tcp",
            cidr_blocks=list(cidr_blocks or [ANYWHERE_IPV4]),
            description=description,
        )


@block("egress")
class EgressRule(_Rule):
    @classmethod
    def allow_all(cls) -> "EgressRule":
        """Allow all outbound traffic (protocol ``-1``)."""
        return cls(
            from_port=0,
            to_port=0,
            protocol="-1",
            cidr_blocks=[ANYWHERE_IPV4],
        )


@resource("aws_security_group")
class SecurityGroup(Resource):
    name: str | None = None
    description: str | None = None
    vpc_id: Ref[DefaultVpc] = None
    ingress: list[IngressRule] = field(default_factory=list)
    egress: list[EgressRule] = field(default_factory=list)
    tags: dict[str, Any] = field(default_factory=dict)


@block("root_block_device")
class RootBlockDevice(Block):
    volume_size: int | None = None
    volume_type: str | None = None
    encrypted: bool | None = None
    delete_on_termination: bool | None = None


@resource("aws_instance")
class Instance(Resource):
    """An EC2 instance.

    ``ami`` takes an AMI ID literal or an `AmiLookup`. ``security_groups``
    holds group names (default VPC style); ``vpc_security_group_ids``
    holds group IDs.
    """

    ami: Ref[AmiLookup]
    instance_type: str = "t2.micro"
    key_name: Attr[KeyPair, "key_name"] = None
    security_groups: RefList[SecurityGroup, "name"] = field(default_factory=list)
    vpc_security_group_ids: RefList[SecurityGroup] = field(default_factory=list)
    associate_public_ip_address: bool | None = None
    user_data: str | None = None
    root_block_device: RootBlockDevice | None = None
    tags: dict[str, Any] = field(default_factory=dict)
