"""Network blocks."""

from tf_blocks.aws import DefaultVpc, EgressRule, IngressRule, SecurityGroup

__all__ = ["vpc", "web_sg"]

vpc = DefaultVpc("default", tags={"Name": "Default VPC"})

web_sg = SecurityGroup(
    "web",
    name="web",
    description="HTTP from anywhere",
    vpc_id=vpc,
    ingress=[IngressRule.tcp(80, "HTTP")],
    egress=[EgressRule.allow_all()],
)
