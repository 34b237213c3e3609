"""
The EC2 getting-started configuration.

`ec2_tutorial` rebuilds the classic first Terraform project: an SSH key
pair, the default VPC, a security group open for SSH, HTTP and HTTPS, and
one instance with an 8 GiB gp3 root volume.

Example:
    ::

        from tf_blocks import render
        from tf_blocks.samples import ec2_tutorial

        print(render(ec2_tutorial(region="eu-west-1")))
"""

from tf_blocks._configuration import Configuration
from tf_blocks._model import Expr, Output, Provider, TerraformSettings, Variable
from tf_blocks.aws import (
    DefaultVpc,
    EgressRule,
    IngressRule,
    Instance,
    KeyPair,
    RootBlockDevice,
    SecurityGroup,
)

__all__ = ["ec2_tutorial", "DEFAULT_AMI"]

# Ubuntu 22.04 LTS, us-east-1
DEFAULT_AMI = "ami-0c7217cdde317cfec"


def ec2_tutorial(
    region: str = "us-east-1",
    ami: str = DEFAULT_AMI,
    instance_type: str = "t2.micro",
    public_key_path: str = "~/.ssh/id_rsa.pub",
) -> Configuration:
    """Build the EC2 getting-started configuration.

    Args:
        region: Default for the ``region`` variable.
        ami: AMI ID for the instance.
        instance_type: EC2 instance type.
        public_key_path: Public key file read by Terraform's ``file()``.
    """
    config = Configuration()

    config.add(
        TerraformSettings(
            required_version=">= 1.3.0",
            required_providers={
                "aws": {"source": "hashicorp/aws", "version": "~> 5.0"},
            },
        )
    )
    region_var = config.add(
        Variable(
            "region",
            type="string",
            default=region,
            description="AWS region to deploy into",
        )
    )
    config.add(Provider("aws", attributes={"region": region_var}))

    key = config.add(
        KeyPair(
            "my_key",
            key_name="my-key",
            public_key=Expr(f'file("{public_key_path}")'),
        )
    )
    vpc = config.add(DefaultVpc("default", tags={"Name": "Default VPC"}))
    security_group = config.add(
        SecurityGroup(
            "allow_web",
            name="allow-ssh-http-https",
            description="Allow SSH, HTTP and HTTPS inbound traffic",
            vpc_id=vpc,
            ingress=[
                IngressRule.tcp(22, "SSH"),
                IngressRule.tcp(80, "HTTP"),
                IngressRule.tcp(443, "HTTPS"),
            ],
            egress=[EgressRule.allow_all()],
        )
    )
    instance = config.add(
        Instance(
            "web",
            ami=ami,
            instance_type=instance_type,
            key_name=key,
            security_groups=[security_group],
            root_block_device=RootBlockDevice(volume_size=8, volume_type="gp3"),
            tags={"Name": "terraform-ec2"},
        )
    )

    config.add(
        Output(
            "instance_public_ip",
            instance.attr("public_ip"),
            description="Public IP of the web instance",
        )
    )
    config.add(Output("instance_id", instance.attr("id")))
    return config
