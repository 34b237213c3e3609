"""Tests for the EC2 getting-started configuration."""

from tf_blocks import render, validate
from tf_blocks.aws import Instance
from tf_blocks.samples import DEFAULT_AMI, ec2_tutorial

EXPECTED = """\
terraform {
  required_version = ">= 1.3.0"

  required_providers {
    aws = {
      source  = "hashicorp/aws"
      version = "~> 5.0"
    }
  }
}

provider "aws" {
  region = var.region
}

variable "region" {
  description = "AWS region to deploy into"
  type        = string
  default     = "us-east-1"
}

resource "aws_key_pair" "my_key" {
  key_name   = "my-key"
  public_key = file("~/.ssh/id_rsa.pub")
}

resource "aws_default_vpc" "default" {
  tags = {
    Name = "Default VPC"
  }
}

resource "aws_security_group" "allow_web" {
  name        = "allow-ssh-http-https"
  description = "Allow SSH, HTTP and HTTPS inbound traffic"
  vpc_id      = aws_default_vpc.default.id

  ingress {
    from_port   = 22
    to_port     = 22
    protocol    = "tcp"
    cidr_blocks = ["0.0.0.0/0"]
    description = "SSH"
  }

  ingress {
    from_port   = 80
    to_port     = 80
    protocol    = "tcp"
    cidr_blocks = ["0.0.0.0/0"]
    description = "HTTP"
  }

  ingress {
    from_port   = 443
    to_port     = 443
    protocol    = "tcp"
    cidr_blocks = ["0.0.0.0/0"]
    description = "HTTPS"
  }

  egress {
    from_port   = 0
    to_port     = 0
    protocol    = "-1"
    cidr_blocks = ["0.0.0.0/0"]
  }
}

resource "aws_instance" "web" {
  ami             = "ami-0c7217cdde317cfec"
  instance_type   = "t2.micro"
  key_name        = aws_key_pair.my_key.key_name
  security_groups = [aws_security_group.allow_web.name]
  tags = {
    Name = "terraform-ec2"
  }

  root_block_device {
    volume_size = 8
    volume_type = "gp3"
  }
}

output "instance_public_ip" {
  description = "Public IP of the web instance"
  value       = aws_instance.web.public_ip
}

output "instance_id" {
  value = aws_instance.web.id
}
"""


class TestEc2Tutorial:
    """Tests for ec2_tutorial()."""

    def test_renders_expected_configuration(self) -> None:
        assert render(ec2_tutorial()) == EXPECTED

    def test_validates_cleanly(self) -> None:
        assert validate(ec2_tutorial()) == []

    def test_parameters(self) -> None:
        config = ec2_tutorial(
            region="eu-west-1",
            ami="ami-123",
            instance_type="t3.small",
            public_key_path="keys/deploy.pub",
        )
        inst = config.find("aws_instance.web")
        assert isinstance(inst, Instance)
        assert (inst.ami, inst.instance_type) == ("ami-123", "t3.small")
        assert config.find("var.region").default == "eu-west-1"
        assert 'public_key = file("keys/deploy.pub")' in render(config)

    def test_default_ami(self) -> None:
        assert ec2_tutorial().find("aws_instance.web").ami == DEFAULT_AMI

    def test_resource_order(self) -> None:
        order = [r.address for r in ec2_tutorial().dependency_order()]
        assert order == [
            "aws_key_pair.my_key",
            "aws_default_vpc.default",
            "aws_security_group.allow_web",
            "aws_instance.web",
        ]
