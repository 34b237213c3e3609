"""Integration tests for tf_blocks with real-world scenarios."""

from dataclasses import field
from pathlib import Path

import pytest

from tf_blocks import (
    Attr,
    Configuration,
    Expr,
    Output,
    Provider,
    Ref,
    RefList,
    Resource,
    ValidationError,
    Variable,
    check,
    get_dependencies,
    get_refs,
    load_blueprint,
    render,
    render_block,
    resource,
    validate,
    write,
)
from tf_blocks.aws import DefaultVpc, Instance, KeyPair, SecurityGroup
from tf_blocks.samples import ec2_tutorial


@resource("aws_eip")
class ElasticIp(Resource):
    instance: Ref[Instance] = None
    domain: str = "vpc"
    tags: dict[str, str] = field(default_factory=dict)


@resource("aws_lb_target_group_attachment")
class TargetAttachment(Resource):
    target_group_arn: str = ""
    target_id: Attr[Instance, "id"] = None
    port: int = 80


@resource("aws_network_interface")
class NetworkInterface(Resource):
    subnet_id: str = ""
    security_groups: RefList[SecurityGroup] = field(default_factory=list)


class TestCustomResourceTypes:
    """Tests for resource types declared outside the package."""

    def test_refs_and_dependencies(self) -> None:
        """Custom resource classes take part in introspection."""
        assert get_refs(ElasticIp)["instance"].is_optional is True
        assert get_dependencies(ElasticIp) == {Instance}
        assert get_dependencies(ElasticIp, transitive=True) >= {Instance, SecurityGroup, KeyPair}

    def test_extends_sample(self) -> None:
        """A custom resource can be added to the sample and rendered."""
        config = ec2_tutorial()
        web = config.find("aws_instance.web")
        eip = config.add(ElasticIp("web", instance=web))
        config.add(Output("elastic_ip", eip.attr("public_ip")))

        assert validate(config) == []
        text = render(config)
        assert 'resource "aws_eip" "web" {' in text
        assert "  instance = aws_instance.web.id\n" in text
        assert "  value = aws_eip.web.public_ip\n" in text
        assert [r.address for r in config.dependency_order()][-1] == "aws_eip.web"

    def test_declared_attribute_used(self) -> None:
        web = Instance("web", ami="ami-1")
        attachment = TargetAttachment("web", target_group_arn="arn:tg", target_id=web)
        assert "  target_id        = aws_instance.web.id" in render_block(attachment)

    def test_list_reference_type_checked(self) -> None:
        vpc = DefaultVpc("default")
        eni = NetworkInterface("eni", security_groups=[vpc])  # type: ignore[list-item]
        config = Configuration([Provider("aws"), vpc, eni])

        with pytest.raises(ValidationError, match="expects a reference to SecurityGroup"):
            check(config)


class TestWholeConfigurations:
    """End-to-end scenarios from blocks or blueprints to files."""

    def test_cross_region_with_variables(self, tmp_path: Path) -> None:
        region = Variable("region", type="string", default="us-east-1")
        env = Variable("environment", type="string")
        config = Configuration([region, env])
        config.add(Provider("aws", attributes={"region": region}))
        config.add(Provider("aws", attributes={"region": "eu-west-1"}, alias="eu"))
        vpc = config.add(DefaultVpc("default", tags={"Environment": env}))
        config.add(SecurityGroup("ssh", name=Expr('"ssh-${var.environment}"'), vpc_id=vpc))

        assert check(config) == []
        path = write(config, tmp_path / "main.tf")
        text = path.read_text(encoding="utf-8")
        assert text.index('provider "aws"') < text.index('variable "region"')
        assert '  alias  = "eu"\n' in text
        assert '  name   = "ssh-${var.environment}"\n' in text
        assert "    Environment = var.environment\n" in text

    def test_blueprint_to_file(self, tmp_path: Path) -> None:
        blueprint = tmp_path / "web.yaml"
        blueprint.write_text(
            "providers:\n"
            "  aws:\n"
            "    region: us-east-1\n"
            "resources:\n"
            "  aws_instance.web:\n"
            "    ami: ami-1\n"
            "    key_name: !ref aws_key_pair.deploy\n"
            "    user_data: |\n"
            "      #!/bin/bash\n"
            "      echo ${HOSTNAME} > /tmp/name\n"
            "  aws_key_pair.deploy:\n"
            "    key_name: deploy\n"
            "    public_key: ssh-ed25519 AAAA\n",
            encoding="utf-8",
        )

        config = load_blueprint(blueprint)
        check(config)
        text = render(config)

        assert "  user_data = <<-EOT\n    #!/bin/bash\n    echo $${HOSTNAME} > /tmp/name\n  EOT\n" in (
            text
        )
        assert [r.address for r in config.dependency_order()] == [
            "aws_key_pair.deploy",
            "aws_instance.web",
        ]

    def test_example_blueprint_matches_sample(self) -> None:
        """The bundled blueprint describes the same configuration as ec2_tutorial()."""
        blueprint = Path(__file__).parents[1] / "examples" / "blueprints" / "ec2.yaml"
        config = load_blueprint(blueprint)
        assert validate(config) == []
        assert render(config) == render(ec2_tutorial())
