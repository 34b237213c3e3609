"""Tests for Configuration and dependency ordering."""

import pytest

from tf_blocks import (
    Configuration,
    DependencyCycleError,
    Output,
    Provider,
    TerraformSettings,
    Variable,
)
from tf_blocks.aws import AmiLookup, DefaultVpc, Instance, KeyPair, SecurityGroup


@pytest.fixture
def blocks() -> dict[str, object]:
    key = KeyPair("k", key_name="k", public_key="x")
    vpc = DefaultVpc("default")
    sg = SecurityGroup("web", vpc_id=vpc)
    ami = AmiLookup("ubuntu", owners=["099720109477"])
    inst = Instance("web", ami=ami, key_name=key, security_groups=[sg])
    return {"key": key, "vpc": vpc, "sg": sg, "ami": ami, "inst": inst}


class TestCollection:
    """Tests for adding, finding and viewing blocks."""

    def test_add_returns_block(self) -> None:
        config = Configuration()
        key = KeyPair("k", key_name="k", public_key="x")
        assert config.add(key) is key
        assert len(config) == 1
        assert list(config) == [key]

    def test_add_rejects_non_blocks(self) -> None:
        with pytest.raises(TypeError):
            Configuration().add("aws_instance.web")

    def test_contains_by_address_and_object(self, blocks: dict[str, object]) -> None:
        config = Configuration([blocks["key"]])
        assert "aws_key_pair.k" in config
        assert blocks["key"] in config
        assert KeyPair("k", key_name="k", public_key="x") not in config
        assert "aws_key_pair.other" not in config

    def test_find(self, blocks: dict[str, object]) -> None:
        config = Configuration(blocks.values())
        assert config.find("data.aws_ami.ubuntu") is blocks["ami"]
        assert config.find("aws_instance.missing") is None

    def test_views(self, blocks: dict[str, object]) -> None:
        settings = TerraformSettings(required_version=">= 1.3.0")
        provider = Provider("aws")
        region = Variable("region")
        output = Output("id", value=blocks["inst"])
        config = Configuration([output, settings, provider, region, *blocks.values()])

        assert config.terraform is settings
        assert config.providers == [provider]
        assert config.variables == [region]
        assert config.outputs == [output]
        assert config.resources == list(blocks.values())

    def test_terraform_absent(self) -> None:
        assert Configuration().terraform is None


class TestDependencies:
    """Tests for dependency extraction and ordering."""

    def test_dependencies_of_instance(self, blocks: dict[str, object]) -> None:
        config = Configuration(blocks.values())
        assert config.dependencies(blocks["inst"]) == [
            "data.aws_ami.ubuntu",
            "aws_key_pair.k",
            "aws_security_group.web",
        ]

    def test_dependencies_include_string_depends_on(self) -> None:
        inst = Instance("web", ami="ami-1", depends_on=["aws_key_pair.k"])
        assert Configuration([inst]).dependencies(inst) == ["aws_key_pair.k"]

    def test_dependencies_deduplicated(self) -> None:
        sg = SecurityGroup("web")
        inst = Instance("web", ami="ami-1", security_groups=[sg], vpc_security_group_ids=[sg])
        assert Configuration([sg, inst]).dependencies(inst) == ["aws_security_group.web"]

    def test_graph_skips_undeclared(self, blocks: dict[str, object]) -> None:
        config = Configuration([blocks["sg"], blocks["inst"]])
        assert config.dependency_graph() == {
            "aws_security_group.web": set(),
            "aws_instance.web": {"aws_security_group.web"},
        }

    def test_order_puts_dependencies_first(self, blocks: dict[str, object]) -> None:
        config = Configuration(
            [blocks["inst"], blocks["sg"], blocks["key"], blocks["vpc"], blocks["ami"]]
        )
        order = [r.address for r in config.dependency_order()]
        assert order == [
            "aws_key_pair.k",
            "aws_default_vpc.default",
            "aws_security_group.web",
            "data.aws_ami.ubuntu",
            "aws_instance.web",
        ]

    def test_order_keeps_sorted_input(self, blocks: dict[str, object]) -> None:
        ordered = [blocks["key"], blocks["vpc"], blocks["sg"], blocks["ami"], blocks["inst"]]
        assert Configuration(ordered).dependency_order() == ordered

    def test_cycle_detected(self) -> None:
        a = SecurityGroup("a")
        b = SecurityGroup("b", depends_on=[a])
        a.depends_on.append(b)

        with pytest.raises(DependencyCycleError) as excinfo:
            Configuration([a, b]).dependency_order()

        cycle = excinfo.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"aws_security_group.a", "aws_security_group.b"}
        assert "->" in str(excinfo.value)

    def test_self_dependency_is_cycle(self) -> None:
        a = SecurityGroup("a")
        a.depends_on.append(a)
        with pytest.raises(DependencyCycleError) as excinfo:
            Configuration([a]).dependency_order()
        assert excinfo.value.cycle == ["aws_security_group.a", "aws_security_group.a"]
