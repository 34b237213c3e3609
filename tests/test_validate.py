"""Tests for configuration validation."""

from textwrap import dedent

import pytest

from tf_blocks import (
    Configuration,
    Output,
    Provider,
    Severity,
    ValidationError,
    ValidationIssue,
    Variable,
    check,
    loads_blueprint,
    validate,
)
from tf_blocks.aws import DefaultVpc, IngressRule, Instance, KeyPair, SecurityGroup
from tf_blocks.samples import ec2_tutorial


def _errors(config: Configuration) -> list[ValidationIssue]:
    return [i for i in validate(config) if i.severity is Severity.ERROR]


def _warnings(config: Configuration) -> list[ValidationIssue]:
    return [i for i in validate(config) if i.severity is Severity.WARNING]


class TestCleanConfigurations:
    """Configurations that validate without issues."""

    def test_sample_is_clean(self) -> None:
        assert validate(ec2_tutorial()) == []

    def test_check_returns_no_warnings(self) -> None:
        assert check(ec2_tutorial()) == []

    def test_literal_values_in_reference_fields(self) -> None:
        """IDs and names given as strings are not checked."""
        config = Configuration(
            [Provider("aws"), Instance("web", ami="ami-1", key_name="existing")]
        )
        assert validate(config) == []


class TestReferenceErrors:
    """Tests for reference checks."""

    def test_undeclared_reference(self) -> None:
        key = KeyPair("k", key_name="k", public_key="x")
        config = Configuration([Provider("aws"), Instance("web", ami="ami-1", key_name=key)])

        (issue,) = _errors(config)
        assert issue.address == "aws_instance.web"
        assert issue.path == "key_name"
        assert issue.message == "references undeclared aws_key_pair.k"
        assert str(issue) == (
            "error: aws_instance.web (key_name): references undeclared aws_key_pair.k"
        )

    def test_wrong_target_type(self) -> None:
        vpc = DefaultVpc("default")
        inst = Instance("web", ami="ami-1", security_groups=[vpc])  # type: ignore[list-item]
        config = Configuration([Provider("aws"), vpc, inst])

        (issue,) = _errors(config)
        assert issue.path == "security_groups[0]"
        assert issue.message == (
            "expects a reference to SecurityGroup, got DefaultVpc aws_default_vpc.default"
        )

    def test_wrong_explicit_attribute(self) -> None:
        key = KeyPair("k", key_name="k", public_key="x")
        inst = Instance("web", ami="ami-1", key_name=key.attr("id"))  # type: ignore[arg-type]
        config = Configuration([Provider("aws"), key, inst])

        (issue,) = _errors(config)
        assert issue.message == "expects attribute 'key_name' of aws_key_pair.k, got 'id'"

    def test_matching_explicit_attribute(self) -> None:
        key = KeyPair("k", key_name="k", public_key="x")
        inst = Instance("web", ami="ami-1", key_name=key.attr("key_name"))  # type: ignore[arg-type]
        assert _errors(Configuration([Provider("aws"), key, inst])) == []

    def test_undeclared_depends_on(self) -> None:
        vpc = DefaultVpc("default")
        sg = SecurityGroup("web", depends_on=[vpc])
        (issue,) = _errors(Configuration([Provider("aws"), sg]))
        assert issue.path == "depends_on[0]"

    def test_undeclared_depends_on_address(self) -> None:
        """Address strings in depends_on must name a declared block."""
        sg = SecurityGroup("web", depends_on=["aws_instance.ghost"])
        (issue,) = _errors(Configuration([Provider("aws"), sg]))
        assert issue.message == "references undeclared aws_instance.ghost"
        assert issue.path == "depends_on[0]"

    def test_declared_depends_on_address(self) -> None:
        vpc = DefaultVpc("default")
        sg = SecurityGroup("web", depends_on=["aws_default_vpc.default"])
        assert _errors(Configuration([Provider("aws"), vpc, sg])) == []

    def test_undeclared_depends_on_address_in_blueprint(self) -> None:
        config = loads_blueprint(
            dedent(
                """\
                providers:
                  aws: {}
                resources:
                  aws_default_vpc.d:
                    depends_on: [aws_key_pair.nope]
                """
            )
        )
        (issue,) = _errors(config)
        assert issue.address == "aws_default_vpc.d"
        assert issue.message == "references undeclared aws_key_pair.nope"
        assert issue.path == "depends_on[0]"

    def test_attribute_reference_in_depends_on(self) -> None:
        key = KeyPair("k", key_name="k", public_key="x")
        inst = Instance("web", ami="ami-1", depends_on=[key.attr("id")])
        (issue,) = _errors(Configuration([Provider("aws"), key, inst]))
        assert issue.path == "depends_on[0]"
        assert issue.message.startswith("depends_on takes whole blocks, not attributes")

    def test_output_reference_checked(self) -> None:
        inst = Instance("web", ami="ami-1")
        (issue,) = _errors(Configuration([Output("ip", inst.attr("public_ip"))]))
        assert issue.address == "output.ip"
        assert issue.path == "value"

    def test_undeclared_variable(self) -> None:
        provider = Provider("aws", attributes={"region": Variable("region")})
        (issue,) = _errors(Configuration([provider]))
        assert issue.message == "references undeclared var.region"
        assert issue.path == "region"


class TestStructuralErrors:
    """Tests for names, duplicates, required attributes and cycles."""

    def test_invalid_name(self) -> None:
        config = Configuration([Provider("aws"), DefaultVpc("1st vpc")])
        (issue,) = _errors(config)
        assert issue.message.startswith("invalid name '1st vpc'")

    def test_duplicate_address(self) -> None:
        config = Configuration([Provider("aws"), DefaultVpc("default"), DefaultVpc("default")])
        (issue,) = _errors(config)
        assert issue.address == "aws_default_vpc.default"
        assert issue.message == "duplicate declaration"

    def test_missing_required_attribute(self) -> None:
        key = KeyPair("k", key_name=None, public_key="x")  # type: ignore[arg-type]
        (issue,) = _errors(Configuration([Provider("aws"), key]))
        assert issue.path == "key_name"
        assert issue.message == "required attribute is missing"

    def test_missing_required_in_nested_block(self) -> None:
        rule = IngressRule(from_port=None, to_port=22)  # type: ignore[arg-type]
        sg = SecurityGroup("web", ingress=[IngressRule.tcp(80), rule])
        (issue,) = _errors(Configuration([Provider("aws"), sg]))
        assert issue.path == "ingress[1].from_port"

    def test_cycle(self) -> None:
        a = SecurityGroup("a")
        b = SecurityGroup("b", depends_on=[a])
        a.depends_on.append(b)

        (issue,) = _errors(Configuration([Provider("aws"), a, b]))
        assert issue.message.startswith("Dependency cycle: ")


class TestWarnings:
    """Tests for warning-severity issues."""

    def test_missing_provider_reported_once(self) -> None:
        config = Configuration([DefaultVpc("default"), SecurityGroup("web")])
        (issue,) = _warnings(config)
        assert issue.address == "aws_default_vpc.default"
        assert issue.message == "no provider block for 'aws'; defaults apply"

    def test_unused_variable(self) -> None:
        config = Configuration([Variable("region")])
        (issue,) = _warnings(config)
        assert issue.address == "var.region"
        assert issue.message == "declared but never referenced"

    def test_variable_used_in_map(self) -> None:
        owner = Variable("owner")
        config = Configuration([owner, Provider("aws"), DefaultVpc("d", tags={"Owner": owner})])
        assert validate(config) == []


class TestCheck:
    """Tests for check()."""

    def test_raises_with_errors_only(self) -> None:
        key = KeyPair("k", key_name="k", public_key="x")
        config = Configuration([Variable("unused"), Instance("web", ami="ami-1", key_name=key)])

        with pytest.raises(ValidationError) as excinfo:
            check(config)

        assert [i.severity for i in excinfo.value.issues] == [Severity.ERROR]
        assert str(excinfo.value).startswith("1 validation error(s):\n  - error: ")

    def test_returns_warnings(self) -> None:
        warnings = check(Configuration([Provider("aws"), Variable("unused")]))
        assert [w.address for w in warnings] == ["var.unused"]
