"""
Type markers for references between Terraform blocks.

This module defines the markers used in resource class annotations to
express how one block refers to another. A reference renders as a
Terraform traversal expression (``aws_key_pair.deployer.key_name``) and
takes part in validation and dependency ordering:

- Whole-block references (`Ref[T]`), rendered as ``<address>.id``
- Attribute references (`Attr[T, "name"]`), rendered as ``<address>.name``
- Lists of references (`RefList[T]` or `RefList[T, "name"]`)

Example:
    Declaring references on resource classes::

        from tf_blocks import Attr, Ref, RefList, Resource, resource

        @resource("aws_security_group")
        class SecurityGroup(Resource):
            vpc_id: Ref[DefaultVpc] = None

        @resource("aws_instance")
        class Instance(Resource):
            key_name: Attr[KeyPair, "key_name"] = None
            security_groups: RefList[SecurityGroup, "name"] = field(
                default_factory=list
            )
"""

from typing import Any, Generic, TypeVar

__all__ = [
    "Ref",
    "Attr",
    "RefList",
]

T = TypeVar("T")
NameT = TypeVar("NameT")


class _RefMeta(type):
    """Metaclass that enables Ref[T] subscript syntax."""

    def __getitem__(cls, item: type[T]) -> Any:
        return _GenericAlias(cls, (item,))


class Ref(Generic[T], metaclass=_RefMeta):
    """A reference to a whole block of type T.

    The field value can be the referenced block itself, a `Reference`
    produced by ``block.attr(...)``, an `Expr`, or a plain literal such as
    an existing resource ID. Blocks render as ``<address>.id``.

    Attributes:
        __origin__: The Ref class itself (accessible via get_origin).
        __args__: A tuple containing the type parameter T.

    Example:
        Referencing the default VPC::

            @resource("aws_security_group")
            class SecurityGroup(Resource):
                vpc_id: Ref[DefaultVpc] = None

            vpc = DefaultVpc("default")
            sg = SecurityGroup("web", vpc_id=vpc)
            # renders: vpc_id = aws_default_vpc.default.id
    """

    __slots__ = ()


class _AttrMeta(type):
    """Metaclass that enables Attr[T, "name"] subscript syntax."""

    def __getitem__(cls, args: tuple[type[T], str]) -> Any:
        """Create a generic alias for Attr[T, "name"].

        Raises:
            TypeError: If args is not a tuple of exactly two elements.
        """
        if not isinstance(args, tuple) or len(args) != 2:
            raise TypeError("Attr requires exactly two arguments: Attr[T, 'name']")
        return _GenericAlias(cls, args)


class Attr(Generic[T, NameT], metaclass=_AttrMeta):
    """A reference to a specific attribute of a block of type T.

    Assigning the block itself renders the declared attribute. The name
    can be a string or ``Literal["name"]``.

    Example:
        Using the key pair's name on an instance::

            @resource("aws_instance")
            class Instance(Resource):
                key_name: Attr[KeyPair, "key_name"] = None

            key = KeyPair("deployer", key_name="deployer", public_key="...")
            Instance("web", ami="ami-123", key_name=key)
            # renders: key_name = aws_key_pair.deployer.key_name
    """

    __slots__ = ()


class _RefListMeta(type):
    """Metaclass that enables RefList[T] and RefList[T, "name"] syntax."""

    def __getitem__(cls, args: Any) -> Any:
        """Create a generic alias for RefList[T] or RefList[T, "name"].

        Raises:
            TypeError: If more than two arguments are given.
        """
        if not isinstance(args, tuple):
            return _GenericAlias(cls, (args,))
        if len(args) not in (1, 2):
            raise TypeError(
                "RefList takes one or two arguments: RefList[T] or RefList[T, 'name']"
            )
        return _GenericAlias(cls, args)


class RefList(Generic[T], metaclass=_RefListMeta):
    """A list of references to blocks of type T.

    With a second argument every element renders that attribute instead of
    ``id``. The classic EC2-Classic style ``security_groups`` argument takes
    group names, hence ``RefList[SecurityGroup, "name"]``.

    Example:
        Introspection::

            from tf_blocks import get_refs

            refs = get_refs(Instance)
            assert refs["security_groups"].is_list is True
            assert refs["security_groups"].attr == "name"
    """

    __slots__ = ()


class _GenericAlias:
    """A generic alias that preserves origin and args for introspection.

    Makes `Ref[T]`, `Attr[T, "name"]` and `RefList[T]` compatible with
    ``typing.get_origin``-style inspection through ``__origin__`` and
    ``__args__``.

    Example:
        ::

            ref_type = Ref[KeyPair]
            assert ref_type.__origin__ is Ref
            assert ref_type.__args__ == (KeyPair,)
    """

    __slots__ = ("__origin__", "__args__")

    def __init__(self, origin: type, args: tuple[Any, ...]) -> None:
        self.__origin__ = origin
        self.__args__ = args

    def __repr__(self) -> str:
        """Return a string in the format "ClassName[arg1, arg2, ...]"."""
        args_str = ", ".join(
            arg.__name__ if isinstance(arg, type) else repr(arg)
            for arg in self.__args__
        )
        return f"{self.__origin__.__name__}[{args_str}]"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, _GenericAlias):
            return (
                self.__origin__ == other.__origin__
                and self.__args__ == other.__args__
            )
        return False

    def __hash__(self) -> int:
        return hash((self.__origin__, self.__args__))
