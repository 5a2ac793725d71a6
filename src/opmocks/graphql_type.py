from enum import Enum

from graphql import (
    GraphQLNamedType,
    GraphQLType,
    is_enum_type,
    is_interface_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
    is_scalar_type,
    is_union_type,
)

GRAPHQL_SCALAR_TO_TYPESCRIPT = {
    "ID": "string",
    "String": "string",
    "Int": "number",
    "Float": "number",
    "Boolean": "boolean",
}


class TypeKind(str, Enum):
    SCALAR = "scalar"
    ENUM = "enum"
    OBJECT = "object"
    INTERFACE = "interface"
    UNION = "union"

    @property
    def is_leaf(self) -> bool:
        return self in (TypeKind.SCALAR, TypeKind.ENUM)

    @property
    def is_abstract(self) -> bool:
        return self in (TypeKind.INTERFACE, TypeKind.UNION)


def type_kind(named_type: GraphQLNamedType) -> TypeKind:
    """Classify a named output type.

    Raises:
        TypeError: For input object types, which never appear in a selection
    """
    if is_scalar_type(named_type):
        return TypeKind.SCALAR
    if is_enum_type(named_type):
        return TypeKind.ENUM
    if is_object_type(named_type):
        return TypeKind.OBJECT
    if is_interface_type(named_type):
        return TypeKind.INTERFACE
    if is_union_type(named_type):
        return TypeKind.UNION
    raise TypeError(f"Type '{named_type}' cannot be selected in an operation")


def unwrap_type(graphql_type: GraphQLType) -> tuple[GraphQLNamedType, bool, bool]:
    """Strip list and non-null modifiers from a field type.

    Returns:
        The named type, whether any modifier in the chain is a list, and whether
        the outermost modifier allows null
    """
    is_nullable = not is_non_null_type(graphql_type)
    is_list = False

    current = graphql_type
    while is_list_type(current) or is_non_null_type(current):
        if is_list_type(current):
            is_list = True
        current = current.of_type  # type: ignore[union-attr]

    return current, is_list, is_nullable  # type: ignore[return-value]


def is_builtin_scalar_type(type_name: str) -> bool:
    return type_name in GRAPHQL_SCALAR_TO_TYPESCRIPT


def typescript_scalar_type(type_name: str) -> str:
    """Map a scalar name to the TypeScript type of its values."""
    if is_builtin_scalar_type(type_name):
        return GRAPHQL_SCALAR_TO_TYPESCRIPT[type_name]

    lowered = type_name.lower()
    if "date" in lowered:
        return "string"
    return "any"
