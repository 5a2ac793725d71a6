from dataclasses import dataclass

from caseconverter import pascalcase

from opmocks.shapes import ArtifactKind

ROOT_NAME_SUFFIXES = {
    ArtifactKind.QUERY: "Query",
    ArtifactKind.MUTATION: "Mutation",
    ArtifactKind.SUBSCRIPTION: "Subscription",
    ArtifactKind.FRAGMENT: "Fragment",
}

FACTORY_PREFIX = "a"
VARIANT_INFIX = "As"
VARIANT_PATH_INFIX = "At"


@dataclass(frozen=True)
class ShapeName:
    qualified_name: str
    factory_name: str


def upper_first(segment: str) -> str:
    return segment[:1].upper() + segment[1:]


def factory_name_for(qualified_name: str) -> str:
    return f"{FACTORY_PREFIX}{qualified_name}"


def join_path(*segments: str) -> str:
    """Join non-empty path segments with dots."""
    return ".".join(segment for segment in segments if segment)


class ShapeNamer:
    """Derives type and factory names for generated shapes.

    Names are pure functions of their inputs, so the same operation always
    produces the same names and different paths produce different names.
    """

    def __init__(self, add_operation_suffix: bool = True):
        self.add_operation_suffix = add_operation_suffix

    def operation_name(self, name: str) -> str:
        """PascalCase an operation or fragment name unless it already is."""
        if name[:1].isupper() and name.isalnum():
            return name
        return pascalcase(name)

    def root_name(self, name: str, kind: ArtifactKind) -> ShapeName:
        base = self.operation_name(name)
        if self.add_operation_suffix:
            base = f"{base}{ROOT_NAME_SUFFIXES[kind]}"
        return ShapeName(base, factory_name_for(base))

    def name_for(self, base_name: str, path: str) -> ShapeName:
        """Name the shape reached through a dotted ``path`` below ``base_name``.

        Args:
            base_name: Bare operation name, or the name of an enclosing union member shape
            path: Dotted response-key path relative to ``base_name``

        Returns:
            The qualified type name and its factory name
        """
        qualified = base_name + "".join(upper_first(segment) for segment in path.split(".") if segment)
        return ShapeName(qualified, factory_name_for(qualified))

    def variant_name(self, qualified_name: str, member_name: str) -> ShapeName:
        qualified = f"{qualified_name}{VARIANT_INFIX}{member_name}"
        return ShapeName(qualified, factory_name_for(qualified))

    def path_variant_name(self, qualified_name: str, member_name: str, union_path: str) -> ShapeName:
        """Name a variant of a shape that holds more than one union field.

        The union path follows the member, so these names do not take the
        ``<union path>As<Member>`` form used by the member shapes themselves.
        """
        path_suffix = self.name_for("", union_path).qualified_name
        qualified = f"{qualified_name}{VARIANT_INFIX}{member_name}{VARIANT_PATH_INFIX}{path_suffix}"
        return ShapeName(qualified, factory_name_for(qualified))
