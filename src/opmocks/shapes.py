"""Data structures shared by the shape builder, the orchestrator and the emitters."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ArtifactKind(str, Enum):
    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"
    FRAGMENT = "fragment"
    NESTED_SHAPE = "nested-shape"
    VARIANT = "variant"


class FieldShapeKind(str, Enum):
    TYPENAME = "typename"
    SCALAR = "scalar"
    ENUM = "enum"
    SHAPE = "shape"
    UNION = "union"
    MINIMAL = "minimal"


@dataclass(frozen=True)
class FactoryRef:
    """Reference to another shape's factory inside a sample value."""

    factory_name: str


@dataclass
class FieldShape:
    """Structural type of one selected field.

    Which attributes are set depends on ``kind``: ``scalar_type`` for scalars,
    ``literals`` for enums, typename discriminants and minimal objects,
    ``shape`` for nested shapes and ``members`` for unions.
    """

    name: str
    kind: FieldShapeKind
    is_list: bool = False
    is_nullable: bool = False
    scalar_type: str | None = None
    literals: list[str] = field(default_factory=list)
    shape: "ShapeDescriptor | None" = None
    members: list["ShapeDescriptor"] = field(default_factory=list)


@dataclass(eq=False)
class ShapeDescriptor:
    """A named structural type together with its sample value.

    ``fields`` always starts with the ``__typename`` discriminant and the keys
    of ``value`` follow the same order. Descriptors compare by identity.
    """

    qualified_name: str
    factory_name: str
    type_name: str
    path: str
    depth: int
    fields: list[FieldShape]
    value: dict[str, Any]
    dependencies: list["ShapeDescriptor"] = field(default_factory=list)

    @property
    def field_names(self) -> list[str]:
        return [field_shape.name for field_shape in self.fields]


@dataclass
class VariantResult:
    """One alternative of a shape in which a single union field is fixed to one member.

    ``union_path`` is the path of the union field relative to the shape that owns
    this variant.
    """

    member_name: str
    union_path: str
    shape: ShapeDescriptor


@dataclass
class VisitResult:
    shape: ShapeDescriptor
    variants: list[VariantResult] = field(default_factory=list)


@dataclass
class GeneratedArtifact:
    name: str
    factory_name: str
    kind: ArtifactKind
    shape: ShapeDescriptor
    operation_name: str
    location: str | None = None

    @property
    def value(self) -> dict[str, Any]:
        return self.shape.value

    @property
    def dependencies(self) -> list[str]:
        return [dependency.qualified_name for dependency in self.shape.dependencies]
