import json
import re
from dataclasses import dataclass
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape

from opmocks import log
from opmocks.shapes import FactoryRef, FieldShape, FieldShapeKind, GeneratedArtifact

INDENT = "    "
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


@dataclass
class TypeScriptDeclaration:
    name: str
    factory_name: str
    comment: str
    type_lines: list[str]
    value: str


def property_key(name: str) -> str:
    return name if IDENTIFIER_PATTERN.match(name) else json.dumps(name)


def literal_union(literals: list[str]) -> str:
    return " | ".join(json.dumps(literal) for literal in literals)


def render_field_type(field_shape: FieldShape) -> str:
    """Render the TypeScript type of one field, without its name."""
    if field_shape.kind in (FieldShapeKind.TYPENAME, FieldShapeKind.ENUM):
        rendered = literal_union(field_shape.literals)
    elif field_shape.kind is FieldShapeKind.SCALAR:
        rendered = field_shape.scalar_type or "any"
    elif field_shape.kind is FieldShapeKind.SHAPE:
        rendered = field_shape.shape.qualified_name  # type: ignore[union-attr]
    elif field_shape.kind is FieldShapeKind.UNION:
        rendered = " | ".join(member.qualified_name for member in field_shape.members)
    else:
        rendered = f"{{ __typename: {literal_union(field_shape.literals)} }}"

    if field_shape.is_list:
        rendered = f"Array<{rendered}>"
    return rendered


def render_field_line(field_shape: FieldShape) -> str:
    optional = "?" if field_shape.is_nullable else ""
    return f"{property_key(field_shape.name)}{optional}: {render_field_type(field_shape)};"


def render_value(value: Any, depth: int = 0) -> str:
    """Render a sample value as a TypeScript expression.

    Factory references become calls to the referenced factory.
    """
    if isinstance(value, FactoryRef):
        return f"{value.factory_name}()"

    if isinstance(value, dict):
        if not value:
            return "{}"
        inner = INDENT * (depth + 1)
        lines = [f"{inner}{property_key(key)}: {render_value(item, depth + 1)}," for key, item in value.items()]
        return "{\n" + "\n".join(lines) + "\n" + INDENT * depth + "}"

    if isinstance(value, list):
        return "[" + ", ".join(render_value(item, depth) for item in value) + "]"

    return json.dumps(value, ensure_ascii=False)


class TypeScriptRenderer:
    """Renders generated artifacts as a single TypeScript module."""

    def __init__(self) -> None:
        self.env = Environment(
            loader=PackageLoader("opmocks.emit", "templates"),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render(self, artifacts: list[GeneratedArtifact]) -> str:
        """
        Render artifacts in the given order.

        Returns:
            str: TypeScript source, or an empty string when there is nothing to render
        """
        if not artifacts:
            log.info("No artifacts to render")
            return ""

        declarations = [
            TypeScriptDeclaration(
                name=artifact.name,
                factory_name=artifact.factory_name,
                comment=f"{artifact.kind.value} of {artifact.operation_name}",
                type_lines=[render_field_line(field_shape) for field_shape in artifact.shape.fields],
                value=render_value(artifact.value),
            )
            for artifact in artifacts
        ]

        template = self.env.get_template("mocks.ts.j2")
        return template.render(declarations=declarations)


def render_typescript(artifacts: list[GeneratedArtifact]) -> str:
    """Render artifacts as a TypeScript module of types and builder factories."""
    return TypeScriptRenderer().render(artifacts)
