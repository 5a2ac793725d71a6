"""Pydantic models for the JSON representation of generated artifacts."""

from typing import Any

from pydantic import BaseModel, Field

from opmocks.shapes import ArtifactKind, FieldShapeKind


class FieldDocument(BaseModel):
    """One field of a generated shape."""

    name: str
    kind: FieldShapeKind
    type: str
    nullable: bool = False
    is_list: bool = Field(False, serialization_alias="list")


class ArtifactDocument(BaseModel):
    """A generated shape with its sample value."""

    name: str
    factory: str
    kind: ArtifactKind
    operation: str
    location: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    fields: list[FieldDocument]
    sample: dict[str, Any]
