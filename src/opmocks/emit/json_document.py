import json
from typing import Any

from opmocks.emit.models import ArtifactDocument, FieldDocument
from opmocks.emit.typescript import render_field_type
from opmocks.shapes import FactoryRef, GeneratedArtifact

FACTORY_REF_KEY = "$factory"


def sample_to_json(value: Any) -> Any:
    """Replace factory references with ``{"$factory": name}`` markers."""
    if isinstance(value, FactoryRef):
        return {FACTORY_REF_KEY: value.factory_name}
    if isinstance(value, dict):
        return {key: sample_to_json(item) for key, item in value.items()}
    if isinstance(value, list):
        return [sample_to_json(item) for item in value]
    return value


def to_artifact_document(artifact: GeneratedArtifact) -> ArtifactDocument:
    return ArtifactDocument(
        name=artifact.name,
        factory=artifact.factory_name,
        kind=artifact.kind,
        operation=artifact.operation_name,
        location=artifact.location,
        dependencies=artifact.dependencies,
        fields=[
            FieldDocument(
                name=field_shape.name,
                kind=field_shape.kind,
                type=render_field_type(field_shape),
                nullable=field_shape.is_nullable,
                is_list=field_shape.is_list,
            )
            for field_shape in artifact.shape.fields
        ],
        sample=sample_to_json(artifact.value),
    )


def render_json(artifacts: list[GeneratedArtifact]) -> str:
    """Render artifacts as a JSON array, in emission order."""
    documents = [to_artifact_document(artifact).model_dump(mode="json", by_alias=True) for artifact in artifacts]
    return json.dumps(documents, indent=2, ensure_ascii=False) + "\n"
