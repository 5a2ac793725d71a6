from enum import Enum

from opmocks.emit.json_document import render_json
from opmocks.emit.typescript import render_typescript
from opmocks.shapes import GeneratedArtifact


class OutputFormat(str, Enum):
    TYPESCRIPT = "typescript"
    JSON = "json"


def render(artifacts: list[GeneratedArtifact], output_format: OutputFormat = OutputFormat.TYPESCRIPT) -> str:
    if output_format is OutputFormat.JSON:
        return render_json(artifacts)
    return render_typescript(artifacts)


__all__ = ["OutputFormat", "render", "render_json", "render_typescript"]
