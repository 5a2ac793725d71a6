from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from ariadne import gql
from graphql import GraphQLSchema, build_schema, parse
from hypothesis import strategies as st
from hypothesis.strategies import composite

from opmocks.config import GenerationConfig
from opmocks.orchestrator import generate_mocks
from opmocks.shapes import GeneratedArtifact


class TestSchemaData:
    TESTS_DATA_DIR: Path = Path(__file__).parent / "data"
    SCHEMA: Path = TESTS_DATA_DIR / "schema.graphql"
    OPERATIONS_DIR: Path = TESTS_DATA_DIR / "operations"
    TODOS_PAGE: Path = OPERATIONS_DIR / "todos_page.graphql"
    TODO_DETAILS_PAGE: Path = OPERATIONS_DIR / "todo_details_page.graphql"
    AUTHOR_FRAGMENT: Path = OPERATIONS_DIR / "author.graphql"


@pytest.fixture(scope="session")
def schema() -> GraphQLSchema:
    assert TestSchemaData.SCHEMA.exists(), f"Missing test file: {TestSchemaData.SCHEMA}"
    return build_schema(TestSchemaData.SCHEMA.read_text(encoding="utf-8"))


@pytest.fixture
def generate(schema: GraphQLSchema) -> Callable[..., list[GeneratedArtifact]]:
    """Generate artifacts for one or more operation strings against the test schema.

    Keyword arguments are passed to GenerationConfig, by field name or alias.
    """

    def _generate(*documents: str, **config: Any) -> list[GeneratedArtifact]:
        parsed = [parse(gql(document)) for document in documents]
        return generate_mocks(schema, parsed, GenerationConfig.model_validate(config))

    return _generate


def artifact_named(artifacts: list[GeneratedArtifact], name: str) -> GeneratedArtifact:
    matches = [artifact for artifact in artifacts if artifact.name == name]
    assert matches, f"No artifact named {name}, got {[artifact.name for artifact in artifacts]}"
    return matches[0]


FIELD_NAMES = st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=8)


@composite
def selection_paths(draw: Callable[[st.SearchStrategy[Any]], Any]) -> str:
    """Generate a dotted response-key path such as ``todos.author.address``."""
    segments = draw(st.lists(FIELD_NAMES, min_size=1, max_size=5))
    return ".".join(segments)


@composite
def operation_names(draw: Callable[[st.SearchStrategy[Any]], Any]) -> str:
    first = draw(st.sampled_from("ABCDEFGHIJKLMNOPQRSTUVWXYZ"))
    rest = draw(st.text(alphabet="abcdefghijklmnopqrstuvwxyz", max_size=10))
    return first + rest
