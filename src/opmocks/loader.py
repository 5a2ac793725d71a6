from dataclasses import dataclass
from pathlib import Path

from ariadne import load_schema_from_path
from graphql import DocumentNode, GraphQLSchema, build_schema, parse, print_schema, validate_schema

from opmocks import log

GRAPHQL_FILE_SUFFIXES = (".graphql", ".gql")


@dataclass
class SourceDocument:
    document: DocumentNode
    location: str | None = None


def resolve_graphql_files(paths: list[Path]) -> list[Path]:
    """Resolve a list of paths (files and directories) into a flat list of unique GraphQL files.

    Args:
        paths: List of file or directory paths

    Returns:
        Flat list of unique GraphQL file paths, sorted so that runs are reproducible
    """
    resolved_files: set[Path] = set()

    for path in paths:
        if path.is_file():
            resolved_files.add(path)
        elif path.is_dir():
            for suffix in GRAPHQL_FILE_SUFFIXES:
                resolved_files.update(path.rglob(f"*{suffix}"))

    return sorted(resolved_files)


def build_schema_str(graphql_schema_paths: list[Path]) -> str:
    """Concatenate the SDL of every given schema file."""
    return "\n".join(load_schema_from_path(graphql_file) for graphql_file in graphql_schema_paths)


def load_schema(graphql_schema_paths: Path | list[Path]) -> GraphQLSchema:
    """Load and build a GraphQL schema from files or folders."""
    if isinstance(graphql_schema_paths, Path):
        graphql_schema_paths = [graphql_schema_paths]

    schema = build_schema(build_schema_str(resolve_graphql_files(graphql_schema_paths)))
    log.info("Successfully built the given GraphQL schema string.")
    log.debug(f"Read schema: \n{print_schema(schema)}")
    return schema


def check_correct_schema(schema: GraphQLSchema) -> list[str]:
    """Return the validation errors of a schema as readable messages."""
    return [f"  - {error.message}" for error in validate_schema(schema)]


def load_documents(document_paths: Path | list[Path]) -> list[SourceDocument]:
    """Parse every operation document found under the given files or folders.

    Args:
        document_paths: Files or directories containing GraphQL operations and fragments

    Returns:
        The parsed documents with their file path as location

    Raises:
        graphql.GraphQLError: If a document has a syntax error
    """
    if isinstance(document_paths, Path):
        document_paths = [document_paths]

    documents = []
    for document_file in resolve_graphql_files(document_paths):
        source = document_file.read_text(encoding="utf-8")
        if not source.strip():
            log.debug(f"Skipping empty document {document_file}")
            continue
        documents.append(SourceDocument(parse(source), str(document_file)))

    log.info(f"Loaded {len(documents)} document(s)")
    return documents
