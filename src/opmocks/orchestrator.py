from collections.abc import Sequence

from graphql import (
    DocumentNode,
    FragmentDefinitionNode,
    GraphQLSchema,
    OperationDefinitionNode,
    OperationType,
    is_interface_type,
    is_object_type,
)

from opmocks import log
from opmocks.config import GenerationConfig
from opmocks.fragments import FragmentResolver, build_fragment_registry
from opmocks.loader import SourceDocument
from opmocks.naming import ShapeNamer
from opmocks.oracle import ScalarValueOracle
from opmocks.shapes import ArtifactKind, GeneratedArtifact, ShapeDescriptor, VisitResult
from opmocks.visitor import ShapeVisitor
from opmocks.walker import CompositeType

OPERATION_KINDS = {
    OperationType.QUERY: ArtifactKind.QUERY,
    OperationType.MUTATION: ArtifactKind.MUTATION,
    OperationType.SUBSCRIPTION: ArtifactKind.SUBSCRIPTION,
}


def as_source_documents(documents: Sequence[DocumentNode | SourceDocument]) -> list[SourceDocument]:
    return [
        document if isinstance(document, SourceDocument) else SourceDocument(document, None) for document in documents
    ]


class GenerationOrchestrator:
    """
    Generates artifacts for every named operation and fragment of a set of documents.

    Fragments are registered across all documents before anything is built, so a
    document may spread fragments defined in another one.
    """

    def __init__(self, schema: GraphQLSchema, config: GenerationConfig | None = None):
        self.schema = schema
        self.config = config or GenerationConfig()
        self.namer = ShapeNamer(self.config.naming.add_operation_suffix)

    def run(self, documents: Sequence[DocumentNode | SourceDocument]) -> list[GeneratedArtifact]:
        """Generate artifacts for all documents.

        Args:
            documents: Parsed operation documents, optionally with their source location

        Returns:
            Artifacts in emission order: a referenced shape always precedes its referrers

        Raises:
            ConfigurationError: If a configured scalar generator does not exist
        """
        sources = as_source_documents(documents)
        log.info(f"Generating mocks for {len(sources)} document(s)")

        oracle = ScalarValueOracle(self.config.scalars)
        resolver = FragmentResolver(
            build_fragment_registry(source.document for source in sources), self.config.max_fragment_depth
        )
        visitor = ShapeVisitor(
            self.schema, oracle, self.namer, self.config.max_depth, self.config.split_interface_variants
        )

        artifacts: list[GeneratedArtifact] = []
        emitted: set[int] = set()

        for source in sources:
            definitions = [
                *(d for d in source.document.definitions if isinstance(d, FragmentDefinitionNode)),
                *(d for d in source.document.definitions if isinstance(d, OperationDefinitionNode)),
            ]
            for definition in definitions:
                target = self._root_of(definition)
                if target is None:
                    continue

                owner, kind = target
                operation_name = definition.name.value  # type: ignore[union-attr]
                result = visitor.visit_root(
                    owner,
                    resolver.resolve(definition.selection_set),
                    self.namer.root_name(operation_name, kind),
                    self.namer.operation_name(operation_name),
                )
                for shape, shape_kind in self._roots(result, kind):
                    self._emit(shape, shape_kind, operation_name, source.location, artifacts, emitted)

        log.info(f"Generated {len(artifacts)} artifact(s)")
        return artifacts

    def _root_of(
        self, definition: FragmentDefinitionNode | OperationDefinitionNode
    ) -> tuple[CompositeType, ArtifactKind] | None:
        if isinstance(definition, FragmentDefinitionNode):
            type_name = definition.type_condition.name.value
            owner = self.schema.get_type(type_name)
            if not (is_object_type(owner) or is_interface_type(owner)):
                log.warning(
                    f"Fragment '{definition.name.value}' is on '{type_name}', "
                    "which is not an object or interface type, skipping"
                )
                return None
            return owner, ArtifactKind.FRAGMENT  # type: ignore[return-value]

        if definition.name is None:
            log.warning(f"Skipping anonymous {definition.operation.value} operation")
            return None

        root_type = self.schema.get_root_type(definition.operation)
        if root_type is None:
            log.warning(
                f"Schema has no {definition.operation.value} type, skipping operation '{definition.name.value}'"
            )
            return None
        return root_type, OPERATION_KINDS[definition.operation]

    def _roots(self, result: VisitResult, kind: ArtifactKind) -> list[tuple[ShapeDescriptor, ArtifactKind]]:
        """The plain root, or only its variants when it has any."""
        if not result.variants:
            return [(result.shape, kind)]
        log.debug(f"{result.shape.qualified_name} has {len(result.variants)} variant(s), omitting the plain shape")
        return [(variant.shape, ArtifactKind.VARIANT) for variant in result.variants]

    def _emit(
        self,
        shape: ShapeDescriptor,
        kind: ArtifactKind,
        operation_name: str,
        location: str | None,
        artifacts: list[GeneratedArtifact],
        emitted: set[int],
    ) -> None:
        if id(shape) in emitted:
            return
        emitted.add(id(shape))

        for dependency in shape.dependencies:
            self._emit(dependency, ArtifactKind.NESTED_SHAPE, operation_name, location, artifacts, emitted)

        artifacts.append(
            GeneratedArtifact(
                name=shape.qualified_name,
                factory_name=shape.factory_name,
                kind=kind,
                shape=shape,
                operation_name=operation_name,
                location=location,
            )
        )


def generate_mocks(
    schema: GraphQLSchema,
    documents: Sequence[DocumentNode | SourceDocument],
    config: GenerationConfig | None = None,
) -> list[GeneratedArtifact]:
    """Generate artifacts for every named operation and fragment in ``documents``."""
    return GenerationOrchestrator(schema, config).run(documents)
