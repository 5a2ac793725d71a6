import logging
from typing import cast

import pytest
from graphql import GraphQLObjectType, GraphQLSchema, OperationDefinitionNode, SelectionSetNode, parse

from opmocks.fragments import FragmentResolver, build_fragment_registry
from opmocks.graphql_type import TypeKind, type_kind, typescript_scalar_type, unwrap_type
from opmocks.variants import UnionVariantExpander
from opmocks.walker import FieldCategory, SchemaWalker


def resolved_selection(source: str) -> SelectionSetNode:
    document = parse(source)
    operation = next(d for d in document.definitions if isinstance(d, OperationDefinitionNode))
    resolved = FragmentResolver(build_fragment_registry([document])).resolve(operation.selection_set)
    assert resolved is not None
    return resolved


class TestTypeHelpers:
    def test_unwrap_type(self, schema: GraphQLSchema) -> None:
        todo = cast(GraphQLObjectType, schema.get_type("Todo"))

        named, is_list, is_nullable = unwrap_type(todo.fields["tags"].type)
        assert (named.name, is_list, is_nullable) == ("String", True, False)

        named, is_list, is_nullable = unwrap_type(todo.fields["author"].type)
        assert (named.name, is_list, is_nullable) == ("User", False, True)

    @pytest.mark.parametrize(
        "type_name, kind",
        [
            ("String", TypeKind.SCALAR),
            ("Date", TypeKind.SCALAR),
            ("TodoStatus", TypeKind.ENUM),
            ("Todo", TypeKind.OBJECT),
            ("Node", TypeKind.INTERFACE),
            ("SearchResult", TypeKind.UNION),
        ],
    )
    def test_type_kind(self, schema: GraphQLSchema, type_name: str, kind: TypeKind) -> None:
        assert type_kind(schema.get_type(type_name)) is kind  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "scalar, expected",
        [("ID", "string"), ("Int", "number"), ("Boolean", "boolean"), ("Date", "string"), ("JSON", "any")],
    )
    def test_typescript_scalar_type(self, scalar: str, expected: str) -> None:
        assert typescript_scalar_type(scalar) == expected


class TestSchemaWalker:
    """Test suite for selection analysis."""

    def test_classifies_fields(self, schema: GraphQLSchema) -> None:
        selection = resolved_selection(
            "query Q { todos { id status tags author { name } assignee todo: id } todo(id: 1) { __typename } }"
        )
        walker = SchemaWalker(schema)
        root = walker.analyze(schema.query_type, selection)  # type: ignore[arg-type]
        todos = root.fields[0]

        assert todos.category is FieldCategory.OBJECT
        assert todos.is_list and not todos.is_nullable
        assert root.fields[1].category is FieldCategory.MINIMAL_OBJECT

        analysis = walker.analyze(todos.named_type, todos.selection_set)  # type: ignore[arg-type]
        assert [info.response_key for info in analysis.scalar_fields] == ["id", "status", "tags", "todo"]
        assert [info.response_key for info in analysis.nested_object_fields] == ["author"]
        assert [info.response_key for info in analysis.minimal_object_fields] == ["assignee"]

    def test_union_field_category(self, schema: GraphQLSchema) -> None:
        selection = resolved_selection("query Q { search(term: \"x\") { ... on User { id } } }")
        analysis = SchemaWalker(schema).analyze(schema.query_type, selection)  # type: ignore[arg-type]
        assert [info.response_key for info in analysis.union_fields] == ["search"]

    def test_typename_is_absorbed(self, schema: GraphQLSchema) -> None:
        selection = resolved_selection("query Q { __typename profile { __typename id } }")
        analysis = SchemaWalker(schema).analyze(schema.query_type, selection)  # type: ignore[arg-type]
        assert [info.response_key for info in analysis.fields] == ["profile"]

    def test_missing_field_is_skipped(self, schema: GraphQLSchema, caplog: pytest.LogCaptureFixture) -> None:
        selection = resolved_selection("query Q { profile { id nickname } }")
        walker = SchemaWalker(schema)
        profile = walker.analyze(schema.query_type, selection).fields[0]  # type: ignore[arg-type]

        with caplog.at_level(logging.WARNING):
            analysis = walker.analyze(profile.named_type, profile.selection_set)  # type: ignore[arg-type]

        assert [info.response_key for info in analysis.fields] == ["id"]
        assert "Field 'nickname' does not exist on type 'Profile'" in caplog.text

    def test_interface_conditions_fold_into_fields(self, schema: GraphQLSchema) -> None:
        selection = resolved_selection('query Q { node(id: "1") { id ... on Todo { title } ... on User { name } } }')
        walker = SchemaWalker(schema)
        node = walker.analyze(schema.query_type, selection).fields[0]  # type: ignore[arg-type]
        assert node.category is FieldCategory.OBJECT

        analysis = walker.analyze(node.named_type, node.selection_set)  # type: ignore[arg-type]
        assert [info.response_key for info in analysis.fields] == ["id", "title", "name"]
        assert analysis.folded_types == ["Todo", "User"]

    def test_interface_with_split_variants_is_a_union(self, schema: GraphQLSchema) -> None:
        selection = resolved_selection('query Q { node(id: "1") { id ... on Todo { title } } }')
        walker = SchemaWalker(schema, split_interface_variants=True)
        node = walker.analyze(schema.query_type, selection).fields[0]  # type: ignore[arg-type]
        assert node.category is FieldCategory.UNION

    def test_fragment_on_implemented_interface_folds(self, schema: GraphQLSchema) -> None:
        selection = resolved_selection("query Q { todos { ...NodeId title } } fragment NodeId on Node { id }")
        walker = SchemaWalker(schema)
        todos = walker.analyze(schema.query_type, selection).fields[0]  # type: ignore[arg-type]
        analysis = walker.analyze(todos.named_type, todos.selection_set)  # type: ignore[arg-type]
        assert [info.response_key for info in analysis.fields] == ["id", "title"]
        assert analysis.folded_types == []

    def test_inapplicable_condition_is_dropped(self, schema: GraphQLSchema, caplog: pytest.LogCaptureFixture) -> None:
        selection = resolved_selection("query Q { todos { id ... on Post { title } } }")
        walker = SchemaWalker(schema)
        todos = walker.analyze(schema.query_type, selection).fields[0]  # type: ignore[arg-type]

        with caplog.at_level(logging.WARNING):
            analysis = walker.analyze(todos.named_type, todos.selection_set)  # type: ignore[arg-type]

        assert [info.response_key for info in analysis.fields] == ["id"]
        assert "can never apply to 'Todo'" in caplog.text

    def test_union_members(self, schema: GraphQLSchema) -> None:
        selection = resolved_selection('query Q { search(term: "x") { ... on User { id } } }')
        walker = SchemaWalker(schema)
        search = walker.analyze(schema.query_type, selection).fields[0]  # type: ignore[arg-type]
        assert [member.name for member in walker.union_members(search)] == ["User", "Post"]
        assert walker.is_member(search.named_type, schema.get_type("Post"))  # type: ignore[arg-type]
        assert not walker.is_member(search.named_type, schema.get_type("Todo"))  # type: ignore[arg-type]


class TestUnionVariantExpander:
    def _search_field(self, schema: GraphQLSchema, source: str, split: bool = False):  # type: ignore[no-untyped-def]
        walker = SchemaWalker(schema, split_interface_variants=split)
        return walker, walker.analyze(schema.query_type, resolved_selection(source)).fields[0]  # type: ignore[arg-type]

    def test_one_member_selection_per_condition(self, schema: GraphQLSchema) -> None:
        walker, search = self._search_field(
            schema, 'query Q { search(term: "x") { ... on User { id name } ... on Post { id title } } }'
        )
        members = UnionVariantExpander(walker).expand(search)
        assert [m.member.name for m in members] == ["User", "Post"]

    def test_non_member_condition_is_dropped(self, schema: GraphQLSchema, caplog: pytest.LogCaptureFixture) -> None:
        walker, search = self._search_field(
            schema, 'query Q { search(term: "x") { ... on User { id } ... on Todo { id } } }'
        )
        with caplog.at_level(logging.WARNING):
            members = UnionVariantExpander(walker).expand(search)

        assert [m.member.name for m in members] == ["User"]
        assert "'Todo' is not a member of 'SearchResult'" in caplog.text

    def test_duplicate_conditions_are_kept(self, schema: GraphQLSchema) -> None:
        walker, search = self._search_field(
            schema, 'query Q { search(term: "x") { ... on User { id } ... on User { name } } }'
        )
        members = UnionVariantExpander(walker).expand(search)
        assert [m.member.name for m in members] == ["User", "User"]

    def test_interface_common_fields_apply_to_every_member(self, schema: GraphQLSchema) -> None:
        walker, node = self._search_field(
            schema, 'query Q { node(id: "1") { id ... on Todo { title } ... on User { name } } }', split=True
        )
        members = UnionVariantExpander(walker).expand(node)

        fields = [[s.name.value for s in m.selection_set.selections] for m in members]  # type: ignore[attr-defined]
        assert fields == [["id", "title"], ["id", "name"]]
