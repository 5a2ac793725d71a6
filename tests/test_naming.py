import pytest
from hypothesis import given
from hypothesis import strategies as st

from opmocks.naming import ShapeNamer, join_path
from opmocks.shapes import ArtifactKind
from tests.conftest import operation_names, selection_paths


class TestShapeNamer:
    """Test suite for generated type and factory names."""

    @pytest.mark.parametrize(
        "kind, expected",
        [
            (ArtifactKind.QUERY, "TodosPageQuery"),
            (ArtifactKind.MUTATION, "TodosPageMutation"),
            (ArtifactKind.SUBSCRIPTION, "TodosPageSubscription"),
            (ArtifactKind.FRAGMENT, "TodosPageFragment"),
        ],
    )
    def test_root_name_appends_operation_suffix(self, kind: ArtifactKind, expected: str) -> None:
        name = ShapeNamer().root_name("TodosPage", kind)
        assert name.qualified_name == expected
        assert name.factory_name == f"a{expected}"

    def test_root_name_without_suffix(self) -> None:
        name = ShapeNamer(add_operation_suffix=False).root_name("TodosPage", ArtifactKind.QUERY)
        assert name.qualified_name == "TodosPage"
        assert name.factory_name == "aTodosPage"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("TodosPage", "TodosPage"),
            ("todosPage", "TodosPage"),
            ("get_todos", "GetTodos"),
        ],
    )
    def test_operation_name_is_pascal_cased(self, raw: str, expected: str) -> None:
        assert ShapeNamer().operation_name(raw) == expected

    def test_nested_names_concatenate_path_segments(self) -> None:
        namer = ShapeNamer()
        assert namer.name_for("TodosPage", "todos").qualified_name == "TodosPageTodos"
        assert namer.name_for("TodosPage", "todos.author.address").qualified_name == "TodosPageTodosAuthorAddress"
        assert namer.name_for("TodosPage", "todos.author.address").factory_name == "aTodosPageTodosAuthorAddress"

    def test_variant_name(self) -> None:
        name = ShapeNamer().variant_name("TodoDetailsPageQuery", "Error")
        assert name.qualified_name == "TodoDetailsPageQueryAsError"
        assert name.factory_name == "aTodoDetailsPageQueryAsError"

    def test_path_variant_name_puts_union_path_after_member(self) -> None:
        namer = ShapeNamer()
        name = namer.path_variant_name("Both", "Todo", "todo")
        assert name.qualified_name == "BothAsTodoAtTodo"
        assert name.factory_name == "aBothAsTodoAtTodo"
        member_shape = namer.variant_name(namer.name_for("Both", "todo").qualified_name, "Todo")
        assert name.qualified_name != member_shape.qualified_name
        assert namer.path_variant_name("BigProfile", "Error", "pinnedAsTodo.author.profile.pinned").qualified_name == (
            "BigProfileAsErrorAtPinnedAsTodoAuthorProfilePinned"
        )

    def test_join_path_skips_empty_segments(self) -> None:
        assert join_path("", "todos") == "todos"
        assert join_path("todos", "author") == "todos.author"

    @given(base=operation_names(), path=selection_paths())
    def test_names_are_deterministic(self, base: str, path: str) -> None:
        assert ShapeNamer().name_for(base, path) == ShapeNamer().name_for(base, path)

    @given(base=operation_names(), paths=st.lists(selection_paths(), min_size=2, max_size=2, unique=True))
    def test_distinct_paths_give_distinct_names(self, base: str, paths: list[str]) -> None:
        namer = ShapeNamer()
        first, second = (namer.name_for(base, path) for path in paths)
        assert first.qualified_name != second.qualified_name
        assert first.factory_name != second.factory_name
