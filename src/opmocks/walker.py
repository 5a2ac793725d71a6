from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from graphql import (
    FieldNode,
    GraphQLField,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    InlineFragmentNode,
    SelectionNode,
    SelectionSetNode,
    is_abstract_type,
    is_interface_type,
    is_object_type,
)

from opmocks import log
from opmocks.fragments import merge_selections, response_key
from opmocks.graphql_type import TypeKind, type_kind, unwrap_type

TYPENAME_FIELD = "__typename"

CompositeType = GraphQLObjectType | GraphQLInterfaceType


class FieldCategory(str, Enum):
    LEAF = "leaf"
    OBJECT = "object"
    MINIMAL_OBJECT = "minimal-object"
    UNION = "union"


@dataclass
class FieldInfo:
    response_key: str
    field_name: str
    field_def: GraphQLField
    named_type: GraphQLNamedType
    kind: TypeKind
    category: FieldCategory
    is_list: bool
    is_nullable: bool
    selection_set: SelectionSetNode | None


@dataclass
class SelectionAnalysis:
    owner: CompositeType
    fields: list[FieldInfo] = field(default_factory=list)
    # Implementing object types whose inline fragments were folded into an interface owner.
    folded_types: list[str] = field(default_factory=list)

    def _with_category(self, category: FieldCategory) -> list[FieldInfo]:
        return [info for info in self.fields if info.category is category]

    @property
    def scalar_fields(self) -> list[FieldInfo]:
        return self._with_category(FieldCategory.LEAF)

    @property
    def nested_object_fields(self) -> list[FieldInfo]:
        return self._with_category(FieldCategory.OBJECT)

    @property
    def minimal_object_fields(self) -> list[FieldInfo]:
        return self._with_category(FieldCategory.MINIMAL_OBJECT)

    @property
    def union_fields(self) -> list[FieldInfo]:
        return self._with_category(FieldCategory.UNION)


def has_selections(selection_set: SelectionSetNode | None) -> bool:
    """Whether a selection set selects anything beyond ``__typename``."""
    if selection_set is None:
        return False
    return any(
        not (isinstance(selection, FieldNode) and selection.name.value == TYPENAME_FIELD)
        for selection in selection_set.selections
    )


class SchemaWalker:
    """Pairs selected fields with their schema definitions and classifies them."""

    def __init__(self, schema: GraphQLSchema, split_interface_variants: bool = False):
        self.schema = schema
        self.split_interface_variants = split_interface_variants

    def analyze(self, owner: CompositeType, selection_set: SelectionSetNode | None) -> SelectionAnalysis:
        """Classify every field selected on ``owner``.

        Inline fragments whose type condition applies to ``owner`` are folded into
        the flat field list. Fields sharing a response key are merged.

        Args:
            owner: Object or interface type the selection set is evaluated on
            selection_set: Selection set with fragment spreads already resolved

        Returns:
            The selected fields in selection order
        """
        collected: dict[str, tuple[GraphQLField, FieldNode]] = {}
        analysis = SelectionAnalysis(owner)
        if selection_set is not None:
            self._collect(owner, selection_set.selections, collected, analysis.folded_types)

        for field_def, field_node in collected.values():
            analysis.fields.append(self._field_info(field_def, field_node))
        return analysis

    def _collect(
        self,
        lookup_type: CompositeType,
        selections: Sequence[SelectionNode],
        collected: dict[str, tuple[GraphQLField, FieldNode]],
        folded_types: list[str],
    ) -> None:
        for selection in selections:
            if isinstance(selection, FieldNode):
                name = selection.name.value
                if name == TYPENAME_FIELD:
                    continue

                field_def = lookup_type.fields.get(name)
                if field_def is None:
                    log.warning(f"Field '{name}' does not exist on type '{lookup_type.name}', skipping")
                    continue

                key = response_key(selection)
                if key in collected:
                    existing_def, existing_node = collected[key]
                    merged = merge_selections([existing_node, selection])[0]
                    collected[key] = (existing_def, merged)  # type: ignore[assignment]
                else:
                    collected[key] = (field_def, selection)

            elif isinstance(selection, InlineFragmentNode):
                target = self._condition_target(lookup_type, selection)
                if target is None:
                    continue
                if is_object_type(target) and target is not lookup_type and target.name not in folded_types:
                    folded_types.append(target.name)
                self._collect(target, selection.selection_set.selections, collected, folded_types)

            else:
                log.warning(f"Unresolved fragment spread '{selection.name.value}' on '{lookup_type.name}', skipping")

    def _condition_target(self, lookup_type: CompositeType, fragment: InlineFragmentNode) -> CompositeType | None:
        """Return the type whose fields an inline fragment contributes, or None if it does not apply."""
        if fragment.type_condition is None:
            return lookup_type

        condition_name = fragment.type_condition.name.value
        if condition_name == lookup_type.name:
            return lookup_type

        condition_type = self.schema.get_type(condition_name)
        if condition_type is None:
            log.warning(f"Unknown type condition '{condition_name}' on '{lookup_type.name}', skipping")
            return None

        # Condition on an interface the current type implements.
        if is_interface_type(condition_type) and self.schema.is_sub_type(condition_type, lookup_type):
            return lookup_type

        # Condition on an implementation of the current interface.
        if is_interface_type(lookup_type) and (is_object_type(condition_type) or is_interface_type(condition_type)):
            if self.schema.is_sub_type(lookup_type, condition_type):  # type: ignore[arg-type]
                return condition_type  # type: ignore[return-value]

        log.warning(f"Type condition '{condition_name}' can never apply to '{lookup_type.name}', skipping")
        return None

    def _field_info(self, field_def: GraphQLField, field_node: FieldNode) -> FieldInfo:
        named_type, is_list, is_nullable = unwrap_type(field_def.type)
        kind = type_kind(named_type)

        return FieldInfo(
            response_key=response_key(field_node),
            field_name=field_node.name.value,
            field_def=field_def,
            named_type=named_type,
            kind=kind,
            category=self._categorize(named_type, kind, field_node.selection_set),
            is_list=is_list,
            is_nullable=is_nullable,
            selection_set=field_node.selection_set,
        )

    def _categorize(
        self, named_type: GraphQLNamedType, kind: TypeKind, selection_set: SelectionSetNode | None
    ) -> FieldCategory:
        if kind.is_leaf:
            return FieldCategory.LEAF
        if not has_selections(selection_set):
            return FieldCategory.MINIMAL_OBJECT
        if kind is TypeKind.UNION:
            return FieldCategory.UNION
        if kind is TypeKind.INTERFACE and self.split_interface_variants:
            if self._has_member_conditions(named_type, selection_set):  # type: ignore[arg-type]
                return FieldCategory.UNION
        return FieldCategory.OBJECT

    def _has_member_conditions(self, abstract_type: GraphQLNamedType, selection_set: SelectionSetNode) -> bool:
        for selection in selection_set.selections:
            if isinstance(selection, InlineFragmentNode) and selection.type_condition is not None:
                condition_type = self.schema.get_type(selection.type_condition.name.value)
                if condition_type is not None and self.is_member(abstract_type, condition_type):
                    return True
        return False

    def union_members(self, info: FieldInfo) -> list[GraphQLObjectType]:
        if not is_abstract_type(info.named_type):
            return []
        return list(self.schema.get_possible_types(info.named_type))  # type: ignore[arg-type]

    def is_member(self, abstract_type: GraphQLNamedType, candidate: GraphQLNamedType) -> bool:
        """Whether ``candidate`` is a concrete object type of the union or interface."""
        if not is_abstract_type(abstract_type) or not is_object_type(candidate):
            return False
        return self.schema.is_sub_type(abstract_type, candidate)  # type: ignore[arg-type]
