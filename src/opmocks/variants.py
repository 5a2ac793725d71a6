from collections.abc import Sequence
from dataclasses import dataclass

from graphql import (
    FieldNode,
    GraphQLNamedType,
    GraphQLObjectType,
    InlineFragmentNode,
    SelectionNode,
    SelectionSetNode,
)

from opmocks import log
from opmocks.fragments import merge_selections
from opmocks.walker import FieldInfo, SchemaWalker


@dataclass
class MemberSelection:
    member: GraphQLObjectType
    selection_set: SelectionSetNode


class UnionVariantExpander:
    """Splits the selection of a union or interface field into one selection per member.

    Only top-level inline fragments define members. Fields selected outside of
    any type condition apply to every member.
    """

    def __init__(self, walker: SchemaWalker):
        self.walker = walker

    def expand(self, info: FieldInfo) -> list[MemberSelection]:
        """Return the member selections of an abstract field, in selection order.

        Repeated conditions on the same member each produce their own entry.
        Conditions naming a type that cannot be a member are dropped.
        """
        if info.selection_set is None:
            return []

        common: list[SelectionNode] = []
        conditioned: list[tuple[GraphQLObjectType, list[SelectionNode]]] = []
        self._split(info.named_type, info.selection_set.selections, common, conditioned)

        return [
            MemberSelection(
                member=member,
                selection_set=SelectionSetNode(selections=tuple(merge_selections([*common, *own]))),
            )
            for member, own in conditioned
        ]

    def _split(
        self,
        abstract_type: GraphQLNamedType,
        selections: Sequence[SelectionNode],
        common: list[SelectionNode],
        conditioned: list[tuple[GraphQLObjectType, list[SelectionNode]]],
    ) -> None:
        for selection in selections:
            if isinstance(selection, FieldNode):
                common.append(selection)
                continue
            if not isinstance(selection, InlineFragmentNode):
                continue

            if selection.type_condition is None or selection.type_condition.name.value == abstract_type.name:
                # Fragments on the abstract type itself may hold further member conditions.
                self._split(abstract_type, selection.selection_set.selections, common, conditioned)
                continue

            condition_name = selection.type_condition.name.value
            candidate = self.walker.schema.get_type(condition_name)
            if candidate is None:
                log.warning(f"Unknown type condition '{condition_name}' on '{abstract_type.name}', skipping")
            elif not self.walker.is_member(abstract_type, candidate):
                log.warning(f"Type '{condition_name}' is not a member of '{abstract_type.name}', skipping")
            else:
                conditioned.append((candidate, list(selection.selection_set.selections)))  # type: ignore[arg-type]
