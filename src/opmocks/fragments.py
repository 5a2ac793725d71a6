from collections.abc import Iterable, Sequence

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    SelectionNode,
    SelectionSetNode,
)

from opmocks import log

FragmentRegistry = dict[str, FragmentDefinitionNode]

# Entries are (fragment name, selection level). The level is the number of
# fields descended since the operation root.
FragmentStack = tuple[tuple[str, int], ...]


def build_fragment_registry(documents: Iterable[DocumentNode]) -> FragmentRegistry:
    """Collect fragment definitions from every document, keyed by fragment name."""
    registry: FragmentRegistry = {}
    for document in documents:
        for definition in document.definitions:
            if not isinstance(definition, FragmentDefinitionNode):
                continue
            name = definition.name.value
            if name in registry:
                log.warning(f"Fragment '{name}' is defined more than once, keeping the first definition")
                continue
            registry[name] = definition
    log.debug(f"Registered {len(registry)} fragment(s)")
    return registry


def response_key(field_node: FieldNode) -> str:
    return field_node.alias.value if field_node.alias else field_node.name.value


def merge_selections(selections: Sequence[SelectionNode]) -> list[SelectionNode]:
    """Merge fields sharing a response key, keeping the position of the first occurrence.

    Sub-selections of merged fields are unioned recursively. Inline fragments are
    kept in place.
    """
    merged: list[SelectionNode] = []
    positions: dict[str, int] = {}

    for selection in selections:
        if isinstance(selection, FieldNode):
            key = response_key(selection)
            if key in positions:
                index = positions[key]
                merged[index] = _merge_fields(merged[index], selection)  # type: ignore[arg-type]
                continue
            positions[key] = len(merged)
        merged.append(selection)

    return merged


def _merge_fields(first: FieldNode, second: FieldNode) -> FieldNode:
    if first.selection_set is None and second.selection_set is None:
        return first

    selections = [
        *(first.selection_set.selections if first.selection_set else ()),
        *(second.selection_set.selections if second.selection_set else ()),
    ]
    return FieldNode(
        alias=first.alias,
        name=first.name,
        arguments=first.arguments,
        directives=first.directives,
        selection_set=SelectionSetNode(selections=tuple(merge_selections(selections))),
    )


class FragmentResolver:
    """Expands fragment spreads into the selections they stand for.

    A spread becomes an inline fragment carrying the fragment's type condition,
    so the schema walker can decide where its fields apply. Inline fragments
    without a type condition are flattened into their parent.
    """

    def __init__(self, registry: FragmentRegistry, max_fragment_depth: int = 3):
        self.registry = registry
        self.max_fragment_depth = max_fragment_depth

    def resolve(self, selection_set: SelectionSetNode | None) -> SelectionSetNode | None:
        """Return a copy of ``selection_set`` without fragment spreads."""
        if selection_set is None:
            return None
        return self._resolve_set(selection_set, (), 0)

    def _resolve_set(self, selection_set: SelectionSetNode, stack: FragmentStack, level: int) -> SelectionSetNode:
        selections = self._expand(selection_set.selections, stack, level)
        return SelectionSetNode(selections=tuple(merge_selections(selections)))

    def _expand(self, selections: Sequence[SelectionNode], stack: FragmentStack, level: int) -> list[SelectionNode]:
        expanded: list[SelectionNode] = []

        for selection in selections:
            if isinstance(selection, FieldNode):
                expanded.append(self._expand_field(selection, stack, level))
            elif isinstance(selection, InlineFragmentNode):
                if selection.type_condition is None:
                    expanded.extend(self._expand(selection.selection_set.selections, stack, level))
                else:
                    expanded.append(
                        InlineFragmentNode(
                            type_condition=selection.type_condition,
                            directives=selection.directives,
                            selection_set=self._resolve_set(selection.selection_set, stack, level),
                        )
                    )
            elif isinstance(selection, FragmentSpreadNode):
                expanded.extend(self._expand_spread(selection, stack, level))

        return expanded

    def _expand_field(self, field_node: FieldNode, stack: FragmentStack, level: int) -> FieldNode:
        if field_node.selection_set is None:
            return field_node
        return FieldNode(
            alias=field_node.alias,
            name=field_node.name,
            arguments=field_node.arguments,
            directives=field_node.directives,
            selection_set=self._resolve_set(field_node.selection_set, stack, level + 1),
        )

    def _expand_spread(self, spread: FragmentSpreadNode, stack: FragmentStack, level: int) -> list[SelectionNode]:
        name = spread.name.value

        if (name, level) in stack:
            chain = " -> ".join(entry for entry, _ in stack)
            log.warning(f"Fragment cycle detected: {chain} -> {name}, ignoring the repeated spread")
            return []

        if len(stack) >= self.max_fragment_depth:
            log.warning(
                f"Fragment '{name}' exceeds the maximum fragment depth of {self.max_fragment_depth}, truncating"
            )
            return []

        definition = self.registry.get(name)
        if definition is None:
            log.warning(f"Unknown fragment '{name}', skipping spread")
            return []

        inner_stack = (*stack, (name, level))
        selections = self._expand(definition.selection_set.selections, inner_stack, level)
        return [
            InlineFragmentNode(
                type_condition=definition.type_condition,
                directives=spread.directives,
                selection_set=SelectionSetNode(selections=tuple(merge_selections(selections))),
            )
        ]
