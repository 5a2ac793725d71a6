from dataclasses import dataclass, field, replace
from typing import Any

from graphql import GraphQLEnumType, GraphQLNamedType, GraphQLSchema, SelectionSetNode, is_abstract_type

from opmocks import log
from opmocks.graphql_type import TypeKind, typescript_scalar_type
from opmocks.naming import VARIANT_INFIX, ShapeName, ShapeNamer, join_path
from opmocks.oracle import ScalarContext, ScalarValueOracle
from opmocks.shapes import FactoryRef, FieldShape, FieldShapeKind, ShapeDescriptor, VariantResult, VisitResult
from opmocks.variants import UnionVariantExpander
from opmocks.walker import TYPENAME_FIELD, CompositeType, FieldCategory, FieldInfo, SchemaWalker


@dataclass
class FieldSlot:
    """Type, value and dependencies of one field of a shape under construction.

    ``alternatives`` are the variants this field can take, with union paths
    relative to the shape that owns the slot.
    """

    shape: FieldShape
    value: Any
    dependencies: list[ShapeDescriptor] = field(default_factory=list)
    alternatives: list[VariantResult] = field(default_factory=list)


def as_list_if(value: Any, is_list: bool) -> Any:
    return [value] if is_list else value


def represented_type_name(typenames: list[str], folded_types: list[str]) -> str:
    """The implementer whose fields were folded into the shape, else the first possible type."""
    for folded_type in folded_types:
        if folded_type in typenames:
            return folded_type
    return typenames[0]


class ShapeVisitor:
    """Builds structural types and sample values from one walk over a selection.

    Each selected field is classified once, and both its type and its sample
    value are derived from that classification, so the two always agree.
    Union fields produce one variant per member. Variants propagate to every
    enclosing shape, each variant fixing one union field and keeping every
    other field at its default.
    """

    def __init__(
        self,
        schema: GraphQLSchema,
        oracle: ScalarValueOracle,
        namer: ShapeNamer,
        max_depth: int = 5,
        split_interface_variants: bool = False,
    ):
        self.schema = schema
        self.oracle = oracle
        self.namer = namer
        self.max_depth = max_depth
        self.walker = SchemaWalker(schema, split_interface_variants)
        self.expander = UnionVariantExpander(self.walker)
        self._memo: dict[str, tuple[SelectionSetNode | None, VisitResult]] = {}

    def visit_root(
        self, owner: CompositeType, selection_set: SelectionSetNode | None, root_name: ShapeName, base_name: str
    ) -> VisitResult:
        """Build the shape of an operation or fragment root.

        Args:
            owner: Root type the selection is evaluated on
            selection_set: Selection set with fragment spreads resolved
            root_name: Name of the root shape
            base_name: Bare operation name that nested shape names start from

        Returns:
            The root shape and its variants
        """
        self._memo = {}
        return self._visit(owner, selection_set, root_name, base_name, "", "", 0)

    def _visit(
        self,
        owner: CompositeType,
        selection_set: SelectionSetNode | None,
        name: ShapeName,
        base_name: str,
        relative_path: str,
        full_path: str,
        depth: int,
    ) -> VisitResult:
        memo_key = f"{owner.name}:{name.qualified_name}:{depth}"
        cached = self._memo.get(memo_key)
        if cached is not None and cached[0] is selection_set:
            return cached[1]

        log.debug(f"Building shape {name.qualified_name} for '{owner.name}' at depth {depth}")
        analysis = self.walker.analyze(owner, selection_set)

        typenames = self._possible_type_names(owner)
        type_name = represented_type_name(typenames, analysis.folded_types)
        slots = [
            FieldSlot(
                shape=FieldShape(name=TYPENAME_FIELD, kind=FieldShapeKind.TYPENAME, literals=typenames),
                value=type_name,
            )
        ]
        for info in analysis.fields:
            slots.append(
                self._visit_field(
                    owner,
                    info,
                    name,
                    base_name,
                    join_path(relative_path, info.response_key),
                    join_path(full_path, info.response_key),
                    depth,
                )
            )

        shape = self._assemble(name, type_name, full_path, depth, slots)
        result = VisitResult(shape, self._variants(name, type_name, full_path, depth, slots))
        self._memo[memo_key] = (selection_set, result)
        return result

    def _visit_field(
        self,
        owner: CompositeType,
        info: FieldInfo,
        name: ShapeName,
        base_name: str,
        relative_path: str,
        full_path: str,
        depth: int,
    ) -> FieldSlot:
        if info.category is FieldCategory.LEAF:
            return self._leaf_slot(owner, info, name)

        if info.category is FieldCategory.MINIMAL_OBJECT or depth >= self.max_depth:
            return self._minimal_slot(info)

        if info.category is FieldCategory.UNION:
            return self._union_slot(info, base_name, relative_path, full_path, depth)

        child = self._visit(
            info.named_type,  # type: ignore[arg-type]
            info.selection_set,
            self.namer.name_for(base_name, relative_path),
            base_name,
            relative_path,
            full_path,
            depth + 1,
        )
        return FieldSlot(
            shape=self._field_shape(info, FieldShapeKind.SHAPE, shape=child.shape),
            value=as_list_if(FactoryRef(child.shape.factory_name), info.is_list),
            dependencies=[child.shape],
            alternatives=[
                VariantResult(variant.member_name, join_path(info.response_key, variant.union_path), variant.shape)
                for variant in child.variants
            ],
        )

    def _leaf_slot(self, owner: CompositeType, info: FieldInfo, name: ShapeName) -> FieldSlot:
        context = ScalarContext(owner.name, info.field_name, f"{name.qualified_name}.{info.response_key}")
        value = self.oracle.value_for(info.named_type, context)  # type: ignore[arg-type]

        if info.kind is TypeKind.ENUM:
            enum_type: GraphQLEnumType = info.named_type  # type: ignore[assignment]
            shape = self._field_shape(info, FieldShapeKind.ENUM, literals=list(enum_type.values))
        else:
            shape = self._field_shape(
                info, FieldShapeKind.SCALAR, scalar_type=typescript_scalar_type(info.named_type.name)
            )
        return FieldSlot(shape=shape, value=as_list_if(value, info.is_list))

    def _minimal_slot(self, info: FieldInfo) -> FieldSlot:
        typenames = self._possible_type_names(info.named_type)
        return FieldSlot(
            shape=self._field_shape(info, FieldShapeKind.MINIMAL, literals=typenames),
            value=as_list_if({TYPENAME_FIELD: typenames[0]}, info.is_list),
        )

    def _union_slot(
        self, info: FieldInfo, base_name: str, relative_path: str, full_path: str, depth: int
    ) -> FieldSlot:
        members = self.expander.expand(info)
        if not members:
            log.warning(
                f"Field '{full_path}' of type '{info.named_type.name}' selects no members, using a minimal shape"
            )
            return self._minimal_slot(info)

        union_name = self.namer.name_for(base_name, relative_path).qualified_name
        member_results = []
        for member_selection in members:
            member_name = self.namer.variant_name(union_name, member_selection.member.name)
            member_results.append(
                self._visit(
                    member_selection.member,
                    member_selection.selection_set,
                    member_name,
                    member_name.qualified_name,
                    "",
                    full_path,
                    depth + 1,
                )
            )

        alternatives = []
        for member_selection, result in zip(members, member_results, strict=True):
            member_type_name = member_selection.member.name
            alternatives.append(VariantResult(member_type_name, info.response_key, result.shape))
            member_key = f"{info.response_key}{VARIANT_INFIX}{member_type_name}"
            alternatives.extend(
                VariantResult(variant.member_name, join_path(member_key, variant.union_path), variant.shape)
                for variant in result.variants
            )

        return FieldSlot(
            shape=self._field_shape(info, FieldShapeKind.UNION, members=[result.shape for result in member_results]),
            value=as_list_if(FactoryRef(member_results[0].shape.factory_name), info.is_list),
            dependencies=[result.shape for result in member_results],
            alternatives=alternatives,
        )

    def _variants(
        self, name: ShapeName, type_name: str, full_path: str, depth: int, slots: list[FieldSlot]
    ) -> list[VariantResult]:
        alternatives = [(index, alternative) for index, slot in enumerate(slots) for alternative in slot.alternatives]
        union_paths = {alternative.union_path for _, alternative in alternatives}

        variants = []
        for index, alternative in alternatives:
            if len(union_paths) == 1:
                variant_name = self.namer.variant_name(name.qualified_name, alternative.member_name)
            else:
                variant_name = self.namer.path_variant_name(
                    name.qualified_name, alternative.member_name, alternative.union_path
                )

            slot = slots[index]
            fixed = FieldSlot(
                shape=replace(slot.shape, kind=FieldShapeKind.SHAPE, shape=alternative.shape, members=[], literals=[]),
                value=as_list_if(FactoryRef(alternative.shape.factory_name), slot.shape.is_list),
                dependencies=[alternative.shape],
            )
            variant_slots = [*slots[:index], fixed, *slots[index + 1 :]]
            variants.append(
                VariantResult(
                    alternative.member_name,
                    alternative.union_path,
                    self._assemble(variant_name, type_name, full_path, depth, variant_slots),
                )
            )
        return variants

    def _assemble(
        self, name: ShapeName, type_name: str, full_path: str, depth: int, slots: list[FieldSlot]
    ) -> ShapeDescriptor:
        return ShapeDescriptor(
            qualified_name=name.qualified_name,
            factory_name=name.factory_name,
            type_name=type_name,
            path=full_path,
            depth=depth,
            fields=[slot.shape for slot in slots],
            value={slot.shape.name: slot.value for slot in slots},
            dependencies=[dependency for slot in slots for dependency in slot.dependencies],
        )

    def _field_shape(self, info: FieldInfo, kind: FieldShapeKind, **attributes: Any) -> FieldShape:
        return FieldShape(
            name=info.response_key, kind=kind, is_list=info.is_list, is_nullable=info.is_nullable, **attributes
        )

    def _possible_type_names(self, named_type: GraphQLNamedType) -> list[str]:
        """Typename literals a value of ``named_type`` can carry, concrete types first."""
        if is_abstract_type(named_type):
            possible_types = self.schema.get_possible_types(named_type)  # type: ignore[arg-type]
            possible = [possible_type.name for possible_type in possible_types]
            if possible:
                return possible
        return [named_type.name]
