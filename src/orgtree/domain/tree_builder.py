"""TreeBuilder — recursive partitioning of positions into a labeled tree.

Positions are split level by level on the literal value text of each
level's field. Values that declare linked fields are further split by the
combination of linked values each position selected. Positions with no
value for any level land in a trailing "out of structure" group; positions
missing only the current level stay as leaves beside that level's groups.

Leaves sort after groups at every level, with one exception at the root:
positions valueless for the first level but valued for a deeper one sit
between the structured groups and the trailing "out of structure" group.

INVARIANT: Every input position appears exactly once as a leaf in the
output tree. Grouping failures degrade to a flat list, never to data loss.

The builder is pure: it never mutates its inputs and holds no state
between calls, so one instance may serve concurrent builds.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from orgtree.domain.diagnostics import Diagnostic
from orgtree.domain.trees import TreeNode
from orgtree.domain.types import DiagnosticCode, NodeType

if TYPE_CHECKING:
    from orgtree.domain.catalog import Catalog
    from orgtree.domain.resolver import ResolvedLinkedField, ResolvedPosition
    from orgtree.domain.trees import TreeLevel

logger = logging.getLogger(__name__)

OUT_OF_STRUCTURE_LABEL = "Out of structure"
LABEL_SEPARATOR = " - "

# Accumulated (field key, value text) pairs from the root down to a branch.
PathConstraints = tuple[tuple[str, str], ...]
# Ordered (linked field key, linked value text) pairs; empty means no linked selection.
CombinationKey = tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class BuildResult:
    """Output of :meth:`TreeBuilder.build`."""

    root: TreeNode
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def leaf_count(self) -> int:
        return sum(1 for _ in self.root.iter_leaves())


def matches_path(position: ResolvedPosition, path: PathConstraints) -> bool:
    """True if *position* has the constrained value for every key in *path*."""
    return all(position.value_for(key) == value for key, value in path)


def _leaf(position: ResolvedPosition) -> TreeNode:
    p = position.position
    return TreeNode(
        type=NodeType.POSITION,
        position_id=str(p.id),
        position_name=p.name,
        employee_full_name=p.employee_full_name or None,
    )


def _root(children: Sequence[TreeNode]) -> TreeNode:
    return TreeNode(type=NodeType.ROOT, children=tuple(children))


class TreeBuilder:
    """Builds a :class:`TreeNode` hierarchy from resolved positions.

    Args:
        catalog: Field definitions; used to find linked-field declarations.
        out_of_structure_label: Label of the trailing bucket for positions
            that have no value for any level.
        label_separator: Joins a primary value and its linked value texts
            in combinatorial group labels.
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        out_of_structure_label: str = OUT_OF_STRUCTURE_LABEL,
        label_separator: str = LABEL_SEPARATOR,
    ) -> None:
        self._catalog = catalog
        self._out_of_structure_label = out_of_structure_label
        self._separator = label_separator

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(
        self,
        positions: Sequence[ResolvedPosition],
        levels: Sequence[TreeLevel],
    ) -> BuildResult:
        """Partition *positions* into a tree following *levels*.

        Levels are applied in ascending ``order``. With no levels the root
        holds every position as a leaf, ordered by position id.
        """
        if not positions:
            return BuildResult(root=_root([]))

        ordered = tuple(sorted(levels, key=lambda level: level.order))
        if not ordered:
            by_id = sorted(positions, key=lambda p: p.id)
            return BuildResult(root=_root([_leaf(p) for p in by_id]))

        diagnostics: list[Diagnostic] = []
        for level in ordered:
            if self._catalog.field_by_key(level.field_key) is None:
                diagnostics.append(
                    Diagnostic(
                        code=DiagnosticCode.UNKNOWN_LEVEL_FIELD,
                        message=(
                            f"Level {level.order} groups by undefined field '{level.field_key}'"
                        ),
                        ref_id=level.field_key,
                    )
                )

        structured: list[ResolvedPosition] = []
        unstructured: list[ResolvedPosition] = []
        for position in positions:
            if any(position.value_for(level.field_key) for level in ordered):
                structured.append(position)
            else:
                unstructured.append(position)

        tracked: dict[str, int] = {}
        for level in ordered:
            tracked.setdefault(level.field_key, level.order)

        children = self._partition(structured, ordered, 0, (), tracked)
        if unstructured:
            children.append(self._out_of_structure(unstructured))

        if not children:
            logger.warning(
                "Tree grouping produced no branches for %d positions; using flat list",
                len(positions),
            )
            diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.FALLBACK,
                    message=f"Grouping placed none of {len(positions)} positions; flat list used",
                )
            )
            children = [_leaf(p) for p in positions]

        return BuildResult(root=_root(children), diagnostics=tuple(diagnostics))

    # ------------------------------------------------------------------
    # Recursion
    # ------------------------------------------------------------------

    def _partition(
        self,
        positions: Sequence[ResolvedPosition],
        levels: Sequence[TreeLevel],
        index: int,
        path: PathConstraints,
        tracked: dict[str, int],
    ) -> list[TreeNode]:
        """Build the children of the branch identified by *path*."""
        matching = [p for p in positions if matches_path(p, path)]
        if index >= len(levels):
            return [_leaf(p) for p in matching]

        level = levels[index]
        key = level.field_key

        valued: list[ResolvedPosition] = []
        valueless: list[ResolvedPosition] = []
        for position in matching:
            if position.value_for(key):
                valued.append(position)
            else:
                valueless.append(position)

        # Nobody on this branch filled this level: stop descending here.
        if not valued:
            return [_leaf(p) for p in valueless]

        buckets: dict[str, list[ResolvedPosition]] = {}
        for position in valued:
            buckets.setdefault(position.value_for(key) or "", []).append(position)

        groups: list[tuple[str, CombinationKey, TreeNode]] = []
        for value_text, members in buckets.items():
            child_path = (*path, (key, value_text))
            declared = self._declared_links(members, key)
            if not declared:
                node = self._group(
                    level,
                    members,
                    value_text,
                    label=value_text,
                    linked=(),
                    children=self._partition(members, levels, index + 1, child_path, tracked),
                )
                groups.append((value_text, (), node))
                continue
            groups.extend(
                self._linked_groups(
                    level, members, value_text, declared, levels, index, child_path, tracked
                )
            )

        groups.sort(key=lambda item: (item[0], item[1]))
        nodes = [node for _, _, node in groups]
        nodes.extend(_leaf(p) for p in valueless)
        return nodes

    def _declared_links(
        self, members: Sequence[ResolvedPosition], field_key: str
    ) -> frozenset[str]:
        """Ids of the linked fields declared by the values *members* selected.

        Members share a value text but may hold different value ids, so every
        distinct id is looked up.
        """
        value_ids: set[str] = set()
        for position in members:
            detail = position.detail(field_key)
            if detail is not None:
                value_ids.add(detail.value_id)
        declared: set[str] = set()
        for value_id in value_ids:
            allowed = self._catalog.value(value_id)
            if allowed is not None:
                declared.update(linked.id for linked in allowed.linked_fields)
        return frozenset(declared)

    def _linked_groups(
        self,
        level: TreeLevel,
        members: Sequence[ResolvedPosition],
        value_text: str,
        declared: frozenset[str],
        levels: Sequence[TreeLevel],
        index: int,
        child_path: PathConstraints,
        tracked: dict[str, int],
    ) -> list[tuple[str, CombinationKey, TreeNode]]:
        """Split one value group by each member's linked-value combination."""
        by_combination: dict[CombinationKey, list[ResolvedPosition]] = {}
        for position in members:
            combination = self._combination(position, level.field_key, declared, tracked)
            by_combination.setdefault(combination, []).append(position)

        groups: list[tuple[str, CombinationKey, TreeNode]] = []
        for combination, group_members in by_combination.items():
            label = self._separator.join([value_text, *(text for _, text in combination)])
            linked: tuple[ResolvedLinkedField, ...] = ()
            if combination:
                detail = group_members[0].detail(level.field_key)
                if detail is not None:
                    linked = tuple(lf for lf in detail.linked_fields if lf.id in declared)
            node = self._group(
                level,
                group_members,
                value_text,
                label=label,
                linked=linked,
                children=self._partition(group_members, levels, index + 1, child_path, tracked),
            )
            groups.append((label, combination, node))
        return groups

    @staticmethod
    def _combination(
        position: ResolvedPosition,
        field_key: str,
        declared: frozenset[str],
        tracked: dict[str, int],
    ) -> CombinationKey:
        """Ordered linked (key, text) pairs selected by *position*.

        Linked fields that are themselves tree levels come first, by level
        order; untracked ones follow, alphabetical by key.
        """
        detail = position.detail(field_key)
        if detail is None:
            return ()
        pairs: list[tuple[str, str]] = []
        for linked in detail.linked_fields:
            if linked.id not in declared:
                continue
            pairs.extend((linked.key, value.text) for value in linked.values)
        pairs.sort(
            key=lambda pair: (
                pair[0] not in tracked,
                tracked.get(pair[0], 0),
                pair[0],
            )
        )
        return tuple(pairs)

    # ------------------------------------------------------------------
    # Node construction
    # ------------------------------------------------------------------

    def _group(
        self,
        level: TreeLevel,
        members: Sequence[ResolvedPosition],
        value_text: str,
        *,
        label: str,
        linked: tuple[ResolvedLinkedField, ...],
        children: Sequence[TreeNode],
    ) -> TreeNode:
        field_id: str | None = None
        detail = members[0].detail(level.field_key) if members else None
        if detail is not None:
            field_id = detail.field_id
        else:
            field = self._catalog.field_by_key(level.field_key)
            field_id = field.id if field is not None else None
        return TreeNode(
            type=NodeType.GROUP,
            label=label,
            level_order=level.order,
            custom_field_id=field_id,
            custom_field_key=level.field_key,
            custom_field_value=value_text,
            linked_custom_fields=linked,
            children=tuple(children),
        )

    def _out_of_structure(self, positions: Sequence[ResolvedPosition]) -> TreeNode:
        return TreeNode(
            type=NodeType.GROUP,
            label=self._out_of_structure_label,
            custom_field_value=self._out_of_structure_label,
            children=tuple(_leaf(p) for p in positions),
        )
