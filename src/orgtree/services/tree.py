"""TreeService — list tree definitions and build tree structures.

Each build loads its own catalog, definition, and position snapshot from
the store, resolves every position, and hands the result to the
:class:`TreeBuilder`. Nothing is cached between calls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from orgtree.domain.resolver import resolve_positions
from orgtree.domain.tree_builder import TreeBuilder
from orgtree.domain.trees import TreeStructure
from orgtree.infrastructure.store import StoreError
from orgtree.services.base import BaseService
from orgtree.services.contracts import TreeListData, TreeStructureData, dump_validated
from orgtree.services.result import ErrorCode, ServiceResult
from orgtree.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from orgtree.domain.diagnostics import Diagnostic
    from orgtree.domain.trees import TreeDefinition

logger = logging.getLogger(__name__)

# Warnings beyond this many are summarized in one line.
_MAX_WARNINGS = 20


def _summarize(diagnostics: list[Diagnostic]) -> list[str]:
    warnings = [d.message for d in diagnostics[:_MAX_WARNINGS]]
    if len(diagnostics) > _MAX_WARNINGS:
        warnings.append(f"... and {len(diagnostics) - _MAX_WARNINGS} more diagnostics")
    return warnings


class TreeService(BaseService):
    """Handles tree definition listing and tree structure builds."""

    @traced
    def list_trees(self) -> ServiceResult:
        """List tree definitions, default first, then by name."""
        try:
            trees = self._store.list_trees()
        except StoreError as exc:
            return self._store_failure("list_trees", exc)

        items = [
            {
                "id": tree.id,
                "name": tree.name,
                "description": tree.description,
                "is_default": tree.is_default,
                "levels": [level.model_dump() for level in tree.levels],
            }
            for tree in trees
        ]
        return ServiceResult.success(
            "list_trees",
            dump_validated(TreeListData, {"count": len(items), "items": items}),
        )

    @traced
    def structure(self, tree_id: str | None = None) -> ServiceResult:
        """Build the tree for *tree_id*, or for the default tree.

        The default is the configured ``[tree] default_tree`` id if set,
        else the stored definition flagged ``is_default``.
        """
        op = "tree_structure"
        try:
            with trace_span("load") as span:
                definition = self._definition(tree_id)
                if isinstance(definition, ServiceResult):
                    return definition
                catalog = self._store.load_catalog()
                positions = self._store.list_positions()
                if span:
                    span.annotate("fields", len(catalog))
                    span.annotate("positions", len(positions))
        except StoreError as exc:
            return self._store_failure(op, exc)

        with trace_span("resolve"):
            resolved, diagnostics = resolve_positions(positions, catalog)

        tree_config = self._store.settings.tree
        builder = TreeBuilder(
            catalog,
            out_of_structure_label=tree_config.out_of_structure_label,
            label_separator=tree_config.label_separator,
        )
        with trace_span("build") as span:
            built = builder.build(resolved, definition.levels)
            if span:
                span.annotate("levels", len(definition.levels))
                span.annotate("leaves", built.leaf_count)
        diagnostics.extend(built.diagnostics)

        for diagnostic in diagnostics:
            logger.debug("%s: %s", diagnostic.code, diagnostic.message)

        structure = TreeStructure(
            tree_id=definition.id,
            name=definition.name,
            levels=definition.levels,
            root=built.root,
        )
        data = {
            **structure.to_dict(),
            "position_count": len(positions),
            "diagnostics": [d.to_dict() for d in diagnostics],
        }
        return ServiceResult.success(
            op,
            dump_validated(TreeStructureData, data),
            warnings=_summarize(diagnostics),
        )

    def _definition(self, tree_id: str | None) -> TreeDefinition | ServiceResult:
        """Look up the requested definition, or an error result."""
        op = "tree_structure"
        if tree_id:
            definition = self._store.get_tree(tree_id)
            if definition is None:
                return self._not_found(op, "Tree", tree_id)
            return definition

        configured = self._store.settings.tree.default_tree
        if configured:
            definition = self._store.get_tree(configured)
            if definition is None:
                return self._not_found(op, "Configured default tree", configured)
            return definition

        definition = self._store.default_tree()
        if definition is None:
            return ServiceResult.failure(
                op,
                ErrorCode.NO_DEFAULT_TREE,
                "No tree id given and no default tree is defined",
            )
        return definition
