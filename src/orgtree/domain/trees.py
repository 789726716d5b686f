"""Tree definitions and the built tree shape.

A :class:`TreeDefinition` is the administrator's recipe: an ordered list
of levels, each grouping by one custom-field key. A :class:`TreeNode` is
one node of the hierarchy built from it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, field_validator

from orgtree.domain.resolver import ResolvedLinkedField
from orgtree.domain.types import NodeType

if TYPE_CHECKING:
    from collections.abc import Iterator


class TreeLevel(BaseModel):
    """One level of a tree definition."""

    model_config = {"frozen": True}

    order: int
    field_key: str = Field(min_length=1)


class TreeDefinition(BaseModel):
    """Ordered list of levels plus display metadata.

    Levels are sorted ascending by ``order`` on construction; duplicate
    orders are rejected.
    """

    model_config = {"frozen": True}

    id: str
    name: str
    description: str | None = None
    is_default: bool = False
    levels: tuple[TreeLevel, ...] = ()

    @field_validator("levels")
    @classmethod
    def _sort_levels(cls, levels: tuple[TreeLevel, ...]) -> tuple[TreeLevel, ...]:
        orders = [level.order for level in levels]
        if len(orders) != len(set(orders)):
            msg = f"Duplicate level order in {orders}"
            raise ValueError(msg)
        return tuple(sorted(levels, key=lambda level: level.order))


class TreeNode(BaseModel):
    """One node of a built tree: the root, a value group, or a position leaf."""

    model_config = {"frozen": True}

    type: NodeType
    label: str | None = None
    level_order: int | None = None
    custom_field_id: str | None = None
    custom_field_key: str | None = None
    custom_field_value: str | None = None
    linked_custom_fields: tuple[ResolvedLinkedField, ...] = ()
    position_id: str | None = None
    position_name: str | None = None
    employee_full_name: str | None = None
    children: tuple[TreeNode, ...] = ()

    @property
    def is_group(self) -> bool:
        return self.type is NodeType.GROUP

    @property
    def is_leaf(self) -> bool:
        return self.type is NodeType.POSITION

    def iter_leaves(self) -> Iterator[TreeNode]:
        """Yield every position leaf under this node, depth-first."""
        if self.is_leaf:
            yield self
            return
        for child in self.children:
            yield from child.iter_leaves()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape (camelCase keys).

        Group nodes always carry ``customFieldKey``; it is null only for the
        out-of-structure bucket so callers add no path filter for it.
        """
        data: dict[str, Any] = {"type": str(self.type)}
        if self.type is NodeType.GROUP:
            data["label"] = self.label
            data["levelOrder"] = self.level_order
            data["customFieldId"] = self.custom_field_id
            data["customFieldKey"] = self.custom_field_key
            data["customFieldValue"] = self.custom_field_value
            data["linkedCustomFields"] = [lf.to_dict() for lf in self.linked_custom_fields]
        elif self.type is NodeType.POSITION:
            data["positionId"] = self.position_id
            data["positionName"] = self.position_name
            if self.employee_full_name:
                data["employeeFullName"] = self.employee_full_name
        data["children"] = [child.to_dict() for child in self.children]
        return data


class TreeStructure(BaseModel):
    """A built tree together with the definition it came from."""

    model_config = {"frozen": True}

    tree_id: str
    name: str
    levels: tuple[TreeLevel, ...] = ()
    root: TreeNode

    def to_dict(self) -> dict[str, Any]:
        return {
            "tree_id": self.tree_id,
            "name": self.name,
            "levels": [level.model_dump() for level in self.levels],
            "root": self.root.to_dict(),
        }
