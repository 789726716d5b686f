"""Position — the entity classified by a tree."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Position(BaseModel):
    """A job position with its raw custom-field selection.

    ``field_ids`` are the top-level fields chosen for the position.
    ``value_ids`` hold the chosen value for each of those fields plus any
    chosen linked values. Both keep store order so "first found" is stable.
    """

    model_config = {"frozen": True}

    id: int = Field(gt=0)
    name: str
    description: str | None = None
    field_ids: tuple[str, ...] = ()
    value_ids: tuple[str, ...] = ()
    employee_full_name: str | None = None
    employee_external_id: str | None = None
    employee_profile_url: str | None = None
