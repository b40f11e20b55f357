"""Category: a named, colored grouping referenced by library items."""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CATEGORY_COLOR = "#3498db"


class Category(BaseModel):
    """A category for organizing library items.

    Identity is the id alone: two categories with the same id are equal even
    if their names or colors differ.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[str] = Field(
        default_factory=lambda: str(uuid.uuid4()),
        frozen=True,
        description="Unique identifier (UUID)",
    )
    name: Optional[str] = Field(None, description="Display name")
    color: str = Field(DEFAULT_CATEGORY_COLOR, description="Hex color code for display")
    description: Optional[str] = Field(None, description="Optional free-text description")

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Category):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.name if self.name is not None else "Unnamed Category"
