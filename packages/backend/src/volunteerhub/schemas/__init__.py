"""Pydantic schemas — the JSON contract of the REST API and live events.

Field names are snake_case in Python and camelCase on the wire
(``avatarUrl``, ``createdAt``, ...), which is what the SPA consumes.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, accepts either spelling on input."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }

    def to_wire(self) -> dict:
        """JSON-safe dict with camelCase keys, ready for a live push."""
        return self.model_dump(mode="json", by_alias=True)
