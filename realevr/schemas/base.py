"""
Shared schema configuration.
Records travel as camelCase JSON and accept either camelCase or snake_case input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_json_dict(self) -> dict:
        """Dump to a JSON-compatible dict using the wire aliases."""
        return self.model_dump(mode="json", by_alias=True)
