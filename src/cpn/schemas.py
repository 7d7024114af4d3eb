"""Shared pydantic base for the camelCase JSON surface.

Database rows are snake_case; every request and response body is camelCase.
Bodies are accepted in either casing.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_json(self) -> dict:
        """Dump with camelCase keys, the way the API serializes it."""
        return self.model_dump(mode="json", by_alias=True)


class SuccessResponse(CamelModel):
    success: bool = True
