"""
Shared pydantic base for stored records and API payloads.

Records are stored and served with camelCase keys ('fromUserId', 'memberIds')
while Python code uses snake_case attributes. 'CamelModel' bridges the two:
construct with either spelling, dump with 'to_store()' for the wire format.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_store(self, exclude_none: bool = False) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=exclude_none)
