"""Shared schema bits.

User and property payloads are camelCase on the wire (firstName,
propertyType, yearBuilt...). CamelModel accepts both spellings on input
and emits camelCase.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    message: str
