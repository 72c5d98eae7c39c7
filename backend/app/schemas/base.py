"""Shared base class for request and response bodies.

The mobile client speaks camelCase JSON; fields are declared in
snake_case and exposed through camelCase aliases.  Requests may use
either spelling.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(CamelModel):
    success: bool = True
