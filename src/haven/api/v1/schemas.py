"""
Shared API Schema Base

Request and response bodies use camelCase on the wire and
snake_case in Python. Response models read straight from ORM rows.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base for all v1 request/response bodies."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
