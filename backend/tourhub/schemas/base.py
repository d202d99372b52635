"""
Base schemas shared by every request and response model.

The storefront and admin frontends speak camelCase; models declare
snake_case fields and serialize through camelCase aliases. Either
spelling is accepted on input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases, readable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class StrictCamelModel(CamelModel):
    """Opt-in strict base for admin writes: unknown fields are rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
        extra="forbid",
    )


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class MessageResponse(CamelModel):
    success: bool = True
    message: str
