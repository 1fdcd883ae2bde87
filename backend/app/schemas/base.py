"""Wire Base Model — camelCase JSON on the wire, snake_case attributes in Python.

Invariants:
    - Every request/response schema accepts both camelCase aliases and field names
    - Responses serialize with by_alias=True (FastAPI default for response_model)
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for all API schemas."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )
