"""
Base record type for data validated at the upstream API boundary
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    """Immutable record parsed from upstream JSON.

    Upstream payloads use camelCase keys; fields are snake_case and may be
    populated by either name.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )
