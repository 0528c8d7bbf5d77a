"""
Base class for data-only models.

Models hold script data only. Running a script is the processor's job, so
one parsed script can be shared by any number of agents and sessions.

Usage:
    class ResponseData(DataModel):
        text: str = ""
        link: str = ""
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DataModel(BaseModel):
    """
    Base class for all script data types.

    Field names are snake_case in Python and camelCase in JSON
    (``if_var`` <-> ``ifVar``). Either spelling is accepted on input;
    unknown fields are rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra='forbid',
    )

    def clone(self) -> DataModel:
        """Create a deep copy of this model."""
        return self.model_copy(deep=True)

    def to_json(self, indent: int | None = None) -> str:
        """Serialize using wire (camelCase) names, omitting defaults."""
        return self.model_dump_json(by_alias=True, exclude_defaults=True, indent=indent)
