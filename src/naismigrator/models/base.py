from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator


def _none_as_empty(value: Any) -> Any:
    return "" if value is None else value


# String value inside a legacy mapping; ``key:`` with no value reads as ""
LegacyStr = Annotated[str, BeforeValidator(_none_as_empty)]


class ManifestModel(BaseModel):
    """
    Base class for immutable manifest elements.

    Fields are addressed by their wire name (alias) or by their Python name.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class LegacyModel(ManifestModel):
    """
    Base class for naisd manifest elements.

    The legacy format was decoded leniently: unknown keys are ignored, an
    explicit ``null`` means "not set" and numbers are accepted where strings
    are expected (``cpu: 1``, ``port: 8080``).
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data
