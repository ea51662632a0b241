import re
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from supermarket.core.clock import store_timezone
from supermarket.core.exceptions import ValidationError

# Backups written by older desktop builds carry "2025/3/1 14:05:03" style timestamps
_LEGACY_TIMESTAMP = re.compile(r"^\d{4}/\d{1,2}/\d{1,2}[ ,]+\d{1,2}:\d{2}:\d{2}$")


def _parse_legacy_timestamp(v: Any) -> Any:
    if isinstance(v, str) and _LEGACY_TIMESTAMP.match(v.strip()):
        return datetime.strptime(v.strip().replace(",", ""), "%Y/%m/%d %H:%M:%S")
    return v


def _attach_timezone(v: datetime) -> datetime:
    return v if v.tzinfo else v.replace(tzinfo=store_timezone())


Timestamp = Annotated[
    datetime,
    BeforeValidator(_parse_legacy_timestamp),
    AfterValidator(_attach_timezone),
]

# Money stays exact in memory and goes out as a plain JSON number
Money = Annotated[
    Decimal,
    Field(ge=0),
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


class StoreModel(BaseModel):
    """Base for every record and payload: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_store(self) -> dict[str, Any]:
        """The JSON body persisted in a collection and written to backups."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def coerce(model: type[BaseModel], data: Any) -> Any:
    """
    Accept either a ready model instance or raw data for it, turning
    pydantic's errors into the core's ValidationError.
    """
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(p) for p in first.get("loc", ())) or model.__name__
        raise ValidationError(f"{location}: {first.get('msg')}") from e
