"""Shared schema building blocks.

Fields are snake_case in Python and camelCase on the wire. Money leaves
the API as a JSON number in yuan and enters it as a decimal in yuan.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Generic, Optional, TypeVar

from libs.common.currency import fen_to_yuan
from libs.common.datetime_utils import ensure_utc
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")

Money = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]
PositiveMoney = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
MobilePhone = Annotated[str, Field(pattern=r"^1\d{10}$")]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class Page(CamelModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    page_size: int


def money(fen: Optional[int]) -> Optional[Decimal]:
    return None if fen is None else fen_to_yuan(fen)
