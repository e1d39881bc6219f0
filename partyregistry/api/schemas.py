from __future__ import annotations
from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PartyOut(_CamelModel):
    id: str
    name: str
    abbreviation: str
    ideology: Optional[str] = None
    founding_date: date
    headquarters: str
    representative_color: Optional[str] = None
    logo_url: Optional[str] = None
    active: bool = True
    registered_at: datetime


class PartyList(_CamelModel):
    data: List[PartyOut]
    count: int


class IdeologyStats(_CamelModel):
    total: int
    by_ideology: Dict[str, int]


class Message(_CamelModel):
    message: str


class Choice(_CamelModel):
    value: str
    label: str


class FormOptions(_CamelModel):
    ideologies: List[Choice]
    colors: List[Choice]
