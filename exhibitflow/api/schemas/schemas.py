from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from exhibitflow.domain.state_machine import StallSize, StallStatus


class CreateStallRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    code: str = Field(min_length=1, max_length=32)
    size: StallSize
    location: str = Field(min_length=1, max_length=128)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)


class UpdateStallRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    location: str | None = Field(default=None, min_length=1, max_length=128)
    price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    size: StallSize | None = None


class StallResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    size: StallSize
    location: str
    price: Decimal
    status: StallStatus
    created_at: datetime
    updated_at: datetime


class StallPageResponse(BaseModel):
    content: list[StallResponse]
    page: int
    size: int
    total_elements: int
    total_pages: int


class OutboxEventResponse(BaseModel):
    id: str
    aggregate_type: str
    aggregate_id: str
    event_type: str
    payload: str
    status: str
    attempts: int
    created_at: str
