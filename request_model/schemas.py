import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class StatusEnum(str, Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


class RequestBase(BaseModel):
    name: str
    email: str
    emp_id: str
    program: str
    program_time: Optional[str] = None
    request_date: datetime.date
    loan_type: Optional[str] = None
    amount: Optional[Decimal] = None
    reason: Optional[str] = None


class RequestCreate(RequestBase):
    pass


class Request(RequestBase):
    id: int
    status: StatusEnum
    document_path: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class StatusUpdate(BaseModel):
    status: Optional[str] = None
