from pydantic import AfterValidator, BaseModel, PlainSerializer
from typing import Annotated, Optional
from datetime import datetime, timezone
from decimal import Decimal


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Decimals travel as JSON numbers and are kept exact in Python.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

# Each entity has a Base (the shared scalar fields), a Create used as the
# request body for both POST and PUT, and an Out returned to clients.
# ``id`` on Create is ignored by POST and must match the path on PUT.


class ProjectBase(BaseModel):
    name: str
    budget: Money = Decimal("0")
    start_date: Optional[UtcDatetime] = None
    end_date: Optional[UtcDatetime] = None
    status: str = ""

class ProjectCreate(ProjectBase):
    id: Optional[int] = None

class ProjectOut(ProjectBase):
    id: int
    class Config:
        from_attributes = True


class TaskBase(BaseModel):
    name: str
    description: str = ""
    start_date: Optional[UtcDatetime] = None
    end_date: Optional[UtcDatetime] = None
    status: str = ""

class TaskCreate(TaskBase):
    id: Optional[int] = None
    project_id: Optional[int] = None

class TaskOut(TaskBase):
    id: int
    project_id: int
    class Config:
        from_attributes = True


class EmployeeBase(BaseModel):
    first_name: str
    last_name: str
    role: str = ""
    project_id: int

class EmployeeCreate(EmployeeBase):
    id: Optional[int] = None

class EmployeeOut(EmployeeBase):
    id: int
    class Config:
        from_attributes = True


class ResourceBase(BaseModel):
    name: str
    description: str = ""
    quantity: int = 0
    unit_cost: Money = Decimal("0")

class ResourceCreate(ResourceBase):
    id: Optional[int] = None

class ResourceOut(ResourceBase):
    id: int
    class Config:
        from_attributes = True


class ResourceUsageBase(BaseModel):
    resource_id: int
    quantity_used: int = 0
    usage_date: Optional[UtcDatetime] = None

class ResourceUsageCreate(ResourceUsageBase):
    id: Optional[int] = None
    task_id: Optional[int] = None

class ResourceUsageOut(ResourceUsageBase):
    id: int
    task_id: int
    class Config:
        from_attributes = True


# AUTH
class LoginRequest(BaseModel):
    username: str
    password: str

class AuthResponse(BaseModel):
    username: str
    role: str
    token: str
