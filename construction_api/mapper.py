"""
Conversion between ORM rows and their transfer schemas.

Every mapping is a plain field-for-field copy: no renames, no derived
values.  ``id`` never flows from a request body into a row; the database
assigns it on insert and it is preserved on update.
"""

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel

from . import models, schemas

DtoT = TypeVar("DtoT", bound=BaseModel)
ModelT = TypeVar("ModelT")

IGNORED_FIELDS = {"id"}


def dto_fields(dto: BaseModel) -> Dict[str, Any]:
    return dto.model_dump(exclude=IGNORED_FIELDS)


def to_dto(row: Any, schema: Type[DtoT]) -> DtoT:
    return schema.model_validate(row)


def from_dto(dto: BaseModel, model: Type[ModelT]) -> ModelT:
    return model(**dto_fields(dto))


def apply_dto(dto: BaseModel, row: ModelT) -> ModelT:
    """Overlay every submitted scalar onto ``row`` in place.

    Relationship attributes and the primary key are left untouched, so the
    row keeps its identity in the session.
    """
    for field, value in dto_fields(dto).items():
        setattr(row, field, value)
    return row


# Per-entity conversions.

def project_to_dto(row: models.Project) -> schemas.ProjectOut:
    return to_dto(row, schemas.ProjectOut)

def project_from_dto(dto: schemas.ProjectCreate) -> models.Project:
    return from_dto(dto, models.Project)


def task_to_dto(row: models.Task) -> schemas.TaskOut:
    return to_dto(row, schemas.TaskOut)

def task_from_dto(dto: schemas.TaskCreate) -> models.Task:
    return from_dto(dto, models.Task)


def employee_to_dto(row: models.Employee) -> schemas.EmployeeOut:
    return to_dto(row, schemas.EmployeeOut)

def employee_from_dto(dto: schemas.EmployeeCreate) -> models.Employee:
    return from_dto(dto, models.Employee)


def resource_to_dto(row: models.Resource) -> schemas.ResourceOut:
    return to_dto(row, schemas.ResourceOut)

def resource_from_dto(dto: schemas.ResourceCreate) -> models.Resource:
    return from_dto(dto, models.Resource)


def resource_usage_to_dto(row: models.ResourceUsage) -> schemas.ResourceUsageOut:
    return to_dto(row, schemas.ResourceUsageOut)

def resource_usage_from_dto(dto: schemas.ResourceUsageCreate) -> models.ResourceUsage:
    return from_dto(dto, models.ResourceUsage)
