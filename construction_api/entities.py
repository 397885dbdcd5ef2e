"""
Descriptors for the five entity types.

An ``Entity`` bundles everything the generic data access and routing code
needs to know about a record type: its ORM model, its transfer schemas
and conversion functions, which entity (if any) it is nested under in the
URL, and which other foreign keys must point at existing rows.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple, Type

from pydantic import BaseModel

from . import mapper, models, schemas


@dataclass(frozen=True)
class Entity:
    name: str
    key: str
    model: Type[Any]
    create_schema: Type[BaseModel]
    out_schema: Type[BaseModel]
    to_dto: Callable[[Any], BaseModel]
    from_dto: Callable[[BaseModel], Any]
    # Nesting: the entity this one lives under in the URL, and the column
    # on this model holding the parent's id.
    parent: Optional["Entity"] = None
    parent_field: Optional[str] = None
    # Foreign keys that are not the route parent: (column, referenced entity).
    references: Tuple[Tuple[str, "Entity"], ...] = field(default_factory=tuple)

    def apply(self, dto: BaseModel, row: Any) -> Any:
        return mapper.apply_dto(dto, row)

    @property
    def is_nested(self) -> bool:
        return self.parent is not None


PROJECT = Entity(
    name="Project",
    key="project",
    model=models.Project,
    create_schema=schemas.ProjectCreate,
    out_schema=schemas.ProjectOut,
    to_dto=mapper.project_to_dto,
    from_dto=mapper.project_from_dto,
)

TASK = Entity(
    name="Task",
    key="task",
    model=models.Task,
    create_schema=schemas.TaskCreate,
    out_schema=schemas.TaskOut,
    to_dto=mapper.task_to_dto,
    from_dto=mapper.task_from_dto,
    parent=PROJECT,
    parent_field="project_id",
)

EMPLOYEE = Entity(
    name="Employee",
    key="employee",
    model=models.Employee,
    create_schema=schemas.EmployeeCreate,
    out_schema=schemas.EmployeeOut,
    to_dto=mapper.employee_to_dto,
    from_dto=mapper.employee_from_dto,
    references=(("project_id", PROJECT),),
)

RESOURCE = Entity(
    name="Resource",
    key="resource",
    model=models.Resource,
    create_schema=schemas.ResourceCreate,
    out_schema=schemas.ResourceOut,
    to_dto=mapper.resource_to_dto,
    from_dto=mapper.resource_from_dto,
)

RESOURCE_USAGE = Entity(
    name="Resource usage",
    key="resource_usage",
    model=models.ResourceUsage,
    create_schema=schemas.ResourceUsageCreate,
    out_schema=schemas.ResourceUsageOut,
    to_dto=mapper.resource_usage_to_dto,
    from_dto=mapper.resource_usage_from_dto,
    parent=TASK,
    parent_field="task_id",
    references=(("resource_id", RESOURCE),),
)
