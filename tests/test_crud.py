from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from construction_api import crud, models, schemas
from construction_api.entities import EMPLOYEE, PROJECT, RESOURCE, RESOURCE_USAGE, TASK
from construction_api.errors import IdMismatchError, NotFoundError, PersistenceError


def _project_payload(**overrides) -> schemas.ProjectCreate:
    data = dict(
        name="Riverside Tower",
        budget=Decimal("1250000.50"),
        start_date=datetime(2024, 3, 1),
        end_date=datetime(2025, 9, 30),
        status="Planned",
    )
    data.update(overrides)
    return schemas.ProjectCreate(**data)


def _task_payload(**overrides) -> schemas.TaskCreate:
    data = dict(name="Pour foundation", description="Level 0 slab", status="Open")
    data.update(overrides)
    return schemas.TaskCreate(**data)


@pytest.fixture()
def project(db):
    return crud.create(db, PROJECT, _project_payload())


@pytest.fixture()
def task(db, project):
    return crud.create(db, TASK, _task_payload(), parent_id=project.id)


@pytest.fixture()
def resource(db):
    payload = schemas.ResourceCreate(name="Rebar", description="12mm", quantity=400, unit_cost=Decimal("3.75"))
    return crud.create(db, RESOURCE, payload)


# --- Create / read ---------------------------------------------------------

def test_create_assigns_id_and_round_trips(db):
    payload = _project_payload()
    row = crud.create(db, PROJECT, payload)

    assert row.id is not None
    fetched = PROJECT.to_dto(crud.get_by_id(db, PROJECT, row.id))
    assert fetched.id == row.id
    assert fetched.model_dump(exclude={"id"}) == payload.model_dump(exclude={"id"})


def test_create_ignores_id_in_body(db):
    row = crud.create(db, PROJECT, _project_payload(id=999))
    assert row.id != 999


def test_list_all_returns_every_row(db):
    first = crud.create(db, PROJECT, _project_payload(name="A"))
    second = crud.create(db, PROJECT, _project_payload(name="B"))
    assert [p.id for p in crud.list_all(db, PROJECT)] == [first.id, second.id]


def test_get_missing_raises_not_found(db):
    with pytest.raises(NotFoundError):
        crud.get_by_id(db, PROJECT, 12345)


def test_decimal_keeps_digits_beyond_cents(db):
    payload = schemas.ResourceCreate(name="Anchor bolt", quantity=1200, unit_cost=Decimal("12.345"))
    row = crud.create(db, RESOURCE, payload)

    db.expire_all()
    assert crud.get_by_id(db, RESOURCE, row.id).unit_cost == Decimal("12.345")


def test_offset_datetimes_are_stored_as_utc(db):
    start = datetime.fromisoformat("2024-01-01T05:00:00+05:00")
    row = crud.create(db, PROJECT, _project_payload(start_date=start))

    db.expire_all()
    stored = crud.get_by_id(db, PROJECT, row.id).start_date
    assert stored == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert stored.utcoffset().total_seconds() == 0


# --- Nested entities -------------------------------------------------------

def test_task_takes_parent_from_path(db, project):
    row = crud.create(db, TASK, _task_payload(project_id=777), parent_id=project.id)
    assert row.project_id == project.id


def test_task_under_missing_project_is_not_persisted(db):
    with pytest.raises(NotFoundError, match="Project with ID 42 not found"):
        crud.create(db, TASK, _task_payload(), parent_id=42)
    assert db.query(models.Task).count() == 0


def test_task_lookup_is_scoped_to_parent(db, project, task):
    other = crud.create(db, PROJECT, _project_payload(name="Other"))
    with pytest.raises(NotFoundError):
        crud.get_by_id(db, TASK, task.id, parent_id=other.id)
    assert crud.list_all(db, TASK, parent_id=other.id) == []
    assert [t.id for t in crud.list_all(db, TASK, parent_id=project.id)] == [task.id]


def test_usage_under_missing_task_fails_even_with_bad_resource(db):
    payload = schemas.ResourceUsageCreate(resource_id=555, quantity_used=3)
    with pytest.raises(NotFoundError, match="Task with ID 9 not found"):
        crud.create(db, RESOURCE_USAGE, payload, parent_id=9)
    assert db.query(models.ResourceUsage).count() == 0


def test_usage_with_missing_resource_is_rejected(db, task):
    payload = schemas.ResourceUsageCreate(resource_id=555, quantity_used=3)
    with pytest.raises(NotFoundError, match="Resource with ID 555 not found"):
        crud.create(db, RESOURCE_USAGE, payload, parent_id=task.id)


def test_usage_create(db, task, resource):
    payload = schemas.ResourceUsageCreate(resource_id=resource.id, quantity_used=25, usage_date=datetime(2024, 4, 2))
    row = crud.create(db, RESOURCE_USAGE, payload, parent_id=task.id)
    assert row.task_id == task.id
    assert row.resource_id == resource.id
    assert row.quantity_used == 25


def test_employee_with_missing_project_is_rejected(db):
    payload = schemas.EmployeeCreate(first_name="Ana", last_name="Ruiz", role="Foreman", project_id=8)
    with pytest.raises(NotFoundError, match="Project with ID 8 not found"):
        crud.create(db, EMPLOYEE, payload)


# --- Replace ---------------------------------------------------------------

def test_replace_overwrites_all_fields(db, project):
    payload = _project_payload(id=project.id, name="Riverside Tower II", budget=Decimal("99"), status="Active")
    crud.replace(db, PROJECT, project.id, payload)

    fetched = PROJECT.to_dto(crud.get_by_id(db, PROJECT, project.id))
    assert fetched.name == "Riverside Tower II"
    assert fetched.budget == Decimal("99")
    assert fetched.status == "Active"


def test_replace_with_mismatched_id_does_not_mutate(db, project):
    payload = _project_payload(id=project.id + 1, name="Changed")
    with pytest.raises(IdMismatchError):
        crud.replace(db, PROJECT, project.id, payload)

    db.expire_all()
    assert crud.get_by_id(db, PROJECT, project.id).name == "Riverside Tower"


def test_replace_checks_mismatch_before_existence(db):
    with pytest.raises(IdMismatchError):
        crud.replace(db, PROJECT, 1000, _project_payload(id=1001))


def test_replace_missing_raises_not_found(db):
    with pytest.raises(NotFoundError):
        crud.replace(db, PROJECT, 1000, _project_payload(id=1000))


def test_replace_task_with_mismatched_id_does_not_mutate(db, project, task):
    payload = _task_payload(id=task.id + 1, name="Strip formwork", status="Done")
    with pytest.raises(IdMismatchError):
        crud.replace(db, TASK, task.id, payload, parent_id=project.id)

    db.expire_all()
    stored = crud.get_by_id(db, TASK, task.id, parent_id=project.id)
    assert (stored.name, stored.status) == ("Pour foundation", "Open")


def test_replace_usage_with_mismatched_id_does_not_mutate(db, task, resource):
    usage = crud.create(
        db, RESOURCE_USAGE, schemas.ResourceUsageCreate(resource_id=resource.id, quantity_used=5), parent_id=task.id
    )
    payload = schemas.ResourceUsageCreate(id=usage.id + 1, resource_id=resource.id, quantity_used=50)
    with pytest.raises(IdMismatchError):
        crud.replace(db, RESOURCE_USAGE, usage.id, payload, parent_id=task.id)

    db.expire_all()
    assert crud.get_by_id(db, RESOURCE_USAGE, usage.id, parent_id=task.id).quantity_used == 5


def test_replace_task_keeps_parent(db, project, task):
    payload = _task_payload(id=task.id, name="Pour slab", project_id=None)
    row = crud.replace(db, TASK, task.id, payload, parent_id=project.id)
    assert row.project_id == project.id
    assert row.name == "Pour slab"


# --- Delete ----------------------------------------------------------------

def test_delete_then_get_is_not_found(db, project):
    crud.delete(db, PROJECT, project.id)
    with pytest.raises(NotFoundError):
        crud.get_by_id(db, PROJECT, project.id)


def test_delete_missing_raises_not_found(db):
    with pytest.raises(NotFoundError):
        crud.delete(db, RESOURCE, 31337)


def test_delete_project_removes_dependents(db, project, task, resource):
    crud.create(
        db, EMPLOYEE,
        schemas.EmployeeCreate(first_name="Ana", last_name="Ruiz", role="Foreman", project_id=project.id),
    )
    crud.create(db, RESOURCE_USAGE, schemas.ResourceUsageCreate(resource_id=resource.id, quantity_used=1), parent_id=task.id)

    crud.delete(db, PROJECT, project.id)

    assert db.query(models.Task).count() == 0
    assert db.query(models.Employee).count() == 0
    assert db.query(models.ResourceUsage).count() == 0
    assert db.query(models.Resource).count() == 1


# --- Storage failures ------------------------------------------------------

def test_storage_failure_becomes_persistence_error(db, monkeypatch):
    def boom(self):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Session, "commit", boom)
    with pytest.raises(PersistenceError) as excinfo:
        crud.create(db, PROJECT, _project_payload())
    assert excinfo.value.detail == "Internal server error"
