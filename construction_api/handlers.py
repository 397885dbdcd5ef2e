"""
Generic CRUD routes.

``build_crud_router`` turns an ``Entity`` descriptor into the five standard
routes (list, get, create, replace, delete).  Reads are public; writes
require an Admin token, checked before the database is touched.  Path
parameter names follow the public URL layout (``/projects/{projectId}/tasks/{taskId}``)
and are bound through ``Path(alias=...)`` so the handler code stays the
same for every entity.
"""

from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, Path, Request, Response, status
from sqlalchemy.orm import Session

from . import crud
from .auth import require_admin
from .entities import Entity


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def _path_id(alias: str) -> Callable[..., int]:
    def dependency(value: int = Path(..., alias=alias)) -> int:
        return value
    return dependency


def _no_parent() -> None:
    return None


def build_crud_router(
    entity: Entity,
    prefix: str,
    item_param: str = "id",
    parent_param: Optional[str] = None,
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[entity.key])

    out_schema = entity.out_schema
    create_schema = entity.create_schema
    parent_id_dep = _path_id(parent_param) if parent_param else _no_parent
    item_id_dep = _path_id(item_param)
    get_route_name = f"get_{entity.key}"

    def _location(request: Request, row, parent_id: Optional[int]) -> str:
        params = {item_param: row.id}
        if parent_param:
            params[parent_param] = parent_id
        return str(request.url_for(get_route_name, **params))

    @router.get("", response_model=List[out_schema], name=f"list_{entity.key}")
    def list_items(
        parent_id: Optional[int] = Depends(parent_id_dep),
        db: Session = Depends(get_db),
    ):
        rows = crud.list_all(db, entity, parent_id)
        return [entity.to_dto(row) for row in rows]

    @router.get(f"/{{{item_param}}}", response_model=out_schema, name=get_route_name)
    def get_item(
        item_id: int = Depends(item_id_dep),
        parent_id: Optional[int] = Depends(parent_id_dep),
        db: Session = Depends(get_db),
    ):
        return entity.to_dto(crud.get_by_id(db, entity, item_id, parent_id))

    @router.post(
        "",
        response_model=out_schema,
        status_code=status.HTTP_201_CREATED,
        dependencies=[Depends(require_admin)],
        name=f"create_{entity.key}",
    )
    def create_item(
        payload: create_schema,
        request: Request,
        response: Response,
        parent_id: Optional[int] = Depends(parent_id_dep),
        db: Session = Depends(get_db),
    ):
        row = crud.create(db, entity, payload, parent_id)
        response.headers["Location"] = _location(request, row, parent_id)
        return entity.to_dto(row)

    @router.put(
        f"/{{{item_param}}}",
        status_code=status.HTTP_204_NO_CONTENT,
        dependencies=[Depends(require_admin)],
        name=f"replace_{entity.key}",
    )
    def replace_item(
        payload: create_schema,
        item_id: int = Depends(item_id_dep),
        parent_id: Optional[int] = Depends(parent_id_dep),
        db: Session = Depends(get_db),
    ):
        crud.replace(db, entity, item_id, payload, parent_id)
        return None

    @router.delete(
        f"/{{{item_param}}}",
        status_code=status.HTTP_204_NO_CONTENT,
        dependencies=[Depends(require_admin)],
        name=f"delete_{entity.key}",
    )
    def delete_item(
        item_id: int = Depends(item_id_dep),
        parent_id: Optional[int] = Depends(parent_id_dep),
        db: Session = Depends(get_db),
    ):
        crud.delete(db, entity, item_id, parent_id)
        return None

    return router
