import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from geoattend.core.deps import require_admin
from geoattend.schemas.users import Aggregates, UserQuery, UserQueryResult, UsersExportRequest, UsersPage
from geoattend.services.appwrite import AppwriteError
from geoattend.services.user_directory import fetch_all_users, fetch_users_page
from geoattend.services.user_query import InvalidArgument, aggregate, evaluate, select
from geoattend.services.users_export import build_users_csv, export_filename

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_directory() -> list[dict]:
    try:
        return fetch_all_users()
    except AppwriteError:
        logger.exception("user directory fetch failed")
        raise HTTPException(status_code=500, detail="Failed to fetch users")


@router.get("", response_model=UsersPage)
def list_users(
    page: int = Query(default=1),
    limit: int = Query(default=50),
    admin: dict = Depends(require_admin),
):
    try:
        return fetch_users_page(page=page, limit=limit)
    except AppwriteError:
        logger.exception("user directory page fetch failed")
        raise HTTPException(status_code=500, detail="Failed to fetch users")


@router.post("/query", response_model=UserQueryResult, response_model_by_alias=True)
def query_users(uq: UserQuery, admin: dict = Depends(require_admin)):
    users = _load_directory()
    try:
        return evaluate(users, uq)
    except InvalidArgument as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/stats", response_model=Aggregates, response_model_by_alias=True)
def users_stats(admin: dict = Depends(require_admin)):
    return aggregate(_load_directory())


@router.post("/export")
def export_users(payload: UsersExportRequest, admin: dict = Depends(require_admin)):
    records = select(_load_directory(), payload.query)
    body = build_users_csv(records, payload.columns)
    headers = {"Content-Disposition": f'attachment; filename="{export_filename()}"'}
    return StreamingResponse(iter([body.encode("utf-8")]), media_type="text/csv; charset=utf-8", headers=headers)
