from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query

from dashquery.config import Settings, get_settings
from dashquery.core import logger
from dashquery.database import SQLStore, get_sql_store
from dashquery.errors import DashQueryError
from dashquery.routes.auth import require_auth
from dashquery.services.auth import SignedInUser
from dashquery.services.query_history import (
    CreateQueryInQueryHistoryCommand,
    PatchQueryCommentInQueryHistoryCommand,
    QueryHistoryService,
    SearchInQueryHistoryQuery,
)

router = APIRouter(prefix="/api/query-history", tags=["query-history"])


def get_query_history_service(
    settings: Settings = Depends(get_settings),
    store: SQLStore = Depends(get_sql_store),
) -> QueryHistoryService:
    return QueryHistoryService(store, default_limit=settings.query_history_default_limit)


@router.post("")
async def create_query(
    cmd: CreateQueryInQueryHistoryCommand,
    current_user: SignedInUser = Depends(require_auth),
    service: QueryHistoryService = Depends(get_query_history_service),
):
    """Add a query to the user's query history."""
    try:
        dto = service.create_query(current_user, cmd)
        return {"result": dto.model_dump()}
    except DashQueryError:
        raise
    except Exception as e:
        logger.error(f"Failed to create query history entry: {e}")
        raise HTTPException(status_code=500, detail="Failed to add query to query history")


@router.get("")
async def search_queries(
    datasource_uid: List[str] = Query(default=[]),
    search_string: str = "",
    only_starred: bool = False,
    sort: str = "time-desc",
    page: int = Query(0, ge=0),
    limit: int = Query(0, ge=0, le=1000),
    current_user: SignedInUser = Depends(require_auth),
    service: QueryHistoryService = Depends(get_query_history_service),
):
    """Search the user's query history."""
    query = SearchInQueryHistoryQuery(
        datasource_uids=datasource_uid,
        search_string=search_string,
        only_starred=only_starred,
        sort=sort,
        page=page,
        limit=limit,
    )
    try:
        results = service.search_queries(current_user, query)
        return {"result": {"query_history": [dto.model_dump() for dto in results]}}
    except DashQueryError:
        raise
    except Exception as e:
        logger.error(f"Failed to search query history: {e}")
        raise HTTPException(status_code=500, detail="Failed to get query history")


@router.delete("/{uid}")
async def delete_query(
    uid: str,
    current_user: SignedInUser = Depends(require_auth),
    service: QueryHistoryService = Depends(get_query_history_service),
):
    """Delete a query (and its star) from the user's query history."""
    try:
        query_id = service.delete_query(current_user, uid)
        return {"message": "Query deleted", "id": query_id}
    except DashQueryError:
        raise
    except Exception as e:
        logger.error(f"Failed to delete query {uid}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete query from query history")


@router.patch("/{uid}")
async def patch_query_comment(
    uid: str,
    cmd: PatchQueryCommentInQueryHistoryCommand,
    current_user: SignedInUser = Depends(require_auth),
    service: QueryHistoryService = Depends(get_query_history_service),
):
    """Update the comment of a query."""
    try:
        dto = service.patch_query_comment(current_user, uid, cmd)
        return {"result": dto.model_dump()}
    except DashQueryError:
        raise
    except Exception as e:
        logger.error(f"Failed to update comment of query {uid}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update comment of query in query history")


@router.post("/star/{uid}")
async def star_query(
    uid: str,
    current_user: SignedInUser = Depends(require_auth),
    service: QueryHistoryService = Depends(get_query_history_service),
):
    try:
        dto = service.star_query(current_user, uid)
        return {"result": dto.model_dump()}
    except DashQueryError:
        raise
    except Exception as e:
        logger.error(f"Failed to star query {uid}: {e}")
        raise HTTPException(status_code=500, detail="Failed to star query in query history")


@router.delete("/star/{uid}")
async def unstar_query(
    uid: str,
    current_user: SignedInUser = Depends(require_auth),
    service: QueryHistoryService = Depends(get_query_history_service),
):
    try:
        dto = service.unstar_query(current_user, uid)
        return {"result": dto.model_dump()}
    except DashQueryError:
        raise
    except Exception as e:
        logger.error(f"Failed to unstar query {uid}: {e}")
        raise HTTPException(status_code=500, detail="Failed to unstar query in query history")
