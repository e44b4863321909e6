from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from explorer.database import get_db
from explorer.errors import bad_request
from explorer.schemas.search import SearchMeta, SearchResponse
from explorer.services import search_service
from explorer.utils.cache import SimpleCache, get_cache
from explorer.utils.pagination import parse_pagination

router = APIRouter(prefix="/api", tags=["Search"])


@router.get("/search", response_model=SearchResponse, summary="Search folders and files by name")
async def search(
    q: Optional[str] = Query(None, description="Text to look for (case-insensitive)"),
    scope: str = Query("all", description="'folders', 'files' or 'all'"),
    match: str = Query("prefix", description="'prefix' or 'contains'"),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    cache: SimpleCache = Depends(get_cache),
):
    """
    Search folders and/or files by name.

    `meta.total` always reports both types; a type outside the scope has a
    total of 0.
    """
    query = (q or "").strip()
    if not query:
        raise bad_request("Search query is required.")
    if scope not in search_service.SEARCH_SCOPES:
        raise bad_request(f"scope must be one of: {', '.join(search_service.SEARCH_SCOPES)}.")
    if match not in search_service.MATCH_MODES:
        raise bad_request(f"match must be one of: {', '.join(search_service.MATCH_MODES)}.")

    pagination = parse_pagination(limit, offset)
    result = await search_service.search(db, cache, query, scope, match, pagination)

    return SearchResponse(
        folders=result.folders,
        files=result.files,
        meta=SearchMeta(
            query=query,
            scope=scope,
            match=match,
            limit=pagination.limit if pagination else None,
            offset=(pagination.offset or 0) if pagination else 0,
            total=result.totals,
        ),
    )
