"""
Name search across folders and files.
"""
from typing import Optional, Type

from sqlalchemy.orm import Session

from explorer.models.file import File
from explorer.models.folder import Folder
from explorer.schemas.file import FileOut
from explorer.schemas.folder import FolderOut
from explorer.schemas.search import MatchMode, SearchResult, SearchScope, SearchTotals
from explorer.utils.cache import SimpleCache
from explorer.utils.pagination import Pagination, apply_pagination, cache_suffix

SEARCH_SCOPES = ("folders", "files", "all")
MATCH_MODES = ("prefix", "contains")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_name_filter(model: Type, query: str, match: MatchMode):
    """Case-insensitive LIKE filter on `model.name`."""
    pattern = _escape_like(query)
    pattern = f"%{pattern}%" if match == "contains" else f"{pattern}%"
    return model.name.ilike(pattern, escape="\\")


async def search(
    db: Session,
    cache: SimpleCache,
    query: str,
    scope: SearchScope = "all",
    match: MatchMode = "prefix",
    pagination: Optional[Pagination] = None,
) -> SearchResult:
    """
    Search folders and/or files by name.

    Each entity type is paginated independently. Totals count every match,
    ignoring pagination; a type outside `scope` gets an empty list and a
    total of 0.

    Args:
        db: Database session
        cache: Read cache
        query: Non-empty search text
        scope: 'folders', 'files' or 'all'
        match: 'prefix' or 'contains'
        pagination: Optional limit/offset applied per entity type

    Returns:
        SearchResult with the matching page and totals per type
    """
    cache_key = f"search:{scope}:{match}:{query}:{cache_suffix(pagination)}"

    async def load():
        folders, files = [], []
        folder_total = file_total = 0

        if scope != "files":
            folder_query = db.query(Folder).filter(build_name_filter(Folder, query, match))
            folder_total = folder_query.count()
            rows = apply_pagination(folder_query.order_by(Folder.name, Folder.id), pagination).all()
            folders = [FolderOut.model_validate(row) for row in rows]

        if scope != "folders":
            file_query = db.query(File).filter(build_name_filter(File, query, match))
            file_total = file_query.count()
            rows = apply_pagination(file_query.order_by(File.name, File.id), pagination).all()
            files = [FileOut.model_validate(row) for row in rows]

        return SearchResult(
            folders=folders,
            files=files,
            totals=SearchTotals(folders=folder_total, files=file_total),
        )

    return await cache.get_or_set(cache_key, load)
