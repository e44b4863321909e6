from pydantic import BaseModel
from typing import List, Literal, Optional

from explorer.schemas.folder import FolderOut
from explorer.schemas.file import FileOut

SearchScope = Literal["folders", "files", "all"]
MatchMode = Literal["prefix", "contains"]


class SearchTotals(BaseModel):
    folders: int = 0
    files: int = 0


class SearchResult(BaseModel):
    folders: List[FolderOut]
    files: List[FileOut]
    totals: SearchTotals

    class Config:
        frozen = True


class SearchMeta(BaseModel):
    query: str
    scope: SearchScope
    match: MatchMode
    limit: Optional[int] = None
    offset: int = 0
    total: SearchTotals


class SearchResponse(BaseModel):
    folders: List[FolderOut]
    files: List[FileOut]
    meta: SearchMeta
