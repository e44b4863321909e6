from pydantic import BaseModel, Field, AliasChoices
from typing import List, Optional

from explorer.schemas.common import ListMeta, RootsMeta
from explorer.schemas.file import FileOut
from explorer.utils.validation import MAX_ID


class FolderCreate(BaseModel):
    name: Optional[str] = None
    parent_id: Optional[int] = Field(
        default=None, le=MAX_ID, validation_alias=AliasChoices("parentId", "parent_id")
    )


class FolderUpdate(BaseModel):
    # An explicit null parentId moves the folder to the root level, so callers
    # must check model_fields_set rather than the value itself.
    name: Optional[str] = None
    parent_id: Optional[int] = Field(
        default=None, le=MAX_ID, validation_alias=AliasChoices("parentId", "parent_id")
    )


class FolderOut(BaseModel):
    id: int
    name: str
    parent_id: Optional[int] = Field(default=None, alias="parentId")

    class Config:
        from_attributes = True
        populate_by_name = True
        frozen = True


class FolderResponse(BaseModel):
    folder: FolderOut


class RootFoldersResponse(BaseModel):
    folders: List[FolderOut]
    meta: RootsMeta


class FolderContentsResponse(BaseModel):
    folders: List[FolderOut]
    files: List[FileOut]
    meta: Optional[ListMeta] = None
