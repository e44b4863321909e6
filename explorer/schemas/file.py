from pydantic import BaseModel, Field, AliasChoices
from typing import List, Optional

from explorer.schemas.common import ListMeta
from explorer.utils.validation import MAX_ID


class FileCreate(BaseModel):
    name: Optional[str] = None
    folder_id: Optional[int] = Field(
        default=None, le=MAX_ID, validation_alias=AliasChoices("folderId", "folder_id")
    )


class FileUpdate(BaseModel):
    name: Optional[str] = None
    folder_id: Optional[int] = Field(
        default=None, le=MAX_ID, validation_alias=AliasChoices("folderId", "folder_id")
    )


class FileOut(BaseModel):
    id: int
    name: str
    folder_id: int = Field(alias="folderId")

    class Config:
        from_attributes = True
        populate_by_name = True
        frozen = True


class FileResponse(BaseModel):
    file: FileOut


class FileListResponse(BaseModel):
    files: List[FileOut]
    meta: Optional[ListMeta] = None
