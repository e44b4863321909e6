"""
Folder API endpoints: listing for the lazy tree, CRUD and cascading delete.
"""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import Optional

from explorer.database import get_db
from explorer.errors import not_found
from explorer.schemas.common import ListMeta, RootsMeta
from explorer.schemas.folder import (
    FolderContentsResponse,
    FolderCreate,
    FolderResponse,
    FolderUpdate,
    RootFoldersResponse,
)
from explorer.services import file_service, folder_service
from explorer.utils.cache import SimpleCache, get_cache
from explorer.utils.pagination import parse_pagination
from explorer.utils.validation import parse_id

router = APIRouter(prefix="/api/folders", tags=["Folders"])

CHILD_TYPES = ("all", "folders", "files")


@router.get("/roots", response_model=RootFoldersResponse, summary="List root folders")
async def list_root_folders(
    limit: Optional[str] = Query(None, description="Page size (1-1000)"),
    offset: Optional[str] = Query(None, description="Number of folders to skip"),
    db: Session = Depends(get_db),
    cache: SimpleCache = Depends(get_cache),
):
    """
    List folders without a parent, the entry point of the lazy tree.

    `meta.total` is the number of root folders regardless of pagination.
    """
    pagination = parse_pagination(limit, offset)
    folders = await folder_service.list_roots(db, cache, pagination)
    total = await folder_service.count_roots(db, cache)
    return RootFoldersResponse(
        folders=folders,
        meta=RootsMeta(
            total=total,
            limit=pagination.limit if pagination else None,
            offset=(pagination.offset or 0) if pagination else 0,
        ),
    )


@router.get("", response_model=FolderContentsResponse, summary="List all folders and files")
async def list_folders(
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    cache: SimpleCache = Depends(get_cache),
):
    pagination = parse_pagination(limit, offset)
    contents = await folder_service.list_with_files(db, cache, pagination)
    meta = ListMeta(limit=pagination.limit, offset=pagination.offset or 0) if pagination else None
    return FolderContentsResponse(folders=contents["folders"], files=contents["files"], meta=meta)


@router.get("/{folder_id}", response_model=FolderResponse, summary="Get folder details")
async def get_folder(folder_id: str, db: Session = Depends(get_db)):
    folder = await folder_service.get_by_id(db, parse_id(folder_id, "folder"))
    if folder is None:
        raise not_found("Folder not found.")
    return FolderResponse(folder=folder)


@router.get("/{folder_id}/children", response_model=FolderContentsResponse, summary="List folder contents")
async def list_folder_children(
    folder_id: str,
    type: Optional[str] = Query(None, description="'all', 'folders' or 'files'"),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    cache: SimpleCache = Depends(get_cache),
):
    """
    List the direct child folders and/or files of a folder.

    An unrecognised `type` lists both.
    """
    parent_id = parse_id(folder_id, "folder")
    child_type = type if type in CHILD_TYPES else "all"
    pagination = parse_pagination(limit, offset)

    if await folder_service.get_by_id(db, parent_id) is None:
        raise not_found("Folder not found.")

    folders = [] if child_type == "files" else await folder_service.list_children(db, cache, parent_id, pagination)
    files = [] if child_type == "folders" else await file_service.list_by_folder_id(db, cache, parent_id, pagination)
    meta = ListMeta(limit=pagination.limit, offset=pagination.offset or 0) if pagination else None
    return FolderContentsResponse(folders=folders, files=files, meta=meta)


@router.post("", response_model=FolderResponse, status_code=status.HTTP_201_CREATED, summary="Create folder")
async def create_folder(
    body: FolderCreate,
    db: Session = Depends(get_db),
    cache: SimpleCache = Depends(get_cache),
):
    folder = await folder_service.create(db, cache, body)
    return FolderResponse(folder=folder)


@router.put("/{folder_id}", response_model=FolderResponse, summary="Rename or move folder")
async def update_folder(
    folder_id: str,
    body: FolderUpdate,
    db: Session = Depends(get_db),
    cache: SimpleCache = Depends(get_cache),
):
    """
    Rename a folder and/or change its parent.

    Raises:
        400: No changes, self-parenting or a circular reference
        404: Folder or new parent not found
    """
    folder = await folder_service.update(db, cache, parse_id(folder_id, "folder"), body)
    return FolderResponse(folder=folder)


@router.delete("/{folder_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete folder and contents")
async def delete_folder(
    folder_id: str,
    db: Session = Depends(get_db),
    cache: SimpleCache = Depends(get_cache),
):
    await folder_service.remove(db, cache, parse_id(folder_id, "folder"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
