from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import Optional

from explorer.database import get_db
from explorer.errors import not_found
from explorer.schemas.common import ListMeta
from explorer.schemas.file import FileCreate, FileListResponse, FileResponse, FileUpdate
from explorer.services import file_service
from explorer.utils.cache import SimpleCache, get_cache
from explorer.utils.pagination import parse_pagination
from explorer.utils.validation import parse_id

router = APIRouter(prefix="/api/files", tags=["Files"])


@router.get("", response_model=FileListResponse, summary="List files")
async def list_files(
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    cache: SimpleCache = Depends(get_cache),
):
    pagination = parse_pagination(limit, offset)
    files = await file_service.list_all(db, cache, pagination)
    meta = ListMeta(limit=pagination.limit, offset=pagination.offset or 0) if pagination else None
    return FileListResponse(files=files, meta=meta)


@router.get("/{file_id}", response_model=FileResponse, summary="Get file details")
async def get_file(file_id: str, db: Session = Depends(get_db)):
    file = await file_service.get_by_id(db, parse_id(file_id, "file"))
    if file is None:
        raise not_found("File not found.")
    return FileResponse(file=file)


@router.post("", response_model=FileResponse, status_code=status.HTTP_201_CREATED, summary="Create file")
async def create_file(
    body: FileCreate,
    db: Session = Depends(get_db),
    cache: SimpleCache = Depends(get_cache),
):
    file = await file_service.create(db, cache, body)
    return FileResponse(file=file)


@router.put("/{file_id}", response_model=FileResponse, summary="Rename or move file")
async def update_file(
    file_id: str,
    body: FileUpdate,
    db: Session = Depends(get_db),
    cache: SimpleCache = Depends(get_cache),
):
    file = await file_service.update(db, cache, parse_id(file_id, "file"), body)
    return FileResponse(file=file)


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete file")
async def delete_file(
    file_id: str,
    db: Session = Depends(get_db),
    cache: SimpleCache = Depends(get_cache),
):
    await file_service.remove(db, cache, parse_id(file_id, "file"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
