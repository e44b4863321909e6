"""
File services. Files are metadata records that always belong to a folder.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from explorer.errors import bad_request, not_found
from explorer.models.file import File
from explorer.models.folder import Folder
from explorer.schemas.file import FileCreate, FileOut, FileUpdate
from explorer.utils.cache import SimpleCache
from explorer.utils.pagination import Pagination, apply_pagination, cache_suffix
from explorer.utils.validation import normalize_name

logger = logging.getLogger(__name__)


def _snapshot(rows) -> List[FileOut]:
    return [FileOut.model_validate(row) for row in rows]


def _require_folder(db: Session, folder_id: Optional[int]) -> None:
    if folder_id is None or folder_id <= 0:
        raise bad_request("Invalid folder id.")
    if db.get(Folder, folder_id) is None:
        raise not_found("Folder not found.")


async def list_all(db: Session, cache: SimpleCache, pagination: Optional[Pagination] = None) -> List[FileOut]:
    async def load():
        query = db.query(File).order_by(File.name, File.id)
        return _snapshot(apply_pagination(query, pagination).all())

    return await cache.get_or_set(f"files:all:{cache_suffix(pagination)}", load)


async def list_by_folder_id(
    db: Session,
    cache: SimpleCache,
    folder_id: int,
    pagination: Optional[Pagination] = None,
) -> List[FileOut]:
    async def load():
        query = db.query(File).filter(File.folder_id == folder_id).order_by(File.name, File.id)
        return _snapshot(apply_pagination(query, pagination).all())

    return await cache.get_or_set(f"files:folder:{folder_id}:{cache_suffix(pagination)}", load)


async def get_by_id(db: Session, file_id: int) -> Optional[FileOut]:
    file = db.get(File, file_id)
    return FileOut.model_validate(file) if file else None


async def create(db: Session, cache: SimpleCache, data: FileCreate) -> FileOut:
    """
    Create a file inside an existing folder.

    Raises:
        ApiError: 400 for a blank name or missing folder id, 404 if the folder
            does not exist (no row is created)
    """
    name = normalize_name(data.name, "File")
    _require_folder(db, data.folder_id)

    file = File(name=name, folder_id=data.folder_id)
    db.add(file)
    db.commit()
    db.refresh(file)
    cache.clear()

    logger.info(f"Created file {file.id} ({file.name!r}) in folder {file.folder_id}")
    return FileOut.model_validate(file)


async def update(db: Session, cache: SimpleCache, file_id: int, data: FileUpdate) -> FileOut:
    """Rename a file and/or move it to another folder."""
    rename = data.name is not None
    move = "folder_id" in data.model_fields_set
    if not rename and not move:
        raise bad_request("No updates provided.")

    file = db.get(File, file_id)
    if file is None:
        raise not_found("File not found.")

    name = normalize_name(data.name, "File") if rename else None
    if move:
        _require_folder(db, data.folder_id)

    if rename:
        file.name = name
    if move:
        file.folder_id = data.folder_id
    db.commit()
    db.refresh(file)
    cache.clear()

    logger.info(f"Updated file {file.id}: name={file.name!r} folder={file.folder_id}")
    return FileOut.model_validate(file)


async def remove(db: Session, cache: SimpleCache, file_id: int) -> None:
    file = db.get(File, file_id)
    if file is None:
        raise not_found("File not found.")

    db.delete(file)
    db.commit()
    cache.clear()
    logger.info(f"Deleted file {file_id}")
