"""
Folder services: cached reads, validated create/update and cascading delete.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from explorer.errors import bad_request, not_found
from explorer.models.file import File
from explorer.models.folder import Folder
from explorer.schemas.file import FileOut
from explorer.schemas.folder import FolderCreate, FolderOut, FolderUpdate
from explorer.services import file_service
from explorer.services.hierarchy import collect_descendants, detects_cycle
from explorer.utils.cache import SimpleCache
from explorer.utils.pagination import Pagination, apply_pagination, cache_suffix
from explorer.utils.validation import normalize_name

logger = logging.getLogger(__name__)


def _ordered(query):
    return query.order_by(Folder.name, Folder.id)


def _snapshot(rows) -> List[FolderOut]:
    return [FolderOut.model_validate(row) for row in rows]


async def list_all(db: Session, cache: SimpleCache, pagination: Optional[Pagination] = None) -> List[FolderOut]:
    async def load():
        return _snapshot(apply_pagination(_ordered(db.query(Folder)), pagination).all())

    return await cache.get_or_set(f"folders:all:{cache_suffix(pagination)}", load)


async def list_roots(db: Session, cache: SimpleCache, pagination: Optional[Pagination] = None) -> List[FolderOut]:
    """List folders without a parent, ordered by name."""
    async def load():
        query = _ordered(db.query(Folder).filter(Folder.parent_id.is_(None)))
        return _snapshot(apply_pagination(query, pagination).all())

    return await cache.get_or_set(f"folders:roots:{cache_suffix(pagination)}", load)


async def count_roots(db: Session, cache: SimpleCache) -> int:
    async def load():
        return db.query(Folder).filter(Folder.parent_id.is_(None)).count()

    return await cache.get_or_set("folders:roots:count", load)


async def list_children(
    db: Session,
    cache: SimpleCache,
    parent_id: int,
    pagination: Optional[Pagination] = None,
) -> List[FolderOut]:
    """List the direct child folders of `parent_id`."""
    async def load():
        query = _ordered(db.query(Folder).filter(Folder.parent_id == parent_id))
        return _snapshot(apply_pagination(query, pagination).all())

    return await cache.get_or_set(f"folders:children:{parent_id}:{cache_suffix(pagination)}", load)


async def get_by_id(db: Session, folder_id: int) -> Optional[FolderOut]:
    folder = db.get(Folder, folder_id)
    return FolderOut.model_validate(folder) if folder else None


async def list_with_files(
    db: Session,
    cache: SimpleCache,
    pagination: Optional[Pagination] = None,
) -> Dict[str, list]:
    """
    List folders and files together, used by the client's full-tree mode.

    The same pagination is applied to both lists independently.
    """
    folders = await list_all(db, cache, pagination)
    files: List[FileOut] = await file_service.list_all(db, cache, pagination)
    return {"folders": folders, "files": files}


def _get_parent_id(db: Session, folder_id: int) -> Optional[int]:
    return db.query(Folder.parent_id).filter(Folder.id == folder_id).scalar()


def would_create_cycle(db: Session, folder_id: int, new_parent_id: int) -> bool:
    return detects_cycle(folder_id, new_parent_id, lambda current: _get_parent_id(db, current))


def validate_reparent(db: Session, folder_id: int, new_parent_id: int) -> None:
    """
    Reject a parent change that would break the hierarchy.

    Raises:
        ApiError: 400 for self-parenting or a circular reference,
            404 if the new parent does not exist
    """
    if new_parent_id == folder_id:
        raise bad_request("Folder cannot be its own parent.")

    if db.get(Folder, new_parent_id) is None:
        raise not_found("Parent folder not found.")

    if would_create_cycle(db, folder_id, new_parent_id):
        logger.warning(f"Rejected moving folder {folder_id} under {new_parent_id}: circular reference")
        raise bad_request("This would create a circular reference.")


async def create(db: Session, cache: SimpleCache, data: FolderCreate) -> FolderOut:
    name = normalize_name(data.name, "Folder")

    if data.parent_id is not None and db.get(Folder, data.parent_id) is None:
        raise not_found("Parent folder not found.")

    folder = Folder(name=name, parent_id=data.parent_id)
    db.add(folder)
    db.commit()
    db.refresh(folder)
    cache.clear()

    logger.info(f"Created folder {folder.id} ({folder.name!r}) under {folder.parent_id}")
    return FolderOut.model_validate(folder)


async def update(db: Session, cache: SimpleCache, folder_id: int, data: FolderUpdate) -> FolderOut:
    """
    Rename and/or re-parent a folder.

    A `parentId` present in the payload is applied even when null, which moves
    the folder to the root level.
    """
    rename = data.name is not None
    reparent = "parent_id" in data.model_fields_set
    if not rename and not reparent:
        raise bad_request("No updates provided.")

    folder = db.get(Folder, folder_id)
    if folder is None:
        raise not_found("Folder not found.")

    name = normalize_name(data.name, "Folder") if rename else None
    if reparent and data.parent_id is not None:
        validate_reparent(db, folder_id, data.parent_id)

    if rename:
        folder.name = name
    if reparent:
        folder.parent_id = data.parent_id
    db.commit()
    db.refresh(folder)
    cache.clear()

    logger.info(f"Updated folder {folder.id}: name={folder.name!r} parent={folder.parent_id}")
    return FolderOut.model_validate(folder)


async def remove(db: Session, cache: SimpleCache, folder_id: int) -> Dict[str, int]:
    """
    Delete a folder together with its whole subtree and every file in it.

    Files and folders are removed in a single transaction; on failure the
    session is rolled back and nothing is deleted.

    Returns:
        Number of deleted folders and files
    """
    if db.get(Folder, folder_id) is None:
        raise not_found("Folder not found.")

    nodes = db.query(Folder.id, Folder.parent_id).all()
    folder_ids = collect_descendants(folder_id, nodes)

    try:
        deleted_files = (
            db.query(File)
            .filter(File.folder_id.in_(folder_ids))
            .delete(synchronize_session=False)
        )
        deleted_folders = (
            db.query(Folder)
            .filter(Folder.id.in_(folder_ids))
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Cascading delete of folder {folder_id} failed, rolled back")
        raise
    finally:
        db.expire_all()

    cache.clear()
    logger.info(f"Deleted folder {folder_id}: {deleted_folders} folders, {deleted_files} files")
    return {"folders": deleted_folders, "files": deleted_files}
