import asyncio
import random

import pytest
from sqlalchemy.exc import OperationalError

from explorer.errors import ApiError
from explorer.models import File, Folder
from explorer.schemas.folder import FolderCreate, FolderUpdate
from explorer.services import folder_service
from explorer.utils.pagination import Pagination


def run(coro):
    return asyncio.run(coro)


def parent_of(db, folder_id):
    db.expire_all()
    return db.get(Folder, folder_id).parent_id


def test_create_root_folder_trims_name(db, cache):
    folder = run(folder_service.create(db, cache, FolderCreate(name="  Reports ")))
    assert folder.name == "Reports"
    assert folder.parent_id is None


def test_create_with_missing_parent_is_not_found(db, cache):
    with pytest.raises(ApiError) as exc_info:
        run(folder_service.create(db, cache, FolderCreate(name="Orphan", parentId=99)))
    assert exc_info.value.status == 404
    assert db.query(Folder).count() == 0


def test_create_requires_name(db, cache):
    with pytest.raises(ApiError) as exc_info:
        run(folder_service.create(db, cache, FolderCreate(name="  ")))
    assert exc_info.value.status == 400


def test_rename(db, cache, sample_tree):
    folder = run(folder_service.update(db, cache, sample_tree["child"], FolderUpdate(name="Renamed")))
    assert folder.name == "Renamed"
    assert folder.parent_id == sample_tree["root"]


def test_move_under_another_folder(db, cache, sample_tree):
    folder = run(folder_service.update(
        db, cache, sample_tree["child"], FolderUpdate(parentId=sample_tree["other"])
    ))
    assert folder.parent_id == sample_tree["other"]


def test_explicit_null_parent_moves_to_root(db, cache, sample_tree):
    folder = run(folder_service.update(db, cache, sample_tree["grandchild"], FolderUpdate(parentId=None)))
    assert folder.parent_id is None


def test_update_without_changes_is_rejected(db, cache, sample_tree):
    with pytest.raises(ApiError) as exc_info:
        run(folder_service.update(db, cache, sample_tree["child"], FolderUpdate()))
    assert exc_info.value.status == 400
    assert exc_info.value.message == "No updates provided."


def test_update_missing_folder(db, cache):
    with pytest.raises(ApiError) as exc_info:
        run(folder_service.update(db, cache, 42, FolderUpdate(name="x")))
    assert exc_info.value.status == 404


def test_self_parent_is_rejected(db, cache, sample_tree):
    with pytest.raises(ApiError) as exc_info:
        run(folder_service.update(db, cache, sample_tree["child"], FolderUpdate(parentId=sample_tree["child"])))
    assert exc_info.value.status == 400
    assert exc_info.value.message == "Folder cannot be its own parent."
    assert parent_of(db, sample_tree["child"]) == sample_tree["root"]


@pytest.mark.parametrize("target", ["child", "grandchild"])
def test_moving_under_descendant_is_rejected(db, cache, sample_tree, target):
    with pytest.raises(ApiError) as exc_info:
        run(folder_service.update(db, cache, sample_tree["root"], FolderUpdate(parentId=sample_tree[target])))
    assert exc_info.value.status == 400
    assert exc_info.value.message == "This would create a circular reference."
    assert parent_of(db, sample_tree["root"]) is None


def test_rejected_move_does_not_apply_rename(db, cache, sample_tree):
    with pytest.raises(ApiError):
        run(folder_service.update(
            db, cache, sample_tree["root"], FolderUpdate(name="New", parentId=sample_tree["grandchild"])
        ))
    db.expire_all()
    assert db.get(Folder, sample_tree["root"]).name == "Root"


def test_move_to_missing_parent_is_not_found(db, cache, sample_tree):
    with pytest.raises(ApiError) as exc_info:
        run(folder_service.update(db, cache, sample_tree["child"], FolderUpdate(parentId=999)))
    assert exc_info.value.status == 404
    assert exc_info.value.message == "Parent folder not found."


def test_remove_deletes_subtree_and_files_only(db, cache, sample_tree):
    deleted = run(folder_service.remove(db, cache, sample_tree["child"]))
    assert deleted == {"folders": 2, "files": 2}

    remaining_folders = {f.id for f in db.query(Folder).all()}
    remaining_files = {f.name for f in db.query(File).all()}
    assert remaining_folders == {sample_tree["root"], sample_tree["other"]}
    assert remaining_files == {"root.txt", "other.txt"}


def test_remove_missing_folder(db, cache, sample_tree):
    with pytest.raises(ApiError) as exc_info:
        run(folder_service.remove(db, cache, 999))
    assert exc_info.value.status == 404
    assert db.query(Folder).count() == 4


def test_remove_rolls_back_when_commit_fails(db, cache, sample_tree, monkeypatch):
    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(OperationalError):
        run(folder_service.remove(db, cache, sample_tree["root"]))
    monkeypatch.undo()

    assert db.query(Folder).count() == 4
    assert db.query(File).count() == 4


def test_mutations_clear_cache(db, cache, sample_tree):
    run(folder_service.list_roots(db, cache))
    run(folder_service.count_roots(db, cache))
    assert len(cache) == 2

    run(folder_service.create(db, cache, FolderCreate(name="Fresh")))
    assert len(cache) == 0

    roots = run(folder_service.list_roots(db, cache))
    assert [f.name for f in roots] == ["Fresh", "Other", "Root"]


def test_list_roots_is_cached(db, cache, sample_tree, make_folder):
    first = run(folder_service.list_roots(db, cache))
    # written behind the service's back, so the cached page is still served
    make_folder("Sneaky")
    second = run(folder_service.list_roots(db, cache))
    assert first == second


def test_list_children_and_pagination(db, cache, make_folder):
    parent = make_folder("Parent")
    for name in ["c", "a", "b", "d"]:
        make_folder(name, parent)
    page = run(folder_service.list_children(db, cache, parent, Pagination(limit=2, offset=1)))
    assert [f.name for f in page] == ["b", "c"]


def test_list_with_files(db, cache, sample_tree):
    contents = run(folder_service.list_with_files(db, cache))
    assert len(contents["folders"]) == 4
    assert len(contents["files"]) == 4


def test_hierarchy_stays_acyclic_under_random_moves(db, cache, make_folder):
    rng = random.Random(7)
    ids = []
    for index in range(25):
        parent = rng.choice(ids) if ids and rng.random() < 0.8 else None
        ids.append(make_folder(f"F{index}", parent))

    for _ in range(200):
        folder_id = rng.choice(ids)
        new_parent = rng.choice(ids + [None])
        try:
            run(folder_service.update(db, cache, folder_id, FolderUpdate(parentId=new_parent)))
        except ApiError as exc:
            assert exc.status == 400

        db.expire_all()
        parents = {f.id: f.parent_id for f in db.query(Folder).all()}
        for start in ids:
            steps, current = 0, start
            while current is not None:
                current = parents[current]
                steps += 1
                assert steps <= len(ids)


def test_concurrent_move_and_delete_can_leave_dangling_parent(db, cache, sample_tree):
    # Known gap: validation and commit are separate steps with no locking, so a
    # delete landing between them leaves a folder pointing at a removed parent.
    moving = sample_tree["other"]
    target = sample_tree["grandchild"]

    folder_service.validate_reparent(db, moving, target)
    run(folder_service.remove(db, cache, sample_tree["child"]))

    folder = db.get(Folder, moving)
    folder.parent_id = target
    db.commit()

    assert db.get(Folder, target) is None
    assert parent_of(db, moving) == target
