"""
Lazy-loading explorer model mirroring the server hierarchy on the client.
"""
import logging
from typing import Dict, List, Optional, Set

from explorer.client.api import ApiClientError
from explorer.client.tree import FolderNode, breadcrumbs, build_tree, load_folder_path

logger = logging.getLogger(__name__)

SEARCH_PAGE_SIZE = 12
MODES = ("root", "all")


def _merge_by_id(existing: List[dict], incoming: List[dict]) -> List[dict]:
    known = {item["id"] for item in existing}
    return existing + [item for item in incoming if item["id"] not in known]


def _name_key(item: dict):
    return (item["name"].lower(), item["id"])


class ExplorerState:
    """
    Folders and files loaded so far, the selection, and search results.

    In `root` mode only root folders are fetched up front and each folder's
    children are fetched the first time it is opened. In `all` mode the whole
    hierarchy is fetched at once.
    """

    def __init__(self, api, mode: str = "root"):
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}")
        self.api = api
        self.mode = mode
        self.folders: List[dict] = []
        self.files: List[dict] = []
        self.selected_id: Optional[int] = None
        self.expanded_ids: Set[int] = set()
        self.loaded_folder_ids: Set[int] = set()
        self.loading_folder_ids: Set[int] = set()
        self.error: Optional[str] = None

        self.search_query = ""
        self.search_scope = "all"
        self.search_folders: List[dict] = []
        self.search_files: List[dict] = []
        self.search_totals: Optional[Dict[str, int]] = None
        self.search_offset = 0
        self.search_has_more = False

    @property
    def folders_by_id(self) -> Dict[int, dict]:
        return {folder["id"]: folder for folder in self.folders}

    def tree(self) -> List[FolderNode]:
        return build_tree(self.folders)

    def direct_folders(self) -> List[dict]:
        if self.selected_id is None:
            return []
        return sorted((f for f in self.folders if f.get("parentId") == self.selected_id), key=_name_key)

    def direct_files(self) -> List[dict]:
        if self.selected_id is None:
            return []
        return sorted((f for f in self.files if f["folderId"] == self.selected_id), key=_name_key)

    def child_counts(self) -> Dict[int, int]:
        """Loaded folders plus files directly inside each folder."""
        counts = {folder["id"]: 0 for folder in self.folders}
        for folder in self.folders:
            parent_id = folder.get("parentId")
            if parent_id is not None:
                counts[parent_id] = counts.get(parent_id, 0) + 1
        for file in self.files:
            counts[file["folderId"]] = counts.get(file["folderId"], 0) + 1
        return counts

    def breadcrumbs(self) -> List[dict]:
        return breadcrumbs(self.selected_id, self.folders_by_id)

    async def refresh(self):
        """Reload from the server in the current mode, keeping the selection if it still exists."""
        self.error = None
        current_selection = self.selected_id
        try:
            if self.mode == "all":
                payload = await self.api.fetch_folders()
                self.folders = payload["folders"]
                self.files = payload["files"]
                self.loaded_folder_ids = {folder["id"] for folder in self.folders}
                self.expanded_ids = set(self.loaded_folder_ids)
            else:
                payload = await self.api.fetch_root_folders()
                self.folders = payload["folders"]
                self.files = []
                self.loaded_folder_ids = set()
                self.expanded_ids = set()
            self.loading_folder_ids = set()
        except ApiClientError as exc:
            self.error = str(exc)
            return

        if current_selection is None:
            return
        if self.mode == "all":
            if current_selection not in self.folders_by_id:
                self.selected_id = None
            return

        if current_selection not in self.folders_by_id:
            try:
                chain = await load_folder_path(self.api, current_selection)
            except ApiClientError:
                self.selected_id = None
                return
            self.folders = _merge_by_id(self.folders, chain)
        await self.expand_to(current_selection)

    async def set_mode(self, mode: str):
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}")
        self.mode = mode
        await self.refresh()

    async def load_children(self, folder_id: int):
        """Fetch a folder's direct contents once; repeated calls are no-ops."""
        if folder_id in self.loaded_folder_ids or folder_id in self.loading_folder_ids:
            return
        self.loading_folder_ids.add(folder_id)
        try:
            response = await self.api.fetch_folder_children(folder_id)
            self.folders = _merge_by_id(self.folders, response["folders"])
            self.files = _merge_by_id(self.files, response["files"])
            self.loaded_folder_ids.add(folder_id)
        except ApiClientError as exc:
            logger.warning(f"Unable to load contents of folder {folder_id}: {exc}")
            self.error = "Unable to load folder contents."
        finally:
            self.loading_folder_ids.discard(folder_id)

    async def expand_to(self, folder_id: int):
        """Expand and load every folder from the root down to `folder_id`."""
        chain = [crumb["id"] for crumb in breadcrumbs(folder_id, self.folders_by_id)[1:]]
        for crumb_id in chain:
            self.expanded_ids.add(crumb_id)
            await self.load_children(crumb_id)

    async def toggle(self, folder_id: int):
        if folder_id in self.expanded_ids:
            self.expanded_ids.discard(folder_id)
            return
        self.expanded_ids.add(folder_id)
        await self.load_children(folder_id)

    async def select(self, folder_id: Optional[int]):
        self.selected_id = folder_id
        if folder_id is not None:
            await self.load_children(folder_id)

    def reset_search(self):
        self.search_folders = []
        self.search_files = []
        self.search_totals = None
        self.search_offset = 0
        self.search_has_more = False

    async def search(self, query: str, scope: str = "all"):
        self.search_query = query.strip()
        self.search_scope = scope
        await self._fetch_search(append=False)

    async def load_more_search(self):
        if self.search_has_more:
            await self._fetch_search(append=True)

    async def _fetch_search(self, append: bool):
        if not self.search_query:
            self.reset_search()
            return

        offset = self.search_offset if append else 0
        try:
            response = await self.api.search(
                self.search_query,
                scope=self.search_scope,
                match="contains",
                limit=SEARCH_PAGE_SIZE,
                offset=offset,
            )
        except ApiClientError as exc:
            self.error = str(exc)
            return

        if append:
            self.search_folders = self.search_folders + response["folders"]
            self.search_files = self.search_files + response["files"]
        else:
            self.search_folders = response["folders"]
            self.search_files = response["files"]
        totals = response["meta"]["total"]
        self.search_totals = totals

        next_offset = offset + SEARCH_PAGE_SIZE
        self.search_offset = next_offset
        if self.search_scope == "folders":
            self.search_has_more = next_offset < totals["folders"]
        elif self.search_scope == "files":
            self.search_has_more = next_offset < totals["files"]
        else:
            self.search_has_more = next_offset < totals["folders"] or next_offset < totals["files"]

    async def create_folder(self, name: str, parent_id: Optional[int] = None) -> dict:
        response = await self.api.create_folder(name, parent_id)
        await self.refresh()
        return response["folder"]

    async def rename_folder(self, folder_id: int, name: str) -> dict:
        response = await self.api.update_folder(folder_id, name=name)
        await self.refresh()
        return response["folder"]

    async def move_folder(self, folder_id: int, parent_id: Optional[int]) -> dict:
        response = await self.api.update_folder(folder_id, parent_id=parent_id)
        await self.refresh()
        return response["folder"]

    async def delete_folder(self, folder_id: int):
        await self.api.delete_folder(folder_id)
        if self.selected_id == folder_id:
            self.selected_id = None
        await self.refresh()

    async def create_file(self, name: str, folder_id: int) -> dict:
        response = await self.api.create_file(name, folder_id)
        await self.refresh()
        return response["file"]

    async def update_file(self, file_id: int, **changes) -> dict:
        response = await self.api.update_file(file_id, **changes)
        await self.refresh()
        return response["file"]

    async def delete_file(self, file_id: int):
        await self.api.delete_file(file_id)
        await self.refresh()
