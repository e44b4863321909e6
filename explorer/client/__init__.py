from explorer.client.api import ApiClientError, ExplorerApiClient
from explorer.client.explorer import ExplorerState
from explorer.client.tree import FolderNode, breadcrumbs, build_tree, load_folder_path

__all__ = [
    "ApiClientError",
    "ExplorerApiClient",
    "ExplorerState",
    "FolderNode",
    "breadcrumbs",
    "build_tree",
    "load_folder_path",
]
