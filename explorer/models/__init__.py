from explorer.models.folder import Folder
from explorer.models.file import File

__all__ = ["Folder", "File"]
