from pydantic import BaseModel
from typing import Optional


class ListMeta(BaseModel):
    limit: Optional[int] = None
    offset: int = 0


class RootsMeta(ListMeta):
    total: int
