from typing import Dict

from pydantic import BaseModel


class PageParams(BaseModel):
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def pagination(paging: PageParams, total: int) -> Dict[str, Dict[str, int]]:
    """``next``/``prev`` descriptors; each is present only when that page exists."""
    result: Dict[str, Dict[str, int]] = {}
    if paging.offset + paging.limit < total:
        result["next"] = {"page": paging.page + 1, "limit": paging.limit}
    if paging.offset > 0:
        result["prev"] = {"page": paging.page - 1, "limit": paging.limit}
    return result
