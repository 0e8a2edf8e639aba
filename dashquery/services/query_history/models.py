from typing import Any, List

from pydantic import BaseModel, Field

SORT_TIME_ASC = "time-asc"
SORT_TIME_DESC = "time-desc"


class CreateQueryInQueryHistoryCommand(BaseModel):
    datasource_uid: str = Field(..., min_length=1)
    queries: List[Any] = Field(default_factory=list)


class PatchQueryCommentInQueryHistoryCommand(BaseModel):
    comment: str = ""


class SearchInQueryHistoryQuery(BaseModel):
    datasource_uids: List[str] = Field(default_factory=list)
    search_string: str = ""
    only_starred: bool = False
    sort: str = ""
    page: int = 0
    limit: int = 0


class QueryHistoryDTO(BaseModel):
    uid: str
    datasource_uid: str
    created_by: int
    created_at: int
    comment: str
    queries: List[Any]
    starred: bool
