from .models import (
    CreateQueryInQueryHistoryCommand,
    PatchQueryCommentInQueryHistoryCommand,
    QueryHistoryDTO,
    SearchInQueryHistoryQuery,
)
from .service import QueryHistoryService

__all__ = [
    "QueryHistoryService",
    "CreateQueryInQueryHistoryCommand",
    "PatchQueryCommentInQueryHistoryCommand",
    "QueryHistoryDTO",
    "SearchInQueryHistoryQuery",
]
