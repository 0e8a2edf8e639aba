from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from dashquery.services.auth import SignedInUser


class MetricRequest(BaseModel):
    """Ad-hoc query payload forwarded to the query engine."""
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(default="", alias="from")
    to: str = ""
    queries: List[Dict[str, Any]] = Field(..., min_length=1)
    debug: bool = False


class QueryEngine(ABC):
    """Executes validated queries against data sources."""

    @abstractmethod
    def query_data(self, user: SignedInUser, request: MetricRequest) -> Dict[str, Any]:
        ...


class QueryEngineUnavailableError(RuntimeError):
    pass


_query_engine: Optional[QueryEngine] = None


def register_query_engine(engine: Optional[QueryEngine]) -> None:
    global _query_engine
    _query_engine = engine


def get_query_engine() -> QueryEngine:
    if _query_engine is None:
        raise QueryEngineUnavailableError("No query engine registered")
    return _query_engine
