from sqlalchemy import and_, select
from sqlalchemy.sql import Select

from dashquery.dialect import StoreDialect
from dashquery.models.query_history import QueryHistory, QueryHistoryStar
from dashquery.services.auth import SignedInUser
from dashquery.services.query_history.models import SORT_TIME_ASC


class QueryHistorySearch:
    """Parameterized SELECT for query history search, assembled clause by clause.

    Every value reaches the database as a bound parameter; only the shape of
    the statement (join mode and sort direction) depends on the inputs.
    """

    def __init__(
        self,
        dialect: StoreDialect,
        user: SignedInUser,
        datasource_uids,
        search_string: str,
        only_starred: bool,
        sort: str,
        page: int,
        limit: int,
    ):
        self.dialect = dialect
        self.user = user
        self.datasource_uids = list(datasource_uids)
        self.search_string = search_string
        self.only_starred = only_starred
        self.sort = sort
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return self.limit * (self.page - 1)

    def statement(self) -> Select:
        stmt = self._join()
        stmt = self._scope(stmt)
        stmt = self._datasources(stmt)
        stmt = self._text_filter(stmt)
        stmt = self._order(stmt)
        return self._paginate(stmt)

    def _join(self) -> Select:
        columns = (
            QueryHistory.uid,
            QueryHistory.datasource_uid,
            QueryHistory.created_by,
            QueryHistory.created_at,
            QueryHistory.comment,
            QueryHistory.queries,
        )
        on_star = and_(
            QueryHistoryStar.query_uid == QueryHistory.uid,
            QueryHistoryStar.user_id == self.user.user_id,
        )

        if self.only_starred:
            starred = self.dialect.boolean_literal(True).label("starred")
            return (
                select(*columns, starred)
                .select_from(QueryHistory)
                .join(QueryHistoryStar, on_star)
            )

        starred = QueryHistoryStar.query_uid.is_not(None).label("starred")
        return (
            select(*columns, starred)
            .select_from(QueryHistory)
            .outerjoin(QueryHistoryStar, on_star)
        )

    def _scope(self, stmt: Select) -> Select:
        return stmt.where(
            QueryHistory.org_id == self.user.org_id,
            QueryHistory.created_by == self.user.user_id,
        )

    def _datasources(self, stmt: Select) -> Select:
        return stmt.where(QueryHistory.datasource_uid.in_(self.datasource_uids))

    def _text_filter(self, stmt: Select) -> Select:
        if not self.search_string:
            return stmt
        return stmt.where(self.dialect.contains_ci(QueryHistory.queries, self.search_string))

    def _order(self, stmt: Select) -> Select:
        if self.sort == SORT_TIME_ASC:
            return stmt.order_by(QueryHistory.created_at.asc(), QueryHistory.id.asc())
        return stmt.order_by(QueryHistory.created_at.desc(), QueryHistory.id.desc())

    def _paginate(self, stmt: Select) -> Select:
        return stmt.limit(self.limit).offset(self.offset)
