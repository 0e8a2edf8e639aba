import time
from typing import List

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from dashquery.core import logger
from dashquery.database import SQLStore
from dashquery.errors import (
    InvalidArgumentError,
    QueryAlreadyStarredError,
    QueryNotFoundError,
    StarredQueryNotFoundError,
)
from dashquery.models.query_history import QueryHistory, QueryHistoryStar
from dashquery.services.auth import SignedInUser
from dashquery.services.query_history.models import (
    SORT_TIME_DESC,
    CreateQueryInQueryHistoryCommand,
    PatchQueryCommentInQueryHistoryCommand,
    QueryHistoryDTO,
    SearchInQueryHistoryQuery,
)
from dashquery.services.query_history.search import QueryHistorySearch
from dashquery.utils import generate_short_uid

DEFAULT_SEARCH_LIMIT = 100


class QueryHistoryService:
    """Query history persistence for signed-in users.

    Every row is scoped to the (org, user) pair that created it. Operations
    that touch the star table run inside a single transaction each.
    """

    def __init__(self, store: SQLStore, default_limit: int = DEFAULT_SEARCH_LIMIT):
        self.store = store
        self.default_limit = default_limit

    def create_query(
        self,
        user: SignedInUser,
        cmd: CreateQueryInQueryHistoryCommand,
    ) -> QueryHistoryDTO:
        query_history = QueryHistory(
            org_id=user.org_id,
            uid=generate_short_uid(),
            queries=cmd.queries,
            datasource_uid=cmd.datasource_uid,
            created_by=user.user_id,
            created_at=int(time.time()),
            comment="",
        )

        with self.store.with_transaction() as session:
            session.add(query_history)

        logger.info(f"User {user.user_id} added query {query_history.uid} to query history")
        return self._to_dto(query_history, starred=False)

    def search_queries(
        self,
        user: SignedInUser,
        query: SearchInQueryHistoryQuery,
    ) -> List[QueryHistoryDTO]:
        if not query.datasource_uids:
            raise InvalidArgumentError("no selected data source for query history search")

        search = QueryHistorySearch(
            dialect=self.store.dialect,
            user=user,
            datasource_uids=query.datasource_uids,
            search_string=query.search_string,
            only_starred=query.only_starred,
            sort=query.sort or SORT_TIME_DESC,
            page=query.page if query.page > 0 else 1,
            limit=query.limit if query.limit > 0 else self.default_limit,
        )

        with self.store.with_session() as session:
            rows = session.execute(search.statement()).all()

        return [
            QueryHistoryDTO(
                uid=row.uid,
                datasource_uid=row.datasource_uid,
                created_by=row.created_by,
                created_at=row.created_at,
                comment=row.comment,
                queries=row.queries,
                starred=bool(row.starred),
            )
            for row in rows
        ]

    def delete_query(self, user: SignedInUser, uid: str) -> int:
        """Delete a query and any star on it; returns the deleted row id."""
        with self.store.with_transaction() as session:
            self._remove_star_advisory(session, user, uid)

            query_id = session.execute(
                select(QueryHistory.id).where(*self._owned_by(user, uid))
            ).scalar_one_or_none()
            if query_id is None:
                raise QueryNotFoundError()

            result = session.execute(delete(QueryHistory).where(QueryHistory.id == query_id))
            if result.rowcount == 0:
                raise QueryNotFoundError()

        logger.info(f"User {user.user_id} deleted query {uid} from query history")
        return query_id

    def patch_query_comment(
        self,
        user: SignedInUser,
        uid: str,
        cmd: PatchQueryCommentInQueryHistoryCommand,
    ) -> QueryHistoryDTO:
        with self.store.with_transaction() as session:
            query_history = self._get_owned(session, user, uid)

            query_history.comment = cmd.comment
            session.flush()

            starred = session.execute(
                select(exists().where(*self._star_of(user, uid)))
            ).scalar()

        return self._to_dto(query_history, starred=bool(starred))

    def star_query(self, user: SignedInUser, uid: str) -> QueryHistoryDTO:
        with self.store.with_transaction() as session:
            query_history = self._get_owned(session, user, uid)

            session.add(QueryHistoryStar(user_id=user.user_id, query_uid=uid))
            try:
                session.flush()
            except IntegrityError as e:
                if self.store.dialect.is_unique_constraint_violation(e):
                    raise QueryAlreadyStarredError() from e
                raise

        logger.info(f"User {user.user_id} starred query {uid}")
        return self._to_dto(query_history, starred=True)

    def unstar_query(self, user: SignedInUser, uid: str) -> QueryHistoryDTO:
        with self.store.with_transaction() as session:
            query_history = self._get_owned(session, user, uid)

            result = session.execute(delete(QueryHistoryStar).where(*self._star_of(user, uid)))
            if result.rowcount == 0:
                raise StarredQueryNotFoundError()

        logger.info(f"User {user.user_id} unstarred query {uid}")
        return self._to_dto(query_history, starred=False)

    def _remove_star_advisory(self, session: Session, user: SignedInUser, uid: str) -> None:
        # A missing star is not an error, and a failing star delete must not
        # abort the query delete; the savepoint keeps the outer transaction usable.
        try:
            with session.begin_nested():
                session.execute(delete(QueryHistoryStar).where(*self._star_of(user, uid)))
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to unstar query while deleting it from query history, "
                f"query: {uid}, user: {user.user_id}, error: {e}"
            )

    def _get_owned(self, session: Session, user: SignedInUser, uid: str) -> QueryHistory:
        query_history = session.execute(
            select(QueryHistory).where(*self._owned_by(user, uid))
        ).scalar_one_or_none()
        if query_history is None:
            raise QueryNotFoundError()
        return query_history

    @staticmethod
    def _owned_by(user: SignedInUser, uid: str):
        return (
            QueryHistory.org_id == user.org_id,
            QueryHistory.created_by == user.user_id,
            QueryHistory.uid == uid,
        )

    @staticmethod
    def _star_of(user: SignedInUser, uid: str):
        return (
            QueryHistoryStar.user_id == user.user_id,
            QueryHistoryStar.query_uid == uid,
        )

    @staticmethod
    def _to_dto(query_history: QueryHistory, starred: bool) -> QueryHistoryDTO:
        return QueryHistoryDTO(
            uid=query_history.uid,
            datasource_uid=query_history.datasource_uid,
            created_by=query_history.created_by,
            created_at=query_history.created_at,
            comment=query_history.comment,
            queries=query_history.queries,
            starred=starred,
        )
