import json
from sqlalchemy import Column, String, Integer, BigInteger, Text, UniqueConstraint
from sqlalchemy import TypeDecorator
from dashquery.core import logger
from dashquery.database import Base


class SerializedJSON(TypeDecorator):
    """Stores structured data as JSON text so it can be substring-searched."""
    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return []
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"Stored queries are not valid JSON: {e}")
            raise


class QueryHistory(Base):
    __tablename__ = "query_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(40), unique=True, nullable=False)
    org_id = Column(BigInteger, nullable=False, index=True)
    datasource_uid = Column(String(40), nullable=False)
    created_by = Column(BigInteger, nullable=False)
    created_at = Column(BigInteger, nullable=False)
    comment = Column(Text, nullable=False, default="")
    queries = Column(SerializedJSON, nullable=False, default=list)

    def __repr__(self):
        return f"<QueryHistory {self.uid} org={self.org_id} user={self.created_by}>"


class QueryHistoryStar(Base):
    __tablename__ = "query_history_star"

    id = Column(Integer, primary_key=True, autoincrement=True)
    query_uid = Column(String(40), nullable=False, index=True)
    user_id = Column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "query_uid", name="uq_query_history_star_user_query"),
    )

    def __repr__(self):
        return f"<QueryHistoryStar {self.user_id} -> {self.query_uid}>"
