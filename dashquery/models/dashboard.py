from sqlalchemy import Column, String, Integer, BigInteger, UniqueConstraint, JSON

from dashquery.database import Base


class Dashboard(Base):
    """Dashboard row; ``data`` holds the panel document and is read-only here."""

    __tablename__ = "dashboard"

    id = Column(Integer, primary_key=True, autoincrement=True)
    org_id = Column(BigInteger, nullable=False, index=True)
    uid = Column(String(40), nullable=False)
    title = Column(String(255), nullable=False, default="")
    data = Column(JSON, nullable=True)

    __table_args__ = (
        UniqueConstraint("org_id", "uid", name="uq_dashboard_org_uid"),
    )
