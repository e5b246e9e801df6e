import time

from sqlalchemy import Column, Integer, Numeric, String, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base

from .types import PersistDeadlineError, Quote

Base = declarative_base()


class QuoteRecord(Base):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(255), nullable=False)
    codein = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    high = Column(Numeric(18, 2, asdecimal=False), nullable=False)
    low = Column(Numeric(18, 2, asdecimal=False), nullable=False)
    var_bid = Column("varBid", Numeric(18, 2, asdecimal=False), nullable=False)
    pct_change = Column("pctChange", Numeric(18, 2, asdecimal=False), nullable=False)
    bid = Column(Numeric(18, 2, asdecimal=False), nullable=False)
    ask = Column(Numeric(18, 2, asdecimal=False), nullable=False)
    timestamp = Column(String(255), nullable=False)
    create_date = Column(String(255), nullable=False)


class QuoteRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_url(cls, database_url: str) -> "QuoteRepository":
        return cls(create_engine(database_url))

    def create_table(self) -> None:
        Base.metadata.create_all(self.engine)

    def insert(self, quote: Quote, *, deadline: float | None = None) -> int:
        """
        Insert one quote and return its id.

        `deadline` is a `time.monotonic()` instant. The insert is rolled back
        instead of committed once it has passed, so a caller that gave up on
        the deadline never finds the row stored.
        """
        _check_deadline(deadline)
        record = QuoteRecord(
            code=quote.code,
            codein=quote.codein,
            name=quote.name,
            high=quote.high,
            low=quote.low,
            var_bid=quote.var_bid,
            pct_change=quote.pct_change,
            bid=quote.bid,
            ask=quote.ask,
            timestamp=quote.timestamp,
            create_date=quote.create_date,
        )
        with Session(self.engine) as session:
            session.add(record)
            session.flush()
            try:
                _check_deadline(deadline)
            except PersistDeadlineError:
                session.rollback()
                raise
            session.commit()
            return record.id

    def count(self) -> int:
        with Session(self.engine) as session:
            return session.scalar(select(func.count()).select_from(QuoteRecord))

    def latest(self) -> QuoteRecord | None:
        with Session(self.engine, expire_on_commit=False) as session:
            stmt = select(QuoteRecord).order_by(QuoteRecord.id.desc()).limit(1)
            return session.scalars(stmt).first()


def _check_deadline(deadline: float | None) -> None:
    if deadline is not None and time.monotonic() >= deadline:
        raise PersistDeadlineError("deadline passed before the quote was committed")
