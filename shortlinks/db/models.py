from sqlalchemy import Column, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class URLMapping(Base):
    __tablename__ = "urls"

    # The original link is the natural key: resubmitting it returns the same shortlink
    link = Column(String, primary_key=True)

    # Unique so that a redirect can never be ambiguous; collisions are retried on insert
    shortlink = Column(String, unique=True, index=True, nullable=False)
