# app/db/engine.py

from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from app.config import DB_URL, SQL_ECHO


@lru_cache(maxsize=None)
def _engine_for(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # requests are served from a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(url, echo=SQL_ECHO, connect_args=connect_args)


def get_engine(url: Optional[str] = None) -> Engine:
    return _engine_for(url or DB_URL)
