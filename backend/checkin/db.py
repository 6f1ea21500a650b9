from __future__ import annotations

import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

# モデル定義側の Base を利用してメタデータを統一
from checkin.models.base import Base

log = logging.getLogger(__name__)


class Database:
    """Engine + session factory for one process.

    Built by the app factory and kept on ``app.state.db``; request handlers
    reach it through :func:`get_db` instead of a module-level engine.
    """

    def __init__(self, url: str):
        self.url = url
        self.is_sqlite = url.startswith("sqlite")
        connect_args = {"check_same_thread": False} if self.is_sqlite else {}
        self.engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)

        if self.is_sqlite:
            # SQLite ignores ON DELETE CASCADE unless asked per connection
            @event.listens_for(self.engine, "connect")
            def _enable_foreign_keys(dbapi_conn, _):
                cur = dbapi_conn.cursor()
                try:
                    cur.execute("PRAGMA foreign_keys=ON")
                finally:
                    cur.close()

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self) -> None:
        # 各モデルモジュールを明示 import してメタデータ登録を確実化
        import checkin.models.user  # noqa: F401
        import checkin.models.subject  # noqa: F401
        import checkin.models.token  # noqa: F401
        import checkin.models.capture  # noqa: F401
        import checkin.models.geofence  # noqa: F401
        import checkin.models.alert  # noqa: F401
        import checkin.models.access_log  # noqa: F401
        import checkin.models.schedule  # noqa: F401
        Base.metadata.create_all(bind=self.engine)
        log.info("Database schema ready (%s)", self.engine.url.render_as_string(hide_password=True))

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    db: Session = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
