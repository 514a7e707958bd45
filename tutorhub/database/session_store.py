"""
Server-side storage for auth sessions.

The signed session cookie only carries a random ``sid``. The data behind it
(the logged in user id, or the claims of an external identity) lives in one
of the stores below so it can be revoked on logout.
"""
from datetime import timedelta
from typing import Optional
import json

from fastapi import Depends
from sqlalchemy.orm import Session

from tutorhub.config import get_settings
from tutorhub.database.database import AuthSession, get_db, utcnow
from tutorhub.database.redis import RedisClient, get_redis_client


class SessionStore:
    """Interface shared by the session backends."""

    def save(self, sid: str, data: dict, ttl_seconds: int) -> None:
        raise NotImplementedError

    def load(self, sid: str) -> Optional[dict]:
        raise NotImplementedError

    def destroy(self, sid: str) -> None:
        raise NotImplementedError


class SqlSessionStore(SessionStore):
    """Keeps session records in the ``sessions`` table."""

    def __init__(self, db: Session):
        self.db = db

    def save(self, sid: str, data: dict, ttl_seconds: int) -> None:
        expire = utcnow() + timedelta(seconds=ttl_seconds)
        record = self.db.get(AuthSession, sid)
        if record is None:
            self.db.add(AuthSession(sid=sid, sess=data, expire=expire))
        else:
            record.sess = data
            record.expire = expire
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def load(self, sid: str) -> Optional[dict]:
        record = self.db.get(AuthSession, sid)
        if record is None:
            return None
        if record.expire <= utcnow():
            self.destroy(sid)
            return None
        return dict(record.sess)

    def destroy(self, sid: str) -> None:
        self.db.query(AuthSession).filter(AuthSession.sid == sid).delete(synchronize_session=False)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


class RedisSessionStore(SessionStore):
    """Keeps session records in Redis; expiry is handled by Redis itself."""

    def __init__(self, client: RedisClient):
        self.client = client

    def save(self, sid: str, data: dict, ttl_seconds: int) -> None:
        self.client.set_session(sid, json.dumps(data), ttl_seconds)

    def load(self, sid: str) -> Optional[dict]:
        raw = self.client.get_session(sid)
        if raw is None:
            return None
        return json.loads(raw)

    def destroy(self, sid: str) -> None:
        self.client.delete_session(sid)


def get_session_store(db: Session = Depends(get_db)) -> SessionStore:
    if get_settings().use_redis:
        return RedisSessionStore(get_redis_client())
    return SqlSessionStore(db)
