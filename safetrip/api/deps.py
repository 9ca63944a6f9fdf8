from functools import lru_cache, partial
from typing import Optional

from fastapi import Depends, Header

from safetrip.clients.storage import KeyValueStore
from safetrip.core.exceptions import UnauthorizedError
from safetrip.services.session import SessionRegistry, UserSession, build_session


@lru_cache()
def get_storage() -> KeyValueStore:
    return KeyValueStore()


@lru_cache()
def get_session_registry() -> SessionRegistry:
    return SessionRegistry(factory=partial(build_session, storage=get_storage()))


def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    # Authentication happens upstream; the gateway forwards the caller's id
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError("Missing X-User-Id header")
    return x_user_id.strip()


def get_session(
        user_id: str = Depends(get_user_id),
        registry: SessionRegistry = Depends(get_session_registry),
) -> UserSession:
    return registry.get(user_id)
