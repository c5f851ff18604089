from thesisflow.core.config import Settings, get_settings
from thesisflow.core.database import Base, get_db, async_session_maker, engine
from thesisflow.core.security import (
    verify_password,
    get_password_hash,
    create_session_token,
    decode_token,
    session_expiry,
    as_utc,
)

__all__ = [
    "Settings",
    "get_settings",
    "Base",
    "get_db",
    "async_session_maker",
    "engine",
    "verify_password",
    "get_password_hash",
    "create_session_token",
    "decode_token",
    "session_expiry",
    "as_utc",
]
