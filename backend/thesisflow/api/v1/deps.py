import uuid
from datetime import datetime, timezone
from typing import Annotated, TypeVar
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db, decode_token, get_settings, as_utc
from thesisflow.models import User, UserSession, Thesis
from thesisflow.services.ai_provider import AIProvider

settings = get_settings()

ModelT = TypeVar("ModelT")


def _unauthorized() -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")


async def get_current_session(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> UserSession:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise _unauthorized()

    payload = decode_token(token)
    if not payload or payload.get("type") != "session":
        raise _unauthorized()

    try:
        session_id = uuid.UUID(payload.get("sid") or "")
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise _unauthorized()

    session = await db.get(UserSession, session_id)
    if not session or session.user_id != user_id:
        raise _unauthorized()

    if as_utc(session.expires_at) <= datetime.now(timezone.utc):
        await db.delete(session)
        await db.commit()
        raise _unauthorized()
    return session


async def get_current_user(
    session: Annotated[UserSession, Depends(get_current_session)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> User:
    user = await db.get(User, session.user_id)
    if not user:
        raise _unauthorized()
    return user


async def get_user_thesis(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Thesis | None:
    """The caller's thesis; one per user."""
    result = await db.execute(
        select(Thesis)
        .where(Thesis.user_id == current_user.id)
        .order_by(Thesis.created_at)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def require_thesis(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)]
) -> Thesis:
    if not thesis:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No thesis found")
    return thesis


async def get_thesis_item(
    db: AsyncSession,
    model: type[ModelT],
    item_id: uuid.UUID,
    thesis: Thesis,
    label: str,
) -> ModelT:
    """Load a row only if it hangs off the caller's thesis."""
    result = await db.execute(
        select(model).where(model.id == item_id, model.thesis_id == thesis.id)
    )
    item = result.scalar_one_or_none()
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return item


def touch(row) -> None:
    row.updated_at = datetime.now(timezone.utc)


def get_ai_provider(request: Request) -> AIProvider:
    return request.app.state.ai_provider
