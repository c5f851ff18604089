import logging
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status, Request, Response
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db, verify_password, get_password_hash, create_session_token, session_expiry, get_settings
from thesisflow.models import User, UserSession
from thesisflow.schemas import UserCreate, UserResponse
from thesisflow.api.v1.deps import get_current_user, get_current_session

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)

_COOKIE_PATH = "/"


async def open_session(db: AsyncSession, user: User, request: Request, response: Response) -> None:
    """Persist a session row and hand the client a signed cookie pointing at it."""
    expires_at = session_expiry()
    session = UserSession(
        user_id=user.id,
        expires_at=expires_at,
        user_agent=(request.headers.get("user-agent") or "")[:500] or None,
    )
    db.add(session)
    await db.commit()

    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(user.id, session.id, expires_at),
        httponly=True,
        secure=not (settings.debug or settings.desktop_mode),
        samesite="lax",
        max_age=settings.session_expire_days * 24 * 60 * 60,
        path=_COOKIE_PATH
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.session_cookie_name, path=_COOKIE_PATH)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    response: Response,
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    user = User(
        email=email,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        hashed_password=get_password_hash(user_data.password),
    )
    db.add(user)
    await db.flush()

    await open_session(db, user, request, response)
    await db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


@router.post("/login", response_model=UserResponse)
async def login(
    request: Request,
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    email = (form_data.username or "").strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")

    await open_session(db, user, request, response)
    return user


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    # Logging out twice, or with a stale cookie, still clears the cookie
    try:
        session = await get_current_session(request, db)
    except HTTPException:
        session = None
    if session:
        await db.delete(session)
        await db.commit()

    clear_session_cookie(response)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: Annotated[User, Depends(get_current_user)]):
    return current_user
