"""Authentication API endpoints"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from storefront.config import settings
from storefront.database import get_db, utcnow
from storefront.errors import AuthError, ValidationError
from storefront.models.order import Order, OrderItem
from storefront.models.user import User
from storefront.realtime.hub import AUTH, SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED, RealtimeHub, get_hub
from storefront.schemas.auth import Token, LoginRequest, RefreshRequest, UserCreate, UserUpdate, UserResponse
from storefront.schemas.order import OrderResponse

logger = structlog.get_logger()

router = APIRouter()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash password"""
    return pwd_context.hash(password)


def create_access_token(user: User) -> str:
    """Create JWT access token"""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(user.id),
        "admin": bool(user.is_admin),
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_refresh_token(user: User) -> str:
    """Create JWT refresh token"""
    expire = datetime.now(timezone.utc) + timedelta(days=settings.refresh_token_expire_days)
    payload = {
        "sub": str(user.id),
        "exp": expire,
        "type": "refresh",
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, expected_type: str) -> UUID:
    """User id from a valid token of the expected type"""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        user_id = payload.get("sub")
        if user_id is None or payload.get("type") != expected_type:
            raise AuthError("Could not validate credentials")
        return UUID(user_id)
    except (JWTError, ValueError):
        raise AuthError("Could not validate credentials")


def session_record(user: User) -> dict:
    return {"user_id": str(user.id), "email": user.email, "is_admin": bool(user.is_admin)}


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from token"""
    user_id = decode_token(token, "access")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise AuthError("Could not validate credentials")

    return user


async def get_current_user_optional(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Signed-in user, or None for guests; a stale token counts as a guest"""
    if not token:
        return None
    try:
        return await get_current_user(token, db)
    except AuthError:
        logger.info("Ignoring invalid token for guest route")
        return None


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Restrict a route to restaurant admins"""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    return current_user


async def _sign_in(user: User, db: AsyncSession, hub: RealtimeHub) -> Token:
    # Update last login
    user.last_login = utcnow()

    # Generate tokens
    access_token = create_access_token(user)
    refresh_token = create_refresh_token(user)

    # Store refresh token
    user.refresh_token = refresh_token
    await db.commit()

    logger.info("User signed in", user_id=str(user.id), is_admin=bool(user.is_admin))
    hub.publish(AUTH, SIGNED_IN, "users", session_record(user))

    return Token(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.access_token_expire_minutes * 60,
    )


async def _authenticate(request: LoginRequest, db: AsyncSession) -> User:
    result = await db.execute(select(User).where(User.email == request.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(request.password, user.hashed_password):
        logger.warning("Failed sign-in", email=request.email)
        raise AuthError("Incorrect email or password")

    if not user.is_active:
        raise AuthError("User account is disabled")

    return user


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a customer account"""
    email = data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise ValidationError(
            "An account with this email already exists",
            fields={"email": "An account with this email already exists"},
        )

    user = User(
        email=email,
        hashed_password=get_password_hash(data.password),
        full_name=data.full_name.strip(),
        phone_number=data.phone_number,
        is_admin=False,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("User registered", user_id=str(user.id))
    return user


@router.post("/login", response_model=Token)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    """Authenticate user and return tokens"""
    user = await _authenticate(request, db)
    return await _sign_in(user, db, hub)


@router.post("/admin/login", response_model=Token)
async def admin_login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    """Sign in to the admin panel; customer accounts are rejected"""
    user = await _authenticate(request, db)
    if not user.is_admin:
        logger.warning("Non-admin tried admin sign-in", user_id=str(user.id))
        raise AuthError("Access denied. Admin privileges required.")
    return await _sign_in(user, db, hub)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    request: RefreshRequest,
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    """Refresh access token using refresh token"""
    user_id = decode_token(request.refresh_token, "refresh")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user or not user.is_active or user.refresh_token != request.refresh_token:
        raise AuthError("Invalid refresh token")

    # Generate new tokens
    access_token = create_access_token(user)
    new_refresh_token = create_refresh_token(user)

    # Update refresh token (rotation)
    user.refresh_token = new_refresh_token
    await db.commit()

    hub.publish(AUTH, TOKEN_REFRESHED, "users", session_record(user))

    return Token(
        access_token=access_token,
        refresh_token=new_refresh_token,
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
):
    """Get current user information"""
    return current_user


@router.put("/me", response_model=UserResponse)
async def update_profile(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update name and phone number"""
    current_user.full_name = data.full_name.strip()
    current_user.phone_number = data.phone_number
    await db.commit()
    await db.refresh(current_user)
    return current_user


@router.get("/me/orders", response_model=List[OrderResponse])
async def my_orders(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Order history of the signed-in customer, newest first"""
    result = await db.execute(
        select(Order)
        .where(Order.user_id == current_user.id)
        .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
        .order_by(Order.created_at.desc())
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


@router.post("/logout")
async def logout(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    """Logout user by invalidating refresh token"""
    current_user.refresh_token = None
    await db.commit()

    hub.publish(AUTH, SIGNED_OUT, "users", session_record(current_user))
    return {"message": "Successfully logged out"}
