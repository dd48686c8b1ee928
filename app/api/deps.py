"""
Dependencies for authentication, database sessions, and the catalog client.
"""
from typing import Generator, Optional, List
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.database import SessionLocal
from app.integrations import Credentials, ProductAdvertisingClient
from app.models.db import User
from app.models.db.enums import UserRole
from app.utils import get_logger

logger = get_logger(__name__)
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)

def _key_prefix(api_key: str) -> str:
    return api_key[:10] + "..." if len(api_key) > 10 else api_key

def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.
    Ensures proper session lifecycle management with automatic cleanup.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error("Database session error", error=str(e), exc_info=True)
        db.rollback()
        raise
    finally:
        db.close()

def get_catalog_client(request: Request) -> ProductAdvertisingClient:
    """Catalog client created at startup; built from the environment if the lifespan did not run."""
    client = getattr(request.app.state, "catalog_client", None)
    if client is None:
        client = ProductAdvertisingClient(Credentials.from_env())
        request.app.state.catalog_client = client
    return client

def _lookup_user(db: Session, api_key: str) -> Optional[User]:
    return db.query(User).filter(
        User.api_key == api_key,
        User.is_active == True  # noqa: E712
    ).first()

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Extract and validate user from API key.

    Raises:
        HTTPException: If API key is invalid or user is inactive
    """
    api_key = credentials.credentials

    logger.debug("User authentication attempt", api_key_prefix=_key_prefix(api_key))

    user = _lookup_user(db, api_key)
    if not user:
        logger.warning(
            "Authentication failed: invalid or inactive API key",
            api_key_prefix=_key_prefix(api_key)
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or inactive API key",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info(
        "User authenticated successfully",
        user_id=user.id,
        user_role=user.role
    )
    return user

def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Authenticated user if a valid Bearer key was sent, otherwise None (guest).

    An invalid key is treated like no key so guest click tracking never fails
    on a stale token.
    """
    if credentials is None:
        return None
    user = _lookup_user(db, credentials.credentials)
    if user is None:
        logger.info("Ignoring invalid API key on optional-auth endpoint", api_key_prefix=_key_prefix(credentials.credentials))
    return user

def require_role(allowed_roles: List[UserRole]):
    """
    Factory function to create a dependency that requires specific user roles.

    Args:
        allowed_roles: List of allowed user roles
    """
    def role_dependency(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if current_user.role not in allowed_roles:
            logger.warning(
                "Access denied: insufficient role",
                user_id=current_user.id,
                user_role=current_user.role,
                required_roles=[role.value for role in allowed_roles]
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {[role.value for role in allowed_roles]}"
            )
        return current_user

    return role_dependency

def require_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Dependency that requires ADMIN role."""
    if current_user.role != UserRole.ADMIN:
        logger.warning(
            "Access denied: admin required",
            user_id=current_user.id,
            user_role=current_user.role
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user

def get_pagination_params(
    page: int = 1,
    limit: int = 20
) -> dict:
    """
    Validate and return page-based pagination parameters.

    Raises:
        HTTPException: If parameters are out of range
    """
    if page < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Page must be >= 1"
        )
    if limit < 1 or limit > 100:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Limit must be between 1 and 100"
        )
    return {"page": page, "limit": limit}
