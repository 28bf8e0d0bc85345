"""
Authentication Utilities

Bearer-token check for the dashboard endpoints. Tokens are issued by the
app's auth service (out of scope here) and signed with HS256.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel
from typing import List, Optional
from .config import get_settings
from .supabase import get_user_by_id

# Security scheme
security = HTTPBearer(auto_error=False)

BRGY_OFFICIAL_ROLE = "brgy_official"


class User(BaseModel):
    """Authenticated user model."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    roles: List[str] = []
    barangay: Optional[str] = None

    @property
    def is_brgy_official(self) -> bool:
        return self.role == BRGY_OFFICIAL_ROLE or BRGY_OFFICIAL_ROLE in self.roles


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> User:
    """
    Extract and validate user from JWT token.

    Raises:
        HTTPException: If token is invalid or user not found.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    settings = get_settings()
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret,
            algorithms=["HS256"],
            options={"verify_aud": False}
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token validation failed: {str(e)}",
        )

    user_id: str = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    # Fetch user profile from database
    user_data = get_user_by_id(user_id)
    if not user_data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    roles = user_data.get("roles") or []
    return User(
        id=str(user_data["id"]),
        email=user_data.get("email"),
        name=user_data.get("name"),
        role=user_data.get("role"),
        roles=[roles] if isinstance(roles, str) else list(roles),
        barangay=user_data.get("barangay"),
    )
