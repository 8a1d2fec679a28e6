"""
Customer authentication for the Storefront API
Validates bearer JWTs issued by the storefront session service and exposes
the authenticated customer to route handlers
"""
import os
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


class TokenCustomer(BaseModel):
    """Customer identity extracted from a JWT"""
    customer_id: str
    email: Optional[str] = None


class AuthConfig:
    """Authentication configuration"""

    @staticmethod
    def get_auth_secret() -> str:
        """Get the AUTH_SECRET from environment"""
        secret = os.getenv("AUTH_SECRET")
        if not secret:
            raise ValueError("AUTH_SECRET environment variable is not set")
        return secret

    @staticmethod
    def get_jwt_algorithm() -> str:
        """Algorithm used to sign customer session tokens"""
        return os.getenv("AUTH_JWT_ALGORITHM", "HS256")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def decode_customer_token(token: str) -> dict:
    """
    Decode and validate a customer session JWT.

    Expected payload:
    {
        "customer_id": "cus_01H...",
        "email": "jane@example.com",
        "iat": 1234567890,
        "exp": 1234567890
    }

    Raises:
        HTTPException 401 when the signature is invalid or the token expired
    """
    try:
        return jwt.decode(
            token,
            AuthConfig.get_auth_secret(),
            algorithms=[AuthConfig.get_jwt_algorithm()],
            options={"verify_aud": False}
        )
    except JWTError as e:
        if "expired" in str(e).lower():
            raise _unauthorized("Token has expired")
        raise _unauthorized(f"Invalid token: {str(e)}")


async def get_current_customer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenCustomer:
    """
    Dependency that extracts and validates the current customer from JWT.

    The customer id always comes from the verified token, never from
    request parameters.

    Usage:
        @router.get("/me/orders")
        def list_orders(customer: TokenCustomer = Depends(get_current_customer)):
            ...
    """
    if not credentials:
        raise _unauthorized("Authentication required")

    payload = decode_customer_token(credentials.credentials)

    customer_id = payload.get("customer_id") or payload.get("sub")
    if not customer_id:
        raise _unauthorized("Invalid token payload: missing customer id")

    return TokenCustomer(
        customer_id=str(customer_id),
        email=payload.get("email")
    )
