"""
Access token verification.

Tokens are issued by the account service; this API only verifies them to learn
the caller's user id.
"""

from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from dsa_tutor.config.settings import AuthConfig
from dsa_tutor.exceptions import AuthenticationError
from dsa_tutor.utils.logging_config import get_logger


logger = get_logger("auth_service")

# Claims that may carry the user id, in order of preference
USER_ID_CLAIMS = ("userId", "sub")


def decode_access_token(token: str, auth_config: AuthConfig) -> Dict[str, Any]:
    """
    Verify a JWT and return its claims.

    Raises:
        AuthenticationError: If the token is missing, malformed, expired or
            signed with another key, or no verification key is configured
    """
    if not token:
        raise AuthenticationError("Authentication required")

    if not auth_config.secret_key:
        logger.error("JWT_KEY is not configured; cannot verify access tokens")
        raise AuthenticationError("Authentication is not configured")

    try:
        return jwt.decode(token, auth_config.secret_key, algorithms=[auth_config.algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        raise AuthenticationError("Invalid token")


def user_id_from_claims(claims: Dict[str, Any]) -> str:
    """Extract the user id from verified claims."""
    for claim in USER_ID_CLAIMS:
        value = claims.get(claim)
        if value is not None and str(value).strip():
            return str(value)
    raise AuthenticationError("Token does not identify a user")


def extract_token(cookie_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
    """Pick the token from the auth cookie, or else from a Bearer header."""
    if cookie_token:
        return cookie_token
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return None


def authenticate(
    cookie_token: Optional[str],
    authorization: Optional[str],
    auth_config: AuthConfig
) -> str:
    """Verify the caller's token and return their user id."""
    token = extract_token(cookie_token, authorization)
    claims = decode_access_token(token, auth_config)
    return user_id_from_claims(claims)
