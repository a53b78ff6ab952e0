"""Validation of JWT bearer tokens issued by the identity provider"""

from typing import Optional, Dict, Any
from jose import JWTError, jwt
from src.config import settings


class AuthService:
    """Service for validating JWT access tokens; issuing is done upstream"""

    @staticmethod
    def _secret() -> str:
        # Use jwt_secret if available, otherwise fall back to secret_key
        return settings.jwt_secret or settings.secret_key

    @staticmethod
    def decode_token(token: str) -> Optional[Dict[str, Any]]:
        """
        Decode and validate a JWT token signature and expiry

        Args:
            token: JWT token string to decode

        Returns:
            Dictionary of token claims if valid, None otherwise
        """
        try:
            return jwt.decode(token, AuthService._secret(), algorithms=[settings.jwt_algorithm])
        except JWTError:
            return None

    @staticmethod
    def validate_token(token: str, token_type: str = "access") -> Optional[Dict[str, Any]]:
        """
        Validate a JWT token including signature, expiration, and type

        Args:
            token: JWT token string to validate
            token_type: Expected token type

        Returns:
            Dictionary of token claims if valid, None otherwise
        """
        payload = AuthService.decode_token(token)
        if not payload:
            return None

        # Tokens without a type claim are treated as access tokens
        if payload.get("type", "access") != token_type:
            return None

        return payload
