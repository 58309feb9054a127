"""
Authentication service.

API keys are configured as comma-separated ``key:user:role`` triples in
``SECURITY_API_KEYS`` (``API_KEYS`` is read as a fallback). The role is one
of doctor, staff or admin and defaults to staff when omitted.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import HTTPException

from ..domain.enums.clinic import Role

logger = logging.getLogger(__name__)

AUTH_REQUIRED = "Authentication required. Provide X-API-Key header or Authorization Bearer token."


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: str
    role: Role


class AuthService:
    """Authentication service for validating users and API keys"""

    def __init__(self, api_keys_str: Optional[str] = None):
        self.api_keys: Dict[str, AuthenticatedUser] = {}
        self._load_api_keys(api_keys_str)

    def _load_api_keys(self, api_keys_str: Optional[str]) -> None:
        """Load API keys from the given string, settings, or the environment"""
        if api_keys_str is None:
            from .config import get_settings

            api_keys_str = get_settings().security.api_keys or os.getenv("API_KEYS", "")
        if api_keys_str:
            self._parse_api_keys(api_keys_str)
            logger.info(f"Loaded {len(self.api_keys)} API key(s)")
        else:
            logger.warning("No API keys configured. Authentication will fail for all requests.")

    def _parse_api_keys(self, api_keys_str: str) -> None:
        """
        Parse API keys string.
        Format: "key1:user1:doctor,key2:user2" (role defaults to staff)
        """
        for entry in api_keys_str.split(","):
            entry = entry.strip()
            if not entry:
                continue

            parts = [p.strip() for p in entry.split(":")]
            key = parts[0]
            user_id = parts[1] if len(parts) > 1 and parts[1] else key
            role_name = parts[2].lower() if len(parts) > 2 and parts[2] else Role.STAFF.value
            try:
                role = Role(role_name)
            except ValueError:
                logger.warning(f"Unknown role '{role_name}' for user {user_id}; key ignored")
                continue
            if key:
                self.api_keys[key] = AuthenticatedUser(user_id=user_id, role=role)

    def validate_api_key(self, api_key: Optional[str]) -> AuthenticatedUser:
        """
        Validate API key and return the user it belongs to.

        Raises:
            HTTPException: If API key is invalid or missing
        """
        if not api_key:
            raise HTTPException(
                status_code=401, detail=AUTH_REQUIRED, headers={"WWW-Authenticate": "Bearer"}
            )

        if api_key.startswith("Bearer "):
            api_key = api_key[7:].strip()

        user = self.api_keys.get(api_key)
        if user is not None:
            logger.debug(f"API key validated for user: {user.user_id} ({user.role.value})")
            return user

        logger.warning(f"Invalid API key attempted: {api_key[:4]}...")
        raise HTTPException(
            status_code=401,
            detail="Invalid API key or token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    def get_user_from_request(
        self, api_key: Optional[str] = None, auth_header: Optional[str] = None
    ) -> AuthenticatedUser:
        """
        Extract and validate the user from request headers.

        Priority:
        1. X-API-Key header
        2. Authorization Bearer token
        """
        if api_key:
            return self.validate_api_key(api_key)

        if auth_header and auth_header.startswith("Bearer "):
            return self.validate_api_key(auth_header[7:].strip())

        raise HTTPException(
            status_code=401, detail=AUTH_REQUIRED, headers={"WWW-Authenticate": "Bearer"}
        )


# Global instance
_auth_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get global authentication service instance (singleton)"""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service


def reset_auth_service() -> None:
    """Forget the cached service so keys are re-read on next use."""
    global _auth_service
    _auth_service = None
