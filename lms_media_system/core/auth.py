"""
Caller authentication and access control for the LMS Media System.

Bearer tokens are signed JWTs carrying ``{id, username, role}``. Every route
resolves its caller through :class:`TokenAuthenticator` and asks
:func:`can_access` once whether the caller may perform the action.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional, Union

import jwt
from jwt.exceptions import PyJWTError

from .config import AuthConfig


class Role(Enum):
    """Account roles"""
    MAIN_ADMIN = "main_admin"
    SUB_ADMIN = "sub_admin"
    STUDENT = "student"


class Action(Enum):
    """Actions a caller can request on a course resource"""
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"


@dataclass(frozen=True)
class CallerIdentity:
    """Verified identity of the caller of a request"""
    id: Union[int, str]
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role in (Role.MAIN_ADMIN, Role.SUB_ADMIN)


class AuthenticationError(Exception):
    """Raised when a request carries no usable credentials"""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code


def can_access(caller: CallerIdentity, resource: Any, action: Action) -> bool:
    """
    Decide whether ``caller`` may perform ``action`` on ``resource``.

    ``resource`` only needs an ``owner_id`` attribute; ``None`` for actions
    that are not tied to an existing resource (``CREATE``).
    """
    if caller.role == Role.MAIN_ADMIN:
        return True

    if action == Action.VIEW:
        return True

    if action == Action.CREATE:
        return caller.role == Role.SUB_ADMIN

    # Sub admins may only edit courses they created
    owner_id = getattr(resource, "owner_id", None)
    return caller.role == Role.SUB_ADMIN and owner_id is not None and str(owner_id) == str(caller.id)


class TokenAuthenticator:
    """Issues and verifies signed bearer tokens"""

    def __init__(self, auth_config: AuthConfig):
        self.auth_config = auth_config
        self.logger = logging.getLogger(__name__)

    def issue_token(self, identity: CallerIdentity, expires_in: Optional[timedelta] = None) -> str:
        """Sign a token for ``identity``"""
        expires_in = expires_in or timedelta(hours=self.auth_config.token_ttl_hours)
        now = datetime.now(timezone.utc)
        payload = {
            "id": identity.id,
            "username": identity.username,
            "role": identity.role.value,
            "iat": now,
            "exp": now + expires_in,
        }
        return jwt.encode(payload, self.auth_config.jwt_secret, algorithm=self.auth_config.jwt_algorithm)

    def verify_token(self, token: str) -> CallerIdentity:
        """Decode a token into a caller identity, raising AuthenticationError (403) when invalid"""
        try:
            payload = jwt.decode(token, self.auth_config.jwt_secret, algorithms=[self.auth_config.jwt_algorithm])
        except PyJWTError as e:
            self.logger.info(f"Rejected bearer token: {e}")
            raise AuthenticationError("Invalid token", status_code=403) from e

        try:
            return CallerIdentity(id=payload["id"], username=payload["username"], role=Role(payload["role"]))
        except (KeyError, ValueError) as e:
            self.logger.info(f"Bearer token has malformed claims: {e}")
            raise AuthenticationError("Invalid token", status_code=403) from e

    def authenticate_header(self, authorization: Optional[str]) -> CallerIdentity:
        """Resolve an ``Authorization`` header value to a caller identity"""
        if not authorization:
            raise AuthenticationError("Missing token", status_code=401)

        scheme, _, token = authorization.partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise AuthenticationError("Invalid token", status_code=401)

        return self.verify_token(token)
