# evote/auth.py
# Sessions are signed JWTs; this module issues, checks and revokes them and
# exposes the FastAPI dependencies that guard the routes.
import logging
import time
from typing import Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .errors import ForbiddenError, UnauthorizedError
from .ledger import Ledger
from .security import create_access_token, decode_access_token
from .storage import Storage

logger = logging.getLogger(__name__)

VOTER = "voter"
ADMIN = "admin"

bearer_scheme = HTTPBearer(auto_error=False)


class Principal(BaseModel):
    role: str
    id: int
    subject: str  # voterId for voters, username for admins
    name: Optional[str] = None
    jti: str
    exp: int


class SessionRegistry:
    """Issues access tokens and remembers the ones revoked by logout until they expire."""

    def __init__(self):
        self._revoked: Dict[str, int] = {}

    def issue(self, role: str, id: int, subject: str, name: Optional[str] = None) -> str:
        claims = {"sub": subject, "role": role, "id": id}
        if name:
            claims["name"] = name
        return create_access_token(claims)

    def revoke(self, principal: Principal) -> None:
        self._prune()
        self._revoked[principal.jti] = principal.exp
        logger.info(f"Session closed for {principal.role} {principal.subject}")

    def is_revoked(self, jti: str) -> bool:
        return jti in self._revoked

    def _prune(self) -> None:
        now = int(time.time())
        for jti in [j for j, exp in self._revoked.items() if exp < now]:
            del self._revoked[jti]


# --- Application state accessors ---
def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_ledger(request: Request) -> Ledger:
    return request.app.state.ledger


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


# --- Guards ---
async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    sessions: SessionRegistry = Depends(get_sessions),
) -> Principal:
    if credentials is None:
        raise UnauthorizedError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    try:
        principal = Principal(
            role=payload["role"],
            id=payload["id"],
            subject=payload["sub"],
            name=payload.get("name"),
            jti=payload["jti"],
            exp=payload["exp"],
        )
    except (KeyError, ValueError):
        raise UnauthorizedError("Invalid or expired session")

    if principal.role not in (VOTER, ADMIN) or sessions.is_revoked(principal.jti):
        raise UnauthorizedError("Invalid or expired session")
    return principal


async def require_voter(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != VOTER:
        raise ForbiddenError("Voter session required")
    return principal


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != ADMIN:
        raise ForbiddenError("Admin session required")
    return principal


async def ensure_owner(principal: Principal, storage: Storage, voter_id: str) -> None:
    """
    Voters may only act on their own record; admins on any.

    The record is matched on its numeric id, since an admin can change a
    voter's voterId after the token was issued.
    """
    if principal.role != VOTER:
        return
    voter = await storage.get_voter_by_voter_id(voter_id)
    if voter is None or voter.id != principal.id:
        raise ForbiddenError("Forbidden")
