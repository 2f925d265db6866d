import logging
from fastapi import APIRouter, Depends

from ..auth import (
    ADMIN, VOTER, Principal, SessionRegistry, get_current_principal, get_sessions, get_storage,
)
from ..errors import UnauthorizedError
from ..models.admin_model import AdminSummary
from ..models.voter_model import VoterSummary
from ..schemas import (
    AdminLoginResponse, LoginAdmin, LoginVoter, Message, SessionInfo, VoterLoginResponse,
)
from ..security import verify_password
from ..storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post("/auth/voter/login", response_model=VoterLoginResponse)
async def voter_login(
    data: LoginVoter,
    storage: Storage = Depends(get_storage),
    sessions: SessionRegistry = Depends(get_sessions),
):
    voter = await storage.get_voter_by_voter_id(data.voter_id)
    if not voter or not verify_password(data.password, voter.password):
        logger.warning(f"Failed voter login for {data.voter_id}")
        raise UnauthorizedError("Invalid credentials")

    token = sessions.issue(VOTER, voter.id, voter.voter_id, voter.name)
    return VoterLoginResponse(
        message="Login successful",
        access_token=token,
        voter=VoterSummary(id=voter.id, voter_id=voter.voter_id, name=voter.name),
    )


@router.post("/auth/admin/login", response_model=AdminLoginResponse)
async def admin_login(
    data: LoginAdmin,
    storage: Storage = Depends(get_storage),
    sessions: SessionRegistry = Depends(get_sessions),
):
    admin = await storage.get_admin_by_username(data.username)
    if not admin or not verify_password(data.password, admin.password):
        logger.warning(f"Failed admin login for {data.username}")
        raise UnauthorizedError("Invalid credentials")

    token = sessions.issue(ADMIN, admin.id, admin.username)
    return AdminLoginResponse(
        message="Login successful",
        access_token=token,
        admin=AdminSummary(id=admin.id, username=admin.username),
    )


@router.post("/auth/logout", response_model=Message)
async def logout(
    principal: Principal = Depends(get_current_principal),
    sessions: SessionRegistry = Depends(get_sessions),
):
    sessions.revoke(principal)
    return Message(message="Logout successful")


@router.get("/me", response_model=SessionInfo)
async def current_session(principal: Principal = Depends(get_current_principal)):
    """Who the bearer token belongs to."""
    if principal.role == VOTER:
        user = VoterSummary(id=principal.id, voter_id=principal.subject, name=principal.name or "")
    else:
        user = AdminSummary(id=principal.id, username=principal.subject)
    return SessionInfo(type=principal.role, user=user)
