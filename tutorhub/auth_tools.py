from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from tutorhub.database.database import get_db, User, UserRole
from tutorhub.database.session_store import SessionStore, get_session_store
from tutorhub.logger import logger

# Key in the signed cookie session that points at the server-side record
SESSION_ID_KEY = "sid"

#############################
### IDENTITY RESOLUTION ###
#############################

class IdentityStrategy:
    """One way of turning loaded session data into a user id."""

    def resolve(self, session_data: dict) -> Optional[str]:
        raise NotImplementedError

class SessionUserStrategy(IdentityStrategy):
    """User id written into the session record by the email/password login."""

    def resolve(self, session_data: dict) -> Optional[str]:
        return session_data.get("user_id") or None

class OidcClaimStrategy(IdentityStrategy):
    """Subject claim of an external identity provider login."""

    def resolve(self, session_data: dict) -> Optional[str]:
        claims = session_data.get("claims") or {}
        expires_at = session_data.get("expires_at")
        if expires_at is not None and expires_at <= datetime.now(timezone.utc).timestamp():
            return None
        return claims.get("sub") or None

class IdentityResolver:
    """Tries each strategy in order and returns the first user id found."""

    def __init__(self, strategies: List[IdentityStrategy]):
        self.strategies = strategies

    def resolve(self, session_data: Optional[dict]) -> Optional[str]:
        if not session_data:
            return None
        for strategy in self.strategies:
            user_id = strategy.resolve(session_data)
            if user_id:
                return user_id
        return None

identity_resolver = IdentityResolver([SessionUserStrategy(), OidcClaimStrategy()])

@dataclass
class Identity:
    """The caller of the current request, resolved once and passed to every check."""
    user_id: str
    role: Optional[UserRole]
    user: Optional[User]

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

##################################
### AUTHORIZATION DEPENDENCIES ###
##################################

def get_session_data(request: Request, store: SessionStore = Depends(get_session_store)) -> Optional[dict]:
    """Load the server-side record referenced by the session cookie, if any."""
    sid = request.session.get(SESSION_ID_KEY)
    if not sid:
        return None
    return store.load(sid)

def get_current_identity(
    session_data: Optional[dict] = Depends(get_session_data),
    db: Session = Depends(get_db)
) -> Optional[Identity]:
    """
    Resolve the caller without rejecting anonymous requests.

    Returns:
    - Identity: The caller, or None when no identity could be resolved
    """
    user_id = identity_resolver.resolve(session_data)
    if not user_id:
        return None
    user = db.get(User, user_id)
    if user is None:
        logger.warning(f"Session references unknown user {user_id}")
    return Identity(user_id=user_id, role=user.role if user else None, user=user)

def require_user(identity: Optional[Identity] = Depends(get_current_identity)) -> Identity:
    """Reject requests without a resolved identity."""
    if identity is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return identity

def admin_only(identity: Identity = Depends(require_user)) -> Identity:
    """Verify that the user is an admin"""
    if not identity.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden: admin access required")
    return identity

def verify_owner_or_admin(identity: Identity, owner_id: str, detail: str = "Forbidden") -> None:
    """Allow the owner of a record or any admin, reject everyone else."""
    if identity.is_admin or identity.user_id == owner_id:
        return
    raise HTTPException(status_code=403, detail=detail)
