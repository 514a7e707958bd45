"""
Authentication router handling the email/password login, logout, the current
user lookup and the optional OpenID Connect login flow.
The browser only holds a signed cookie with a session id; the session record
itself is kept server side (see database/session_store.py).
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from typing import Optional
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.exc import IntegrityError
from authlib.integrations.starlette_client import OAuth, OAuthError
from tutorhub.auth_tools import SESSION_ID_KEY, Identity, get_current_identity, identity_resolver
from tutorhub.config import get_settings
from tutorhub.credentials import CredentialStore, get_credential_store, hash_password
from tutorhub.database.session_store import SessionStore, get_session_store
from tutorhub.database.storage import DatabaseStorage, get_storage
from tutorhub.logger import logger, audit_logger
from tutorhub.schemas.authentication_schema import LoginRequest, LoggedInResponse, LoggedOutResponse
from tutorhub.schemas.user_schema import UserResponse
import secrets

router = APIRouter(prefix='/auth')

# Add rate limiting
limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)

SESSION_TTL_SECONDS = get_settings().session_expire_minutes * 60

# Initialize OAuth only if the identity provider is configured
oauth = None
oidc_client = None

if get_settings().oidc_enabled:
    try:
        oauth = OAuth()
        oidc_client = oauth.register(
            name="oidc",
            client_id=get_settings().oidc_client_id,
            client_secret=get_settings().oidc_client_secret,
            server_metadata_url=get_settings().oidc_server_metadata_url,
            client_kwargs={"scope": "openid profile email"},
        )
        logger.info("OIDC client initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize OIDC client: {str(e)}")
        raise e

def start_session(request: Request, store: SessionStore, data: dict) -> str:
    """
    Persist a new session record and point the cookie at it.

    Any record the cookie pointed at before is destroyed first, so a session id
    is never reused across logins. The write completes before this returns.
    """
    old_sid = request.session.get(SESSION_ID_KEY)
    if old_sid:
        store.destroy(old_sid)
    sid = secrets.token_urlsafe(32)
    store.save(sid, data, SESSION_TTL_SECONDS)
    request.session[SESSION_ID_KEY] = sid
    return sid

@router.post("/login", response_model=LoggedInResponse)
@limiter.limit(get_settings().login_rate_limit)
def login(
    request: Request,
    body: Optional[LoginRequest] = None,
    storage: DatabaseStorage = Depends(get_storage),
    store: SessionStore = Depends(get_session_store),
    credentials: CredentialStore = Depends(get_credential_store)
):
    """
    Log in with email and password.

    Unknown email and wrong password get the same answer so the endpoint does not
    reveal which accounts exist. The user row is created on the first login.

    Returns:
    - LoggedInResponse: success flag and the user record

    Raises:
    - HTTPException(400): If email or password is missing
    - HTTPException(401): If the credentials do not match
    - HTTPException(500): If the session could not be saved
    """
    if body is None or not body.email or not body.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    account = credentials.verify(body.email, body.password)
    if account is None:
        audit_logger.log_security_event("login_failed", None, {"email": body.email})
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user = storage.get_user_by_email(account.email)
    if user is None:
        logger.info(f"Creating user for {account.email} on first login.")
        user = storage.create_user_with_password(
            email=account.email,
            password_hash=hash_password(body.password),
            first_name=account.first_name,
            last_name=account.last_name,
            role=account.role
        )

    try:
        start_session(request, store, {"user_id": user.id})
    except Exception as e:
        logger.error(f"Session save error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to save session")

    audit_logger.log_security_event("login_success", user.id, {"method": "password"})
    logger.info(f"Success. User {user.email} logged in.")
    return {"success": True, "user": user}

@router.post("/logout", response_model=LoggedOutResponse)
def logout(request: Request, store: SessionStore = Depends(get_session_store)):
    """Destroy the server-side session and clear the cookie."""
    sid = request.session.get(SESSION_ID_KEY)
    try:
        if sid:
            record = store.load(sid)
            store.destroy(sid)
            user_id = identity_resolver.resolve(record)
            audit_logger.log_security_event("logout", user_id, {})
    except Exception as e:
        logger.error(f"Logout error: {str(e)}")
        raise HTTPException(status_code=500, detail="Logout failed")
    request.session.clear()
    return {"success": True}

@router.get("/user", response_model=Optional[UserResponse])
def current_user(identity: Optional[Identity] = Depends(get_current_identity)):
    """Return the logged in user, or null for anonymous callers."""
    if identity is None:
        return None
    return identity.user

def _require_oidc():
    if oidc_client is None:
        raise HTTPException(status_code=404, detail="OIDC login is not configured")
    return oidc_client

@router.get("/oidc/login")
async def oidc_login(request: Request):
    """Redirect the browser to the identity provider."""
    client = _require_oidc()
    try:
        return await client.authorize_redirect(request, get_settings().oidc_redirect_uri)
    except Exception as e:
        logger.error(f"OIDC login error: {str(e)}")
        raise HTTPException(status_code=500, detail="Authentication failed")

@router.get("/oidc/callback")
async def oidc_callback(
    request: Request,
    storage: DatabaseStorage = Depends(get_storage),
    store: SessionStore = Depends(get_session_store)
):
    """
    Callback after a successful login at the identity provider.

    Upserts the user keyed by the subject claim and stores the claims in the
    session record, where the claim strategy of the identity resolver finds them.
    """
    client = _require_oidc()
    try:
        token = await client.authorize_access_token(request)
    except OAuthError as e:
        logger.error(f"OIDC callback error: {str(e)}")
        raise HTTPException(status_code=400, detail="Authorization failed")

    claims = dict(token.get("userinfo") or {})
    if not claims.get("sub"):
        raise HTTPException(status_code=400, detail="Identity provider returned no subject")

    try:
        user = storage.upsert_user({
            "id": claims["sub"],
            "email": claims.get("email"),
            "first_name": claims.get("given_name"),
            "last_name": claims.get("family_name"),
            "profile_image_url": claims.get("picture"),
        })
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Email is already linked to another account")

    try:
        start_session(request, store, {"claims": claims, "expires_at": token.get("expires_at")})
    except Exception as e:
        logger.error(f"Session save error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to save session")

    audit_logger.log_security_event("oidc_login", user.id, {"email": user.email})
    return RedirectResponse(url="/")
