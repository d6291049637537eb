from dataclasses import dataclass, field
from httpx import AsyncClient
from structlog import get_logger
from typing import Any, Callable, Dict, List, Optional
from app.config import settings
from app.schemas.auth import User
from app.schemas.listing import Notification

logger = get_logger()

_supabase_base = settings.SUPABASE_URL.rstrip("/")
_auth_base = f"{_supabase_base}/auth/v1"

INITIAL_SESSION = "INITIAL_SESSION"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthListener = Callable[[str, Optional[Dict[str, Any]]], None]

class AuthError(Exception):
    pass

@dataclass
class AuthResult:
    notification: Notification
    error: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

@dataclass
class Subscription:
    _listeners: List[AuthListener]
    callback: AuthListener
    active: bool = field(default=True)

    def unsubscribe(self) -> None:
        if self.active:
            self._listeners.remove(self.callback)
            self.active = False

def _error_message(resp) -> str:
    try:
        body = resp.json()
    except Exception:
        return resp.text or f"Upstream error ({resp.status_code})"
    if isinstance(body, dict):
        return (
            body.get("error_description")
            or body.get("msg")
            or body.get("message")
            or body.get("error")
            or f"Upstream error ({resp.status_code})"
        )
    return str(body)

def user_from_payload(payload: Optional[Dict[str, Any]]) -> Optional[User]:
    if not payload:
        return None
    user = payload.get("user") or payload
    uid = user.get("id") or user.get("sub")
    if uid is None:
        return None
    return User(id=str(uid), email=user.get("email") or "")

async def fetch_user(access_token: str) -> Dict[str, Any]:
    """Resolve an access token to the provider's user record."""
    async with AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
        resp = await client.get(
            f"{_auth_base}/user",
            headers={"apikey": settings.SUPABASE_KEY, "Authorization": f"Bearer {access_token}"},
        )
    logger.info("Auth user lookup", status_code=resp.status_code)
    if resp.status_code != 200:
        raise AuthError(_error_message(resp))
    return resp.json()

class AuthSession:
    """Current user and session, mirroring the identity provider's change events."""

    def __init__(self):
        self.user: Optional[User] = None
        self.session: Optional[Dict[str, Any]] = None
        self.loading = True
        self._listeners: List[AuthListener] = []

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self._listeners, callback)

    def _emit(self, event: str, session: Optional[Dict[str, Any]]) -> None:
        self.session = session
        self.user = user_from_payload(session)
        if self.user is None:
            self.session = None
        self.loading = False
        logger.info("Auth state changed", auth_event=event, user_id=self.user.id if self.user else None)
        for listener in list(self._listeners):
            listener(event, self.session)

    async def load(self, access_token: Optional[str]) -> None:
        if not access_token:
            self._emit(INITIAL_SESSION, None)
            return
        try:
            user = await fetch_user(access_token)
        except Exception as e:
            logger.warning("Initial session lookup failed", error=str(e))
            self._emit(INITIAL_SESSION, None)
            return
        self._emit(INITIAL_SESSION, {"access_token": access_token, "user": user})

    async def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            async with AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
                resp = await client.post(
                    f"{_auth_base}/token",
                    params={"grant_type": "password"},
                    headers={"apikey": settings.SUPABASE_KEY},
                    json={"email": email, "password": password},
                )
            logger.info("Sign-in upstream response", status_code=resp.status_code)
            if resp.status_code != 200:
                message = _error_message(resp)
                logger.warning("Sign-in rejected", status_code=resp.status_code, error=message)
                return AuthResult(
                    error=message,
                    notification=Notification(title="Sign in failed", description=message, variant="destructive"),
                )
            session = resp.json()
            self._emit(SIGNED_IN, session)
            return AuthResult(
                data=session,
                notification=Notification(title="Welcome back!", description="You have successfully signed in."),
            )
        except Exception as e:
            logger.error("Sign-in exception", error=str(e))
            return AuthResult(
                error=str(e),
                notification=Notification(title="Something went wrong", description=str(e), variant="destructive"),
            )

    async def sign_up(self, email: str, password: str) -> AuthResult:
        try:
            async with AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
                resp = await client.post(
                    f"{_auth_base}/signup",
                    headers={"apikey": settings.SUPABASE_KEY},
                    json={"email": email, "password": password},
                )
            logger.info("Sign-up upstream response", status_code=resp.status_code)
            if resp.status_code not in (200, 201):
                message = _error_message(resp)
                logger.warning("Sign-up rejected", status_code=resp.status_code, error=message)
                return AuthResult(
                    error=message,
                    notification=Notification(title="Sign up failed", description=message, variant="destructive"),
                )
            data = resp.json()
            # email confirmation flows return a bare user without a session
            if data.get("access_token"):
                self._emit(SIGNED_IN, data)
            return AuthResult(
                data=data,
                notification=Notification(title="Account created", description="You have successfully created an account."),
            )
        except Exception as e:
            logger.error("Sign-up exception", error=str(e))
            return AuthResult(
                error=str(e),
                notification=Notification(title="Something went wrong", description=str(e), variant="destructive"),
            )

    async def sign_out(self) -> AuthResult:
        token = (self.session or {}).get("access_token")
        try:
            if token:
                async with AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
                    resp = await client.post(
                        f"{_auth_base}/logout",
                        headers={"apikey": settings.SUPABASE_KEY, "Authorization": f"Bearer {token}"},
                    )
                logger.info("Sign-out upstream response", status_code=resp.status_code)
                if resp.status_code >= 400 and resp.status_code != 401:
                    raise AuthError(_error_message(resp))
            self._emit(SIGNED_OUT, None)
            return AuthResult(
                notification=Notification(title="Signed out", description="You have been signed out successfully."),
            )
        except Exception as e:
            logger.error("Sign-out exception", error=str(e))
            return AuthResult(
                error=str(e),
                notification=Notification(title="Sign out failed", description=str(e), variant="destructive"),
            )
