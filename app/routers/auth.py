from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from fastapi_limiter.depends import RateLimiter
from structlog import get_logger
from app.config import settings
from app.dependencies.auth import oauth2_scheme
from app.schemas.auth import AuthResponse, SessionResponse, SignUpRequest
from app.services.auth import AuthSession

logger = get_logger()
router = APIRouter(prefix="/auth", tags=["auth"])

login_rate_limit = RateLimiter(times=settings.AUTH_RATE_LIMIT, seconds=60)

def _auth_response(session: AuthSession, result) -> dict:
    return {
        "user": session.user.model_dump() if session.user else None,
        "session": session.session,
        "error": result.error,
        "notification": result.notification.model_dump(),
    }

@router.post("/login", response_model=AuthResponse, dependencies=[Depends(login_rate_limit)])
async def login(form_data: OAuth2PasswordRequestForm = Depends()):
    session = AuthSession()
    result = await session.sign_in(form_data.username, form_data.password)
    if result.error:
        raise HTTPException(status_code=401, detail=_auth_response(session, result))
    logger.info("Signed in", user_id=session.user.id if session.user else None)
    body = _auth_response(session, result)
    # Swagger's OAuth2 flow reads the token from the top level
    body["access_token"] = (session.session or {}).get("access_token")
    body["token_type"] = "bearer"
    return body

@router.post("/signup", response_model=AuthResponse)
async def signup(data: SignUpRequest):
    session = AuthSession()
    result = await session.sign_up(data.email, data.password)
    if result.error:
        raise HTTPException(status_code=400, detail=_auth_response(session, result))
    logger.info("Signed up", email=data.email)
    return _auth_response(session, result)

@router.post("/logout", response_model=AuthResponse)
async def logout(token: str = Depends(oauth2_scheme)):
    session = AuthSession()
    await session.load(token)
    result = await session.sign_out()
    return _auth_response(session, result)

@router.get("/session", response_model=SessionResponse)
async def current_session(token: str = Depends(oauth2_scheme)):
    session = AuthSession()
    await session.load(token)
    return {"user": session.user, "session": session.session, "loading": session.loading}
