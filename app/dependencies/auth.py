from fastapi import HTTPException, Depends
from fastapi.security import OAuth2PasswordBearer
from structlog import get_logger
from app.schemas.auth import User
from app.services.auth import fetch_user, user_from_payload

# Swagger logs in through the local /auth/login route
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")
logger = get_logger()

async def get_current_user(token: str = Depends(oauth2_scheme)) -> User:
    """Verify the bearer token with the identity provider and return the signed-in user."""
    try:
        payload = await fetch_user(token)
    except Exception as e:
        logger.warning("Token verification failed", error=str(e))
        raise HTTPException(status_code=401, detail="Invalid token")
    user = user_from_payload(payload)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user
