from pydantic import BaseModel
from typing import Any, Dict, Optional
from app.schemas.listing import Notification

class User(BaseModel):
    id: str
    email: str = ""

class SignUpRequest(BaseModel):
    email: str
    password: str

class SessionResponse(BaseModel):
    user: Optional[User] = None
    session: Optional[Dict[str, Any]] = None
    loading: bool = False

class AuthResponse(BaseModel):
    user: Optional[User] = None
    session: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    notification: Notification
    access_token: Optional[str] = None
    token_type: Optional[str] = None
