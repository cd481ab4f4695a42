# tawsila_admin/models/auth.py
from typing import Any, Dict, Optional

from pydantic import BaseModel


class LoginCredentials(BaseModel):
    email: str
    password: str


class SetPasswordRequest(BaseModel):
    new_password: str
    new_password_confirmation: str


class LoginResult(BaseModel):
    """Outcome of a login or set-password call"""
    access_token: str = ""
    token_type: str = "Bearer"
    expires_at: Optional[str] = None
    message: Optional[str] = None
    requires_password_change: bool = False
    user: Optional[Dict[str, Any]] = None
