# teamboard/utils/auth.py
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from teamboard.database import get_db
from teamboard.models.user import User
from teamboard.services.identity import IdentityService
from teamboard.utils.errors import AuthError
from teamboard.utils.security import create_access_token, verify_token

# auto_error is off so public routes can run without a token
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


class Principal(BaseModel):
    """The authenticated caller attached to a request"""
    model_config = ConfigDict(frozen=True)

    user_id: int


def issue_token(user: User) -> str:
    return create_access_token({"sub": str(user.id)})


def get_optional_principal(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> Optional[Principal]:
    """Resolve the bearer token if there is one and its user still exists"""
    if not token:
        return None

    payload = verify_token(token)
    if not payload:
        return None
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

    # Tokens outlive deleted accounts; re-check the user on every request
    if IdentityService(db).find_by_id(user_id) is None:
        return None
    return Principal(user_id=user_id)


def get_current_principal(principal: Optional[Principal] = Depends(get_optional_principal)) -> Principal:
    if principal is None:
        raise AuthError("Authentication required")
    return principal
