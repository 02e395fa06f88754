from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from teamboard.database import get_db
from teamboard.schemas.common import Envelope
from teamboard.schemas.user import (
    AccountDelete,
    AuthSession,
    PasswordChange,
    ProfileUpdate,
    UserInfo,
    UserLogin,
    UserOut,
    UserRegister,
)
from teamboard.services.identity import IdentityService
from teamboard.utils.auth import Principal, get_current_principal, issue_token
from teamboard.utils.errors import NotFoundError

router = APIRouter()


def _session(user) -> AuthSession:
    return AuthSession(user=UserOut.model_validate(user), access_token=issue_token(user))


@router.post("/register", response_model=Envelope[AuthSession], status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    user = IdentityService(db).register(payload)
    return Envelope[AuthSession](message="User registered successfully", data=_session(user))


@router.post("/login", response_model=Envelope[AuthSession])
def login(payload: UserLogin, db: Session = Depends(get_db)):
    user = IdentityService(db).authenticate(payload.email, payload.password)
    return Envelope[AuthSession](message="Login successful", data=_session(user))


@router.post("/logout", response_model=Envelope[None])
def logout(principal: Principal = Depends(get_current_principal)):
    # Tokens are stateless; the client drops its copy
    return Envelope[None](message="Logout successful")


@router.get("/profile", response_model=Envelope[UserOut])
def get_profile(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    user = IdentityService(db).get_user(principal.user_id)
    return Envelope[UserOut](message="Profile retrieved successfully", data=UserOut.model_validate(user))


@router.put("/profile", response_model=Envelope[UserOut])
def update_profile(
    payload: ProfileUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    user = IdentityService(db).update_profile(principal.user_id, payload)
    return Envelope[UserOut](message="Profile updated successfully", data=UserOut.model_validate(user))


@router.put("/change-password", response_model=Envelope[None])
def change_password(
    payload: PasswordChange,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    IdentityService(db).change_password(principal.user_id, payload.current_password, payload.new_password)
    return Envelope[None](message="Password changed successfully")


@router.delete("/delete-account", response_model=Envelope[None])
def delete_account(
    payload: AccountDelete,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    IdentityService(db).delete_account(principal.user_id, payload.password)
    return Envelope[None](message="Account deleted successfully")


@router.get("/check-auth", response_model=Envelope[UserOut])
def check_auth(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    user = IdentityService(db).get_user(principal.user_id)
    return Envelope[UserOut](message="User is authenticated", data=UserOut.model_validate(user))


@router.get("/user-info", response_model=Envelope[UserInfo])
def user_info(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    user = IdentityService(db).get_user(principal.user_id)
    return Envelope[UserInfo](message="User info retrieved successfully", data=UserInfo.model_validate(user))


@router.get("/refresh-session", response_model=Envelope[AuthSession])
def refresh_session(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    user = IdentityService(db).find_by_id(principal.user_id)
    if not user:
        raise NotFoundError("User no longer exists")
    return Envelope[AuthSession](message="Session refreshed successfully", data=_session(user))
