# clima/routers/users.py
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from clima.core.auth import get_auth_service, require_auth
from clima.core.errors import NotFoundError, ServerError
from clima.database import get_session
from clima.models.user import User
from clima.schemas.user import (
    EmailCheckResponse,
    EmailRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    RegisterRequest,
    RegisterResponse,
    ResetLinkResponse,
    ResetPasswordRequest,
    UserRead,
)
from clima.services.auth_service import AuthService

router = APIRouter(prefix="/users", tags=["Users"])


# -------- Registration & login --------


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Create an account.

    Errors:
      - 400: missing fields, or username/email already registered
    """
    user = service.register(
        session,
        username=payload.username,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        phone=payload.phone,
    )
    return RegisterResponse(
        message="User registered successfully.",
        data=UserRead.model_validate(user, from_attributes=True),
    )


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Exchange email + password for the user profile and a bearer token.

    The client keeps both in cookies (`auth_token`, `user_data`).
    """
    user, token = service.login(session, payload.email, payload.password)
    return LoginResponse(
        message="Login successful.",
        user=UserRead.model_validate(user, from_attributes=True),
        token=token,
    )


# -------- Password reset --------


@router.post("/checkEmail", response_model=EmailCheckResponse)
def check_email(
    payload: EmailRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """Return {id, email} if the address is registered, else 404."""
    user = service.check_email(session, payload.email)
    return EmailCheckResponse(id=user.id, email=user.email)


@router.post("/reques", response_model=MessageResponse)
def request_password_reset(
    payload: EmailRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Email a reset link to a registered address.

    Errors:
      - 400: email missing or not registered
      - 500: the email provider failed
    """
    try:
        service.request_password_reset(session, payload.email)
    except NotFoundError as exc:
        exc.status_code = status.HTTP_400_BAD_REQUEST
        raise
    except ServerError as exc:
        raise ServerError("Error requesting password reset.") from exc
    return MessageResponse(message="Password reset email sent.")


@router.get("/link", response_model=ResetLinkResponse)
def validate_reset_link(
    token: str | None = Query(default=None),
    service: AuthService = Depends(get_auth_service),
):
    """
    Verify the token from an emailed reset link.

    Returns the embedded id/email so the client can submit the new password.
    """
    user_id, email = service.validate_reset_link(token)
    return ResetLinkResponse(id=user_id, email=email, token=token)


@router.post("/resetPassword", response_model=MessageResponse)
def reset_password(
    payload: ResetPasswordRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Set a new password for the (id, email) of a validated reset link.

    Errors:
      - 400: missing fields, no user with that id and email, or a token
        that does not match
    """
    try:
        service.reset_password(
            session,
            user_id=payload.id,
            email=payload.email,
            new_password=payload.password,
            token=payload.token,
        )
    except NotFoundError as exc:
        exc.status_code = status.HTTP_400_BAD_REQUEST
        raise
    return MessageResponse(message="Password changed successfully.")


# -------- Self profile --------


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.

    Auth:
      - Requires the bearer token returned by /login.
    """
    return UserRead.model_validate(current_user, from_attributes=True)


@router.put("/update", response_model=ProfileUpdateResponse)
def update_me(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    service: AuthService = Depends(get_auth_service),
):
    """
    Update the authenticated user's profile (partial update).

    Editable: username, full_name, phone, role.
    """
    user = service.update_profile(session, current_user, payload)
    return ProfileUpdateResponse(
        message="Profile updated.",
        user=UserRead.model_validate(user, from_attributes=True),
    )
