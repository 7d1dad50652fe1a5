# clima/services/auth_service.py
import html
import logging
import time
from dataclasses import dataclass
from urllib.parse import urlencode

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from clima.core.config import Settings
from clima.core.email_client import Mailer, OutgoingEmail
from clima.core.errors import (
    AuthError,
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    require_fields,
)
from clima.core.security import (
    Clock,
    PasswordHasher,
    ResetTokenIssuer,
    SessionTokenIssuer,
    TokenSigner,
)
from clima.models.user import User
from clima.repositories.user_repo import UserRepository
from clima.schemas.user import ProfileUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthConfig:
    """
    Everything the auth flow needs from the outside world.

    Built once from Settings in production; tests build it directly with a
    recording mailer and a fake clock.
    """

    secret: str
    mailer: Mailer
    reset_url: str
    algorithm: str = "HS256"
    reset_token_minutes: int = 15
    session_token_minutes: int = 60 * 24 * 7
    reset_requires_token: bool = False
    clock: Clock = time.time

    @classmethod
    def from_settings(cls, settings: Settings, mailer: Mailer) -> "AuthConfig":
        return cls(
            secret=settings.JWT_SECRET,
            mailer=mailer,
            reset_url=settings.RESET_PASSWORD_URL,
            algorithm=settings.JWT_ALG,
            reset_token_minutes=settings.RESET_TOKEN_EXPIRE_MINUTES,
            session_token_minutes=settings.SESSION_TOKEN_EXPIRE_MINUTES,
            reset_requires_token=settings.RESET_REQUIRES_TOKEN,
        )


class AuthService:
    """
    Registration, login and password reset.

    Responsibilities:
      - hash passwords before they reach the store
      - mint and verify reset links and session tokens
      - send the reset email
      - raise domain errors (clima.core.errors); routers never see
        store or provider exceptions
    """

    def __init__(self, repo: UserRepository, config: AuthConfig):
        self.repo = repo
        self.config = config
        self.reset_tokens = ResetTokenIssuer(
            TokenSigner(
                config.secret,
                config.reset_token_minutes * 60,
                algorithm=config.algorithm,
                clock=config.clock,
            )
        )
        self.session_tokens = SessionTokenIssuer(
            TokenSigner(
                config.secret,
                config.session_token_minutes * 60,
                algorithm=config.algorithm,
                clock=config.clock,
            )
        )

    # ----- Registration & login -----

    def register(
        self,
        session: Session,
        username: str,
        email: str,
        password: str,
        full_name: str | None = None,
        phone: str | None = None,
    ) -> User:
        """
        Create an account.

        Raises:
            ValidationError: username, email or password missing.
            ConflictError: username or email already taken (store message).
        """
        require_fields(username=username, email=email, password=password)

        user = User(
            username=username,
            email=email,
            password=PasswordHasher.hash(password),
            full_name=full_name,
            phone=phone,
        )
        try:
            user = self.repo.create(session, user)
        except IntegrityError as exc:
            session.rollback()
            logger.info("Registration rejected by store for %s", email)
            raise ConflictError(str(exc.orig)) from exc

        logger.info("Registered user id=%s", user.id)
        return user

    def login(self, session: Session, email: str, password: str) -> tuple[User, str]:
        """
        Check credentials and return (user, session token).

        Unknown email and wrong password raise the same AuthError.
        """
        require_fields(email=email, password=password)

        user = self.repo.get_by_email(session, email)
        if user is None or not PasswordHasher.verify(password, user.password):
            logger.info("Failed login for %s", email)
            raise AuthError("Incorrect email or password.")

        return user, self.session_tokens.issue(user.id)

    def user_from_session_token(self, session: Session, token: str) -> User:
        """
        Resolve a bearer token to its user.

        Raises:
            AuthError: token invalid/expired or the user no longer exists.
        """
        try:
            user_id = self.session_tokens.verify(token)
        except InvalidTokenError as exc:
            raise AuthError("Invalid or expired session.") from exc

        user = self.repo.get_by_id(session, user_id)
        if user is None:
            raise AuthError("Invalid or expired session.")
        return user

    # ----- Password reset -----

    def check_email(self, session: Session, email: str) -> User:
        """
        Confirm an email is registered.

        Reveals whether an address has an account; the
        forgot-password page relies on it.
        """
        require_fields(email=email)
        user = self.repo.get_by_email(session, email)
        if user is None:
            raise NotFoundError("Email not found.")
        return user

    def build_reset_link(self, user: User) -> str:
        token = self.reset_tokens.issue(user.id, user.email)
        query = urlencode({"id": user.id, "email": user.email, "token": token})
        return f"{self.config.reset_url}?{query}"

    def request_password_reset(self, session: Session, email: str) -> None:
        """
        Email a reset link valid for `reset_token_minutes`.

        Raises:
            ValidationError: email missing.
            NotFoundError: email not registered.
            MailDeliveryError: the provider failed; nothing is retried.
        """
        require_fields(email=email)

        user = self.repo.get_by_email(session, email)
        if user is None:
            raise NotFoundError("Email is not registered.")

        link = self.build_reset_link(user)
        minutes = self.config.reset_token_minutes
        self.config.mailer.send(
            OutgoingEmail(
                to_email=user.email,
                subject="Password reset",
                text_body=(
                    "Hello,\n\n"
                    "To reset your password, open the following link:\n"
                    f"{link}\n\n"
                    f"This link is valid for {minutes} minutes. "
                    "If you did not request this change, please ignore this message.\n"
                ),
                html_body=(
                    "<p>Hello,</p>"
                    "<p>To reset your password, open the following link:</p>"
                    f'<p><a href="{html.escape(link)}">Reset password</a></p>'
                    f"<p>This link is valid for {minutes} minutes. "
                    "If you did not request this change, please ignore this message.</p>"
                ),
            )
        )
        logger.info("Password reset link sent to user id=%s", user.id)

    def validate_reset_link(self, token: str) -> tuple[int, str]:
        """
        Verify a reset token and return its (id, email).

        Side-effect free: the same token validates until it expires.
        """
        require_fields(token=token)
        return self.reset_tokens.verify(token)

    def reset_password(
        self,
        session: Session,
        user_id: int,
        email: str,
        new_password: str,
        token: str | None = None,
    ) -> None:
        """
        Overwrite the password hash of the user matching (id, email).

        If a token is given, or the config requires one, it must verify
        and name the same (id, email).

        Raises:
            ValidationError: a field is missing.
            InvalidTokenError: token required but absent, invalid, or for
                another account.
            NotFoundError: no row matches both id and email.
        """
        require_fields(id=user_id, email=email, password=new_password)

        if token or self.config.reset_requires_token:
            if not token:
                raise InvalidTokenError()
            token_id, token_email = self.reset_tokens.verify(token)
            if (token_id, token_email) != (user_id, email):
                raise InvalidTokenError()

        user = self.repo.get_by_id_and_email(session, user_id, email)
        if user is None:
            raise NotFoundError("User not found.")

        user.password = PasswordHasher.hash(new_password)
        self.repo.update(session, user)
        logger.info("Password changed for user id=%s", user.id)

    # ----- Profile -----

    def update_profile(
        self,
        session: Session,
        current_user: User,
        payload: ProfileUpdate,
    ) -> User:
        """
        Partial update of username, full_name, phone and role.

        Raises:
            ConflictError: new username already taken.
        """
        changes = payload.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if field == "username" and value is None:
                continue
            setattr(current_user, field, value)

        try:
            return self.repo.update(session, current_user)
        except IntegrityError as exc:
            session.rollback()
            raise ConflictError(str(exc.orig)) from exc
