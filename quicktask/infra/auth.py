from __future__ import annotations

import hashlib
import hmac
import json
import logging
import re
import secrets
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from quicktask.domain.entities import AuthSession, AuthUser
from quicktask.domain.errors import AuthError, RemoteQueryError

from .models import AuthSessionModel, UserModel, utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
PBKDF2_ITERATIONS = 260_000
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

INVALID_CREDENTIALS = "Email or password is incorrect. Please try again."
INVALID_EMAIL = "Please enter a valid email address."
PASSWORD_TOO_SHORT = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
ALREADY_REGISTERED = "An account with this email already exists. Please try logging in instead."


def hash_password(password: str, *, iterations: int = PBKDF2_ITERATIONS) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), iterations)
    return f"pbkdf2_sha256${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$")
        if algorithm != "pbkdf2_sha256":
            return False
        digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), int(iterations))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False
    return hmac.compare_digest(digest.hex(), expected)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _to_user(model: UserModel) -> AuthUser:
    return AuthUser(id=model.id, email=model.email, created_at=model.created_at)


class AuthProvider:
    """Email/password accounts with opaque bearer tokens stored in ``auth_sessions``."""

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        session_ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utcnow,
        iterations: int = PBKDF2_ITERATIONS,
    ) -> None:
        self._session_factory = session_factory
        self._session_ttl = session_ttl
        self._clock = clock
        self._iterations = iterations

    def sign_up(self, email: str, password: str) -> AuthSession:
        email = normalize_email(email)
        if not EMAIL_PATTERN.match(email):
            raise AuthError(INVALID_EMAIL)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(PASSWORD_TOO_SHORT)

        try:
            with self._session_factory() as session:
                if session.scalar(select(UserModel.id).where(UserModel.email == email)):
                    raise AuthError(ALREADY_REGISTERED)
                user = UserModel(
                    email=email,
                    password_hash=hash_password(password, iterations=self._iterations),
                    created_at=self._clock(),
                )
                session.add(user)
                session.commit()
                session.refresh(user)
                auth_session = self._open_session(session, user)
        except IntegrityError as exc:
            raise AuthError(ALREADY_REGISTERED) from exc
        except SQLAlchemyError as exc:
            raise RemoteQueryError("sign up", exc) from exc

        logger.info("Registered user %s", auth_session.user.id)
        return auth_session

    def sign_in(self, email: str, password: str) -> AuthSession:
        email = normalize_email(email)
        if not EMAIL_PATTERN.match(email):
            raise AuthError(INVALID_EMAIL)

        try:
            with self._session_factory() as session:
                user = session.scalar(select(UserModel).where(UserModel.email == email))
                if not user or not verify_password(password or "", user.password_hash):
                    logger.info("Rejected sign-in for %s", email)
                    raise AuthError(INVALID_CREDENTIALS)
                auth_session = self._open_session(session, user)
        except SQLAlchemyError as exc:
            raise RemoteQueryError("sign in", exc) from exc

        logger.info("User %s signed in", auth_session.user.id)
        return auth_session

    def sign_out(self, access_token: str) -> None:
        try:
            with self._session_factory() as session:
                session.execute(delete(AuthSessionModel).where(AuthSessionModel.token == access_token))
                session.commit()
        except SQLAlchemyError as exc:
            raise RemoteQueryError("sign out", exc) from exc

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        if not access_token:
            return None
        try:
            with self._session_factory() as session:
                row = session.execute(
                    select(UserModel, AuthSessionModel.expires_at)
                    .join(AuthSessionModel, AuthSessionModel.user_id == UserModel.id)
                    .where(AuthSessionModel.token == access_token)
                ).first()
                if row is None:
                    return None
                user, expires_at = row
                if expires_at <= self._clock():
                    logger.debug("Access token for user %s has expired", user.id)
                    session.execute(delete(AuthSessionModel).where(AuthSessionModel.token == access_token))
                    session.commit()
                    return None
                return _to_user(user)
        except SQLAlchemyError as exc:
            raise RemoteQueryError("get user", exc) from exc

    def _open_session(self, session, user: UserModel) -> AuthSession:
        now = self._clock()
        session.execute(
            delete(AuthSessionModel).where(
                AuthSessionModel.user_id == user.id,
                AuthSessionModel.expires_at <= now,
            )
        )
        record = AuthSessionModel(
            token=secrets.token_urlsafe(32),
            user_id=user.id,
            created_at=now,
            expires_at=now + self._session_ttl,
        )
        session.add(record)
        session.commit()
        return AuthSession(access_token=record.token, user=_to_user(user), expires_at=record.expires_at)


class TokenStore:
    """Keeps the access token between runs, like a browser auth cookie."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            return None
        token = data.get("access_token") if isinstance(data, dict) else None
        return token or None

    def save(self, access_token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"access_token": access_token}), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class AuthContext:
    """The signed-in identity for one application session."""

    def __init__(self, provider: AuthProvider, token_store: TokenStore) -> None:
        self.provider = provider
        self.token_store = token_store

    def has_token(self) -> bool:
        return self.token_store.load() is not None

    def current_user(self) -> Optional[AuthUser]:
        token = self.token_store.load()
        if not token:
            return None
        try:
            user = self.provider.get_user(token)
        except RemoteQueryError:
            logger.exception("Could not resolve the stored access token")
            return None
        if user is None:
            logger.info("Stored access token was rejected; clearing it")
            self.token_store.clear()
        return user

    def sign_in(self, email: str, password: str) -> AuthUser:
        auth_session = self.provider.sign_in(email, password)
        self.token_store.save(auth_session.access_token)
        return auth_session.user

    def sign_up(self, email: str, password: str) -> AuthUser:
        auth_session = self.provider.sign_up(email, password)
        self.token_store.save(auth_session.access_token)
        return auth_session.user

    def sign_out(self) -> None:
        token = self.token_store.load()
        if token:
            try:
                self.provider.sign_out(token)
            except RemoteQueryError:
                raise AuthError("Failed to sign out. Please try again.") from None
        self.token_store.clear()
