"""
Authentication service for users and sessions
"""

import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

import bcrypt
import httpx
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrack.config import settings
from jobtrack.errors import AuthenticationError
from jobtrack.models.user import User, UserSession
from jobtrack.utils import utcnow

logger = logging.getLogger(__name__)

GOOGLE_PROVIDER = "google"
SUPPORTED_PROVIDERS = (GOOGLE_PROVIDER,)
_GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class AuthService:
    """Registers users, checks credentials and manages bearer sessions."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.session_duration_hours = settings.session_duration_hours

    async def register_user(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> User:
        """
        Register a new email/password user.

        Raises:
            ValueError: If the email is already registered
        """
        email = email.strip().lower()
        if await self._get_user_by_email(email):
            raise ValueError(f"Email '{email}' is already registered")

        user = User(
            email=email,
            display_name=display_name,
            password_hash=self._hash_password(password),
            created_at=utcnow(),
        )
        self.db.add(user)
        await self.db.flush()

        logger.info(f"Registered new user: {email}")
        return user

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user when the password matches, otherwise None."""
        email = email.strip().lower()
        user = await self._get_user_by_email(email)

        if not user:
            logger.warning(f"Authentication failed: user '{email}' not found")
            return None

        if not user.password_hash:
            logger.warning(f"Authentication failed: '{email}' signs in with {user.auth_provider}")
            return None

        if not self._verify_password(password, user.password_hash):
            logger.warning(f"Authentication failed: invalid password for '{email}'")
            return None

        user.last_login = utcnow()
        await self.db.flush()

        logger.info(f"User '{email}' authenticated successfully")
        return user

    async def authenticate_federated(self, provider: str, id_token: str) -> User:
        """
        Sign in with an identity provider token, creating the user on first use.

        Raises:
            AuthenticationError: If the provider is unsupported or the token is rejected
        """
        if provider not in SUPPORTED_PROVIDERS:
            raise AuthenticationError(f"Unsupported identity provider: {provider}")

        claims = await self.verify_google_token(id_token)
        email = claims["email"].strip().lower()
        subject = claims.get("sub")

        user = await self._get_user_by_email(email)
        if user is None:
            user = User(
                email=email,
                display_name=claims.get("name"),
                auth_provider=provider,
                provider_subject=subject,
                created_at=utcnow(),
            )
            self.db.add(user)
            logger.info(f"Created user {email} from {provider} sign-in")
        elif not user.auth_provider:
            user.auth_provider = provider
            user.provider_subject = subject

        user.last_login = utcnow()
        await self.db.flush()
        return user

    async def verify_google_token(self, id_token: str) -> Dict[str, Any]:
        """Check an ID token with Google's token-info endpoint and return its claims."""
        if not settings.google_client_id:
            raise AuthenticationError("Google sign-in is not configured")

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(
                    settings.google_tokeninfo_url,
                    params={"id_token": id_token},
                )
        except httpx.HTTPError as e:
            logger.error(f"Token verification request failed: {e}")
            raise AuthenticationError("Could not verify identity token") from e

        if response.status_code != 200:
            logger.warning(f"Identity token rejected: HTTP {response.status_code}")
            raise AuthenticationError("Invalid identity token")

        claims = response.json()
        if claims.get("aud") != settings.google_client_id:
            raise AuthenticationError("Identity token was issued for another client")
        if claims.get("iss") and claims["iss"] not in _GOOGLE_ISSUERS:
            raise AuthenticationError("Identity token has an unknown issuer")
        if not claims.get("email"):
            raise AuthenticationError("Identity token carries no email")
        if str(claims.get("email_verified", "true")).lower() != "true":
            raise AuthenticationError("Email address is not verified")

        return claims

    async def create_session(self, user_id: str, duration_hours: Optional[int] = None) -> UserSession:
        duration = duration_hours or self.session_duration_hours
        now = utcnow()

        session = UserSession(
            user_id=user_id,
            token=secrets.token_urlsafe(32),
            expires_at=now + timedelta(hours=duration),
            created_at=now,
        )
        self.db.add(session)
        await self.db.flush()

        logger.info(f"Created session for user {user_id}")
        return session

    async def validate_session(self, token: str) -> Optional[User]:
        """Return the session's user, or None if the token is unknown or expired."""
        session = await self.db.scalar(select(UserSession).where(UserSession.token == token))
        if not session:
            return None

        if session.expires_at < utcnow():
            logger.info(f"Session {session.id} expired")
            await self.db.delete(session)
            await self.db.flush()
            return None

        return await self.db.get(User, session.user_id)

    async def logout(self, token: str) -> bool:
        result = await self.db.execute(delete(UserSession).where(UserSession.token == token))
        if result.rowcount:
            logger.info("Session invalidated")
            return True
        return False

    async def cleanup_expired_sessions(self) -> int:
        result = await self.db.execute(delete(UserSession).where(UserSession.expires_at < utcnow()))
        count = result.rowcount or 0
        if count > 0:
            logger.info(f"Cleaned up {count} expired sessions")
        return count

    async def update_profile(self, user: User, display_name: Optional[str]) -> User:
        user.display_name = display_name.strip() if display_name else None
        await self.db.flush()
        return user

    async def _get_user_by_email(self, email: str) -> Optional[User]:
        return await self.db.scalar(select(User).where(User.email == email))

    def _hash_password(self, password: str) -> str:
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
        return hashed.decode("utf-8")

    def _verify_password(self, password: str, password_hash: str) -> bool:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
