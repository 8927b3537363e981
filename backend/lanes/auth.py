"""
Firebase authentication for FastAPI.

Verifies Firebase ID tokens, extracts user information, and keeps a local
user record in sync with the verified claims.
"""

import os
from pathlib import Path
import firebase_admin
from firebase_admin import auth, credentials, exceptions as firebase_exceptions
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lanes.config import get_settings
from lanes.database import get_session
from lanes.exceptions import AuthenticationError
from lanes.models import User
from lanes.logging_config import get_logger

logger = get_logger(__name__)


def _init_firebase() -> None:
    """Initialize the Firebase Admin SDK once, looking for a service account key."""
    try:
        firebase_admin.get_app()
        return  # Already initialized
    except ValueError:
        pass  # Need to initialize

    # __file__ = backend/lanes/auth.py → .parent.parent = backend/
    backend_dir = Path(__file__).parent.parent

    possible_paths = []

    settings = get_settings()
    if settings.firebase_credentials:
        possible_paths.append(Path(settings.firebase_credentials))

    possible_paths.extend([
        backend_dir / "serviceAccountKey.json",
        backend_dir / "firebase-service-account.json",
    ])

    # Firebase's default naming pattern: *-firebase-adminsdk-*.json
    possible_paths.extend(backend_dir.glob("*-firebase-adminsdk-*.json"))

    env_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", "")
    if env_path:
        possible_paths.append(Path(env_path))

    for key_path in possible_paths:
        if key_path.exists() and key_path.is_file():
            cred = credentials.Certificate(str(key_path))
            firebase_admin.initialize_app(cred)
            logger.info(f"Firebase Admin SDK initialized with: {key_path.name}")
            return

    logger.warning("No Firebase service account key found! Token verification may fail.")
    firebase_admin.initialize_app()
    logger.info("Firebase Admin SDK initialized without credentials")


security = HTTPBearer(auto_error=False)


class AuthenticatedUser:
    """The verified caller. Passed explicitly to every handler that needs it."""

    def __init__(self, uid: str, email: str | None, name: str | None):
        self.uid = uid
        self.email = email
        self.name = name

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.email:
            return self.email.split("@")[0]
        return self.uid

    def __repr__(self):
        return f"AuthenticatedUser(uid={self.uid}, email={self.email})"


async def verify_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthenticatedUser:
    """
    Verify the Firebase ID token from the Authorization header.

    Raises:
        AuthenticationError: If the token is missing, invalid or expired.
    """
    if credentials is None:
        raise AuthenticationError()

    _init_firebase()

    try:
        decoded_token = auth.verify_id_token(credentials.credentials)
    except auth.ExpiredIdTokenError:
        logger.warning("Expired Firebase token")
        raise AuthenticationError("Token has expired")
    except auth.InvalidIdTokenError:
        logger.warning("Invalid Firebase token")
        raise AuthenticationError("Invalid authentication token")
    except (ValueError, firebase_exceptions.FirebaseError) as e:
        logger.error(f"Authentication error: {e}")
        raise AuthenticationError("Authentication failed")

    user = AuthenticatedUser(
        uid=decoded_token["uid"],
        email=decoded_token.get("email"),
        name=decoded_token.get("name"),
    )
    logger.debug(f"Authenticated user: {user.uid} ({user.email})")
    return user


async def sync_user(session: AsyncSession, user: AuthenticatedUser) -> User:
    """Create or refresh the local record for a verified identity."""
    record = await session.get(User, user.uid)

    if record is None:
        record = User(id=user.uid, email=user.email, display_name=user.display_name)
        try:
            async with session.begin_nested():
                session.add(record)
        except IntegrityError:
            # A concurrent first request registered the same uid
            record = await session.get(User, user.uid, populate_existing=True)
            if record is None:
                raise
            logger.debug(f"User {user.uid} was registered concurrently")
        else:
            logger.info(f"Registered user {user.uid} ({user.email})")
            return record

    if record.email != user.email or record.display_name != user.display_name:
        record.email = user.email
        record.display_name = user.display_name
        await session.flush()
        logger.debug(f"Refreshed profile for user {user.uid}")

    return record


async def get_current_user(
    user: AuthenticatedUser = Depends(verify_bearer_token),
    session: AsyncSession = Depends(get_session),
) -> AuthenticatedUser:
    """Verified caller, with the local user record guaranteed to exist."""
    await sync_user(session, user)
    return user
