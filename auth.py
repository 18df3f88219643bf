"""
Admin authentication.

A single static bearer token guards the admin endpoints. The stored
``encrypted_password`` is only base64 reversed, so anyone with this file can
decode it; it is kept because existing rows were written that way.
"""

import base64
import logging
from typing import Optional

from fastapi import Header, HTTPException

from database import ADMIN_CREDENTIALS, MissingTableError, StoreError, TableStore
from schemas import AdminCredential

logger = logging.getLogger(__name__)

ADMIN_TOKEN = "authenticated_admin_token"
DEFAULT_USERNAME = "admin"
DEFAULT_PASSWORD = "admin123"


class Unauthorized(Exception):
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)
        self.message = message


def simple_encrypt(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")[::-1]


def simple_decrypt(encoded: str) -> str:
    return base64.b64decode(encoded[::-1]).decode("utf-8")


def check_token(token: Optional[str]) -> bool:
    return token == ADMIN_TOKEN


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    return authorization.replace("Bearer ", "", 1)


def _granted(username: str) -> dict:
    return {"success": True, "token": ADMIN_TOKEN, "user": {"username": username}}


def login(store: TableStore, username: str, password: str) -> dict:
    """Check a username/password pair and return the admin token.

    When the credentials table is missing or has no row for ``username`` the
    built-in admin/admin123 pair is accepted instead. Raises ``Unauthorized``.
    """
    try:
        credentials = store.select_one(ADMIN_CREDENTIALS, {"username": username})
    except MissingTableError as e:
        logger.info("Credentials table unavailable (%s), using default credentials", e)
        credentials = None
    except StoreError as e:
        logger.error("Failed to look up credentials for %s: %s", username, e)
        raise Unauthorized("System error")

    if credentials is None:
        if username == DEFAULT_USERNAME and password == DEFAULT_PASSWORD:
            logger.info("Login with default credentials")
            return _granted(DEFAULT_USERNAME)
        logger.info("Default credentials rejected for %s", username)
        raise Unauthorized()

    plain_ok = password == credentials.get("password")
    encrypted_ok = simple_encrypt(password) == credentials.get("encrypted_password")
    if plain_ok or encrypted_ok:
        logger.info("Login succeeded for %s", username)
        return _granted(username)
    logger.info("Wrong password for %s", username)
    raise Unauthorized()


def verify(token: Optional[str]) -> dict:
    if token and check_token(token):
        return {"valid": True, "user": {"username": DEFAULT_USERNAME}}
    return {"valid": False}


def ensure_admin_credentials(store: TableStore) -> bool:
    """Create the admin credential row if it is not there yet."""
    logger.info("Checking admin credentials...")
    try:
        existing = store.select_one(ADMIN_CREDENTIALS, {"username": DEFAULT_USERNAME})
    except StoreError as e:
        logger.warning("Could not read admin credentials: %s", e)
        existing = None
    if existing:
        logger.info("Admin credentials already exist")
        return True

    credential = AdminCredential(
        username=DEFAULT_USERNAME,
        password=DEFAULT_PASSWORD,
        encrypted_password=simple_encrypt(DEFAULT_PASSWORD),
    )
    try:
        store.insert(ADMIN_CREDENTIALS, [credential.model_dump()])
    except StoreError as e:
        logger.error("Could not create admin credentials: %s", e)
        return False
    logger.info("Admin credentials created for user %s", DEFAULT_USERNAME)
    return True


def require_admin(authorization: Optional[str] = Header(None)) -> str:
    """FastAPI dependency guarding the admin endpoints."""
    token = bearer_token(authorization)
    if not check_token(token):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return token
