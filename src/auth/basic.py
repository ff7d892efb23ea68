"""
Module: basic.py
Description: HTTP basic authentication for the broker API.

The platform marketplace authenticates to the broker with a single
username/password pair taken from settings. Comparisons are constant
time. An empty configured password rejects every request rather than
accepting an empty one.

Key Components:
- verify_broker_credentials(): FastAPI dependency guarding /v2 routes
- credentials_match(): Constant-time comparison helper

Dependencies: FastAPI, secrets
Author: SQS Broker Team
"""

import secrets

from fastapi import Depends, HTTPException
from fastapi import status as status_codes
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from config.settings import settings
from utils.logger import get_logger

logger = get_logger(__name__)

security = HTTPBasic()


def credentials_match(username: str, password: str, expected_username: str, expected_password: str) -> bool:
    """
    Compare credentials in constant time.

    Returns:
        True only if both parts match and a password is configured
    """
    if not expected_password:
        return False

    username_ok = secrets.compare_digest(username.encode("utf-8"), expected_username.encode("utf-8"))
    password_ok = secrets.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8"))
    return username_ok and password_ok


def verify_broker_credentials(credentials: HTTPBasicCredentials = Depends(security)) -> str:
    """
    Dependency that authenticates the platform.

    Returns:
        The authenticated username

    Raises:
        HTTPException: 401 if the credentials are wrong
    """
    if not credentials_match(
        credentials.username,
        credentials.password,
        settings.broker_username,
        settings.broker_password
    ):
        logger.warning("Broker authentication failed", username=credentials.username)
        raise HTTPException(
            status_code=status_codes.HTTP_401_UNAUTHORIZED,
            detail="Invalid broker credentials",
            headers={"WWW-Authenticate": "Basic"}
        )

    return credentials.username
