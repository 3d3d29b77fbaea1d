"""
Authentication utilities for Flask-Login.

The backend has a single administrator account configured through
ADMIN_USERNAME / ADMIN_PASSWORD.
"""

import hmac
from typing import Optional

from flask import request, session
from flask_login import LoginManager, UserMixin

from backoffice.services.container import get_container
from backoffice.services.factory import get_request_helpers

MAX_LOGIN_ATTEMPTS = 5

login_manager = LoginManager()


class LoginError(Exception):
    """Base class for failed sign-ins."""
    pass


class MissingCredentialsError(LoginError):
    pass


class InvalidCredentialsError(LoginError):
    pass


class AccountLockedError(InvalidCredentialsError):
    """Too many failed attempts in this session."""
    pass


class BackendUser(UserMixin):

    def __init__(self, username: str):
        self.id = username
        self.username = username


@login_manager.user_loader
def load_user(user_id: str) -> Optional[BackendUser]:
    cms = get_container().get("settings").cms
    if user_id == cms.admin_username:
        return BackendUser(user_id)
    return None


@login_manager.unauthorized_handler
def unauthorized():
    """Send anonymous visitors to the login page with a flash message."""
    helpers = get_request_helpers()
    message = helpers.context.lang.get("messages.login_required")
    return helpers.redirect_with_flash_message("error", message, "backend.login")


def authenticate(username: str, password: str) -> BackendUser:
    """
    Check the submitted credentials against the configured administrator.

    Raises:
        MissingCredentialsError: If a field is empty
        AccountLockedError: After MAX_LOGIN_ATTEMPTS failures in this session
        InvalidCredentialsError: If the credentials do not match
    """
    if not username or not password:
        raise MissingCredentialsError()

    failed = session.get("failed_logins", 0)
    if failed >= MAX_LOGIN_ATTEMPTS:
        raise AccountLockedError(username)

    cms = get_container().get("settings").cms
    valid = bool(cms.admin_password) and \
        hmac.compare_digest(username.encode(), cms.admin_username.encode()) and \
        hmac.compare_digest(password.encode(), cms.admin_password.encode())
    if not valid:
        session["failed_logins"] = failed + 1
        raise InvalidCredentialsError(username)

    session.pop("failed_logins", None)
    return BackendUser(username)
