"""
Backend Blueprint

Controllers for the admin backend. Every request first goes through
init_backend(), which enforces HTTPS (when configured) and shares the
backend defaults into the views.
"""

import logging
from flask import Blueprint, g, jsonify, render_template, request
from flask_login import current_user, login_required, login_user, logout_user

from backoffice.services.container import get_container
from backoffice.services.factory import get_request_helpers
from backoffice.web.utils.auth import LoginError, authenticate

logger = logging.getLogger(__name__)

backend_bp = Blueprint("backend", __name__)

LOGIN_ERROR_MESSAGES = {
    "AccountLockedError": "messages.login_locked",
    "InvalidCredentialsError": "messages.login_invalid",
    "MissingCredentialsError": "messages.login_missing_fields",
    LoginError: "messages.login_error",
}


@backend_bp.before_request
def init_backend():
    settings = get_container().get("settings")
    helpers = get_request_helpers()

    if settings.web.force_ssl:
        response = helpers.force_ssl()
        if response is not None:
            return response

    helpers.init_base_controller()


@backend_bp.route("/")
@login_required
def dashboard():
    get_request_helpers().set_page_title("dashboard")
    return render_template("backend/dashboard.html", username=current_user.username)


@backend_bp.route("/login", methods=["GET"])
def login():
    get_request_helpers().set_page_title("login")
    return render_template("backend/login.html")


@backend_bp.route("/login", methods=["POST"])
def login_submit():
    helpers = get_request_helpers()
    lang = helpers.context.lang
    username = request.form.get("username", "").strip()
    password = request.form.get("password", "")

    try:
        user = authenticate(username, password)
    except LoginError as e:
        logger.info(f"Failed backend login for '{username}': {type(e).__name__}")
        message_key = helpers.handle_multiple_exceptions(e, LOGIN_ERROR_MESSAGES)
        return helpers.redirect_with_flash_message("error", lang.get(message_key), "backend.login")

    login_user(user)
    message = lang.get("messages.login_success", {"username": user.username})
    return helpers.redirect_with_flash_message("success", message, "backend.dashboard")


@backend_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    helpers = get_request_helpers()
    logout_user()
    message = helpers.context.lang.get("messages.logout_success")
    return helpers.redirect_with_flash_message("info", message, "backend.login")


@backend_bp.route("/ping")
def ping():
    """Elapsed time of this request so far, mostly useful for monitoring."""
    helpers = get_request_helpers()
    return jsonify({
        "status": "ok",
        "elapsed_ms": helpers.get_current_time_difference(g.request_started_at, "ms"),
    })
