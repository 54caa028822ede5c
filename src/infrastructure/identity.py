"""
Request identity.

Authentication happens upstream; the gateway forwards the validated user id
in a header. Requests without it are anonymous.
"""
from typing import Optional

from flask import jsonify
from flask_login import LoginManager, UserMixin, current_user

from .config import settings

login_manager = LoginManager()


class Identity(UserMixin):
    """A signed-in user, known only by id."""

    def __init__(self, user_id: str):
        self.id = user_id


@login_manager.request_loader
def load_identity_from_request(request) -> Optional[Identity]:
    user_id = request.headers.get(settings.IDENTITY_HEADER, "").strip()
    return Identity(user_id) if user_id else None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "Unauthorized", "message": "Sign in to access this resource"}), 401


def current_user_id() -> Optional[str]:
    """The requesting user's id, or None for anonymous requests."""
    if current_user.is_authenticated:
        return current_user.get_id()
    return None
