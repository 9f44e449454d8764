"""
Identity adapter.
Token issuance lives in the user service; here a verified JWT is turned into
an explicit Identity that is passed into every service call.
"""

from dataclasses import dataclass
from flask_jwt_extended import get_jwt, get_jwt_identity
from participation_service.errors import Unauthorized


@dataclass(frozen=True)
class Identity:
    user_id: str
    is_admin: bool = False
    is_active: bool = True


def current_identity():
    """
    Build the caller's Identity from the JWT of the current request.
    Must run inside a @jwt_required() view. Claims are read per request and
    never cached between calls.
    """
    claims = get_jwt()
    return Identity(
        user_id=str(get_jwt_identity()),
        is_admin=claims.get("is_admin") is True,
        is_active=claims.get("is_active", True) is not False,
    )


def require_admin(identity):
    """Raise Unauthorized unless the identity carries the admin claim."""
    if identity is None or not identity.is_admin:
        raise Unauthorized()
    return identity


def register_jwt_callbacks(jwt):
    """Render flask-jwt-extended failures in the service's error envelope."""

    def _error(error_code, message):
        return {"success": False, "error_code": error_code, "message": message}, 401

    @jwt.unauthorized_loader
    def missing_token(reason):
        return _error("AUTHENTICATION_REQUIRED", reason)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return _error("INVALID_TOKEN", reason)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return _error("TOKEN_EXPIRED", "Token has expired")
