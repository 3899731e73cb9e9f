"""Request helpers shared by the feature controllers."""
from __future__ import annotations

from functools import wraps
from typing import Any, Optional

from flask import Flask, Response, current_app, g, jsonify, request

from ..core.constants import AUTH_COOKIE, REMEMBER_COOKIE
from ..core.exceptions import ValidationError
from ..users.service import AuthService, ResolvedIdentity

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def json_body(*, required: bool = True) -> dict:
    data = request.get_json(silent=True)
    if data is None:
        if required:
            raise ValidationError("Request body must be JSON")
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(status: int = 200, *, no_cache: bool = False, **payload: Any):
    resp = jsonify({"success": True, **payload})
    resp.status_code = status
    if no_cache:
        resp.headers.update(NO_CACHE_HEADERS)
    return resp


def _set_cookie(resp: Response, name: str, value: str, max_age: int) -> None:
    resp.set_cookie(
        name,
        value,
        max_age=max_age,
        httponly=True,
        samesite="Strict",
        secure=bool(current_app.config.get("COOKIE_SECURE", False)),
        path="/",
    )


def set_session_cookie(resp: Response, token: str, *, max_age: int) -> None:
    _set_cookie(resp, AUTH_COOKIE, token, max_age)


def set_remember_cookie(resp: Response, token: str, *, max_age: int) -> None:
    _set_cookie(resp, REMEMBER_COOKIE, token, max_age)


def clear_auth_cookies(resp: Response) -> None:
    secure = bool(current_app.config.get("COOKIE_SECURE", False))
    for name in (AUTH_COOKIE, REMEMBER_COOKIE):
        resp.delete_cookie(name, path="/", httponly=True, samesite="Strict", secure=secure)


def current_identity() -> ResolvedIdentity:
    return g.identity


def current_user_id() -> str:
    return g.identity.user_id


def make_login_required(auth_service: AuthService):
    """Build a view decorator that resolves the caller from the auth cookies.

    The resolved identity lands on ``g.identity``; a remember-token login is
    renewed by the ``after_request`` hook installed by ``install_session_renewal``.
    """

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.identity = auth_service.resolve_identity(
                request.cookies.get(AUTH_COOKIE),
                request.cookies.get(REMEMBER_COOKIE),
            )
            return view(*args, **kwargs)

        return wrapper

    return login_required


def install_session_renewal(app: Flask, *, session_max_age: int) -> None:
    @app.after_request
    def renew_session_cookie(resp: Response) -> Response:
        identity: Optional[ResolvedIdentity] = g.get("identity")
        if identity is not None and identity.needs_renewal:
            set_session_cookie(resp, identity.renewed_session_token, max_age=session_max_age)
        return resp
