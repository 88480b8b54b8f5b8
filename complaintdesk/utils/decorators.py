"""
Request principal helpers
"""

from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from extensions import db
from complaintdesk.access import Principal
from complaintdesk.errors import Forbidden, Unauthorized
from complaintdesk.models.user import User


def current_principal():
    """
    Build the request's Principal from the stored account.

    The token only carries the user id; role comes from the database on
    every request so a stale or forged role claim has no effect.
    """
    if 'principal' in g:
        return g.principal

    identity = get_jwt_identity()
    try:
        user = db.session.get(User, int(identity)) if identity is not None else None
    except (TypeError, ValueError):
        user = None

    if user is None:
        raise Unauthorized('User not found')

    g.current_user = user
    g.principal = Principal.from_user(user)
    return g.principal


def admin_required():
    """Usage: @jwt_required() then @admin_required()"""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if not current_principal().is_admin:
                raise Forbidden('Access denied. Admin privileges required')
            return fn(*args, **kwargs)
        return wrapper
    return deco
