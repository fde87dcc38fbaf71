"""
Permission checking utilities
Bearer-token identity loading and role-based access control for API routes
"""

import logging
from functools import wraps
from flask import request, g
from flask_login import LoginManager, current_user
from models import db, User, AdminSession
from utils.error_handling import Unauthorized, Forbidden
from utils.security import decode_access_token, get_bearer_token

logger = logging.getLogger(__name__)

login_manager = LoginManager()

ADMIN_PREFIXES = ('/admin/', '/api/admin/')

# Read-only catalog paths open to anonymous callers
PUBLIC_READ_PREFIXES = (
    '/api/ideas',
    '/api/categories',
    '/api/main-categories',
    '/api/sub-categories',
    '/api/category-hierarchy',
    '/api/sectors',
    '/api/difficulty-levels',
    '/api/locations',
    '/api/idea-details',
)

PUBLIC_PATHS = {
    '/health',
    '/api/users/signup',
    '/api/users/login',
    '/api/users/forgot-password',
    '/api/users/reset-password',
    '/api/users/verify-email',
    '/api/users/google-login',
    '/api/auth/login',
    '/api/auth/validate',
}


@login_manager.request_loader
def load_user_from_request(req):
    """Resolve the bearer token to a user; admin tokens must map to a live admin session"""
    token = get_bearer_token(req)
    if not token:
        return None

    claims = decode_access_token(token)
    if not claims:
        return None

    try:
        user = db.session.get(User, int(claims.get('sub')))
    except (TypeError, ValueError):
        return None
    if not user or not user.is_active:
        return None

    session_id = claims.get('sid')
    if session_id:
        admin_session = AdminSession.query.filter_by(session_id=session_id, user_id=user.id).first()
        if not admin_session or not admin_session.is_valid():
            logger.info(f"Rejected token for {user.username}: admin session {session_id} is not active")
            return None
        g.admin_session_id = session_id

    return user


@login_manager.unauthorized_handler
def unauthorized():
    raise Unauthorized('Authentication required')


def has_admin_session():
    """True when the current request is authenticated by a live admin session token"""
    return (
        current_user.is_authenticated
        and current_user.is_admin
        and bool(g.get('admin_session_id'))
    )


def is_public_request(path, method):
    if method == 'OPTIONS' or path in PUBLIC_PATHS:
        return True
    if method in ('GET', 'HEAD'):
        return any(path == prefix or path.startswith(prefix + '/') for prefix in PUBLIC_READ_PREFIXES)
    return False


def enforce_route_roles():
    """before_request guard: admin prefixes need ADMIN, everything else outside the allow-list needs a login"""
    path = request.path
    if request.method == 'OPTIONS':
        return None
    if any(path.startswith(prefix) or path == prefix.rstrip('/') for prefix in ADMIN_PREFIXES):
        require_admin_session()
        return None

    if is_public_request(path, request.method):
        return None

    if not current_user.is_authenticated:
        raise Unauthorized('Authentication required')
    return None


def require_admin_session():
    if not current_user.is_authenticated:
        raise Unauthorized('Authentication required')
    if not has_admin_session():
        logger.warning(f"Non-admin access attempt to {request.path} by {current_user.username}")
        raise Forbidden('Admin access required')


def admin_required(f):
    """Decorator to require a live admin session"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        require_admin_session()
        return f(*args, **kwargs)
    return decorated_function
