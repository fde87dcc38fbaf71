"""
Token security
Issues and verifies signed bearer tokens for users and admin sessions
"""

import logging
from datetime import datetime, timedelta
import jwt
from flask import current_app, request

logger = logging.getLogger(__name__)

JWT_ALGORITHM = 'HS256'


def _secret():
    return current_app.config.get('JWT_SECRET_KEY') or current_app.config['SECRET_KEY']


def create_access_token(user, session_id=None, expires_at=None):
    """Create a signed token carrying the user id, role and optional admin session id"""
    if expires_at is None:
        expires_at = datetime.utcnow() + timedelta(hours=current_app.config.get('JWT_EXPIRY_HOURS', 24))
    payload = {
        'sub': str(user.id),
        'username': user.username,
        'role': user.role,
        'iat': datetime.utcnow(),
        'exp': expires_at,
    }
    if session_id:
        payload['sid'] = session_id
    return jwt.encode(payload, _secret(), algorithm=JWT_ALGORITHM)


def decode_access_token(token):
    """Return the token claims, or None when the token is invalid or expired"""
    try:
        return jwt.decode(token, _secret(), algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected invalid token: {str(e)}")
    return None


def get_bearer_token(req=None):
    """Extract the bearer token from the Authorization header"""
    header = (req or request).headers.get('Authorization', '')
    if header.lower().startswith('bearer '):
        token = header[7:].strip()
        return token or None
    return None
