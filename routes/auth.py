"""
Authentication routes: user account lifecycle and admin token exchange
"""

from flask import Blueprint, request, jsonify, current_app, g
from flask_login import login_required, current_user
from routes.ideas import json_payload
from utils.error_handling import Forbidden
from utils.security import decode_access_token, get_bearer_token

auth_bp = Blueprint('auth', __name__)
admin_auth_bp = Blueprint('admin_auth', __name__)


def user_service():
    return current_app.extensions['user_service']


# User accounts (/api/users)

@auth_bp.route('/signup', methods=['POST'])
def signup():
    return jsonify(user_service().signup(json_payload())), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    return jsonify(user_service().login(json_payload()))


@auth_bp.route('/google-login', methods=['POST'])
def google_login():
    return jsonify(user_service().google_login(json_payload()))


@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    user_service().forgot_password(json_payload().get('email'))
    return jsonify({'success': True,
                    'message': 'If an account exists for this email, a password reset link has been sent.'})


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    user_service().reset_password(json_payload())
    return jsonify({'success': True, 'message': 'Password has been reset successfully'})


@auth_bp.route('/verify-email', methods=['POST'])
def verify_email():
    token = request.args.get('token') or (request.get_json(silent=True) or {}).get('token')
    user_service().verify_email(token)
    return jsonify({'success': True, 'message': 'Email verified successfully'})


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify(current_user.to_dict())


# Admin token exchange (/api/auth)

@admin_auth_bp.route('/login', methods=['POST'])
def admin_login():
    return jsonify(user_service().admin_login(json_payload()))


@admin_auth_bp.route('/validate', methods=['POST', 'GET'])
def validate():
    """Report whether the presented admin token maps to a live admin session"""
    token = get_bearer_token()
    claims = decode_access_token(token) if token else None
    session_id = claims.get('sid') if claims else None
    valid = claims is not None and claims.get('role') == 'ADMIN' and user_service().validate_admin_session(session_id)
    body = {'success': True, 'valid': bool(valid)}
    if valid:
        body['username'] = claims.get('username')
        body['role'] = claims.get('role')
    return jsonify(body)


@admin_auth_bp.route('/logout', methods=['POST'])
@login_required
def admin_logout():
    session_id = g.get('admin_session_id')
    if not session_id:
        raise Forbidden('No active admin session')
    user_service().logout_admin(session_id)
    return jsonify({'success': True, 'message': 'Logged out successfully'})
