"""
User accounts, credentials and admin sessions
"""

import logging
import re
import uuid
from datetime import datetime, timedelta
from flask import current_app
from models import db, User, AdminSession
from forms import SignupForm, LoginForm, AdminLoginForm, ResetPasswordForm, ProfileForm, validate_form
from utils.email_service import email_service as default_email_service
from utils.error_handling import Conflict, Unauthorized, Forbidden, NotFound, ValidationError
from utils.security import create_access_token

logger = logging.getLogger(__name__)

USERNAME_MAX_LENGTH = 20


def auth_response(user, token, message, **extra):
    body = {
        'success': True,
        'message': message,
        'token': token,
        'tokenType': 'Bearer',
        'user': user.to_dict(),
    }
    body.update(extra)
    return body


class UserService:
    """Service class for user lifecycle and admin sessions"""

    def __init__(self, email_service=None):
        self.email_service = email_service or default_email_service

    # Usernames

    @staticmethod
    def base_username(full_name):
        """'Jane Doe' -> 'jane.doe'"""
        username = (full_name or '').strip().lower()
        username = re.sub(r'\s+', '.', username)
        username = re.sub(r'[^a-z0-9.]', '', username)
        username = re.sub(r'\.{2,}', '.', username).strip('.')
        if not username or not username[0].isalpha():
            username = f"user.{username}" if username else 'user'
        return username[:USERNAME_MAX_LENGTH].rstrip('.')

    def generate_username(self, full_name):
        base = self.base_username(full_name)
        if len(base) < 3:
            base = f"user.{base}"[:USERNAME_MAX_LENGTH]
        username = base
        counter = 1
        while User.query.filter_by(username=username).first():
            suffix = str(counter)
            username = f"{base[:USERNAME_MAX_LENGTH - len(suffix)]}{suffix}"
            counter += 1
        return username

    # Tokens

    @staticmethod
    def _new_token():
        return str(uuid.uuid4())

    @staticmethod
    def _hours(key, default):
        return timedelta(hours=current_app.config.get(key, default))

    # Accounts

    def signup(self, payload):
        form = validate_form(SignupForm, payload)
        email = form.email.data.strip().lower()
        if User.query.filter(db.func.lower(User.email) == email).first():
            raise Conflict('Email is already registered')

        user = User(
            username=self.generate_username(form.fullName.data),
            email=email,
            full_name=form.fullName.data.strip(),
            role='USER',
            auth_provider='EMAIL',
            is_active=True,
            email_verified=False,
            verification_token=self._new_token(),
            verification_token_expiry=datetime.utcnow() + self._hours('VERIFICATION_TOKEN_HOURS', 24)
        )
        user.set_password(form.password.data)
        db.session.add(user)
        db.session.commit()
        logger.info(f"New user signed up: {user.username}")

        self.email_service.send_verification_email(user)
        return auth_response(user, create_access_token(user),
                             'Account created successfully! Please check your email to verify your account.')

    def login(self, payload):
        form = validate_form(LoginForm, payload)
        email = form.email.data.strip().lower()
        user = User.query.filter(db.func.lower(User.email) == email).first()
        if not user or not user.is_active:
            raise Unauthorized('User not found. Please sign up first!')
        if not user.check_password(form.password.data):
            logger.warning(f"Failed login for {email}")
            raise Unauthorized('Invalid password')

        user.last_login = datetime.utcnow()
        db.session.commit()
        return auth_response(user, create_access_token(user), 'Login successful')

    def google_login(self, payload):
        google_id = (payload or {}).get('googleId')
        email = ((payload or {}).get('email') or '').strip().lower()
        if not google_id or not email:
            raise ValidationError('googleId and email are required')

        user = User.query.filter_by(google_id=google_id).first()
        if not user:
            existing = User.query.filter(db.func.lower(User.email) == email).first()
            if existing:
                raise Conflict('Email is already registered with a different sign-in method')
            full_name = payload.get('name') or payload.get('fullName') or email.split('@')[0]
            user = User(
                username=self.generate_username(full_name),
                email=email,
                full_name=full_name,
                google_id=google_id,
                profile_image_url=payload.get('picture'),
                role='USER',
                auth_provider='GOOGLE',
                is_active=True,
                email_verified=True
            )
            db.session.add(user)
            logger.info(f"Created Google user {email}")
        elif not user.is_active:
            raise Unauthorized('Account is disabled')

        user.last_login = datetime.utcnow()
        db.session.commit()
        return auth_response(user, create_access_token(user), 'Google login successful')

    def forgot_password(self, email):
        """Issue a reset token; unknown emails are silently ignored"""
        email = (email or '').strip().lower()
        user = User.query.filter(db.func.lower(User.email) == email).first() if email else None
        if not user:
            logger.info(f"Password reset requested for unknown email {email}")
            return
        user.reset_password_token = self._new_token()
        user.reset_password_token_expiry = datetime.utcnow() + self._hours('RESET_TOKEN_HOURS', 1)
        db.session.commit()
        self.email_service.send_password_reset_email(user)

    def reset_password(self, payload):
        form = validate_form(ResetPasswordForm, payload)
        user = User.query.filter_by(reset_password_token=form.token.data).first()
        if not user or not user.reset_password_token_expiry or user.reset_password_token_expiry < datetime.utcnow():
            raise ValidationError('Invalid or expired reset token')
        user.set_password(form.newPassword.data)
        user.reset_password_token = None
        user.reset_password_token_expiry = None
        db.session.commit()
        logger.info(f"Password reset for {user.username}")

    def verify_email(self, token):
        if not token:
            raise ValidationError('Verification token is required')
        user = User.query.filter_by(verification_token=token).first()
        if not user or not user.verification_token_expiry or user.verification_token_expiry < datetime.utcnow():
            raise ValidationError('Invalid or expired verification token')
        user.email_verified = True
        user.verification_token = None
        user.verification_token_expiry = None
        db.session.commit()
        logger.info(f"Email verified for {user.username}")
        return user

    # Profile

    @staticmethod
    def get_user(user_id):
        user = db.session.get(User, user_id)
        if not user:
            raise NotFound(f"User not found with id: {user_id}")
        return user

    def update_profile(self, user_id, payload):
        validate_form(ProfileForm, payload)
        user = self.get_user(user_id)
        for key, attribute in (('fullName', 'full_name'), ('bio', 'bio'),
                               ('phoneNumber', 'phone_number'), ('location', 'location')):
            if key in payload:
                value = payload.get(key)
                setattr(user, attribute, value.strip() if isinstance(value, str) else value)
        db.session.commit()
        return user

    # Admin sessions

    def admin_login(self, payload):
        """Open a new admin session; every other active session of this admin is closed"""
        form = validate_form(AdminLoginForm, payload)
        identifier = form.usernameOrEmail.data.strip()
        user = User.query.filter(db.or_(
            User.username == identifier,
            db.func.lower(User.email) == identifier.lower()
        )).first()
        if not user or not user.check_password(form.password.data):
            logger.warning(f"Failed admin login for {identifier}")
            raise Unauthorized('Invalid credentials')
        if not user.is_admin:
            raise Forbidden('Access denied. Admin privileges required.')
        if not user.is_active:
            raise Unauthorized('Account is disabled')

        now = datetime.utcnow()
        expires_at = now + self._hours('ADMIN_SESSION_HOURS', 24)
        session_id = self._new_token()

        AdminSession.query.filter_by(user_id=user.id, active=True).update(
            {AdminSession.active: False}, synchronize_session=False
        )
        db.session.add(AdminSession(user_id=user.id, session_id=session_id,
                                    created_at=now, expires_at=expires_at, active=True))
        user.admin_session_id = session_id
        user.last_admin_login = now
        user.last_login = now
        db.session.commit()
        logger.info(f"Admin {user.username} logged in, session {session_id}")

        token = create_access_token(user, session_id=session_id, expires_at=expires_at)
        return auth_response(user, token, 'Admin login successful',
                             sessionId=session_id, expiresAt=expires_at.isoformat())

    @staticmethod
    def validate_admin_session(session_id):
        if not session_id:
            return False
        admin_session = AdminSession.query.filter_by(session_id=session_id).first()
        return bool(admin_session and admin_session.is_valid())

    @staticmethod
    def logout_admin(session_id):
        updated = AdminSession.query.filter_by(session_id=session_id, active=True).update(
            {AdminSession.active: False}, synchronize_session=False
        )
        db.session.commit()
        return bool(updated)

    @staticmethod
    def ensure_default_admin():
        """Create the default admin unless an admin already exists"""
        if User.query.filter_by(role='ADMIN').first():
            return None

        config = current_app.config
        admin = User(
            username=config.get('DEFAULT_ADMIN_USERNAME', 'admin'),
            email=config.get('DEFAULT_ADMIN_EMAIL', 'admin@ideafactory.com'),
            full_name='Administrator',
            role='ADMIN',
            auth_provider='EMAIL',
            is_active=True,
            email_verified=True
        )
        admin.set_password(config.get('DEFAULT_ADMIN_PASSWORD', 'admin123'))
        db.session.add(admin)
        db.session.commit()
        logger.info(f"Default admin user created: {admin.username}")
        return admin
