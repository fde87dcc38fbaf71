"""
Email service for sending verification and password reset emails
"""
import logging
import smtplib
from flask import current_app
from flask_mail import Mail, Message

logger = logging.getLogger(__name__)

mail = Mail()


class EmailService:

    def send_email(self, to_email, subject, html_content, text_content=None):
        """Send email through Flask-Mail; failures are logged, never raised"""
        if not current_app.config.get('MAIL_SERVER') and not current_app.config.get('TESTING'):
            logger.warning(f"Email configuration missing, not sending '{subject}' to {to_email}")
            return False

        msg = Message(subject=subject, recipients=[to_email], html=html_content, body=text_content)
        try:
            mail.send(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email to {to_email}: {str(e)}")
            return False

        logger.info(f"Email sent successfully to {to_email}")
        return True

    def _frontend_link(self, path, token):
        base_url = current_app.config.get('FRONTEND_URL', 'http://localhost:3000').rstrip('/')
        return f"{base_url}/{path}?token={token}"

    def send_verification_email(self, user):
        """Send email verification link to user"""
        verification_url = self._frontend_link('verify-email', user.verification_token)
        name = user.full_name or user.username
        hours = current_app.config.get('VERIFICATION_TOKEN_HOURS', 24)

        html_content = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h2>Hello {name}!</h2>
            <p>Thank you for joining Idea Factory. Please verify your email address:</p>
            <p><a href="{verification_url}">Verify Email Address</a></p>
            <p>This verification link will expire in {hours} hours.</p>
        </body>
        </html>
        """

        text_content = f"""
        Hello {name},

        Thank you for joining Idea Factory. Please verify your email address by visiting:

        {verification_url}

        This verification link will expire in {hours} hours.
        """

        return self.send_email(user.email, "Verify your Idea Factory account", html_content, text_content)

    def send_password_reset_email(self, user):
        """Send password reset link to user"""
        reset_url = self._frontend_link('reset-password', user.reset_password_token)
        name = user.full_name or user.username
        hours = current_app.config.get('RESET_TOKEN_HOURS', 1)

        html_content = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h2>Hello {name}!</h2>
            <p>We received a request to reset your password.</p>
            <p><a href="{reset_url}">Reset Password</a></p>
            <p>This link will expire in {hours} hour(s). If you didn't request a reset, ignore this email.</p>
        </body>
        </html>
        """

        text_content = f"""
        Hello {name},

        Reset your password by visiting:

        {reset_url}

        This link will expire in {hours} hour(s). If you didn't request a reset, ignore this email.
        """

        return self.send_email(user.email, "Reset your Idea Factory password", html_content, text_content)


# Global email service instance
email_service = EmailService()
