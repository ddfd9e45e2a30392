from html import escape

from app.core.config import settings

BUTTON_STYLE = "background-color: #4CAF50; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px;"


def email_confirmation_template(first_name: str, confirmation_link: str) -> str:
    return f"""
        <html>
            <body style='font-family: Arial, sans-serif;'>
                <h2>Welcome to {escape(settings.APP_NAME)}, {escape(first_name)}!</h2>
                <p>Please confirm your email address by clicking the link below:</p>
                <p>
                    <a href='{escape(confirmation_link)}' style='{BUTTON_STYLE}'>Confirm Email</a>
                </p>
                <p>If the button doesn't work, you can also copy and paste this link in your browser:</p>
                <p>{escape(confirmation_link)}</p>
                <p>This link will expire in {settings.EMAIL_CONFIRMATION_TOKEN_HOURS} hours.</p>
            </body>
        </html>
        """


def password_reset_template(first_name: str, reset_link: str) -> str:
    return f"""
        <html>
            <body style='font-family: Arial, sans-serif;'>
                <h2>Password Reset Request</h2>
                <p>Hi {escape(first_name)},</p>
                <p>We received a request to reset your password. Click the link below to choose a new password:</p>
                <p>
                    <a href='{escape(reset_link)}' style='{BUTTON_STYLE}'>Reset Password</a>
                </p>
                <p>If you didn't request this, you can safely ignore this email.</p>
                <p>The reset link will expire in {settings.PASSWORD_RESET_TOKEN_HOURS} hour(s).</p>
            </body>
        </html>
        """


def two_factor_code_template(first_name: str, code: str) -> str:
    return f"""
        <html>
            <body style='font-family: Arial, sans-serif;'>
                <h2>Your Two-Factor Authentication Code</h2>
                <p>Hi {escape(first_name)},</p>
                <p>Your verification code is:</p>
                <h1 style='font-size: 32px; letter-spacing: 5px; background-color: #f5f5f5; padding: 10px; text-align: center;'>{escape(code)}</h1>
                <p>This code is only valid for about a minute.</p>
                <p>If you didn't request this code, please secure your account by changing your password.</p>
            </body>
        </html>
        """
