"""
Email Service for verification codes
"""
import smtplib
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from flask import current_app

logger = logging.getLogger(__name__)


def send_email(to_email, subject, body_html, body_text=None):
    """
    Generic email sending function

    Args:
        to_email: Recipient email
        subject: Email subject
        body_html: HTML body
        body_text: Plain text body (optional)

    Returns:
        dict: {'success': bool, 'error': str or None}
    """
    try:
        mail_server = current_app.config.get('MAIL_SERVER')
        mail_port = current_app.config.get('MAIL_PORT')
        mail_use_tls = current_app.config.get('MAIL_USE_TLS')
        mail_username = current_app.config.get('MAIL_USERNAME')
        mail_password = current_app.config.get('MAIL_PASSWORD')
        mail_sender = current_app.config.get('MAIL_DEFAULT_SENDER')

        if not mail_username or not mail_password:
            logger.warning("Email not configured. Skipping email to %s", to_email)
            return {'success': False, 'error': 'Email not configured'}

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = mail_sender
        msg['To'] = to_email

        if body_text:
            msg.attach(MIMEText(body_text, 'plain'))
        msg.attach(MIMEText(body_html, 'html'))

        with smtplib.SMTP(mail_server, mail_port) as server:
            if mail_use_tls:
                server.starttls()
            server.login(mail_username, mail_password)
            server.sendmail(mail_sender, to_email, msg.as_string())

        logger.info(f"Email sent to {to_email}")
        return {'success': True, 'error': None}

    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return {'success': False, 'error': str(e)}


def send_verification_email(email, name, otp):
    """
    Send the email verification code

    Args:
        email: User's email address
        name: User's name for personalization
        otp: 6-digit verification code

    Returns:
        dict: {'success': bool, 'error': str or None}
    """
    expiry_minutes = current_app.config.get('OTP_EXPIRY_MINUTES', 10)

    text = f"""
Hello {name},

Thank you for registering. Please use the following code to verify your email:

{otp}

This code is valid for {expiry_minutes} minutes.
    """

    html = f"""
<!DOCTYPE html>
<html>
<head>
    <style>
        body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .header {{ background: #5f6fff; color: white; padding: 20px; text-align: center; border-radius: 5px 5px 0 0; }}
        .content {{ background: #f9f9f9; padding: 30px; border: 1px solid #ddd; }}
        .code {{ font-size: 32px; letter-spacing: 8px; font-weight: bold; text-align: center; margin: 20px 0; }}
        .warning {{ background: #fff3cd; padding: 15px; border-radius: 5px; margin-top: 20px; font-size: 13px; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>Email Verification</h1>
        </div>
        <div class="content">
            <p>Hello {name},</p>
            <p>Thank you for registering. Please use the following code to verify your email:</p>
            <div class="code">{otp}</div>
            <div class="warning">
                <strong>This code is valid for {expiry_minutes} minutes.</strong><br>
                If you did not create an account, please ignore this email.
            </div>
        </div>
    </div>
</body>
</html>
    """

    result = send_email(email, 'Email Verification OTP', html, body_text=text)
    if not result['success']:
        logger.warning("Verification email to %s not delivered: %s", email, result['error'])
    return result
