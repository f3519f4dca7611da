"""
Email Service Module
====================

Configurable email service supporting SMTP (e.g. Gmail) and Resend.
Provider is selected via EMAIL_PROVIDER config ('smtp' or 'resend').
Sending never raises; failures are logged and reported as False.
"""

import logging
import re
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, List, Optional

import resend
from markupsafe import escape

logger = logging.getLogger(__name__)

_VALID_EMAIL = re.compile(r'^[a-zA-Z0-9_%+-]+(\.[a-zA-Z0-9_%+-]+)*@[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$')


class EmailService:
    """
    Email sender bound to one Flask app's configuration.

    Configuration (Flask app.config):
        EMAIL_PROVIDER: 'smtp' (default) or 'resend'
        EMAIL_ADDRESS: Sender address (SMTP login for 'smtp')
        EMAIL_PASSWORD: SMTP password/app password
        EMAIL_HOST / EMAIL_PORT: SMTP server (default smtp.gmail.com:587)
        RESEND_API_KEY: Resend API key (provider 'resend')
        EMAIL_ADMIN_EMAIL: Where contact notifications go
        EMAIL_ADMIN_URL: Admin panel link included in notifications
    """

    def __init__(self, app=None):
        self.provider = 'smtp'
        self.sender_email = None
        self.smtp_host = 'smtp.gmail.com'
        self.smtp_port = 587
        self.smtp_password = None
        self.api_key = None
        self.admin_email = None
        self.admin_url = None

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Read provider settings from the app config"""
        self.provider = (app.config.get('EMAIL_PROVIDER') or 'smtp').lower()
        self.sender_email = app.config.get('EMAIL_ADDRESS')
        self.admin_email = app.config.get('EMAIL_ADMIN_EMAIL') or self.sender_email
        self.admin_url = app.config.get('EMAIL_ADMIN_URL')

        if self.provider == 'resend':
            self.api_key = app.config.get('RESEND_API_KEY')
            if not self.api_key:
                logger.warning("RESEND_API_KEY not configured - email sending disabled")
        else:
            self.smtp_host = app.config.get('EMAIL_HOST') or 'smtp.gmail.com'
            self.smtp_port = int(app.config.get('EMAIL_PORT') or 587)
            self.smtp_password = app.config.get('EMAIL_PASSWORD')
            if not self.smtp_password:
                logger.warning("EMAIL_PASSWORD not configured - SMTP email sending disabled")

    @property
    def configured(self):
        if not self.sender_email and self.provider != 'resend':
            return False
        if self.provider == 'resend':
            return bool(self.api_key)
        return bool(self.smtp_password)

    def send_email(self, to: List[str], subject: str, html_body: str,
                   text_body: Optional[str] = None, reply_to: Optional[str] = None) -> bool:
        """
        Send an email to each recipient via the configured provider.

        Returns:
            bool: True if at least one email was sent successfully, False otherwise
        """
        if not self.configured:
            logger.info(f"Email not configured, skipping: {subject}")
            return False

        recipients = [addr for addr in to if addr and _VALID_EMAIL.match(addr)]
        if not recipients:
            logger.error("No valid recipients after filtering")
            return False

        sent_count = 0
        for recipient in recipients:
            try:
                if self.provider == 'resend':
                    sent = self._send_via_resend(recipient, subject, html_body, text_body, reply_to)
                else:
                    sent = self._send_via_smtp(recipient, subject, html_body, text_body, reply_to)
            except Exception as send_error:
                logger.error(f"Error sending to {recipient}: {send_error}")
                sent = False
            if sent:
                sent_count += 1

        if sent_count < len(recipients):
            logger.warning(f"Email send completed with errors: {sent_count}/{len(recipients)} sent")
        else:
            logger.info(f"Email sent successfully to {sent_count} recipients: {subject}")
        return sent_count > 0

    def _send_via_resend(self, recipient, subject, html_body, text_body=None, reply_to=None) -> bool:
        resend.api_key = self.api_key
        params = {
            "from": self.sender_email or 'onboarding@resend.dev',
            "to": [recipient],
            "subject": subject,
            "html": html_body,
        }
        if text_body:
            params["text"] = text_body
        if reply_to:
            params["reply_to"] = reply_to

        r = resend.Emails.send(params)
        if r and r.get('id'):
            logger.debug(f"Email sent to {recipient}, ID: {r['id']}")
            return True
        logger.error(f"Resend error for {recipient}: {r}")
        return False

    def _send_via_smtp(self, recipient, subject, html_body, text_body=None, reply_to=None) -> bool:
        msg = MIMEMultipart('alternative')
        msg['From'] = self.sender_email
        msg['To'] = recipient
        msg['Subject'] = subject
        if reply_to:
            msg['Reply-To'] = reply_to

        if text_body:
            msg.attach(MIMEText(text_body, 'plain', 'utf-8'))
        msg.attach(MIMEText(html_body, 'html', 'utf-8'))

        with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
            server.starttls()
            server.login(self.sender_email, self.smtp_password)
            server.send_message(msg)

        logger.info(f"SMTP email sent to {recipient}")
        return True

    # ==================== Contact Notification ====================

    def send_contact_notification(self, contact: Dict[str, Any]) -> bool:
        """Tell the site owner about a new contact-form message"""
        subject = f"New Contact Form Message: {contact.get('subject') or '(No subject)'}"
        return self.send_email(
            [self.admin_email],
            subject,
            self._get_contact_template(contact),
            self._get_contact_text(contact),
            reply_to=contact.get('email'),
        )

    def _get_contact_template(self, contact: Dict[str, Any]) -> str:
        name = escape(contact.get('name', ''))
        email = escape(contact.get('email', ''))
        subject = escape(contact.get('subject') or '(No subject)')
        message = escape(contact.get('message', ''))
        ip_address = escape(contact.get('ipAddress') or 'N/A')
        admin_link = ''
        if self.admin_url:
            admin_link = (
                f'<p>Or view all messages in your admin panel: '
                f'<a href="{escape(self.admin_url)}" style="color: #ff9955;">Admin Panel</a></p>'
            )

        return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #ddd; border-radius: 8px;">
          <h2 style="color: #ff9955; margin-bottom: 20px;">New Contact Form Submission</h2>
          <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin-bottom: 15px;">
            <p style="margin: 5px 0;"><strong>From:</strong> {name}</p>
            <p style="margin: 5px 0;"><strong>Email:</strong> <a href="mailto:{email}">{email}</a></p>
            <p style="margin: 5px 0;"><strong>Subject:</strong> {subject}</p>
            <p style="margin: 5px 0;"><strong>IP Address:</strong> {ip_address}</p>
          </div>
          <div style="background-color: #fff; padding: 15px; border: 1px solid #e0e0e0; border-radius: 5px;">
            <h3 style="margin-top: 0; color: #333;">Message:</h3>
            <p style="white-space: pre-wrap; color: #555;">{message}</p>
          </div>
          <div style="margin-top: 20px; padding-top: 15px; border-top: 1px solid #ddd; color: #888; font-size: 12px;">
            <p>You can reply directly to this message by clicking the email address above.</p>
            {admin_link}
          </div>
        </div>
        """

    def _get_contact_text(self, contact: Dict[str, Any]) -> str:
        return f"""
New Contact Form Submission

From: {contact.get('name', '')}
Email: {contact.get('email', '')}
Subject: {contact.get('subject') or '(No subject)'}
IP Address: {contact.get('ipAddress') or 'N/A'}

{contact.get('message', '')}
        """
