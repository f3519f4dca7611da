"""
Email Module
============

Owner notifications for the portfolio site, sent through SMTP (e.g. Gmail)
or the Resend API.
"""

from .email_service import EmailService

__all__ = ['EmailService']
