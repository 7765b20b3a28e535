"""
Email notifications through SendGrid.

Without SENDGRID_API_KEY the notification is only logged, so local and
preview deployments never fail on missing mail credentials.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import requests

from .errors import InvalidRequestError, UpstreamError
from .utils import is_valid_email, sanitize_input

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"
MAX_FIELD_LENGTH = 1000

KIND_COLORS = {
    "general": "#06b6d4",
    "alert": "#ef4444",
    "success": "#10b981",
    "info": "#3b82f6",
}


@dataclass(frozen=True)
class NotifyResult:
    sent: bool
    message: str


def build_email_html(subject: str, message: str, kind: str = "general", brand: str = "Freshwater Vault") -> str:
    """Branded single-card HTML email; header color depends on kind"""
    color = KIND_COLORS.get(kind, KIND_COLORS["general"])
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="margin:0;padding:0;background:#f1f5f9;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;">
  <div style="max-width:600px;margin:0 auto;padding:40px 20px;">
    <div style="background:white;border-radius:16px;overflow:hidden;box-shadow:0 1px 3px rgba(0,0,0,0.1);">
      <div style="background:{color};padding:24px 32px;">
        <h1 style="margin:0;color:white;font-size:20px;font-weight:700;">{brand}</h1>
      </div>
      <div style="padding:32px;">
        <h2 style="margin:0 0 16px;color:#0f172a;font-size:18px;">{subject}</h2>
        <p style="margin:0;color:#475569;font-size:14px;line-height:1.6;">{message}</p>
      </div>
      <div style="padding:16px 32px;border-top:1px solid #e2e8f0;background:#f8fafc;">
        <p style="margin:0;color:#94a3b8;font-size:12px;">Freshwater Landscaping LLC | Secure Client Portal</p>
      </div>
    </div>
  </div>
</body>
</html>"""


class Notifier:
    """SendGrid mail sender"""
    
    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: str = "notifications@freshwatervault.com",
        from_name: str = "Freshwater Vault",
        timeout: float = 10,
        session: Optional[requests.Session] = None
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout
        self.session = session or requests.Session()
    
    @property
    def configured(self) -> bool:
        return bool(self.api_key)
    
    async def send(self, to: str, subject: str, message: str, kind: str = "general") -> NotifyResult:
        """
        Send (or log) a notification.
        
        Raises:
            InvalidRequestError: Missing fields or malformed recipient
            UpstreamError: SendGrid rejected the request
        """
        if not to or not subject or not message:
            raise InvalidRequestError("Missing required fields: to, subject, message")
        
        to = sanitize_input(to, MAX_FIELD_LENGTH).strip()
        subject = sanitize_input(subject, MAX_FIELD_LENGTH)
        message = sanitize_input(message, MAX_FIELD_LENGTH)
        kind = sanitize_input(kind or "general", MAX_FIELD_LENGTH)
        
        if not is_valid_email(to):
            raise InvalidRequestError("Invalid recipient email address")
        
        if not self.configured:
            logger.info(
                f"[notify] No SENDGRID_API_KEY configured. Notification: to={to}, subject={subject}, "
                f"type={kind}, timestamp={datetime.now(timezone.utc).isoformat()}"
            )
            return NotifyResult(sent=False, message="Notification logged (SendGrid not configured)")
        
        payload = {
            "personalizations": [{"to": [{"email": to}], "subject": subject}],
            "from": {"email": self.from_email, "name": self.from_name},
            "content": [{"type": "text/html", "value": build_email_html(subject, message, kind, self.from_name)}],
        }
        
        await asyncio.to_thread(self._post, payload)
        logger.info(f"Notification sent to {to} ({kind})")
        return NotifyResult(sent=True, message="Notification sent")
    
    def _post(self, payload: dict) -> None:
        try:
            response = self.session.post(
                SENDGRID_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"SendGrid request failed: {e}")
            raise UpstreamError("SendGrid error", details=str(e)) from e
        
        if not response.ok:
            logger.error(f"SendGrid returned {response.status_code}: {response.text[:200]}")
            raise UpstreamError("SendGrid error", details=response.text[:200])
