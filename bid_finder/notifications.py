"""
Email Notification Service for Bid Finder.
Sends bid match alerts through the Resend email API.
"""

import os
import logging
from datetime import datetime
from typing import Dict, Optional

import requests
from dateutil import parser as date_parser
from jinja2 import Template

from .config import EMAIL_CONFIG
from .errors import EmailDeliveryError

logger = logging.getLogger(__name__)

BID_ALERT_TEMPLATE = """
<!DOCTYPE html>
<html>
  <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #1a1a1a; font-size: 24px; margin-bottom: 20px;">New Government Bid Opportunity</h1>

    <div style="background: #f5f5f5; border-radius: 8px; padding: 20px; margin-bottom: 20px;">
      <h2 style="color: #1a1a1a; font-size: 18px; margin: 0 0 16px 0;">{{ bid.title }}</h2>

      <p style="margin: 8px 0; color: #4a4a4a;">
        <strong>Agency:</strong> {{ bid.agency }}
      </p>
      <p style="margin: 8px 0; color: #4a4a4a;">
        <strong>Due Date:</strong> {{ bid.due_date }}
        {% if days_until_due is not none %}
          {% if days_until_due == 0 %}
          <span style="color: #dc2626;">(due today!)</span>
          {% elif days_until_due > 0 %}
          <span style="color: #dc2626;">({{ days_until_due }} days left)</span>
          {% endif %}
        {% endif %}
      </p>
      <p style="margin: 8px 0; color: #4a4a4a;">
        <strong>Estimated Budget:</strong> {{ bid.estimated_budget }}
      </p>
    </div>

    <a href="{{ bid.source_url }}" style="display: inline-block; background-color: #0070f3; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; font-weight: 500;">View Bid Details</a>

    <p style="color: #888; font-size: 12px; margin-top: 30px;">
      You're receiving this because you requested alerts for matching government bids.
    </p>
    <p style="color: #888; font-size: 12px;">Generated at {{ generated_at }}</p>
  </body>
</html>
"""


def days_until_due(due_date: str, today=None) -> Optional[int]:
    """Days from today until a free-text due date, or None if it doesn't parse."""
    if not due_date:
        return None
    today = today or datetime.now().date()
    try:
        due = date_parser.parse(due_date).date()
    except (ValueError, OverflowError):
        return None
    return (due - today).days


class NotificationService:
    """Handles email notifications for bid alerts."""

    def __init__(self, api_key: str = None, sender: str = None):
        self.config = EMAIL_CONFIG.copy()
        if api_key is not None:
            self.config['api_key'] = api_key
        if sender:
            self.config['sender'] = sender

    def send_email(self, recipient: str, subject: str, html_content: str) -> Dict:
        """Send an HTML email. Returns the provider response (with the message id)."""
        if not self.config['api_key']:
            logger.warning("Email not configured. Set RESEND_API_KEY environment variable.")
            logger.info(f"Would send email: {subject}")
            # Save to file for testing
            self._save_email_to_file(subject, html_content)
            raise EmailDeliveryError("Email not configured", detail="RESEND_API_KEY is not set")

        try:
            response = requests.post(
                self.config['api_url'],
                headers={
                    'Authorization': f"Bearer {self.config['api_key']}",
                    'Content-Type': 'application/json',
                },
                json={
                    'from': self.config['sender'],
                    'to': [recipient],
                    'subject': subject,
                    'html': html_content,
                },
                timeout=self.config['timeout'],
            )
        except requests.RequestException as e:
            logger.error(f"Failed to send email: {e}")
            raise EmailDeliveryError("Email request failed", detail=str(e)) from e

        if not response.ok:
            logger.error(f"Failed to send email: {response.status_code} {response.text}")
            raise EmailDeliveryError("Email provider rejected message",
                                     status=response.status_code, detail=response.text)

        data = response.json()
        logger.info(f"Email sent successfully: {subject} (id {data.get('id')})")
        return data

    def _save_email_to_file(self, subject: str, html_content: str):
        """Save email to file for testing when the email API is not configured."""
        email_dir = self.config['outbox_dir']
        os.makedirs(email_dir, exist_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        filename = f"{timestamp}_{subject[:30].replace(' ', '_').replace('/', '_')}.html"
        filepath = os.path.join(email_dir, filename)

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(html_content)

        logger.info(f"Email saved to: {filepath}")

    @staticmethod
    def render_bid_alert(bid: Dict) -> str:
        template = Template(BID_ALERT_TEMPLATE, autoescape=True)
        return template.render(
            bid=bid,
            days_until_due=days_until_due(bid.get('due_date')),
            generated_at=datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        )

    def send_bid_alert(self, email: str, bid: Dict) -> Dict:
        """
        Send a single bid match alert.
        bid needs title, agency, due_date, estimated_budget and source_url.
        """
        html_content = self.render_bid_alert(bid)
        subject = f"New Bid Match: {bid['title']}"
        return self.send_email(email, subject, html_content)
