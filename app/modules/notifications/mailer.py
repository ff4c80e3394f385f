"""Transactional email through the Resend HTTP API."""

import html
import logging
from typing import List, Optional

import httpx
from fastapi import HTTPException

from app.config import settings
from app.modules.notifications.schemas import WorkflowNotificationEmail, EmailDeliveryResponse

logger = logging.getLogger(__name__)


class ResendMailer:
    def __init__(self, api_key: Optional[str] = None, api_url: Optional[str] = None,
                 sender: Optional[str] = None, timeout: float = 10.0):
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.api_url = api_url or settings.resend_api_url
        self.sender = sender or settings.email_from
        self.timeout = timeout

    def send(self, to: List[str], subject: str, html_body: str) -> EmailDeliveryResponse:
        if not self.api_key:
            raise HTTPException(status_code=500, detail="Email delivery not configured")

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={"from": self.sender, "to": to, "subject": subject, "html": html_body},
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Resend rejected email to {to}: {e.response.status_code} {e.response.text}")
            raise HTTPException(status_code=500, detail="Failed to send email")
        except httpx.HTTPError as e:
            logger.error(f"Error sending email to {to}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to send email")

        logger.info(f"Email sent to {to}: {subject}")
        return EmailDeliveryResponse(id=body.get("id"), to=to, subject=subject)


def render_step_assigned_email(email: WorkflowNotificationEmail, site_url: str) -> str:
    esc = html.escape
    rows = [
        f"<p>Hello {esc(email.user_name)},</p>",
        "<p>You have been assigned a new workflow step:</p>",
        '<div style="background:#f5f5f5;padding:16px;border-radius:8px;margin:16px 0;">',
        f'<h3 style="margin:0 0 8px 0;">{esc(email.step_name)}</h3>',
        f"<p style=\"margin:4px 0;\"><strong>Workflow:</strong> {esc(email.workflow_name)}</p>",
    ]
    if email.step_description:
        rows.append(f"<p style=\"margin:4px 0;\"><strong>Description:</strong> {esc(email.step_description)}</p>")
    if email.due_date:
        rows.append(f"<p style=\"margin:4px 0;\"><strong>Due:</strong> {email.due_date.strftime('%Y-%m-%d %H:%M')}</p>")
    rows.append("</div>")
    rows.append(
        f'<p><a href="{esc(site_url)}" style="background:#6366f1;color:#fff;padding:10px 20px;'
        'text-decoration:none;border-radius:6px;">View Assignment</a></p>'
    )
    rows.append('<p style="color:#888;font-size:12px;">This is an automated message from NeuraFlow.</p>')
    return '<div style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto;">' + "".join(rows) + "</div>"


def send_workflow_notification(mailer: ResendMailer, email: WorkflowNotificationEmail) -> EmailDeliveryResponse:
    subject = f"New Workflow Step Assigned: {email.step_name}"
    return mailer.send([email.user_email], subject, render_step_assigned_email(email, settings.site_url))
