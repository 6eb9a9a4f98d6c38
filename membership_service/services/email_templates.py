"""
Email templates for membership lifecycle events.

All templates have a subject, an HTML body and a plain text body, and are
rendered with ``str.format`` placeholders.
"""

import html
from datetime import datetime
from typing import Any

FOOTER_HTML = '<hr /><p style="color: #666; font-size: 12px;">This message was sent by {brand}.</p>'

# Email template registry
EMAIL_TEMPLATES = {
    "subscription_activated": {
        "subject": "Your {plan_name} Subscription is Active",
        "html": """
            <h2>Subscription Activated!</h2>
            <p>Hi {name},</p>
            <p>Your subscription to <strong>{plan_name}</strong> has been activated.</p>
            <ul>
                <li><strong>Plan:</strong> {plan_name}</li>
                <li><strong>Price:</strong> {currency} {price}</li>
                <li><strong>Start Date:</strong> {start_date}</li>
            </ul>
            <p>Access your dashboard to view all details and manage your subscription.</p>
        """,
        "text": """
Subscription Activated!

Hi {name},

Your subscription to {plan_name} has been activated.

- Plan: {plan_name}
- Price: {currency} {price}
- Start Date: {start_date}
        """,
    },
    "subscription_cancelled": {
        "subject": "{plan_name} Subscription Cancelled",
        "html": """
            <h2>Subscription Cancelled</h2>
            <p>Hi {name},</p>
            <p>Your <strong>{plan_name}</strong> subscription has been cancelled.</p>
            <p>You can reactivate your subscription anytime from your dashboard.</p>
        """,
        "text": """
Subscription Cancelled

Hi {name},

Your {plan_name} subscription has been cancelled.
You can reactivate your subscription anytime from your dashboard.
        """,
    },
    "account_suspended": {
        "subject": "Account Suspended",
        "html": """
            <h2 style="color: #d9534f;">Account Suspended</h2>
            <p>Hi {name},</p>
            <p>Your account has been suspended for the following reason:</p>
            <p><strong>{reason}</strong></p>
            <p>Please contact our support team to resolve this issue.</p>
        """,
        "text": """
Account Suspended

Hi {name},

Your account has been suspended for the following reason:
{reason}

Please contact our support team to resolve this issue.
        """,
    },
}


def format_date(value: datetime) -> str:
    """Human-readable date for email bodies, e.g. "February 28, 2026"."""
    return value.strftime("%B %d, %Y")


def format_amount(value: float) -> str:
    return f"{value:.2f}"


def render_template(template_name: str, context: dict[str, Any]) -> tuple[str, str, str]:
    """
    Render email template with context data.

    Values are HTML-escaped for the HTML body only.

    Args:
        template_name: Name of the template to render
        context: Dictionary of variables to interpolate

    Returns:
        Tuple of (subject, html_body, text_body)

    Raises:
        ValueError: If the template is unknown
        KeyError: If the context misses a placeholder
    """
    if template_name not in EMAIL_TEMPLATES:
        raise ValueError(f"Unknown email template: {template_name}")

    template = EMAIL_TEMPLATES[template_name]
    escaped = {k: html.escape(str(v)) for k, v in context.items()}

    subject = template["subject"].format(**context)
    html_body = (template["html"] + FOOTER_HTML).format(**escaped)
    text = template["text"].format(**context).strip()

    return subject, html_body, text
