"""HTML and plain-text bodies for outbound emails.

All user-supplied values are HTML-escaped before they reach markup.
"""

from datetime import datetime
from html import escape
from typing import NamedTuple

from estates.settings import settings

PRIMARY_COLOR = "#0d9488"
TEXT_COLOR = "#1e293b"
MUTED_COLOR = "#64748b"
BACKGROUND_COLOR = "#f8fafc"


class EmailContent(NamedTuple):
    """Rendered email ready for the transport."""

    subject: str
    html: str
    text: str


def _format_due(due_at: datetime) -> str:
    return due_at.strftime("%d %b %Y, %H:%M UTC")


def _lead_url(lead_id: int) -> str:
    return f"{settings.frontend_url.rstrip('/')}/admin/leads/{lead_id}"


def _detail_rows(rows: list[tuple[str, str | None]]) -> str:
    cells = []
    for label, value in rows:
        if not value:
            continue
        cells.append(
            f'<tr><td style="padding:4px 12px 4px 0;color:{MUTED_COLOR};font-size:14px;">{escape(label)}</td>'
            f'<td style="padding:4px 0;color:{TEXT_COLOR};font-size:14px;">{escape(value)}</td></tr>'
        )
    return f'<table role="presentation" cellspacing="0" cellpadding="0">{"".join(cells)}</table>'


def _detail_lines(rows: list[tuple[str, str | None]]) -> str:
    return "\n".join(f"{label}: {value}" for label, value in rows if value)


def _layout(heading: str, body: str, cta_url: str | None = None, cta_label: str = "Open") -> str:
    app_name = escape(settings.app_name)
    cta = ""
    if cta_url:
        cta = (
            f'<p style="margin:24px 0 0 0;"><a href="{escape(cta_url)}" '
            f'style="display:inline-block;padding:12px 28px;background:{PRIMARY_COLOR};color:#ffffff;'
            f'text-decoration:none;font-weight:600;border-radius:8px;">{escape(cta_label)}</a></p>'
        )
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="UTF-8"></head>'
        f'<body style="margin:0;padding:0;font-family:Segoe UI,Tahoma,sans-serif;background:{BACKGROUND_COLOR};">'
        '<table role="presentation" width="100%" cellspacing="0" cellpadding="0"><tr><td style="padding:32px 16px;">'
        '<table role="presentation" width="100%" cellspacing="0" cellpadding="0" '
        'style="max-width:600px;margin:0 auto;background:#ffffff;border-radius:12px;">'
        f'<tr><td style="background:{PRIMARY_COLOR};padding:24px 32px;color:#ffffff;font-size:20px;font-weight:700;">{app_name}</td></tr>'
        f'<tr><td style="padding:32px;"><h2 style="margin:0 0 16px 0;color:{TEXT_COLOR};">{escape(heading)}</h2>'
        f"{body}{cta}</td></tr>"
        f'<tr><td style="padding:16px 32px;color:{MUTED_COLOR};font-size:12px;text-align:center;">'
        f"&copy; {datetime.now().year} {app_name}</td></tr>"
        "</table></td></tr></table></body></html>"
    )


def render_query_confirmation(
    name: str,
    message: str,
    source: str,
    interested_property: str | None = None,
) -> EmailContent:
    """Confirmation sent to the person who submitted an enquiry."""
    kind = "property enquiry" if source in ("lead_form", "property_detail") else "message"
    subject = f"We've received your {kind} – {settings.app_name}"

    summary = ""
    if interested_property:
        summary += f'<p style="margin:0 0 8px 0;"><strong>Property:</strong> {escape(interested_property)}</p>'
    summary += f'<p style="margin:0;white-space:pre-wrap;">{escape(message)}</p>'
    body = (
        f'<p style="color:{TEXT_COLOR};line-height:1.6;">Thank you, {escape(name)}. '
        f"We have received your {kind} and appreciate you reaching out to us.</p>"
        f'<p style="color:{MUTED_COLOR};line-height:1.6;">Our team will review your request and get back '
        "to you within 24–48 hours.</p>"
        f'<div style="background:{BACKGROUND_COLOR};border-radius:8px;padding:16px;">{summary}</div>'
    )
    html = _layout(f"Thank you, {name}", body, settings.frontend_url, "Visit our website")

    text = (
        f"Thank you, {name}\n\n"
        f"We have received your {kind} and appreciate you reaching out to us.\n"
        "Our team will review your request and get back to you within 24–48 hours.\n\n"
        + (f"Property: {interested_property}\n" if interested_property else "")
        + f"{message}\n\nBest regards,\n{settings.app_name}"
    )
    return EmailContent(subject, html, text)


def render_new_lead_alert(
    lead_id: int,
    name: str,
    email: str,
    phone: str,
    message: str,
    property_name: str | None = None,
) -> EmailContent:
    """Admin alert for a lead created from an enquiry with property context."""
    subject = f"New lead: {name}" + (f" – {property_name}" if property_name else "")
    rows = [("Name", name), ("Email", email), ("Phone", phone), ("Property", property_name), ("Message", message)]
    html = _layout("New lead received", _detail_rows(rows), _lead_url(lead_id), "View lead")
    text = f"New lead received\n\n{_detail_lines(rows)}\n\n{_lead_url(lead_id)}"
    return EmailContent(subject, html, text)


def render_new_enquiry_alert(
    name: str,
    email: str,
    phone: str,
    message: str,
    source: str,
    interested_property: str | None = None,
) -> EmailContent:
    """Admin alert for an enquiry that did not become a lead."""
    subject = f"New enquiry from {name}"
    rows = [
        ("Name", name), ("Email", email), ("Phone", phone),
        ("Source", source), ("Interested in", interested_property), ("Message", message),
    ]
    queries_url = f"{settings.frontend_url.rstrip('/')}/admin/queries"
    html = _layout("New enquiry received", _detail_rows(rows), queries_url, "View enquiries")
    text = f"New enquiry received\n\n{_detail_lines(rows)}\n\n{queries_url}"
    return EmailContent(subject, html, text)


def render_follow_up_due_alert(
    lead_id: int,
    lead_name: str,
    lead_email: str,
    lead_phone: str,
    follow_up_title: str,
    follow_up_type: str,
    due_at: datetime,
    property_name: str | None = None,
) -> EmailContent:
    """Admin alert for a follow-up that is overdue or due soon."""
    subject = f"Follow-up due: {follow_up_title} – {lead_name}"
    rows = [
        ("Task", follow_up_title), ("Type", follow_up_type), ("Due", _format_due(due_at)),
        ("Lead", lead_name), ("Email", lead_email), ("Phone", lead_phone), ("Property", property_name),
    ]
    html = _layout("Follow-up due", _detail_rows(rows), _lead_url(lead_id), "View lead")
    text = f"Follow-up due\n\n{_detail_lines(rows)}\n\n{_lead_url(lead_id)}"
    return EmailContent(subject, html, text)


def render_assignee_reminder(
    assignee_name: str,
    lead_id: int,
    lead_name: str,
    lead_email: str,
    lead_phone: str,
    follow_up_title: str,
    due_at: datetime,
    property_name: str | None = None,
) -> EmailContent:
    """Reminder sent to the owner of a lead with a follow-up coming up."""
    subject = f"Reminder: {follow_up_title} – {lead_name}"
    rows = [
        ("Task", follow_up_title), ("Due", _format_due(due_at)),
        ("Lead", lead_name), ("Email", lead_email), ("Phone", lead_phone), ("Property", property_name),
    ]
    intro = f'<p style="color:{TEXT_COLOR};">Hi {escape(assignee_name)}, you have a follow-up coming up.</p>'
    html = _layout("Follow-up reminder", intro + _detail_rows(rows), _lead_url(lead_id), "View lead")
    text = (
        f"Hi {assignee_name}, you have a follow-up coming up.\n\n"
        f"{_detail_lines(rows)}\n\n{_lead_url(lead_id)}"
    )
    return EmailContent(subject, html, text)
