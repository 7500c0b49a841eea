"""HTML bodies for customer and diagnostic emails."""
from datetime import datetime, timezone
from html import escape

from pydantic import BaseModel

from src.core.models import Order, ProofOfDelivery

LINK_STYLE = "color: #2563eb;"
WARNING_STYLE = "color: #ef4444;"


class EmailContent(BaseModel):
    subject: str
    html: str


def _format_timestamp(value: datetime | None) -> str:
    value = value or datetime.now(timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def _image_block(label: str, url: str, img_style: str) -> str:
    src = escape(url, quote=True)
    return (
        '<div style="margin: 20px 0;">'
        f"<p><strong>{label}:</strong></p>"
        f'<img src="{src}" alt="{label}" style="{img_style}" />'
        f'<p><a href="{src}" style="{LINK_STYLE}">View Full Size</a></p>'
        "</div>"
    )


def _media_block(label: str, url: str | None, img_style: str, missing_notice: str | None) -> str:
    if url:
        return _image_block(label, url, img_style)
    if missing_notice:
        return f"<p style='{WARNING_STYLE}'>⚠️ {missing_notice}</p>"
    return ""


def render_pod_email(order: Order, pod: ProofOfDelivery, include_missing_media_notice: bool = False) -> EmailContent:
    """Compose the delivery-complete email for an order and its POD.

    With `include_missing_media_notice`, an absent photo or signature is called
    out with a warning line instead of being silently omitted.
    """
    details = [
        f"<p><strong>Order Number:</strong> #{escape(order.order_number)}</p>",
        f"<p><strong>Customer:</strong> {escape(order.customer_name or 'N/A')}</p>",
        f"<p><strong>Delivery Address:</strong> {escape(order.display_address)}</p>",
        f"<p><strong>Delivered At:</strong> {_format_timestamp(pod.delivered_at)}</p>",
    ]
    if pod.recipient_name:
        details.append(f"<p><strong>Received By:</strong> {escape(pod.recipient_name)}</p>")
    if pod.notes:
        details.append(f"<p><strong>Notes:</strong> {escape(pod.notes)}</p>")

    photo = _media_block(
        "Delivery Photo",
        pod.photo_url,
        "max-width: 100%; height: auto; border-radius: 8px;",
        "No delivery photo available" if include_missing_media_notice else None,
    )
    signature = _media_block(
        "Signature",
        pod.signature_url,
        "max-width: 300px; height: auto; border: 1px solid #e5e7eb; border-radius: 8px;",
        "No signature available" if include_missing_media_notice else None,
    )

    html = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        '<h2 style="color: #2563eb;">Delivery Completed</h2>'
        "<p>Your order has been successfully delivered!</p>"
        '<div style="background: #f3f4f6; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        + "".join(details)
        + "</div>"
        + photo
        + signature
        + '<p style="color: #6b7280; font-size: 12px; margin-top: 30px;">'
        "This is an automated delivery notification. Please do not reply to this email."
        "</p>"
        "</div>"
    )
    return EmailContent(subject=f"Delivery Complete - Order #{order.order_number}", html=html)


def render_test_email(from_email: str, to_email: str, sent_at: datetime | None = None) -> EmailContent:
    sent_at = sent_at or datetime.now(timezone.utc)
    html = (
        "<h2>Test Email Successful!</h2>"
        "<p>If you're reading this, your SendGrid integration is working correctly.</p>"
        "<p><strong>Configuration:</strong></p>"
        "<ul>"
        f"<li>From: {escape(from_email)}</li>"
        f"<li>To: {escape(to_email)}</li>"
        f"<li>Sent at: {sent_at.isoformat()}</li>"
        "</ul>"
        "<p>Next steps:</p>"
        "<ol>"
        "<li>Check if this email went to spam</li>"
        "<li>If in spam, verify your sender domain in SendGrid</li>"
        "<li>Set up domain authentication for better deliverability</li>"
        "</ol>"
    )
    return EmailContent(subject="Test Email - Delivery System", html=html)
