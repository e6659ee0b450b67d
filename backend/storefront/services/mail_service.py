# Overview: Outbound email through the Resend API (best-effort delivery).

import resend
from flask import current_app


def send_email(to: str, subject: str, body: str) -> bool:
    """
    Send a plain-text email. Returns True when the provider accepted it.

    Delivery is best-effort: provider failures are logged and reported as
    False so the caller decides whether the request can still succeed.
    """
    api_key = (current_app.config.get("RESEND_API_KEY") or "").strip()
    if not api_key:
        current_app.logger.warning("RESEND_API_KEY is not configured; email to %s not sent", to)
        return False

    payload = {
        "from": current_app.config["MAIL_SENDER"],
        "to": [to],
        "subject": subject,
        "text": body,
    }

    resend.api_key = api_key
    try:
        response = resend.Emails.send(payload)
    except Exception:
        current_app.logger.exception("Email delivery to %s failed", to)
        return False

    if not isinstance(response, dict) or not response.get("id"):
        current_app.logger.error("Email provider rejected message to %s: %s", to, response)
        return False

    return True


def send_password_reset_email(recipient_email: str, token: str) -> bool:
    base_url = current_app.config["FRONTEND_URL"].rstrip("/")
    ttl_minutes = int(current_app.config["PASSWORD_RESET_TTL"].total_seconds() // 60)
    body = (
        "You are receiving this email because a password reset was requested "
        "for your account. Open the following link to choose a new password:\n\n"
        f"{base_url}/reset-password/{token}\n\n"
        f"The link expires in {ttl_minutes} minutes and can be used once.\n"
        "If you did not request this, ignore this email."
    )
    return send_email(recipient_email, "Password reset", body)
