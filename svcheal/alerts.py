from __future__ import annotations

import smtplib
import socket
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from .models import AggregateOutcome, ReconciliationResult
from .settings import settings


_HEALTHY = {ReconciliationResult.STARTED, ReconciliationResult.RESTARTED}


def format_outcome_alert(outcome: AggregateOutcome, host: str | None = None) -> tuple[str, str]:
    """Build (subject, body) describing a failed reconciliation pass."""
    host = host or socket.gethostname()
    unhealthy = [r for r in outcome.results if r.result not in _HEALTHY]
    subject = (
        f"svcheal on {host}: {len(unhealthy)} of {len(outcome.results)} service(s) "
        f"not healthy (exit {outcome.exit_code})"
    )

    lines = [f"{r.name}: {r.result.value} - {r.message}" for r in outcome.results]
    lines.append("")
    if outcome.invalid_name:
        lines.append("At least one service name did not resolve to an existing service.")
    if outcome.action_failed:
        lines.append("At least one service could not be brought to the running state.")
    return subject, "\n".join(lines)


def send_outcome_alert(outcome: AggregateOutcome) -> bool:
    """Email a summary of a failed pass. Successful passes are not reported."""
    if outcome.ok:
        return False
    subject, body = format_outcome_alert(outcome)
    return send_email(subject, body)


def send_email(subject: str, body: str) -> bool:
    """Send an email if SMTP settings are configured.

    Environment variables:
      - SVCHEAL_ENABLE_EMAIL=true
      - SVCHEAL_SMTP_HOST / SVCHEAL_SMTP_PORT
      - SVCHEAL_SMTP_USER / SVCHEAL_SMTP_PASSWORD
      - SVCHEAL_EMAIL_FROM / SVCHEAL_EMAIL_TO
    """
    if not settings.enable_email:
        return False
    if not all(
        [
            settings.smtp_host,
            settings.smtp_port,
            settings.smtp_user,
            settings.smtp_password,
            settings.email_from,
            settings.email_to,
        ]
    ):
        return False

    msg = MIMEMultipart()
    msg["From"] = settings.email_from
    msg["To"] = settings.email_to
    msg["Subject"] = subject
    msg.attach(MIMEText(body, "plain"))

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as server:
            server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.email_from, [settings.email_to], msg.as_string())
        return True
    except (smtplib.SMTPException, OSError):
        return False
