import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.core.config import settings
from app.logging import get_logger
from app.mycelery.app import celery_app

logger = get_logger("email")


@celery_app.task(name="send_email")
def send_email(to: str, subject: str, body: str, is_html: bool = True):
    """Envia email via SMTP (STARTTLS). Falhas são logadas e propagadas, sem retry."""
    if not settings.SMTP_USERNAME or not settings.SMTP_PASSWORD:
        logger.error("SMTP credentials not configured", exc_info=False, to=to)
        raise ValueError("SMTP credentials not configured")

    from_email = settings.FROM_EMAIL or settings.SMTP_USERNAME

    msg = MIMEMultipart()
    msg['From'] = f"{settings.FROM_NAME} <{from_email}>"
    msg['To'] = to
    msg['Subject'] = subject
    msg.attach(MIMEText(body, 'html' if is_html else 'plain', 'utf-8'))

    try:
        with smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT) as server:
            server.starttls()
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.sendmail(from_email, [to], msg.as_string())
    except (smtplib.SMTPException, OSError):
        logger.error("Error sending email", to=to, subject=subject)
        raise

    logger.info("Email sent successfully", to=to, subject=subject)
    return {"sent": True, "email": to}


@celery_app.task(name="send_email_local")
def send_email_local(to: str, subject: str, body: str, is_html: bool = True):
    """Simula envio de email localmente (para desenvolvimento)"""
    print("=== EMAIL SIMULADO ===")
    print(f"Para: {to}")
    print(f"Assunto: {subject}")
    print(body)
    print("======================")
    logger.info("Simulated sending email", to=to, subject=subject)
    return {"sent": True}
