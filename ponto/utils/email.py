"""이메일 발송 유틸리티 — SMTP (aiosmtplib).

SMTP 설정은 config.py의 SMTP_* 환경 변수로 관리.
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from ponto.config import settings

logger = logging.getLogger(__name__)


def is_email_configured() -> bool:
    return bool(settings.SMTP_USER and settings.SMTP_FROM_EMAIL)


async def send_email(
    to: str,
    subject: str,
    html: str,
    text: str | None = None,
) -> None:
    """이메일 발송.

    Args:
        to: 수신자 이메일 주소
        subject: 제목
        html: HTML 본문
        text: 플레인텍스트 본문 (없으면 생략)
    """
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    msg["To"] = to

    if text:
        msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    await aiosmtplib.send(
        msg,
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        start_tls=True,
    )


async def send_temporary_password(to: str, name: str, temporary_password: str) -> bool:
    """임시 비밀번호 안내 메일 — Welcome mail carrying the temporary password.

    SMTP 미설정 시 발송하지 않습니다. 발송 실패는 로그만 남깁니다.
    Returns whether a message was actually sent.
    """
    if not is_email_configured():
        return False

    html = (
        f"<p>Olá {name},</p>"
        f"<p>Sua conta no Ponto Digital foi criada. Login: <b>{to}</b></p>"
        f"<p>Senha temporária: <b>{temporary_password}</b></p>"
        "<p>Altere a senha no primeiro acesso.</p>"
    )
    try:
        await send_email(to, "Bem-vindo ao Ponto Digital", html)
    except aiosmtplib.SMTPException:
        logger.warning("Temporary password e-mail to %s failed", to, exc_info=True)
        return False
    return True
