"""Plain HTML bodies for the verification mails."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MailContent:
    subject: str
    html_body: str


def _code_body(intro: str, code: str, minutes: int) -> str:
    return (
        f"<p>{intro}</p>"
        f'<p style="font-size:24px;letter-spacing:4px"><b>{code}</b></p>'
        f"<p>The code expires in {minutes} minutes. "
        "If you did not request it, ignore this email.</p>"
    )


def reset_password_mail(code: str, minutes: int) -> MailContent:
    return MailContent(
        subject="Reset Password",
        html_body=_code_body("Use this code to reset your password:", code, minutes),
    )


def confirm_email_mail(code: str, minutes: int) -> MailContent:
    return MailContent(
        subject="Confirm your email address",
        html_body=_code_body("Use this code to confirm your email:", code, minutes),
    )


def delete_account_mail(code: str, minutes: int) -> MailContent:
    return MailContent(
        subject="Delete Account",
        html_body=_code_body(
            "Use this code to confirm the deletion of your account:", code, minutes
        ),
    )
