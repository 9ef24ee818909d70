"""
HR letter generation.

Letters are rendered to plain text and stored on the Document row; turning
them into PDFs is left to the client.
"""
from datetime import date
from typing import Optional, Tuple

from hrportal.core import roles
from hrportal.core.config import settings
from hrportal.models.document import DocumentType
from hrportal.models.user import User


class DocumentDataError(ValueError):
    """The subject's record lacks a field the letter needs."""


def _fmt(d: Optional[date]) -> str:
    return d.strftime("%B %d, %Y") if d else ""


def _department(user: User) -> str:
    return (user.department or "").replace("_", " ").upper()


def _signature() -> list:
    return ["", "Sincerely,", "HR Department", settings.company_name]


def offer_letter(user: User, position: str, salary: str, today: date) -> str:
    if not user.department:
        raise DocumentDataError("Offer letter requires the employee's department")
    lines = [
        settings.company_name,
        "Offer Letter",
        f"Date: {_fmt(today)}",
        "",
        f"Dear {user.name},",
        "",
        f"We are pleased to offer you the position of {position} at {settings.company_name}.",
        "",
        "Position Details:",
        f"• Position: {position}",
        f"• Department: {_department(user)}",
        f"• Salary: {salary}",
        f"• Start Date: {_fmt(user.join_date or today)}",
        "",
        "We look forward to having you join our team.",
    ]
    return "\n".join(lines + _signature())


def experience_certificate(user: User, today: date) -> str:
    if not user.join_date or not user.department:
        raise DocumentDataError("Experience certificate requires join date and department")
    lines = [
        settings.company_name,
        "Experience Certificate",
        f"Date: {_fmt(today)}",
        "",
        "TO WHOM IT MAY CONCERN",
        "",
        f"This is to certify that {user.name} was employed with {settings.company_name}",
        f"from {_fmt(user.join_date)} to {_fmt(today)}.",
        "",
        f"{user.name} worked as {roles.display_name(user.role)} in the {_department(user)} department.",
        "",
        f"{user.name} has been a valuable team member and contributed significantly.",
        "",
        "We wish them all the best for future endeavors.",
    ]
    return "\n".join(lines + _signature())


def recommendation_letter(user: User, today: date) -> str:
    role = roles.display_name(user.role)
    lines = [
        settings.company_name,
        "Letter of Recommendation",
        f"Date: {_fmt(today)}",
        "",
        "To Whom It May Concern,",
        "",
        f"I am pleased to recommend {user.name}, who has worked with {settings.company_name}"
        + (f" since {_fmt(user.join_date)}" if user.join_date else "") + f" as {role}.",
        "",
        f"{user.name} has consistently shown dedication, reliability and strong teamwork.",
        "I am confident they will be an asset to any organization.",
    ]
    return "\n".join(lines + _signature())


def render_document(
    document_type: DocumentType,
    user: User,
    today: date,
    position: Optional[str] = None,
    salary: Optional[str] = None,
) -> Tuple[str, str]:
    """Returns (title, content) for the requested letter."""
    if document_type == DocumentType.OFFER_LETTER:
        if not position or not salary:
            raise DocumentDataError("Offer letter requires position and salary")
        return f"Offer Letter - {user.name}", offer_letter(user, position, salary, today)
    if document_type == DocumentType.EXPERIENCE_CERTIFICATE:
        return f"Experience Certificate - {user.name}", experience_certificate(user, today)
    return f"Letter of Recommendation - {user.name}", recommendation_letter(user, today)
