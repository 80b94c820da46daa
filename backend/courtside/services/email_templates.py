# backend/courtside/services/email_templates.py
"""
E-mail content for scheduling events.

Rendering uses Jinja2 templates under ``courtside/templates/email``. Every
builder returns an ``EmailContent`` (subject, plain text, HTML); delivery
is the e-mail subsystem's concern.
"""

from dataclasses import dataclass
from datetime import datetime
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from ..core.constants import BRAND_NAME
from ..domain.scheduling import format_hhmm

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

Details = Sequence[Tuple[str, str]]


@dataclass(frozen=True)
class EmailContent:
    subject: str
    text: str
    html: str


def format_cents(value: Optional[int]) -> str:
    return f"R$ {(value or 0) / 100:,.2f}"


def format_day(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


class TemplateService:
    """
    Jinja2 rendering for e-mail bodies.

    Common context (brand name, year) is merged into every render.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        template_dir = template_dir or Path(__file__).parent.parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["cents"] = format_cents

    def get_common_context(self) -> Dict[str, Any]:
        return {"brand_name": BRAND_NAME, "current_year": datetime.now().year}

    def render_template(self, template_name: str, context: Optional[Dict[str, Any]] = None, **kwargs) -> str:
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            logger.error(f"Template not found: {template_name}")
            raise
        full_context = self.get_common_context()
        if context:
            full_context.update(context)
        full_context.update(kwargs)
        return template.render(full_context)


_template_service: Optional[TemplateService] = None


def get_template_service() -> TemplateService:
    global _template_service
    if _template_service is None:
        _template_service = TemplateService()
    return _template_service


def _text_body(heading: str, intro: Optional[str], details: Details, cta_url: Optional[str]) -> str:
    lines: List[str] = [heading, ""]
    if intro:
        lines += [intro, ""]
    lines += [f"{label}: {value}" for label, value in details]
    if cta_url:
        lines += ["", cta_url]
    return "\n".join(lines).strip() + "\n"


def render_notice(
    subject: str,
    heading: str,
    intro: Optional[str] = None,
    details: Details = (),
    cta_url: Optional[str] = None,
    cta_label: str = "Open dashboard",
) -> EmailContent:
    html = get_template_service().render_template(
        "email/notice.html",
        subject=subject,
        heading=heading,
        intro=intro,
        details=list(details),
        cta_url=cta_url,
        cta_label=cta_label,
    )
    return EmailContent(subject=subject, text=_text_body(heading, intro, details, cta_url), html=html)


def _interval_details(court_name: str, start: datetime, end: datetime) -> List[Tuple[str, str]]:
    return [
        ("Court", court_name),
        ("Date", format_day(start)),
        ("Time", f"{format_hhmm(start)}-{format_hhmm(end)}"),
    ]


def _pass_details(monthly_pass) -> List[Tuple[str, str]]:
    return [
        ("Court", monthly_pass.court.name),
        ("Month", monthly_pass.month),
        ("Weekday", WEEKDAY_NAMES[monthly_pass.weekday]),
        ("Time", f"{monthly_pass.start_time}-{monthly_pass.end_time}"),
        ("Price", format_cents(monthly_pass.price_cents)),
    ]


# Bookings


def booking_pending_owner(booking, court_name: str, customer_name: str, dashboard_url: str) -> EmailContent:
    details = [("Customer", customer_name)] + _interval_details(
        court_name, booking.start_time, booking.end_time
    )
    details.append(("Total", format_cents(booking.total_price_cents)))
    return render_notice(
        subject=f"New booking request: {court_name} on {format_day(booking.start_time)}",
        heading="New booking awaiting confirmation",
        intro=f"{customer_name} requested a booking that needs your confirmation.",
        details=details,
        cta_url=dashboard_url,
    )


def booking_confirmed_customer(booking, court_name: str, app_url: str) -> EmailContent:
    return render_notice(
        subject=f"Booking confirmed: {court_name} on {format_day(booking.start_time)}",
        heading="Your booking is confirmed",
        details=_interval_details(court_name, booking.start_time, booking.end_time),
        cta_url=f"{app_url}/bookings",
        cta_label="View my bookings",
    )


def booking_cancelled_customer(booking, court_name: str, app_url: str, reason: Optional[str] = None) -> EmailContent:
    return render_notice(
        subject=f"Booking cancelled: {court_name} on {format_day(booking.start_time)}",
        heading="Your booking was cancelled",
        intro=reason,
        details=_interval_details(court_name, booking.start_time, booking.end_time),
        cta_url=f"{app_url}/bookings",
        cta_label="Find another time",
    )


def _span(booking) -> str:
    return f"{format_day(booking.start_time)} {format_hhmm(booking.start_time)}-{format_hhmm(booking.end_time)}"


def booking_rescheduled_owner(
    original, booking, court_name: str, customer_name: str, dashboard_url: str
) -> EmailContent:
    details = [
        ("Customer", customer_name),
        ("Court", court_name),
        ("From", _span(original)),
        ("To", _span(booking)),
        ("Status", booking.status),
    ]
    return render_notice(
        subject=f"Booking rescheduled: {court_name} on {format_day(booking.start_time)}",
        heading="A customer rescheduled a booking",
        intro=f"{customer_name} moved their booking to a new time.",
        details=details,
        cta_url=dashboard_url,
    )


# Monthly passes


def monthly_pass_pending_owner(monthly_pass, customer_name: str, dashboard_url: str) -> EmailContent:
    return render_notice(
        subject=f"New monthly pass request: {monthly_pass.court.name} ({monthly_pass.month})",
        heading="New monthly pass awaiting confirmation",
        intro=f"{customer_name} requested a monthly pass.",
        details=[("Customer", customer_name)] + _pass_details(monthly_pass),
        cta_url=dashboard_url,
    )


def monthly_pass_confirmed_customer(monthly_pass, app_url: str) -> EmailContent:
    return render_notice(
        subject=f"Monthly pass confirmed: {monthly_pass.court.name} ({monthly_pass.month})",
        heading="Your monthly pass is active",
        details=_pass_details(monthly_pass),
        cta_url=f"{app_url}/bookings",
        cta_label="View my bookings",
    )


def monthly_pass_cancelled_customer(monthly_pass, app_url: str) -> EmailContent:
    return render_notice(
        subject=f"Monthly pass not approved: {monthly_pass.court.name} ({monthly_pass.month})",
        heading="Your monthly pass request was cancelled",
        details=_pass_details(monthly_pass),
        cta_url=app_url,
        cta_label="Browse courts",
    )


# Alerts


def availability_alert_customer(alert, court_name: str, app_url: str) -> EmailContent:
    return render_notice(
        subject=f"Time available: {court_name} on {format_day(alert.start_time)}",
        heading="The time you were watching is available",
        intro="Book it before someone else does.",
        details=_interval_details(court_name, alert.start_time, alert.end_time),
        cta_url=f"{app_url}/courts/{alert.court_id}",
        cta_label="Book now",
    )
