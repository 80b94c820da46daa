"""
Unit tests for post-commit side effects: the Outbox and e-mail content.
"""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock

from courtside.core.config import SchedulingConfig
from courtside.models.notification import NotificationKind
from courtside.services import email_templates
from courtside.services.notification_service import EmailRequest, NotificationRequest, Outbox


def _content(subject: str = "Subject") -> email_templates.EmailContent:
    return email_templates.EmailContent(subject=subject, text="text", html="<p>html</p>")


class TestOutbox:
    def test_collects_notifications_and_emails(self):
        outbox = Outbox(SchedulingConfig())
        outbox.notify("user-1", NotificationKind.BOOKING_CONFIRMED, "Title", "Body", {"booking_id": "b1"})
        outbox.email("carla@example.com", _content(), dedupe_key="booking:confirmed:b1")

        assert len(outbox) == 2
        assert isinstance(outbox.items[0], NotificationRequest)
        assert isinstance(outbox.items[1], EmailRequest)

    def test_skips_missing_recipients(self):
        """Walk-in bookings have no user and may have no e-mail."""
        outbox = Outbox(SchedulingConfig())
        outbox.notify(None, NotificationKind.BOOKING_CONFIRMED, "Title", "Body")
        outbox.email(None, _content())
        assert len(outbox) == 0

    def test_email_disabled_drops_emails(self):
        outbox = Outbox(SchedulingConfig(email_enabled=False))
        outbox.email("carla@example.com", _content())
        assert len(outbox) == 0

    def test_dispatch_sends_in_order_and_empties(self):
        outbox = Outbox(SchedulingConfig())
        outbox.notify("user-1", NotificationKind.BOOKING_PENDING, "Title", "Body")
        outbox.email("owner@example.com", _content("Pending"), dedupe_key="k1")
        gateway = MagicMock()

        delivered = outbox.dispatch(gateway)

        assert delivered == 2
        gateway.notify.assert_called_once_with(
            "user-1", NotificationKind.BOOKING_PENDING, "Title", "Body", {}
        )
        gateway.enqueue_email.assert_called_once_with(
            "owner@example.com", "Pending", "text", "<p>html</p>", "k1"
        )
        assert len(outbox) == 0

    def test_failure_is_isolated_and_rolled_back(self):
        """A failing side effect never stops the others."""
        outbox = Outbox(SchedulingConfig())
        outbox.notify("user-1", NotificationKind.BOOKING_CONFIRMED, "Title", "Body")
        outbox.email("carla@example.com", _content())
        gateway = MagicMock()
        gateway.notify.side_effect = RuntimeError("store down")
        db = MagicMock()

        delivered = outbox.dispatch(gateway, db)

        assert delivered == 1
        gateway.enqueue_email.assert_called_once()
        db.rollback.assert_called_once()


class TestEmailTemplates:
    def test_booking_confirmed_customer(self):
        booking = SimpleNamespace(
            start_time=datetime(2024, 6, 3, 10), end_time=datetime(2024, 6, 3, 11), total_price_cents=10000
        )
        content = email_templates.booking_confirmed_customer(booking, "Court 1", "https://courts.test")

        assert content.subject == "Booking confirmed: Court 1 on 2024-06-03"
        assert "Time: 10:00-11:00" in content.text
        assert "https://courts.test/bookings" in content.text
        assert "Your booking is confirmed" in content.html

    def test_html_escapes_user_supplied_values(self):
        booking = SimpleNamespace(
            start_time=datetime(2024, 6, 3, 10), end_time=datetime(2024, 6, 3, 11), total_price_cents=0
        )
        content = email_templates.booking_pending_owner(
            booking, "Court 1", "<script>x</script>", "https://courts.test/dashboard"
        )
        assert "<script>" not in content.html
        assert "&lt;script&gt;" in content.html

    def test_monthly_pass_details(self):
        monthly_pass = SimpleNamespace(
            court=SimpleNamespace(name="Court 1"),
            month="2024-07",
            weekday=1,
            start_time="18:00",
            end_time="19:00",
            price_cents=40000,
        )
        content = email_templates.monthly_pass_confirmed_customer(monthly_pass, "https://courts.test")

        assert "Weekday: Monday" in content.text
        assert "Price: R$ 400.00" in content.text

    def test_format_cents(self):
        assert email_templates.format_cents(123456) == "R$ 1,234.56"
        assert email_templates.format_cents(None) == "R$ 0.00"
