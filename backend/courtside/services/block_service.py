# backend/courtside/services/block_service.py
"""
Block Service.

Owner-created closure intervals on a court: a single block (optionally
repeated weekly) or a weekday-filtered series over a date range. Both entry
points share one validation core and are all-or-nothing.

Blocks are not bound to operating hours. They are checked unpadded against
other blocks and against buffer-padded existing bookings.
"""

from dataclasses import dataclass
from datetime import date, datetime
import logging
from typing import Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from ..core.config import SchedulingConfig
from ..core.constants import MAX_BLOCK_REPEAT_WEEKS
from ..core.court_lock import court_lock
from ..core.exceptions import ConflictException, NotFoundException, ValidationException
from ..core.identity import Principal
from ..domain.scheduling import (
    Interval,
    combine,
    iter_dates,
    js_weekday,
    parse_hhmm,
    parse_iso_datetime,
    parse_ymd,
)
from ..models.court import Court
from ..models.court_block import CourtBlock
from ..models.user import UserRole
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from .base import BaseService
from .conflict_checker import ConflictChecker
from .notification_service import NotificationGateway, NotificationService

logger = logging.getLogger(__name__)


@dataclass
class BlockAdmissionResult:
    ids: List[str]
    blocks: List[CourtBlock]

    def to_dict(self) -> dict:
        return {"ids": list(self.ids), "blocks": [block.to_dict() for block in self.blocks]}


def clamp_repeat_weeks(value: Optional[Union[int, float]]) -> int:
    """Out-of-range repeat counts are clamped to 0..52."""
    if value is None:
        return 0
    try:
        weeks = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, min(MAX_BLOCK_REPEAT_WEEKS, weeks))


def normalize_weekdays(weekdays: Iterable[int]) -> List[int]:
    """Distinct valid weekdays (0 = Sunday), in first-seen order."""
    result: List[int] = []
    for day in weekdays or []:
        if isinstance(day, bool) or not isinstance(day, int):
            continue
        if 0 <= day <= 6 and day not in result:
            result.append(day)
    return result


def series_occurrences(
    start_date: date, end_date: date, weekdays: Iterable[int], start_hhmm: str, end_hhmm: str
) -> List[Interval]:
    """Concrete intervals for every date in ``start_date..end_date`` whose weekday is selected."""
    selected = set(weekdays)
    occurrences = []
    for day in iter_dates(start_date, end_date):
        if js_weekday(day) not in selected:
            continue
        occurrences.append(Interval.validated(combine(day, start_hhmm), combine(day, end_hhmm)))
    return occurrences


class BlockService(BaseService):
    def __init__(
        self,
        db: Session,
        config: Optional[SchedulingConfig] = None,
        gateway: Optional[NotificationGateway] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        clock=None,
    ):
        super().__init__(db, clock)
        self.config = config or SchedulingConfig.from_settings()
        self.gateway: NotificationGateway = gateway or NotificationService(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)
        self.court_repository = RepositoryFactory.create_court_repository(db)
        self.block_repository = RepositoryFactory.create_court_block_repository(db)
        self.audit_repository = RepositoryFactory.create_audit_repository(db)

    def _load_owned_court(self, actor: Principal, court_id: str) -> Court:
        court = self.court_repository.get_with_establishment(court_id, for_update=True)
        if court is None:
            raise NotFoundException("Court not found", details={"court_id": court_id})
        actor.require_owner_of(court.establishment.owner_id)
        return court

    def _admit(
        self,
        actor: Principal,
        court_id: str,
        occurrences: List[Interval],
        note: Optional[str],
        action: str,
        details: dict,
    ) -> BlockAdmissionResult:
        """Shared core: ownership, conflict checks and inserts in one transaction."""
        with court_lock(court_id) as acquired:
            if not acquired:
                raise ConflictException(
                    "Another request for this court is being processed. Please try again.",
                    code="COURT_BUSY",
                )
            with self.transaction():
                court = self._load_owned_court(actor, court_id)
                buffer_minutes = court.establishment.booking_buffer_minutes or 0
                for occurrence in occurrences:
                    self.conflict_checker.assert_no_conflict(
                        court.id, occurrence, buffer_minutes=buffer_minutes
                    )

                blocks = [
                    self.block_repository.create(
                        court_id=court.id,
                        start_time=occurrence.start,
                        end_time=occurrence.end,
                        note=note,
                        created_by_id=actor.id,
                    )
                    for occurrence in occurrences
                ]
                self.audit_repository.record(
                    actor_id=actor.id,
                    action=action,
                    entity_type="CourtBlock",
                    entity_id=blocks[0].id,
                    details={"court_id": court.id, "ids": [b.id for b in blocks], **details},
                )

        prometheus_metrics.record_admission("block", len(blocks))
        return BlockAdmissionResult(ids=[b.id for b in blocks], blocks=blocks)

    @BaseService.measure_operation("create_block")
    def create_block(
        self,
        actor: Principal,
        court_id: str,
        start_time: Union[str, datetime],
        end_time: Union[str, datetime],
        note: Optional[str] = None,
        repeat_weeks: Optional[int] = 0,
    ) -> BlockAdmissionResult:
        """
        Create one block, optionally repeated weekly.

        Args:
            actor: Establishment owner
            court_id: Court to block
            start_time: ISO-8601 start
            end_time: ISO-8601 end
            note: Free text shown on the agenda
            repeat_weeks: Extra weekly copies, clamped to 0..52

        Raises:
            ValidationException: Malformed or misaligned interval
            ForbiddenException: Actor does not own the court
            SlotTakenException: Any copy overlaps a booking, block or pass
        """
        self.log_operation("create_block", actor_id=actor.id, court_id=court_id)
        actor.require_role(UserRole.ADMIN)
        interval = Interval.validated(
            parse_iso_datetime(start_time, "start_time"), parse_iso_datetime(end_time, "end_time")
        )
        repeat = clamp_repeat_weeks(repeat_weeks)
        return self._admit(
            actor,
            court_id,
            interval.weekly_occurrences(repeat),
            (note or "").strip() or None,
            action="block.create",
            details={"repeat_weeks": repeat},
        )

    @BaseService.measure_operation("create_block_series")
    def create_block_series(
        self,
        actor: Principal,
        court_id: str,
        start_date: Union[str, date],
        end_date: Union[str, date],
        weekdays: Iterable[int],
        start_hhmm: str,
        end_hhmm: str,
        note: Optional[str] = None,
    ) -> BlockAdmissionResult:
        """Block ``start_hhmm``-``end_hhmm`` on every selected weekday in an inclusive date range."""
        self.log_operation("create_block_series", actor_id=actor.id, court_id=court_id)
        actor.require_role(UserRole.ADMIN)
        first = parse_ymd(start_date, "start_date")
        last = parse_ymd(end_date, "end_date")
        if last < first:
            raise ValidationException("end_date must be on or after start_date")
        selected = normalize_weekdays(weekdays)
        if not selected:
            raise ValidationException("Select at least one weekday")
        parse_hhmm(start_hhmm, "start_time")
        parse_hhmm(end_hhmm, "end_time")

        occurrences = series_occurrences(first, last, selected, start_hhmm, end_hhmm)
        if not occurrences:
            raise ValidationException(
                "No blocks were created: no selected weekday falls in the date range"
            )
        return self._admit(
            actor,
            court_id,
            occurrences,
            (note or "").strip() or None,
            action="block.create.series",
            details={
                "start_date": first.isoformat(),
                "end_date": last.isoformat(),
                "weekdays": selected,
                "start_time": start_hhmm,
                "end_time": end_hhmm,
            },
        )

    @BaseService.measure_operation("delete_block")
    def delete_block(self, actor: Principal, block_id: str) -> None:
        """Remove a block; availability alerts on the court are re-evaluated afterwards."""
        self.log_operation("delete_block", actor_id=actor.id, block_id=block_id)
        actor.require_role(UserRole.ADMIN)

        with self.transaction():
            block = self.block_repository.get_with_court(block_id)
            if block is None:
                raise NotFoundException("Block not found", details={"block_id": block_id})
            actor.require_owner_of(block.court.establishment.owner_id)
            court_id = block.court_id
            self.audit_repository.record(
                actor_id=actor.id,
                action="block.delete",
                entity_type="CourtBlock",
                entity_id=block.id,
                details={
                    "court_id": court_id,
                    "start_time": block.start_time.isoformat(),
                    "end_time": block.end_time.isoformat(),
                    "monthly_pass_id": block.monthly_pass_id,
                },
            )
            self.db.delete(block)

        self._re_evaluate_alerts(court_id)

    def _re_evaluate_alerts(self, court_id: str) -> None:
        from .availability_alert_service import AvailabilityAlertService

        try:
            AvailabilityAlertService(
                self.db, config=self.config, gateway=self.gateway, clock=self.clock
            ).process_alerts(court_id=court_id)
        except Exception:
            logger.exception("Alert re-evaluation failed", extra={"court_id": court_id})
            prometheus_metrics.record_side_effect_failure("alerts")
            self.db.rollback()
