# backend/courtside/services/holiday_service.py
"""
Holiday overrides of an establishment's weekly calendar.

One override per date: either closed all day or open with special hours.
"""

from datetime import date
import logging
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..core.identity import Principal
from ..domain.scheduling import assert_hhmm_aligned, hhmm_to_minutes, parse_ymd
from ..models.establishment import Establishment, EstablishmentHoliday
from ..models.user import UserRole
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class HolidayService(BaseService):
    def __init__(self, db: Session, clock=None):
        super().__init__(db, clock)
        self.establishment_repository = RepositoryFactory.create_establishment_repository(db)
        self.audit_repository = RepositoryFactory.create_audit_repository(db)

    def _owned_establishment(self, actor: Principal) -> Establishment:
        actor.require_role(UserRole.ADMIN)
        establishment = self.establishment_repository.get_by_owner(actor.id)
        if establishment is None:
            raise NotFoundException("Establishment not found")
        return establishment

    @staticmethod
    def _validate_hours(
        is_open: bool, opening_time: Optional[str], closing_time: Optional[str]
    ) -> tuple:
        if not is_open:
            return None, None
        if not opening_time and not closing_time:
            return None, None
        if not opening_time or not closing_time:
            raise ValidationException(
                "Special hours need both an opening and a closing time",
                details={"opening_time": opening_time, "closing_time": closing_time},
            )
        assert_hhmm_aligned(opening_time, "opening_time")
        assert_hhmm_aligned(closing_time, "closing_time")
        if hhmm_to_minutes(closing_time) <= hhmm_to_minutes(opening_time):
            raise ValidationException(
                "Closing time must be after opening time",
                details={"opening_time": opening_time, "closing_time": closing_time},
            )
        return opening_time, closing_time

    @BaseService.measure_operation("upsert_holiday")
    def upsert_holiday(
        self,
        actor: Principal,
        day: Union[str, date],
        is_open: bool,
        opening_time: Optional[str] = None,
        closing_time: Optional[str] = None,
        note: Optional[str] = None,
    ) -> EstablishmentHoliday:
        """
        Create or replace the override for ``day``.

        Closed overrides drop any hours they were given. An open override
        without hours keeps the weekday's default hours.
        """
        self.log_operation("upsert_holiday", actor_id=actor.id, day=str(day))
        parsed_day = parse_ymd(day, "date")
        opening, closing = self._validate_hours(bool(is_open), opening_time, closing_time)

        with self.transaction():
            establishment = self._owned_establishment(actor)
            holiday = self.establishment_repository.upsert_holiday(
                establishment.id,
                parsed_day,
                is_open=bool(is_open),
                opening_time=opening,
                closing_time=closing,
                note=(note or "").strip() or None,
            )
            self.audit_repository.record(
                actor_id=actor.id,
                action="holiday.upsert",
                entity_type="EstablishmentHoliday",
                entity_id=holiday.id,
                details={
                    "date": parsed_day.isoformat(),
                    "is_open": holiday.is_open,
                    "opening_time": opening,
                    "closing_time": closing,
                },
            )
        return holiday

    @BaseService.measure_operation("delete_holiday")
    def delete_holiday(self, actor: Principal, holiday_id: str) -> None:
        self.log_operation("delete_holiday", actor_id=actor.id, holiday_id=holiday_id)
        with self.transaction():
            establishment = self._owned_establishment(actor)
            holiday = self.establishment_repository.get_holiday_by_id(holiday_id)
            # Another owner's override is reported as missing
            if holiday is None or holiday.establishment_id != establishment.id:
                raise NotFoundException("Holiday not found", details={"holiday_id": holiday_id})
            self.audit_repository.record(
                actor_id=actor.id,
                action="holiday.delete",
                entity_type="EstablishmentHoliday",
                entity_id=holiday.id,
                details={"date": holiday.date.isoformat()},
            )
            self.establishment_repository.delete_holiday(holiday)

    def list_holidays(
        self,
        actor: Principal,
        start: Optional[Union[str, date]] = None,
        end: Optional[Union[str, date]] = None,
    ) -> List[EstablishmentHoliday]:
        establishment = self._owned_establishment(actor)
        first = parse_ymd(start, "start") if start else None
        last = parse_ymd(end, "end") if end else None
        return self.establishment_repository.list_holidays(establishment.id, first, last)
