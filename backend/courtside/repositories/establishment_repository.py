"""Establishment and holiday override data access."""

from datetime import date
import logging
from typing import Dict, List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.establishment import Establishment, EstablishmentHoliday
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class EstablishmentRepository(BaseRepository[Establishment]):
    def __init__(self, db: Session):
        super().__init__(db, Establishment)

    def get_by_owner(self, owner_id: str) -> Optional[Establishment]:
        return self.find_one_by(owner_id=owner_id)

    # Holidays

    def get_holiday(self, establishment_id: str, day: date) -> Optional[EstablishmentHoliday]:
        try:
            return cast(
                Optional[EstablishmentHoliday],
                self.db.query(EstablishmentHoliday)
                .filter(
                    EstablishmentHoliday.establishment_id == establishment_id,
                    EstablishmentHoliday.date == day,
                )
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading holiday: {str(e)}")
            raise RepositoryException(f"Failed to load holiday: {str(e)}")

    def get_holiday_by_id(self, holiday_id: str) -> Optional[EstablishmentHoliday]:
        try:
            return cast(
                Optional[EstablishmentHoliday],
                self.db.query(EstablishmentHoliday)
                .filter(EstablishmentHoliday.id == holiday_id)
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading holiday {holiday_id}: {str(e)}")
            raise RepositoryException(f"Failed to load holiday: {str(e)}")

    def get_holidays_between(
        self, establishment_id: str, start: date, end: date
    ) -> Dict[date, EstablishmentHoliday]:
        """Holiday overrides keyed by date, ``start`` and ``end`` inclusive."""
        return {holiday.date: holiday for holiday in self.list_holidays(establishment_id, start, end)}

    def list_holidays(
        self, establishment_id: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[EstablishmentHoliday]:
        try:
            query = self.db.query(EstablishmentHoliday).filter(
                EstablishmentHoliday.establishment_id == establishment_id
            )
            if start is not None:
                query = query.filter(EstablishmentHoliday.date >= start)
            if end is not None:
                query = query.filter(EstablishmentHoliday.date <= end)
            return cast(List[EstablishmentHoliday], query.order_by(EstablishmentHoliday.date).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing holidays: {str(e)}")
            raise RepositoryException(f"Failed to list holidays: {str(e)}")

    def upsert_holiday(
        self,
        establishment_id: str,
        day: date,
        *,
        is_open: bool,
        opening_time: Optional[str],
        closing_time: Optional[str],
        note: Optional[str],
    ) -> EstablishmentHoliday:
        """At most one override per (establishment, date): update in place when present."""
        holiday = self.get_holiday(establishment_id, day)
        try:
            if holiday is None:
                holiday = EstablishmentHoliday(establishment_id=establishment_id, date=day)
                self.db.add(holiday)
            holiday.is_open = is_open
            holiday.opening_time = opening_time
            holiday.closing_time = closing_time
            holiday.note = note
            self.db.flush()
            return holiday
        except SQLAlchemyError as e:
            self.logger.error(f"Error saving holiday: {str(e)}")
            raise RepositoryException(f"Failed to save holiday: {str(e)}")

    def delete_holiday(self, holiday: EstablishmentHoliday) -> None:
        try:
            self.db.delete(holiday)
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting holiday: {str(e)}")
            raise RepositoryException(f"Failed to delete holiday: {str(e)}")
