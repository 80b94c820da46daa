"""AvailabilityAlert data access."""

from datetime import datetime
import logging
from typing import List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.availability_alert import AvailabilityAlert
from ..models.court import Court
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityAlertRepository(BaseRepository[AvailabilityAlert]):
    def __init__(self, db: Session):
        super().__init__(db, AvailabilityAlert)

    def find_for_window(
        self, user_id: str, court_id: str, start: datetime, end: datetime
    ) -> Optional[AvailabilityAlert]:
        return self.find_one_by(user_id=user_id, court_id=court_id, start_time=start, end_time=end)

    def get_due(self, now: datetime, limit: int = 50, court_id: Optional[str] = None) -> List[AvailabilityAlert]:
        """Active, never-notified alerts whose interval has not started yet, soonest first."""
        try:
            query = (
                self.db.query(AvailabilityAlert)
                .options(
                    joinedload(AvailabilityAlert.user),
                    joinedload(AvailabilityAlert.court).joinedload(Court.establishment),
                )
                .filter(
                    AvailabilityAlert.is_active.is_(True),
                    AvailabilityAlert.notified_at.is_(None),
                    AvailabilityAlert.start_time > now,
                )
            )
            if court_id:
                query = query.filter(AvailabilityAlert.court_id == court_id)
            return cast(
                List[AvailabilityAlert],
                query.order_by(AvailabilityAlert.start_time).limit(limit).all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading due alerts: {str(e)}")
            raise RepositoryException(f"Failed to load alerts: {str(e)}")
