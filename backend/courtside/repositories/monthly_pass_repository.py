"""MonthlyPass data access."""

import logging
from typing import Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..database.session_utils import supports_row_locks
from ..models.court import Court
from ..models.monthly_pass import MonthlyPass, MonthlyPassStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class MonthlyPassRepository(BaseRepository[MonthlyPass]):
    def __init__(self, db: Session):
        super().__init__(db, MonthlyPass)

    def get_with_court(self, pass_id: str, for_update: bool = False) -> Optional[MonthlyPass]:
        try:
            query = (
                self.db.query(MonthlyPass)
                .options(
                    joinedload(MonthlyPass.court).joinedload(Court.establishment),
                    joinedload(MonthlyPass.customer),
                )
                .filter(MonthlyPass.id == pass_id)
            )
            if for_update and supports_row_locks(self.db):
                query = query.with_for_update(of=MonthlyPass)
            return cast(Optional[MonthlyPass], query.first())
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading monthly pass {pass_id}: {str(e)}")
            raise RepositoryException(f"Failed to load monthly pass: {str(e)}")

    def get_for_customer_month(
        self, court_id: str, customer_id: str, month: str
    ) -> Optional[MonthlyPass]:
        return self.find_one_by(court_id=court_id, customer_id=customer_id, month=month)

    def find_renewal_candidate(
        self,
        court_id: str,
        customer_id: str,
        month: str,
        weekday: int,
        start_time: str,
        end_time: str,
    ) -> Optional[MonthlyPass]:
        """An ACTIVE pass on exactly the same weekday and HH:MM range."""
        return self.find_one_by(
            court_id=court_id,
            customer_id=customer_id,
            month=month,
            status=MonthlyPassStatus.ACTIVE.value,
            weekday=weekday,
            start_time=start_time,
            end_time=end_time,
        )

    def customer_has_active_pass(self, court_id: str, customer_id: str, month: str) -> bool:
        try:
            return (
                self.db.query(MonthlyPass.id)
                .filter(
                    MonthlyPass.court_id == court_id,
                    MonthlyPass.customer_id == customer_id,
                    MonthlyPass.month == month,
                    MonthlyPass.status == MonthlyPassStatus.ACTIVE.value,
                )
                .first()
                is not None
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking active pass: {str(e)}")
            raise RepositoryException(f"Failed to check active pass: {str(e)}")
