"""Court data access."""

import logging
from typing import Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..database.session_utils import supports_row_locks
from ..models.court import Court
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CourtRepository(BaseRepository[Court]):
    def __init__(self, db: Session):
        super().__init__(db, Court)

    def get_with_establishment(self, court_id: str, for_update: bool = False) -> Optional[Court]:
        """
        Load a court and its establishment.

        With ``for_update`` the court row is locked (``SELECT ... FOR UPDATE``),
        serializing admissions on the same court for the rest of the transaction.
        """
        try:
            query = self.db.query(Court).filter(Court.id == court_id)
            if for_update and supports_row_locks(self.db):
                # Lock only the court row; the joined establishment stays unlocked
                query = query.with_for_update(of=Court)
            court = query.first()
            if court is not None:
                # Touch the relationship so callers never lazy-load mid-check
                _ = court.establishment
            return cast(Optional[Court], court)
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading court {court_id}: {str(e)}")
            raise RepositoryException(f"Failed to load court: {str(e)}")
