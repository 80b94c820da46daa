"""CourtBlock data access."""

from datetime import datetime
import logging
from typing import List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.court import Court
from ..models.court_block import CourtBlock
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CourtBlockRepository(BaseRepository[CourtBlock]):
    def __init__(self, db: Session):
        super().__init__(db, CourtBlock)

    def get_with_court(self, block_id: str) -> Optional[CourtBlock]:
        try:
            return cast(
                Optional[CourtBlock],
                self.db.query(CourtBlock)
                .options(joinedload(CourtBlock.court).joinedload(Court.establishment))
                .filter(CourtBlock.id == block_id)
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading block {block_id}: {str(e)}")
            raise RepositoryException(f"Failed to load block: {str(e)}")

    def list_for_court_between(self, court_id: str, start: datetime, end: datetime) -> List[CourtBlock]:
        try:
            return cast(
                List[CourtBlock],
                self.db.query(CourtBlock)
                .filter(
                    CourtBlock.court_id == court_id,
                    CourtBlock.start_time < end,
                    CourtBlock.end_time > start,
                )
                .order_by(CourtBlock.start_time)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing blocks: {str(e)}")
            raise RepositoryException(f"Failed to list blocks: {str(e)}")
