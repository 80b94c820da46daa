# backend/courtside/repositories/factory.py
"""
Repository Factory.

Centralizes repository creation so services receive consistently
initialized repositories and tests can swap implementations.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

if TYPE_CHECKING:
    from .audit_repository import AuditRepository
    from .availability_alert_repository import AvailabilityAlertRepository
    from .booking_repository import BookingRepository
    from .conflict_checker_repository import ConflictCheckerRepository
    from .court_block_repository import CourtBlockRepository
    from .court_repository import CourtRepository
    from .establishment_repository import EstablishmentRepository
    from .job_repository import JobRepository
    from .monthly_pass_repository import MonthlyPassRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        return BaseRepository(db, model)

    @staticmethod
    def create_conflict_checker_repository(db: Session) -> "ConflictCheckerRepository":
        """Create repository for conflict checking operations."""
        from .conflict_checker_repository import ConflictCheckerRepository

        return ConflictCheckerRepository(db)

    @staticmethod
    def create_court_repository(db: Session) -> "CourtRepository":
        from .court_repository import CourtRepository

        return CourtRepository(db)

    @staticmethod
    def create_establishment_repository(db: Session) -> "EstablishmentRepository":
        from .establishment_repository import EstablishmentRepository

        return EstablishmentRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_court_block_repository(db: Session) -> "CourtBlockRepository":
        from .court_block_repository import CourtBlockRepository

        return CourtBlockRepository(db)

    @staticmethod
    def create_monthly_pass_repository(db: Session) -> "MonthlyPassRepository":
        from .monthly_pass_repository import MonthlyPassRepository

        return MonthlyPassRepository(db)

    @staticmethod
    def create_availability_alert_repository(db: Session) -> "AvailabilityAlertRepository":
        from .availability_alert_repository import AvailabilityAlertRepository

        return AvailabilityAlertRepository(db)

    @staticmethod
    def create_audit_repository(db: Session) -> "AuditRepository":
        from .audit_repository import AuditRepository

        return AuditRepository(db)

    @staticmethod
    def create_job_repository(db: Session) -> "JobRepository":
        from .job_repository import JobRepository

        return JobRepository(db)
