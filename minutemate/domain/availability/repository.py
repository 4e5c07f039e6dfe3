"""Expert availability repository - Database operations for expert_availability"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ExpertAvailability


class ExpertAvailabilityRepository:
    """Repository for expert availability database operations"""

    @staticmethod
    def get_by_user(db: Session, user_id: str) -> Optional[ExpertAvailability]:
        return db.query(ExpertAvailability).filter(ExpertAvailability.user_id == user_id).first()

    @staticmethod
    def create(db: Session, user_id: str, **data) -> ExpertAvailability:
        availability = ExpertAvailability(user_id=user_id, **data)
        db.add(availability)
        db.commit()
        db.refresh(availability)
        return availability

    @staticmethod
    def update(db: Session, availability: ExpertAvailability, **updates) -> ExpertAvailability:
        for key, value in updates.items():
            if hasattr(availability, key):
                setattr(availability, key, value)

        db.commit()
        db.refresh(availability)
        return availability

    @classmethod
    def upsert(cls, db: Session, user_id: str, **data) -> ExpertAvailability:
        """One availability row per expert"""
        availability = cls.get_by_user(db, user_id)
        if availability:
            return cls.update(db, availability, **data)
        return cls.create(db, user_id, **data)

    @staticmethod
    def deactivate(db: Session, user_id: str) -> int:
        count = (
            db.query(ExpertAvailability)
            .filter(ExpertAvailability.user_id == user_id)
            .update({ExpertAvailability.is_active: False}, synchronize_session=False)
        )
        db.commit()
        return count
