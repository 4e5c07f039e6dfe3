"""Expert profile repository - Database operations for expert_profiles"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ExpertProfile


class ExpertProfileRepository:
    """Repository for extracted expert profiles"""

    @staticmethod
    def get_by_user(db: Session, user_id: str) -> Optional[ExpertProfile]:
        return db.query(ExpertProfile).filter(ExpertProfile.user_id == user_id).first()

    @classmethod
    def upsert(cls, db: Session, user_id: str, **data) -> ExpertProfile:
        """One extracted profile per expert; reprocessing overwrites it"""
        expert = cls.get_by_user(db, user_id)
        if expert is None:
            expert = ExpertProfile(user_id=user_id)
            db.add(expert)

        for key, value in data.items():
            if hasattr(expert, key):
                setattr(expert, key, value)

        db.commit()
        db.refresh(expert)
        return expert

    @classmethod
    def set_status(
        cls, db: Session, user_id: str, status: str, error: Optional[str] = None
    ) -> ExpertProfile:
        return cls.upsert(db, user_id, processing_status=status, processing_error=error)
