"""User profile repository - Database operations for user_profiles"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import UserProfile


class UserProfileRepository:
    """Repository for user profile database operations"""

    @staticmethod
    def get_by_id(db: Session, user_id: str) -> Optional[UserProfile]:
        return db.query(UserProfile).filter(UserProfile.id == user_id).first()

    @staticmethod
    def create(db: Session, user_id: str, **profile_data) -> UserProfile:
        profile = UserProfile(id=user_id, **profile_data)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def update(db: Session, profile: UserProfile, **updates) -> UserProfile:
        """Update a profile; None values are written, unknown keys are ignored"""
        for key, value in updates.items():
            if hasattr(profile, key):
                setattr(profile, key, value)

        db.commit()
        db.refresh(profile)
        return profile
