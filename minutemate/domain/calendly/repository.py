"""Calendly integration repository - Database operations for calendly_integrations"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import CalendlyIntegration


class CalendlyIntegrationRepository:
    """Repository for Calendly integration database operations"""

    @staticmethod
    def get_by_user(db: Session, user_id: str) -> Optional[CalendlyIntegration]:
        return db.query(CalendlyIntegration).filter(CalendlyIntegration.user_id == user_id).first()

    @staticmethod
    def get_active(db: Session, user_id: str) -> Optional[CalendlyIntegration]:
        return (
            db.query(CalendlyIntegration)
            .filter(
                CalendlyIntegration.user_id == user_id,
                CalendlyIntegration.integration_status == "active",
            )
            .first()
        )

    @staticmethod
    def update(db: Session, integration: CalendlyIntegration, **updates) -> CalendlyIntegration:
        for key, value in updates.items():
            if hasattr(integration, key):
                setattr(integration, key, value)

        db.commit()
        db.refresh(integration)
        return integration

    @classmethod
    def upsert(cls, db: Session, user_id: str, **data) -> CalendlyIntegration:
        """Reconnecting replaces the stored tokens on the existing row"""
        integration = cls.get_by_user(db, user_id)
        if integration:
            return cls.update(db, integration, **data)

        integration = CalendlyIntegration(user_id=user_id, **data)
        db.add(integration)
        db.commit()
        db.refresh(integration)
        return integration
