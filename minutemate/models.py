import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import func

from .database import Base


def generate_uuid():
    return str(uuid.uuid4())


class UserProfile(Base):
    __tablename__ = "user_profiles"

    # Same id as the Supabase auth user (auth.users.id)
    id = Column(String(36), primary_key=True, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    user_type = Column(String(20), nullable=False, default="client")  # client, expert
    onboarding_completed = Column(Boolean, default=False, nullable=False)
    onboarding_step = Column(Integer, nullable=True)  # null for clients
    professional_headline = Column(String(100), nullable=True)
    bio = Column(String(300), nullable=True)
    profile_picture_url = Column(String(500), nullable=True)  # Public storage URL
    linkedin_pdf_url = Column(String(500), nullable=True)
    linkedin_pdf_uploaded = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ExpertProfile(Base):
    __tablename__ = "expert_profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), unique=True, index=True, nullable=False)

    # Basic info
    full_name = Column(String(255), nullable=True)
    current_job_title = Column(String(255), nullable=True)
    current_company = Column(String(255), nullable=True)
    primary_industry = Column(String(100), nullable=True)
    years_of_experience = Column(Integer, default=0, nullable=False)
    location_city = Column(String(100), nullable=True)
    location_country = Column(String(100), nullable=True)

    # Expertise categories used for matching
    primary_category = Column(String(50), nullable=True)
    secondary_categories = Column(JSON, default=list)
    specializations = Column(JSON, default=list)

    # Professional background
    previous_companies = Column(JSON, default=list)
    education = Column(JSON, default=list)
    certifications = Column(JSON, default=list)
    languages = Column(JSON, default=list)

    # LinkedIn content
    linkedin_summary = Column(Text, nullable=True)
    key_skills = Column(JSON, default=list)
    work_experience = Column(JSON, nullable=True)  # {"positions": [...]}

    # Matching metadata
    expertise_keywords = Column(JSON, default=list)
    target_client_types = Column(JSON, default=list)

    # Processing metadata
    pdf_processed = Column(Boolean, default=False, nullable=False)
    processing_status = Column(
        String(20), default="pending", nullable=False
    )  # pending, processing, completed, error
    processing_error = Column(Text, nullable=True)
    last_processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ExpertAvailability(Base):
    __tablename__ = "expert_availability"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), unique=True, index=True, nullable=False)
    session_duration = Column(Integer, default=30, nullable=False)  # minutes
    session_price = Column(Float, default=75.0, nullable=False)  # USD
    title = Column(String(100), nullable=True)
    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    booking_url = Column(String(500), nullable=True)  # Calendly scheduling link
    calendly_event_type_uri = Column(String(500), nullable=True)
    event_type_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class CalendlyIntegration(Base):
    __tablename__ = "calendly_integrations"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), unique=True, index=True, nullable=False)
    calendly_user_uri = Column(String(500), nullable=True)
    calendly_username = Column(String(255), nullable=True)  # Calendly slug
    calendly_email = Column(String(255), nullable=True)
    calendly_name = Column(String(255), nullable=True)
    access_token = Column(Text, nullable=True)  # Fernet encrypted
    refresh_token = Column(Text, nullable=True)  # Fernet encrypted
    token_expires_at = Column(DateTime, nullable=True)
    scheduling_url = Column(String(500), nullable=True)
    timezone = Column(String(100), nullable=True)
    integration_status = Column(
        String(20), default="active", nullable=False
    )  # active, disabled, error
    last_sync_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
