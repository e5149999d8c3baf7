# File: cv_assistant/db/models.py
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from cv_assistant.db.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    external_id = Column(String, unique=True, index=True, nullable=True)  # "sub" claim
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    profile = relationship("Profile", back_populates="owner", uselist=False)


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), unique=True)

    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    work_email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    website = Column(String, nullable=True)
    linkedin = Column(String, nullable=True)

    school = Column(String, nullable=True)
    major = Column(String, nullable=True)
    study_period = Column(String, nullable=True)

    skills = Column(Text, nullable=True)
    languages = Column(Text, nullable=True)

    # Lists of {"name", "description", "summary"}
    projects = Column(JSON, default=list)
    # Lists of {"company_name", "role", "time_from", "time_to", "description", "summary"}
    experiences = Column(JSON, default=list)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="profile")
