"""
User Model
"""
from datetime import datetime
import enum

from sqlalchemy import Boolean, Column, DateTime, Enum as SQLEnum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from mockupdesk.database import Base
from mockupdesk.models.brand import brand_users


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    CREATOR = "creator"
    REVIEWER = "reviewer"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.CREATOR, nullable=False)
    is_super_admin = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    agency = relationship("Agency", foreign_keys=[agency_id])
    agency_memberships = relationship("AgencyMembership", back_populates="user", cascade="all, delete-orphan")
    brands = relationship("Brand", secondary=brand_users, back_populates="users")
    posts = relationship("Post", back_populates="creator", foreign_keys="Post.created_by_id")
    comments = relationship("Comment", back_populates="author", cascade="all, delete-orphan")
