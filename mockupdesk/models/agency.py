"""
Agency Model
"""
from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from mockupdesk.database import Base


class Agency(Base):
    __tablename__ = "agencies"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    storage_quota = Column(BigInteger, default=5 * 1024 ** 3, nullable=False)
    storage_used = Column(BigInteger, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    brands = relationship("Brand", back_populates="agency", cascade="all, delete-orphan")
    memberships = relationship("AgencyMembership", back_populates="agency", cascade="all, delete-orphan")


class AgencyMembership(Base):
    __tablename__ = "agency_user"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(50), default="creator", nullable=False)  # admin, manager, creator, reviewer
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    agency = relationship("Agency", back_populates="memberships")
    user = relationship("User", back_populates="agency_memberships")

    __table_args__ = (
        UniqueConstraint("agency_id", "user_id", name="unique_agency_member"),
    )
