"""
Brand Model
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Table, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from mockupdesk.database import Base


brand_users = Table(
    "brand_user",
    Base.metadata,
    Column("brand_id", Integer, ForeignKey("brands.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    logo_path = Column(String(512), nullable=True)
    profile_name = Column(String(255), nullable=True)
    default_reviewers = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    agency = relationship("Agency", back_populates="brands")
    users = relationship("User", secondary=brand_users, back_populates="brands")
    posts = relationship("Post", back_populates="brand", cascade="all, delete-orphan")
    media = relationship("Media", back_populates="brand", cascade="all, delete-orphan")
    collections = relationship("Collection", back_populates="brand", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("agency_id", "slug", name="unique_agency_brand_slug"),
    )
