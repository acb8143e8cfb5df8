"""Schemas for users"""
from pydantic import BaseModel


class UserSummary(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True
