# farm_directory/models.py
from sqlalchemy import Column, Integer, String, Float, Text, ForeignKey
from sqlalchemy.orm import relationship, validates

from .db import Base
from .lifecycle import AccountStatus, FarmStatus, Role


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=True)
    role = Column(String, nullable=False, default=Role.USER.value)
    status = Column(String, nullable=False, default=AccountStatus.PENDING_APPROVAL.value)

    farms = relationship("Farm", back_populates="owner")

    @validates("role")
    def _role(self, _, v):
        return Role(v).value

    @validates("status")
    def _status(self, _, v):
        return AccountStatus(v).value


class Farm(Base):
    __tablename__ = "farms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String, nullable=True)

    # comma-separated tags, stored exactly as submitted
    products = Column(String, nullable=True)

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    status = Column(String, nullable=False, default=FarmStatus.DRAFT.value, index=True)
    admin_notes = Column(Text, nullable=True)

    owner = relationship("User", back_populates="farms")

    @validates("status")
    def _status(self, _, v):
        return FarmStatus(v).value

    @property
    def owner_name(self):
        return self.owner.name if self.owner is not None else None
