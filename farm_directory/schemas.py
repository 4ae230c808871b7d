# farm_directory/schemas.py
from pydantic import BaseModel, Field
from typing import Optional


# ---------- accounts ----------

class RegisterIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    # length policy is enforced by the auth service so it can answer with a 400
    password: str
    name: Optional[str] = None


class LoginIn(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: str
    status: str

    class Config:
        from_attributes = True


class RegisterOut(BaseModel):
    message: str
    # the frontend reads userId
    user_id: int = Field(..., serialization_alias="userId")


class LoginOut(BaseModel):
    message: str
    user: UserOut


class StatusUpdate(BaseModel):
    status: str


# ---------- farms ----------

class FarmCreate(BaseModel):
    name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    products: str = Field(..., min_length=1)
    description: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class FarmOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    products: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    owner_id: Optional[int] = None
    status: str

    class Config:
        from_attributes = True


class FarmListItem(FarmOut):
    # only present when the caller supplied an origin; null means no coordinates
    distance_km: Optional[float] = None


class AdminFarmOut(FarmOut):
    admin_notes: Optional[str] = None
    owner_name: Optional[str] = None


class FarmCreated(BaseModel):
    id: int
    message: str


class FarmStatusUpdate(StatusUpdate):
    admin_notes: Optional[str] = None


class Message(BaseModel):
    message: str
