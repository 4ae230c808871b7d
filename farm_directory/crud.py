from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from farm_directory import models
from farm_directory.errors import NotFoundError, ValidationError
from farm_directory.lifecycle import AccountStatus, FarmStatus, Role

# ---------- users ----------

def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.get(models.User, user_id)

def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email).one_or_none()

def count_users(db: Session) -> int:
    return db.query(models.User).count()

def list_users(db: Session) -> list[models.User]:
    return db.query(models.User).order_by(models.User.id).all()

def create_user(
    db: Session,
    *,
    email: str,
    password_hash: str,
    name: Optional[str],
    role: Role = Role.USER,
    status: AccountStatus = AccountStatus.PENDING_APPROVAL,
) -> models.User:
    obj = models.User(
        email=email,
        password_hash=password_hash,
        name=name,
        role=role,
        status=status,
    )
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # unique email is the only constraint that can fire; keep it vague
        raise ValidationError("Registration failed. Email may already be in use.") from None
    db.refresh(obj)
    return obj

def set_user_status(db: Session, obj: models.User, status: AccountStatus) -> models.User:
    obj.status = status
    db.commit()
    db.refresh(obj)
    return obj

# ---------- farms ----------

def get_farm(db: Session, farm_id: int) -> models.Farm:
    obj = db.get(models.Farm, farm_id)
    if obj is None:
        raise NotFoundError("Farm not found")
    return obj

def list_farms(db: Session, *, approved_only: bool) -> list[models.Farm]:
    q = db.query(models.Farm)
    if approved_only:
        q = q.filter(models.Farm.status == FarmStatus.APPROVED.value)
    return q.order_by(models.Farm.id).all()

def list_farms_with_owner(db: Session) -> list[models.Farm]:
    return (
        db.query(models.Farm)
        .options(joinedload(models.Farm.owner))
        .order_by(models.Farm.id)
        .all()
    )

def create_farm(db: Session, payload, owner_id: int) -> models.Farm:
    obj = models.Farm(
        name=payload.name,
        description=payload.description,
        location=payload.location,
        products=payload.products,
        latitude=payload.latitude,
        longitude=payload.longitude,
        owner_id=owner_id,
        # every new listing goes through moderation, admin-created ones too
        status=FarmStatus.PENDING_APPROVAL,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def set_farm_status(
    db: Session,
    obj: models.Farm,
    status: FarmStatus,
    *,
    admin_notes: Optional[str] = None,
) -> models.Farm:
    obj.status = status
    if admin_notes is not None:
        obj.admin_notes = admin_notes
    db.commit()
    db.refresh(obj)
    return obj

def delete_farm(db: Session, obj: models.Farm) -> None:
    db.delete(obj)
    db.commit()
