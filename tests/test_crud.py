import pytest
from sqlalchemy.orm import sessionmaker

from farm_directory import crud, models, schemas
from farm_directory.db import init_db, make_engine
from farm_directory.errors import NotFoundError, ValidationError
from farm_directory.lifecycle import AccountStatus, FarmStatus, Role


def mk_payload(
    *,
    name: str = "Sunny Mead Farm",
    location: str = "Porvoo",
    products: str = "Eggs, Honey",
    description: str | None = None,
    latitude: float | None = 60.39,
    longitude: float | None = 25.66,
) -> schemas.FarmCreate:
    return schemas.FarmCreate(
        name=name,
        location=location,
        products=products,
        description=description,
        latitude=latitude,
        longitude=longitude,
    )


@pytest.fixture(scope="function")
def db_session():
    """Fresh in-memory SQLite session per test."""
    engine = make_engine("sqlite://")
    init_db(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def owner(db_session):
    return crud.create_user(db_session, email="owner@example.com", password_hash="x", name="Owner")


def test_create_user_defaults_to_pending_user(db_session):
    user = crud.create_user(db_session, email="a@example.com", password_hash="x", name="A")

    assert isinstance(user, models.User)
    assert user.id is not None
    assert user.role == "user"
    assert user.status == "pending_approval"


def test_create_user_rejects_duplicate_email_generically(db_session):
    crud.create_user(db_session, email="a@example.com", password_hash="x", name="A")

    with pytest.raises(ValidationError) as exc:
        crud.create_user(db_session, email="a@example.com", password_hash="y", name="B")

    assert "a@example.com" not in exc.value.message
    # session is still usable after the rollback
    assert crud.count_users(db_session) == 1


def test_seeded_admin_can_be_created_pre_approved(db_session):
    admin = crud.create_user(
        db_session,
        email="admin@example.com",
        password_hash="x",
        name="Admin",
        role=Role.ADMIN,
        status=AccountStatus.APPROVED,
    )
    assert (admin.role, admin.status) == ("admin", "approved")


def test_create_farm_is_always_pending(db_session, owner):
    farm = crud.create_farm(db_session, mk_payload(), owner_id=owner.id)

    assert farm.status == "pending_approval"
    assert farm.owner_id == owner.id
    assert farm.products == "Eggs, Honey"
    assert farm.latitude == 60.39


def test_list_farms_approved_only(db_session, owner):
    pending = crud.create_farm(db_session, mk_payload(name="Pending"), owner_id=owner.id)
    approved = crud.create_farm(db_session, mk_payload(name="Approved"), owner_id=owner.id)
    crud.set_farm_status(db_session, approved, FarmStatus.APPROVED)

    assert [f.name for f in crud.list_farms(db_session, approved_only=True)] == ["Approved"]
    assert {f.id for f in crud.list_farms(db_session, approved_only=False)} == {pending.id, approved.id}


def test_list_farms_with_owner_exposes_owner_name(db_session, owner):
    crud.create_farm(db_session, mk_payload(), owner_id=owner.id)

    farms = crud.list_farms_with_owner(db_session)

    assert farms[0].owner_name == "Owner"


def test_set_farm_status_keeps_notes_unless_given(db_session, owner):
    farm = crud.create_farm(db_session, mk_payload(), owner_id=owner.id)
    crud.set_farm_status(db_session, farm, FarmStatus.SUSPENDED, admin_notes="Missing address")
    crud.set_farm_status(db_session, farm, FarmStatus.APPROVED)

    assert farm.status == "approved"
    assert farm.admin_notes == "Missing address"


def test_get_farm_missing_raises_not_found(db_session):
    with pytest.raises(NotFoundError):
        crud.get_farm(db_session, 404)


def test_delete_farm_removes_row(db_session, owner):
    farm = crud.create_farm(db_session, mk_payload(), owner_id=owner.id)
    farm_id = farm.id
    crud.delete_farm(db_session, farm)

    with pytest.raises(NotFoundError):
        crud.get_farm(db_session, farm_id)


def test_status_columns_reject_unknown_values(db_session):
    with pytest.raises(ValueError):
        models.Farm(name="x", status="published")
