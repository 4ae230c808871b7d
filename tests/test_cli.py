import pytest

from farm_directory import cli


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{(tmp_path / 'farms.db').as_posix()}"


def run(db_url, *args):
    return cli.main(["--db", db_url, *args])


def test_list_users_on_empty_database(db_url, capsys):
    assert run(db_url, "list-users") == 0
    assert "No users found." in capsys.readouterr().out


def test_seed_admin_then_list(db_url, capsys):
    assert run(db_url, "seed-admin", "--email", "admin@example.com", "--password", "admin123!", "--rounds", "4") == 0
    assert run(db_url, "seed-user", "--email", "testuser@example.com", "--password", "password123", "--rounds", "4") == 0
    capsys.readouterr()

    assert run(db_url, "list-users") == 0
    lines = capsys.readouterr().out.splitlines()

    assert lines[0].split() == ["id", "email", "name", "role", "status"]
    assert "admin@example.com" in lines[1] and "approved" in lines[1]
    assert "testuser@example.com" in lines[2] and "pending_approval" in lines[2]


def test_seed_is_idempotent(db_url, capsys):
    run(db_url, "seed-user", "--email", "testuser@example.com", "--password", "password123", "--rounds", "4")

    assert run(db_url, "seed-user", "--email", "testuser@example.com", "--password", "password123", "--rounds", "4") == 0
    assert "already exists" in capsys.readouterr().out


def test_seed_rejects_short_password(db_url, capsys):
    assert run(db_url, "seed-admin", "--email", "admin@example.com", "--password", "short", "--rounds", "4") == 1
    assert "8 characters" in capsys.readouterr().err


def test_users_frame_columns():
    frame = cli.users_frame([])
    assert list(frame.columns) == cli.USER_COLUMNS
    assert frame.empty
