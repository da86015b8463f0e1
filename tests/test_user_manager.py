import pytest

from conftest import PASSWORD, as_user, make_faculty, make_user
from core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from models import LoginAuditLogModel, UserModel
from utils.user_manager import UserManager, detect_browser

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
OPERA_UA = CHROME_UA + " OPR/106.0.0.0"
FIREFOX_UA = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
SAFARI_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_2) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.2 Safari/605.1.15"
)


@pytest.fixture
def users(db):
    return UserManager(db, bcrypt_rounds=4)


@pytest.mark.parametrize(
    "user_agent, expected",
    [
        (CHROME_UA, "chrome"),
        (OPERA_UA, "opera"),
        (FIREFOX_UA, "firefox"),
        (SAFARI_UA, "safari"),
        ("curl/8.0", "other"),
        (None, "other"),
    ],
)
def test_detect_browser(user_agent, expected):
    assert detect_browser(user_agent) == expected


def test_password_hash_round_trip(users):
    hashed = users.hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert users.verify_password("s3cret-pass", hashed)
    assert not users.verify_password("wrong", hashed)
    assert not users.verify_password("s3cret-pass", "not-a-bcrypt-hash")


def test_register_creates_guest(db, users):
    faculty = make_faculty(db)
    user = users.register("New.User@Uni.test", "password123", "New User", faculty.id)
    assert user.role == "guest"
    assert user.email == "new.user@uni.test"
    assert user.faculty_name == faculty.name


def test_register_rejects_duplicate_email_and_unknown_faculty(db, users):
    faculty = make_faculty(db)
    make_user(db, "student", faculty, email="taken@uni.test")
    with pytest.raises(ValidationError):
        users.register("taken@uni.test", "password123", "Someone", faculty.id)
    with pytest.raises(ValidationError):
        users.register("fresh@uni.test", "password123", "Someone", "no-such-faculty")
    assert db.query(UserModel).count() == 1


def test_authenticate_records_login(db, users):
    model = make_user(db, "student", make_faculty(db), email="alice@uni.test")

    user = users.authenticate("alice@uni.test", PASSWORD, FIREFOX_UA)
    users.authenticate("alice@uni.test", PASSWORD, CHROME_UA)

    db.refresh(model)
    assert user.id == model.id
    assert model.total_logins == 2
    assert model.browser == "chrome"
    assert model.last_login is not None
    assert db.query(LoginAuditLogModel).filter_by(user_id=model.id).count() == 2


def test_authenticate_failures(db, users):
    make_user(db, "student", email="alice@uni.test")
    make_user(db, "student", email="gone@uni.test", status="inactive")
    with pytest.raises(UnauthorizedError):
        users.authenticate("alice@uni.test", "wrong-password")
    with pytest.raises(UnauthorizedError):
        users.authenticate("nobody@uni.test", PASSWORD)
    with pytest.raises(UnauthorizedError):
        users.authenticate("gone@uni.test", PASSWORD)


def test_user_info_visibility(db, users):
    alice = make_user(db, "student")
    bob = make_user(db, "student")
    admin = make_user(db, "admin")

    assert users.get_user_info(alice.id, as_user(alice)).id == alice.id
    assert users.get_user_info(alice.id, as_user(admin)).id == alice.id
    with pytest.raises(ForbiddenError):
        users.get_user_info(alice.id, as_user(bob))
    with pytest.raises(NotFoundError):
        users.get_user_info("missing", as_user(admin))


def test_listings_and_statistics(db, users):
    faculty = make_faculty(db)
    busy = make_user(db, "student", faculty, name="Busy")
    idle = make_user(db, "guest", faculty, name="Idle")
    busy.total_logins = 9
    busy.browser = "chrome"
    idle.total_logins = 1
    idle.browser = "firefox"
    db.commit()

    assert [u.name for u in users.list_users_by_faculty(faculty.id, "student")] == ["Busy"]
    assert [u.name for u in users.list_users_by_faculty(faculty.id, "guest")] == ["Idle"]
    assert users.most_active_users()[0].name == "Busy"
    usage = {b.browser: b.count for b in users.browser_usage()}
    assert usage == {"chrome": 1, "firefox": 1}
    assert len(users.list_users()) == 2


def test_admin_user_edits(db, users):
    faculty = make_faculty(db)
    other = make_faculty(db, "Faculty of Arts")
    created = users.create_user(
        "coord@uni.test", "password123", "Coord", role="marketing_coordinator", faculty_id=faculty.id
    )

    users.change_role(created.id, "marketing_manager")
    users.change_faculty(created.id, other.id)
    users.change_status(created.id, "inactive")
    users.reset_password(created.id, "another-pass")

    model = db.get(UserModel, created.id)
    db.refresh(model)
    assert (model.role, model.faculty_id, model.status) == ("marketing_manager", other.id, "inactive")
    assert users.verify_password("another-pass", model.password_hash)

    updated = users.update_user(created.id, "student", faculty.id, "active")
    assert updated.role == "student"
    assert updated.faculty_name == faculty.name

    with pytest.raises(ValidationError):
        users.change_role("missing", "admin")
    with pytest.raises(ValidationError):
        users.change_faculty(created.id, "no-such-faculty")
