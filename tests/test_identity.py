from datetime import date

import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query

from conftest import PASSWORD
from teamboard.models import Membership, Task, Team, User
from teamboard.schemas.task import TaskCreate
from teamboard.schemas.user import PasswordChange, ProfileUpdate, UserRegister
from teamboard.services.identity import IdentityService
from teamboard.services.tasks import TaskService
from teamboard.services.teams import TeamService
from teamboard.utils.errors import AuthError, ConflictError, NotFoundError
from teamboard.utils.security import verify_password


def test_register_stores_only_the_hash(db, make_user):
    user = make_user()

    assert user.id is not None
    assert user.hashed_password != PASSWORD
    assert verify_password(PASSWORD, user.hashed_password)


def test_register_same_email_conflicts(db, make_user):
    make_user(email="alice@example.com")

    with pytest.raises(ConflictError) as exc:
        make_user(email="alice@example.com", first_name="Other")
    assert exc.value.message == "User with this email already exists"
    assert exc.value.status_code == 409


def test_register_email_differing_in_case_is_accepted_by_default(db, make_user):
    # Uniqueness is case-sensitive unless the policy flag is turned on
    make_user(email="alice@example.com")
    other = make_user(email="Alice@example.com", first_name="Alicia")

    assert other.email == "Alice@example.com"
    assert db.query(User).count() == 2


def test_register_email_differing_in_case_rejected_when_case_insensitive(db, make_user, test_settings):
    test_settings.EMAIL_UNIQUENESS_CASE_INSENSITIVE = True
    make_user(email="alice@example.com")

    with pytest.raises(ConflictError):
        make_user(email="Alice@example.com", first_name="Alicia")


@pytest.mark.parametrize("password", ["short1!", "alllowercase1!", "NoDigits!!", "NoSpecial123", "Bad#Char123"])
def test_register_rejects_weak_passwords(password):
    with pytest.raises(SchemaValidationError):
        UserRegister(email="bob@example.com", password=password, first_name="Bob", last_name="Brown")


def test_authenticate_hides_which_part_was_wrong(db, make_user):
    make_user()
    service = IdentityService(db)

    with pytest.raises(AuthError) as unknown:
        service.authenticate("nobody@example.com", PASSWORD)
    with pytest.raises(AuthError) as wrong:
        service.authenticate("alice@example.com", "Wrong@1234")

    assert unknown.value.message == wrong.value.message == "Invalid email or password"
    assert service.authenticate("alice@example.com", PASSWORD).email == "alice@example.com"


def test_update_profile_keeps_omitted_fields(db, make_user):
    user = make_user(bio="Frontend")

    updated = IdentityService(db).update_profile(user.id, ProfileUpdate(first_name="Alicia"))

    assert updated.first_name == "Alicia"
    assert updated.last_name == "Anders"
    assert updated.bio == "Frontend"


def test_update_profile_email_taken(db, make_user):
    make_user(email="bob@example.com", first_name="Bob")
    alice = make_user()

    with pytest.raises(ConflictError) as exc:
        IdentityService(db).update_profile(alice.id, ProfileUpdate(email="bob@example.com"))
    assert exc.value.message == "Email already in use by another user"


def test_change_password(db, make_user):
    user = make_user()
    service = IdentityService(db)

    with pytest.raises(AuthError):
        service.change_password(user.id, "Wrong@1234", "Changed@123")

    service.change_password(user.id, PASSWORD, "Changed@123")
    assert service.authenticate(user.email, "Changed@123").id == user.id


def test_password_confirmation_must_match():
    with pytest.raises(SchemaValidationError, match="Password confirmation does not match"):
        PasswordChange(current_password=PASSWORD, new_password="Changed@123", confirm_password="Changed@124")


def test_delete_account_requires_password(db, make_user):
    user = make_user()

    with pytest.raises(AuthError) as exc:
        IdentityService(db).delete_account(user.id, "Wrong@1234")
    assert exc.value.message == "Password is incorrect"
    assert db.query(User).count() == 1


def test_delete_account_cascades(db, make_user):
    alice = make_user()
    bob = make_user(email="bob@example.com", first_name="Bob")
    teams = TeamService(db)
    tasks = TaskService(db)

    own_team = teams.create_team("Alice Team", alice.id)
    bob_team = teams.create_team("Bob Team", bob.id)
    teams.add_member(bob_team.id, alice.email, caller_id=bob.id)
    tasks.create_task(TaskCreate(team_id=own_team.id, title="Own task"), alice.id)
    shared = tasks.create_task(
        TaskCreate(team_id=bob_team.id, title="Shared task", assigned_to=alice.id, due_date=date.today()),
        alice.id,
    )
    shared_id = shared.id
    alice_id = alice.id

    IdentityService(db).delete_account(alice_id, PASSWORD)
    db.expire_all()

    assert db.query(User).filter(User.id == alice_id).first() is None
    assert db.query(Team).filter(Team.id == own_team.id).first() is None
    assert db.query(Task).filter(Task.team_id == own_team.id).count() == 0
    assert db.query(Membership).filter(Membership.user_id == alice_id).count() == 0

    # Tasks in other teams survive, detached from the deleted user
    remaining = db.query(Task).filter(Task.id == shared_id).one()
    assert remaining.assigned_to is None
    assert remaining.created_by is None
    assert teams.get_team(bob_team.id).member_count == 1


def test_get_user_missing(db):
    with pytest.raises(NotFoundError):
        IdentityService(db).get_user(999)
    assert IdentityService(db).find_by_id(999) is None


def test_delete_account_failure_leaves_everything_in_place(db, make_user, monkeypatch):
    alice = make_user()
    bob = make_user(email="bob@example.com", first_name="Bob")
    teams = TeamService(db)
    own_team = teams.create_team("Alice Team", alice.id)
    bob_team = teams.create_team("Bob Team", bob.id)
    teams.add_member(bob_team.id, alice.email, caller_id=bob.id)
    shared = TaskService(db).create_task(
        TaskCreate(team_id=bob_team.id, title="Shared task", assigned_to=alice.id), bob.id
    )
    shared_id = shared.id
    alice_id = alice.id

    real_delete = Query.delete

    def failing_delete(self, *args, **kwargs):
        # Teams, memberships and task references are handled first; fail on the user row
        if self.column_descriptions[0]["entity"] is User:
            raise OperationalError("DELETE FROM users", {}, Exception("database is locked"))
        return real_delete(self, *args, **kwargs)

    monkeypatch.setattr(Query, "delete", failing_delete)
    with pytest.raises(OperationalError):
        IdentityService(db).delete_account(alice_id, PASSWORD)
    monkeypatch.setattr(Query, "delete", real_delete)
    db.expire_all()

    assert db.query(User).filter(User.id == alice_id).count() == 1
    assert db.query(Team).filter(Team.id == own_team.id).count() == 1
    assert db.query(Membership).filter(Membership.user_id == alice_id).count() == 2
    assert db.query(Task).filter(Task.id == shared_id).one().assigned_to == alice_id
