from seed_demo import DEMO_TASKS, DEMO_TEAMS, DEMO_USERS, seed_demo_tasks, seed_demo_teams, seed_demo_users
from teamboard.models import Membership, Task, Team, User


def seed(db):
    users = seed_demo_users(db)
    teams = seed_demo_teams(db, users)
    seed_demo_tasks(db, users, teams)


def test_seeding_twice_does_not_duplicate(db):
    seed(db)
    memberships = db.query(Membership).count()

    seed(db)

    assert db.query(User).count() == len(DEMO_USERS)
    assert db.query(Team).count() == len(DEMO_TEAMS)
    assert db.query(Task).count() == len(DEMO_TASKS)
    assert db.query(Membership).count() == memberships
