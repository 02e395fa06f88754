"""
Demo Database Seeding Script
Creates the tables and populates them with demo users, teams and tasks
"""

from datetime import date, timedelta

from create_tables import create_tables
from teamboard.database import SessionLocal
from teamboard.models import MemberRole, TaskStatus, Team, User
from teamboard.schemas.task import TaskCreate
from teamboard.schemas.user import UserRegister
from teamboard.services.identity import IdentityService
from teamboard.services.tasks import TaskService
from teamboard.services.teams import TeamService
from teamboard.utils.errors import ConflictError

DEMO_PASSWORD = "Demo@1234"

# Demo Users Data
DEMO_USERS = [
    {"email": "priya.sharma@example.com", "first_name": "Priya", "last_name": "Sharma", "bio": "Frontend team lead"},
    {"email": "arjun.singh@example.com", "first_name": "Arjun", "last_name": "Singh", "bio": "Backend team lead"},
    {"email": "deepika.patel@example.com", "first_name": "Deepika", "last_name": "Patel", "bio": "Frontend developer"},
    {"email": "vikram.reddy@example.com", "first_name": "Vikram", "last_name": "Reddy", "bio": "Backend developer"},
    {"email": "kavya.nair@example.com", "first_name": "Kavya", "last_name": "Nair", "bio": "QA analyst"},
]

# Demo Teams Data
# Structure: team name, creator email, {member email: role}
DEMO_TEAMS = [
    {
        "name": "Frontend Development Team",
        "creator": "priya.sharma@example.com",
        "members": {
            "deepika.patel@example.com": MemberRole.MEMBER,
            "kavya.nair@example.com": MemberRole.VIEWER,
        },
    },
    {
        "name": "Backend Development Team",
        "creator": "arjun.singh@example.com",
        "members": {
            "vikram.reddy@example.com": MemberRole.MEMBER,
            "priya.sharma@example.com": MemberRole.ADMIN,
        },
    },
]

# Demo Tasks Data
# Structure: team name, creator email, title, description, assignee email, status, due in days
DEMO_TASKS = [
    ("Frontend Development Team", "priya.sharma@example.com", "Build login page",
     "Email and password form wired to /auth/login", "deepika.patel@example.com", TaskStatus.IN_PROGRESS, 3),
    ("Frontend Development Team", "deepika.patel@example.com", "Team roster view",
     "Show members ordered by role", None, TaskStatus.PENDING, 7),
    ("Frontend Development Team", "priya.sharma@example.com", "Set up CI lint job",
     None, "priya.sharma@example.com", TaskStatus.COMPLETED, -2),
    ("Backend Development Team", "arjun.singh@example.com", "Task search endpoint",
     "Case-insensitive search over title and description", "vikram.reddy@example.com", TaskStatus.PENDING, -1),
    ("Backend Development Team", "vikram.reddy@example.com", "Database backups",
     "Nightly PostgreSQL dump", None, TaskStatus.PENDING, None),
]


def seed_demo_users(db):
    print(f"\n{'='*60}")
    print("🚀 Creating Demo Users")
    print(f"{'='*60}")

    identity = IdentityService(db)
    users = {}
    for user_data in DEMO_USERS:
        try:
            user = identity.register(UserRegister(password=DEMO_PASSWORD, **user_data))
            print(f"[SUCCESS] Created user: {user.first_name} {user.last_name} ({user.email})")
        except ConflictError:
            user = db.query(User).filter(User.email == user_data["email"]).first()
            print(f"[SKIP] User {user_data['email']} already exists, skipping...")
        users[user.email] = user
    return users


def seed_demo_teams(db, users):
    print(f"\n{'='*60}")
    print("🚀 Creating Demo Teams")
    print(f"{'='*60}")

    service = TeamService(db)
    teams = {}
    for team_data in DEMO_TEAMS:
        creator = users[team_data["creator"]]

        existing_team = db.query(Team).filter(
            Team.name == team_data["name"],
            Team.created_by == creator.id
        ).first()
        if existing_team:
            print(f"[SKIP] Team {team_data['name']} already exists, skipping...")
            continue

        team = service.create_team(team_data["name"], creator.id)
        for email, role in team_data["members"].items():
            service.add_member(team.id, email, role, caller_id=creator.id)
        teams[team.name] = team.id
        print(f"[SUCCESS] Created team: {team.name} with {len(team_data['members']) + 1} members")
    return teams


def seed_demo_tasks(db, users, teams):
    print(f"\n{'='*60}")
    print("🚀 Creating Demo Tasks")
    print(f"{'='*60}")

    service = TaskService(db)
    for team_name, creator_email, title, description, assignee_email, status, due_in in DEMO_TASKS:
        # Tasks are only seeded into teams created by this run
        if team_name not in teams:
            print(f"[SKIP] Task {title} belongs to an existing team, skipping...")
            continue
        task = service.create_task(
            TaskCreate(
                team_id=teams[team_name],
                title=title,
                description=description,
                assigned_to=users[assignee_email].id if assignee_email else None,
                status=status,
                due_date=date.today() + timedelta(days=due_in) if due_in is not None else None,
            ),
            users[creator_email].id,
        )
        print(f"[SUCCESS] Created task: {task.title} ({task.status.value})")


def main():
    create_tables()

    db = SessionLocal()
    try:
        users = seed_demo_users(db)
        teams = seed_demo_teams(db, users)
        seed_demo_tasks(db, users, teams)
    finally:
        db.close()

    print(f"\n{'='*60}")
    print("🎉 Demo data seeded!")
    print(f"   Log in with any demo email and password {DEMO_PASSWORD}")
    print(f"{'='*60}")


if __name__ == "__main__":
    main()
