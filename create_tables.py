# create_tables.py
import sys

from teamboard.database import Base, engine
# Importing the models registers their tables on Base.metadata
from teamboard.models import User, Team, Membership, Task  # noqa: F401


def create_tables(drop_existing: bool = False):
    """Create all tables, optionally dropping the existing ones first"""
    try:
        if drop_existing:
            # drop_all orders the drops by foreign key dependencies
            Base.metadata.drop_all(bind=engine)
            print("🗑️  Existing tables dropped")

        Base.metadata.create_all(bind=engine)
        print("✅ All tables created successfully!")
        print(f"   Tables: {', '.join(sorted(Base.metadata.tables))}")
    except Exception as e:
        print(f"❌ Error creating tables: {e}")
        raise


if __name__ == "__main__":
    create_tables(drop_existing="--drop" in sys.argv)
