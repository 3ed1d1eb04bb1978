"""
Create a default admin user.
Usage: python scripts/create_admin.py
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from payfam.db.base import SessionLocal
import payfam.models  # noqa: F401
from payfam.models.user import User, UserRoleEnum
from payfam.services.auth import create_user


def create_admin(email: str = "admin@payfam.local", password: str = "admin123", full_name: str = "Admin User"):
    """Create an admin user."""
    db = SessionLocal()
    try:
        existing_user = db.query(User).filter(User.email == email.lower()).first()
        if existing_user:
            print(f"User with email {email} already exists!")
            return

        create_user(db, email=email, password=password, full_name=full_name, role=UserRoleEnum.ADMIN)
        print(f"✅ Admin user created successfully!")
        print(f"   Email: {email}")
        print(f"   Password: {password}")
        print(f"   Role: admin")
        print(f"\n⚠️  Please change the password after first login!")
    finally:
        db.close()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create a default admin user")
    parser.add_argument("--email", default="admin@payfam.local", help="Admin email")
    parser.add_argument("--password", default="admin123", help="Admin password")
    parser.add_argument("--full-name", default="Admin User", help="Full name")

    args = parser.parse_args()

    create_admin(email=args.email, password=args.password, full_name=args.full_name)
