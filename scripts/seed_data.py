"""
Seed demo members and a few payments for the current month.
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from payfam.db.base import SessionLocal
import payfam.models  # noqa: F401
from payfam.models.member import Member
from payfam.services.ledger import record_payment
from payfam.services.member import create_member
from decimal import Decimal
from datetime import date


DEMO_MEMBERS = [
    {"name": "Ahmed Khan", "father_name": "Imran Khan", "phone_number": "+923001234567", "monthly_fee": Decimal("1000")},
    {"name": "Bilal Hussain", "father_name": "Tariq Hussain", "phone_number": "+923011234567", "monthly_fee": Decimal("1500")},
    {"name": "Sara Malik", "father_name": "Naveed Malik", "phone_number": "+923021234567", "monthly_fee": Decimal("800")},
    {"name": "Usman Ali", "father_name": "Zahid Ali", "phone_number": "+923031234567", "monthly_fee": Decimal("1200"), "membership_type": "family"},
]


def seed_members(db):
    """Seed demo members."""
    print("Seeding members...")
    created = []
    for member_data in DEMO_MEMBERS:
        existing = db.query(Member).filter(Member.phone_number == member_data["phone_number"]).first()
        if existing:
            created.append(existing)
            continue
        created.append(create_member(db, **member_data))
    print(f"Members seeded ({len(created)})")
    return created


def seed_payments(db, members):
    """Pay the first member in full and the second in part for the current month."""
    print("Seeding payments...")
    today = date.today()
    if len(members) >= 2:
        record_payment(db, members[0].id, members[0].monthly_fee, today, reference="seed")
        record_payment(db, members[1].id, Decimal(members[1].monthly_fee) / 2, today, reference="seed")
    print("Payments seeded")


def main():
    db = SessionLocal()
    try:
        members = seed_members(db)
        seed_payments(db, members)
    finally:
        db.close()


if __name__ == "__main__":
    main()
