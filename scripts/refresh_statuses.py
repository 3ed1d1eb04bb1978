"""
Write derived statuses back to stored monthly dues (e.g. from a daily cron).
Usage: python scripts/refresh_statuses.py
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import logging

from payfam.db.base import SessionLocal
import payfam.models  # noqa: F401
from payfam.services.ledger import refresh_due_statuses


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    db = SessionLocal()
    try:
        updated = refresh_due_statuses(db)
        print(f"Refreshed monthly dues: {updated} updated")
    finally:
        db.close()
