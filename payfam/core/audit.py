import logging
from datetime import datetime

from payfam.core.config import LOGS_DIR

logger = logging.getLogger(__name__)


def write_audit_log(user_name: str, user_role: str, action: str, details: str = "") -> bool:
    """Append one line to this month's audit file (audit_YYYY_MM.log).

    Returns False when the file could not be written; the failure is logged
    and the request that triggered it is not failed.
    """
    now = datetime.now()
    line = f"{now:%Y-%m-%d %H:%M:%S} | {user_role} | {user_name} | {action} | {details}\n"
    log_file = LOGS_DIR / f"audit_{now:%Y_%m}.log"
    try:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(line)
    except OSError as e:
        logger.error(f"Audit entry not written to {log_file}: {e} | {line.strip()}")
        return False
    logger.debug(f"Audit: {line.strip()}")
    return True


def audit_actor(user) -> tuple:
    """Return the (name, role) pair written to the audit file for a user."""
    user_name = (user.full_name or "").strip() or user.email
    user_role = user.role.value if user.role else "member"
    return user_name, user_role


def record_audit(user, action: str, details: str = "") -> bool:
    """Audit an action performed by a logged-in user."""
    user_name, user_role = audit_actor(user)
    return write_audit_log(user_name, user_role, action, details)
