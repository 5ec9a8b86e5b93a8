"""
Bootstrap the first Admin user and print a bearer token for it.

Usage:
    python scripts/create_admin.py --email admin@example.com --employee-id EMP0001 \
        --first-name Ada --last-name Admin
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.models import User, UserRole
from src.services.auth import AuthService
from src.utils.database import get_session, init_database, session_scope

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


def create_admin(email, employee_id, first_name, last_name, token_hours=None):
    """Create the Admin user if missing (or promote an existing one) and return a token."""
    init_database()
    email = email.strip().lower()

    with session_scope() as session:
        user = session.query(User).filter(User.email == email).first()

        if user:
            if user.role != UserRole.ADMIN or not user.is_active:
                logger.info(f"Promoting existing user {email} to Admin")
                user.role = UserRole.ADMIN
                user.is_active = True
            else:
                logger.info(f"User {email} is already an active Admin")
        else:
            user = User(
                employee_id=employee_id,
                first_name=first_name,
                last_name=last_name,
                email=email,
                role=UserRole.ADMIN,
                is_active=True,
            )
            session.add(user)
            session.flush()
            logger.info(f"Created Admin {email} (ID: {user.id})")

        token = AuthService(get_session).generate_jwt_token(user, expiry_hours=token_hours)

    return user, token


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the first Admin user")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--employee-id", default="ADMIN001", help="Employee ID (default: ADMIN001)")
    parser.add_argument("--first-name", default="System", help="First name")
    parser.add_argument("--last-name", default="Administrator", help="Last name")
    parser.add_argument("--token-hours", type=int, default=None, help="Token lifetime in hours")

    args = parser.parse_args()

    _, token = create_admin(args.email, args.employee_id, args.first_name, args.last_name, args.token_hours)
    print(f"\nBearer token:\n{token}\n")
