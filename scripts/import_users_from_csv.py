"""
Import employees from a CSV file into the database.

Expected columns: employee_id, first_name, last_name, email, role, department_code
(role and department_code may be blank).
"""

import csv
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.models import Department, User, UserRole
from src.utils.database import init_database, session_scope

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('employee_id', 'first_name', 'last_name', 'email')


class UserCSVImporter:
    """Import users from CSV file."""

    def validate_csv_row(self, row, row_num):
        """Validate required fields in CSV row."""
        errors = []

        for column in REQUIRED_COLUMNS:
            if not (row.get(column) or '').strip():
                errors.append(f"Row {row_num}: Missing {column}")

        role = (row.get('role') or '').strip()
        if role:
            try:
                UserRole.parse(role)
            except ValueError as e:
                errors.append(f"Row {row_num}: {e}")

        return errors

    def import_from_csv(self, csv_path):
        """Import users from CSV file. Returns (imported, skipped, errors)."""
        csv_path = Path(csv_path)

        if not csv_path.exists():
            logger.error(f"CSV file not found: {csv_path}")
            return 0, 0, [f"CSV file not found: {csv_path}"]

        init_database()
        logger.info(f"Reading: {csv_path}")

        imported = 0
        skipped = 0
        errors = []

        with session_scope() as session:
            departments = {d.code: d.id for d in session.query(Department).all()}

            with open(csv_path, 'r', newline='') as f:
                reader = csv.DictReader(f)

                for row_num, row in enumerate(reader, start=2):  # Row 1 is the header
                    validation_errors = self.validate_csv_row(row, row_num)
                    if validation_errors:
                        errors.extend(validation_errors)
                        skipped += 1
                        continue

                    email = row['email'].strip().lower()
                    employee_id = row['employee_id'].strip()

                    existing = session.query(User).filter(
                        (User.email == email) | (User.employee_id == employee_id)
                    ).first()
                    if existing:
                        logger.warning(f"Row {row_num}: User {email} already exists - SKIPPING")
                        skipped += 1
                        continue

                    department_code = (row.get('department_code') or '').strip().upper()
                    if department_code and department_code not in departments:
                        errors.append(f"Row {row_num}: Unknown department code {department_code}")
                        skipped += 1
                        continue

                    user = User(
                        employee_id=employee_id,
                        first_name=row['first_name'].strip(),
                        last_name=row['last_name'].strip(),
                        email=email,
                        role=UserRole.parse(row.get('role') or UserRole.EMPLOYEE.value),
                        department_id=departments.get(department_code),
                        is_active=True,
                    )
                    session.add(user)
                    session.flush()

                    logger.info(f"Row {row_num}: Created {email} (ID: {user.id})")
                    imported += 1

        logger.info(f"Imported: {imported}, skipped: {skipped}, errors: {len(errors)}")
        for error in errors:
            logger.info(f"  - {error}")

        return imported, skipped, errors


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Import users from CSV file")
    parser.add_argument("csv_file", help="Path to CSV file")

    args = parser.parse_args()

    UserCSVImporter().import_from_csv(args.csv_file)
