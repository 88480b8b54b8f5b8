"""
Script to make a user admin
Usage: python scripts/make_admin.py user@example.com

This is the only way an account becomes an administrator; registration
never grants the role.
"""

import sys
import os

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from complaintdesk import create_app
from extensions import db
from complaintdesk.models.user import User, UserRole


def make_admin(email, config_name=None):
    """Promote an existing account to administrator by email"""
    app = create_app(config_name)

    with app.app_context():
        user = User.query.filter_by(email=email.lower()).first()

        if not user:
            print(f"User with email '{email}' not found")
            print("\nAvailable users:")
            for u in User.query.order_by(User.email).all():
                print(f"   - {u.email} ({u.name})")
            return False

        if user.role == UserRole.ADMIN:
            print(f"User '{email}' is already an admin")
            return True

        user.role = UserRole.ADMIN
        db.session.commit()
        app.logger.info(f'User {user.id} promoted to admin from the command line')

        print(f"Successfully made '{email}' an admin")
        print(f"   Name: {user.name}")
        print(f"   Door number: {user.door_number or '-'}")
        return True


if __name__ == '__main__':
    if len(sys.argv) < 2:
        print("Usage: python scripts/make_admin.py <email>")
        print("Example: python scripts/make_admin.py admin@example.com")
        sys.exit(1)

    sys.exit(0 if make_admin(sys.argv[1]) else 1)
