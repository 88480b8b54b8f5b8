"""
User Service
Registration, authentication and administrator account management
"""

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from complaintdesk.access import Action, authorize
from complaintdesk.errors import CascadeDeleteFailed, Conflict, Forbidden, NotFound, Unauthorized, ValidationError
from complaintdesk.models.complaint import Complaint
from complaintdesk.models.user import User, UserRole
from complaintdesk.services.complaint_service import commit_or_conflict


class UserService:
    """Service for user accounts"""

    @staticmethod
    def validate_password(password):
        min_length = current_app.config['PASSWORD_MIN_LENGTH']
        if not password or len(password) < min_length:
            raise ValidationError(f'Password must be at least {min_length} characters')

    @staticmethod
    def get_or_404(user_id):
        user = db.session.get(User, user_id)
        if not user:
            raise NotFound('User not found')
        return user

    @staticmethod
    def register(principal, data):
        """
        Create a resident account.

        Self-registration always yields role ``user``; administrators are
        promoted explicitly by an operator.
        """
        authorize(principal, Action.REGISTER)
        UserService.validate_password(data.password)

        if not data.door_number:
            raise ValidationError('Door number is required for apartment residents')

        if User.query.filter_by(email=data.email).first():
            raise Conflict('User already exists with this email')

        if User.query.filter_by(door_number=data.door_number).first():
            raise Conflict('This apartment door number is already registered')

        user = User(
            name=data.name,
            email=data.email,
            password=data.password,
            door_number=data.door_number,
            role=UserRole.USER,
        )

        db.session.add(user)
        commit_or_conflict()

        current_app.logger.info(f'User {user.id} registered for door {user.door_number}')
        return user

    @staticmethod
    def authenticate(principal, data):
        authorize(principal, Action.LOGIN)

        user = User.query.filter_by(email=data.email).first()
        if not user or not user.check_password(data.password):
            raise Unauthorized('Invalid email or password')

        user.update_last_login()
        return user

    @staticmethod
    def list_users(principal):
        """All non-admin accounts, newest first"""
        authorize(principal, Action.LIST_USERS)
        return (User.query
                .filter(User.role != UserRole.ADMIN)
                .order_by(User.created_at.desc())
                .all())

    @staticmethod
    def get_user(principal, user_id):
        authorize(principal, Action.VIEW_USER)
        user = UserService.get_or_404(user_id)
        authorize(principal, Action.VIEW_USER, user)
        return user

    @staticmethod
    def update_role(principal, user_id, role):
        authorize(principal, Action.UPDATE_ROLE)
        user = UserService.get_or_404(user_id)
        authorize(principal, Action.UPDATE_ROLE, user)

        if user.id == principal.user_id and role != UserRole.ADMIN:
            raise Forbidden('Cannot remove your own admin privileges')

        if role == UserRole.USER and not user.door_number:
            raise ValidationError('A resident account needs a door number')

        if role == UserRole.USER:
            # Only administrators may hold complaint assignments
            Complaint.query.filter_by(assigned_to_id=user.id).update(
                {'assigned_to_id': None}, synchronize_session='fetch'
            )

        user.role = role
        commit_or_conflict()

        current_app.logger.info(f'User {user.id} role set to {role.value} by admin {principal.user_id}')
        return user

    @staticmethod
    def reset_password(principal, user_id, new_password):
        """Administrator password reset; the password itself is never logged"""
        authorize(principal, Action.RESET_PASSWORD)
        UserService.validate_password(new_password)
        user = UserService.get_or_404(user_id)
        authorize(principal, Action.RESET_PASSWORD, user)

        user.set_password(new_password)
        commit_or_conflict()

        current_app.logger.info(f'Password reset for user {user.id} by admin {principal.user_id}')
        return user

    @staticmethod
    def delete_user(principal, user_id):
        """
        Delete an account and every complaint it filed.

        Assignments held by the account are cleared first. All writes share
        one transaction: if any of them fails nothing is removed and
        CascadeDeleteFailed is raised. Returns the number of
        complaints removed.
        """
        authorize(principal, Action.DELETE_USER)
        user = UserService.get_or_404(user_id)
        authorize(principal, Action.DELETE_USER, user)

        try:
            Complaint.query.filter_by(assigned_to_id=user.id).update(
                {'assigned_to_id': None}, synchronize_session='fetch'
            )
            deleted = Complaint.query.filter_by(user_id=user.id).delete(synchronize_session='fetch')
            db.session.delete(user)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'Deleting user {user_id} and their complaints failed: {str(e)}')
            raise CascadeDeleteFailed(
                'User and complaint deletion did not complete; no records were removed'
            ) from e

        current_app.logger.info(f'Deleted {deleted} complaints associated with user {user_id}')
        return deleted
