"""
Access control guard.

Every request resolves to a Principal (anonymous, user or admin) built from
the stored account, never from claims the client sends. ``authorize`` runs
the checks in a fixed order and raises the first failure:

    identity -> role -> ownership -> state
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from complaintdesk.errors import ComplaintDeskError, Forbidden, InvalidTransition, Unauthorized
from complaintdesk.models.complaint import ComplaintStatus
from complaintdesk.models.user import UserRole


class PrincipalKind(str, Enum):
    ANONYMOUS = 'anonymous'
    USER = 'user'
    ADMIN = 'admin'


class Action(str, Enum):
    REGISTER = 'register'
    LOGIN = 'login'
    CREATE_COMPLAINT = 'create_complaint'
    LIST_OWN_COMPLAINTS = 'list_own_complaints'
    LIST_ALL_COMPLAINTS = 'list_all_complaints'
    VIEW_COMPLAINT = 'view_complaint'
    EDIT_COMPLAINT = 'edit_complaint'
    DELETE_COMPLAINT = 'delete_complaint'
    SET_STATUS = 'set_status'
    PAY = 'pay'
    LIST_USERS = 'list_users'
    VIEW_USER = 'view_user'
    DELETE_USER = 'delete_user'
    RESET_PASSWORD = 'reset_password'
    UPDATE_ROLE = 'update_role'
    VIEW_STATS = 'view_stats'


@dataclass(frozen=True)
class Principal:
    """The actor behind a request"""
    kind: PrincipalKind
    user_id: Optional[int] = None

    @classmethod
    def anonymous(cls):
        return cls(PrincipalKind.ANONYMOUS)

    @classmethod
    def from_user(cls, user):
        if user is None:
            return cls.anonymous()
        kind = PrincipalKind.ADMIN if user.role == UserRole.ADMIN else PrincipalKind.USER
        return cls(kind, user.id)

    @property
    def is_authenticated(self):
        return self.kind != PrincipalKind.ANONYMOUS

    @property
    def is_admin(self):
        return self.kind == PrincipalKind.ADMIN


ROLE_PERMISSIONS = {
    PrincipalKind.ANONYMOUS: {
        Action.REGISTER,
        Action.LOGIN,
    },
    PrincipalKind.USER: {
        Action.LOGIN,
        Action.CREATE_COMPLAINT,
        Action.LIST_OWN_COMPLAINTS,
        Action.VIEW_COMPLAINT,
        Action.EDIT_COMPLAINT,
        Action.DELETE_COMPLAINT,
        Action.PAY,
    },
    PrincipalKind.ADMIN: {
        Action.LOGIN,
        Action.LIST_ALL_COMPLAINTS,
        Action.VIEW_COMPLAINT,
        Action.DELETE_COMPLAINT,
        Action.SET_STATUS,
        Action.LIST_USERS,
        Action.VIEW_USER,
        Action.DELETE_USER,
        Action.RESET_PASSWORD,
        Action.UPDATE_ROLE,
        Action.VIEW_STATS,
    },
}

PUBLIC_ACTIONS = ROLE_PERMISSIONS[PrincipalKind.ANONYMOUS]

# Complaint actions a user may only take on complaints they filed
OWNER_SCOPED = {
    Action.VIEW_COMPLAINT,
    Action.EDIT_COMPLAINT,
    Action.DELETE_COMPLAINT,
    Action.PAY,
}

# Status a complaint must be in for a user to perform the action
REQUIRED_STATUS = {
    Action.EDIT_COMPLAINT: ComplaintStatus.PENDING,
    Action.DELETE_COMPLAINT: ComplaintStatus.PENDING,
    Action.PAY: ComplaintStatus.RESOLVED,
}

# Admin actions that may not target another administrator
NON_ADMIN_TARGETS = {
    Action.VIEW_USER,
    Action.DELETE_USER,
}

STATE_MESSAGES = {
    Action.EDIT_COMPLAINT: 'Cannot edit complaint - it is no longer in pending status',
    Action.DELETE_COMPLAINT: 'Cannot delete complaint - it is no longer in pending status',
    Action.PAY: 'Payment can only be made for resolved complaints',
}


def authorize(principal, action, resource=None):
    """
    Raise Unauthorized, Forbidden or InvalidTransition if ``principal`` may
    not perform ``action`` on ``resource``. Returns None when allowed.
    """
    action = Action(action)

    if not principal.is_authenticated and action not in PUBLIC_ACTIONS:
        raise Unauthorized('Authentication required')

    if action not in ROLE_PERMISSIONS[principal.kind]:
        raise Forbidden(f'{principal.kind.value} may not {action.value.replace("_", " ")}')

    if resource is None:
        return None

    if principal.is_admin:
        if action in NON_ADMIN_TARGETS and getattr(resource, 'role', None) == UserRole.ADMIN:
            raise Forbidden('Administrator accounts cannot be managed here')
        return None

    if action in OWNER_SCOPED and not resource.is_owned_by(principal.user_id):
        raise Forbidden('Not authorized to access this complaint')

    required = REQUIRED_STATUS.get(action)
    if required is not None and ComplaintStatus(resource.status) != required:
        raise InvalidTransition(STATE_MESSAGES[action])

    return None


def allowed(principal, action, resource=None):
    """Boolean form of ``authorize``"""
    try:
        authorize(principal, action, resource)
    except ComplaintDeskError:
        return False
    return True
