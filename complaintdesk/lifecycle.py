"""
Complaint lifecycle state machine.

Pure rules over a complaint record: which status transitions exist, who may
trigger them, and how a recorded payment closes a resolved complaint. Nothing
in here touches the database session; callers commit.

Transition rules are data:

    { from_status: { to_status: (actor, ...) } }

where the actor is ``admin`` for explicit status changes and ``system`` for
the resolved -> closed step that only a successful payment performs.
"""

import random
import time
from datetime import datetime
from decimal import Decimal

from complaintdesk.errors import InvalidTransition, ValidationError
from complaintdesk.models.complaint import ComplaintStatus, PaymentStatus

ADMIN = 'admin'
SYSTEM = 'system'

TRANSITIONS = {
    ComplaintStatus.PENDING: {
        ComplaintStatus.IN_PROGRESS: (ADMIN,),
        ComplaintStatus.RESOLVED: (ADMIN,),
        ComplaintStatus.REJECTED: (ADMIN,),
    },
    ComplaintStatus.IN_PROGRESS: {
        ComplaintStatus.RESOLVED: (ADMIN,),
        ComplaintStatus.REJECTED: (ADMIN,),
    },
    ComplaintStatus.RESOLVED: {
        ComplaintStatus.CLOSED: (SYSTEM,),
    },
    ComplaintStatus.REJECTED: {},
    ComplaintStatus.CLOSED: {},
}

TERMINAL_STATES = frozenset(
    status for status, targets in TRANSITIONS.items() if not targets
)

# Allowed payment_status values per status; None means no payment record yet
VALID_PAYMENT_STATES = {
    ComplaintStatus.PENDING: {None},
    ComplaintStatus.IN_PROGRESS: {None},
    ComplaintStatus.REJECTED: {None},
    ComplaintStatus.RESOLVED: {PaymentStatus.PENDING, PaymentStatus.FAILED},
    ComplaintStatus.CLOSED: {PaymentStatus.COMPLETED},
}

CONTENT_FIELDS = ('title', 'description', 'category', 'priority')


def is_terminal(status):
    return ComplaintStatus(status) in TERMINAL_STATES


def validate_transition(*, from_status, to_status, actor):
    """
    Raise InvalidTransition unless ``actor`` may move a complaint from
    ``from_status`` to ``to_status``.
    """
    from_status = ComplaintStatus(from_status)
    to_status = ComplaintStatus(to_status)

    if is_terminal(from_status):
        raise InvalidTransition(
            f"Complaint is '{from_status.value}' and can no longer change status"
        )

    targets = TRANSITIONS[from_status]
    if to_status not in targets:
        raise InvalidTransition(
            f"Transition from '{from_status.value}' to '{to_status.value}' is not defined"
        )

    if actor not in targets[to_status]:
        raise InvalidTransition(
            f"'{from_status.value}' -> '{to_status.value}' cannot be requested by {actor}"
        )


def check_consistency(complaint):
    """Raise InvalidTransition if status and payment_status disagree"""
    allowed = VALID_PAYMENT_STATES[ComplaintStatus(complaint.status)]
    payment_status = PaymentStatus(complaint.payment_status) if complaint.payment_status else None
    if payment_status not in allowed:
        raise InvalidTransition(
            f"Payment status '{payment_status.value if payment_status else None}' "
            f"is not valid for a '{complaint.status.value}' complaint"
        )


def apply_status_change(complaint, *, status=None, admin_comments=None,
                        payment_amount=None, assigned_to_id=None):
    """
    Apply an administrator's update to ``complaint``.

    Every check runs before any field is written. Re-sending the current
    status is accepted and leaves the status untouched. Returns True when
    the status actually changed.
    """
    current = ComplaintStatus(complaint.status)
    target = ComplaintStatus(status) if status is not None else None

    if target is not None and target != current:
        validate_transition(from_status=current, to_status=target, actor=ADMIN)

    if payment_amount is not None and target != ComplaintStatus.RESOLVED:
        raise ValidationError('payment_amount can only be sent together with status "resolved"')

    amount = None
    if target == ComplaintStatus.RESOLVED:
        if payment_amount is None or Decimal(payment_amount) <= 0:
            raise InvalidTransition(
                'A positive payment amount is required to resolve a complaint'
            )
        amount = Decimal(payment_amount)

    if admin_comments is not None:
        complaint.admin_comments = admin_comments
    if assigned_to_id is not None:
        complaint.assigned_to_id = assigned_to_id

    if target is None or target == current:
        if amount is not None and complaint.payment_amount != amount:
            complaint.payment_amount = amount
        return False

    complaint.status = target
    if amount is not None:
        complaint.payment_amount = amount
        complaint.payment_status = PaymentStatus.PENDING

    check_consistency(complaint)
    return True


def ensure_editable(complaint):
    if ComplaintStatus(complaint.status) != ComplaintStatus.PENDING:
        raise InvalidTransition(
            'Cannot edit complaint - it is no longer in pending status'
        )


def apply_edit(complaint, changes):
    """Copy content fields from ``changes`` onto a pending complaint"""
    ensure_editable(complaint)
    for field in CONTENT_FIELDS:
        value = changes.get(field)
        if value is not None:
            setattr(complaint, field, value)
    return complaint


def generate_transaction_id():
    """TXN + epoch milliseconds + three random digits"""
    return f'TXN{int(time.time() * 1000)}{random.randint(0, 999):03d}'


def card_last_four(card_number=None, last_four=None):
    """Keep only the final four digits of whatever card data was sent"""
    digits = ''.join(ch for ch in (card_number or last_four or '') if ch.isdigit())
    if len(digits) < 4:
        return '****'
    return digits[-4:]


def record_payment(complaint, payer, *, amount=None, currency, payment_method,
                   card_number=None, card_last_four_digits=None, cardholder_name=None,
                   door_number=None):
    """
    Close a resolved complaint with a locally recorded payment.

    ``payer`` must already be confirmed as the owner. The charged amount is
    always the one the administrator set; a client amount is only accepted
    when it matches.
    """
    if ComplaintStatus(complaint.status) != ComplaintStatus.RESOLVED:
        raise InvalidTransition('Payment can only be made for resolved complaints')

    validate_transition(
        from_status=complaint.status,
        to_status=ComplaintStatus.CLOSED,
        actor=SYSTEM,
    )

    due = complaint.payment_amount
    if due is None or Decimal(due) <= 0:
        raise InvalidTransition('No payment amount has been set for this complaint')

    if amount is not None and Decimal(amount) != Decimal(due):
        raise ValidationError(
            f'Payment amount {amount} does not match the amount due ({due})'
        )

    paid_at = datetime.utcnow()
    complaint.payment_details = {
        'transaction_id': generate_transaction_id(),
        'amount': float(due),
        'currency': currency,
        'payment_method': payment_method,
        'cardholder_name': cardholder_name or payer.name or 'Not provided',
        'card_last_four': card_last_four(card_number, card_last_four_digits),
        'door_number': door_number or payer.door_number or complaint.door_number,
        'payment_date': paid_at.isoformat(),
        'status': PaymentStatus.COMPLETED.value,
    }
    complaint.payment_status = PaymentStatus.COMPLETED
    complaint.payment_date = paid_at
    complaint.status = ComplaintStatus.CLOSED

    check_consistency(complaint)
    return complaint.payment_details
