"""
Complaint Service
Applies complaint operations on behalf of a principal and persists them
"""

from flask import current_app
from sqlalchemy import extract, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from extensions import db
from complaintdesk import lifecycle
from complaintdesk.access import Action, authorize
from complaintdesk.errors import Conflict, NotFound, ValidationError
from complaintdesk.models.complaint import Complaint, ComplaintStatus
from complaintdesk.models.user import User, UserRole


def commit_or_conflict(message='Complaint was modified by another request, reload and retry'):
    """Commit the session, turning stale or duplicate writes into Conflict"""
    try:
        db.session.commit()
    except StaleDataError as e:
        db.session.rollback()
        raise Conflict(message) from e
    except IntegrityError as e:
        db.session.rollback()
        raise Conflict('Record conflicts with existing data') from e


class ComplaintService:
    """Service for complaint lifecycle operations"""

    @staticmethod
    def get_or_404(complaint_id):
        complaint = db.session.get(Complaint, complaint_id)
        if not complaint:
            raise NotFound('Complaint not found')
        return complaint

    @staticmethod
    def create_complaint(principal, data):
        """File a new pending complaint owned by ``principal``"""
        authorize(principal, Action.CREATE_COMPLAINT)

        owner = db.session.get(User, principal.user_id)
        if owner is None:
            raise NotFound('User not found')

        complaint = Complaint(
            user_id=owner.id,
            title=data.title,
            description=data.description,
            category=data.category,
            priority=data.priority,
            status=ComplaintStatus.PENDING,
            door_number=data.door_number or owner.door_number,
        )

        db.session.add(complaint)
        commit_or_conflict()

        current_app.logger.info(f'Complaint {complaint.id} filed by user {owner.id}')
        return complaint

    @staticmethod
    def list_own(principal):
        authorize(principal, Action.LIST_OWN_COMPLAINTS)
        return (Complaint.query
                .filter_by(user_id=principal.user_id)
                .order_by(Complaint.created_at.desc(), Complaint.id.desc())
                .all())

    @staticmethod
    def list_all(principal, status=None):
        authorize(principal, Action.LIST_ALL_COMPLAINTS)
        query = Complaint.query
        if status:
            try:
                query = query.filter(Complaint.status == ComplaintStatus(status))
            except ValueError:
                raise ValidationError(f"Unknown status '{status}'")
        return query.order_by(Complaint.created_at.desc(), Complaint.id.desc()).all()

    @staticmethod
    def get_complaint(principal, complaint_id):
        authorize(principal, Action.VIEW_COMPLAINT)
        complaint = ComplaintService.get_or_404(complaint_id)
        authorize(principal, Action.VIEW_COMPLAINT, complaint)
        return complaint

    @staticmethod
    def edit_complaint(principal, complaint_id, data):
        """Owner-only content edit while the complaint is still pending"""
        authorize(principal, Action.EDIT_COMPLAINT)
        complaint = ComplaintService.get_or_404(complaint_id)
        authorize(principal, Action.EDIT_COMPLAINT, complaint)

        lifecycle.apply_edit(complaint, data.model_dump(exclude_none=True))
        commit_or_conflict()
        return complaint

    @staticmethod
    def delete_complaint(principal, complaint_id):
        """Owner while pending, or an administrator at any status"""
        authorize(principal, Action.DELETE_COMPLAINT)
        complaint = ComplaintService.get_or_404(complaint_id)
        authorize(principal, Action.DELETE_COMPLAINT, complaint)

        db.session.delete(complaint)
        commit_or_conflict()

        current_app.logger.info(
            f'Complaint {complaint_id} deleted by {principal.kind.value} {principal.user_id}'
        )

    @staticmethod
    def set_status(principal, complaint_id, data):
        """Administrator status change, comments and assignment"""
        authorize(principal, Action.SET_STATUS)
        complaint = ComplaintService.get_or_404(complaint_id)
        authorize(principal, Action.SET_STATUS, complaint)

        if data.assigned_to is not None:
            assignee = db.session.get(User, data.assigned_to)
            if assignee is None or assignee.role != UserRole.ADMIN:
                raise ValidationError('Complaints can only be assigned to an administrator')

        previous = complaint.status
        changed = lifecycle.apply_status_change(
            complaint,
            status=data.status,
            admin_comments=data.admin_comments,
            payment_amount=data.payment_amount,
            assigned_to_id=data.assigned_to,
        )
        commit_or_conflict()

        if changed:
            current_app.logger.info(
                f'Complaint {complaint.id} moved {previous.value} -> {complaint.status.value} '
                f'by admin {principal.user_id}'
            )
        return complaint

    @staticmethod
    def pay(principal, complaint_id, data):
        """Record the owner's payment and close the complaint"""
        authorize(principal, Action.PAY)
        complaint = ComplaintService.get_or_404(complaint_id)
        authorize(principal, Action.PAY, complaint)

        payer = complaint.owner
        details = lifecycle.record_payment(
            complaint,
            payer,
            amount=data.amount,
            currency=data.currency or current_app.config['PAYMENT_DEFAULT_CURRENCY'],
            payment_method=data.payment_method or current_app.config['PAYMENT_DEFAULT_METHOD'],
            card_number=data.card_number,
            card_last_four_digits=data.card_last_four,
            cardholder_name=data.cardholder_name,
            door_number=data.door_number,
        )
        commit_or_conflict()

        current_app.logger.info(
            f"Payment {details['transaction_id']} recorded for complaint {complaint.id}"
        )
        return complaint

    @staticmethod
    def stats(principal):
        """Complaint totals per status and resident count"""
        authorize(principal, Action.VIEW_STATS)

        counts = dict(
            db.session.query(Complaint.status, func.count(Complaint.id))
            .group_by(Complaint.status)
            .all()
        )
        data = {
            'total_complaints': sum(counts.values()),
            'users': User.query.filter_by(role=UserRole.USER).count(),
        }
        for status in ComplaintStatus:
            data[status.value.replace('-', '_')] = counts.get(status, 0)
        return data

    @staticmethod
    def monthly_stats(principal):
        """Complaint counts grouped by month of creation (1-12)"""
        authorize(principal, Action.VIEW_STATS)

        month = extract('month', Complaint.created_at)
        rows = (db.session.query(month, func.count(Complaint.id))
                .group_by(month)
                .order_by(month)
                .all())
        return [{'month': int(m), 'total': total} for m, total in rows]
