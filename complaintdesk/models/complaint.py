"""
Complaint Model
"""

from extensions import db
from datetime import datetime
from enum import Enum
import math


class ComplaintStatus(str, Enum):
    """Complaint lifecycle states"""
    PENDING = 'pending'
    IN_PROGRESS = 'in-progress'
    RESOLVED = 'resolved'
    REJECTED = 'rejected'
    CLOSED = 'closed'


class PaymentStatus(str, Enum):
    """Payment sub-record states"""
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'


class ComplaintPriority(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


class Complaint(db.Model):
    """Maintenance complaint filed by a resident"""

    __tablename__ = 'complaints'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    # Content, editable by the owner while pending
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(50), nullable=False)
    priority = db.Column(db.Enum(ComplaintPriority), default=ComplaintPriority.MEDIUM, nullable=False)
    door_number = db.Column(db.String(20))

    # Status
    status = db.Column(db.Enum(ComplaintStatus), default=ComplaintStatus.PENDING, nullable=False, index=True)
    admin_comments = db.Column(db.Text)
    assigned_to_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    # Payment Information
    payment_amount = db.Column(db.Numeric(10, 2))
    payment_status = db.Column(db.Enum(PaymentStatus), nullable=True)
    payment_date = db.Column(db.DateTime)
    payment_details = db.Column(db.JSON)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Stale writes fail instead of overwriting a concurrent change
    version = db.Column(db.Integer, nullable=False)

    assigned_to = db.relationship('User', foreign_keys=[assigned_to_id])

    __mapper_args__ = {'version_id_col': version}

    def __init__(self, **kwargs):
        """Initialize complaint"""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    @property
    def days_pending(self):
        """Whole days since the complaint was filed, rounded up"""
        if not self.created_at:
            return 0
        elapsed = datetime.utcnow() - self.created_at
        return math.ceil(abs(elapsed.total_seconds()) / 86400)

    def is_owned_by(self, user_id):
        return self.user_id == user_id

    def to_dict(self, include_owner=True):
        """Convert complaint to dictionary"""
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'priority': self.priority.value if self.priority else None,
            'door_number': self.door_number,
            'status': self.status.value,
            'admin_comments': self.admin_comments,
            'assigned_to': self.assigned_to_id,
            'payment_amount': float(self.payment_amount) if self.payment_amount is not None else None,
            'payment_status': self.payment_status.value if self.payment_status else None,
            'payment_date': self.payment_date.isoformat() if self.payment_date else None,
            'payment_details': self.payment_details,
            'days_pending': self.days_pending,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_owner and self.owner is not None:
            data['user'] = self.owner.summary()

        return data

    def __repr__(self):
        return f'<Complaint {self.id} - {self.status.value}>'
