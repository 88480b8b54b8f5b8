"""
Models package initialization
Import all models here for easy access
"""

from complaintdesk.models.user import User, UserRole
from complaintdesk.models.complaint import (
    Complaint,
    ComplaintStatus,
    ComplaintPriority,
    PaymentStatus,
)

__all__ = [
    'User',
    'UserRole',
    'Complaint',
    'ComplaintStatus',
    'ComplaintPriority',
    'PaymentStatus',
]
