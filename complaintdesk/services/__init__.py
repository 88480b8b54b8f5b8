"""
Services Package
Business logic over the complaint and user records
"""

from complaintdesk.services.complaint_service import ComplaintService
from complaintdesk.services.user_service import UserService

__all__ = [
    'ComplaintService',
    'UserService',
]
