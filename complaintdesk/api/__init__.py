"""
API Package
"""

# Import all blueprints for easy access
from complaintdesk.api.auth import auth_bp
from complaintdesk.api.complaints import complaints_bp
from complaintdesk.api.admin import admin_bp

__all__ = [
    'auth_bp',
    'complaints_bp',
    'admin_bp',
]
