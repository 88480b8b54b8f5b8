"""
Admin Blueprint
"""

from complaintdesk.api.admin.routes import admin_bp

__all__ = ['admin_bp']
