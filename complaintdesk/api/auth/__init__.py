"""
Authentication Blueprint
"""

from complaintdesk.api.auth.routes import auth_bp

__all__ = ['auth_bp']
