"""
User Model
"""

from extensions import db, bcrypt
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """User roles enum"""
    USER = 'user'
    ADMIN = 'admin'


class User(db.Model):
    """Resident or administrator account"""

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Residents only; NULL for administrators so uniqueness applies to residents
    door_number = db.Column(db.String(20), unique=True, nullable=True, index=True)

    role = db.Column(db.Enum(UserRole), default=UserRole.USER, nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_login = db.Column(db.DateTime)

    # Relationships
    complaints = db.relationship('Complaint', backref='owner', lazy='dynamic', passive_deletes=True,
                                 foreign_keys='Complaint.user_id')

    def __init__(self, name, email, password, **kwargs):
        """Initialize user with hashed password"""
        self.name = name
        self.email = email
        self.set_password(password)

        # Handle optional fields
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Verify password against hash"""
        return bcrypt.check_password_hash(self.password_hash, password)

    def update_last_login(self):
        """Update last login timestamp"""
        self.last_login = datetime.utcnow()
        db.session.commit()

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    def summary(self):
        """Short form embedded in complaint payloads"""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'door_number': self.door_number,
        }

    def to_dict(self):
        """Convert user to dictionary"""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'door_number': self.door_number,
            'role': self.role.value,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_login': self.last_login.isoformat() if self.last_login else None,
        }

    def __repr__(self):
        return f'<User {self.email}>'
