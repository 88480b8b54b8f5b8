"""
Request schemas

Every request body is parsed into one of these models before it reaches the
services, so the lifecycle code only ever sees typed, validated values.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as SchemaValidationError, field_validator

from complaintdesk.errors import ValidationError, validation_error_from_schema
from complaintdesk.models.complaint import ComplaintPriority, ComplaintStatus
from complaintdesk.models.user import UserRole


class RequestModel(BaseModel):
    model_config = ConfigDict(extra='forbid')


class RegisterRequest(RequestModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=120)
    password: str
    door_number: Optional[str] = Field(default=None, max_length=20)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        if '@' not in v or v.startswith('@') or v.endswith('@'):
            raise ValueError('must be a valid email address')
        return v.lower()


class LoginRequest(RequestModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower()


class ComplaintCreate(RequestModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=50)
    priority: ComplaintPriority = ComplaintPriority.MEDIUM
    door_number: Optional[str] = Field(default=None, max_length=20)


class ComplaintEdit(RequestModel):
    """Content fields only; status and payment fields are rejected outright"""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    priority: Optional[ComplaintPriority] = None


class StatusUpdate(RequestModel):
    status: Optional[ComplaintStatus] = None
    admin_comments: Optional[str] = None
    payment_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    assigned_to: Optional[int] = None


class PaymentRequest(RequestModel):
    amount: Optional[Decimal] = Field(default=None, gt=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    payment_method: Optional[str] = Field(default=None, max_length=30)
    card_number: Optional[str] = Field(default=None, max_length=23)
    card_last_four: Optional[str] = Field(default=None, pattern=r'^\d{4}$')
    cardholder_name: Optional[str] = Field(default=None, max_length=100)
    door_number: Optional[str] = Field(default=None, max_length=20)

    @field_validator('currency')
    @classmethod
    def upper_currency(cls, v):
        return v.upper() if v else v


class PasswordReset(RequestModel):
    new_password: str


class RoleUpdate(RequestModel):
    role: UserRole


def parse(schema, payload):
    """Validate a JSON body against ``schema``"""
    if payload is not None and not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    try:
        return schema.model_validate(payload or {})
    except SchemaValidationError as e:
        raise validation_error_from_schema(e) from e
