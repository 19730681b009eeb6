"""
Pydantic Schemas - Enums, service inputs and relay request/response bodies.

All schemas in one file for simplicity. Stored entities are plain dicts;
enum members are persisted by value.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, Dict, Any
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    job_seeker = "JobSeeker"
    employer = "Employer"
    admin = "Admin"


class JobStatus(str, Enum):
    pending_approval = "Pending Approval"
    open = "Open"
    in_progress = "In Progress"
    completed = "Completed"
    rejected = "Rejected"


class PaymentStatus(str, Enum):
    unpaid = "Unpaid"
    paid = "Paid"


class VerificationStatus(str, Enum):
    pending = "Pending"
    verified = "Verified"
    rejected = "Rejected"


class ApplicationStatus(str, Enum):
    submitted = "Submitted"
    accepted = "Accepted"
    rejected = "Rejected"


class TransactionDirection(str, Enum):
    credit = "in"
    debit = "out"


class TransactionType(str, Enum):
    earning = "earning"
    payment = "payment"
    payout = "payout"
    refund = "refund"
    hold = "hold"
    bonus = "bonus"


class PayoutMethod(str, Enum):
    bank_transfer = "Bank Transfer"
    manual_transfer = "Manual Transfer"


class PayoutStatus(str, Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"
    paid = "Paid"


class BlogStatus(str, Enum):
    draft = "Draft"
    published = "Published"


# ============================================================
# SERVICE INPUTS
# ============================================================

class BankDetails(BaseModel):
    account_name: str
    account_number: str
    bank_name: str
    routing_number: Optional[str] = None
    swift_code: Optional[str] = None
    country: Optional[str] = None


class ExternalPaymentDetails(BaseModel):
    method: str = Field(..., min_length=1)
    reference: Optional[str] = None
    note: Optional[str] = None

    def summary(self) -> str:
        parts = [f"Method: {self.method}"]
        if self.reference:
            parts.append(f"Ref: {self.reference}")
        if self.note:
            parts.append(f"Note: {self.note}")
        return " | ".join(parts)


class NotificationLink(BaseModel):
    view: str
    params: Dict[str, Any] = {}


# ============================================================
# PAYSTACK RELAY SCHEMAS
# ============================================================

class InitializePaymentRequest(BaseModel):
    # Optional so missing values get the relay's own 400 message
    amount: Optional[float] = None
    email: Optional[EmailStr] = None
    metadata: Optional[Dict[str, Any]] = None

class InitializePaymentResponse(BaseModel):
    authorization_url: Optional[str] = None
    reference: Optional[str] = None

class VerifyPaymentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Optional[str] = None
    reference: Optional[str] = None
    amount: float = 0
    paid_at: Optional[str] = Field(None, alias="paidAt")

class ConfirmPaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reference: Optional[str] = None
    job_id: Optional[str] = Field(None, alias="jobId")

class ConfirmPaymentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    job_id: str = Field(..., alias="jobId")
    amount: float
    fee: Optional[float] = None
    net: Optional[float] = None
    paid_at: Optional[str] = Field(None, alias="paidAt")


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class StatusResponse(BaseModel):
    status: str
