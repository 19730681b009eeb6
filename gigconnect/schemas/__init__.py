"""
Schemas module - enums and request/response schemas.
"""

from gigconnect.schemas.schemas import (
    UserRole, JobStatus, PaymentStatus, VerificationStatus, ApplicationStatus,
    TransactionDirection, TransactionType, PayoutMethod, PayoutStatus, BlogStatus,
    BankDetails, ExternalPaymentDetails,
)

__all__ = [
    "UserRole", "JobStatus", "PaymentStatus", "VerificationStatus", "ApplicationStatus",
    "TransactionDirection", "TransactionType", "PayoutMethod", "PayoutStatus", "BlogStatus",
    "BankDetails", "ExternalPaymentDetails",
]
