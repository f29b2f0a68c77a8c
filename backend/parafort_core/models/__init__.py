from parafort_core.models.announcement import Announcement
from parafort_core.models.audit_log import AuditLog
from parafort_core.models.business_entity import BusinessEntity, ComplianceItem, Document
from parafort_core.models.email_verification import EmailVerification
from parafort_core.models.formation_order import FormationOrder, OrderStatus, PaymentStatus
from parafort_core.models.idempotency_receipt import IdempotencyReceipt
from parafort_core.models.service import Service
from parafort_core.models.user import User

__all__ = [
    "Announcement",
    "AuditLog",
    "BusinessEntity",
    "ComplianceItem",
    "Document",
    "EmailVerification",
    "FormationOrder",
    "IdempotencyReceipt",
    "OrderStatus",
    "PaymentStatus",
    "Service",
    "User",
]
