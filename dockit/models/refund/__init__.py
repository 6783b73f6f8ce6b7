from dockit.models.refund.refund_audit_entry import RefundAuditEntry
from dockit.models.refund.refund_request import RefundRequest

__all__ = ["RefundAuditEntry", "RefundRequest"]
