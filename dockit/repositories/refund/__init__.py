from dockit.repositories.refund.refund_repository import RefundRequestRepository

__all__ = ["RefundRequestRepository"]
