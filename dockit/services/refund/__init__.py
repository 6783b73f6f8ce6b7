from dockit.services.refund.refund_policy import calculate_refund
from dockit.services.refund.refund_queue_service import RefundQueueService

__all__ = ["RefundQueueService", "calculate_refund"]
