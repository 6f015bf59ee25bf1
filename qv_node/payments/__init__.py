from qv_node.payments.client import UnconfiguredPaymentClient, Web3PaymentClient, build_payment_client

__all__ = ["UnconfiguredPaymentClient", "Web3PaymentClient", "build_payment_client"]
