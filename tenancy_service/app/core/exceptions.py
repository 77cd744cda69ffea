"""Error taxonomy for payment settlement.

Every error here carries the HTTP status and app status code the API
answers with. ``VendingFailed`` and ``PaymentAlreadySettled`` are consumed
inside the reconciliation engine and normally never reach a client.
"""

from shared.core.exceptions import AppException
from shared.utils.app_status_code import AppStatusCode


class SettlementError(AppException):
    pass


class UpstreamUnavailable(SettlementError):
    """The gateway or vending provider could not be reached. Retryable."""

    http_status = 503
    status_code = AppStatusCode.UPSTREAM_UNAVAILABLE
    default_message = "Could not contact payment provider."

    def __init__(self, message: str | None = None, provider: str | None = None):
        self.provider = provider
        super().__init__(message)


class PaymentNotSettled(SettlementError):
    status_code = AppStatusCode.PAYMENT_NOT_SETTLED
    default_message = "Payment was not successful."


class PaymentRecordMissing(SettlementError):
    http_status = 404
    status_code = AppStatusCode.PAYMENT_RECORD_MISSING
    default_message = "Transaction record not found."


class PaymentAlreadySettled(SettlementError):
    http_status = 409
    status_code = AppStatusCode.PAYMENT_ALREADY_SETTLED
    default_message = "Payment has already been settled."


class AmountMismatch(SettlementError):
    http_status = 409
    status_code = AppStatusCode.PAYMENT_AMOUNT_MISMATCH
    default_message = "Settled amount does not match the recorded payment."


class UnsupportedPaymentIntent(SettlementError):
    http_status = 422
    status_code = AppStatusCode.PAYMENT_INTENT_UNSUPPORTED
    default_message = "Payment metadata does not describe a known action."


class PaymentInitializationFailed(SettlementError):
    http_status = 502
    status_code = AppStatusCode.PAYMENT_INITIALIZATION_FAILED
    default_message = "Payment initialization failed."


class UnitUnavailable(SettlementError):
    """The target unit was taken (or never available) when the lease was written."""

    http_status = 409
    status_code = AppStatusCode.UNIT_UNAVAILABLE
    default_message = "Unit was taken by another user. You have been charged; please contact support."


class UnitNotFound(SettlementError):
    http_status = 404
    status_code = AppStatusCode.UNIT_NOT_FOUND
    default_message = "Target unit not found."


class LeaseNotFound(SettlementError):
    status_code = AppStatusCode.LEASE_NOT_FOUND
    default_message = "Lease record missing."


class VendingFailed(SettlementError):
    http_status = 502
    status_code = AppStatusCode.VENDING_FAILED
    default_message = "Vending failed"

    def __init__(self, reason: str | None = None):
        self.reason = reason or self.default_message
        super().__init__(self.reason)


class MeterVerificationFailed(SettlementError):
    status_code = AppStatusCode.METER_VERIFICATION_FAILED
    default_message = "Could not verify meter number."


class TenantNotFound(SettlementError):
    http_status = 404
    status_code = AppStatusCode.NOT_FOUND
    default_message = "Tenant profile not found."


class MeterProfileNotFound(SettlementError):
    http_status = 404
    status_code = AppStatusCode.METER_PROFILE_NOT_FOUND
    default_message = "Meter profile not found."
