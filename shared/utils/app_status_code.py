class AppStatusCode:
    DATA_RETRIEVED_SUCCESSFULLY = "200"
    OPERATION_SUCCESSFUL = "201"

    OPERATION_FAILED = "1000"
    OPERATION_ERROR = "1001"
    INVALID_INPUT = "1002"
    REQUIRED_VALIDATION_ERROR = "1003"
    DUPLICATE_ADD_ERROR = "1004"
    NOT_FOUND = "1005"

    AUTHENTICATION_TOKEN_INVALID = "2001"
    AUTHENTICATION_TOKEN_EXPIRED = "2002"
    AUTHENTICATION_USER_INVALID = "2003"

    # Settlement / payments
    PAYMENT_NOT_SETTLED = "3001"
    PAYMENT_RECORD_MISSING = "3002"
    PAYMENT_ALREADY_SETTLED = "3003"
    PAYMENT_AMOUNT_MISMATCH = "3004"
    PAYMENT_INTENT_UNSUPPORTED = "3005"
    PAYMENT_INITIALIZATION_FAILED = "3006"
    UPSTREAM_UNAVAILABLE = "3010"

    # Leasing
    UNIT_UNAVAILABLE = "4001"
    UNIT_NOT_FOUND = "4002"
    LEASE_NOT_FOUND = "4003"

    # Utilities
    VENDING_FAILED = "5001"
    METER_VERIFICATION_FAILED = "5002"
    METER_PROFILE_NOT_FOUND = "5003"
