from shared.utils.app_status_code import AppStatusCode


class AppException(Exception):
    """Base for domain errors that map onto the JSON error envelope."""

    http_status: int = 400
    status_code: str = AppStatusCode.OPERATION_FAILED
    default_message: str = "Operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)
