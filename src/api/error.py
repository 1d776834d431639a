from fastapi import status
from libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


ERROR_STATUS_CODES = {
    "MISSING_TENANT_CONTEXT": status.HTTP_400_BAD_REQUEST,
    "INVALID_TENANT_ID": status.HTTP_400_BAD_REQUEST,
    "FORBIDDEN_TENANT_MISMATCH": status.HTTP_403_FORBIDDEN,
    "INSUFFICIENT_ROLE": status.HTTP_403_FORBIDDEN,
    "TENANT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PLAN_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "WEBHOOK_EVENT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_STATE_TRANSITION": status.HTTP_409_CONFLICT,
    "CONCURRENCY_CONFLICT": status.HTTP_409_CONFLICT,
    "IDEMPOTENCY_TOKEN_MISMATCH": status.HTTP_409_CONFLICT,
    "TENANT_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "PLAN_UNCHANGED": status.HTTP_409_CONFLICT,
    "WEBHOOK_ALREADY_PROCESSED": status.HTTP_409_CONFLICT,
    "PROVISIONING_STEP_FAILED": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "PROVISIONING_TIMEOUT": status.HTTP_504_GATEWAY_TIMEOUT,
}


def raise_for_error(error: Error):
    """Known codes become a ClientError with their status; anything else is a ServerError"""
    status_code = ERROR_STATUS_CODES.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)
