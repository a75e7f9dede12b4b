# SPDX-License-Identifier: MIT

from typing import Optional


class EventlineError(Exception):
    pass


class ApiError(EventlineError):
    """A request reached the backend and was answered with an error status."""

    def __init__(self, status_code: Optional[int], message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class TransportError(ApiError):
    """The backend could not be reached (connection refused, timeout, ...)."""

    def __init__(self, message: str) -> None:
        super().__init__(None, message)


class PermissionDeniedError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class LinkError(EventlineError):
    """Create-and-link created the task but could not link it."""

    def __init__(self, message: str, orphan_task_id: str) -> None:
        super().__init__(message)
        self.orphan_task_id = orphan_task_id


def error_for_status(status_code: int, message: str) -> ApiError:
    if status_code in (401, 403):
        return PermissionDeniedError(status_code, message)
    if status_code == 404:
        return NotFoundError(status_code, message)
    return ApiError(status_code, message)
