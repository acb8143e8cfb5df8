"""Failure taxonomy shared by the approval workflow services.

Every error carries the HTTP status it maps to and a short message that is
safe to show to the caller. Public token endpoints raise ``NotFoundOrExpired``
with a fixed message so that a missing, expired or consumed token all look
the same from outside.
"""
from fastapi import status


class WorkflowError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PermissionDenied(WorkflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action."


class InvalidState(WorkflowError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "This approval request has already been processed."


class ValidationFailed(WorkflowError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "The given data was invalid."


class ResourceMismatch(WorkflowError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "One or more posts do not belong to this collection."


class NotFound(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class NotFoundOrExpired(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Invalid or expired link."


INVALID_REVIEW_LINK = "Invalid or expired review link."
INVALID_APPROVAL_LINK = "Invalid or expired approval link."
