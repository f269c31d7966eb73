from __future__ import annotations


class WorkflowError(Exception):
    """Raised by the workflow engines before any state is changed."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None, **extra):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_dict(self) -> dict:
        return {"message": self.message, **self.extra}


class Forbidden(WorkflowError):
    status_code = 403


class NotFound(WorkflowError):
    status_code = 404


class InvalidInput(WorkflowError):
    pass


class InvalidRole(WorkflowError):
    pass


class InvalidReason(WorkflowError):
    pass


class ProtectedRole(WorkflowError):
    pass


class IneligibleRole(WorkflowError):
    pass


class CooldownActive(WorkflowError):
    pass


class ActiveRequestExists(WorkflowError):
    pass


class InvalidStateTransition(WorkflowError):
    pass


class NotReady(InvalidStateTransition):
    pass
