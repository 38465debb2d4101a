"""Domain errors raised by the lifecycle services.

Routes do not catch these; ``main.py`` maps them to HTTP responses by
``status_code``.
"""


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    status_code = 404


class Forbidden(DomainError):
    status_code = 403


class InvalidTransition(DomainError):
    status_code = 409

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(f"Cannot move {entity} from '{current}' to '{target}'")
        self.entity = entity
        self.current = current
        self.target = target


class DuplicateRequest(DomainError):
    status_code = 409


class ValidationFailed(DomainError):
    status_code = 422


class ProvisioningFailed(DomainError):
    """Meeting provider could not create a meeting; the session stays pending."""
    status_code = 502
