"""
Service Errors

Domain exceptions raised by the persistence services. The HTTP layer maps
them to status codes in ``goaltracker.serving.api.errors``.
"""


class GoalTrackerError(Exception):
    """Base class for goal tracker errors"""


class PersistenceError(GoalTrackerError):
    """
    A read or write against the record store failed.

    The message names the operation, e.g. ``Error creating advisor: ...``.
    Nothing is retried; the caller surfaces the error and the user retries.
    """

    def __init__(self, verb: str, entity: str, detail: str):
        self.verb = verb
        self.entity = entity
        self.detail = detail
        super().__init__(f"Error {verb} {entity}: {detail}")


class NotFoundError(GoalTrackerError):
    """Requested record does not exist"""


class SessionNotFoundError(NotFoundError):
    pass


class AdvisorNotFoundError(NotFoundError):
    pass


class TemplateNotFoundError(NotFoundError):
    pass


class InvalidAccessTokenError(AdvisorNotFoundError):
    """Unknown advisor link; never-existed and deleted advisors look the same"""

    def __init__(self):
        super().__init__("Invalid or expired link")


class DuplicateError(GoalTrackerError):
    """A uniqueness rule would be violated"""


class DuplicateAdvisorError(DuplicateError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"An advisor named '{name}' already exists for this day")


class DuplicateTemplateError(DuplicateError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"A template named '{name}' already exists")


class InvalidValueError(GoalTrackerError):
    """Input passed type validation but breaks a business rule"""
