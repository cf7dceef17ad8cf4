class BaseAppException(Exception):
    """
    All custom exceptions inherit from this.
    Middleware only needs: isinstance(e, BaseAppException)
    """
    type = 'error'
    code = 'unknown_error'
    http_status = 500
    error_code = None

    def __init__(self, message=None, detail=None, code=None):
        self.message = message or self.default_message()
        self.detail = detail
        if code:
            self.code = code
        super().__init__(self.message)

    def default_message(self):
        return self.code.replace('_', ' ').capitalize()

    def to_dict(self):
        result = {
            'type': self.type,
            'code': self.code,
            'message': self.message,
        }
        if self.error_code is not None:
            result['error_code'] = self.error_code
        if self.detail is not None:
            result['detail'] = self.detail
        return result


class ValidationError(BaseAppException):
    """Request input is malformed (missing field, bad hash length, negative id)."""
    type = 'validation_error'
    code = 'invalid_input'
    http_status = 400


class Unauthorized(BaseAppException):
    """Caller could not prove the principal the command requires."""
    type = 'unauthorized'
    code = 'unauthorized'
    http_status = 403
    error_code = 1


# ── Not found ────────────────────────────────────────────

class NotFound(BaseAppException):
    type = 'not_found'
    code = 'not_found'
    http_status = 404


class CarePlanNotFound(NotFound):
    code = 'care_plan_not_found'
    error_code = 2


class GoalNotFound(NotFound):
    code = 'goal_not_found'
    error_code = 3


class InterventionNotFound(NotFound):
    code = 'intervention_not_found'
    error_code = 4


class BarrierNotFound(NotFound):
    code = 'barrier_not_found'
    error_code = 5


class ReviewNotFound(NotFound):
    code = 'review_not_found'
    error_code = 6


# ── Invalid state transitions ────────────────────────────

class InvalidStateTransition(BaseAppException):
    """The record is already in a state that forbids the requested change."""
    type = 'invalid_state_transition'
    code = 'invalid_state_transition'
    http_status = 409


class GoalAlreadyAchieved(InvalidStateTransition):
    code = 'goal_already_achieved'
    error_code = 7


class GoalDiscontinued(InvalidStateTransition):
    code = 'goal_discontinued'
    error_code = 8


class BarrierAlreadyResolved(InvalidStateTransition):
    code = 'barrier_already_resolved'
    error_code = 9


class ReviewAlreadyConducted(InvalidStateTransition):
    code = 'review_already_conducted'
    error_code = 10
