class ReviewError(Exception):
    """Base error raised by the review ledger, carries an HTTP status code"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message}


class NotFoundError(ReviewError):
    """Job, user or review does not exist"""
    status_code = 404


class InvalidStateError(ReviewError):
    """Job is not in a reviewable state"""
    status_code = 400


class ForbiddenError(ReviewError):
    """Acting user may not perform the operation"""
    status_code = 403


class ConflictError(ReviewError):
    """Review already exists for the job/reviewer/recipient triple"""
    status_code = 409


class InvalidArgumentError(ReviewError):
    """Payload value out of range or unrecognized"""
    status_code = 400
