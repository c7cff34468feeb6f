"""
Error taxonomy for the marketplace core.

Every failure raised by the core is one of these. Handlers translate them to
HTTP responses with ``status_code`` and ``to_dict()``; the core itself never
retries or swallows them.
"""
from typing import Any, Dict, Optional


class MarketplaceError(Exception):
    """Base class for all errors surfaced by the marketplace core."""
    status_code = 500
    code = 'InternalError'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {'error': self.code, 'message': self.message}


class NotFound(MarketplaceError):
    """An entity (worker, user, job) could not be resolved."""
    status_code = 404
    code = 'NotFound'

    def __init__(self, entity: str, entity_id: Optional[str], message: Optional[str] = None):
        super().__init__(message or f"{entity.capitalize()} with id {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body.update({'entity': self.entity, 'id': self.entity_id})
        return body


class JobNotFoundOrUnauthorized(NotFound):
    """
    No job matched the (job, user) pair.

    Covers both a missing job and a job the caller is not assigned to; the
    two cases are deliberately indistinguishable.
    """
    code = 'JobNotFoundOrUnauthorized'

    def __init__(self, job_id: str, user_id: str):
        super().__init__(
            'job', job_id,
            message='Job not found or user is not assigned to the job'
        )
        self.user_id = user_id


class ValidationError(MarketplaceError):
    status_code = 400
    code = 'ValidationError'

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body.update({'field': self.field, 'reason': self.reason})
        return body


class CapabilityError(MarketplaceError):
    """The worker does not offer the subject or language a job requires."""
    status_code = 422
    code = 'CapabilityError'

    MISSING_SUBJECT = 'missingSubject'
    MISSING_LANGUAGE = 'missingLanguage'

    _MESSAGES = {
        MISSING_SUBJECT: 'Worker does not have the specified subject',
        MISSING_LANGUAGE: 'Worker does not have the specified language',
    }

    def __init__(self, kind: str):
        super().__init__(self._MESSAGES.get(kind, kind))
        self.kind = kind

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body['kind'] = self.kind
        return body


class InvalidTransition(MarketplaceError):
    """A job status change the state machine does not allow."""
    status_code = 409
    code = 'InvalidTransition'

    def __init__(self, current: Optional[str], requested: str):
        super().__init__(f"Cannot move job from {current} to {requested}")
        self.current = current
        self.requested = requested

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body.update({'current': self.current, 'requested': self.requested})
        return body


class DuplicateKey(MarketplaceError):
    """A unique attribute (e.g. email) is already taken."""
    status_code = 409
    code = 'DuplicateKey'

    def __init__(self, field: str):
        super().__init__(f"Conflict error: {field} already exists.")
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body['field'] = self.field
        return body


class ConditionFailed(MarketplaceError):
    """A guard attached to a store write did not hold; nothing was written."""
    status_code = 409
    code = 'ConditionFailed'

    def __init__(self, collection: str, doc_id: Optional[str] = None):
        super().__init__(f"Condition check failed on {collection} {doc_id or ''}".strip())
        self.collection = collection
        self.doc_id = doc_id


class Unauthorized(MarketplaceError):
    """The request carries no verified caller identity."""
    status_code = 401
    code = 'Unauthorized'

    def __init__(self, message: str = 'Authentication required'):
        super().__init__(message)


class Forbidden(MarketplaceError):
    status_code = 403
    code = 'Forbidden'
