"""
Job Store.
Creates capability-matched jobs and drives the job status state machine:
In Progress → Completed | Cancelled.
"""
from decimal import Decimal
from typing import Any, Dict

from boto3.dynamodb.conditions import Attr

from .capability import capability_condition, validate_assignment
from .config import config
from .errors import ConditionFailed, InvalidTransition, JobNotFoundOrUnauthorized, NotFound, ValidationError
from .logging import logger
from .models import (
    JOBS, MAX_REVIEW, MIN_REVIEW, TRANSITIONS, USERS,
    JobStatus, Language, Subject, parse_enum,
)
from .store import DocumentStore, Guard
from .utils import now_iso
from .workers import WorkerDirectory


def _positive(value: Any, field: str):
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)) or value <= 0:
        raise ValidationError(field, 'must be a number greater than 0')
    return value


class JobStore:
    """Job records over the ``jobs`` collection."""

    def __init__(self, store: DocumentStore, directory: WorkerDirectory):
        self.store = store
        self.directory = directory

    def _resolve_worker(self, worker_id: str) -> Dict[str, Any]:
        worker = self.directory.find_capable_worker(worker_id)
        if config.REJECT_DISABLED_WORKERS and worker.get('isDisabled', False):
            raise NotFound('worker', worker_id)
        return worker

    def create_job(
        self,
        client_id: str,
        worker_id: str,
        subject,
        language,
        description: str,
        price,
        num_classes
    ) -> Dict[str, Any]:
        """
        Create a job for a worker that offers the subject and the language.

        The insert is guarded by the worker's capabilities, so a worker
        dropping a subject between the check and the write aborts the job.

        Raises:
            ValidationError: invalid job data
            NotFound: the worker does not exist
            CapabilityError: the worker lacks the subject or the language
        """
        subject = parse_enum(Subject, subject, 'subject')
        language = parse_enum(Language, language, 'language')
        _positive(price, 'price')
        _positive(num_classes, 'numClasses')
        if not client_id:
            raise ValidationError('clientId', 'clientId is required')

        worker = self._resolve_worker(worker_id)
        validate_assignment(worker, subject, language)

        timestamp = now_iso()
        job = {
            'description': description or '',
            'price': price,
            'numClasses': num_classes,
            'client': client_id,
            'worker': worker_id,
            'jobSubject': subject.value,
            'jobLanguage': language.value,
            'status': JobStatus.IN_PROGRESS.value,
            'createdAt': timestamp,
            'updatedAt': timestamp
        }
        guard_condition = capability_condition(subject, language)
        if config.REJECT_DISABLED_WORKERS:
            guard_condition = guard_condition & Attr('isDisabled').eq(False)

        try:
            created = self.store.insert(JOBS, job, guards=[Guard(USERS, worker_id, guard_condition)])
        except ConditionFailed:
            # The worker changed under us; report what is wrong with it now
            worker = self._resolve_worker(worker_id)
            validate_assignment(worker, subject, language)
            raise

        logger.info(f"Created job {created['jobId']} for worker {worker_id} ({subject.value}/{language.value})")
        return created

    def get_job(self, job_id: str) -> Dict[str, Any]:
        job = self.store.get(JOBS, job_id)
        if job is None:
            raise NotFound('job', job_id)
        return job

    def transition_status(self, job_id: str, worker_id: str, new_status) -> Dict[str, Any]:
        """
        Move a job to a terminal status on behalf of its assigned worker.

        The update is conditional on the assigned worker and the current
        status in a single store call; only ``status`` changes.

        Raises:
            ValidationError: new_status is not a reachable status
            JobNotFoundOrUnauthorized: no job with this id assigned to worker_id
            InvalidTransition: the job is already terminal
        """
        new_status = parse_enum(JobStatus, new_status, 'status')
        sources = [status for status, targets in TRANSITIONS.items() if new_status in targets]
        if not sources:
            raise ValidationError('status', f"'{new_status.value}' cannot be set on an existing job")

        condition = Attr('worker').eq(worker_id) & Attr('status').is_in([status.value for status in sources])
        updated = self.store.conditional_update(
            JOBS, job_id, condition, {'status': new_status.value, 'updatedAt': now_iso()}
        )
        if updated is not None:
            logger.info(f"Job {job_id} moved to {new_status.value} by worker {worker_id}")
            return updated

        # Classify the failure; nothing is written here
        job = self.store.get(JOBS, job_id)
        if job is None or job.get('worker') != worker_id:
            logger.warning(f"Status change on job {job_id} refused for worker {worker_id}")
            raise JobNotFoundOrUnauthorized(job_id, worker_id)
        raise InvalidTransition(job.get('status'), new_status.value)

    def review_job(self, job_id: str, client_id: str, rating) -> Dict[str, Any]:
        """
        Record the client's review of a completed job.

        Raises:
            ValidationError: rating outside the review scale
            JobNotFoundOrUnauthorized: no job with this id owned by client_id
            InvalidTransition: the job is not completed
        """
        if isinstance(rating, bool) or not isinstance(rating, (int, float, Decimal)) \
                or not MIN_REVIEW <= rating <= MAX_REVIEW:
            raise ValidationError('clientReview', f"must be between {MIN_REVIEW} and {MAX_REVIEW}")

        condition = Attr('client').eq(client_id) & Attr('status').eq(JobStatus.COMPLETED.value)
        updated = self.store.conditional_update(
            JOBS, job_id, condition, {'clientReview': rating, 'updatedAt': now_iso()}
        )
        if updated is not None:
            logger.info(f"Job {job_id} reviewed by client {client_id}: {rating}")
            return updated

        job = self.store.get(JOBS, job_id)
        if job is None or job.get('client') != client_id:
            raise JobNotFoundOrUnauthorized(job_id, client_id)
        raise InvalidTransition(job.get('status'), 'Reviewed')
