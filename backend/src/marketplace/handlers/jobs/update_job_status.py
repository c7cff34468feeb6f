"""
Update Job Status Handler.
PATCH /worker/jobs/{jobId}/status
Body: { "status": "Completed" | "Cancelled" }
Only the worker assigned to the job may change its status.
"""
from marketplace.auth import require_user_sub
from marketplace.errors import MarketplaceError, ValidationError
from marketplace.jobs import JobStore
from marketplace.logging import logger, log_event
from marketplace.store import get_store
from marketplace.utils import error_response, format_response, get_path_param, parse_body
from marketplace.workers import WorkerDirectory


def handler(event, context):
    log_event(event)

    body = parse_body(event)
    job_id = get_path_param(event, 'jobId') or body.get('jobId')

    try:
        # Only the authenticated caller can act as the assigned worker
        worker_id = require_user_sub(event)
        if not job_id:
            raise ValidationError('jobId', 'jobId is required')

        store = get_store()
        jobs = JobStore(store, WorkerDirectory(store))
        job = jobs.transition_status(job_id, worker_id, body.get('status'))
        return format_response(200, job)

    except MarketplaceError as e:
        logger.warning(f"Status change on job {job_id} rejected: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error updating job {job_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
