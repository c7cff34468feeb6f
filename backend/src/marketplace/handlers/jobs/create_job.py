"""
Create Job Handler.
POST /jobs
Body: { "workerId", "subject", "language", "description", "price", "numClasses" }
Creates a job only if the worker offers the subject and the language.
"""
from marketplace.auth import require_user_sub
from marketplace.errors import MarketplaceError, ValidationError
from marketplace.jobs import JobStore
from marketplace.logging import logger, log_event
from marketplace.store import get_store
from marketplace.utils import error_response, format_response, parse_body
from marketplace.workers import WorkerDirectory


def handler(event, context):
    log_event(event)

    body = parse_body(event)

    try:
        client_id = require_user_sub(event)
        worker_id = body.get('workerId')
        if not worker_id:
            raise ValidationError('workerId', 'workerId is required')

        store = get_store()
        jobs = JobStore(store, WorkerDirectory(store))
        job = jobs.create_job(
            client_id=client_id,
            worker_id=worker_id,
            subject=body.get('subject'),
            language=body.get('language'),
            description=body.get('description'),
            price=body.get('price'),
            num_classes=body.get('numClasses')
        )
        return format_response(201, job)

    except MarketplaceError as e:
        logger.warning(f"Job creation rejected: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error creating job: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
