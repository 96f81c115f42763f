"""Email queue administration routes."""

from fastapi import APIRouter, Depends, Query

from techmaintain.api.deps import get_outbox
from techmaintain.api.schemas import QueuedEmailResponse, RetryEmailsRequest, RetryEmailsResponse
from techmaintain.components.notifications import EmailOutbox

router = APIRouter()


@router.get("", response_model=list[QueuedEmailResponse])
def list_emails(
    limit: int = Query(default=100, ge=1, le=100),
    outbox: EmailOutbox = Depends(get_outbox),
) -> list[QueuedEmailResponse]:
    """Most recent queued emails of any status, newest first."""
    return [QueuedEmailResponse.from_email(e) for e in outbox.list_recent(limit)]


@router.post("/retry", response_model=RetryEmailsResponse)
def retry_emails(
    body: RetryEmailsRequest,
    outbox: EmailOutbox = Depends(get_outbox),
) -> RetryEmailsResponse:
    """Requeue emails for another delivery attempt."""
    return RetryEmailsResponse(count=outbox.retry(body.ids))
