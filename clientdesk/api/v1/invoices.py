"""
Invoice API endpoints
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from clientdesk.api.deps import get_coordinator, get_notifier, get_queries
from clientdesk.api.responses import mutation_response
from clientdesk.application.mutations import MutationCoordinator
from clientdesk.application.notifications import CollectingNotifier
from clientdesk.application.queries import ClientQueries


router = APIRouter(prefix="/api/v1/invoices", tags=["invoices"])


class UpdateInvoiceStatusRequest(BaseModel):
    status: str  # paid, pending, overdue


@router.get("/")
async def list_invoices(
    search: str = "",
    status: str = "all",
    queries: ClientQueries = Depends(get_queries),
):
    """All invoices with client names, plus paid/overdue/pending totals"""
    rows, stats = await queries.invoice_overview(search, status)
    return {"invoices": rows, "stats": stats.to_dict()}


@router.patch("/{invoice_id}")
async def update_invoice_status(
    invoice_id: str,
    req: UpdateInvoiceStatusRequest,
    coordinator: MutationCoordinator = Depends(get_coordinator),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    result = await coordinator.update_invoice_status(invoice_id, req.status)
    return mutation_response(result, notifier)
