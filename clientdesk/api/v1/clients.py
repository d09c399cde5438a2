"""
Client API endpoints: list, detail, CRUD, billing and files
"""
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from clientdesk.api.deps import get_coordinator, get_notifier, get_queries
from clientdesk.api.responses import mutation_response
from clientdesk.application.mutations import MutationCoordinator
from clientdesk.application.notifications import CollectingNotifier
from clientdesk.application.queries import ClientQueries
from clientdesk.application.view_models import client_detail
from clientdesk.config import get_settings
from clientdesk.domain.patches import ClientPatch, NewClient, SubscriptionPatch


router = APIRouter(prefix="/api/v1/clients", tags=["clients"])


@router.get("/")
async def list_clients(
    search: str = "",
    status: str = "all",
    queries: ClientQueries = Depends(get_queries),
):
    """Clients with total billed, plus list stats"""
    rows, stats = await queries.client_overview(search, status)
    return {"clients": rows, "stats": stats.to_dict()}


@router.post("/")
async def create_client(
    req: NewClient,
    coordinator: MutationCoordinator = Depends(get_coordinator),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    result = await coordinator.create_client(req)
    return mutation_response(result, notifier)


@router.get("/{client_id}")
async def get_client(client_id: str, queries: ClientQueries = Depends(get_queries)):
    """Client detail page data"""
    data = await queries.get_client_data(client_id)
    if data.client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    return client_detail(data)


@router.patch("/{client_id}")
async def update_client(
    client_id: str,
    req: ClientPatch,
    coordinator: MutationCoordinator = Depends(get_coordinator),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    result = await coordinator.update_client(client_id, req)
    return mutation_response(result, notifier)


@router.delete("/{client_id}")
async def delete_client(
    client_id: str,
    coordinator: MutationCoordinator = Depends(get_coordinator),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    result = await coordinator.delete_client(client_id)
    return mutation_response(result, notifier)


@router.put("/{client_id}/subscription")
async def update_subscription(
    client_id: str,
    req: SubscriptionPatch,
    coordinator: MutationCoordinator = Depends(get_coordinator),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    """Create or update the client's billing subscription"""
    result = await coordinator.upsert_subscription(client_id, req)
    return mutation_response(result, notifier)


@router.post("/{client_id}/assets")
async def upload_asset(
    client_id: str,
    file: UploadFile = File(...),
    bucket: str | None = Form(None),
    coordinator: MutationCoordinator = Depends(get_coordinator),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    """Upload a document (default bucket) or a voice note"""
    data = await file.read()
    result = await coordinator.upload_asset(
        client_id,
        filename=file.filename or "upload",
        data=data,
        content_type=file.content_type,
        bucket=bucket or get_settings().DOCUMENTS_BUCKET,
    )
    return mutation_response(result, notifier)


@router.delete("/{client_id}/assets/{asset_id}")
async def delete_asset(
    client_id: str,
    asset_id: str,
    queries: ClientQueries = Depends(get_queries),
    coordinator: MutationCoordinator = Depends(get_coordinator),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    assets = await queries.get_client_assets(client_id)
    asset = next((a for a in assets if a["id"] == asset_id), None)
    if asset is None:
        raise HTTPException(status_code=404, detail="Asset not found")
    result = await coordinator.delete_asset(asset)
    return mutation_response(result, notifier)
