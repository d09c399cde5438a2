"""
Client domain - statuses and the per-client read model
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

CLIENT_STATUS_ACTIVE = "active"
CLIENT_STATUS_ARCHIVED = "archived"
CLIENT_STATUSES = (CLIENT_STATUS_ACTIVE, CLIENT_STATUS_ARCHIVED)

UNKNOWN_CLIENT_NAME = "Unknown Client"

Row = Dict[str, Any]


@dataclass
class ClientData:
    """
    Per-client read model: the client joined with its billing and files.

    Not persisted - assembled from four independent reads keyed by client_id.
    """
    client: Optional[Row] = None
    subscription: Optional[Row] = None
    invoices: List[Row] = field(default_factory=list)
    assets: List[Row] = field(default_factory=list)
