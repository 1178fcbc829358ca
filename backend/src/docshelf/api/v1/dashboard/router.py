"""Dashboard endpoint - per-owner document statistics."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ....auth.dependencies import get_current_user
from ....dependencies import get_document_service
from ....models.user import User
from ....services.document_service import DocumentService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class DashboardStats(BaseModel):
    total_documents: int
    public_documents: int
    private_documents: int
    total_storage: str
    pending_analysis: int
    sensitive_documents: int
    maybe_sensitive_documents: int


class RecentDocument(BaseModel):
    id: str
    title: str
    visibility: str
    sensitivity: Optional[str] = None
    formatted_size: str
    created_at: Optional[str] = None
    ai_analyzed: bool


class DashboardResponse(BaseModel):
    """Totals, five most recent documents and counts by file category."""
    stats: DashboardStats
    recent_documents: List[RecentDocument]
    documents_by_type: Dict[str, int]


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    return service.dashboard(current_user)
