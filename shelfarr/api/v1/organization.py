"""
Shelfarr v1.0.0 - Organization API
Settings, naming rules, path preview, library scans and the organize queue
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from pathlib import Path

from ...database import get_db
from ...exceptions import (
    InvalidCronExpressionError,
    InvalidQueueItemStateError,
    InvalidTemplateError,
    RuleNotFoundError,
)
from ...models import ContentType, OrganizeQueueStatus
from ...schemas.organization import (
    FileMetadata,
    OrganizationContext,
    OrganizationResult,
    OrganizationRuleCreate,
    OrganizationRuleResponse,
    OrganizationRuleUpdate,
    OrganizationSettingsResponse,
    OrganizationSettingsUpdate,
    OrganizeFileRequest,
    PathGenerationResult,
    PathPreviewRequest,
)
from ...schemas.organize_queue import (
    ActionResult,
    OrganizeQueueListResponse,
    OrganizeQueueStats,
    QueueItemSelections,
)
from ...schemas.reverse_index import ReverseIndexResponse, ReverseIndexStatus, SeasonScanResult
from ...services.file_organization_service import FileOrganizationService, resolve_path
from ...services.organization_rules_service import OrganizationRulesService
from ...services.reverse_indexing_service import ReverseIndexingService
from ...services.season_scanning_service import SeasonScanningService

router = APIRouter()


# Settings


@router.get("/organization/settings", response_model=OrganizationSettingsResponse)
def get_organization_settings(db: Session = Depends(get_db)):
    """Get organization settings (created with defaults on first access)"""
    return OrganizationRulesService(db).get_settings()


@router.put("/organization/settings", response_model=OrganizationSettingsResponse)
def update_organization_settings(
    updates: OrganizationSettingsUpdate,
    db: Session = Depends(get_db),
):
    """Update organization settings"""
    try:
        return OrganizationRulesService(db).update_settings(updates.model_dump(exclude_unset=True))
    except InvalidCronExpressionError as e:
        raise HTTPException(status_code=400, detail=str(e))


# Rules


@router.get("/organization/rules", response_model=List[OrganizationRuleResponse])
def list_rules(db: Session = Depends(get_db)):
    """List all naming rules"""
    return OrganizationRulesService(db).get_all_rules()


@router.post("/organization/rules", response_model=OrganizationRuleResponse, status_code=201)
def create_rule(rule: OrganizationRuleCreate, db: Session = Depends(get_db)):
    """Create a naming rule"""
    try:
        return OrganizationRulesService(db).create_rule(rule.model_dump())
    except InvalidTemplateError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/organization/rules/{content_type}", response_model=OrganizationRuleResponse)
def get_rule_for_content_type(
    content_type: ContentType,
    platform: Optional[str] = Query(None, description="Game platform"),
    db: Session = Depends(get_db),
):
    """Rule used for a content type (a default is created if none exists)"""
    return OrganizationRulesService(db).get_rule_for_content_type(content_type, platform)


@router.put("/organization/rules/{rule_id}", response_model=OrganizationRuleResponse)
def update_rule(rule_id: str, updates: OrganizationRuleUpdate, db: Session = Depends(get_db)):
    """Update a naming rule"""
    try:
        return OrganizationRulesService(db).update_rule(rule_id, updates.model_dump(exclude_unset=True))
    except RuleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTemplateError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/organization/rules/{rule_id}")
def delete_rule(rule_id: str, db: Session = Depends(get_db)):
    """Delete a naming rule"""
    try:
        OrganizationRulesService(db).delete_rule(rule_id)
    except RuleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"success": True, "message": "Rule deleted successfully"}


# Paths and files


@router.post("/organization/preview-path", response_model=PathGenerationResult)
def preview_path(request: PathPreviewRequest, db: Session = Depends(get_db)):
    """Show where a file with this descriptor would be placed"""
    context = OrganizationContext(
        content_type=request.content_type,
        original_path=request.file_name,
        file_name=request.file_name,
        title=request.title,
        year=request.year,
        season=request.season,
        episode=request.episode,
        platform=request.platform,
        quality=request.quality,
        format=request.format,
        edition=request.edition,
    )
    return OrganizationRulesService(db).generate_organized_path(context)


@router.post("/organization/organize", response_model=OrganizationResult)
def organize_file(request: OrganizeFileRequest, db: Session = Depends(get_db)):
    """Move one file into the library layout"""
    source = resolve_path(request.path)
    context = OrganizationContext(
        content_type=request.content_type,
        original_path=str(source),
        file_name=source.name,
        title=request.title,
        year=request.year,
        season=request.season,
        episode=request.episode,
        platform=request.platform,
        quality=request.quality,
        format=request.format,
        edition=request.edition,
    )
    return FileOrganizationService(db).organize_file(context, request.request_id)


@router.get("/organization/extract-metadata", response_model=FileMetadata)
def extract_metadata(
    file_name: str = Query(..., min_length=1, description="File or folder name"),
    content_type: ContentType = Query(...),
    db: Session = Depends(get_db),
):
    """Parse a descriptor from a name"""
    return OrganizationRulesService(db).extract_metadata_from_file_name(
        Path(file_name).name, content_type
    )


# Reverse indexing


@router.post("/organization/reverse-index", response_model=ReverseIndexResponse)
async def trigger_reverse_index(db: Session = Depends(get_db)):
    """Scan the library now"""
    return await ReverseIndexingService(db).trigger_reverse_indexing()


@router.get("/organization/reverse-index/status", response_model=ReverseIndexStatus)
def reverse_index_status(db: Session = Depends(get_db)):
    """Whether a library scan is running"""
    return ReverseIndexingService(db).get_status()


@router.post("/organization/season-scan", response_model=SeasonScanResult)
def scan_all_seasons(db: Session = Depends(get_db)):
    """Reconcile episode files for every TV request"""
    return SeasonScanningService(db).scan_all_seasons()


@router.post("/organization/season-scan/{request_id}", response_model=SeasonScanResult)
def scan_tv_show_request(request_id: str, db: Session = Depends(get_db)):
    """Reconcile episode files for one TV request"""
    return SeasonScanningService(db).scan_tv_show_request(request_id)


# Organize queue


@router.get("/organization/queue", response_model=OrganizeQueueListResponse)
def list_queue(
    status: Optional[List[OrganizeQueueStatus]] = Query(None, description="Defaults to actionable items"),
    content_type: Optional[ContentType] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """List organize queue items, newest first"""
    items, total = ReverseIndexingService(db).get_organize_queue(
        status=status, content_type=content_type, limit=limit, offset=offset
    )
    return {"items": items, "total": total}


@router.get("/organization/queue/stats", response_model=OrganizeQueueStats)
def queue_stats(db: Session = Depends(get_db)):
    """Organize queue counts"""
    return ReverseIndexingService(db).get_organize_queue_stats()


def _action_response(result: ActionResult) -> ActionResult:
    if not result.success and result.message == "Queue item not found":
        raise HTTPException(status_code=404, detail=result.message)
    if not result.success and result.error == InvalidQueueItemStateError.reason:
        raise HTTPException(status_code=409, detail=result.message)
    return result


@router.post("/organization/queue/{item_id}/process", response_model=ActionResult)
async def process_queue_item(
    item_id: str,
    selections: Optional[QueueItemSelections] = None,
    db: Session = Depends(get_db),
):
    """Confirm a queue item and organize its folder"""
    result = await ReverseIndexingService(db).process_organize_queue_item(item_id, selections)
    return _action_response(result)


@router.post("/organization/queue/{item_id}/skip", response_model=ActionResult)
def skip_queue_item(item_id: str, db: Session = Depends(get_db)):
    """Leave a folder as it is"""
    return _action_response(ReverseIndexingService(db).skip_organize_queue_item(item_id))


@router.delete("/organization/queue/{item_id}", response_model=ActionResult)
def delete_queue_item(item_id: str, db: Session = Depends(get_db)):
    """Forget a queue item (files are not touched)"""
    return _action_response(ReverseIndexingService(db).delete_organize_queue_item(item_id))
