"""
API routes for LeafSpy logs.
"""

import dataclasses
from pathlib import Path

from fastapi import APIRouter, HTTPException, Query

from leafspy.api.schemas import (
    ErrorResponse,
    FolderInfoResponse,
    LogDetailResponse,
    LogSummaryResponse,
    RecordPageResponse,
    RecordResponse,
    SetFolderRequest,
    SkippedRowResponse,
)
from leafspy.models.dataline import DataLine
from leafspy.services.log_reader import LeafSpyLog, LogReadError
from leafspy.services.repository import LogSummary, get_repository


router = APIRouter(prefix="/logs", tags=["logs"])

ERROR_RESPONSES = {
    404: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


def _load_log(log_id: str) -> LeafSpyLog:
    """Fetch a decoded log or raise the matching HTTP error."""
    repo = get_repository()

    if not repo.has_log(log_id):
        raise HTTPException(status_code=404, detail=f"Log not found: {log_id}")

    try:
        return repo.require_log(log_id)
    except LogReadError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except OSError as e:
        raise HTTPException(status_code=404, detail=f"Log file unavailable: {e}")


def _build_summary_response(summary: LogSummary) -> LogSummaryResponse:
    return LogSummaryResponse(**dataclasses.asdict(summary))


def _build_record_response(record: DataLine) -> RecordResponse:
    """Build record response from a DataLine."""
    return RecordResponse(
        **dataclasses.asdict(record),
        plug_state_label=record.plug_state_label,
        charge_mode_label=record.charge_mode_label,
        gear_label=record.gear_label,
    )


@router.get("", response_model=list[LogSummaryResponse])
async def list_logs():
    """
    List all readable LeafSpy logs.

    Returns summaries sorted by recording date (newest first).
    """
    repo = get_repository()
    return [_build_summary_response(s) for s in repo.list_logs()]


@router.get("/{log_id}", response_model=LogDetailResponse, responses=ERROR_RESPONSES)
async def get_log_detail(log_id: str):
    """
    Get the summary of a log and the rows skipped while decoding it.
    """
    log = _load_log(log_id)
    summary = LogSummary.from_log(log_id, log)

    return LogDetailResponse(
        **dataclasses.asdict(summary),
        skipped=[
            SkippedRowResponse(line_number=row.line_number, reason=row.reason)
            for row in log.skipped
        ],
    )


@router.get("/{log_id}/records", response_model=RecordPageResponse, responses=ERROR_RESPONSES)
async def get_log_records(
    log_id: str,
    offset: int = Query(0, ge=0, description="Index of the first record"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of records"),
):
    """
    Get decoded records of a log, one page at a time.
    """
    log = _load_log(log_id)
    page = log.records[offset:offset + limit]

    return RecordPageResponse(
        log_id=log_id,
        offset=offset,
        limit=limit,
        total=log.sample_count,
        records=[_build_record_response(record) for record in page],
    )


# ============================================================================
# Folder Management Routes
# ============================================================================

folder_router = APIRouter(prefix="/folder", tags=["folder"])


@folder_router.get("", response_model=FolderInfoResponse)
async def get_folder_info():
    """Get information about the current data folder."""
    repo = get_repository()

    return FolderInfoResponse(
        path=str(repo.data_folder) if repo.data_folder else None,
        log_count=repo.log_count,
    )


@folder_router.post("", response_model=FolderInfoResponse)
async def set_folder(request: SetFolderRequest):
    """
    Set the data folder to scan for LeafSpy CSV files.

    This will clear the current cache and re-scan.
    """
    repo = get_repository()

    path = Path(request.path)
    if not path.exists():
        raise HTTPException(status_code=400, detail=f"Folder does not exist: {request.path}")
    if not path.is_dir():
        raise HTTPException(status_code=400, detail=f"Path is not a directory: {request.path}")

    count = repo.set_data_folder(path)

    return FolderInfoResponse(
        path=str(path),
        log_count=count,
    )


@folder_router.post("/rescan", response_model=FolderInfoResponse)
async def rescan_folder():
    """
    Rescan the current data folder for new CSV files.
    """
    repo = get_repository()

    if repo.data_folder is None:
        raise HTTPException(status_code=400, detail="No data folder set")

    repo.clear_cache()
    count = repo.scan_folder(repo.data_folder)

    return FolderInfoResponse(
        path=str(repo.data_folder),
        log_count=count,
    )
