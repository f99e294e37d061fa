"""
Scan ingestion API: called by NFC readers (bearer token) and read by the
dashboard (admin session).
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from nfc_attendance.config import Settings
from nfc_attendance.database import get_db
from nfc_attendance.models.device import Device
from nfc_attendance.schemas.scan import AttendanceLogResponse, DailyRecordResponse, ScanRequest, ScanStatus
from nfc_attendance.services.query_service import QueryService
from nfc_attendance.services.scan_service import ScanService
from nfc_attendance.utils.auth import client_ip, get_current_device, get_settings, require_admin
from nfc_attendance.utils.errors import AppError, InternalError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scan", tags=["scan"])


async def _read_subject_id(request: Request) -> str:
    """Card id from the body; an unreadable body counts as a missing id."""
    try:
        body = await request.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""

    try:
        payload = ScanRequest.model_validate(body)
    except PydanticValidationError:
        return ""

    if payload.subject_id is None:
        return ""
    return str(payload.subject_id).strip()

@router.post(
    "",
    summary="讀卡機刷卡",
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": ScanRequest.model_json_schema()}}
        }
    }
)
async def record_scan(
    request: Request,
    device: Device = Depends(get_current_device),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    讀卡機刷卡端點。

    - 需要 `Authorization: Bearer <token>`，先驗證裝置再讀取內容
    - 簽到模式：每次刷卡新增一筆紀錄 (201)
    - 訂餐模式：截止前為訂餐 (201)，截止後為取餐 (200)
    """
    subject_id = await _read_subject_id(request)
    if not subject_id:
        raise ValidationError("subjectId required", field="subjectId")

    try:
        scan_service = ScanService(db, settings)
        result = scan_service.record_scan(subject_id, client_ip(request))
    except AppError:
        raise
    except Exception:
        logger.exception(f"Failed to record scan for {subject_id} from device {device.id}")
        raise InternalError("Failed to record scan")

    body = {"message": result.message, "status": result.status.value}
    if result.status == ScanStatus.PRESENT:
        body["logId"] = result.record_id
    else:
        body["recordId"] = result.record_id

    return JSONResponse(
        status_code=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        content=body
    )

@router.get("", summary="取得刷卡紀錄列表")
async def list_scans(
    page: int = Query(1, description="頁碼"),
    limit: Optional[int] = Query(None, description="每頁筆數（最多 100）"),
    date: Optional[str] = Query(None, description="日期 (YYYY-MM-DD)"),
    subject_id: Optional[str] = Query(None, alias="subjectId", description="卡片編號"),
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    取得刷卡紀錄，最新的在前。

    - 簽到模式回傳 AttendanceLog，訂餐模式回傳 DailyRecord
    - limit 超過 100 時自動限制為 100，page 最小為 1
    """
    try:
        query_service = QueryService(db, settings)
        items, total, page, limit = query_service.list_records(date, subject_id, page, limit)

        schema = DailyRecordResponse if settings.is_canteen_mode else AttendanceLogResponse
        logs = [schema.model_validate(item).model_dump(by_alias=True, mode="json") for item in items]

        return {"logs": logs, "total": total, "page": page, "limit": limit}

    except AppError:
        raise
    except Exception:
        logger.exception("Failed to list scans")
        raise InternalError("Failed to list scans")
