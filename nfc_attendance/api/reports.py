"""
Report API routes for monthly PDF exports and dashboard statistics.
"""

import io
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from nfc_attendance.config import Settings
from nfc_attendance.database import get_db
from nfc_attendance.services.query_service import QueryService
from nfc_attendance.services.report_service import ReportService
from nfc_attendance.utils.auth import get_settings, require_admin
from nfc_attendance.utils.errors import AppError, InternalError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])

@router.get("/report/monthly", summary="匯出月報表 PDF")
async def export_monthly_report(
    month: Optional[str] = Query(None, description="月份 (YYYY-MM)，預設為本月"),
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    匯出月報表。

    - 訂餐模式：每位成員的訂餐數與取餐數
    - 簽到模式：每位成員的出席天數與刷卡次數
    """
    try:
        report_service = ReportService(db, settings)
        file_content, filename, content_type = report_service.export_monthly_report(month)

        return StreamingResponse(
            io.BytesIO(file_content),
            media_type=content_type,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'}
        )
    except AppError:
        raise
    except Exception:
        logger.exception("Failed to export monthly report")
        raise InternalError("Failed to export report")

@router.get("/stats/today", summary="取得今日統計")
async def get_today_stats(
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """儀表板用的今日統計"""
    try:
        return QueryService(db, settings).today_stats()
    except AppError:
        raise
    except Exception:
        logger.exception("Failed to get today's statistics")
        raise InternalError("Failed to get statistics")
