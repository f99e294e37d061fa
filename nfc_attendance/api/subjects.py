"""
Subject directory API routes for employee and student CRUD operations.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from nfc_attendance.database import get_db
from nfc_attendance.schemas.subject import SubjectCreate, SubjectKind, SubjectResponse, SubjectUpdate
from nfc_attendance.services.subject_service import SubjectService
from nfc_attendance.utils.auth import require_admin
from nfc_attendance.utils.errors import AppError, InternalError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subjects", tags=["subjects"])


def _serialize(subject) -> dict:
    return SubjectResponse.model_validate(subject).model_dump(by_alias=True, mode="json")

@router.get("", summary="取得名冊列表")
async def list_subjects(
    kind: Optional[SubjectKind] = Query(None, description="類型篩選 (employee / student)"),
    search: Optional[str] = Query(None, description="搜尋姓名或卡片編號"),
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """取得所有員工/學生，最新建立的在前"""
    try:
        subjects = SubjectService(db).list_subjects(kind, search)
        return {"subjects": [_serialize(subject) for subject in subjects]}
    except AppError:
        raise
    except Exception:
        logger.exception("Failed to list subjects")
        raise InternalError("Failed to list subjects")

@router.post("", status_code=status.HTTP_201_CREATED, summary="新增成員")
async def create_subject(
    subject_data: SubjectCreate,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    新增員工或學生。

    - externalId 與 name 為必填
    - externalId 最多 16 字元，重複時回傳 409
    """
    try:
        subject = SubjectService(db).create_subject(subject_data)
        return {"subject": _serialize(subject)}
    except AppError:
        raise
    except Exception:
        db.rollback()
        logger.exception("Failed to create subject")
        raise InternalError("Failed to create subject")

@router.get("/{subject_id}", summary="取得單一成員")
async def get_subject(
    subject_id: int,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        subject = SubjectService(db).get_subject(subject_id)
        return {"subject": _serialize(subject)}
    except AppError:
        raise
    except Exception:
        logger.exception(f"Failed to get subject {subject_id}")
        raise InternalError("Failed to get subject")

@router.put("/{subject_id}", summary="更新成員")
async def update_subject(
    subject_id: int,
    subject_data: SubjectUpdate,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    更新成員資料。

    - externalId 已寫入實體卡，不可變更
    """
    try:
        subject = SubjectService(db).update_subject(subject_id, subject_data)
        return {"subject": _serialize(subject)}
    except AppError:
        raise
    except Exception:
        db.rollback()
        logger.exception(f"Failed to update subject {subject_id}")
        raise InternalError("Failed to update subject")

@router.delete("/{subject_id}", summary="刪除成員")
async def delete_subject(
    subject_id: int,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """刪除成員；已存在的刷卡紀錄保留原姓名與群組"""
    try:
        SubjectService(db).delete_subject(subject_id)
        return {"ok": True}
    except AppError:
        raise
    except Exception:
        db.rollback()
        logger.exception(f"Failed to delete subject {subject_id}")
        raise InternalError("Failed to delete subject")
