"""
Subject directory service for employee and student CRUD operations.
"""

import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import or_

from nfc_attendance.models.subject import Subject
from nfc_attendance.schemas.subject import SubjectCreate, SubjectKind, SubjectUpdate
from nfc_attendance.utils.errors import ConflictError, NotFoundError, ValidationError
from nfc_attendance.utils.validators import (
    EXTERNAL_ID_MAX_LENGTH,
    sanitize_input,
    validate_external_id
)

logger = logging.getLogger(__name__)


class SubjectService:
    """員工/學生名冊業務邏輯服務"""

    def __init__(self, db: Session):
        self.db = db

    def list_subjects(self, kind: Optional[SubjectKind] = None, search: Optional[str] = None) -> List[Subject]:
        """
        取得名冊列表，最新建立的在前。

        Args:
            kind: 類型篩選 (employee / student)
            search: 姓名或卡片編號關鍵字
        """
        query = self.db.query(Subject)

        if kind:
            query = query.filter(Subject.kind == kind.value)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Subject.name.ilike(pattern),
                    Subject.external_id.ilike(pattern)
                )
            )

        return query.order_by(Subject.created_at.desc(), Subject.id.desc()).all()

    def get_subject(self, subject_id: int) -> Subject:
        """根據 ID 取得成員，不存在時拋出 NotFoundError"""
        subject = self.db.query(Subject).filter(Subject.id == subject_id).first()
        if not subject:
            raise NotFoundError("Subject not found")
        return subject

    def find_by_external_id(self, external_id: str) -> Optional[Subject]:
        """根據卡片編號取得成員"""
        return self.db.query(Subject).filter(Subject.external_id == external_id).first()

    def create_subject(self, data: SubjectCreate) -> Subject:
        """
        建立新成員。

        Raises:
            ValidationError: 缺少卡片編號或姓名，或卡片編號過長
            ConflictError: 卡片編號已存在
        """
        external_id = sanitize_input(data.external_id)
        name = sanitize_input(data.name)

        if not external_id or not name:
            raise ValidationError("externalId and name are required")

        if not validate_external_id(external_id):
            raise ValidationError(
                f"externalId must be at most {EXTERNAL_ID_MAX_LENGTH} characters",
                field="externalId"
            )

        if self.find_by_external_id(external_id):
            raise ConflictError("External ID already exists")

        subject = Subject(
            external_id=external_id,
            kind=data.kind.value,
            name=name,
            email=(data.email or "").lower(),
            group_label=sanitize_input(data.group_label)
        )

        try:
            self.db.add(subject)
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent create of the same card id
            self.db.rollback()
            raise ConflictError("External ID already exists")

        self.db.refresh(subject)
        logger.info(f"Created subject: {subject.external_id} - {subject.name}")
        return subject

    def update_subject(self, subject_id: int, data: SubjectUpdate) -> Subject:
        """
        更新成員資料。卡片編號寫入實體卡後不可變更。

        Raises:
            NotFoundError: 成員不存在
            ValidationError: 嘗試變更卡片編號或姓名為空
        """
        subject = self.get_subject(subject_id)
        update_dict = data.model_dump(exclude_unset=True)

        external_id = update_dict.pop("external_id", None)
        if external_id is not None and sanitize_input(external_id) != subject.external_id:
            raise ValidationError("externalId cannot be changed", field="externalId")

        if "name" in update_dict:
            name = sanitize_input(update_dict["name"])
            if not name:
                raise ValidationError("name cannot be empty", field="name")
            subject.name = name

        if "email" in update_dict:
            subject.email = (update_dict["email"] or "").lower()

        if "group_label" in update_dict:
            subject.group_label = sanitize_input(update_dict["group_label"])

        if update_dict.get("kind") is not None:
            subject.kind = update_dict["kind"].value

        self.db.commit()
        self.db.refresh(subject)

        logger.info(f"Updated subject: {subject.external_id} - {subject.name}")
        return subject

    def delete_subject(self, subject_id: int) -> None:
        """刪除成員；歷史紀錄保留當時的姓名與群組"""
        subject = self.get_subject(subject_id)
        external_id = subject.external_id

        self.db.delete(subject)
        self.db.commit()

        logger.info(f"Deleted subject: {external_id}")
