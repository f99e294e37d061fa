"""
Report service layer for monthly canteen and attendance summaries.
"""

import io
import logging
import pytz
from typing import Any, Dict, List, Optional, Tuple
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy import func
from sqlalchemy.orm import Session

from nfc_attendance.config import Settings, settings as app_settings
from nfc_attendance.models.attendance_log import AttendanceLog
from nfc_attendance.models.daily_record import DailyRecord
from nfc_attendance.utils.datetime_utils import day_bounds_utc, local_now, month_label, month_range, to_local
from nfc_attendance.utils.validators import parse_month

logger = logging.getLogger(__name__)


class ReportService:
    """報表業務邏輯服務"""

    def __init__(self, db: Session, settings: Settings = None):
        self.db = db
        self.settings = settings or app_settings

    def resolve_month(self, month: Optional[str]) -> Tuple[int, int]:
        """解析月份參數，未提供時使用本月"""
        parsed = parse_month(month)
        if parsed:
            return parsed
        today = local_now(self.settings.TIMEZONE)
        return today.year, today.month

    def generate_monthly_report(self, year: int, month: int) -> Dict[str, Any]:
        """
        生成月報表。

        Args:
            year: 年份
            month: 月份

        Returns:
            月報表資料，包含每位成員的統計與總計
        """
        label = month_label(year, month)

        if self.settings.is_canteen_mode:
            rows = self._canteen_rows(label)
            totals = {
                "orders": sum(r["orders"] for r in rows),
                "taken": sum(r["taken"] for r in rows),
            }
        else:
            rows = self._attendance_rows(year, month)
            totals = {
                "days_present": sum(r["days_present"] for r in rows),
                "scans": sum(r["scans"] for r in rows),
            }

        return {
            "report_type": "canteen" if self.settings.is_canteen_mode else "attendance",
            "month": label,
            "rows": rows,
            "totals": totals,
        }

    def _canteen_rows(self, label: str) -> List[Dict[str, Any]]:
        """訂餐統計：每位成員的訂餐數與取餐數"""
        results = self.db.query(
            DailyRecord.subject_id,
            func.max(DailyRecord.subject_name).label("subject_name"),
            func.count(DailyRecord.ordered_at).label("orders"),
            func.count(DailyRecord.taken_at).label("taken")
        ).filter(
            DailyRecord.date.like(f"{label}-%")
        ).group_by(DailyRecord.subject_id).order_by(DailyRecord.subject_id).all()

        return [
            {
                "subject_id": r.subject_id,
                "subject_name": r.subject_name or "-",
                "orders": r.orders,
                "taken": r.taken,
            }
            for r in results
        ]

    def _attendance_rows(self, year: int, month: int) -> List[Dict[str, Any]]:
        """簽到統計：每位成員的出席天數與刷卡次數"""
        start_date, end_date = month_range(year, month)
        start, _ = day_bounds_utc(start_date, self.settings.TIMEZONE)
        _, end = day_bounds_utc(end_date, self.settings.TIMEZONE)

        logs = self.db.query(AttendanceLog).filter(
            AttendanceLog.timestamp >= start,
            AttendanceLog.timestamp <= end
        ).order_by(AttendanceLog.subject_id, AttendanceLog.timestamp).all()

        # Days are counted in the server time zone, so group in Python
        summary: Dict[str, Dict[str, Any]] = {}
        for log in logs:
            row = summary.setdefault(log.subject_id, {
                "subject_id": log.subject_id,
                "subject_name": log.subject_name or "-",
                "days": set(),
                "scans": 0,
            })
            row["scans"] += 1
            row["days"].add(self._local_day(log))

        return [
            {
                "subject_id": row["subject_id"],
                "subject_name": row["subject_name"],
                "days_present": len(row["days"]),
                "scans": row["scans"],
            }
            for row in summary.values()
        ]

    def _local_day(self, log: AttendanceLog) -> str:
        timestamp = log.timestamp
        if timestamp.tzinfo is None:
            timestamp = pytz.UTC.localize(timestamp)
        return to_local(timestamp, self.settings.TIMEZONE).strftime("%Y-%m-%d")

    def export_monthly_report(self, month: Optional[str] = None) -> Tuple[bytes, str, str]:
        """
        匯出月報表 PDF。

        Returns:
            (檔案內容, 檔案名稱, 內容類型) 的元組
        """
        year, month_number = self.resolve_month(month)
        report = self.generate_monthly_report(year, month_number)

        content = self._export_to_pdf(report)
        filename = f"{report['report_type']}-report-{report['month']}.pdf"

        logger.info(f"Exported {report['report_type']} report for {report['month']} ({len(report['rows'])} rows)")
        return content, filename, "application/pdf"

    def _export_to_pdf(self, report: Dict[str, Any]) -> bytes:
        """匯出資料為 PDF 格式"""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=14 * mm,
            rightMargin=14 * mm,
            topMargin=14 * mm,
            bottomMargin=14 * mm,
            title=f"{report['report_type'].title()} Report {report['month']}"
        )
        styles = getSampleStyleSheet()

        if report["report_type"] == "canteen":
            title = f"Canteen Report - {report['month']}"
            header = ["Name", "ID", "Orders", "Taken"]
            body = [[r["subject_name"], r["subject_id"], str(r["orders"]), str(r["taken"])] for r in report["rows"]]
            totals_line = f"Total Orders: {report['totals']['orders']}    Total Taken: {report['totals']['taken']}"
        else:
            title = f"Attendance Report - {report['month']}"
            header = ["Name", "ID", "Days Present", "Scans"]
            body = [[r["subject_name"], r["subject_id"], str(r["days_present"]), str(r["scans"])] for r in report["rows"]]
            totals_line = f"Total Days Present: {report['totals']['days_present']}    Total Scans: {report['totals']['scans']}"

        if not body:
            body = [["No records", "", "", ""]]

        table = Table([header] + body, colWidths=[70 * mm, 40 * mm, 30 * mm, 30 * mm], repeatRows=1)
        table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
        ]))

        story = [
            Paragraph(title, styles["Title"]),
            Spacer(1, 6 * mm),
            table,
            Spacer(1, 6 * mm),
            Paragraph(totals_line, styles["Normal"]),
        ]
        doc.build(story)

        return buffer.getvalue()
