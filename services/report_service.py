# services/report_service.py
import logging
from typing import Any, Dict, List, Mapping, Sequence

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import FileStorage

from extensions.database import unit_of_work
from models.task import Task
from repositories.attachment_repository import AttachmentRepository
from repositories.task_repository import TaskRepository
from services.storage_service import StorageService
from utils.datetime_helpers import utcnow
from utils.exceptions import StorageError, ValidationError
from utils.validators import is_valid_actual_value, normalize_value_text

logger = logging.getLogger(__name__)


class ReportService:
    """企业用户填报自己的考核任务。"""

    @staticmethod
    def get_own_tasks(user_id: int) -> List[Task]:
        return TaskRepository.list_by_owner(user_id)

    @staticmethod
    def _normalize_entries(entries: Any) -> List[Dict[str, Any]]:
        if not isinstance(entries, list):
            raise ValidationError("填报数据必须为数组")
        normalized = []
        for idx, item in enumerate(entries, start=1):
            if not isinstance(item, dict):
                raise ValidationError(f"第 {idx} 条填报数据格式不正确")
            try:
                task_id = int(item.get("taskId"))
            except (TypeError, ValueError):
                raise ValidationError(f"第 {idx} 条填报数据缺少 taskId")
            delete_ids = item.get("deleteAttachmentIds") or []
            if not isinstance(delete_ids, list):
                raise ValidationError(f"第 {idx} 条填报数据 deleteAttachmentIds 必须为数组")
            try:
                delete_ids = [int(i) for i in delete_ids]
            except (TypeError, ValueError):
                raise ValidationError(f"第 {idx} 条填报数据 deleteAttachmentIds 不合法")
            remarks = item.get("remarks")
            normalized.append({
                "task_id": task_id,
                "actual_value": normalize_value_text(item.get("actualValue")),
                "remarks": remarks.strip() if isinstance(remarks, str) else "",
                "delete_attachment_ids": delete_ids,
            })
        return normalized

    @staticmethod
    def save_report(user_id: int, entries: Any,
                    files_by_task: Mapping[int, Sequence[FileStorage]] | None = None) -> Dict[str, Any]:
        """
        批量保存填报：所有条目在一个事务中提交，要么全部生效，要么全部回滚。
        不属于当前账号的任务静默忽略（影响行数为 0），其附件也不会落盘。
        """
        items = ReportService._normalize_entries(entries)
        files_by_task = files_by_task or {}

        owned = {t.id: t for t in TaskRepository.list_by_owner(user_id)}
        for item in items:
            task = owned.get(item["task_id"])
            if task and not is_valid_actual_value(task.target_type, item["actual_value"]):
                raise ValidationError(f"任务「{task.name}」的实际值不合法")

        # 先落盘新附件，事务失败时再清理
        new_files: Dict[int, List[dict]] = {}
        written: List[str] = []
        try:
            for item in items:
                if item["task_id"] not in owned:
                    continue
                for file in files_by_task.get(item["task_id"], []):
                    payload = StorageService.save_upload(file)
                    written.append(payload["stored_file_name"])
                    new_files.setdefault(item["task_id"], []).append(payload)
        except Exception:
            StorageService.remove_files(written)
            raise

        updated, ignored, removed_files = [], [], []
        reported_at = utcnow()
        try:
            with unit_of_work():
                for item in items:
                    rows = TaskRepository.update_report(
                        item["task_id"], user_id, item["actual_value"], item["remarks"], reported_at
                    )
                    if rows == 0:
                        ignored.append(item["task_id"])
                        continue
                    updated.append(item["task_id"])
                    removed_files.extend(AttachmentRepository.delete_for_owner(
                        item["delete_attachment_ids"], item["task_id"], user_id
                    ))
                    for payload in new_files.get(item["task_id"], []):
                        AttachmentRepository.add(item["task_id"], payload)
        except SQLAlchemyError:
            StorageService.remove_files(written)
            raise StorageError("保存填报数据失败")

        # 事务期间任务被替换或删除，预先落盘的附件不再有归属
        orphaned = [p["stored_file_name"] for tid in ignored for p in new_files.get(tid, [])]
        StorageService.remove_files(removed_files + orphaned)
        if ignored:
            logger.warning("report save ignored tasks not owned by user=%s: %s", user_id, ignored)
        logger.info("report saved user=%s updated=%d attachments=%d", user_id, len(updated), len(written) - len(orphaned))
        return {"updated": updated, "ignored": ignored}
