# controllers/client_controller.py
import json
from collections import defaultdict

from flask import Blueprint, request

from constants.task import FILES_FIELD_PREFIX, LEGACY_FILE_FIELD_PREFIX
from controllers.auth_helpers import auth_required
from services.report_service import ReportService
from utils.exceptions import ValidationError
from utils.permissions import get_current_identity
from utils.response import json_response

client_bp = Blueprint("client", __name__, url_prefix="/api/client")


def _task_id_from_field(field_name: str):
    for prefix in (FILES_FIELD_PREFIX, LEGACY_FILE_FIELD_PREFIX):
        if field_name.startswith(prefix):
            suffix = field_name[len(prefix):]
            return int(suffix) if suffix.isdigit() else None
    return None


def _collect_files():
    """按任务归集上传文件：files_<taskId>（多文件）与 file_<taskId>（单文件）。"""
    files_by_task = defaultdict(list)
    for field_name in request.files:
        task_id = _task_id_from_field(field_name)
        if task_id is None:
            continue
        for file in request.files.getlist(field_name):
            if file and file.filename:
                files_by_task[task_id].append(file)
    return files_by_task


@client_bp.get("/tasks")
@auth_required()
def list_own_tasks():
    identity = get_current_identity()
    tasks = ReportService.get_own_tasks(identity.user_id)
    return json_response(data=[t.to_dict() for t in tasks])


@client_bp.post("/save-all")
@auth_required()
def save_all():
    """
    multipart/form-data:
      data: JSON 数组 [{taskId, actualValue, remarks, deleteAttachmentIds}]
      files_<taskId>: 该任务的新附件（可多个）
    """
    identity = get_current_identity()
    raw = request.form.get("data")
    if raw is None:
        body = request.get_json(silent=True)
        entries = body.get("data") if isinstance(body, dict) else body
    else:
        try:
            entries = json.loads(raw)
        except ValueError:
            raise ValidationError("data 必须为合法的 JSON")
    if entries is None:
        raise ValidationError("缺少填报数据")

    result = ReportService.save_report(identity.user_id, entries, _collect_files())
    return json_response(message="保存成功", data=result)
