# -*- coding: utf-8 -*-
"""附件下载接口."""

from __future__ import annotations

import os

from flask import Blueprint, send_file

from repositories.attachment_repository import AttachmentRepository
from services.storage_service import StorageService
from utils.exceptions import NotFound


attachment_bp = Blueprint("attachment", __name__, url_prefix="/api/download")


@attachment_bp.get("/<path:filename>")
def download(filename: str):
    """根据存储文件名返回附件内容，下载名使用原始上传名."""

    # 防止路径穿越访问其他目录
    target_path = StorageService.resolve(filename)
    if target_path is None or not os.path.isfile(target_path):
        raise NotFound("文件不存在")

    attachment = AttachmentRepository.find_by_stored_name(filename)
    download_name = attachment.file_name if attachment else filename
    return send_file(target_path, as_attachment=True, download_name=download_name, conditional=True)
