# -*- coding: utf-8 -*-
"""附件文件的本地存储。"""

from __future__ import annotations

import logging
import os
import uuid
from typing import Iterable, List, Optional

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from utils.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)


class StorageService:

    @staticmethod
    def _root() -> str:
        storage_dir = current_app.config.get("UPLOAD_DIR")
        if not storage_dir:
            raise StorageError("附件存储目录未配置")
        root = os.path.abspath(storage_dir)
        os.makedirs(root, exist_ok=True)
        return root

    @staticmethod
    def _generate_name(original_name: str) -> str:
        # 扩展名取自净化后的原始文件名，主体完全随机
        ext = os.path.splitext(secure_filename(original_name or ""))[1].lower()
        return f"{uuid.uuid4().hex}{ext}"

    @staticmethod
    def save_upload(file: FileStorage) -> dict:
        """
        将上传文件落盘，返回附件元数据：
        {"file_name", "stored_file_name", "mime_type", "size"}
        """
        original_name = os.path.basename((file.filename or "").replace("\\", "/"))
        if not original_name:
            raise ValidationError("附件缺少文件名")

        root = StorageService._root()
        stored_name = StorageService._generate_name(original_name)
        target = os.path.join(root, stored_name)
        try:
            file.save(target)
        except OSError as exc:
            logger.error("附件写入失败 %s: %s", target, exc)
            raise StorageError("附件保存失败") from exc

        return {
            "file_name": original_name,
            "stored_file_name": stored_name,
            "mime_type": file.mimetype or None,
            "size": os.path.getsize(target),
        }

    @staticmethod
    def remove_files(stored_names: Iterable[str]) -> List[str]:
        """删除磁盘文件，返回实际删除的文件名。缺失的文件跳过。"""
        removed = []
        root = StorageService._root()
        for name in stored_names:
            path = StorageService.resolve(name, root=root)
            if path is None or not os.path.exists(path):
                continue
            try:
                os.remove(path)
                removed.append(name)
            except OSError as exc:
                logger.warning("附件清理失败 %s: %s", path, exc)
        return removed

    @staticmethod
    def resolve(stored_name: str, root: Optional[str] = None) -> Optional[str]:
        """返回存储目录下的绝对路径；出现路径穿越时返回 None。"""
        if not stored_name:
            return None
        root = root or StorageService._root()
        target = os.path.abspath(os.path.join(root, os.path.normpath(stored_name)))
        if os.path.dirname(target) != root:
            return None
        return target
