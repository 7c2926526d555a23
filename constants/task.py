# constants/task.py
"""
考核任务相关的枚举与常量：
  - 目标类型 TargetType: number / boolean
  - 布尔目标的取值：是 / 否
  - 填报状态 ReportStatus: reported / not reported
"""

from enum import Enum


class TargetType(str, Enum):
    NUMBER = "number"
    BOOLEAN = "boolean"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


BOOLEAN_YES = "是"
BOOLEAN_NO = "否"
BOOLEAN_VALUES = (BOOLEAN_YES, BOOLEAN_NO)


class ReportStatus(str, Enum):
    REPORTED = "reported"
    NOT_REPORTED = "not reported"


REPORT_STATUS_LABELS_ZH = {
    ReportStatus.REPORTED.value: "已填报",
    ReportStatus.NOT_REPORTED.value: "未填报",
}

# 附件上传的表单字段前缀：files_<taskId> 支持多文件，file_<taskId> 为单文件旧字段
FILES_FIELD_PREFIX = "files_"
LEGACY_FILE_FIELD_PREFIX = "file_"
