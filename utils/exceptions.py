# utils/exceptions.py
from typing import Any, Optional
from werkzeug.exceptions import HTTPException


class BizError(HTTPException):
    code: int  # HTTP 状态码
    message: str  # 业务提示
    data: Optional[Any]  # 附加数据

    def __init__(self, message: str = "业务异常", code: int = 400, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(description=message)


class Unauthenticated(BizError):
    """缺少 token、token 非法或已过期，或登录凭证错误。"""

    def __init__(self, message: str = "未授权", data: Any = None):
        super().__init__(message, code=401, data=data)


class Forbidden(BizError):
    def __init__(self, message: str = "权限不足", data: Any = None):
        super().__init__(message, code=403, data=data)


class Conflict(BizError):
    # 与对外接口约定保持一致：重复账号返回 400
    def __init__(self, message: str = "账号名已存在", data: Any = None):
        super().__init__(message, code=400, data=data)


class NotFound(BizError):
    def __init__(self, message: str = "未找到该账号信息", data: Any = None):
        super().__init__(message, code=404, data=data)


class ValidationError(BizError):
    def __init__(self, message: str = "参数不合法", data: Any = None):
        super().__init__(message, code=400, data=data)


class StorageError(BizError):
    """事务失败，已整体回滚。"""

    def __init__(self, message: str = "数据库错误", data: Any = None):
        super().__init__(message, code=500, data=data)
