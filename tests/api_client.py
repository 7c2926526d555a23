import json
from typing import Any, Dict, Optional


class APIClient:
    """基于 Flask test client 的统一请求封装，返回体附带 _http_status。"""

    def __init__(self, client):
        self.client = client
        self.token: Optional[str] = None

    def set_token(self, token: Optional[str]):
        self.token = token

    def request(self, method: str, path: str,
                params: Optional[Dict] = None,
                json_data: Optional[Any] = None,
                data: Optional[Dict] = None,
                headers: Optional[Dict] = None,
                attach_token: bool = True) -> Dict[str, Any]:
        request_headers = {}
        if headers:
            request_headers.update(headers)
        if attach_token and self.token:
            request_headers["Authorization"] = f"Bearer {self.token}"

        kwargs = {"headers": request_headers, "query_string": params}
        if data is not None:
            # multipart 上传
            kwargs["data"] = data
            kwargs["content_type"] = "multipart/form-data"
        elif json_data is not None:
            kwargs["json"] = json_data

        response = self.client.open(path, method=method.upper(), **kwargs)
        try:
            result = json.loads(response.get_data(as_text=True))
        except ValueError:
            result = {"_raw_text": response.get_data(as_text=True)}
        if not isinstance(result, dict):
            result = {"_raw": result}
        result["_http_status"] = response.status_code
        return result
