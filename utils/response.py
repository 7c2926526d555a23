# utils/response.py
from flask import jsonify


def json_response(message="success", data=None, code=200):
    """统一响应结构 {code, message, data}，HTTP 状态码与 code 一致。"""
    resp = jsonify({"code": code, "message": message, "data": data})
    resp.status_code = code
    return resp


def page_payload(items, total, page, page_size, key="items"):
    return {key: items, "total": total, "page": page, "page_size": page_size}
