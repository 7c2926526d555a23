import uuid

import pytest

from api_client import APIClient
from app import create_app
from extensions.database import db
from services.auth_service import AuthService

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin"


@pytest.fixture
def app(tmp_path):
    """每个用例独立的内存库与附件目录"""
    app = create_app(
        "testing",
        overrides={
            "UPLOAD_DIR": str(tmp_path / "uploads"),
            "LOG_DIR": str(tmp_path / "logs"),
            "JWT_SECRET_KEY": "test-jwt-secret",
        },
    )
    with app.app_context():
        db.create_all()
        AuthService.ensure_default_admin(app)
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username, password):
    resp = client.post("/api/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]["token"]


@pytest.fixture
def admin_token(client):
    return login(client, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def api_client(client, admin_token):
    """已携带管理员 token 的客户端"""
    api = APIClient(client)
    api.set_token(admin_token)
    return api


@pytest.fixture
def anon_client(client):
    return APIClient(client)


@pytest.fixture
def make_enterprise(api_client):
    """
    由管理员创建企业账号，返回 {id, username, password}
    """
    def _create(tasks=None, **overrides):
        suffix = uuid.uuid4().hex[:6]
        payload = {
            "username": f"ent_{suffix}",
            "password": "Ent123!",
            "enterprise_name": f"测试企业_{suffix}",
            "tasks": tasks if tasks is not None else [
                {"name": "年度营收（万元）", "target_type": "number", "target_value": "50"},
                {"name": "是否完成上市辅导", "target_type": "boolean", "target_value": "是"},
            ],
        }
        payload.update(overrides)
        resp = api_client.request("POST", "/api/admin/accounts", json_data=payload)
        assert resp["_http_status"] == 200, resp
        return {"id": resp["data"]["id"], "username": payload["username"], "password": payload["password"]}

    return _create


@pytest.fixture
def enterprise_client(client, make_enterprise):
    """
    创建企业账号并登录，返回 (APIClient, account)
    """
    def _login(**kwargs):
        account = make_enterprise(**kwargs)
        api = APIClient(client)
        api.set_token(login(client, account["username"], account["password"]))
        return api, account

    return _login
