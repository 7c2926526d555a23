import io
import json
import os

from sqlalchemy.exc import SQLAlchemyError

from api_client import APIClient
from models.attachment import Attachment
from models.task import Task
from repositories.attachment_repository import AttachmentRepository
from repositories.task_repository import TaskRepository


def _save(api, entries, files=None):
    data = {"data": json.dumps(entries, ensure_ascii=False)}
    if files:
        data.update(files)
    return api.request("POST", "/api/client/save-all", data=data)


def _upload(content=b"proof", name="proof.pdf"):
    return io.BytesIO(content), name


# ----------------------- 查看 -----------------------

def test_new_account_tasks_start_unreported(enterprise_client):
    ent, _ = enterprise_client()
    resp = ent.request("GET", "/api/client/tasks")
    assert resp["_http_status"] == 200, resp
    for task in resp["data"]:
        assert task["actual_value"] is None
        assert task["updated_at"] is None
        assert task["progress"] == 0
        assert task["attachments"] == []


def test_admin_has_no_tasks(api_client):
    resp = api_client.request("GET", "/api/client/tasks")
    assert resp["_http_status"] == 200, resp
    assert resp["data"] == []


# ----------------------- 填报 -----------------------

def test_report_flow_updates_progress(enterprise_client, api_client, anon_client):
    ent, account = enterprise_client()
    revenue, listed = ent.request("GET", "/api/client/tasks")["data"]

    resp = _save(ent, [{"taskId": revenue["id"], "actualValue": "20", "remarks": " 一季度 "}])
    assert resp["_http_status"] == 200, resp
    assert resp["data"]["updated"] == [revenue["id"]]

    tasks = {t["id"]: t for t in ent.request("GET", "/api/client/tasks")["data"]}
    assert tasks[revenue["id"]]["progress"] == 40
    assert tasks[revenue["id"]]["remarks"] == "一季度"
    assert tasks[revenue["id"]]["updated_at"].endswith("+08:00")
    assert tasks[listed["id"]]["updated_at"] is None

    _save(ent, [
        {"taskId": revenue["id"], "actualValue": 50},
        {"taskId": listed["id"], "actualValue": "是"},
    ])
    tasks = ent.request("GET", "/api/client/tasks")["data"]
    assert [t["progress"] for t in tasks] == [100, 100]
    assert tasks[0]["actual_value"] == "50"

    # 删除账号后无法再登录
    api_client.request("DELETE", f"/api/admin/accounts/{account['id']}")
    resp = anon_client.request(
        "POST", "/api/login", json_data={"username": account["username"], "password": account["password"]}
    )
    assert resp["_http_status"] == 401


def test_clearing_actual_value_resets_progress(enterprise_client):
    ent, _ = enterprise_client()
    revenue = ent.request("GET", "/api/client/tasks")["data"][0]
    _save(ent, [{"taskId": revenue["id"], "actualValue": "30"}])
    _save(ent, [{"taskId": revenue["id"], "actualValue": ""}])

    task = ent.request("GET", "/api/client/tasks")["data"][0]
    assert task["actual_value"] == ""
    assert task["progress"] == 0
    # 提交过即视为已填报
    assert task["updated_at"] is not None


def test_foreign_task_is_ignored(enterprise_client):
    alice, _ = enterprise_client()
    bob, _ = enterprise_client()
    bob_task = bob.request("GET", "/api/client/tasks")["data"][0]
    alice_task = alice.request("GET", "/api/client/tasks")["data"][0]

    resp = _save(
        alice,
        [
            {"taskId": alice_task["id"], "actualValue": "5"},
            {"taskId": bob_task["id"], "actualValue": "999"},
        ],
        files={f"files_{bob_task['id']}": _upload(b"sneaky", "sneaky.txt")},
    )
    assert resp["_http_status"] == 200, resp
    assert resp["data"]["updated"] == [alice_task["id"]]
    assert resp["data"]["ignored"] == [bob_task["id"]]

    unchanged = bob.request("GET", "/api/client/tasks")["data"][0]
    assert unchanged["actual_value"] is None
    assert unchanged["updated_at"] is None
    assert Attachment.query.count() == 0


def test_invalid_actual_value_rejects_whole_batch(enterprise_client):
    ent, _ = enterprise_client()
    revenue, listed = ent.request("GET", "/api/client/tasks")["data"]

    resp = _save(ent, [
        {"taskId": revenue["id"], "actualValue": "10"},
        {"taskId": listed["id"], "actualValue": "也许"},
    ])
    assert resp["_http_status"] == 400, resp
    assert Task.query.filter(Task.updated_at.isnot(None)).count() == 0


def test_negative_number_is_rejected(enterprise_client):
    ent, _ = enterprise_client()
    revenue = ent.request("GET", "/api/client/tasks")["data"][0]
    resp = _save(ent, [{"taskId": revenue["id"], "actualValue": "-3"}])
    assert resp["_http_status"] == 400, resp


def test_malformed_payload(enterprise_client):
    ent, _ = enterprise_client()
    resp = ent.request("POST", "/api/client/save-all", data={"data": "{not json"})
    assert resp["_http_status"] == 400, resp

    resp = ent.request("POST", "/api/client/save-all", data={"data": json.dumps({"taskId": 1})})
    assert resp["_http_status"] == 400, resp

    resp = ent.request("POST", "/api/client/save-all", data={"data": json.dumps([{"actualValue": "1"}])})
    assert resp["_http_status"] == 400, resp


def test_save_requires_login(anon_client):
    resp = anon_client.request("POST", "/api/client/save-all", data={"data": "[]"})
    assert resp["_http_status"] == 401, resp


# ----------------------- 附件 -----------------------

def test_attachment_upload_download_and_delete(app, enterprise_client, client):
    ent, _ = enterprise_client()
    revenue = ent.request("GET", "/api/client/tasks")["data"][0]

    resp = _save(
        ent,
        [{"taskId": revenue["id"], "actualValue": "25"}],
        files={f"files_{revenue['id']}": [_upload(b"first", "report.pdf"), _upload(b"second", "scan.png")]},
    )
    assert resp["_http_status"] == 200, resp

    task = ent.request("GET", "/api/client/tasks")["data"][0]
    assert [a["name"] for a in task["attachments"]] == ["report.pdf", "scan.png"]
    first, second = task["attachments"]
    assert first["path"] != "report.pdf"
    assert first["size"] == len(b"first")

    download = client.get(f"/api/download/{first['path']}")
    assert download.status_code == 200
    assert download.data == b"first"
    assert "attachment" in download.headers["Content-Disposition"]
    download.close()

    resp = _save(ent, [{"taskId": revenue["id"], "actualValue": "25", "deleteAttachmentIds": [first["id"]]}])
    assert resp["_http_status"] == 200, resp

    task = ent.request("GET", "/api/client/tasks")["data"][0]
    assert [a["id"] for a in task["attachments"]] == [second["id"]]
    assert not os.path.exists(os.path.join(app.config["UPLOAD_DIR"], first["path"]))
    assert client.get(f"/api/download/{first['path']}").status_code == 404


def test_cannot_delete_foreign_attachment(enterprise_client):
    alice, _ = enterprise_client()
    bob, _ = enterprise_client()
    bob_task = bob.request("GET", "/api/client/tasks")["data"][0]
    alice_task = alice.request("GET", "/api/client/tasks")["data"][0]
    _save(bob, [{"taskId": bob_task["id"], "actualValue": "1"}],
          files={f"files_{bob_task['id']}": _upload()})
    bob_attachment = bob.request("GET", "/api/client/tasks")["data"][0]["attachments"][0]

    _save(alice, [{"taskId": alice_task["id"], "actualValue": "1", "deleteAttachmentIds": [bob_attachment["id"]]}])

    still_there = bob.request("GET", "/api/client/tasks")["data"][0]["attachments"]
    assert [a["id"] for a in still_there] == [bob_attachment["id"]]


def test_single_file_field_is_accepted(enterprise_client):
    ent, _ = enterprise_client()
    revenue = ent.request("GET", "/api/client/tasks")["data"][0]
    _save(ent, [{"taskId": revenue["id"], "actualValue": "1"}],
          files={f"file_{revenue['id']}": _upload(b"x", "a.txt")})

    task = ent.request("GET", "/api/client/tasks")["data"][0]
    assert [a["name"] for a in task["attachments"]] == ["a.txt"]


def test_deleting_account_removes_files(app, api_client, enterprise_client):
    ent, account = enterprise_client()
    revenue = ent.request("GET", "/api/client/tasks")["data"][0]
    _save(ent, [{"taskId": revenue["id"], "actualValue": "1"}], files={f"files_{revenue['id']}": _upload()})
    stored = ent.request("GET", "/api/client/tasks")["data"][0]["attachments"][0]["path"]
    assert os.path.exists(os.path.join(app.config["UPLOAD_DIR"], stored))

    api_client.request("DELETE", f"/api/admin/accounts/{account['id']}")

    assert not os.path.exists(os.path.join(app.config["UPLOAD_DIR"], stored))
    assert Attachment.query.count() == 0


def test_download_rejects_traversal(client):
    assert client.get("/api/download/../app.py").status_code == 404
    assert client.get("/api/download/missing.pdf").status_code == 404


def test_acme_end_to_end(api_client, anon_client, client):
    resp = api_client.request(
        "POST",
        "/api/admin/accounts",
        json_data={
            "username": "acme",
            "password": "pw1",
            "enterprise_name": "Acme",
            "tasks": [{"name": "产值", "target_type": "number", "target_value": 100}],
        },
    )
    assert resp["_http_status"] == 200, resp
    acme_id = resp["data"]["id"]

    login = anon_client.request("POST", "/api/login", json_data={"username": "acme", "password": "pw1"})
    assert login["_http_status"] == 200, login
    acme = APIClient(client)
    acme.set_token(login["data"]["token"])
    task_id = acme.request("GET", "/api/client/tasks")["data"][0]["id"]

    _save(acme, [{"taskId": task_id, "actualValue": 40}])
    assert acme.request("GET", "/api/client/tasks")["data"][0]["progress"] == 40

    _save(acme, [{"taskId": task_id, "actualValue": 120}])
    assert acme.request("GET", "/api/client/tasks")["data"][0]["progress"] == 100

    api_client.request("DELETE", f"/api/admin/accounts/{acme_id}")
    again = anon_client.request("POST", "/api/login", json_data={"username": "acme", "password": "pw1"})
    assert again["_http_status"] == 401
    assert again["message"] == "账号或密码错误"


def _stored_files(app):
    upload_dir = app.config["UPLOAD_DIR"]
    return os.listdir(upload_dir) if os.path.isdir(upload_dir) else []


def test_failure_mid_transaction_rolls_back_batch(app, enterprise_client, monkeypatch):
    ent, _ = enterprise_client()
    revenue, listed = ent.request("GET", "/api/client/tasks")["data"]
    original_add = AttachmentRepository.add

    def add_then_fail(task_id, payload):
        if task_id == listed["id"]:
            raise SQLAlchemyError("disk full")
        return original_add(task_id, payload)

    monkeypatch.setattr(AttachmentRepository, "add", staticmethod(add_then_fail))

    resp = _save(
        ent,
        [
            {"taskId": revenue["id"], "actualValue": "10"},
            {"taskId": listed["id"], "actualValue": "是"},
        ],
        files={
            f"files_{revenue['id']}": _upload(b"a", "a.pdf"),
            f"files_{listed['id']}": _upload(b"b", "b.pdf"),
        },
    )
    assert resp["_http_status"] == 500, resp
    assert resp["message"] == "保存填报数据失败"
    assert Task.query.filter(Task.updated_at.isnot(None)).count() == 0
    assert Attachment.query.count() == 0
    assert _stored_files(app) == []


def test_task_vanishing_during_save_leaves_no_orphan_file(app, enterprise_client, monkeypatch):
    ent, _ = enterprise_client()
    revenue = ent.request("GET", "/api/client/tasks")["data"][0]

    # 模拟校验之后任务被管理员替换：更新命中 0 行
    monkeypatch.setattr(TaskRepository, "update_report", staticmethod(lambda *args, **kwargs: 0))

    resp = _save(
        ent,
        [{"taskId": revenue["id"], "actualValue": "10"}],
        files={f"files_{revenue['id']}": _upload()},
    )
    assert resp["_http_status"] == 200, resp
    assert resp["data"]["ignored"] == [revenue["id"]]
    assert Attachment.query.count() == 0
    assert _stored_files(app) == []
