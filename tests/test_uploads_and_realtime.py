import re
from unittest.mock import MagicMock

import pytest
import redis
from botocore.exceptions import ClientError
from conftest import auth_headers, register

from nursecare.routes import uploads
from nursecare.services import realtime


@pytest.fixture
def r2(monkeypatch):
    r2_client = MagicMock()
    r2_client.generate_presigned_url.return_value = "https://r2.test/signed"
    monkeypatch.setattr(uploads, "get_r2_client", lambda: r2_client)
    monkeypatch.setattr(uploads, "R2_PUBLIC_URL", "https://cdn.test/")
    return r2_client


@pytest.fixture
def user(client):
    data = register(client, "uploader@example.com")
    return {"id": data["user"]["id"], "headers": auth_headers(data["access_token"])}


def test_profile_image_upload_is_public(client, r2, user):
    response = client.post(
        "/uploads/profile-images",
        files={"file": ("Me Photo.PNG", b"\x89PNG data", "image/png")},
        headers=user["headers"],
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert re.fullmatch(rf"profile-images/{user['id']}/\d+-[0-9a-f]{{8}}\.png", body["key"])
    assert body["url"] == f"https://cdn.test/{body['key']}"
    assert body["size"] == 9

    kwargs = r2.put_object.call_args.kwargs
    assert kwargs["Key"] == body["key"]
    assert kwargs["ContentType"] == "image/png"


def test_private_upload_with_folder(client, r2, user):
    response = client.post(
        "/uploads/care-logs",
        files={"file": ("chart.pdf", b"%PDF-1.4", "application/pdf")},
        data={"folder": "client-7"},
        headers=user["headers"],
    )
    assert response.status_code == 200
    body = response.json()
    assert body["key"].startswith(f"care-logs/{user['id']}/client-7/")
    assert "url" not in body


def test_upload_rejections(client, r2, user):
    pdf = {"file": ("notes.pdf", b"%PDF", "application/pdf")}
    assert client.post("/uploads/profile-images", files=pdf, headers=user["headers"]).status_code == 400
    assert client.post("/uploads/secrets", files=pdf, headers=user["headers"]).status_code == 400
    assert client.post(
        "/uploads/documents", files=pdf, data={"folder": "../etc"}, headers=user["headers"]
    ).status_code == 400

    too_big = {"file": ("big.png", b"x" * (5 * 1024 * 1024 + 1), "image/png")}
    assert client.post("/uploads/profile-images", files=too_big, headers=user["headers"]).status_code == 400
    r2.put_object.assert_not_called()


def test_storage_failure_is_reported(client, r2, user):
    r2.put_object.side_effect = ClientError({"Error": {"Code": "500", "Message": "down"}}, "PutObject")
    response = client.post(
        "/uploads/documents",
        files={"file": ("a.pdf", b"%PDF", "application/pdf")},
        headers=user["headers"],
    )
    assert response.status_code == 500


def test_signed_url_and_delete_are_owner_only(client, r2, user):
    own_key = f"documents/{user['id']}/1700000000000-abcdef12.pdf"
    signed = client.get("/uploads/signed-url", params={"key": own_key}, headers=user["headers"])
    assert signed.json() == {"url": "https://r2.test/signed", "expires_in": 3600}
    params = r2.generate_presigned_url.call_args.kwargs["Params"]
    assert params["Key"] == own_key
    assert params["ResponseContentDisposition"] == "inline"

    other_key = f"documents/{user['id'] + 1}/1700000000000-abcdef12.pdf"
    assert client.get("/uploads/signed-url", params={"key": other_key}, headers=user["headers"]).status_code == 403
    assert client.delete("/uploads", params={"key": other_key}, headers=user["headers"]).status_code == 403
    assert client.delete(
        "/uploads", params={"key": f"documents/{user['id']}/../x.pdf"}, headers=user["headers"]
    ).status_code == 403

    deleted = client.delete("/uploads", params={"key": own_key}, headers=user["headers"])
    assert deleted.json() == {"message": "File deleted", "key": own_key}
    r2.delete_object.assert_called_once()


def test_publish_change_without_redis_is_a_no_op():
    assert realtime.change_feed_enabled() is False
    assert realtime.publish_change("staff_shifts", "INSERT", 1, organization_id=1) == 0


def test_publish_change_targets_org_and_user_channels(monkeypatch):
    fake = MagicMock()
    monkeypatch.setattr(realtime, "redis_client", fake)

    published = realtime.publish_change("staff_shifts", "UPDATE", 5, organization_id=2, user_ids=[7, None])
    assert published == 2
    channels = [c.args[0] for c in fake.publish.call_args_list]
    assert channels == ["changes:org:2", "changes:user:7"]
    assert '"id": 5' in fake.publish.call_args_list[0].args[1]

    assert realtime.publish_change("staff_shifts", "UPDATE", 5) == 0


def test_publish_change_fails_open(monkeypatch):
    fake = MagicMock()
    fake.publish.side_effect = redis.ConnectionError("refused")
    monkeypatch.setattr(realtime, "redis_client", fake)
    assert realtime.publish_change("messages", "INSERT", 1, user_ids=[1]) == 0


def test_stream_requires_token_and_configured_feed(client, user):
    assert client.get("/realtime/stream").status_code == 401
    assert client.get("/realtime/stream", params={"token": "garbage"}).status_code == 401
    token = user["headers"]["Authorization"].split(" ", 1)[1]
    assert client.get("/realtime/stream", params={"token": token}).status_code == 503
