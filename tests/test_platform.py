import base64
import json
import uuid

import httpx
import pytest

from app.core.errors import DownstreamError, ValidationError
from app.core.security import Principal, principal_from_claims
from app.platform.adapters.mailer_http import HttpMailer
from app.platform.adapters.storage_local import LocalFilesystemStorage
from app.platform.ports.mailer import MailAttachment, MailMessage
from app.platform.ports.object_storage import UploadOptions, asset_upload_options, check_upload, object_key


def test_object_keys_are_unique_per_upload():
    a = object_key("pixelpim/assets/", "Photo.PNG")
    b = object_key("pixelpim/assets", "Photo.PNG")
    assert a != b
    assert a.startswith("pixelpim/assets/") and a.endswith(".png")
    assert "." not in object_key("x", "README").split("/")[-1]


def test_check_upload_limits():
    options = UploadOptions(max_file_size=10, allowed_formats=("png", "jpg"))
    check_upload("ok.PNG", 10, options)
    with pytest.raises(ValidationError, match="exceeds"):
        check_upload("ok.png", 11, options)
    with pytest.raises(ValidationError, match="Invalid file format"):
        check_upload("doc.pdf", 1, options)


def test_asset_preset_accepts_any_format():
    options = asset_upload_options()
    assert options.resource_type == "auto"
    assert options.max_file_size == 50 * 1024 * 1024
    check_upload("anything.bin", 1024, options)


def test_local_storage_round_trip(tmp_path):
    storage = LocalFilesystemStorage(str(tmp_path))
    first = storage.upload(b"same", filename="a.txt", content_type="text/plain", options=UploadOptions(folder="assets"))
    second = storage.upload(b"same", filename="a.txt", content_type="text/plain", options=UploadOptions(folder="assets"))

    assert first.provider_id != second.provider_id
    assert first.byte_size == 4
    assert first.secure_url == storage.resolve_url(first.provider_id)
    assert (tmp_path / first.provider_id).read_bytes() == b"same"

    storage.delete(first.provider_id)
    assert not (tmp_path / first.provider_id).exists()
    assert (tmp_path / second.provider_id).exists()
    # deleting twice is harmless
    storage.delete(first.provider_id)


def message() -> MailMessage:
    return MailMessage(
        to=["support@example.com"],
        subject="Hi",
        html="<p>hi</p>",
        reply_to="sam@example.com",
        attachments=[MailAttachment("a.csv", "text/csv", b"a,b")],
    )


async def test_http_mailer_posts_json_with_bearer_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(202, json={"id": "msg_1"})

    mailer = HttpMailer("https://mail.test/send", "key-123", "PIM <pim@example.com>", transport=httpx.MockTransport(handler))
    await mailer.send(message())

    assert seen["auth"] == "Bearer key-123"
    assert seen["body"]["to"] == ["support@example.com"]
    assert seen["body"]["reply_to"] == "sam@example.com"
    assert base64.b64decode(seen["body"]["attachments"][0]["content"]) == b"a,b"


async def test_http_mailer_maps_rejections_to_downstream_errors():
    mailer = HttpMailer(
        "https://mail.test/send",
        transport=httpx.MockTransport(lambda request: httpx.Response(422, text="bad sender")),
    )
    with pytest.raises(DownstreamError):
        await mailer.send(message())


async def test_unconfigured_http_mailer_fails_on_send(monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "MAIL_API_URL", None)
    with pytest.raises(DownstreamError, match="not configured"):
        await HttpMailer().send(message())


def test_scope_grants():
    p = Principal(user_id=uuid.uuid4(), scopes=["assets:*", "families:read"])
    assert p.grants("assets:write")
    assert p.grants("families:read")
    assert not p.grants("families:write")
    assert Principal(user_id=uuid.uuid4(), scopes=["*"]).grants("anything:at-all")


def test_principal_from_claims_accepts_space_delimited_scopes():
    uid = uuid.uuid4()
    p = principal_from_claims({"sub": str(uid), "scopes": "assets:read notifications:read"})
    assert p.user_id == uid
    assert p.scopes == ["assets:read", "notifications:read"]


@pytest.mark.parametrize("claims", [{}, {"sub": "42"}])
def test_principal_from_claims_rejects_bad_subjects(claims):
    from fastapi import HTTPException

    with pytest.raises(HTTPException) as exc:
        principal_from_claims(claims)
    assert exc.value.status_code == 401
