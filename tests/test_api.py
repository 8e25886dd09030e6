"""HTTP surface, exercised in-process through httpx.ASGITransport."""

import uuid

import pytest

from app.core.config import settings

from conftest import add_asset, add_group, at, auth

API = "/api/v1"


async def upload(client, user_id, name, data=b"x" * 1536, group_id=None, filename="hero.png"):
    form = {"name": name}
    if group_id is not None:
        form["assetGroupId"] = str(group_id)
    return await client.post(
        f"{API}/assets/upload",
        files={"file": (filename, data, "image/png")},
        data=form,
        headers=auth(user_id),
    )


async def test_health(client):
    res = await client.get(f"{API}/health")
    assert res.json() == {"status": "ok"}


async def test_missing_token_is_unauthorized(client):
    res = await client.get(f"{API}/assets")
    assert res.status_code == 401


async def test_scopes_are_enforced(client, user_id):
    res = await client.get(f"{API}/assets", headers=auth(user_id, scopes=["families:read"]))
    assert res.status_code == 403
    res = await client.get(f"{API}/assets", headers=auth(user_id, scopes=["assets:read"]))
    assert res.status_code == 200


async def test_upload_returns_camel_case_asset(client, user_id, storage):
    res = await upload(client, user_id, "hero")

    assert res.status_code == 201
    body = res.json()
    assert body["name"] == "hero"
    assert body["fileName"] == "hero.png"
    assert body["mimeType"] == "image/png"
    assert body["size"] == 1536
    assert body["formattedSize"] == "1.5 KB"
    assert body["url"] == f"https://cdn.test/{storage.uploads[0]}"
    assert body["assetGroupId"] is None


async def test_upload_without_file_is_a_client_error(client, user_id):
    res = await client.post(f"{API}/assets/upload", data={"name": "hero"}, headers=auth(user_id))
    assert res.status_code == 400
    assert res.json() == {"message": "File is required"}


async def test_upload_into_someone_elses_group_is_not_found(client, session, user_id, other_user_id, storage):
    theirs = await add_group(session, other_user_id)
    res = await upload(client, user_id, "hero", group_id=theirs.id)
    assert res.status_code == 404
    assert storage.uploads == []


async def test_upload_storage_failure_is_bad_gateway(client, user_id, storage):
    storage.fail_upload = True
    res = await upload(client, user_id, "hero")
    assert res.status_code == 502
    assert "message" in res.json()


async def test_duplicate_upload_name_conflicts(client, user_id):
    assert (await upload(client, user_id, "hero")).status_code == 201
    res = await upload(client, user_id, "hero")
    assert res.status_code == 409


async def test_listing_pages_through_fifteen_assets(client, session, user_id):
    for i in range(15):
        await add_asset(session, user_id, f"asset-{i:02d}")

    first = (await client.get(f"{API}/assets", params={"page": 1, "limit": 10}, headers=auth(user_id))).json()
    second = (await client.get(f"{API}/assets", params={"page": 2, "limit": 10}, headers=auth(user_id))).json()

    assert len(first["data"]) == 10
    assert first["pagination"] == {"page": 1, "limit": 10, "total": 15, "totalPages": 2, "hasNext": True, "hasPrev": False}
    assert len(second["data"]) == 5
    assert second["pagination"]["hasNext"] is False
    assert second["pagination"]["hasPrev"] is True


async def test_listing_filters_by_group_presence(client, session, user_id):
    group = await add_group(session, user_id)
    await add_asset(session, user_id, "grouped", group_id=group.id)
    await add_asset(session, user_id, "loose")

    res = await client.get(f"{API}/assets", params={"hasGroup": "true"}, headers=auth(user_id))
    assert [a["name"] for a in res.json()["data"]] == ["grouped"]
    assert res.json()["data"][0]["assetGroup"]["id"] == str(group.id)


@pytest.mark.parametrize(
    "params",
    [{"sortBy": "checksum"}, {"minSize": "10", "maxSize": "1"}, {"dateFilter": "soon"}, {"page": "0"}],
)
async def test_listing_rejects_malformed_filters(client, user_id, params):
    res = await client.get(f"{API}/assets", params=params, headers=auth(user_id))
    assert res.status_code == 400
    assert "message" in res.json()


async def test_listing_accepts_naive_and_aware_bounds_together(client, session, user_id):
    await add_asset(session, user_id, "inside", created_at=at(3))
    await add_asset(session, user_id, "outside", created_at=at(9))

    params = {"createdAfter": "2024-01-01T00:00:00", "createdBefore": "2024-01-05T00:00:00Z"}
    res = await client.get(f"{API}/assets", params=params, headers=auth(user_id))

    assert res.status_code == 200
    assert [a["name"] for a in res.json()["data"]] == ["inside"]


async def test_reversed_mixed_bounds_are_a_client_error(client, user_id):
    params = {"createdAfter": "2024-01-09T00:00:00", "createdBefore": "2024-01-05T00:00:00Z"}
    res = await client.get(f"{API}/families", params=params, headers=auth(user_id))
    assert res.status_code == 400
    assert "message" in res.json()


async def test_oversized_upload_uses_the_common_error_body(client, user_id, storage, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 1024)

    res = await upload(client, user_id, "hero", data=b"x" * 2048)

    assert res.status_code == 413
    assert set(res.json()) == {"message"}
    assert storage.uploads == []


async def test_wide_sizes_are_serialized_as_strings(client, session, user_id):
    huge = 2**60
    asset = await add_asset(session, user_id, "archive", size=huge)

    body = (await client.get(f"{API}/assets/{asset.id}", headers=auth(user_id))).json()

    assert body["size"] == str(huge)
    assert body["formattedSize"] == "1048576 TB"


async def test_other_users_asset_is_not_found(client, session, user_id, other_user_id):
    theirs = await add_asset(session, other_user_id, "theirs")
    for method in ("get", "delete"):
        res = await getattr(client, method)(f"{API}/assets/{theirs.id}", headers=auth(user_id))
        assert res.status_code == 404
    res = await client.patch(f"{API}/assets/{theirs.id}", json={"name": "mine"}, headers=auth(user_id))
    assert res.status_code == 404


async def test_patch_moves_asset_and_updates_group_totals(client, session, user_id):
    g1 = (await client.post(f"{API}/asset-groups", json={"name": "one"}, headers=auth(user_id))).json()
    g2 = (await client.post(f"{API}/asset-groups", json={"name": "two"}, headers=auth(user_id))).json()
    asset = (await upload(client, user_id, "hero", data=b"x" * 100, group_id=g1["id"])).json()

    res = await client.patch(f"{API}/assets/{asset['id']}", json={"assetGroupId": g2["id"]}, headers=auth(user_id))

    assert res.status_code == 200
    assert res.json()["assetGroup"]["totalSize"] == 100
    one = (await client.get(f"{API}/asset-groups/{g1['id']}", headers=auth(user_id))).json()
    two = (await client.get(f"{API}/asset-groups/{g2['id']}", headers=auth(user_id))).json()
    assert (one["totalSize"], one["assetCount"]) == (0, 0)
    assert (two["totalSize"], two["assetCount"]) == (100, 1)


async def test_delete_asset_even_when_storage_delete_fails(client, user_id, storage):
    asset = (await upload(client, user_id, "hero")).json()
    storage.fail_delete = True

    res = await client.delete(f"{API}/assets/{asset['id']}", headers=auth(user_id))

    assert res.status_code == 200
    assert res.json() == {"message": "Asset deleted successfully"}
    assert (await client.get(f"{API}/assets/{asset['id']}", headers=auth(user_id))).status_code == 404


async def test_asset_group_lifecycle(client, user_id):
    created = await client.post(f"{API}/asset-groups", json={"name": "Campaign"}, headers=auth(user_id))
    assert created.status_code == 201
    group_id = created.json()["id"]
    assert (await client.post(f"{API}/asset-groups", json={"name": "Campaign"}, headers=auth(user_id))).status_code == 409

    a = (await upload(client, user_id, "a", data=b"x" * 10)).json()
    b = (await upload(client, user_id, "b", data=b"x" * 20)).json()
    attached = await client.post(
        f"{API}/asset-groups/{group_id}/attach-assets",
        json={"assetIds": [a["id"], b["id"]]},
        headers=auth(user_id),
    )
    assert attached.json()["attachedCount"] == 2

    listed = (await client.get(f"{API}/asset-groups", params={"hasAssets": "true"}, headers=auth(user_id))).json()
    assert [(g["name"], g["assetCount"], g["totalSize"]) for g in listed["data"]] == [("Campaign", 2, 30)]

    members = (await client.get(f"{API}/asset-groups/{group_id}/assets", params={"sortBy": "name"}, headers=auth(user_id))).json()
    assert [m["name"] for m in members["data"]] == ["a", "b"]

    renamed = await client.patch(f"{API}/asset-groups/{group_id}", json={"name": "Renamed"}, headers=auth(user_id))
    assert renamed.json()["name"] == "Renamed"

    assert (await client.delete(f"{API}/asset-groups/{group_id}", headers=auth(user_id))).status_code == 200
    loose = (await client.get(f"{API}/assets", params={"hasGroup": "false"}, headers=auth(user_id))).json()
    assert loose["pagination"]["total"] == 2


async def test_reconcile_endpoint(client, session, user_id):
    group = await add_group(session, user_id, total_size=777)
    await add_asset(session, user_id, "a", size=5, group_id=group.id)

    res = await client.post(f"{API}/asset-groups/reconcile", headers=auth(user_id))

    assert res.json()["groups"] == 1
    body = (await client.get(f"{API}/asset-groups/{group.id}", headers=auth(user_id))).json()
    assert body["totalSize"] == 5


async def test_family_crud(client, user_id, other_user_id):
    for name in ("Shoes", "Apparel", "Bags"):
        assert (await client.post(f"{API}/families", json={"name": name}, headers=auth(user_id))).status_code == 201

    listed = (await client.get(f"{API}/families", headers=auth(user_id))).json()
    assert [f["name"] for f in listed["data"]] == ["Apparel", "Bags", "Shoes"]

    shoes = next(f for f in listed["data"] if f["name"] == "Shoes")
    conflict = await client.patch(f"{API}/families/{shoes['id']}", json={"name": "Bags"}, headers=auth(user_id))
    assert conflict.status_code == 409
    assert conflict.json() == {"message": "Family with this name already exists"}

    assert (await client.get(f"{API}/families/{shoes['id']}", headers=auth(other_user_id))).status_code == 404
    assert (await client.delete(f"{API}/families/{shoes['id']}", headers=auth(user_id))).status_code == 200
    searched = (await client.get(f"{API}/families", params={"search": "ap"}, headers=auth(user_id))).json()
    assert [f["name"] for f in searched["data"]] == ["Apparel"]
    await client.post(f"{API}/families", json={"name": "100% cotton"}, headers=auth(user_id))
    literal = (await client.get(f"{API}/families", params={"search": "%"}, headers=auth(user_id))).json()
    assert [f["name"] for f in literal["data"]] == ["100% cotton"]


async def test_notifications_endpoints(client, user_id):
    await upload(client, user_id, "hero")
    await client.post(f"{API}/families", json={"name": "Shoes"}, headers=auth(user_id))

    listed = (await client.get(f"{API}/notifications", params={"entityType": "asset"}, headers=auth(user_id))).json()
    assert [n["message"] for n in listed["data"]] == ['Asset "hero" was created']

    stats = (await client.get(f"{API}/notifications/stats", headers=auth(user_id))).json()
    assert stats["totalNotifications"] == 2
    assert stats["byEntityType"] == {"asset": 1, "family": 1}

    cleanup = (await client.delete(f"{API}/notifications/cleanup", headers=auth(user_id))).json()
    assert cleanup == {"message": "Successfully deleted 0 old notifications", "deletedCount": 0}


async def test_support_ticket_needs_no_token(client, mailer):
    res = await client.post(
        f"{API}/support/tickets",
        data={
            "subject": "Help",
            "category": "Other",
            "priority": "Normal",
            "name": "Sam",
            "email": "sam@example.com",
            "description": "Something broke",
        },
        files=[("attachments", ("log.csv", b"a,b\n1,2\n", "text/csv"))],
    )

    assert res.status_code == 200
    assert res.json()["success"] is True
    assert len(mailer.sent) == 2
    assert mailer.sent[0].attachments[0].filename == "log.csv"


async def test_support_honeypot(client, mailer):
    res = await client.post(
        f"{API}/support/tickets",
        data={
            "subject": "Help",
            "category": "Other",
            "priority": "Normal",
            "name": "Bot",
            "email": "bot@example.com",
            "description": "buy now",
            "website": "http://spam.example",
        },
    )
    assert res.status_code == 400
    assert res.json() == {"message": "Invalid submission detected"}
    assert mailer.sent == []


async def test_unknown_ids_are_not_found(client, user_id):
    res = await client.get(f"{API}/asset-groups/{uuid.uuid4()}", headers=auth(user_id))
    assert res.status_code == 404
    assert res.json() == {"message": "Asset group not found"}
