import pytest
from sqlalchemy import select

from app.main import app
from app.models.image import Image
from app.services.images import MAX_IMAGE_BYTES
from app.services.storage import LocalObjectStore, get_object_store

from fixtures_seed import make_image, make_office

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 64


async def _image_ids(db, office_id: int) -> list[int]:
    rows = await db.execute(select(Image.id).where(Image.resource_id == office_id).order_by(Image.id))
    return list(rows.scalars().all())


class BrokenStore(LocalObjectStore):
    def delete(self, key: str) -> None:
        raise PermissionError(f"read-only filesystem: {key}")


@pytest.mark.asyncio
@pytest.mark.parametrize("filename,payload,extension", [("image.png", PNG, ".png"), ("photo.jpg", JPEG, ".jpg")])
async def test_uploads_an_image(client, db_session, owner, object_store, filename, payload, extension):
    office = await make_office(db_session, owner["user"])

    r = await client.post(
        f"/v1/offices/{office.id}/images",
        files={"image": (filename, payload, "application/octet-stream")},
        headers=owner["headers"],
    )
    assert r.status_code == 201, r.text

    data = r.json()["data"]
    assert data["path"].startswith("offices/")
    assert data["path"].endswith(extension)
    assert object_store.exists(data["path"])
    assert await _image_ids(db_session, office.id) == [data["id"]]


@pytest.mark.asyncio
async def test_rejects_files_that_are_not_images(client, db_session, owner):
    office = await make_office(db_session, owner["user"])

    r = await client.post(
        f"/v1/offices/{office.id}/images",
        files={"image": ("image.png", b"GIF89a not really", "image/png")},
        headers=owner["headers"],
    )
    assert r.status_code == 422, r.text
    assert r.json()["detail"]["errors"] == {"image": ["The image must be a file of type: jpg, png"]}
    assert await _image_ids(db_session, office.id) == []


@pytest.mark.asyncio
async def test_rejects_oversized_images(client, db_session, owner):
    office = await make_office(db_session, owner["user"])
    payload = PNG + b"\x00" * MAX_IMAGE_BYTES

    r = await client.post(
        f"/v1/offices/{office.id}/images",
        files={"image": ("image.png", payload, "image/png")},
        headers=owner["headers"],
    )
    assert r.status_code == 422, r.text
    assert "image" in r.json()["detail"]["errors"]


@pytest.mark.asyncio
async def test_cannot_upload_to_someone_elses_office(client, db_session, owner, other_user):
    office = await make_office(db_session, other_user["user"])

    r = await client.post(
        f"/v1/offices/{office.id}/images",
        files={"image": ("image.png", PNG, "image/png")},
        headers=owner["headers"],
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_deletes_an_image(client, db_session, owner, object_store):
    office = await make_office(db_session, owner["user"])
    keep = await make_image(db_session, office, path="offices/keep.png")
    drop = await make_image(db_session, office, path="offices/drop.png")
    object_store.put_bytes(key=keep.path, data=PNG)
    object_store.put_bytes(key=drop.path, data=PNG)

    r = await client.delete(f"/v1/offices/{office.id}/images/{drop.id}", headers=owner["headers"])
    assert r.status_code == 200, r.text
    assert r.json() == {"status": "deleted", "image_id": drop.id}

    assert not object_store.exists("offices/drop.png")
    assert object_store.exists("offices/keep.png")
    assert await _image_ids(db_session, office.id) == [keep.id]


@pytest.mark.asyncio
async def test_cannot_delete_the_only_image(client, db_session, owner, object_store):
    office = await make_office(db_session, owner["user"])
    image = await make_image(db_session, office)
    object_store.put_bytes(key=image.path, data=PNG)

    r = await client.delete(f"/v1/offices/{office.id}/images/{image.id}", headers=owner["headers"])
    assert r.status_code == 422, r.text
    assert r.json()["detail"]["errors"] == {"image": ["Cannot delete the only image"]}
    assert object_store.exists(image.path)


@pytest.mark.asyncio
async def test_cannot_delete_the_featured_image(client, db_session, owner):
    office = await make_office(db_session, owner["user"])
    featured = await make_image(db_session, office, path="offices/a.png")
    await make_image(db_session, office, path="offices/b.png")
    office.featured_image_id = featured.id
    await db_session.flush()

    r = await client.delete(f"/v1/offices/{office.id}/images/{featured.id}", headers=owner["headers"])
    assert r.status_code == 422, r.text
    assert r.json()["detail"]["errors"] == {"image": ["Cannot delete the featured image"]}


@pytest.mark.asyncio
async def test_cannot_delete_an_image_of_another_office(client, db_session, owner):
    office = await make_office(db_session, owner["user"])
    await make_image(db_session, office, path="offices/a.png")
    await make_image(db_session, office, path="offices/b.png")

    elsewhere = await make_office(db_session, owner["user"])
    foreign = await make_image(db_session, elsewhere, path="offices/c.png")

    r = await client.delete(f"/v1/offices/{office.id}/images/{foreign.id}", headers=owner["headers"])
    assert r.status_code == 422, r.text
    assert r.json()["detail"]["errors"] == {"image": ["Cannot delete this image"]}
    assert await _image_ids(db_session, elsewhere.id) == [foreign.id]


@pytest.mark.asyncio
async def test_unknown_image_is_not_found(client, db_session, owner):
    office = await make_office(db_session, owner["user"])

    r = await client.delete(f"/v1/offices/{office.id}/images/999", headers=owner["headers"])
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_storage_failure_keeps_the_record(client, db_session, owner, tmp_path):
    office = await make_office(db_session, owner["user"])
    await make_image(db_session, office, path="offices/a.png")
    target = await make_image(db_session, office, path="offices/b.png")

    # replaces the fixture store for this request only; the client fixture clears overrides
    app.dependency_overrides[get_object_store] = lambda: BrokenStore(tmp_path / "broken")

    r = await client.delete(f"/v1/offices/{office.id}/images/{target.id}", headers=owner["headers"])
    assert r.status_code == 500, r.text
    assert target.id in await _image_ids(db_session, office.id)
