"""Tests for the event photo pipeline and upload deletion."""
import io

import pytest
from datetime import datetime, timezone
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from davaoclean.main import app
from davaoclean.models.event import Event
from davaoclean.models.profile import Profile, Role
from davaoclean.models.upload import Upload
from davaoclean.services import upload_service
from davaoclean.storage import EVENT_IMAGES_BUCKET, LocalObjectStorage, StorageError, get_storage, sanitize_filename
from tests.conftest import auth, create_test_event, make_organizer, sign_up, upload_photo


def _stored_files(storage):
    return [p for p in storage.root.rglob("*") if p.is_file()]


class TestEventPhotoUpload:
    def test_upload_stores_and_records(self, client, db, storage):
        organizer = make_organizer(client)
        volunteer = sign_up(client)
        event = create_test_event(client, organizer)

        resp = upload_photo(client, event["id"], volunteer, filename="drive day.jpg", data=b"\xff\xd8jpeg-bytes")
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["category"] == "event"
        assert data["event_id"] == event["id"]
        assert data["user_id"] == volunteer["profile"]["id"]

        prefix = f"http://testserver/media/{EVENT_IMAGES_BUCKET}/{event['id']}/{volunteer['profile']['id']}/"
        assert data["image_url"].startswith(prefix)
        assert data["image_url"].endswith("_drive_day.jpg")

        [stored] = _stored_files(storage)
        assert stored.read_bytes() == b"\xff\xd8jpeg-bytes"
        assert db.query(Upload).one().storage_path.startswith(f"{EVENT_IMAGES_BUCKET}/{event['id']}/")

    def test_non_image_rejected(self, client, storage):
        organizer = make_organizer(client)
        event = create_test_event(client, organizer)
        resp = upload_photo(client, event["id"], organizer, filename="notes.txt", content_type="text/plain")
        assert resp.status_code == 400
        assert _stored_files(storage) == []

    def test_upload_requires_sign_in(self, client):
        organizer = make_organizer(client)
        event = create_test_event(client, organizer)
        resp = client.post(
            f"/api/events/{event['id']}/uploads",
            files={"file": ("photo.jpg", b"\xff\xd8", "image/jpeg")},
        )
        assert resp.status_code == 401

    def test_upload_to_unknown_event(self, client, storage):
        volunteer = sign_up(client)
        assert upload_photo(client, "nope", volunteer).status_code == 404
        assert _stored_files(storage) == []

    def test_storage_failure_surfaces_error(self, client, db, tmp_path):
        class BrokenStorage(LocalObjectStorage):
            def upload(self, bucket, path, data):
                raise StorageError("Bucket not found")

        organizer = make_organizer(client)
        event = create_test_event(client, organizer)
        app.dependency_overrides[get_storage] = lambda: BrokenStorage(tmp_path / "broken", "http://testserver/media")

        resp = upload_photo(client, event["id"], organizer)
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Bucket not found"
        assert db.query(Upload).count() == 0

    def test_failed_record_removes_stored_object(self, db, storage, monkeypatch):
        """If the row cannot be written the stored file is deleted again."""
        organizer = Profile(email="lead@example.com", role=Role.organizer)
        db.add(organizer)
        db.commit()
        event = Event(
            organizer_id=organizer.id, title="Drive", location="Bucana",
            event_date=datetime(2024, 6, 1, tzinfo=timezone.utc),
        )
        db.add(event)
        db.commit()

        def _fail():
            raise SQLAlchemyError("insert failed")

        monkeypatch.setattr(db, "commit", _fail)
        with pytest.raises(HTTPException) as exc:
            upload_service.upload_event_photo(
                db, storage, event.id, organizer, "photo.jpg", "image/jpeg", b"\xff\xd8",
            )
        assert exc.value.status_code == 400
        assert exc.value.detail == "insert failed"
        assert _stored_files(storage) == []

    def test_oversized_image_rejected(self, client, monkeypatch):
        from davaoclean.config import settings
        monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 4)
        organizer = make_organizer(client)
        event = create_test_event(client, organizer)
        resp = upload_photo(client, event["id"], organizer, data=b"0123456789")
        assert resp.status_code == 413

    def test_read_stops_past_limit(self, monkeypatch):
        from davaoclean.config import settings
        monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 4)
        stream = io.BytesIO(b"0123456789")
        assert upload_service.read_image(stream) == b"01234"
        assert stream.read() == b"56789"


class TestDeleteUpload:
    def test_uploader_deletes(self, client, storage):
        organizer = make_organizer(client)
        volunteer = sign_up(client)
        event = create_test_event(client, organizer)
        upload = upload_photo(client, event["id"], volunteer).json()

        resp = client.delete(f"/api/uploads/{upload['id']}", headers=auth(volunteer))
        assert resp.status_code == 204
        assert client.get(f"/api/events/{event['id']}").json()["uploads"] == []
        assert _stored_files(storage) == []

    def test_only_uploader_deletes(self, client):
        """Not even the event organizer may delete someone else's photo."""
        organizer = make_organizer(client)
        volunteer = sign_up(client)
        event = create_test_event(client, organizer)
        upload = upload_photo(client, event["id"], volunteer).json()

        resp = client.delete(f"/api/uploads/{upload['id']}", headers=auth(organizer))
        assert resp.status_code == 403
        assert len(client.get(f"/api/events/{event['id']}").json()["uploads"]) == 1

    def test_delete_unknown_upload(self, client):
        volunteer = sign_up(client)
        assert client.delete("/api/uploads/nope", headers=auth(volunteer)).status_code == 404

    def test_list_my_uploads(self, client):
        organizer = make_organizer(client)
        volunteer = sign_up(client)
        event = create_test_event(client, organizer)
        mine = upload_photo(client, event["id"], volunteer).json()
        upload_photo(client, event["id"], organizer, filename="theirs.jpg")

        resp = client.get("/api/uploads/mine", headers=auth(volunteer))
        assert [u["id"] for u in resp.json()] == [mine["id"]]


class TestStoragePaths:
    def test_build_storage_path(self):
        path = upload_service.build_storage_path("event-1", "user-1", "beach.png", now_ms=1717200000000)
        assert path == "event-1/user-1/1717200000000_beach.png"

    def test_sanitize_strips_directories(self):
        assert sanitize_filename("../../etc/passwd") == "passwd"
        assert sanitize_filename("my photo (1).jpg") == "my_photo_1_.jpg"
        assert sanitize_filename("") == "image"

    def test_storage_never_overwrites(self, storage):
        storage.upload(EVENT_IMAGES_BUCKET, "a/b/1_x.jpg", b"one")
        with pytest.raises(StorageError):
            storage.upload(EVENT_IMAGES_BUCKET, "a/b/1_x.jpg", b"two")

    def test_remove_deletes_object(self, storage):
        storage.upload(EVENT_IMAGES_BUCKET, "a/b/1_x.jpg", b"one")
        assert storage.exists(EVENT_IMAGES_BUCKET, "a/b/1_x.jpg")
        storage.remove(EVENT_IMAGES_BUCKET, "a/b/1_x.jpg")
        assert not storage.exists(EVENT_IMAGES_BUCKET, "a/b/1_x.jpg")

    def test_storage_rejects_escaping_paths(self, storage):
        with pytest.raises(StorageError):
            storage.upload(EVENT_IMAGES_BUCKET, "../../outside.jpg", b"x")
