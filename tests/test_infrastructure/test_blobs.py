"""Tests for LocalBlobStorage."""
import pytest

from clientdesk.infrastructure.store.base import StoreError
from clientdesk.infrastructure.store.blobs import LocalBlobStorage


@pytest.fixture
def storage(tmp_path):
    return LocalBlobStorage(tmp_path, "http://files.test/", ["client-assets"])


def test_put_returns_public_url(storage, tmp_path):
    url = storage.put("client-assets", "c1/1760000000000.png", b"png")

    assert url == "http://files.test/client-assets/c1/1760000000000.png"
    assert (tmp_path / "client-assets" / "c1" / "1760000000000.png").read_bytes() == b"png"


def test_put_existing_key_fails(storage):
    storage.put("client-assets", "c1/1.png", b"a")
    with pytest.raises(StoreError, match="The resource already exists"):
        storage.put("client-assets", "c1/1.png", b"b")


def test_unknown_bucket(storage):
    with pytest.raises(StoreError, match="Bucket not found: avatars"):
        storage.put("avatars", "c1/1.png", b"a")


def test_key_cannot_escape_bucket(storage):
    with pytest.raises(StoreError, match="Invalid storage key"):
        storage.put("client-assets", "../secrets.txt", b"a")


def test_empty_key(storage):
    with pytest.raises(StoreError):
        storage.delete("client-assets", "")


def test_delete_missing_is_silent(storage):
    storage.delete("client-assets", "c1/never-uploaded.pdf")
