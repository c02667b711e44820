"""
Unit Tests for StorageService (S3 media host)
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from botocore.exceptions import ClientError

from way2pg.core.config import settings
from way2pg.core.exceptions import MediaHostError
from way2pg.services.storage_service import StorageService, MediaAsset


def client_error(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "InternalError", "Message": "boom"}}, operation)


@pytest.fixture
def s3_client():
    return MagicMock()


@pytest.fixture
def storage(s3_client):
    return StorageService(client=s3_client, bucket="way2pg-test")


@pytest.fixture
def no_sleep():
    with patch("way2pg.services.storage_service.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


class TestGeneratePublicId:

    def test_keeps_extension_only(self):
        public_id = StorageService.generate_public_id("/way2pg/", "My Room.PNG", "image/png")

        folder, name = public_id.split("/")
        assert folder == "way2pg"
        assert name.endswith(".png")
        assert "Room" not in name

    def test_falls_back_to_content_type(self):
        assert StorageService.generate_public_id("rooms", None, "image/png").endswith(".png")

    def test_ids_are_unique(self):
        assert StorageService.generate_public_id("a", "x.jpg", "image/jpeg") != \
            StorageService.generate_public_id("a", "x.jpg", "image/jpeg")


class TestUpload:

    async def test_puts_object_and_returns_asset(self, storage, s3_client):
        asset = await storage.upload(b"\x89PNG", folder="rooms", content_type="image/png", filename="a.png")

        assert isinstance(asset, MediaAsset)
        assert asset.public_id.startswith("rooms/")
        assert asset.url.endswith(asset.public_id)
        kwargs = s3_client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "way2pg-test"
        assert kwargs["Key"] == asset.public_id
        assert kwargs["ContentType"] == "image/png"

    async def test_default_folder(self, storage):
        asset = await storage.upload(b"jpeg-bytes")

        assert asset.public_id.startswith(f"{settings.MEDIA_FOLDER}/")

    async def test_rejects_empty_buffer(self, storage, s3_client):
        with pytest.raises(MediaHostError):
            await storage.upload(b"")
        s3_client.put_object.assert_not_called()

    async def test_rejects_non_images(self, storage):
        with pytest.raises(MediaHostError):
            await storage.upload(b"%PDF", content_type="application/pdf")

    async def test_transport_failure_is_wrapped_after_retries(self, storage, s3_client, no_sleep):
        s3_client.put_object.side_effect = client_error("PutObject")

        with pytest.raises(MediaHostError) as exc_info:
            await storage.upload(b"jpeg-bytes")

        assert s3_client.put_object.call_count == settings.MEDIA_MAX_RETRIES
        assert exc_info.value.code == "MEDIA_HOST_ERROR"

    async def test_transient_failure_recovers(self, storage, s3_client, no_sleep):
        s3_client.put_object.side_effect = [client_error("PutObject"), {}]

        asset = await storage.upload(b"jpeg-bytes")

        assert asset.public_id
        no_sleep.assert_awaited_once()


class TestDelete:

    async def test_deletes_by_key(self, storage, s3_client):
        assert await storage.delete("rooms/abc.jpg") is True

        s3_client.delete_object.assert_called_once_with(Bucket="way2pg-test", Key="rooms/abc.jpg")

    async def test_empty_id_is_a_no_op(self, storage, s3_client):
        assert await storage.delete("") is False
        s3_client.delete_object.assert_not_called()

    async def test_failure_names_the_image(self, storage, s3_client, no_sleep):
        s3_client.delete_object.side_effect = client_error("DeleteObject")

        with pytest.raises(MediaHostError) as exc_info:
            await storage.delete("rooms/abc.jpg")

        assert exc_info.value.details["public_id"] == "rooms/abc.jpg"
