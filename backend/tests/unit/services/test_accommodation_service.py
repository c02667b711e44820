"""
Unit Tests for AccommodationService
"""
import pytest
from sqlalchemy import select

from way2pg.core.config import settings
from way2pg.core.exceptions import (
    AccommodationNotFoundError,
    MediaHostError,
    UserNotFoundError,
    ValidationError,
)
from way2pg.models import Accommodation, AccommodationImage, Booking, UserRole
from way2pg.schemas.accommodation import AccommodationCreate, AccommodationUpdate
from way2pg.services.accommodation_service import accommodation_service, ImageUpload
from way2pg.services.booking_service import booking_service
from way2pg.services.storage_service import MediaAsset


def upload(n: int = 1):
    return [ImageUpload(data=b"\xff\xd8img", content_type="image/jpeg", filename=f"room{i}.jpg") for i in range(n)]


class TestPublicQueries:

    async def test_hides_listings_of_unapproved_owners(self, db_session, make_accommodation, owner, pending_owner):
        visible = await make_accommodation(owner)
        await make_accommodation(pending_owner)

        listings = await accommodation_service.list_public_accommodations(db_session)

        assert [a.id for a in listings] == [visible.id]

    async def test_get_hidden_listing_is_not_found(self, db_session, make_accommodation, pending_owner):
        hidden = await make_accommodation(pending_owner)

        with pytest.raises(AccommodationNotFoundError):
            await accommodation_service.get_public_accommodation(db_session, hidden.id)

    async def test_admin_listing_includes_everything(self, db_session, make_accommodation, owner, pending_owner):
        await make_accommodation(owner)
        await make_accommodation(pending_owner)

        assert len(await accommodation_service.list_all_accommodations(db_session)) == 2


class TestCreate:

    async def test_owner_creates_with_images(self, db_session, owner, listing_payload, mock_storage):
        data = AccommodationCreate(**listing_payload())

        created = await accommodation_service.create_accommodation(db_session, owner, data, upload(3))

        assert created.owner_id == owner.id
        assert [image.position for image in created.images] == [0, 1, 2]
        assert mock_storage.upload.await_count == 3
        assert mock_storage.upload.call_args.kwargs["folder"] == settings.MEDIA_FOLDER

    async def test_owner_id_ignored_for_owners(self, db_session, owner, make_user, listing_payload):
        other = await make_user(UserRole.OWNER, is_approved=True)
        data = AccommodationCreate(**listing_payload(), owner_id=other.id)

        created = await accommodation_service.create_accommodation(db_session, owner, data)

        assert created.owner_id == owner.id

    async def test_too_many_images(self, db_session, owner, listing_payload, mock_storage):
        data = AccommodationCreate(**listing_payload())

        with pytest.raises(ValidationError):
            await accommodation_service.create_accommodation(
                db_session, owner, data, upload(settings.MAX_IMAGES_PER_ACCOMMODATION + 1)
            )
        mock_storage.upload.assert_not_awaited()

    async def test_admin_creates_for_owner(self, db_session, admin, owner, listing_payload):
        data = AccommodationCreate(**listing_payload(), owner_id=owner.id)

        created = await accommodation_service.create_accommodation(db_session, admin, data)

        assert created.owner_id == owner.id

    async def test_admin_must_name_an_owner(self, db_session, admin, student, listing_payload):
        with pytest.raises(ValidationError):
            await accommodation_service.create_accommodation(db_session, admin, AccommodationCreate(**listing_payload()))

        with pytest.raises(UserNotFoundError):
            await accommodation_service.create_accommodation(
                db_session, admin, AccommodationCreate(**listing_payload(), owner_id=student.id)
            )

    async def test_failed_upload_releases_hosted_images(self, db_session, owner, listing_payload, mock_storage):
        calls = []

        async def flaky_upload(data, folder=None, content_type="image/jpeg", filename=None):
            calls.append(filename)
            if len(calls) == 2:
                raise MediaHostError("upload failed")
            return MediaAsset(url="https://media.test/x", public_id=f"x/{len(calls)}")

        mock_storage.upload.side_effect = flaky_upload

        with pytest.raises(MediaHostError):
            await accommodation_service.create_accommodation(
                db_session, owner, AccommodationCreate(**listing_payload()), upload(3)
            )

        mock_storage.delete.assert_awaited_once_with("x/1")
        assert (await db_session.execute(select(Accommodation))).scalars().all() == []


class TestUpdate:

    async def test_update_fields_and_images(self, db_session, owner, accommodation, mock_storage):
        data = AccommodationUpdate(price=9500, removed_images=["seed/0"])

        updated = await accommodation_service.update_accommodation(
            db_session, owner, accommodation.id, data, upload(1)
        )

        assert updated.price == 9500
        assert [image.public_id for image in updated.images][0] == "seed/1"
        assert len(updated.images) == 2
        mock_storage.delete.assert_awaited_once_with("seed/0")

    async def test_owner_cannot_edit_foreign_listing(self, db_session, make_user, accommodation):
        intruder = await make_user(UserRole.OWNER, is_approved=True)

        with pytest.raises(AccommodationNotFoundError):
            await accommodation_service.update_accommodation(
                db_session, intruder, accommodation.id, AccommodationUpdate(price=1)
            )

    async def test_admin_can_edit_any_listing(self, db_session, admin, accommodation):
        updated = await accommodation_service.update_accommodation(
            db_session, admin, accommodation.id, AccommodationUpdate(name="Renamed")
        )

        assert updated.name == "Renamed"

    async def test_image_limit_counts_existing(self, db_session, owner, make_accommodation):
        full = await make_accommodation(owner, images=settings.MAX_IMAGES_PER_ACCOMMODATION)

        with pytest.raises(ValidationError):
            await accommodation_service.update_accommodation(
                db_session, owner, full.id, AccommodationUpdate(), upload(1)
            )


class TestCascadeDelete:

    async def test_deletes_bookings_images_and_listing(self, db_session, owner, student, accommodation, mock_storage):
        await booking_service.create_booking(db_session, student, accommodation.id)
        accommodation_id = accommodation.id

        failed = await accommodation_service.delete_accommodation(db_session, owner, accommodation_id)

        assert failed == []
        assert mock_storage.delete.await_count == 2
        assert await db_session.get(Accommodation, accommodation_id) is None
        bookings = (await db_session.execute(select(Booking))).scalars().all()
        images = (await db_session.execute(select(AccommodationImage))).scalars().all()
        assert bookings == [] and images == []

    async def test_one_image_failure_does_not_stop_the_rest(
        self, db_session, owner, make_accommodation, mock_storage
    ):
        listing = await make_accommodation(owner, images=3)
        listing_id = listing.id

        async def delete(public_id):
            if public_id == "seed/1":
                raise MediaHostError("gone wrong", public_id=public_id)
            return True

        mock_storage.delete.side_effect = delete

        failed = await accommodation_service.delete_accommodation(db_session, owner, listing_id)

        assert failed == ["seed/1"]
        assert [c.args[0] for c in mock_storage.delete.await_args_list] == ["seed/0", "seed/1", "seed/2"]
        assert await db_session.get(Accommodation, listing_id) is None

    async def test_unexpected_media_error_does_not_stop_the_rest(
        self, db_session, owner, make_accommodation, mock_storage
    ):
        listing = await make_accommodation(owner, images=2)
        listing_id = listing.id
        mock_storage.delete.side_effect = [RuntimeError("endpoint misconfigured"), True]

        failed = await accommodation_service.delete_accommodation(db_session, owner, listing_id)

        assert failed == ["seed/0"]
        assert mock_storage.delete.await_count == 2
        assert await db_session.get(Accommodation, listing_id) is None

    async def test_owner_cannot_delete_foreign_listing(self, db_session, make_user, accommodation):
        intruder = await make_user(UserRole.OWNER, is_approved=True)

        with pytest.raises(AccommodationNotFoundError):
            await accommodation_service.delete_accommodation(db_session, intruder, accommodation.id)
