"""
Accommodation Service - listings and their hosted images

Handles:
- Public browsing (only listings whose owner is approved)
- Owner and admin create / update / delete
- Cascade delete: bookings, hosted images, then the listing
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from way2pg.core.config import settings
from way2pg.core.exceptions import (
    AccommodationNotFoundError,
    MediaHostError,
    UserNotFoundError,
    ValidationError,
)
from way2pg.core.logging_config import logger
from way2pg.core.types import is_valid_uuid
from way2pg.models.accommodation import Accommodation, AccommodationImage
from way2pg.models.booking import Booking
from way2pg.models.user import User, UserRole
from way2pg.schemas.accommodation import AccommodationCreate, AccommodationUpdate
from way2pg.services.storage_service import storage_service


@dataclass
class ImageUpload:
    """An image received from the client, not yet hosted"""
    data: bytes
    content_type: str
    filename: Optional[str] = None


class AccommodationService:
    """Service for managing accommodation listings"""

    def __init__(self, storage=None):
        self.storage = storage or storage_service

    # ==================== QUERIES ====================

    async def get_accommodation(self, db: AsyncSession, accommodation_id: str) -> Accommodation:
        if not is_valid_uuid(accommodation_id):
            raise AccommodationNotFoundError(accommodation_id)
        result = await db.execute(select(Accommodation).where(Accommodation.id == accommodation_id))
        accommodation = result.scalar_one_or_none()
        if not accommodation:
            raise AccommodationNotFoundError(accommodation_id)
        return accommodation

    async def list_public_accommodations(self, db: AsyncSession) -> List[Accommodation]:
        result = await db.execute(
            select(Accommodation)
            .join(User, Accommodation.owner_id == User.id)
            .where(User.is_approved.is_(True))
            .order_by(Accommodation.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_public_accommodation(self, db: AsyncSession, accommodation_id: str) -> Accommodation:
        """Listings of unapproved owners are reported as missing"""
        accommodation = await self.get_accommodation(db, accommodation_id)
        if not accommodation.is_publicly_visible:
            raise AccommodationNotFoundError(accommodation_id)
        return accommodation

    async def list_owner_accommodations(self, db: AsyncSession, owner: User) -> List[Accommodation]:
        result = await db.execute(
            select(Accommodation)
            .where(Accommodation.owner_id == owner.id)
            .order_by(Accommodation.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_all_accommodations(self, db: AsyncSession) -> List[Accommodation]:
        result = await db.execute(select(Accommodation).order_by(Accommodation.created_at.desc()))
        return list(result.scalars().all())

    async def get_managed_accommodation(self, db: AsyncSession, actor: User, accommodation_id: str) -> Accommodation:
        """Admins manage any listing; owners only their own (others look missing)"""
        accommodation = await self.get_accommodation(db, accommodation_id)
        if actor.role is not UserRole.ADMIN and accommodation.owner_id != actor.id:
            raise AccommodationNotFoundError(accommodation_id)
        return accommodation

    # ==================== IMAGES ====================

    async def upload_images(self, files: Sequence[ImageUpload]) -> List[AccommodationImage]:
        """Host every file; if one fails, release the ones already hosted"""
        hosted = []
        try:
            for upload in files:
                asset = await self.storage.upload(
                    upload.data,
                    folder=settings.MEDIA_FOLDER,
                    content_type=upload.content_type,
                    filename=upload.filename,
                )
                hosted.append(asset)
        except MediaHostError:
            await self.release_images([asset.public_id for asset in hosted])
            raise
        return [AccommodationImage(url=asset.url, public_id=asset.public_id) for asset in hosted]

    async def release_images(self, public_ids: Sequence[str]) -> List[str]:
        """
        Submit every id for deletion. A failure on one id is logged and the
        rest are still attempted. Returns the ids that could not be released.
        """
        failed = []
        for public_id in public_ids:
            try:
                await self.storage.delete(public_id)
            except MediaHostError as e:
                logger.warning(f"[Accommodation] Could not release image {public_id}: {e.message}")
                failed.append(public_id)
            except Exception as e:
                logger.log_error_with_context(e, context="release_images", public_id=public_id)
                failed.append(public_id)
        return failed

    @staticmethod
    def check_image_count(count: int) -> None:
        if count > settings.MAX_IMAGES_PER_ACCOMMODATION:
            raise ValidationError(
                f"An accommodation can have at most {settings.MAX_IMAGES_PER_ACCOMMODATION} images",
                field="images",
            )

    # ==================== COMMANDS ====================

    async def resolve_owner(self, db: AsyncSession, actor: User, owner_id: Optional[str]) -> User:
        """Owners always create for themselves; admins must name an existing owner"""
        if actor.role is UserRole.OWNER:
            return actor
        if actor.role is not UserRole.ADMIN:
            raise ValidationError("Only owners and admins can create accommodations")
        if not owner_id:
            raise ValidationError("owner_id is required", field="owner_id")
        owner = None
        if is_valid_uuid(owner_id):
            result = await db.execute(select(User).where(User.id == owner_id))
            owner = result.scalar_one_or_none()
        if not owner or owner.role is not UserRole.OWNER:
            raise UserNotFoundError(owner_id)
        return owner

    async def create_accommodation(
        self,
        db: AsyncSession,
        actor: User,
        data: AccommodationCreate,
        files: Sequence[ImageUpload] = (),
    ) -> Accommodation:
        self.check_image_count(len(files))
        owner = await self.resolve_owner(db, actor, data.owner_id)

        images = await self.upload_images(files)
        for position, image in enumerate(images):
            image.position = position

        accommodation = Accommodation(
            owner=owner,
            images=images,
            **data.model_dump(exclude={"owner_id"}),
        )
        db.add(accommodation)
        try:
            await db.commit()
        except Exception:
            await db.rollback()
            await self.release_images([image.public_id for image in images])
            raise

        logger.info(f"[Accommodation] Created {accommodation.id} for owner {owner.id} with {len(images)} images")
        return accommodation

    async def update_accommodation(
        self,
        db: AsyncSession,
        actor: User,
        accommodation_id: str,
        data: AccommodationUpdate,
        new_files: Sequence[ImageUpload] = (),
    ) -> Accommodation:
        accommodation = await self.get_managed_accommodation(db, actor, accommodation_id)

        removed = set(data.removed_images)
        kept = [image for image in accommodation.images if image.public_id not in removed]
        dropped = [image for image in accommodation.images if image.public_id in removed]
        self.check_image_count(len(kept) + len(new_files))

        changes = data.model_dump(exclude_unset=True, exclude={"removed_images"})
        for field, value in changes.items():
            setattr(accommodation, field, value)
        if not accommodation.food_available:
            accommodation.food_price = None

        added = await self.upload_images(new_files)
        accommodation.images = kept + added
        for position, image in enumerate(accommodation.images):
            image.position = position
        accommodation.updated_at = datetime.utcnow()

        await db.commit()

        # Released only once the listing no longer points at them
        await self.release_images([image.public_id for image in dropped])

        logger.info(
            f"[Accommodation] Updated {accommodation.id}: "
            f"{len(changes)} fields, +{len(added)} / -{len(dropped)} images"
        )
        return accommodation

    async def delete_accommodation(self, db: AsyncSession, actor: User, accommodation_id: str) -> List[str]:
        """
        Delete a listing with its bookings and hosted images.

        Image deletion is best effort; the listing is removed even when some
        images could not be released. Returns those image ids.
        """
        accommodation = await self.get_managed_accommodation(db, actor, accommodation_id)
        return await self.cascade_delete(db, accommodation)

    async def cascade_delete(self, db: AsyncSession, accommodation: Accommodation) -> List[str]:
        await db.execute(delete(Booking).where(Booking.accommodation_id == accommodation.id))

        failed = await self.release_images([image.public_id for image in accommodation.images])

        await db.delete(accommodation)
        await db.commit()

        logger.info(
            f"[Accommodation] Deleted {accommodation.id}"
            + (f" ({len(failed)} images not released)" if failed else "")
        )
        return failed


# Singleton instance
accommodation_service = AccommodationService()
