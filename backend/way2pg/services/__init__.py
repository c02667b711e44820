# Services
from way2pg.services.storage_service import storage_service, MediaAsset
from way2pg.services.email_service import email_service
from way2pg.services.booking_service import booking_service
from way2pg.services.accommodation_service import accommodation_service, ImageUpload
from way2pg.services.user_service import user_service
