"""
Listing payloads arrive either as multipart forms (with `images` files) or
as plain JSON. Both are reduced to a schema plus a list of ImageUpload.
"""
from typing import List, Tuple, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from way2pg.core.exceptions import ValidationError
from way2pg.services.accommodation_service import ImageUpload

IMAGE_FIELD = "images"
LIST_FIELDS = {"amenities", "rules", "removed_images"}

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_payload(schema: Type[SchemaT], payload: dict) -> SchemaT:
    """Pydantic failures become our 400 ValidationError with the field list"""
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        error = ValidationError(errors[0]["message"] if errors else "Invalid input",
                                field=errors[0]["field"] if errors else None)
        error.details["errors"] = errors
        raise error from e


async def read_listing_request(request: Request, schema: Type[SchemaT]) -> Tuple[SchemaT, List[ImageUpload]]:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError as e:
            raise ValidationError("Invalid JSON body") from e
        if not isinstance(payload, dict):
            raise ValidationError("Expected a JSON object")
        return validate_payload(schema, payload), []

    form = await request.form()
    payload = {}
    for key in set(form.keys()):
        if key == IMAGE_FIELD:
            continue
        values = [v for v in form.getlist(key) if not isinstance(v, UploadFile)]
        if key in LIST_FIELDS and len(values) > 1:
            payload[key] = values
        elif values and values[0] != "":
            payload[key] = values[0]

    uploads = []
    for item in form.getlist(IMAGE_FIELD):
        if isinstance(item, UploadFile) and item.filename:
            uploads.append(ImageUpload(
                data=await item.read(),
                content_type=item.content_type or "application/octet-stream",
                filename=item.filename,
            ))

    return validate_payload(schema, payload), uploads
