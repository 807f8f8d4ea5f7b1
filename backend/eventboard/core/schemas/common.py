# eventboard/core/schemas/common.py
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response models are serialized with camelCase keys"""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MessageResponse(BaseModel):
    message: str


def validation_message(exc: PydanticValidationError) -> str:
    """Flatten pydantic errors into one human readable line"""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


class ProfilePicture(CamelModel):
    id: str
    url: str
