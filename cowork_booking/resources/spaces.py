from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from cowork_booking.network.client import ApiClient
from cowork_booking.resources._common import parse_list, parse_model, parse_saved
from cowork_booking.schemas.spaces import Space, SpaceType

SPACES_PATH = "/api/espaces"

# Typed collections; every SpaceType must have one
SPACE_PATHS: Dict[SpaceType, str] = {
    SpaceType.OPEN: f"{SPACES_PATH}/ouverts",
    SpaceType.PRIVATE: f"{SPACES_PATH}/prives",
}
if set(SPACE_PATHS) != set(SpaceType):
    raise RuntimeError("SPACE_PATHS must cover every SpaceType")


def list_spaces_by_type(client: ApiClient, space_type: SpaceType) -> List[Space]:
    return parse_list(Space, client.get(SPACE_PATHS[space_type]))


def list_open_spaces(client: ApiClient) -> List[Space]:
    return list_spaces_by_type(client, SpaceType.OPEN)


def _upload_parts(
    main_photo: Optional[Path], gallery: Sequence[Path]
) -> List[Tuple[str, Path]]:
    parts: List[Tuple[str, Path]] = []
    if main_photo is not None:
        parts.append(("photoPrincipal", main_photo))
    parts.extend(("gallery", image) for image in gallery)
    return parts


def create_space(
    client: ApiClient,
    space: Space,
    main_photo: Optional[Path] = None,
    gallery: Sequence[Path] = (),
) -> Space:
    """
    Create a space with its photos in one multipart request.

    The space metadata travels as JSON in the `data` field.
    """
    body = client.send_multipart(
        "POST",
        SPACE_PATHS[space.type],
        space.to_wire(),
        files=_upload_parts(main_photo, gallery),
    )
    return parse_model(Space, body)


def update_space(
    client: ApiClient,
    space_id: int,
    space: Space,
    main_photo: Optional[Path] = None,
    gallery: Sequence[Path] = (),
    images_to_delete: Sequence[str] = (),
) -> Space:
    data = space.to_wire()
    data.pop("id", None)
    extra = {"imagesToDelete": list(images_to_delete)} if images_to_delete else None
    body = client.send_multipart(
        "PUT",
        f"{SPACE_PATHS[space.type]}/{space_id}",
        data,
        files=_upload_parts(main_photo, gallery),
        extra_fields=extra,
    )
    return parse_saved(Space, body, space)
