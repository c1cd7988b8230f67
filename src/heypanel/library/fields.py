"""Field-priority table mapping remote record shapes onto LibraryAsset.

Each listing endpoint names the same logical fields differently. For every
source the candidate field names are tried in order; the most specific,
source-typed name comes first and the generic one last.
"""

from dataclasses import dataclass, field
from typing import Any

from .models import LibraryAsset

SOURCE_LOOK = "look"
SOURCE_AVATAR = "avatar"
SOURCE_TALKING_PHOTO = "talking_photo"
SOURCE_ASSET = "asset"


@dataclass(frozen=True)
class SourceFields:
    """Field names for one record source.

    Attributes:
        id_fields: Candidate id fields, most specific first
        name_fields: Candidate display name fields
        preview_fields: Candidate preview image URL fields
        group_fields: Candidate group id fields
        stock: Whether records of this source are stock by default
        owned_markers: Fields whose presence marks a record as non-stock
        accepted_values: Field -> allowed values; records with another value
                         for a present field are skipped
    """

    id_fields: tuple[str, ...]
    name_fields: tuple[str, ...]
    preview_fields: tuple[str, ...]
    group_fields: tuple[str, ...] = ()
    stock: bool = False
    owned_markers: tuple[str, ...] = ()
    accepted_values: dict[str, tuple[str, ...]] = field(default_factory=dict)


FIELD_TABLE: dict[str, SourceFields] = {
    SOURCE_LOOK: SourceFields(
        id_fields=("avatar_id", "look_id", "id"),
        name_fields=("name", "avatar_name"),
        preview_fields=("image_url", "preview_image_url", "motion_preview_url"),
        group_fields=("group_id", "avatar_group_id"),
    ),
    SOURCE_AVATAR: SourceFields(
        id_fields=("avatar_id", "talking_photo_id", "id"),
        name_fields=("avatar_name", "talking_photo_name", "name"),
        preview_fields=("preview_image_url", "image_url"),
        group_fields=("group_id",),
        stock=True,
        owned_markers=("talking_photo_id",),
    ),
    SOURCE_TALKING_PHOTO: SourceFields(
        id_fields=("talking_photo_id", "id"),
        name_fields=("talking_photo_name", "name"),
        preview_fields=("preview_image_url", "image_url", "circle_image"),
    ),
    SOURCE_ASSET: SourceFields(
        id_fields=("asset_id", "id"),
        name_fields=("name", "file_name"),
        preview_fields=("url", "image_url", "preview_image_url"),
        accepted_values={"file_type": ("image", "photo")},
    ),
}

GROUP_ID_FIELDS = ("group_id", "avatar_group_id", "id")


def first_value(record: dict[str, Any], fields: tuple[str, ...]) -> str | None:
    """Return the first non-empty value among fields, as a string."""
    for name in fields:
        value = record.get(name)
        if value not in (None, ""):
            return str(value)
    return None


def normalize_record(
    source: str, record: dict[str, Any], group_id: str | None = None
) -> LibraryAsset | None:
    """Map a raw record onto a LibraryAsset.

    Args:
        source: Key into FIELD_TABLE
        record: Raw record from the listing endpoint
        group_id: Group the record was fetched for, used when the record
                  does not carry its own group id

    Returns:
        The normalized asset, or None if the record has no id or is filtered

    Raises:
        KeyError: If source is not in FIELD_TABLE
    """
    fields = FIELD_TABLE[source]

    for name, allowed in fields.accepted_values.items():
        value = record.get(name)
        if value is not None and str(value).lower() not in allowed:
            return None

    asset_id = first_value(record, fields.id_fields)
    if asset_id is None:
        return None

    explicit_stock = record.get("is_stock")
    if isinstance(explicit_stock, bool):
        is_stock = explicit_stock
    else:
        is_stock = fields.stock and not any(m in record for m in fields.owned_markers)

    return LibraryAsset(
        asset_id=asset_id,
        display_name=first_value(record, fields.name_fields) or asset_id,
        preview_image_url=first_value(record, fields.preview_fields) or "",
        is_stock=is_stock,
        group_id=first_value(record, fields.group_fields) or group_id,
        source=source,
    )


def normalize_records(
    source: str, records: list[dict[str, Any]], group_id: str | None = None
) -> list[LibraryAsset]:
    assets = []
    for record in records:
        asset = normalize_record(source, record, group_id)
        if asset is not None:
            assets.append(asset)
    return assets
