# boards_core/utils.py
import secrets
import string
import time
from enum import Enum
from typing import Any, Dict, Iterable, List

_ID_ALPHABET = string.ascii_lowercase + string.digits


class IDType(str, Enum):
    BOARD = "b"
    BLOCK = "c"
    CATEGORY = "t"
    TOKEN = "k"


def new_id(id_type: IDType) -> str:
    """Generate a 27 character ID whose first letter encodes the entity type."""
    body = "".join(secrets.choice(_ID_ALPHABET) for _ in range(26))
    return id_type.value + body


def get_millis() -> int:
    return int(time.time() * 1000)


# Field keys that hold references to other block IDs and must follow
# them when blocks are copied under new identities.
_ID_REFERENCE_FIELDS = ("contentOrder", "cardOrder", "defaultTemplateId", "visibleOptionIds")


def _remap(value: Any, id_map: Dict[str, str]) -> Any:
    if isinstance(value, str):
        return id_map.get(value, value)
    if isinstance(value, list):
        return [_remap(item, id_map) for item in value]
    return value


def remap_block_references(fields: Dict[str, Any], id_map: Dict[str, str]) -> Dict[str, Any]:
    """Return a copy of ``fields`` with known ID references translated through ``id_map``."""
    remapped = dict(fields)
    for key in _ID_REFERENCE_FIELDS:
        if key in remapped:
            remapped[key] = _remap(remapped[key], id_map)
    return remapped


def find_duplicates(ids: Iterable[str]) -> List[str]:
    seen = set()
    duplicates = []
    for item in ids:
        if item in seen and item not in duplicates:
            duplicates.append(item)
        seen.add(item)
    return duplicates
