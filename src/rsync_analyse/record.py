"""Decoder for single lines of rsync ``--itemize-changes`` output.

The itemize string is ``YXcstpoguax``: update type, entity type and nine
attribute slots, followed by the path. Some tool versions emit a twelfth
reserved column before the separating space; both layouts are accepted.
"""

from __future__ import annotations

from collections.abc import Collection

from .config import DELETION_TAGS, MESSAGE_PREFIX, SYMLINK_SEPARATOR
from .models import AttributeName, ParsedRecord, RsyncAttribute

MIN_RECORD_LENGTH = 13
FORMAT_WIDTH = 11
RESERVED_COLUMN = 11
NEW_ITEM_CODE = "+"
RESERVED_MARKERS = frozenset("+?")
SYMLINK_ENTITY = "L"

# (column, accepted codes, attribute)
ATTRIBUTE_SLOTS: tuple[tuple[int, frozenset[str], AttributeName], ...] = (
    (2, frozenset("c"), AttributeName.CHECKSUM),
    (3, frozenset("s"), AttributeName.SIZE),
    (4, frozenset("tT"), AttributeName.TIME),
    (5, frozenset("p"), AttributeName.PERMISSIONS),
    (6, frozenset("o"), AttributeName.OWNER),
    (7, frozenset("g"), AttributeName.GROUP),
    (8, frozenset("unb"), AttributeName.RESERVED),
    (9, frozenset("a"), AttributeName.ACL),
    (10, frozenset("x"), AttributeName.XATTR),
)


def _parse_message(line: str, deletion_tags: Collection[str]) -> ParsedRecord:
    body = line[len(MESSAGE_PREFIX) :]
    tag, _sep, rest = body.partition(" ")
    path = rest.strip()
    return ParsedRecord(
        update_type=MESSAGE_PREFIX,
        entity_type=None,
        attributes=(),
        path=path,
        message=tag,
        is_deletion=bool(path) and tag in deletion_tags,
    )


def _split_layout(line: str) -> tuple[str, str | None] | None:
    """Return the raw path text and reserved marker, or None for other shapes."""
    if line[RESERVED_COLUMN] == " ":
        return line[RESERVED_COLUMN + 1 :], None
    if line[RESERVED_COLUMN + 1] == " ":
        marker = line[RESERVED_COLUMN]
        return line[RESERVED_COLUMN + 2 :], (
            marker if marker in RESERVED_MARKERS else None
        )
    return None


def _parse_attributes(format_code: str) -> tuple[RsyncAttribute, ...]:
    attributes: list[RsyncAttribute] = []
    for column, codes, name in ATTRIBUTE_SLOTS:
        code = format_code[column]
        if code in codes or code == NEW_ITEM_CODE:
            attributes.append(RsyncAttribute(name=name, code=code))
    return tuple(attributes)


def parse_record(
    line: str, deletion_tags: Collection[str] = DELETION_TAGS
) -> ParsedRecord | None:
    if line.startswith(MESSAGE_PREFIX):
        return _parse_message(line, deletion_tags)
    if len(line) < MIN_RECORD_LENGTH:
        return None

    layout = _split_layout(line)
    if layout is None:
        return None
    raw_path, reserved = layout

    format_code = line[:FORMAT_WIDTH]
    entity_type = format_code[1]
    path = raw_path.strip()
    target: str | None = None
    if entity_type == SYMLINK_ENTITY and SYMLINK_SEPARATOR in path:
        path, _sep, target = path.partition(SYMLINK_SEPARATOR)

    return ParsedRecord(
        update_type=format_code[0],
        entity_type=entity_type,
        attributes=_parse_attributes(format_code),
        path=path,
        target=target,
        reserved=reserved,
    )
