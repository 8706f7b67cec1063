from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ChangeType(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    DEVICE = "device"
    SPECIAL = "special"
    DELETION = "deletion"
    UNKNOWN = "unknown"

    @property
    def description(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_entity(cls, entity_type: str | None) -> ChangeType:
        return _ENTITY_CHANGE_TYPES.get(entity_type or "", cls.UNKNOWN)


_ENTITY_CHANGE_TYPES = {
    "f": ChangeType.FILE,
    "d": ChangeType.DIRECTORY,
    "L": ChangeType.SYMLINK,
    "D": ChangeType.DEVICE,
    "S": ChangeType.SPECIAL,
}


class AttributeName(str, Enum):
    CHECKSUM = "checksum"
    SIZE = "size"
    TIME = "time"
    PERMISSIONS = "permissions"
    OWNER = "owner"
    GROUP = "group"
    RESERVED = "reserved"
    ACL = "acl"
    XATTR = "xattr"


@dataclass(frozen=True)
class RsyncOutputData:
    record: str


@dataclass(frozen=True)
class RsyncAttribute:
    name: AttributeName
    code: str


@dataclass(frozen=True)
class ParsedRecord:
    update_type: str
    entity_type: str | None
    attributes: tuple[RsyncAttribute, ...]
    path: str
    target: str | None = None
    message: str | None = None
    reserved: str | None = None
    is_deletion: bool = False

    @property
    def is_message(self) -> bool:
        return self.message is not None

    @property
    def is_new_item(self) -> bool:
        return bool(self.attributes) and all(
            attr.code == "+" for attr in self.attributes
        )

    @property
    def attribute_names(self) -> tuple[AttributeName, ...]:
        return tuple(attr.name for attr in self.attributes)

    @property
    def file_type_label(self) -> str:
        if self.entity_type is None:
            return "unknown"
        change_type = ChangeType.from_entity(self.entity_type)
        if change_type == ChangeType.UNKNOWN:
            return self.entity_type
        return change_type.value

    @property
    def update_type_label(self) -> str:
        return _UPDATE_TYPE_LABELS.get(self.update_type, self.update_type)


_UPDATE_TYPE_LABELS = {
    ".": "NO_UPDATE",
    "*": "MESSAGE",
    ">": "RECEIVED",
    "<": "SENT",
    "c": "LOCAL_CHANGE",
    "h": "HARDLINK",
}


@dataclass(frozen=True)
class ChangeFlags:
    checksum: bool = False
    size: bool = False
    timestamp: bool = False
    permissions: bool = False
    owner: bool = False
    group: bool = False
    acl: bool = False
    xattr: bool = False
    is_deletion: bool = False

    @classmethod
    def from_record(cls, record: ParsedRecord) -> ChangeFlags:
        names = set(record.attribute_names)
        return cls(
            checksum=AttributeName.CHECKSUM in names,
            size=AttributeName.SIZE in names,
            timestamp=AttributeName.TIME in names,
            permissions=AttributeName.PERMISSIONS in names,
            owner=AttributeName.OWNER in names,
            group=AttributeName.GROUP in names,
            acl=AttributeName.ACL in names,
            xattr=AttributeName.XATTR in names,
            is_deletion=record.is_deletion,
        )

    def _set_flags(self) -> list[tuple[str, str]]:
        pairs = [
            ("c", "checksum", self.checksum),
            ("s", "size", self.size),
            ("t", "timestamp", self.timestamp),
            ("p", "permissions", self.permissions),
            ("o", "owner", self.owner),
            ("g", "group", self.group),
            ("a", "acl", self.acl),
            ("x", "xattr", self.xattr),
        ]
        return [(code, name) for code, name, is_set in pairs if is_set]

    @property
    def has_changes(self) -> bool:
        return bool(self._set_flags())

    @property
    def flag_string(self) -> str:
        return "".join(code for code, _name in self._set_flags())

    @property
    def description(self) -> str:
        names = [name for _code, name in self._set_flags()]
        if self.is_deletion:
            names.append("deletion")
        return ", ".join(names) if names else "none"


@dataclass(frozen=True)
class ItemizedChange:
    change_type: ChangeType
    path: str
    target: str | None = None
    flags: ChangeFlags = field(default_factory=ChangeFlags)

    def __str__(self) -> str:
        text = f"{self.change_type.description}: {self.path}"
        if self.target is not None:
            text += f" -> {self.target}"
        if self.flags.description != "none":
            text += f" [{self.flags.description}]"
        return text


@dataclass(frozen=True)
class FileCount:
    total: int = 0
    regular: int = 0
    directories: int = 0
    links: int = 0

    @classmethod
    def zero(cls) -> FileCount:
        return cls()

    def __str__(self) -> str:
        return (
            f"{self.total} total (reg: {self.regular}, "
            f"dir: {self.directories}, link: {self.links})"
        )


@dataclass(frozen=True)
class Statistics:
    total_files: FileCount = field(default_factory=FileCount)
    files_created: FileCount = field(default_factory=FileCount)
    files_deleted: int = 0
    regular_files_transferred: int = 0
    total_file_size: int = 0
    total_transferred_size: int = 0
    literal_data: int = 0
    matched_data: int = 0
    bytes_sent: int = 0
    bytes_received: int = 0
    speedup: float = 0.0
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def total_files_changed(self) -> int:
        return self.files_created.total + self.files_deleted

    @property
    def efficiency_percentage(self) -> float:
        if self.total_file_size <= 0:
            return 0.0
        return (self.total_transferred_size / self.total_file_size) * 100.0


@dataclass(frozen=True)
class AnalysisResult:
    itemized_changes: tuple[ItemizedChange, ...]
    statistics: Statistics
    is_dry_run: bool = False
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    def changes_of(self, change_type: ChangeType) -> tuple[ItemizedChange, ...]:
        return tuple(
            change
            for change in self.itemized_changes
            if change.change_type == change_type
        )
