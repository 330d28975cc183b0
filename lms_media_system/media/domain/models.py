"""
Media Domain Models.

Pure business entities and value objects for media delivery.
These models contain no external dependencies and represent core business concepts.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union


RANGE_UNIT = "bytes"


@dataclass(frozen=True)
class MediaResource:
    """A course video resolved to its location on the storage backend"""
    resource_id: str
    path: Path
    length: int
    content_type: str
    title: Optional[str] = None
    owner_id: Optional[Union[int, str]] = None

    def __post_init__(self):
        if not self.resource_id:
            raise ValueError("Resource ID cannot be empty")
        if self.length < 0:
            raise ValueError("Resource length cannot be negative")


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte span ``[start, end]`` within a resource"""
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0:
            raise ValueError("Start byte cannot be negative")
        if self.end < self.start:
            raise ValueError("End byte cannot be less than start byte")

    @property
    def size(self) -> int:
        """Number of bytes covered by the range"""
        return self.end - self.start + 1

    def content_range(self, length: int) -> str:
        """Value of the Content-Range header for a resource of ``length`` bytes"""
        return f"{RANGE_UNIT} {self.start}-{self.end}/{length}"

    @classmethod
    def from_header(cls, range_header: str, length: int) -> Optional['ByteRange']:
        """
        Parse an HTTP ``Range`` header against a resource of ``length`` bytes.

        Returns None when the header is not a ``bytes=`` range, so the caller
        serves the full resource. Raises ValueError when the range is malformed
        or cannot be satisfied: suffix ranges (``bytes=-500``), range lists,
        non-numeric offsets, ``start > end`` and ``end >= length`` all fail.
        """
        range_header = range_header.strip()
        prefix = f"{RANGE_UNIT}="
        if not range_header.lower().startswith(prefix):
            return None

        range_spec = range_header[len(prefix):].strip()

        if '-' not in range_spec:
            raise ValueError("Invalid range specification")

        start_str, end_str = (part.strip() for part in range_spec.split('-', 1))

        if not start_str:
            raise ValueError("Suffix byte ranges are not supported")
        if not start_str.isdigit():
            raise ValueError(f"Invalid range start: {start_str!r}")
        start = int(start_str)

        if end_str:
            if not end_str.isdigit():
                raise ValueError(f"Invalid range end: {end_str!r}")
            end = int(end_str)
        else:
            end = length - 1

        if start > end:
            raise ValueError(f"Range start {start} is beyond range end {end}")
        if end > length - 1:
            raise ValueError(f"Range end {end} is beyond resource length {length}")

        return cls(start=start, end=end)

    @classmethod
    def full(cls, length: int) -> Optional['ByteRange']:
        """Range covering a whole resource; None for an empty resource"""
        if length <= 0:
            return None
        return cls(start=0, end=length - 1)


@dataclass(frozen=True)
class StreamPlan:
    """Status, headers and byte span computed for one media response"""
    status_code: int
    headers: Dict[str, str]
    byte_range: Optional[ByteRange]

    @property
    def content_length(self) -> int:
        return self.byte_range.size if self.byte_range else 0

    @property
    def is_partial(self) -> bool:
        return self.status_code == 206


@dataclass
class StreamOutcome:
    """Result of driving a stream into a sink"""
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    bytes_sent: int = 0
    completed: bool = False
    error: Optional[Exception] = None
