"""
Data model shared by the matcher, recorder, notifier and stores
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, List, Optional

import numpy as np

PRESENT = 'present'
LATE = 'late'
ABSENT = 'absent'
STATUSES = (PRESENT, LATE, ABSENT)

UNKNOWN = 'unknown'


@dataclass
class LabeledEmbeddings:
    """All stored embeddings of one enrolled identity"""
    identity: str
    embeddings: List[np.ndarray] = field(default_factory=list)


@dataclass
class Contact:
    email: Optional[str] = None
    phone: Optional[str] = None
    parent_email: Optional[str] = None
    parent_phone: Optional[str] = None

    @property
    def is_empty(self):
        return not any(self.to_dict().values())

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(
            email=data.get('email') or None,
            phone=data.get('phone') or data.get('phone_number') or None,
            parent_email=data.get('parent_email') or None,
            parent_phone=data.get('parent_phone') or None,
        )


@dataclass
class Recipient:
    """Addresses a single notification is sent to"""
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass
class AttendanceEvent:
    identity: str
    timestamp: datetime
    subject: Optional[str] = None
    status: Optional[str] = None


@dataclass
class AttendanceDelta:
    present: int = 0
    late: int = 0
    absent: int = 0

    @classmethod
    def for_status(cls, status):
        """Late counts as present as well"""
        if status == PRESENT:
            return cls(present=1)
        if status == LATE:
            return cls(present=1, late=1)
        if status == ABSENT:
            return cls(absent=1)
        raise ValueError(f"Unknown attendance status: {status!r}")


@dataclass
class SubjectCounters:
    present: int = 0
    late: int = 0
    absent: int = 0

    def apply(self, delta: AttendanceDelta) -> 'SubjectCounters':
        return SubjectCounters(
            present=self.present + delta.present,
            late=self.late + delta.late,
            absent=self.absent + delta.absent,
        )

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(
            present=int(data.get('present') or 0),
            late=int(data.get('late') or 0),
            absent=int(data.get('absent') or 0),
        )


def group_by_identity(pairs) -> List[LabeledEmbeddings]:
    """Group (identity, embedding) rows, keeping first-seen identity order"""
    grouped: Dict[str, LabeledEmbeddings] = {}
    for identity, embedding in pairs:
        if identity not in grouped:
            grouped[identity] = LabeledEmbeddings(identity)
        grouped[identity].embeddings.append(np.asarray(embedding, dtype=np.float32))
    return list(grouped.values())
