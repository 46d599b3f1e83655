from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ValidationFinding:
    """A reported observation ("missing header text", "should have animation"). Never blocks."""
    document_id: str
    slide_index: int
    message: str


@dataclass(frozen=True)
class DocumentProcessed:
    document_id: str
    document_name: str
    findings: Tuple[ValidationFinding, ...] = ()


@dataclass(frozen=True)
class DocumentSkipped:
    document_id: str
    document_name: str
    reason: str
    sheet_row: int = 0


@dataclass(frozen=True)
class DocumentError:
    document_id: str
    document_name: str
    slide_index: int
    message: str


@dataclass(frozen=True)
class FolderStarted:
    name: str
    total_count: int
