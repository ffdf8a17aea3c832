from typing import List, Optional

from pydantic import BaseModel


class ProvenanceLog(BaseModel):
    """
    Append-only processing trail of one profile record.

    ``operation_history`` holds the identifier of every stage that touched
    the record, ``data_status`` the human readable outcome of those stages.
    Entries are never removed or rewritten.
    """

    data_status: List[str] = []
    operation_history: List[str] = []

    def record(self, stage: str, status: Optional[str] = None) -> None:
        self.operation_history.append(stage)
        if status is not None:
            self.data_status.append(status)

    def note(self, status: str) -> None:
        self.data_status.append(status)

    @property
    def last_status(self) -> Optional[str]:
        if not self.data_status:
            return None
        return self.data_status[-1]

    def has_stage(self, stage: str) -> bool:
        return stage in self.operation_history
