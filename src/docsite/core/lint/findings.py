"""Lint finding and report models"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, computed_field


class Severity(str, Enum):
    error = "error"
    warning = "warning"


class Finding(BaseModel):
    """One hygiene problem located in a document."""
    path: str
    line: Optional[int] = None
    rule: str
    severity: Severity = Severity.error
    message: str

    def format(self) -> str:
        where = f"{self.path}:{self.line}" if self.line else self.path
        return f"{where}: {self.severity.value} [{self.rule}] {self.message}"


class LintReport(BaseModel):
    documents: int = 0
    findings: list[Finding] = []

    @computed_field
    @property
    def errors(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.error)

    @computed_field
    @property
    def warnings(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.warning)

    @computed_field
    @property
    def ok(self) -> bool:
        return self.errors == 0

    def summary(self) -> str:
        return f"Checked {self.documents} document(s): {self.errors} error(s), {self.warnings} warning(s)"
