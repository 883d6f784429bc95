"""Front matter date checks"""

from datetime import date

from docsite.core.lint.findings import Finding, Severity
from docsite.core.models import StagedDoc, parse_doc_date


DATE_FIELD = "ms.date"


def check_dates(doc: StagedDoc, as_of: date) -> list[Finding]:
    """ms.date must be a real calendar date no later than as_of."""
    if doc.frontmatter_error:
        return []
    if DATE_FIELD not in doc.frontmatter:
        return [Finding(
            path=doc.path, line=1, rule="date-missing", severity=Severity.warning,
            message=f"No '{DATE_FIELD}' in front matter",
        )]
    try:
        value = parse_doc_date(doc.frontmatter[DATE_FIELD])
    except ValueError as e:
        return [Finding(path=doc.path, line=1, rule="date-invalid", message=str(e))]
    if value > as_of:
        return [Finding(
            path=doc.path, line=1, rule="date-future",
            message=f"'{DATE_FIELD}' {value.isoformat()} is after {as_of.isoformat()}",
        )]
    return []
