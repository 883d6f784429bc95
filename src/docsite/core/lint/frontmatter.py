"""Front matter presence checks"""

from docsite.core.lint.findings import Finding
from docsite.core.models import StagedDoc


def check_frontmatter(doc: StagedDoc, required_fields: list[str]) -> list[Finding]:
    """Front matter must parse and carry every required field with a non-empty value."""
    if doc.frontmatter_error:
        return [Finding(path=doc.path, line=1, rule="frontmatter-invalid", message=doc.frontmatter_error)]
    if not doc.frontmatter:
        return [Finding(path=doc.path, line=1, rule="frontmatter-missing", message="No front matter block")]

    findings = []
    for field in required_fields:
        value = doc.frontmatter.get(field)
        if value is None or not str(value).strip():
            findings.append(Finding(
                path=doc.path, line=1, rule="frontmatter-missing",
                message=f"Required field '{field}' is missing or empty",
            ))
    return findings
