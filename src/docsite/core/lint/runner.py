"""Run every hygiene check across a set of staged documents"""

from datetime import date

from docsite.core.lint.code import check_code_samples
from docsite.core.lint.dates import check_dates
from docsite.core.lint.findings import LintReport
from docsite.core.lint.frontmatter import check_frontmatter
from docsite.core.lint.links import check_links, resolve_target, split_target
from docsite.core.models import LinkKind, StagedDoc
from docsite.core.render import MAX_INCLUDE_DEPTH
from docsite.logging import get_logger


DEFAULT_REQUIRED_FIELDS = ["title", "description"]

logger = get_logger(__name__)


def page_anchors(docs: list[StagedDoc]) -> dict[str, set[str]]:
    """Heading anchors per doc path, including the headings its INCLUDE directives pull in."""
    own = {d.path: {h.anchor for h in d.headings} for d in docs}
    includes = {
        d.path: [resolve_target(d.path, split_target(l.target)[0]) for l in d.links if l.kind == LinkKind.include]
        for d in docs
    }

    def _collect(path: str, depth: int) -> set[str]:
        anchors = set(own.get(path, ()))
        if depth < MAX_INCLUDE_DEPTH:
            for target in includes.get(path, ()):
                anchors |= _collect(target, depth + 1)
        return anchors

    return {path: _collect(path, 0) for path in own}


def lint_documents(
    docs: list[StagedDoc],
    as_of: date | None = None,
    required_fields: list[str] | None = None,
    ) -> LintReport:
    """Check front matter, links, code samples, and dates for every doc.

    Cross-document anchors are only checked for targets within docs.
    as_of defaults to today.
    """
    as_of = as_of or date.today()
    required = DEFAULT_REQUIRED_FIELDS if required_fields is None else required_fields
    anchors_by_path = page_anchors(docs)

    findings = []
    for doc in docs:
        doc_findings = (
            check_frontmatter(doc, required)
            + check_links(doc, anchors_by_path)
            + check_code_samples(doc)
            + check_dates(doc, as_of)
        )
        for f in doc_findings:
            logger.info("lint.finding", path=f.path, line=f.line, rule=f.rule, severity=f.severity.value)
        findings.extend(doc_findings)

    findings.sort(key=lambda f: (f.path, f.line or 0, f.rule))
    return LintReport(documents=len(docs), findings=findings)
