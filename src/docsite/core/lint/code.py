"""Syntactic well-formedness checks for xaml/xml and csharp code samples"""

import re
import xml.etree.ElementTree as ET

from docsite.core.lint.findings import Finding
from docsite.core.models import CodeSample, StagedDoc


XML_LANGUAGES = {"xaml", "xml"}
CSHARP_LANGUAGES = {"csharp", "cs", "c#"}

XML_DECL_RE = re.compile(r'^\s*<\?xml[^>]*\?>')
PREFIX_RE = re.compile(r'(?:</?|\s)([A-Za-z_][\w.-]*?):[A-Za-z_]')
RESERVED_PREFIXES = {"xml", "xmlns"}
FRAGMENT_TAG = "docsite-fragment"

OPENERS = {'(': ')', '[': ']', '{': '}'}
CLOSERS = {v: k for k, v in OPENERS.items()}
HOLE = 'I'  # stack marker for an interpolation hole inside $"..."
RAW_STRING_RE = re.compile(r'\$*("{3,})')   # $"""...""", $$"""...""", """"...""""


class SyntaxProblem(Exception):
    """First structural problem found in a sample; line is 1-based within the sample."""

    def __init__(self, line: int, message: str):
        super().__init__(message)
        self.line = line
        self.message = message


def check_xml(source: str) -> None:
    """Raise SyntaxProblem unless source is a well-formed XML fragment.

    Several root elements and namespace prefixes declared outside the snippet
    are accepted, since samples are usually cut from a larger page.
    """
    decl = XML_DECL_RE.match(source)
    if decl:
        source = '\n' * decl.group(0).count('\n') + source[decl.end():]
    prefixes = sorted({p for p in PREFIX_RE.findall(source) if p.lower() not in RESERVED_PREFIXES})
    declared = ''.join(f' xmlns:{p}="urn:docsite:{p}"' for p in prefixes)
    wrapped = f"<{FRAGMENT_TAG}{declared}>\n{source}\n</{FRAGMENT_TAG}>"
    try:
        ET.fromstring(wrapped)
    except ET.ParseError as e:
        # errors at the closing wrapper tag belong to the last sample line
        line = min(max(e.position[0] - 1, 1), max(len(source.splitlines()), 1))
        message = re.sub(r':\s*line \d+, column \d+$', '', str(e))
        raise SyntaxProblem(line, f"XML is not well-formed: {message}") from e


class CSharpScanner:
    """Single-pass scanner checking bracket balance and literal termination in C# source."""

    def __init__(self, source: str):
        self.src = source
        self.n = len(source)
        self.i = 0
        self.line = 1
        self.line_start = 0
        self.stack: list[tuple[str, int, bool]] = []   # (opener, line, verbatim hole)

    def scan(self) -> None:
        src = self.src
        while self.i < self.n:
            c = src[self.i]
            if c == '\n':
                self._newline(self.i)
                self.i += 1
            elif src.startswith('//', self.i):
                self._skip_line()
            elif src.startswith('/*', self.i):
                self._block_comment()
            elif c == '#' and not src[self.line_start:self.i].strip():
                self._skip_line()
            elif self._raw_string():
                pass
            elif self._string_prefix():
                pass
            elif c == "'":
                self._char_literal()
            elif c in OPENERS:
                self.stack.append((c, self.line, False))
                self.i += 1
            elif c in CLOSERS:
                self._close(c)
            else:
                self.i += 1

        if self.stack:
            opener, line, _ = self.stack[-1]
            if opener == HOLE:
                raise SyntaxProblem(line, "Unterminated interpolated string")
            raise SyntaxProblem(line, f"Unclosed '{opener}'")

    def _newline(self, at: int) -> None:
        self.line += 1
        self.line_start = at + 1

    def _skip_line(self) -> None:
        end = self.src.find('\n', self.i)
        self.i = self.n if end == -1 else end

    def _block_comment(self) -> None:
        end = self.src.find('*/', self.i + 2)
        if end == -1:
            raise SyntaxProblem(self.line, "Unterminated block comment")
        self._advance_to(end + 2)

    def _advance_to(self, end: int) -> None:
        """Move to end, counting any newlines passed."""
        for k in range(self.i, end):
            if self.src[k] == '\n':
                self._newline(k)
        self.i = end

    def _raw_string(self) -> bool:
        """Skip a raw string literal at i, interpolated or not; it ends at the same run of quotes."""
        m = RAW_STRING_RE.match(self.src, self.i)
        if not m:
            return False
        delimiter = m.group(1)
        end = self.src.find(delimiter, m.end())
        if end == -1:
            raise SyntaxProblem(self.line, "Unterminated raw string literal")
        self._advance_to(end + len(delimiter))
        return True

    def _string_prefix(self) -> bool:
        """Start a string literal at i if one begins here."""
        src = self.src
        for prefix, interpolated, verbatim in (('$@"', True, True), ('@$"', True, True),
                                                ('$"', True, False), ('@"', False, True),
                                                ('"', False, False)):
            if src.startswith(prefix, self.i):
                self.i += len(prefix)
                self._string_body(interpolated, verbatim, self.line)
                return True
        return False

    def _string_body(self, interpolated: bool, verbatim: bool, start_line: int) -> None:
        """Consume a string up to its closing quote, or up to an interpolation hole."""
        src = self.src
        while self.i < self.n:
            c = src[self.i]
            nxt = src[self.i + 1] if self.i + 1 < self.n else ''
            if c == '\\' and not verbatim:
                self.i += 2
            elif c == '"':
                if verbatim and nxt == '"':
                    self.i += 2
                    continue
                self.i += 1
                return
            elif c == '\n':
                if not verbatim:
                    raise SyntaxProblem(start_line, "Unterminated string literal")
                self._newline(self.i)
                self.i += 1
            elif interpolated and c in '{}' and nxt == c:
                self.i += 2
            elif interpolated and c == '{':
                self.stack.append((HOLE, start_line, verbatim))
                self.i += 1
                return
            else:
                self.i += 1
        raise SyntaxProblem(start_line, "Unterminated string literal")

    def _char_literal(self) -> None:
        k = self.i + 1
        while k < self.n and self.src[k] not in "'\n":
            k += 2 if self.src[k] == '\\' else 1
        if k >= self.n or self.src[k] != "'":
            raise SyntaxProblem(self.line, "Unterminated character literal")
        self.i = k + 1

    def _close(self, c: str) -> None:
        if not self.stack:
            raise SyntaxProblem(self.line, f"Unexpected '{c}'")
        opener, line, verbatim = self.stack.pop()
        if opener == HOLE and c == '}':
            self.i += 1
            self._string_body(True, verbatim, line)
            return
        if opener != CLOSERS[c]:
            expected = '}' if opener == HOLE else OPENERS[opener]
            raise SyntaxProblem(self.line, f"Mismatched '{c}': expected '{expected}' to close line {line}")
        self.i += 1


def check_csharp(source: str) -> None:
    """Raise SyntaxProblem on unbalanced brackets or unterminated literals/comments."""
    CSharpScanner(source).scan()


def check_sample(sample: CodeSample) -> SyntaxProblem | None:
    """Return the first problem in a sample, or None when it is well-formed or not checked."""
    try:
        if sample.language in XML_LANGUAGES:
            check_xml(sample.content)
        elif sample.language in CSHARP_LANGUAGES:
            check_csharp(sample.content)
    except SyntaxProblem as problem:
        return problem
    return None


def check_code_samples(doc: StagedDoc) -> list[Finding]:
    """One code-malformed finding per broken xaml/xml/csharp fence."""
    findings = []
    for sample in doc.code_samples:
        problem = check_sample(sample)
        if problem is None:
            continue
        line = sample.line + problem.line if sample.line else None
        findings.append(Finding(
            path=doc.path, line=line, rule="code-malformed",
            message=f"{sample.language} sample: {problem.message}",
        ))
    return findings
