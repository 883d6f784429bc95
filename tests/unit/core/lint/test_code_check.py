"""Unit tests for core/lint/code.py"""

import pytest

from docsite.core.lint.code import SyntaxProblem, check_code_samples, check_csharp, check_sample, check_xml
from docsite.core.models import CodeSample, StagedDoc


# --- xaml / xml ---

@pytest.mark.parametrize("source", [
    '<Label Text="Hello" />',
    '<?xml version="1.0" encoding="utf-8" ?>\n<ContentPage>\n  <Label />\n</ContentPage>',
    '<Button x:Name="ok" ios:VisualElement.IsLegacyColorModeEnabled="False" />',
    '<Label Text="One" />\n<Label Text="Two" />',
    '<ios:Picker>\n  <!-- <unclosed -->\n</ios:Picker>',
])
def test_xml_accepts_fragments(source):
    """Several roots, undeclared prefixes, declarations and comments are fine."""
    check_xml(source)


def test_xml_mismatched_tag_line():
    """Reported line is relative to the sample, not the wrapper."""
    with pytest.raises(SyntaxProblem) as exc:
        check_xml("<Grid>\n  <Label>\n</Grid>\n")
    assert exc.value.line == 3
    assert exc.value.message.startswith("XML is not well-formed: mismatched tag")


@pytest.mark.parametrize("source", [
    '<Label Text="unterminated />',
    '<Label Text="a" Text="b" />',
    '<StackLayout>',
    '<Label>Tom & Jerry</Label>',
])
def test_xml_rejects_malformed(source):
    with pytest.raises(SyntaxProblem):
        check_xml(source)


# --- csharp ---

@pytest.mark.parametrize("source", [
    'button.On<iOS>().SetIsLegacyColorModeEnabled(false);',
    'var s = $"{dict["key"]} and {{literal}}";',
    'var p = @"C:\\temp\\";',
    'var q = @"say ""hi"" {";',
    'var multi = @"line one\nline two";',
    'var v = $@"{a}\n{b}";',
    "char c = '{'; char d = '\\'';",
    '// if (x) {\nint y = 1;',
    '/* { [ ( */\nint z = 2;',
    '#region Fonts\nint w = 3;\n#endregion',
    'var raw = """\n  { "json": true\n  """;',
    'var json = $"""\n {\n "name": "{{name}}"\n }\n """;\n',
    'var tpl = $$"""\n  { "id": {{id}} }\n  """;',
    'var quoted = """"\n  Contains """ inside\n  """";',
    'var empty = $"";',
    'var nested = $"{(ok ? $"{x}" : "none")}";',
])
def test_csharp_accepts(source):
    check_csharp(source)


@pytest.mark.parametrize("source,line,message", [
    ("void M() {\n  if (x) {\n}\n", 1, "Unclosed '{'"),
    ("int x = 1;\n}", 2, "Unexpected '}'"),
    ("var a = new int[3);", 1, "Mismatched ')'"),
    ('var s = "abc;\nvar t = 1;', 1, "Unterminated string literal"),
    ("var c = 'a;", 1, "Unterminated character literal"),
    ("int a;\n/* never closed", 2, "Unterminated block comment"),
    ('var s = $"{name";', 1, "Unterminated"),
    ('int a;\nvar s = $"""\n  {x}\n', 2, "Unterminated raw string literal"),
])
def test_csharp_rejects(source, line, message):
    with pytest.raises(SyntaxProblem) as exc:
        check_csharp(source)
    assert exc.value.line == line
    assert exc.value.message.startswith(message)


# --- dispatch ---

def test_other_languages_not_checked():
    assert check_sample(CodeSample(language="bash", content="if [ -z {")) is None
    assert check_sample(CodeSample(language="", content="<<<")) is None


@pytest.mark.parametrize("language", ["cs", "c#", "csharp"])
def test_csharp_aliases(language):
    assert check_sample(CodeSample(language=language, content="{")) is not None


def test_findings_carry_file_line():
    """Finding line = fence line + line within the sample."""
    doc = StagedDoc(slug="d", path="d.md", root="/tmp", markdown="", code_samples=[
        CodeSample(language="xaml", content="<Label />\n", line=5),
        CodeSample(language="csharp", content="int a;\nFoo(;\n", line=10),
    ])
    findings = check_code_samples(doc)
    assert len(findings) == 1
    assert findings[0].rule == "code-malformed"
    assert findings[0].line == 12
    assert findings[0].message.startswith("csharp sample:")
