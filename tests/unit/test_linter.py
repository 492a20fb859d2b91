"""
Unit tests for the post linter.

Each broken sample is expected to produce exactly the codes listed, so
that one problem never cascades into unrelated findings.
"""

from pathlib import Path

import pytest

from folio.config.models import LintConfig
from folio.post.linter import LintReport, PostLinter, Severity
from tests.fixtures import (
    get_minimal_post,
    get_post_bad_date,
    get_post_empty_link,
    get_post_missing_title,
    get_post_unclosed_fence,
    get_post_unresolved_reference,
    get_quirky_post,
    get_valid_post,
    make_post,
    write_post,
)

REQUIRED = "layout: post\ntitle: T\ndescription: D\ndate: 2017-06-28\n"


@pytest.fixture
def linter() -> PostLinter:
    return PostLinter(LintConfig())


class TestValidPosts:
    """Posts that should pass."""

    def test_valid_post_is_clean(self, linter: PostLinter) -> None:
        report = linter.lint_text(get_valid_post())
        assert report.issues == []
        assert report.is_valid(strict=True)

    def test_minimal_post_is_clean(self, linter: PostLinter) -> None:
        assert linter.lint_text(get_minimal_post()).issues == []

    def test_quirky_post_is_clean(self, linter: PostLinter) -> None:
        assert linter.lint_text(get_quirky_post()).issues == []

    def test_unquoted_duration_accepted(self, linter: PostLinter) -> None:
        """Test that YAML's sexagesimal reading of 1:30 is not an error."""
        text = make_post(REQUIRED + "writing_time:\n  writing: 1:30\n")
        assert linter.lint_text(text).issues == []


class TestFrontMatterChecks:
    """Tests for FM codes."""

    def test_missing_front_matter(self, linter: PostLinter) -> None:
        report = linter.lint_text("# No metadata\n")
        assert report.codes == ["FM001"]
        assert report.issues[0].line == 1

    def test_unclosed_front_matter(self, linter: PostLinter) -> None:
        report = linter.lint_text("---\ntitle: T\n")
        assert report.codes == ["FM002"]

    def test_invalid_yaml(self, linter: PostLinter) -> None:
        report = linter.lint_text(make_post("title: [unclosed\n"))
        assert report.codes == ["FM002"]

    def test_missing_required_field(self, linter: PostLinter) -> None:
        report = linter.lint_text(get_post_missing_title())
        assert report.codes == ["FM003"]
        assert report.issues[0].field == "title"

    def test_empty_required_field(self, linter: PostLinter) -> None:
        text = make_post("layout: post\ntitle: ''\ndescription: D\ndate: 2017-06-28\n")
        report = linter.lint_text(text)
        assert report.codes == ["FM003"]
        assert report.issues[0].line == 3

    def test_null_required_field(self, linter: PostLinter) -> None:
        text = make_post("layout: post\ntitle: T\ndescription:\ndate: 2017-06-28\n")
        assert linter.lint_text(text).codes == ["FM003"]

    def test_all_required_fields_missing(self, linter: PostLinter) -> None:
        report = linter.lint_text("---\n---\nBody\n")
        assert report.codes == ["FM003"] * 4

    def test_bad_date(self, linter: PostLinter) -> None:
        report = linter.lint_text(get_post_bad_date())
        assert report.codes == ["FM004"]
        assert report.issues[0].line == 5

    def test_datetime_rejected(self, linter: PostLinter) -> None:
        text = make_post("layout: post\ntitle: T\ndescription: D\ndate: 2017-06-28 10:00:00\n")
        assert linter.lint_text(text).codes == ["FM004"]

    def test_bad_writing_time(self, linter: PostLinter) -> None:
        report = linter.lint_text(make_post(REQUIRED + "writing_time:\n  writing: soon\n"))
        assert report.codes == ["FM005"]
        assert "writing" in report.issues[0].message

    def test_unknown_writing_activity(self, linter: PostLinter) -> None:
        report = linter.lint_text(make_post(REQUIRED + "writing_time:\n  coding: '1:00'\n"))
        assert report.codes == ["FM005"]

    def test_bad_republished_entry(self, linter: PostLinter) -> None:
        text = make_post(REQUIRED + "republished:\n  - resource: Example\n")
        report = linter.lint_text(text)
        assert report.codes == ["FM006"]

    def test_republished_not_a_list(self, linter: PostLinter) -> None:
        report = linter.lint_text(make_post(REQUIRED + "republished: yes\n"))
        assert report.codes == ["FM006"]

    def test_bad_tags(self, linter: PostLinter) -> None:
        report = linter.lint_text(make_post(REQUIRED + "tags:\n  nested: mapping\n"))
        assert report.codes == ["FM009"]

    def test_title_wrong_type(self, linter: PostLinter) -> None:
        text = make_post("layout: post\ntitle: [a, b]\ndescription: D\ndate: 2017-06-28\n")
        assert linter.lint_text(text).codes == ["FM010"]

    def test_unknown_field_warning(self, linter: PostLinter) -> None:
        report = linter.lint_text(make_post(REQUIRED + "auhtor: me\n"))
        assert report.codes == ["FM007"]
        assert report.issues[0].severity is Severity.WARNING
        assert report.is_valid()
        assert not report.is_valid(strict=True)

    def test_unknown_field_warning_disabled(self) -> None:
        linter = PostLinter(LintConfig(warn_unknown_fields=False))
        assert linter.lint_text(make_post(REQUIRED + "auhtor: me\n")).issues == []

    def test_layout_not_allowed(self) -> None:
        linter = PostLinter(LintConfig(allowed_layouts=["article"]))
        report = linter.lint_text(make_post(REQUIRED))
        assert report.codes == ["FM008"]
        assert report.issues[0].severity is Severity.WARNING

    def test_custom_required_fields(self) -> None:
        """Test that dropping a field from required_fields silences it."""
        linter = PostLinter(LintConfig(required_fields=["title"]))
        report = linter.lint_text(make_post("title: T\n"))
        assert report.issues == []


class TestBodyChecks:
    """Tests for MD codes."""

    def test_unclosed_fence(self, linter: PostLinter) -> None:
        report = linter.lint_text(get_post_unclosed_fence())
        assert report.codes == ["MD001"]
        # 6 front-matter lines, then "Intro", blank, fence
        assert report.issues[0].line == 9

    def test_unclosed_fence_check_disabled(self) -> None:
        linter = PostLinter(LintConfig(check_code_fences=False))
        assert linter.lint_text(get_post_unclosed_fence()).issues == []

    def test_empty_links(self, linter: PostLinter) -> None:
        report = linter.lint_text(get_post_empty_link())
        assert report.codes == ["MD002", "MD002"]
        assert "Image" in report.issues[1].message

    def test_empty_reference_definition(self, linter: PostLinter) -> None:
        report = linter.lint_text(make_post(body="[a][x]\n\n[x]:\n"))
        assert report.codes == ["MD002"]

    def test_unresolved_reference(self, linter: PostLinter) -> None:
        report = linter.lint_text(get_post_unresolved_reference())
        assert report.codes == ["MD003"]

    def test_link_checks_disabled(self) -> None:
        linter = PostLinter(LintConfig(check_links=False))
        assert linter.lint_text(get_post_empty_link()).issues == []

    def test_links_inside_code_ignored(self, linter: PostLinter) -> None:
        body = "```\n[a]()\n```\n\nInline `[b][missing]` too.\n"
        assert linter.lint_text(make_post(body=body)).issues == []

    def test_wrapped_empty_link(self, linter: PostLinter) -> None:
        report = linter.lint_text(make_post(body="\nSee [the error\ntracker]() for details.\n"))
        assert report.codes == ["MD002"]
        assert report.issues[0].line == 8
        assert "[the error tracker]" in report.issues[0].message

    def test_wrapped_unresolved_reference(self, linter: PostLinter) -> None:
        report = linter.lint_text(make_post(body="See [the error\ntracker][nowhere].\n"))
        assert report.codes == ["MD003"]

    def test_wrapped_code_span_ignored(self, linter: PostLinter) -> None:
        report = linter.lint_text(make_post(body="Use `foo\n[x]() bar` in code.\n"))
        assert report.issues == []


class TestFiles:
    """Tests for file-based linting."""

    def test_filename_date_mismatch(self, linter: PostLinter, tmp_path: Path) -> None:
        path = write_post(tmp_path, "2017-06-29-title.md", make_post())
        report = linter.lint_file(path)
        assert report.codes == ["FS001"]
        assert report.path == path

    def test_filename_without_date(self, linter: PostLinter, tmp_path: Path) -> None:
        path = write_post(tmp_path, "about.md", make_post())
        assert linter.lint_file(path).issues == []

    def test_unreadable_file(self, linter: PostLinter, tmp_path: Path) -> None:
        path = tmp_path / "2017-06-28-binary.md"
        path.write_bytes(b"\xff\xfe\x00bad")
        assert linter.lint_file(path).codes == ["FS002"]

    def test_lint_paths_directory(self, linter: PostLinter, tmp_path: Path) -> None:
        write_post(tmp_path, "2017-06-28-a.md", make_post())
        write_post(tmp_path, "nested/2017-06-28-b.markdown", make_post())
        write_post(tmp_path, "notes.txt", "not a post")
        reports = linter.lint_paths([tmp_path])
        assert [report.path.name for report in reports] == [
            "2017-06-28-a.md",
            "2017-06-28-b.markdown",
        ]
        assert all(report.is_valid(strict=True) for report in reports)

    def test_lint_paths_deduplicates(self, linter: PostLinter, tmp_path: Path) -> None:
        path = write_post(tmp_path, "2017-06-28-a.md", make_post())
        assert len(linter.lint_paths([tmp_path, path])) == 1


class TestLintReport:
    """Tests for LintReport helpers."""

    def test_to_dict(self) -> None:
        report = LintReport(path=Path("post.md"))
        report.add("FM007", "Unknown field", severity=Severity.WARNING, line=3, field_name="x")
        data = report.to_dict(strict=True)
        assert data["path"] == "post.md"
        assert data["valid"] is False
        assert data["warnings"] == 1
        assert data["issues"][0] == {
            "code": "FM007",
            "severity": "warning",
            "message": "Unknown field",
            "line": 3,
            "field": "x",
        }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
