import pytest

from agent_keeper.errors import FrontmatterError
from agent_keeper.markdown import (
    extract_frontmatter,
    format_frontmatter_value,
    set_frontmatter_field,
)


SKILL = """---
name: review
description: Review pull requests
tags:
  - git
  - review
---

# Review
Body text.
"""


def test_extract_frontmatter_parses_yaml_and_body() -> None:
    frontmatter = extract_frontmatter(SKILL)

    assert frontmatter is not None
    assert frontmatter.data["tags"] == ["git", "review"]
    assert frontmatter.scalars() == {"name": "review", "description": "Review pull requests"}
    assert frontmatter.body.startswith("# Review")


@pytest.mark.parametrize(
    "text",
    ["no frontmatter", "---\n---\nbody", "---\n- a\n- b\n---\n", "---\nkey: [unclosed\n---\n"],
)
def test_extract_frontmatter_rejects_missing_or_invalid(text: str) -> None:
    assert extract_frontmatter(text) is None


def test_set_field_replaces_only_that_line() -> None:
    updated = set_frontmatter_field(SKILL, "description", "Review diffs")

    assert updated == SKILL.replace("Review pull requests", "Review diffs")


def test_set_field_appends_missing_key_before_closing_delimiter() -> None:
    updated = set_frontmatter_field(SKILL, "disabled", True)

    assert "  - review\ndisabled: true\n---\n" in updated
    assert extract_frontmatter(updated).data["disabled"] is True


def test_set_field_creates_frontmatter_when_absent() -> None:
    assert set_frontmatter_field("# Title\n", "name", "demo") == "---\nname: demo\n---\n# Title\n"


def test_set_field_preserves_crlf_line_endings() -> None:
    text = "---\r\nname: a\r\n---\r\nbody\r\n"

    assert set_frontmatter_field(text, "name", "b") == "---\r\nname: b\r\n---\r\nbody\r\n"


def test_set_field_refuses_list_values() -> None:
    with pytest.raises(FrontmatterError):
        set_frontmatter_field(SKILL, "tags", "git")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("plain text", "plain text"),
        ("yes", '"yes"'),
        ("key: value", '"key: value"'),
        ("- item", '"- item"'),
        ("42", '"42"'),
        ("", '""'),
        (False, "false"),
        (3, "3"),
        (None, "null"),
    ],
)
def test_format_frontmatter_value_quotes_ambiguous_strings(value, expected) -> None:
    assert format_frontmatter_value(value) == expected
