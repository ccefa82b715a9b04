import pytest
from core.comment_parser import parse_comment


def test_splits_on_delimiter():
    assert parse_comment("User Name|The user's display name") == {
        "logical_name": "User Name",
        "description": "The user's display name",
    }


def test_without_delimiter_whole_comment_is_logical_name():
    assert parse_comment("Simple label") == {"logical_name": "Simple label", "description": ""}


@pytest.mark.parametrize("comment", [None, ""])
def test_empty_comment(comment):
    assert parse_comment(comment) == {"logical_name": "", "description": ""}


def test_only_first_delimiter_splits():
    parsed = parse_comment("Amount | Net amount | excluding tax")
    assert parsed["logical_name"] == "Amount"
    assert parsed["description"] == "Net amount | excluding tax"


def test_trims_whitespace():
    assert parse_comment("   Padded   ") == {"logical_name": "Padded", "description": ""}
    assert parse_comment("|Only a description") == {"logical_name": "", "description": "Only a description"}
