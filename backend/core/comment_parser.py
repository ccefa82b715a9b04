"""
Catalog comment parser.
A comment written as "Logical name|Longer description" splits on the first
delimiter; without a delimiter the whole comment is the logical name.
"""
from typing import Optional, TypedDict

DELIMITER = "|"


class ParsedComment(TypedDict):
    logical_name: str
    description: str


def parse_comment(comment: Optional[str]) -> ParsedComment:
    if not comment:
        return {"logical_name": "", "description": ""}

    logical_name, sep, description = comment.partition(DELIMITER)
    if not sep:
        return {"logical_name": comment.strip(), "description": ""}
    return {"logical_name": logical_name.strip(), "description": description.strip()}
