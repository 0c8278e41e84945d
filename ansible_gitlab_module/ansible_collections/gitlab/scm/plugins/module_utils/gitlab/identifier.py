"""
Encoding and decoding of the identifiers the modules report back as `id`
and accept for import.

A branch is keyed by its project and its name, joined as `<project>-<name>`.
Branch names routinely contain dashes (`testbranch-1`), project references
are usually numeric, so decoding splits on the leftmost delimiter. The
consequence is that the project part must never contain the delimiter; a
project referenced by a path such as `group/my-project` has to be given by
its numeric ID before it can be encoded.
"""

from .errors import MalformedIdentifierError

DELIMITER = "-"


def build_two_part_id(scope, name: str, delimiter: str = DELIMITER) -> str:
    """
    Encodes `scope` and `name` into a single identifier.

    Raises:
        MalformedIdentifierError: If either part is empty or the scope contains
                                  the delimiter, which would make decoding ambiguous.
    """
    scope = str(scope)
    if not scope or not name:
        raise MalformedIdentifierError(
            f"Cannot build an identifier from scope '{scope}' and name '{name}': both parts are required."
        )
    if delimiter in scope:
        raise MalformedIdentifierError(
            f"Cannot build an identifier from scope '{scope}': it contains the delimiter '{delimiter}'. "
            "Reference the project by its numeric ID."
        )
    return f"{scope}{delimiter}{name}"


def parse_two_part_id(value: str, delimiter: str = DELIMITER) -> tuple[str, str]:
    """
    Decodes an identifier built by `build_two_part_id`.

    Returns:
        A `(scope, name)` tuple.

    Raises:
        MalformedIdentifierError: If the value does not consist of two non-empty parts.
    """
    if not isinstance(value, str):
        raise MalformedIdentifierError(f"Unexpected identifier {value!r}: expected a string.")

    scope, found, name = value.partition(delimiter)
    if not found or not scope or not name:
        raise MalformedIdentifierError(
            f"Unexpected identifier format ({value!r}). Expected <project>{delimiter}<name>."
        )
    return scope, name


def parse_group_id(value):
    """
    Decodes a group import identifier.

    Returns:
        An `int` for a numeric ID, otherwise the full path with surrounding
        slashes removed.

    Raises:
        MalformedIdentifierError: For an empty value.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value or "").strip().strip("/")
    if not text:
        raise MalformedIdentifierError(
            f"Unexpected group identifier {value!r}: expected a numeric ID or a full path."
        )
    if text.isdigit():
        return int(text)
    return text
