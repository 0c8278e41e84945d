"""
Bidirectional projection between module parameters and GitLab API objects.

Every function here is pure: it takes plain dictionaries and returns new
ones, without touching the network or the module. The runners compose them.

Tracked state dictionaries use module parameter names. Multi-valued fields
that have no meaningful order (a commit's parent IDs) are held as
`frozenset`s so two states compare equal regardless of the order the API
returned them in; `to_output` turns them back into sorted lists for Ansible.
"""

import json

from .schema import BRANCH_SCHEMA, COMMIT_FIELDS, GROUP_API_NAMES, GROUP_SCHEMA


def normalize(value):
    """
    Converts a value into an order-insensitive, comparable form.

    Lists of hashable values become a `frozenset`; lists of dictionaries become
    a `frozenset` of canonical JSON strings. Anything else is returned as-is.
    """
    if isinstance(value, (set, frozenset)):
        return frozenset(value)
    if not isinstance(value, list):
        return value
    if not value:
        return frozenset()
    if isinstance(value[0], dict):
        return frozenset(
            json.dumps(to_output(item), sort_keys=True, separators=(",", ":"))
            for item in value
        )
    try:
        return frozenset(value)
    except TypeError:
        return value


def flatten_commit(commit) -> list:
    """
    Projects a branch's commit into a zero- or one-element list.

    A missing (null) commit yields `[]`, never `None`, so the shape of the
    `commit` attribute is the same whether or not the branch resolved a commit.
    """
    if not commit:
        return []

    snapshot = {key: commit.get(key) for key in COMMIT_FIELDS}
    snapshot["parent_ids"] = frozenset(commit.get("parent_ids") or [])
    return [snapshot]


def branch_state(project, ref: str, branch: dict) -> dict:
    """
    Builds the tracked state of a branch from the API response.

    `project` and `ref` are not returned by the branch endpoint, so they are
    carried over from the declared (or decoded) values.
    """
    state = {
        "name": branch.get("name"),
        "project": str(project),
        "ref": ref,
        "web_url": branch.get("web_url"),
        "protected": branch.get("protected"),
        "default": branch.get("default"),
        "can_push": branch.get("can_push"),
        "developer_can_push": branch.get("developers_can_push"),
        "developer_can_merge": branch.get("developers_can_merge"),
        "merged": branch.get("merged"),
        "commit": flatten_commit(branch.get("commit")),
    }
    return {key: state[key] for key in (a.name for a in BRANCH_SCHEMA.attributes)}


def group_state(group: dict) -> dict:
    """
    Builds the tracked state of a group from the API response.
    """
    state = {"id": group.get("id")}
    for attribute in GROUP_SCHEMA.attributes:
        api_name = GROUP_API_NAMES.get(attribute.name, attribute.name)
        state[attribute.name] = group.get(api_name)
    # A top-level group has no parent; the declared default for that is 0.
    state["parent_id"] = group.get("parent_id") or 0
    return state


def build_payload(schema, params: dict, api_names: dict | None = None) -> dict:
    """
    Builds a create payload from the declared parameters.

    Computed attributes are never sent and unset (`None`) parameters are left
    out so the API applies its own defaults.
    """
    api_names = api_names or {}
    payload = {}
    for attribute in schema.declared:
        value = params.get(attribute.name)
        if value is not None:
            payload[api_names.get(attribute.name, attribute.name)] = value
    return payload


def _diff(attributes, params: dict, state: dict) -> list:
    changes = []
    for attribute in attributes:
        new_value = params.get(attribute.name)
        old_value = state.get(attribute.name)
        # An omitted parameter is not managed, it must never reset the remote value.
        if new_value is None:
            continue
        if normalize(_coerce(new_value, old_value)) != normalize(old_value):
            changes.append({"param": attribute.name, "old": old_value, "new": new_value})
    return changes


def _coerce(new_value, old_value):
    # Projects and groups may be declared as "42" and reported as 42.
    if isinstance(new_value, str) and isinstance(old_value, int) and not isinstance(old_value, bool):
        return int(new_value) if new_value.isdigit() else new_value
    if isinstance(new_value, int) and not isinstance(new_value, bool) and isinstance(old_value, str):
        return str(new_value)
    return new_value


def diff_updatable(schema, params: dict, state: dict) -> list:
    """
    Lists the in-place changes between declared parameters and tracked state.

    Only REQUIRED and OPTIONAL attributes are considered; force-new and
    computed attributes never appear in an update.

    Returns:
        A list of `{"param": str, "old": any, "new": any}` dictionaries.
    """
    return _diff(schema.updatable, params, state)


def diff_force_new(schema, params: dict, state: dict) -> list:
    """
    Lists the force-new attributes whose declared value differs from the
    tracked state. A non-empty result means the resource has to be destroyed
    and created again.
    """
    return _diff(schema.force_new, params, state)


def build_update_payload(changes: list, api_names: dict | None = None) -> dict:
    api_names = api_names or {}
    return {api_names.get(c["param"], c["param"]): c["new"] for c in changes}


def to_output(value):
    """
    Recursively converts sets into sorted lists so the value is JSON-serializable
    and stable between runs.
    """
    if isinstance(value, dict):
        return {key: to_output(item) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, (list, tuple)):
        return [to_output(item) for item in value]
    return value
