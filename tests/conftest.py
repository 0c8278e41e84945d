"""Shared fixtures: a fake AnsibleModule and an in-memory GitLab."""

import copy
import itertools
import json
from unittest.mock import MagicMock

import pytest

from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.errors import (
    GitlabApiError,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.schema import (
    BRANCH_SCHEMA,
    GROUP_SCHEMA,
)


class AnsibleExitJson(Exception):
    """Raised in place of AnsibleModule.exit_json."""

    def __init__(self, kwargs):
        super().__init__(kwargs)
        self.result = kwargs


class AnsibleFailJson(Exception):
    """Raised in place of AnsibleModule.fail_json."""

    def __init__(self, kwargs):
        super().__init__(kwargs)
        self.result = kwargs


def _raise_exit(**kwargs):
    raise AnsibleExitJson(kwargs)


def _raise_fail(**kwargs):
    raise AnsibleFailJson(kwargs)


def make_module(schema, params=None, check_mode=False, **extra_spec):
    """Builds a mock AnsibleModule whose params carry the argument_spec defaults."""
    spec = schema.argument_spec(**extra_spec)
    resolved = {key: value.get("default") for key, value in spec.items()}
    resolved["access_token"] = "glpat-test"
    resolved.update(params or {})

    module = MagicMock()
    module.params = resolved
    module.check_mode = check_mode
    module.jsonify.side_effect = json.dumps
    module.exit_json.side_effect = _raise_exit
    module.fail_json.side_effect = _raise_fail
    return module


def not_found(url="") -> GitlabApiError:
    return GitlabApiError(404, "HTTP Error 404: Not Found", url=url, body={"message": "404 Not found"})


MAIN_COMMIT = {
    "id": "7b5c3cc8be40ee161ae89a06bba6229da1032a0c",
    "short_id": "7b5c3cc8",
    "title": "add projects API",
    "message": "add projects API",
    "author_name": "John Smith",
    "author_email": "john@example.com",
    "authored_date": "2012-06-27T05:51:39-07:00",
    "committer_name": "John Smith",
    "committer_email": "john@example.com",
    "committed_date": "2012-06-28T03:44:20-07:00",
    "parent_ids": ["4ad91d3c1144c406e50c7b33bae684bd6837faf8", "ae1d9fb46aa2b07ee9836d49862ec4e2c46fbbba"],
}


class FakeGitlab:
    """
    An in-memory stand-in for `GitlabClient`.

    It answers the same read helpers and the raw `send_request` calls issued by
    commands. Group deletion can be made eventually consistent: after a DELETE,
    `group_delete_lag` lookups still return the live group, then the group is
    either gone (404) or marked for deletion, depending on `soft_delete`.
    """

    def __init__(self):
        self.projects = {"42": {"id": 42, "path_with_namespace": "my-group/my-project"}}
        self.branches = {("42", "main"): self._branch("main", MAIN_COMMIT, default=True)}
        self.groups = {}
        self.deleted_groups = {}
        self.group_delete_lag = 0
        self.soft_delete = False
        self.calls = []
        self._ids = itertools.count(100)

    @staticmethod
    def _branch(name, commit, default=False):
        return {
            "name": name,
            "merged": False,
            "protected": default,
            "default": default,
            "developers_can_push": False,
            "developers_can_merge": False,
            "can_push": True,
            "web_url": f"https://gitlab.example.com/my-group/my-project/-/tree/{name}",
            "commit": copy.deepcopy(commit),
        }

    def _project_key(self, project):
        project = str(project)
        for key, data in self.projects.items():
            if project in (key, data["path_with_namespace"]):
                return key
        raise not_found(f"/projects/{project}")

    # --- Read helpers ---

    def build_url(self, path, path_params=None):
        if path_params:
            path = path.format(**path_params)
        return f"https://gitlab.example.com/api/v4{path}"

    def get_project(self, project):
        self.calls.append(("GET", f"/projects/{project}"))
        return copy.deepcopy(self.projects[self._project_key(project)])

    def get_branch(self, project, name):
        self.calls.append(("GET", f"/projects/{project}/repository/branches/{name}"))
        key = (self._project_key(project), name)
        if key not in self.branches:
            raise not_found()
        return copy.deepcopy(self.branches[key])

    def get_group(self, group):
        self.calls.append(("GET", f"/groups/{group}"))
        group_id = self._group_id(group)
        if group_id in self.deleted_groups:
            pending = self.deleted_groups[group_id]
            if pending["lag"] > 0:
                pending["lag"] -= 1
                return copy.deepcopy(pending["group"])
            if self.soft_delete:
                marked = copy.deepcopy(pending["group"])
                marked["marked_for_deletion_on"] = "2024-01-08"
                return marked
            raise not_found()
        if group_id not in self.groups:
            raise not_found()
        return copy.deepcopy(self.groups[group_id])

    def _group_id(self, group):
        if isinstance(group, int) or str(group).isdigit():
            return int(group)
        for source in (self.groups, {k: v["group"] for k, v in self.deleted_groups.items()}):
            for group_id, data in source.items():
                if data["full_path"] == group:
                    return group_id
        return None

    def add_group(self, name, path, parent_id=None, **attributes):
        group_id = next(self._ids)
        parent_path = self.groups[parent_id]["full_path"] + "/" if parent_id else ""
        self.groups[group_id] = {
            "id": group_id,
            "name": name,
            "path": path,
            "full_path": f"{parent_path}{path}",
            "full_name": name,
            "description": "",
            "visibility": "private",
            "lfs_enabled": True,
            "request_access_enabled": False,
            "share_with_group_lock": False,
            "auto_devops_enabled": None,
            "emails_disabled": None,
            "mentions_disabled": None,
            "project_creation_level": "maintainer",
            "subgroup_creation_level": "owner",
            "require_two_factor_authentication": False,
            "two_factor_grace_period": 48,
            "parent_id": parent_id,
            "web_url": f"https://gitlab.example.com/groups/{parent_path}{path}",
            "runners_token": "GR1348941secret",
            "marked_for_deletion_on": None,
        }
        self.groups[group_id].update(attributes)
        return copy.deepcopy(self.groups[group_id])

    # --- Raw requests issued by commands ---

    def send_request(self, method, path, data=None, path_params=None):
        path_params = path_params or {}
        self.calls.append((method, path.format(**path_params)))

        if (method, path) == ("POST", "/projects/{project}/repository/branches"):
            project = self._project_key(path_params["project"])
            if (project, data["branch"]) in self.branches:
                raise GitlabApiError(400, "Bad Request", body={"message": "Branch already exists"})
            source = self.branches.get((project, data["ref"]))
            if source is None:
                raise GitlabApiError(400, "Bad Request", body={"message": "Invalid reference name"})
            branch = self._branch(data["branch"], source["commit"])
            self.branches[(project, data["branch"])] = branch
            return copy.deepcopy(branch), 201

        if (method, path) == ("DELETE", "/projects/{project}/repository/branches/{branch}"):
            key = (self._project_key(path_params["project"]), path_params["branch"])
            if key not in self.branches:
                raise not_found()
            del self.branches[key]
            return None, 204

        if (method, path) == ("POST", "/groups"):
            attributes = {k: v for k, v in data.items() if k not in ("name", "path", "parent_id")}
            group = self.add_group(data["name"], data["path"], data.get("parent_id"), **attributes)
            return group, 201

        if (method, path) == ("PUT", "/groups/{id}"):
            group_id = int(path_params["id"])
            if group_id not in self.groups:
                raise not_found()
            self.groups[group_id].update(data)
            return copy.deepcopy(self.groups[group_id]), 200

        if (method, path) == ("DELETE", "/groups/{id}"):
            group_id = int(path_params["id"])
            if group_id not in self.groups:
                raise not_found()
            group = self.groups.pop(group_id)
            self.deleted_groups[group_id] = {"group": group, "lag": self.group_delete_lag}
            return None, 202

        raise AssertionError(f"Unexpected request {method} {path}")


class FakeClock:
    """A monotonic clock that only advances when something sleeps or ticks."""

    def __init__(self, tick=0.0):
        self.now = 0.0
        self.tick = tick
        self.sleeps = []

    def __call__(self):
        current = self.now
        self.now += self.tick
        return current

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def gitlab():
    return FakeGitlab()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def branch_module():
    def factory(params=None, check_mode=False):
        return make_module(BRANCH_SCHEMA, params, check_mode)

    return factory


@pytest.fixture
def group_module():
    def factory(params=None, check_mode=False):
        return make_module(GROUP_SCHEMA, params, check_mode)

    return factory
