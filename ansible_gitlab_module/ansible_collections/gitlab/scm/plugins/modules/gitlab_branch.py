#!/usr/bin/python

DOCUMENTATION = r"""
---
module: gitlab_branch
short_description: Create or delete a repository branch in a GitLab project
description:
  - Ensures a branch exists in a GitLab project, created from a reference, or is absent.
  - Every option describing the branch is force-new. When an adopted branch (see O(id))
    differs from the declared one, it is deleted and created again.
options:
  name:
    description: Name of the branch. Required to create a branch.
    type: str
  project:
    description:
      - Numeric ID or full path of the project owning the branch. Required to create a branch.
    type: str
  ref:
    description: Branch name or commit SHA the branch is created from.
    type: str
    default: main
  id:
    description:
      - Identifier of an existing branch to adopt, in the form C(<project>-<name>).
      - The project part must not contain a dash; use the numeric project ID.
    type: str
  state:
    description: Whether the branch should exist.
    type: str
    choices: [present, absent]
    default: present
  api_url:
    description: Base URL of the GitLab API. Falls back to E(GITLAB_API_URL).
    type: str
    default: https://gitlab.com/api/v4
  access_token:
    description: GitLab access token. Falls back to E(GITLAB_TOKEN).
    type: str
    required: true
  validate_certs:
    description: Whether to validate TLS certificates.
    type: bool
    default: true
  request_timeout:
    description: Timeout in seconds for each API request.
    type: int
    default: 30
"""

EXAMPLES = r"""
- name: Create a feature branch from main
  gitlab.scm.gitlab_branch:
    project: "42"
    name: testbranch-1
    ref: main

- name: Adopt an existing branch
  gitlab.scm.gitlab_branch:
    id: 42-release-1.2

- name: Remove the branch
  gitlab.scm.gitlab_branch:
    project: "42"
    name: testbranch-1
    state: absent
"""

RETURN = r"""
id:
  description: Identifier of the branch, C(<project>-<name>). Empty when the branch is absent.
  returned: always
  type: str
resource:
  description: The branch as read back from GitLab.
  returned: always
  type: dict
  contains:
    commit:
      description: The commit the branch points to, as a list of at most one element.
      type: list
commands:
  description: The API requests that were (or, in check mode, would be) sent.
  returned: always
  type: list
"""

from ansible.module_utils.basic import AnsibleModule

from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.branch_runner import (
    BranchRunner,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.schema import (
    BRANCH_SCHEMA,
)


def main():
    module = AnsibleModule(
        argument_spec=BRANCH_SCHEMA.argument_spec(),
        required_one_of=[["id", "name"], ["id", "project"]],
        supports_check_mode=True,
    )
    runner = BranchRunner(module, {})
    runner.run()


if __name__ == "__main__":
    main()
