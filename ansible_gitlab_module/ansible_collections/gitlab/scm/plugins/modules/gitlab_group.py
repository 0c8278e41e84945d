#!/usr/bin/python

DOCUMENTATION = r"""
---
module: gitlab_group
short_description: Manage GitLab groups and subgroups
description:
  - Creates, updates or deletes a GitLab group.
  - Changing O(parent_id) of an existing group deletes it and creates it again.
  - GitLab deletes groups asynchronously. After the delete request the module polls the
    group until it is gone or marked for deletion, for at most O(delete_timeout) seconds.
options:
  name:
    description: Display name of the group.
    type: str
    required: true
  path:
    description: URL path of the group, relative to its parent.
    type: str
    required: true
  description:
    description: Description of the group.
    type: str
  parent_id:
    description: ID of the parent group. C(0) creates a top-level group.
    type: int
    default: 0
  visibility_level:
    description: Visibility of the group.
    type: str
    choices: [private, internal, public]
  lfs_enabled:
    description: Enable Git LFS for the projects of the group.
    type: bool
    default: true
  request_access_enabled:
    description: Allow users to request access to the group.
    type: bool
  share_with_group_lock:
    description: Prevent sharing projects of the group with other groups.
    type: bool
  auto_devops_enabled:
    description: Default Auto DevOps setting for the projects of the group.
    type: bool
  emails_disabled:
    description: Disable email notifications.
    type: bool
  mentions_disabled:
    description: Disable the capability of mentioning the group.
    type: bool
  project_creation_level:
    description: Who can create projects in the group.
    type: str
    choices: [noone, maintainer, developer]
    default: maintainer
  subgroup_creation_level:
    description: Who can create subgroups.
    type: str
    choices: [owner, maintainer]
    default: owner
  require_two_factor_authentication:
    description: Require all users of the group to set up two-factor authentication.
    type: bool
  two_factor_grace_period:
    description: Hours users have to set up two-factor authentication.
    type: int
    default: 48
  id:
    description: Numeric ID or full path of an existing group to adopt.
    type: str
  delete_timeout:
    description: Seconds to wait for GitLab to confirm a group deletion.
    type: int
    default: 15
  delete_interval:
    description: Seconds between two lookups while waiting for a deletion.
    type: float
    default: 0.5
  state:
    description: Whether the group should exist.
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
- name: Create a public group
  gitlab.scm.gitlab_group:
    name: foo-name
    path: foo-path
    description: Managed by Ansible
    visibility_level: public

- name: Create a subgroup
  gitlab.scm.gitlab_group:
    name: nested
    path: nested
    parent_id: 1234

- name: Delete the group and wait for GitLab to confirm it
  gitlab.scm.gitlab_group:
    name: foo-name
    path: foo-path
    state: absent
    delete_timeout: 30
"""

RETURN = r"""
id:
  description: Numeric ID of the group. Empty when the group is absent.
  returned: always
  type: str
resource:
  description: The group as read back from GitLab.
  returned: always
  type: dict
commands:
  description: The API requests that were (or, in check mode, would be) sent.
  returned: always
  type: list
"""

from ansible.module_utils.basic import AnsibleModule

from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.group_runner import (
    GroupRunner,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.poller import (
    DEFAULT_DELETE_INTERVAL,
    DEFAULT_DELETE_TIMEOUT,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.schema import (
    GROUP_SCHEMA,
)


def main():
    module = AnsibleModule(
        argument_spec=GROUP_SCHEMA.argument_spec(
            delete_timeout={"type": "int", "default": DEFAULT_DELETE_TIMEOUT},
            delete_interval={"type": "float", "default": DEFAULT_DELETE_INTERVAL},
        ),
        supports_check_mode=True,
    )
    context = {
        "delete_timeout": module.params["delete_timeout"],
        "delete_interval": module.params["delete_interval"],
    }
    runner = GroupRunner(module, context)
    runner.run()


if __name__ == "__main__":
    main()
