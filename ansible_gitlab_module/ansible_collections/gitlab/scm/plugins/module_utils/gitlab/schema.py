"""
Static description of every resource kind the collection manages.

Each attribute carries a mutability tag that decides how the runners treat it:

- REQUIRED / OPTIONAL: declared by the user, sent on create and diffed for
  in-place updates.
- FORCE_NEW: declared by the user, sent on create, never sent on update. A
  difference against the remote state plans a delete followed by a create.
- COMPUTED: never accepted as a parameter and never sent; populated only from
  remote reads.

`required` on a FORCE_NEW attribute means "required to create". It is checked
by the runner rather than by Ansible, because an imported resource can take
those values from its identifier.

The Ansible `argument_spec` of every module is generated from these schemas.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ansible.module_utils.basic import env_fallback


class Mutability(Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    FORCE_NEW = "force_new"
    COMPUTED = "computed"


@dataclass(frozen=True)
class Attribute:
    name: str
    type: str
    mutability: Mutability
    default: Any = None
    required: bool = False
    choices: tuple | None = None
    no_log: bool = False
    description: str = ""

    @property
    def is_declared(self) -> bool:
        return self.mutability is not Mutability.COMPUTED

    @property
    def is_updatable(self) -> bool:
        return self.mutability in (Mutability.REQUIRED, Mutability.OPTIONAL)

    @property
    def is_force_new(self) -> bool:
        return self.mutability is Mutability.FORCE_NEW

    def to_argument_spec(self) -> dict:
        spec = {"type": self.type}
        if self.mutability is Mutability.REQUIRED:
            spec["required"] = True
        elif self.default is not None:
            spec["default"] = self.default
        if self.choices:
            spec["choices"] = list(self.choices)
        if self.no_log:
            spec["no_log"] = True
        return spec


@dataclass(frozen=True)
class ResourceSchema:
    resource_type: str
    attributes: tuple[Attribute, ...] = field(default_factory=tuple)

    def __getitem__(self, name: str) -> Attribute:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        raise KeyError(name)

    @property
    def declared(self) -> list[Attribute]:
        return [a for a in self.attributes if a.is_declared]

    @property
    def updatable(self) -> list[Attribute]:
        return [a for a in self.attributes if a.is_updatable]

    @property
    def force_new(self) -> list[Attribute]:
        return [a for a in self.attributes if a.is_force_new]

    @property
    def computed(self) -> list[Attribute]:
        return [a for a in self.attributes if not a.is_declared]

    @property
    def required_for_create(self) -> list[str]:
        return [
            a.name
            for a in self.attributes
            if a.required or a.mutability is Mutability.REQUIRED
        ]

    def argument_spec(self, **extra) -> dict:
        """
        Builds the full `argument_spec` for the module managing this resource:
        the shared connection options, every declared attribute, and any
        module-specific `extra` options.
        """
        spec = {key: dict(value) for key, value in COMMON_ARGUMENT_SPEC.items()}
        for attribute in self.declared:
            spec[attribute.name] = attribute.to_argument_spec()
        spec.update(extra)
        return spec


COMMON_ARGUMENT_SPEC = {
    "api_url": {
        "type": "str",
        "default": "https://gitlab.com/api/v4",
        "fallback": (env_fallback, ["GITLAB_API_URL"]),
    },
    "access_token": {
        "type": "str",
        "required": True,
        "no_log": True,
        "fallback": (env_fallback, ["GITLAB_TOKEN"]),
    },
    "validate_certs": {"type": "bool", "default": True},
    "request_timeout": {"type": "int", "default": 30},
    "state": {"type": "str", "default": "present", "choices": ["present", "absent"]},
    "id": {"type": "str"},
}

DEFAULT_BRANCH_REF = "main"

COMMIT_FIELDS = (
    "id",
    "short_id",
    "title",
    "message",
    "author_name",
    "author_email",
    "authored_date",
    "committer_name",
    "committer_email",
    "committed_date",
    "parent_ids",
)

BRANCH_SCHEMA = ResourceSchema(
    resource_type="branch",
    attributes=(
        Attribute("name", "str", Mutability.FORCE_NEW, required=True),
        Attribute("project", "str", Mutability.FORCE_NEW, required=True),
        Attribute("ref", "str", Mutability.FORCE_NEW, default=DEFAULT_BRANCH_REF),
        Attribute("web_url", "str", Mutability.COMPUTED),
        Attribute("protected", "bool", Mutability.COMPUTED),
        Attribute("default", "bool", Mutability.COMPUTED),
        Attribute("can_push", "bool", Mutability.COMPUTED),
        Attribute("developer_can_push", "bool", Mutability.COMPUTED),
        Attribute("developer_can_merge", "bool", Mutability.COMPUTED),
        Attribute("merged", "bool", Mutability.COMPUTED),
        Attribute("commit", "list", Mutability.COMPUTED),
    ),
)

GROUP_SCHEMA = ResourceSchema(
    resource_type="group",
    attributes=(
        Attribute("name", "str", Mutability.REQUIRED),
        Attribute("path", "str", Mutability.REQUIRED),
        Attribute("description", "str", Mutability.OPTIONAL),
        Attribute("lfs_enabled", "bool", Mutability.OPTIONAL, default=True),
        Attribute("request_access_enabled", "bool", Mutability.OPTIONAL),
        Attribute(
            "visibility_level",
            "str",
            Mutability.OPTIONAL,
            choices=("private", "internal", "public"),
        ),
        Attribute("share_with_group_lock", "bool", Mutability.OPTIONAL),
        Attribute("auto_devops_enabled", "bool", Mutability.OPTIONAL),
        Attribute("emails_disabled", "bool", Mutability.OPTIONAL),
        Attribute("mentions_disabled", "bool", Mutability.OPTIONAL),
        Attribute(
            "project_creation_level",
            "str",
            Mutability.OPTIONAL,
            default="maintainer",
            choices=("noone", "maintainer", "developer"),
        ),
        Attribute(
            "subgroup_creation_level",
            "str",
            Mutability.OPTIONAL,
            default="owner",
            choices=("owner", "maintainer"),
        ),
        Attribute("require_two_factor_authentication", "bool", Mutability.OPTIONAL),
        Attribute("two_factor_grace_period", "int", Mutability.OPTIONAL, default=48),
        Attribute("parent_id", "int", Mutability.FORCE_NEW, default=0),
        Attribute("full_path", "str", Mutability.COMPUTED),
        Attribute("full_name", "str", Mutability.COMPUTED),
        Attribute("web_url", "str", Mutability.COMPUTED),
        Attribute("runners_token", "str", Mutability.COMPUTED, no_log=True),
        Attribute("marked_for_deletion_on", "str", Mutability.COMPUTED),
    ),
)

# Group attributes whose name in the API differs from the module parameter.
GROUP_API_NAMES = {"visibility_level": "visibility"}
