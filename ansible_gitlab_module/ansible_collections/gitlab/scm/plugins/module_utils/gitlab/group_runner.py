from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.base_runner import (
    BaseRunner,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.errors import (
    GitlabApiError,
    ResourceMissing,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.identifier import (
    parse_group_id,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.mapper import (
    build_payload,
    build_update_payload,
    group_state,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.poller import (
    DEFAULT_DELETE_INTERVAL,
    DEFAULT_DELETE_TIMEOUT,
    DELETION_MARKER,
    wait_for_deletion,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.schema import (
    GROUP_API_NAMES,
    GROUP_SCHEMA,
)


class GroupRunner(BaseRunner):
    """
    Reconciles a group (or subgroup).

    Groups are identified by their numeric ID. Without an `id` parameter the
    group is looked up by its full path, built from the parent's full path and
    the declared `path`.

    GitLab deletes groups asynchronously, so every delete is followed by a
    bounded poll that only succeeds once the group is gone or carries a
    deletion marker (`marked_for_deletion_on`).
    """

    schema = GROUP_SCHEMA

    def __init__(self, module, context, client=None, clock=None, sleep=None):
        super().__init__(module, context, client=client)
        # Injectable time sources for the deletion poller.
        self.clock = clock
        self.sleep = sleep

    def read(self, identifier=None) -> dict:
        """
        Reads the group designated by `identifier` (numeric ID or full path)
        or, when omitted, by the declared parent and path.

        Raises:
            ResourceMissing: If GitLab answers 404 for the group.
            GitlabApiError: For any other API failure, unmodified.
        """
        if identifier is None:
            identifier = self.declared_full_path()

        self.module.debug(f"read gitlab group {identifier}")
        group = self._get_group(identifier)

        self.resource = group_state(group)
        self.identifier = str(group["id"])
        return self.resource

    def check_existence(self):
        """
        A group marked for deletion is on its way out. With `state: present` it
        is treated as absent so a new group gets planned; with `state: absent`
        it is kept so `plan_deletion` can report that nothing is left to do.
        """
        super().check_existence()
        if not self.resource or not self.resource.get(DELETION_MARKER):
            return
        if self.module.params["state"] == "present":
            self.module.warn(
                f"Group '{self.resource['full_path']}' is marked for deletion on "
                f"{self.resource[DELETION_MARKER]} and will be created again."
            )
            self.resource = None
            self.identifier = None

    def import_state(self, identifier: str) -> dict:
        """
        Reads the group designated by a numeric ID or a full path. The
        identifier is validated before any request is made.
        """
        return self.read(parse_group_id(identifier))

    def identifier_from_state(self):
        return self.resource["id"]

    def declared_full_path(self) -> str:
        """
        Builds the full path of the declared group: `<parent full path>/<path>`
        for a subgroup, `<path>` for a top-level group.
        """
        path = self.module.params["path"]
        parent_id = self.module.params.get("parent_id")
        if not parent_id:
            return path
        # Without its parent the subgroup cannot exist either.
        parent = self._get_group(parent_id, resource_type="parent group")
        return f"{parent['full_path']}/{path}"

    def plan_creation(self) -> list:
        """
        Builds the change plan for creating a new group.
        """
        self.validate_required_for_create()
        payload = build_payload(self.schema, self.module.params, GROUP_API_NAMES)
        # A top-level group is created without a parent.
        if not payload.get("parent_id"):
            payload.pop("parent_id", None)

        return [
            self.command(
                "POST",
                "/groups",
                "create",
                f"Create gitlab group {self.module.params['name']}",
                data=payload,
            )
        ]

    def build_update_commands(self, changes: list) -> list:
        return [
            self.command(
                "PUT",
                "/groups/{id}",
                "update",
                f"Update attributes of gitlab group {self.resource['full_path']}",
                data=build_update_payload(changes, GROUP_API_NAMES),
                path_params={"id": self.resource["id"]},
            )
        ]

    def plan_deletion(self) -> list:
        """
        Builds the change plan for deleting the group. A group already marked
        for deletion needs nothing more.
        """
        if self.resource.get(DELETION_MARKER):
            self.module.warn(
                f"Group '{self.resource['full_path']}' is already marked for deletion on "
                f"{self.resource[DELETION_MARKER]}."
            )
            return []

        return [
            self.command(
                "DELETE",
                "/groups/{id}",
                "delete",
                f"Delete gitlab group {self.resource['full_path']}",
                path_params={"id": self.resource["id"]},
                wait_config={
                    "id": self.resource["id"],
                    "timeout": self.context.get("delete_timeout", DEFAULT_DELETE_TIMEOUT),
                    "interval": self.context.get("delete_interval", DEFAULT_DELETE_INTERVAL),
                },
            )
        ]

    def on_created(self, result) -> None:
        self.read(result["id"])

    def on_deleted(self, command) -> None:
        """
        Polls the group after its DELETE returned until the deletion is confirmed.

        Raises:
            DeletionTimeoutError: If the group is still live and unmarked when
                                  the deadline elapses.
        """
        wait_config = command.wait_config
        group_id = wait_config["id"]
        kwargs = {}
        if self.clock:
            kwargs["clock"] = self.clock
        if self.sleep:
            kwargs["sleep"] = self.sleep

        wait_for_deletion(
            lambda: self.client.get_group(group_id),
            timeout=wait_config["timeout"],
            interval=wait_config["interval"],
            description=f"group {group_id}",
            debug=self.module.debug,
            **kwargs,
        )

    def _get_group(self, identifier, resource_type: str = "group") -> dict:
        try:
            return self.client.get_group(identifier)
        except GitlabApiError as e:
            if e.is_not_found:
                raise ResourceMissing(resource_type, identifier, e)
            raise
