from abc import abstractmethod

from ansible.module_utils.basic import AnsibleModule

from .client import GitlabClient
from .command import Command
from .errors import GitlabError, InvalidParameterError, ResourceMissing
from .mapper import diff_force_new, diff_updatable, to_output


class BaseRunner:
    """
    Abstract base class for the resource runners.

    A runner reconciles one declared resource instance with GitLab. It exposes
    the lifecycle callbacks an orchestrator drives (`create`, `read`, `update`,
    `delete`, `import_state`) and, for Ansible, a `run()` that chooses between
    them from the desired `state` using a two-phase "plan and execute" workflow.

    Subclasses provide the schema and the resource-specific pieces: how to read
    the resource and how to build the create, update and delete commands.
    """

    schema = None

    def __init__(self, module: AnsibleModule, context: dict, client=None):
        """
        Initializes the runner.

        Args:
            module: The AnsibleModule instance.
            context: Module-level configuration (e.g. polling settings).
            client: The API client. One is built from the module parameters
                    when not given.
        """
        self.module = module
        self.context = context
        self.client = client or GitlabClient(module)
        self.has_changed = False
        # Tracked state of the resource, keyed by module parameter names.
        self.resource = None
        self.identifier = None
        self.plan = []

    @property
    def resource_type(self) -> str:
        return self.schema.resource_type

    @abstractmethod
    def read(self, identifier=None) -> dict:
        """
        Reads the resource from GitLab and replaces the tracked state with it.

        Raises:
            ResourceMissing: If the resource does not exist.
        """
        pass

    @abstractmethod
    def import_state(self, identifier: str) -> dict:
        """
        Decodes an external identifier and reads the resource it designates,
        populating the same state a normal `read()` would.
        """
        pass

    @abstractmethod
    def plan_creation(self) -> list:
        pass

    @abstractmethod
    def build_update_commands(self, changes: list) -> list:
        """
        Builds the commands applying in-place `changes` to the existing resource.
        """
        pass

    @abstractmethod
    def plan_deletion(self) -> list:
        pass

    @abstractmethod
    def on_created(self, result) -> None:
        """
        Called after a create command succeeded. Must read the resource back;
        the create response is not trusted as the final state.
        """
        pass

    # --- Lifecycle callbacks ---

    def create(self) -> dict:
        self.execute_change_plan(self.plan_creation())
        return self.resource

    def update(self) -> dict:
        self.execute_change_plan(self.plan_update())
        return self.resource

    def delete(self) -> None:
        self.execute_change_plan(self.plan_deletion())

    # --- Ansible workflow ---

    def run(self):
        """
        The Ansible entrypoint. Any `GitlabError` that was not classified on the
        way up fails the module with a structured message.
        """
        try:
            self._run()
        except GitlabError as e:
            self.module.fail_json(**e.to_fail_kwargs())

    def _run(self):
        # Step 1: Determine the current state of the resource.
        self.check_existence()

        # Step 2: Plan based on the desired state and the resource's existence.
        state = self.module.params["state"]
        if self.resource:
            if state == "present":
                self.plan = self.plan_update()
            elif state == "absent":
                self.plan = self.plan_deletion()
        elif state == "present":
            self.plan = self.plan_creation()

        # Step 3: Handle Check Mode.
        if self.module.check_mode:
            self.handle_check_mode(self.plan)
            return

        # Step 4: Execute the plan and report.
        self.execute_change_plan(self.plan)
        self.exit(plan=self.plan)

    def check_existence(self):
        """
        Populates `self.resource` from GitLab, or sets it to `None` when the
        resource does not exist. An `id` parameter takes precedence over the
        declared attributes, so an existing resource can be adopted.
        """
        identifier = self.module.params.get("id")
        try:
            if identifier:
                self.import_state(identifier)
            else:
                self.read()
        except ResourceMissing as e:
            self.module.debug(str(e))
            self.resource = None
            self.identifier = None

    def plan_update(self) -> list:
        """
        Builds the change plan for an existing resource.

        Differences in force-new attributes are never sent as an update: they
        produce a replacement plan (delete, then create). Otherwise only the
        changed mutable attributes are updated.
        """
        if not self.resource:
            return []

        replaced = diff_force_new(self.schema, self.module.params, self.resource)
        if replaced:
            self.module.debug(
                f"{self.resource_type} must be replaced, force-new attributes changed: "
                + ", ".join(change["param"] for change in replaced)
            )
            return self.plan_deletion() + self.plan_creation()

        changes = diff_updatable(self.schema, self.module.params, self.resource)
        if not changes:
            return []
        return self.build_update_commands(changes)

    def validate_required_for_create(self):
        for key in self.schema.required_for_create:
            if self.module.params.get(key) in (None, ""):
                raise InvalidParameterError(
                    f"Parameter '{key}' is required when state is 'present' for a new {self.resource_type}."
                )

    def execute_change_plan(self, plan: list):
        """
        Executes a list of Command objects and keeps the tracked state in step
        with what each one did.
        """
        if not plan:
            return

        self.has_changed = True

        for command in plan:
            self.module.debug(command.description)
            result = command.execute()

            if command.command_type == "create":
                self.on_created(result)
            elif command.command_type == "delete":
                self.on_deleted(command)
                self.resource = None
                self.identifier = None
            elif command.command_type == "update":
                self.read(self.identifier_from_state())

    def on_deleted(self, command: Command) -> None:
        """
        Called after a delete command succeeded. Resources whose deletion
        completes asynchronously override this to wait for the confirmation.
        """
        pass

    def identifier_from_state(self):
        """
        Returns the value `read()` needs to find the resource tracked in state.
        """
        return None

    def handle_check_mode(self, plan: list):
        """
        Reports the predicted change plan without executing it.
        """
        if plan:
            self.has_changed = True
        self.exit(commands=[cmd.serialize_request() for cmd in plan])

    def exit(self, plan: list | None = None, commands: list | None = None):
        """
        Formats the final response for Ansible and exits the module.
        """
        if commands is None:
            commands = [cmd.serialize_request() for cmd in plan] if plan else []

        self.module.exit_json(
            changed=self.has_changed,
            id=self.identifier,
            resource=to_output(self.resource),
            commands=commands,
        )

    def command(self, method, path, command_type, description, **kwargs) -> Command:
        return Command(
            self,
            method=method,
            path=path,
            command_type=command_type,
            description=description,
            **kwargs,
        )
