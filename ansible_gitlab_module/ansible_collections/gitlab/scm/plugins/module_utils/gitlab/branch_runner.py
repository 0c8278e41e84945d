from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.base_runner import (
    BaseRunner,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.errors import (
    GitlabApiError,
    InvalidParameterError,
    ResourceMissing,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.identifier import (
    DELIMITER,
    build_two_part_id,
    parse_two_part_id,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.mapper import (
    branch_state,
)
from ansible_collections.gitlab.scm.plugins.module_utils.gitlab.schema import (
    BRANCH_SCHEMA,
    DEFAULT_BRANCH_REF,
)


class BranchRunner(BaseRunner):
    """
    Reconciles a repository branch.

    Every declared attribute of a branch (`name`, `project`, `ref`) is
    force-new, so a branch is only ever created, read or deleted; any declared
    difference against an existing branch plans a delete followed by a create.
    The resource is identified as `<project>-<name>`.
    """

    schema = BRANCH_SCHEMA

    def read(self, identifier=None) -> dict:
        """
        Reads the branch designated by `identifier` (a `(project, name)` tuple)
        or, when omitted, by the declared `project` and `name`.

        Raises:
            ResourceMissing: If GitLab answers 404 for the branch.
            GitlabApiError: For any other API failure, unmodified.
        """
        project, name = identifier or self._declared_key()
        ref = self.module.params.get("ref") or DEFAULT_BRANCH_REF

        self.module.debug(f"read gitlab branch {name} of project {project}")
        try:
            branch = self.client.get_branch(project, name)
        except GitlabApiError as e:
            if e.is_not_found:
                raise ResourceMissing(self.resource_type, f"{project}/{name}", e)
            raise

        self.resource = branch_state(project, ref, branch)
        self.identifier = self._build_identifier(project, name)
        return self.resource

    def import_state(self, identifier: str) -> dict:
        """
        Reads the branch designated by an identifier of the form `<project>-<name>`.
        The identifier is validated before any request is made.

        The encoded project is usually a numeric ID, even when the branch was
        declared with a project path. When the declared `project` designates
        the same project, it is kept in state instead of the encoded form.
        """
        project, name = parse_two_part_id(identifier)
        declared = self.module.params.get("project")
        if declared and self._is_same_project(declared, project):
            # Tracked state keeps the declared form, so a path is not a project change.
            project = str(declared)
        return self.read((project, name))

    def identifier_from_state(self):
        return (self.resource["project"], self.resource["name"])

    def plan_creation(self) -> list:
        """
        Builds the change plan for creating a new branch from `ref`.
        """
        self.validate_required_for_create()
        project = self.module.params["project"]
        name = self.module.params["name"]
        ref = self.module.params.get("ref") or DEFAULT_BRANCH_REF

        return [
            self.command(
                "POST",
                "/projects/{project}/repository/branches",
                "create",
                f"Create gitlab branch {name} for project {project} with ref {ref}",
                data={"branch": name, "ref": ref},
                path_params={"project": project},
            )
        ]

    def build_update_commands(self, changes: list) -> list:
        # Branches have no mutable attributes; a change is always a replacement.
        return []

    def plan_deletion(self) -> list:
        project = self.resource["project"]
        name = self.resource["name"]
        return [
            self.command(
                "DELETE",
                "/projects/{project}/repository/branches/{branch}",
                "delete",
                f"Delete gitlab branch {name} of project {project}",
                path_params={"project": project, "branch": name},
            )
        ]

    def on_created(self, result) -> None:
        # State always comes from a read, never from the create response.
        self.read((self.module.params["project"], self.module.params["name"]))

    def _declared_key(self) -> tuple:
        project = self.module.params.get("project")
        name = self.module.params.get("name")
        if not project or not name:
            raise InvalidParameterError(
                "Parameters 'project' and 'name' are required unless 'id' is given."
            )
        return project, name

    def _build_identifier(self, project, name: str) -> str:
        """
        Builds `<project>-<name>`. A project given by a path containing the
        delimiter is replaced by its numeric ID so the identifier stays decodable.
        """
        project = str(project)
        if DELIMITER in project:
            project = self._project_id(project)
        return build_two_part_id(project, name)

    def _project_id(self, project) -> str:
        project = str(project)
        if project.isdigit():
            return project
        return str(self.client.get_project(project)["id"])

    def _is_same_project(self, first, second) -> bool:
        if str(first) == str(second):
            return True
        try:
            return self._project_id(first) == self._project_id(second)
        except GitlabApiError as e:
            if e.is_not_found:
                return False
            raise
