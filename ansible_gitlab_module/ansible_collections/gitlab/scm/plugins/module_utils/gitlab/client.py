import json
from urllib.parse import quote

from ansible.module_utils.basic import AnsibleModule
from ansible.module_utils.urls import fetch_url

from .errors import GitlabApiError


class GitlabClient:
    """
    A thin, synchronous client for the GitLab REST API (v4).

    One client is built per module invocation and handed to the runner, which
    passes it on to every lifecycle call. The client never decides what a status
    code means for a resource: anything >= 400 is raised as a `GitlabApiError`
    and the runner classifies it.
    """

    def __init__(self, module: AnsibleModule):
        """
        Initializes the client.

        Args:
            module: The AnsibleModule instance. Its `api_url`, `access_token`,
                    `validate_certs` and `request_timeout` parameters configure
                    every request.
        """
        self.module = module
        self.api_url = module.params["api_url"].rstrip("/")
        self.timeout = module.params.get("request_timeout") or 30

    def build_url(self, path, path_params=None) -> str:
        """
        Builds the absolute URL for a relative endpoint path.

        Path parameters are URL-encoded as a single path segment, so a project
        path like `group/project` or a branch like `feature/x` stays one segment.
        """
        if path_params:
            path = path.format(
                **{key: quote(str(value), safe="") for key, value in path_params.items()}
            )

        return f"{self.api_url}/{path.lstrip('/')}"

    def send_request(
        self, method, path, data=None, path_params=None
    ) -> tuple[any, int]:
        """
        The single point of network communication for every module.

        Args:
            method (str): The HTTP method (e.g., 'GET', 'POST', 'PUT', 'DELETE').
            path (str): The relative API endpoint path (e.g., '/groups/{id}').
            data (dict, optional): The request body payload.
            path_params (dict, optional): Values formatted into the path.

        Returns:
            A tuple of the parsed JSON response (None for an empty body) and the
            integer HTTP status code.

        Raises:
            GitlabApiError: On a transport failure or any status >= 400.
        """
        url = self.build_url(path, path_params=path_params)

        if data is not None and not isinstance(data, str):
            data = self.module.jsonify(data)

        headers = {
            "PRIVATE-TOKEN": self.module.params["access_token"],
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        self.module.debug(f"GitLab request: {method} {url}")
        response, info = fetch_url(
            self.module,
            url,
            data=data,
            headers=headers,
            method=method,
            timeout=self.timeout,
        )

        status_code = info["status"]

        # fetch_url reports connection failures as status -1.
        if status_code < 0 or status_code >= 400:
            error_body = info.get("body", b"")
            error_json = None
            if error_body:
                try:
                    error_json = json.loads(error_body)
                except (json.JSONDecodeError, TypeError):
                    error_json = {"raw": _to_text(error_body)}
            self.module.debug(f"GitLab request failed: {method} {url} -> {status_code}")
            raise GitlabApiError(status_code, info.get("msg", ""), url=url, body=error_json)

        body_content = None
        if response:
            body_content = response.read()

        if status_code == 204 or not body_content:
            return None, status_code

        try:
            return json.loads(body_content), status_code
        except json.JSONDecodeError:
            raise GitlabApiError(
                status_code,
                "API returned a success status but the response was not valid JSON.",
                url=url,
                body={"raw": _to_text(body_content)},
            )

    # --- Projects ---

    def get_project(self, project) -> dict:
        """Fetches a project by numeric ID or by its full path."""
        project_data, _ = self.send_request(
            "GET", "/projects/{project}", path_params={"project": project}
        )
        return project_data

    # --- Branches ---

    def get_branch(self, project, name: str) -> dict:
        branch, _ = self.send_request(
            "GET",
            "/projects/{project}/repository/branches/{branch}",
            path_params={"project": project, "branch": name},
        )
        return branch

    # --- Groups ---

    def get_group(self, group) -> dict:
        """Fetches a group by numeric ID or by its full path."""
        group_data, _ = self.send_request(
            "GET", "/groups/{id}", path_params={"id": group}
        )
        return group_data


def _to_text(value) -> str:
    if isinstance(value, bytes):
        return value.decode(errors="ignore")
    return str(value)
