from typing import Any, Dict


class Command:
    """
    A self-contained object representing a single, atomic change to GitLab.

    Planning builds a list of commands without touching the API; execution
    sends them in order. In check mode the same list is serialized and
    reported, so the prediction and the real run can never disagree.
    """

    def __init__(
        self,
        runner,
        method: str,
        path: str,
        command_type: str,
        description: str,
        data: Dict[str, Any] | None = None,
        path_params: Dict[str, Any] | None = None,
        wait_config: Dict[str, Any] | None = None,
    ):
        """
        Initializes the command.

        Args:
            runner: The runner instance that will execute this command.
            method (str): The HTTP method (e.g., 'POST', 'PUT', 'DELETE').
            path (str): The API endpoint path.
            command_type (str): The logical type of command ('create', 'update',
                                'delete'). The runner uses it to update its
                                state after execution.
            description (str): A human-readable summary of the command's purpose.
            data (dict, optional): The request body payload.
            path_params (dict, optional): Parameters to format into the path.
            wait_config (dict, optional): Set on deletes that must be confirmed
                                          by polling, e.g. `{"timeout": 15}`.
        """
        self.runner = runner
        self.method = method
        self.path = path
        self.command_type = command_type
        self.description = description
        self.data = data
        self.path_params = path_params
        self.wait_config = wait_config
        self.response = None
        self.status_code = 0

    def execute(self) -> Any:
        """
        Sends the configured HTTP request through the runner's client.

        Returns:
            The parsed JSON response from the API.
        """
        self.response, self.status_code = self.runner.client.send_request(
            self.method, self.path, data=self.data, path_params=self.path_params
        )
        return self.response

    def serialize_request(self) -> dict:
        """
        Generates a serializable dictionary representing the HTTP request this
        command will make, for the module's `commands` output.
        """
        serialized: dict[str, str | dict] = {
            "method": self.method,
            "url": self.runner.client.build_url(self.path, path_params=self.path_params),
            "description": self.description,
        }
        if self.data:
            serialized["body"] = self.data

        return serialized
