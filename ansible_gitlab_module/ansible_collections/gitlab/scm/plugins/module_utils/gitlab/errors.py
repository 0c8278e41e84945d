"""
Exception hierarchy shared by the GitLab client and the runners.

The client raises, the runners classify the conditions they expect (a 404 on
read, a 404 while waiting for a delete) and everything else travels up to
`BaseRunner.run()`, which is the only place that converts an error into
`module.fail_json`.
"""


class GitlabError(Exception):
    """Base class for every error raised by this collection."""

    def to_fail_kwargs(self) -> dict:
        """
        Returns the keyword arguments used to fail the Ansible module.
        """
        return {"msg": str(self)}


class GitlabApiError(GitlabError):
    """
    A transport failure or an HTTP status >= 400 returned by the GitLab API.

    Args:
        status_code: The HTTP status, or -1 when the request never got a response.
        msg: The transport message reported by `fetch_url`.
        url: The requested URL.
        body: The parsed JSON error body, if the API sent one.
    """

    def __init__(self, status_code: int, msg: str, url: str = "", body=None):
        self.status_code = status_code
        self.msg = msg
        self.url = url
        self.body = body
        super().__init__(
            f"Request to {url} failed. Status: {status_code}. Message: {msg}."
            + (f" API Response: {body}" if body else "")
        )

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    def to_fail_kwargs(self) -> dict:
        return {"msg": str(self), "status": self.status_code, "api_error": self.body}


class ResourceMissing(GitlabApiError):
    """
    The resource does not exist on the remote side.

    Raised by a runner's `read()` so the caller can drop the instance from its
    tracked state (and recreate it on the next apply) instead of failing.
    """

    def __init__(self, resource_type: str, identifier, error: GitlabApiError):
        super().__init__(error.status_code, error.msg, error.url, error.body)
        self.resource_type = resource_type
        self.identifier = identifier

    def __str__(self):
        return f"{self.resource_type.capitalize()} '{self.identifier}' not found."


class MalformedIdentifierError(GitlabError):
    """An import or composite identifier could not be decoded."""


class DeletionTimeoutError(GitlabError):
    """
    The remote resource was neither gone nor marked for deletion before the
    deadline elapsed.
    """

    def __init__(self, description: str, timeout: float):
        self.description = description
        self.timeout = timeout
        super().__init__(
            f"Waited for more than {timeout:g} seconds for {description} to be asynchronously deleted."
        )


class InvalidParameterError(GitlabError):
    """The declared parameters cannot describe the requested operation."""
