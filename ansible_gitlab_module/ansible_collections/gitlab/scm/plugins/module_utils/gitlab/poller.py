import time

from .errors import DeletionTimeoutError, GitlabApiError

DELETION_MARKER = "marked_for_deletion_on"
DEFAULT_DELETE_TIMEOUT = 15
DEFAULT_DELETE_INTERVAL = 0.5


def wait_for_deletion(
    fetch,
    timeout: float = DEFAULT_DELETE_TIMEOUT,
    interval: float = DEFAULT_DELETE_INTERVAL,
    description: str = "resource",
    marker_field: str = DELETION_MARKER,
    clock=time.monotonic,
    sleep=time.sleep,
    debug=None,
):
    """
    Polls a resource after a successful DELETE until the remote side confirms
    the deletion.

    GitLab deletes groups asynchronously: the DELETE call can succeed while an
    immediate GET still returns the group as fully live. The deletion is
    confirmed the first time either the lookup returns 404, or the returned
    resource carries a non-null deletion marker (a scheduled soft-delete that
    will complete on its own).

    Args:
        fetch: A callable performing the lookup. It returns the resource
               dictionary or raises `GitlabApiError`.
        timeout: The deadline, in seconds, measured from the first attempt.
        interval: Seconds to sleep between attempts.
        description: A human-readable name for error messages.
        marker_field: The key of the deletion marker on the resource.
        clock: Monotonic time source.
        sleep: Sleep function.
        debug: Optional callable receiving progress messages.

    Raises:
        GitlabApiError: Any lookup error other than a 404, unmodified.
        DeletionTimeoutError: If the deadline elapses with the resource still
                              present and unmarked.
    """
    start_time = clock()
    attempts = 0

    while clock() - start_time < timeout:
        attempts += 1
        try:
            resource = fetch()
        except GitlabApiError as e:
            if e.is_not_found:
                if debug:
                    debug(f"{description} is gone after {attempts} lookup(s)")
                return
            raise

        if resource and resource.get(marker_field) is not None:
            if debug:
                debug(
                    f"{description} is marked for deletion on {resource[marker_field]}"
                )
            return

        if interval:
            sleep(interval)

    raise DeletionTimeoutError(description, timeout)
