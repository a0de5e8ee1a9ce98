from collections.abc import Callable

from tenacity import Retrying, retry_if_result, stop_after_attempt, wait_fixed


def poll_until(
    check: Callable[[], bool],
    max_attempts: int,
    interval_ms: int,
    sleep: Callable[[float], None] | None = None,
) -> bool:
    """
    Call ``check`` until it returns True or ``max_attempts`` calls have been made.

    Returns the final outcome instead of raising, so callers decide how an
    exhausted budget is reported. ``check`` is expected to swallow its own
    transport errors and answer False.
    """
    retry_kwargs = {}
    if sleep is not None:
        retry_kwargs["sleep"] = sleep
    retryer = Retrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_fixed(max(interval_ms, 0) / 1000),
        retry=retry_if_result(lambda ready: not ready),
        retry_error_callback=lambda retry_state: False,
        **retry_kwargs,
    )
    return bool(retryer(check))
