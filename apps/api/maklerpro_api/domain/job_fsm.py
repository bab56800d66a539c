"""Video job lifecycle transition rules."""

from maklerpro_api.schemas.callback import CallbackStatus
from maklerpro_api.schemas.job import VideoJobStatus

TERMINAL_STATES: frozenset[VideoJobStatus] = frozenset(
    {
        VideoJobStatus.COMPLETED,
        VideoJobStatus.FAILED,
    }
)

INTERMEDIATE_STATES: frozenset[VideoJobStatus] = frozenset(
    {
        VideoJobStatus.QUEUED,
        VideoJobStatus.FETCHING,
        VideoJobStatus.RENDERING,
        VideoJobStatus.SAVING,
    }
)

_CALLBACK_TO_JOB_STATUS: dict[CallbackStatus, VideoJobStatus] = {
    CallbackStatus.QUEUED: VideoJobStatus.QUEUED,
    CallbackStatus.FETCHING: VideoJobStatus.FETCHING,
    CallbackStatus.RENDERING: VideoJobStatus.RENDERING,
    CallbackStatus.SAVING: VideoJobStatus.SAVING,
    CallbackStatus.DONE: VideoJobStatus.COMPLETED,
    CallbackStatus.FAILED: VideoJobStatus.FAILED,
}


def is_terminal(status: VideoJobStatus) -> bool:
    return status in TERMINAL_STATES


def job_status_for_callback(status: CallbackStatus) -> VideoJobStatus:
    """Map a render-service status onto the persisted job status."""
    return _CALLBACK_TO_JOB_STATUS[status]


def transition_allowed(old_status: VideoJobStatus, new_status: VideoJobStatus) -> bool:
    """Terminal jobs never move; non-terminal jobs may move to any status.

    Intermediate updates can arrive out of order, so regressions between
    non-terminal states are accepted rather than rejected.
    """
    if is_terminal(old_status):
        return False
    return new_status in TERMINAL_STATES or new_status in INTERMEDIATE_STATES


def ensure_intermediate(status: VideoJobStatus) -> None:
    if status not in INTERMEDIATE_STATES:
        raise ValueError(f"{status.value} is not an intermediate status")
