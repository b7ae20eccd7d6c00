from typing import Protocol


class AppHooks(Protocol):
    """
    Protocol for application hooks to follow long-running work.
    This can be implemented by the main application to show progress
    while ancestor records are classified and to cancel a run.

    Methods:
        report_step(info, target, reset_counter, plus_step) -> None:
            Report progress of the current stage.
        stop_requested() -> bool:
            Whether the user asked to stop.
    """
    def report_step(self, info: str = None, target: int = None, reset_counter: bool = False, plus_step: int = 1) -> None:
        """
        Report progress messages from the comparison pipeline.

        Args:
            info (str): Progress message.
            target (int): Target count for progress.
            reset_counter (bool): Whether to reset the counter.
            plus_step (int): Incremental step count.
        """
        pass

    def stop_requested(self) -> bool:
        """
        Check if a stop has been requested by the user.

        Returns:
            bool: True if stop is requested, False otherwise.
        """
        return False

    def update_key_value(self, key: str, value) -> None:
        """
        Report a status update with a key-value pair.

        Args:
            key (str): Status key, e.g. 'rejected.no_reference_year'.
            value: Status value.
        """
        pass
