from dataclasses import dataclass


@dataclass(slots=True)
class ReloadState:
    """Reload flags owned by one worker runtime.

    Passed by reference to whatever needs to read or set them. A reload is
    never initiated while ``is_reloading`` is true; the flag is cleared only
    by replacing the worker process.

    Attributes:
        is_watching: The application is serving and changes may trigger a
            reload.
        is_reloading: A reload is in flight.
    """

    is_watching: bool = False
    is_reloading: bool = False

    @property
    def can_reload(self) -> bool:
        """Whether a reload request would be acted on."""
        return self.is_watching and not self.is_reloading
