"""Admin panel configuration model."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class AdminConfig(BaseModel):
    """The ``[server.admin]`` configuration section.

    Attributes:
        watch_ignore_files: Extra ignore patterns appended to the watcher's
            default Ignore Rule Set, in order.
        serve_admin_panel: Whether the application serves the admin UI
            in-process (and therefore needs a pre-built bundle).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    watch_ignore_files: tuple[str, ...] = ()
    serve_admin_panel: bool = True
