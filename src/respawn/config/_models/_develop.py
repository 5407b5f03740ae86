"""Develop command configuration model."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class DevelopConfig(BaseModel):
    """The ``[develop]`` configuration section.

    Attributes:
        app: Import string (``module:attribute``) of the application factory.
        host: Host the ASGI adapter binds to.
        port: Port the ASGI adapter binds to.
        build_dir: Admin bundle directory, relative to the project root.
        build_command: Command that builds the admin bundle.
        watch_admin_command: Command that serves the admin UI in watch mode.
        polling: Use polling instead of native file-system notifications.
        poll_delay_ms: Delay between polls when polling is enabled.
        shutdown_timeout: Seconds to wait for a worker to exit after SIGTERM
            before it is killed.
        webhook_timeout: Seconds before a webhook request is abandoned.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    app: str = ""
    host: str = "127.0.0.1"
    port: int = Field(default=1337, ge=0, le=65535)
    build_dir: str = "build"
    build_command: tuple[str, ...] = (
        "npm",
        "run",
        "-s",
        "build",
        "--",
        "--no-optimization",
    )
    watch_admin_command: tuple[str, ...] = (
        "npm",
        "run",
        "-s",
        "strapi",
        "watch-admin",
        "--",
    )
    polling: bool = False
    poll_delay_ms: int = Field(default=300, gt=0)
    shutdown_timeout: float = Field(default=5.0, gt=0)
    webhook_timeout: float = Field(default=10.0, gt=0)
