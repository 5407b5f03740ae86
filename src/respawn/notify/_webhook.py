"""Best-effort webhook notification of file changes.

The endpoint and payload are read from the environment once, at worker
startup, into a WebhookConfig that is passed to the notifier.
"""

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, final

import httpx
import orjson

if TYPE_CHECKING:
    from collections.abc import Mapping

    from structlog.typing import FilteringBoundLogger

    from respawn.watch import ChangeEvent

WEBHOOK_ENV_PREFIX = "CUSTOM_WEBHOOK_"


@dataclass(frozen=True, slots=True)
class WebhookConfig:
    """Webhook endpoint and payload values.

    Attributes:
        url: Endpoint to POST to. Empty disables notification.
        git_author: Commit author reported in the payload.
        git_email: Commit author email reported in the payload.
        git_message: Commit message reported in the payload.
        repo_remote: Repository remote reported in the payload.
        repo_ref: Repository ref reported in the payload.
        auth_username: Username forwarded in the payload.
        auth_password: Password forwarded in the payload.
    """

    url: str = ""
    git_author: str = ""
    git_email: str = ""
    git_message: str = ""
    repo_remote: str = ""
    repo_ref: str = ""
    auth_username: str = ""
    auth_password: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> WebhookConfig:
        """Read the webhook configuration from CUSTOM_WEBHOOK_* variables.

        Args:
            environ: Environment to read (defaults to os.environ).

        Returns:
            The configuration; missing variables become empty strings.
        """
        env = os.environ if environ is None else environ

        def read(name: str) -> str:
            return env.get(f"{WEBHOOK_ENV_PREFIX}{name}", "")

        return cls(
            url=env.get("CUSTOM_WEBHOOK_URL", ""),
            git_author=read("GIT_AUTHOR"),
            git_email=read("GIT_EMAIL"),
            git_message=read("GIT_MESSAGE"),
            repo_remote=read("REPO_REMOTE"),
            repo_ref=read("REPO_REF"),
            auth_username=read("AUTH_USERNAME"),
            auth_password=read("AUTH_PASSWORD"),
        )

    @property
    def enabled(self) -> bool:
        """Whether an endpoint is configured."""
        return bool(self.url)

    def payload(self) -> dict[str, dict[str, str]]:
        """Build the JSON body sent for every change."""
        return {
            "commit": {
                "author": self.git_author,
                "email": self.git_email,
                "message": self.git_message,
            },
            "local": {
                "remote": self.repo_remote,
                "ref": self.repo_ref,
            },
            "auth": {
                "username": self.auth_username,
                "password": self.auth_password,
            },
        }


@final
class WebhookNotifier:
    """Fire-and-forget HTTP notifier.

    Sends one POST per change event. Failures are logged at debug level and
    never propagate; there is no retry.
    """

    __slots__: tuple[str, ...] = ("_config", "_logger", "_timeout", "_transport")

    def __init__(
        self,
        config: WebhookConfig,
        *,
        logger: FilteringBoundLogger,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the notifier.

        Args:
            config: Endpoint and payload values.
            logger: Logger for delivery failures.
            timeout: Seconds before a request is abandoned.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self._config: WebhookConfig = config
        self._logger: FilteringBoundLogger = logger
        self._timeout: float = timeout
        self._transport: httpx.AsyncBaseTransport | None = transport

    @property
    def enabled(self) -> bool:
        """Whether an endpoint is configured."""
        return self._config.enabled

    async def notify(self, event: ChangeEvent) -> None:
        """POST the configured payload for a change event."""
        if not self.enabled:
            return

        client_kwargs: dict[str, Any] = {"timeout": self._timeout}  # pyright: ignore[reportExplicitAny]
        if self._transport is not None:
            client_kwargs["transport"] = self._transport

        try:
            async with httpx.AsyncClient(**client_kwargs) as client:
                response = await client.post(
                    self._config.url,
                    content=orjson.dumps(self._config.payload()),
                    headers={"Content-Type": "application/json"},
                )
            self._logger.debug(
                "Webhook delivered",
                url=self._config.url,
                path=str(event.path),
                status=response.status_code,
            )
        except Exception as e:  # noqa: BLE001
            self._logger.debug(
                "Webhook delivery failed",
                url=self._config.url,
                path=str(event.path),
                error=str(e),
            )
