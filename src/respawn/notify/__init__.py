"""Change notifications for respawn."""

from ._webhook import WEBHOOK_ENV_PREFIX, WebhookConfig, WebhookNotifier

__all__ = ["WEBHOOK_ENV_PREFIX", "WebhookConfig", "WebhookNotifier"]
