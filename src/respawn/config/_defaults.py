"""Built-in configuration values, the lowest-precedence source."""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "logging": {
        "level": "info",
        "format": "text",
        "file": "",
        "max_bytes": 0,
        "backup_count": 0,
    },
    "server": {
        "admin": {
            "watch_ignore_files": [],
            "serve_admin_panel": True,
        },
    },
    "develop": {
        "app": "",
        "host": "127.0.0.1",
        "port": 1337,
        "build_dir": "build",
        "build_command": ["npm", "run", "-s", "build", "--", "--no-optimization"],
        "watch_admin_command": ["npm", "run", "-s", "strapi", "watch-admin", "--"],
        "polling": False,
        "poll_delay_ms": 300,
        "shutdown_timeout": 5.0,
        "webhook_timeout": 10.0,
    },
}
