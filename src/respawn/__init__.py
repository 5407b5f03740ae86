"""Development-mode process supervisor."""
