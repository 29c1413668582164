"""Self-hosted audiobook server."""

from .environment import load_environment

# Load environment variables from .env-style files as soon as the package is
# imported so the settings object, the CLI runner and uvicorn workers agree.
load_environment()

__all__ = ["load_environment"]
