"""Credential storage for the two upstream services and the model choice.

Keys live in a small JSON file in the user's home directory; environment
variables take precedence so CI and containers never need the file.
"""

import json
import os
from pathlib import Path

from omnireport.config import CREDENTIALS_FILE, DEFAULT_MODEL
from omnireport.logging import get_logger
from omnireport.models import Credentials

log = get_logger(__name__)

ENV_OVERRIDES = {
    "search_api_key": "TAVILY_API_KEY",
    "generation_api_key": "OPENROUTER_API_KEY",
    "model": "OMNIREPORT_MODEL",
}


def load_credentials(path: Path | str = CREDENTIALS_FILE) -> Credentials:
    """Load saved credentials, overlaid with environment variables.

    Args:
        path: JSON credentials file (missing file means nothing saved yet)

    Returns:
        Credentials; empty keys are allowed and reported by Credentials.missing()
    """
    path = Path(path)
    data: dict[str, str] = {}

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                stored = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.warning("credentials_file_unreadable", path=str(path), error=str(e))
            stored = {}
        if isinstance(stored, dict):
            data.update({k: str(v) for k, v in stored.items() if k in ENV_OVERRIDES and v})

    for field, env_var in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[field] = value

    data.setdefault("model", DEFAULT_MODEL)
    credentials = Credentials(**data)
    log.debug("credentials_loaded", path=str(path), missing=credentials.missing())
    return credentials


def save_credentials(credentials: Credentials, path: Path | str = CREDENTIALS_FILE) -> Path:
    """Persist credentials to a user-only readable JSON file.

    Args:
        credentials: Keys and model id to store
        path: Destination file

    Returns:
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(credentials.model_dump(), f, indent=2, ensure_ascii=False)
    os.chmod(path, 0o600)

    log.info("credentials_saved", path=str(path), model=credentials.model)
    return path
