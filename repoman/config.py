"""Configuration management for repoman."""

import os
import json
import logging
from typing import Optional, Dict, Any
from dataclasses import dataclass, field, asdict

from dotenv import find_dotenv, load_dotenv

from .core.errors import AuthenticationError, WorkspaceNotFoundError

logger = logging.getLogger('repoman')

DEFAULT_BASE_URL = "https://crm.unsatisfiable.net"
CONFIG_FILE_NAME = "config.json"
WORKSPACE_FILE_NAME = ".repoman.json"


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass
class GitSettings:
    """How the external git executable is invoked.

    Timeouts are in seconds and apply per call, underneath whatever deadline
    the caller's context already carries.
    """

    executable: str = "git"
    clone_timeout: float = 300.0
    pull_timeout: float = 120.0
    command_timeout: float = 30.0
    connect_timeout: int = 10
    poll_interval: float = 0.1

    @classmethod
    def from_env(cls) -> 'GitSettings':
        """Create settings from REPOMAN_* environment variables."""
        defaults = cls()
        return cls(
            executable=os.getenv('REPOMAN_GIT') or defaults.executable,
            clone_timeout=_env_float('REPOMAN_CLONE_TIMEOUT', defaults.clone_timeout),
            pull_timeout=_env_float('REPOMAN_PULL_TIMEOUT', defaults.pull_timeout),
        )


def default_config_dir() -> str:
    """Per-user configuration directory for repoman."""
    base = os.getenv('XDG_CONFIG_HOME') or os.path.join(os.path.expanduser('~'), '.config')
    return os.path.join(base, 'repoman')


class CredentialStore:
    """API key and base URL stored in a JSON file in the user config directory."""

    def __init__(self, path: Optional[str] = None):
        """Initialize credential store.

        Args:
            path: Config file path (default: <user config dir>/repoman/config.json)
        """
        self.path = path or os.path.join(default_config_dir(), CONFIG_FILE_NAME)

    def _read(self) -> Dict[str, Any]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            raise ValueError(f"could not parse config file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"config file {self.path} must contain a JSON object")
        return data

    def get_api_key(self) -> Optional[str]:
        return self._read().get('api_key') or None

    def get_base_url(self) -> Optional[str]:
        return self._read().get('base_url') or None

    def set_api_key(self, api_key: str) -> str:
        """Store the API key, keeping any other saved settings.

        Returns:
            Path of the written config file
        """
        data = self._read()
        data['api_key'] = api_key
        os.makedirs(os.path.dirname(self.path), mode=0o700, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        logger.debug(f"Saved API key to {self.path}")
        return self.path


@dataclass
class Config:
    """Configuration for repoman.

    Merges environment variables with CLI arguments.
    CLI arguments take precedence over environment variables, which take
    precedence over the credential store.
    """

    base_url: str
    repos_base_dir: str
    api_key: Optional[str] = None
    max_workers: Optional[int] = None
    sequential: bool = False
    git: GitSettings = field(default_factory=GitSettings)

    @classmethod
    def from_env_and_args(
        cls,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        max_workers: Optional[int] = None,
        sequential: bool = False,
        credentials: Optional[CredentialStore] = None
    ) -> 'Config':
        """Create config from .env, environment variables and CLI arguments.

        Args:
            base_url: Catalog service URL (overrides REPOMAN_BASE_URL)
            api_key: Catalog API key (overrides REPOMAN_API_KEY)
            max_workers: Maximum parallel workers (overrides REPOMAN_MAX_WORKERS)
            sequential: Force sequential processing
            credentials: Credential store consulted last (default: user config file)

        Returns:
            Config instance
        """
        load_dotenv(find_dotenv(usecwd=True))
        store = credentials or CredentialStore()

        final_api_key = api_key or os.getenv('REPOMAN_API_KEY') or store.get_api_key()
        final_base_url = (
            base_url
            or os.getenv('REPOMAN_BASE_URL')
            or store.get_base_url()
            or DEFAULT_BASE_URL
        )
        final_workers = max_workers if max_workers is not None else _env_int('REPOMAN_MAX_WORKERS')

        return cls(
            base_url=final_base_url.rstrip('/'),
            repos_base_dir=os.getcwd(),
            api_key=final_api_key,
            max_workers=final_workers,
            sequential=sequential,
            git=GitSettings.from_env()
        )

    @property
    def is_authenticated(self) -> bool:
        """Check if an API key is available.

        Returns:
            True if an API key is set
        """
        return bool(self.api_key)

    def require_auth(self) -> None:
        """Raise if no API key is configured.

        Raises:
            AuthenticationError: If no API key is available
        """
        if not self.is_authenticated:
            raise AuthenticationError(
                "not authenticated. Set REPOMAN_API_KEY in .env or store an API key first"
            )


def find_workspace_root(start: Optional[str] = None) -> str:
    """Find the closest directory containing a workspace file.

    Args:
        start: Directory to start from (default: current directory)

    Returns:
        Absolute path of the workspace root

    Raises:
        WorkspaceNotFoundError: If no parent directory holds a workspace file
    """
    current = os.path.abspath(start or os.getcwd())
    while True:
        if os.path.isfile(os.path.join(current, WORKSPACE_FILE_NAME)):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            raise WorkspaceNotFoundError("no workspace found. Run 'repoman init' first")
        current = parent


@dataclass
class WorkspaceConfig:
    """Course and assignment a workspace directory is bound to."""

    course_id: str
    course_name: str
    assignment_id: str
    assignment_name: str
    root: Optional[str] = None

    @classmethod
    def load(cls, start: Optional[str] = None) -> 'WorkspaceConfig':
        """Load the workspace file from ``start`` or the nearest parent holding one."""
        root = find_workspace_root(start)
        path = os.path.join(root, WORKSPACE_FILE_NAME)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"could not parse workspace config {path}: {e}") from e

        return cls(
            course_id=str(data.get('course_id', '')),
            course_name=data.get('course_name', ''),
            assignment_id=str(data.get('assignment_id', '')),
            assignment_name=data.get('assignment_name', ''),
            root=root
        )

    def save(self, directory: Optional[str] = None) -> str:
        """Write the workspace file.

        Args:
            directory: Target directory (default: ``root`` or the current directory)

        Returns:
            Path of the written file
        """
        target = directory or self.root or os.getcwd()
        data = asdict(self)
        data.pop('root')
        path = os.path.join(target, WORKSPACE_FILE_NAME)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        self.root = os.path.abspath(target)
        return path
