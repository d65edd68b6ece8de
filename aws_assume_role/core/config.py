"""
Role configuration storage for AWS Assume Role

Roles are kept in a single JSON file under the user's home directory.
Saving overwrites the whole file and takes no lock; two invocations saving
at the same time can lose one of the updates.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from aws_assume_role.core.errors import ConfigError
from aws_assume_role.utils.logging import LoggerMixin

CONFIG_DIR_NAME = '.aws-assume-role'
CONFIG_FILE_NAME = 'config.json'

DEFAULT_SESSION_DURATION = 3600
MIN_SESSION_DURATION = 900
MAX_SESSION_DURATION = 43200


def config_path_for_home(home: Path) -> Path:
    """Get the config file location for a home directory"""
    return Path(home) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


@dataclass
class RoleDefinition:
    """A named IAM role that can be assumed"""

    name: str
    role_arn: str
    account_id: str
    source_profile: Optional[str] = None
    session_duration: Optional[int] = None

    @property
    def effective_duration(self) -> int:
        if self.session_duration is None:
            return DEFAULT_SESSION_DURATION
        return self.session_duration

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'role_arn': self.role_arn,
            'account_id': self.account_id,
            'source_profile': self.source_profile,
            'session_duration': self.session_duration,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RoleDefinition':
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid role entry: expected an object, got {type(data).__name__}")

        missing = [key for key in ('name', 'role_arn', 'account_id') if not data.get(key)]
        if missing:
            raise ConfigError(f"Invalid role entry: missing {', '.join(missing)}")

        duration = data.get('session_duration')
        if duration is not None and (isinstance(duration, bool) or not isinstance(duration, int)):
            raise ConfigError(f"Invalid session_duration for role '{data['name']}': {duration!r}")

        return cls(
            name=data['name'],
            role_arn=data['role_arn'],
            account_id=str(data['account_id']),
            source_profile=data.get('source_profile'),
            session_duration=duration,
        )


@dataclass
class ConfigStore(LoggerMixin):
    """Ordered collection of role definitions persisted as JSON"""

    path: Path
    roles: List[RoleDefinition] = field(default_factory=list)
    default_profile: Optional[str] = None
    sso_start_url: Optional[str] = None
    sso_region: Optional[str] = None

    @classmethod
    def load(cls, path: Path) -> 'ConfigStore':
        """Load configuration from JSON file

        A missing file is not an error: it yields an empty store.
        """
        path = Path(path)
        store = cls(path=path)

        if not path.exists():
            store.logger.debug(f"Configuration file {path} not found, starting empty")
            return store

        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise ConfigError(f"Failed to read config file: {e}") from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse config file: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError("Failed to parse config file: expected a JSON object")

        roles = data.get('roles') or []
        if not isinstance(roles, list):
            raise ConfigError("Failed to parse config file: 'roles' must be a list")

        store.roles = [RoleDefinition.from_dict(entry) for entry in roles]
        store.default_profile = data.get('default_profile')
        store.sso_start_url = data.get('sso_start_url')
        store.sso_region = data.get('sso_region')

        store.logger.info(f"Loaded {len(store.roles)} role(s) from {path}")
        return store

    def to_dict(self) -> Dict[str, Any]:
        return {
            'default_profile': self.default_profile,
            'sso_start_url': self.sso_start_url,
            'sso_region': self.sso_region,
            'roles': [role.to_dict() for role in self.roles],
        }

    def save(self) -> None:
        """Save configuration to JSON file, replacing it entirely"""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Failed to create config directory: {e}") from e

        try:
            content = json.dumps(self.to_dict(), indent=2)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Failed to serialize config: {e}") from e

        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            raise ConfigError(f"Failed to write config file: {e}") from e

        self.logger.info(f"Configuration saved to {self.path}")

    def add_role(self, role: RoleDefinition) -> None:
        """Add a role, replacing an existing one with the same name in place"""
        for index, existing in enumerate(self.roles):
            if existing.name == role.name:
                self.roles[index] = role
                self.logger.debug(f"Replaced role: {role.name}")
                return
        self.roles.append(role)
        self.logger.debug(f"Added role: {role.name}")

    def get_role(self, name: str) -> Optional[RoleDefinition]:
        """Get a role by exact name"""
        for role in self.roles:
            if role.name == name:
                return role
        return None

    def remove_role(self, name: str) -> bool:
        """Remove a role by name, returning whether anything was removed"""
        for index, role in enumerate(self.roles):
            if role.name == name:
                del self.roles[index]
                self.logger.debug(f"Removed role: {name}")
                return True
        return False

    def is_empty(self) -> bool:
        return not self.roles
