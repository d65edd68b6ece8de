"""
Runtime environment resolution

Everything the tool needs from the process environment (home directory,
region, shell) is read once here and passed explicitly to the components
that need it.
"""

import os
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from aws_assume_role.core.config import config_path_for_home
from aws_assume_role.core.errors import ConfigError
from aws_assume_role.utils.logging import get_logger

logger = get_logger(__name__)

# Used when no region is configured so boto3 never probes instance metadata
DEFAULT_REGION = 'us-east-1'


class ShellKind(str, Enum):
    """Shell dialects that credentials can be exported for"""

    POSIX = 'posix'
    FISH = 'fish'
    POWERSHELL = 'powershell'
    CMD = 'cmd'


def detect_shell(environ: Mapping[str, str], platform: str) -> ShellKind:
    """Pick the export syntax for the calling shell"""
    if platform.startswith('win'):
        if environ.get('PSModulePath'):
            return ShellKind.POWERSHELL
        return ShellKind.CMD

    if 'fish' in environ.get('SHELL', ''):
        return ShellKind.FISH
    return ShellKind.POSIX


def resolve_home(environ: Mapping[str, str]) -> Path:
    """Resolve the user's home directory from the environment"""
    home = environ.get('HOME') or environ.get('USERPROFILE')
    if not home and environ.get('HOMEDRIVE') and environ.get('HOMEPATH'):
        home = environ['HOMEDRIVE'] + environ['HOMEPATH']
    if not home:
        raise ConfigError("Could not find home directory")
    return Path(home)


@dataclass(frozen=True)
class RuntimeEnvironment:
    """Snapshot of the process settings the tool depends on"""

    home: Optional[Path]
    region: str
    region_from_fallback: bool
    shell: ShellKind
    platform: str

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None,
                     platform: Optional[str] = None) -> 'RuntimeEnvironment':
        """Build the runtime environment from an environment mapping

        Home resolution failures are deferred until the config path is
        actually needed, so commands that do not touch the store still work.
        """
        environ = os.environ if environ is None else environ
        platform = platform or sys.platform

        try:
            home = resolve_home(environ)
        except ConfigError:
            home = None

        region = environ.get('AWS_REGION') or environ.get('AWS_DEFAULT_REGION')
        region_from_fallback = not region
        if region_from_fallback:
            logger.debug(f"No AWS region configured, falling back to {DEFAULT_REGION}")
            region = DEFAULT_REGION

        return cls(
            home=home,
            region=region,
            region_from_fallback=region_from_fallback,
            shell=detect_shell(environ, platform),
            platform=platform,
        )

    def config_path(self) -> Path:
        """Location of the persisted role configuration"""
        if self.home is None:
            raise ConfigError("Could not find home directory")
        return config_path_for_home(self.home)
