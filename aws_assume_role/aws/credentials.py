"""
Credential rendering and injection

Turns a CredentialRecord into shell export statements, JSON, or the
environment of a child process.
"""

import json
import os
import shlex
import subprocess
from typing import Callable, Dict, List, Mapping, Optional

from aws_assume_role.aws.environments import ShellKind
from aws_assume_role.core.errors import CliError
from aws_assume_role.roles.assume_role import CredentialRecord
from aws_assume_role.utils.logging import get_logger

logger = get_logger(__name__)

OUTPUT_FORMATS = ('export', 'json')


def credential_variables(credentials: CredentialRecord) -> Dict[str, str]:
    """Environment variables carrying the credentials, in export order"""
    variables = {
        'AWS_ACCESS_KEY_ID': credentials.access_key_id,
        'AWS_SECRET_ACCESS_KEY': credentials.secret_access_key,
    }
    if credentials.session_token:
        variables['AWS_SESSION_TOKEN'] = credentials.session_token
    return variables


def render_exports(credentials: CredentialRecord, shell: ShellKind, role_name: str) -> str:
    """Render export statements for the given shell"""
    variables = credential_variables(credentials)

    if shell == ShellKind.FISH:
        lines = [f'set -gx {name} "{value}"' for name, value in variables.items()]
        lines.append(f'echo "✅ Assumed role: {role_name}"')
    elif shell == ShellKind.POWERSHELL:
        lines = [f'$env:{name} = "{value}"' for name, value in variables.items()]
        lines.append(f'Write-Host "✅ Assumed role: {role_name}" -ForegroundColor Green')
    elif shell == ShellKind.CMD:
        lines = [f'set {name}={value}' for name, value in variables.items()]
        lines.append(f'echo ✅ Assumed role: {role_name}')
    else:
        lines = [f'export {name}="{value}"' for name, value in variables.items()]
        lines.append(f'echo "✅ Assumed role: {role_name}"')

    return '\n'.join(lines)


def render_json(credentials: CredentialRecord) -> str:
    """Render credentials in the AWS CLI JSON shape"""
    payload = {
        'AccessKeyId': credentials.access_key_id,
        'SecretAccessKey': credentials.secret_access_key,
    }
    if credentials.session_token:
        payload['SessionToken'] = credentials.session_token
    if credentials.expiration:
        payload['Expiration'] = credentials.expiration.isoformat()
    return json.dumps(payload, indent=2)


def render_credentials(credentials: CredentialRecord, output_format: str,
                       shell: ShellKind, role_name: str) -> str:
    """Render credentials in the requested output format"""
    if output_format == 'json':
        return render_json(credentials)
    if output_format == 'export':
        return render_exports(credentials, shell, role_name)
    raise CliError(f"Unknown output format: {output_format} (expected one of: {', '.join(OUTPUT_FORMATS)})")


def build_child_environment(credentials: CredentialRecord,
                            base_env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Copy of the base environment with the credentials injected"""
    env = dict(os.environ if base_env is None else base_env)
    env.update(credential_variables(credentials))
    if not credentials.session_token:
        # A leftover token would not match the injected keys
        env.pop('AWS_SESSION_TOKEN', None)
    return env


def parse_command(command: str) -> List[str]:
    """Split a command line into program and arguments"""
    try:
        args = shlex.split(command)
    except ValueError as e:
        raise CliError(f"Invalid command: {e}") from e
    if not args:
        raise CliError("Empty command")
    return args


def execute_with_credentials(credentials: CredentialRecord, command: str,
                             base_env: Optional[Mapping[str, str]] = None,
                             runner: Callable[..., subprocess.CompletedProcess] = subprocess.run) -> int:
    """
    Run a command with the credentials in its environment

    Raises:
        CliError: If the command is empty, cannot be started, or exits non-zero
    """
    args = parse_command(command)
    env = build_child_environment(credentials, base_env)

    logger.info(f"Executing with assumed credentials: {args[0]}")
    try:
        result = runner(args, env=env, check=False)
    except OSError as e:
        raise CliError(f"Failed to execute command: {e}") from e

    if result.returncode != 0:
        raise CliError(f"Command failed with exit code: {result.returncode}",
                       exit_code=result.returncode if result.returncode > 0 else 1)
    return result.returncode
