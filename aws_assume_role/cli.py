#!/usr/bin/env python3
"""
Command Line Interface for AWS Assume Role
"""

import argparse
import os
import sys
from typing import List, Optional

from aws_assume_role import __version__
from aws_assume_role.aws.credentials import OUTPUT_FORMATS, execute_with_credentials, render_credentials
from aws_assume_role.aws.environments import RuntimeEnvironment, ShellKind
from aws_assume_role.core.config import MAX_SESSION_DURATION, MIN_SESSION_DURATION, RoleDefinition
from aws_assume_role.core.errors import AppError, CliError
from aws_assume_role.core.manager import AWSAssumeRoleManager
from aws_assume_role.core.verification import format_report
from aws_assume_role.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def session_duration(value: str) -> int:
    """argparse type for session durations accepted by STS"""
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
    if not MIN_SESSION_DURATION <= seconds <= MAX_SESSION_DURATION:
        raise argparse.ArgumentTypeError(
            f"duration must be between {MIN_SESSION_DURATION} and {MAX_SESSION_DURATION} seconds")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='aws-assume-role',
        description='AWS Assume Role CLI (awsr): switch between AWS IAM roles across accounts',
    )
    parser.add_argument('--version', action='version', version=f'aws-assume-role {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging on stderr')

    subparsers = parser.add_subparsers(dest='command', metavar='<command>')
    subparsers.required = True

    configure = subparsers.add_parser('configure', help='Configure a new AWS IAM role',
                                      description='Configure a new AWS IAM role')
    configure.add_argument('-n', '--name', required=True, help='Name of the role configuration')
    configure.add_argument('-r', '--role-arn', required=True, help='AWS role ARN')
    configure.add_argument('-a', '--account-id', required=True, help='AWS account ID')
    configure.add_argument('-s', '--source-profile', help='AWS profile used to assume the role')
    configure.add_argument('-d', '--duration', type=session_duration, help='Default session duration in seconds')
    configure.add_argument('--skip-verify', action='store_true', help='Save without checking role access')
    configure.add_argument('-y', '--yes', action='store_true', help='Save even if access is denied')

    assume = subparsers.add_parser('assume', help='Assume a configured role',
                                   description='Assume a configured role')
    assume.add_argument('name', help='Name of the role configuration to assume')
    assume.add_argument('-d', '--duration', type=session_duration, help='Duration in seconds (default: role setting or 3600)')
    assume.add_argument('-f', '--format', default='export', choices=OUTPUT_FORMATS, help='Output format')
    assume.add_argument('--shell', choices=[kind.value for kind in ShellKind],
                        help='Shell syntax for exports (default: detected)')
    assume.add_argument('-e', '--exec', dest='exec_command', metavar='COMMAND',
                        help='Execute a command with the assumed role credentials')

    subparsers.add_parser('list', help='List all configured AWS IAM roles',
                          description='List all configured AWS IAM roles')

    remove = subparsers.add_parser('remove', help='Remove a configured AWS IAM role',
                                   description='Remove a configured AWS IAM role')
    remove.add_argument('name', help='Name of the role configuration to remove')

    verify = subparsers.add_parser('verify', help='Verify that all prerequisites are met',
                                   description='Verify that all prerequisites are met')
    verify.add_argument('-r', '--role', help='Only check this role')

    return parser


def ask_confirmation(prompt: str) -> bool:
    """Ask a yes/no question on stderr; no answer means no"""
    print(f"⚠️  {prompt} [y/N] ", end='', file=sys.stderr, flush=True)
    try:
        answer = input()
    except EOFError:
        print(file=sys.stderr)
        return False
    return answer.strip().lower() in ('y', 'yes')


def cmd_configure(manager: AWSAssumeRoleManager, args) -> int:
    if not args.name.strip():
        raise CliError("Role name must not be empty")

    role = RoleDefinition(
        name=args.name,
        role_arn=args.role_arn,
        account_id=args.account_id,
        source_profile=args.source_profile,
        session_duration=args.duration,
    )
    confirm = (lambda prompt: True) if args.yes else ask_confirmation
    result = manager.configure_role(role, verify=not args.skip_verify, confirm=confirm)

    if not result.saved:
        print(f"❌ {result.message}")
        return 1
    if result.verified or args.skip_verify:
        print(f"✅ {result.message}")
    else:
        print(f"⚠️  {result.message}")
    return 0


def cmd_assume(manager: AWSAssumeRoleManager, args) -> int:
    credentials = manager.assume_role(args.name, args.duration)

    if args.exec_command is not None:
        return execute_with_credentials(credentials, args.exec_command)

    shell = ShellKind(args.shell) if args.shell else manager.environment.shell
    print(render_credentials(credentials, args.format, shell, args.name))
    if credentials.expiration:
        logger.info(f"Credentials expire at {credentials.expiration.isoformat()}")
    return 0


def cmd_list(manager: AWSAssumeRoleManager, args) -> int:
    roles = manager.list_roles()
    if not roles:
        print("No roles configured")
        return 0

    print("Configured roles:")
    for role in roles:
        print(f"- {role.name} ({role.role_arn})")
    return 0


def cmd_remove(manager: AWSAssumeRoleManager, args) -> int:
    if manager.remove_role(args.name):
        print(f"✅ Role '{args.name}' removed successfully")
    else:
        print(f"Role '{args.name}' not found")
    return 0


def cmd_verify(manager: AWSAssumeRoleManager, args) -> int:
    report = manager.verify(args.role)
    print(format_report(report))
    return 0 if report.passed else 1


COMMANDS = {
    'configure': cmd_configure,
    'assume': cmd_assume,
    'list': cmd_list,
    'remove': cmd_remove,
    'verify': cmd_verify,
}


def main(argv: Optional[List[str]] = None, environ=None,
         manager: Optional[AWSAssumeRoleManager] = None) -> int:
    """Main CLI function; returns the process exit code"""
    args = build_parser().parse_args(argv)
    environ = os.environ if environ is None else environ

    log_level = 'DEBUG' if args.verbose else environ.get('AWS_ASSUME_ROLE_LOG_LEVEL', 'WARNING')
    log_file = environ.get('AWS_ASSUME_ROLE_LOG_FILE')
    setup_logging(log_level=log_level, log_file=log_file, enable_file_logging=bool(log_file))

    try:
        if manager is None:
            manager = AWSAssumeRoleManager(RuntimeEnvironment.from_environ(environ))
        return COMMANDS[args.command](manager, args)
    except AppError as e:
        logger.debug(f"{args.command} failed: {e!r}")
        print(f"❌ Error: {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("\n❌ Interrupted", file=sys.stderr)
        return 130
    except Exception as e:
        logger.error(f"CLI error: {e}")
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1


def run() -> None:
    """Console script entry point"""
    sys.exit(main())


if __name__ == '__main__':
    run()
