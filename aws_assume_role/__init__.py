"""
AWS Assume Role Package

Configure named AWS IAM roles and assume them, exporting temporary
credentials into the calling shell or a child process.
"""

__version__ = "1.3.1"
__author__ = "AWS Assume Role Team"
__description__ = "Simple CLI tool to easily switch between AWS IAM roles across different accounts"

from aws_assume_role.core.config import ConfigStore, RoleDefinition
from aws_assume_role.core.errors import AppError, CliError, CloudProviderError, ConfigError
from aws_assume_role.core.manager import AWSAssumeRoleManager
from aws_assume_role.core.verification import VerificationReport, VerificationWorkflow
from aws_assume_role.aws.environments import RuntimeEnvironment, ShellKind
from aws_assume_role.roles.assume_role import CallerIdentity, CredentialClient, CredentialRecord
from aws_assume_role.utils.logging import setup_logging, get_logger

__all__ = [
    'AWSAssumeRoleManager',
    'ConfigStore',
    'RoleDefinition',
    'CredentialClient',
    'CredentialRecord',
    'CallerIdentity',
    'VerificationWorkflow',
    'VerificationReport',
    'RuntimeEnvironment',
    'ShellKind',
    'AppError',
    'ConfigError',
    'CloudProviderError',
    'CliError',
    'setup_logging',
    'get_logger'
]
