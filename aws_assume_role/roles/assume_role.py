"""
AWS Role Assumption

CredentialClient exchanges configured roles for temporary credentials. It
talks to AWS through an IdentityProvider so tests can substitute a stub for
the boto3 clients.
"""

import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from aws_assume_role.core.config import RoleDefinition
from aws_assume_role.core.errors import CloudProviderError
from aws_assume_role.utils.logging import LoggerMixin

SESSION_NAME = 'aws-assume-role-session'

# Shortest duration STS accepts; used for permission probes
PROBE_DURATION = 900

ACCESS_DENIED_CODES = frozenset({
    'AccessDenied',
    'AccessDeniedException',
    'UnauthorizedOperation',
    'UnauthorizedAccess',
    'Forbidden',
})

ACCESS_DENIED_MARKERS = ('accessdenied', 'access denied', 'not authorized', 'forbidden')


class IdentityProvider(Protocol):
    """The subset of the STS and SSO APIs the client relies on"""

    def assume_role(self, **kwargs) -> Dict[str, Any]: ...

    def get_caller_identity(self) -> Dict[str, Any]: ...

    def get_role_credentials(self, **kwargs) -> Dict[str, Any]: ...


class BotoIdentityProvider:
    """IdentityProvider backed by boto3 STS and SSO clients"""

    def __init__(self, session: boto3.Session, region: str):
        self.sts_client = session.client('sts', region_name=region)
        self.sso_client = session.client('sso', region_name=region)

    def assume_role(self, **kwargs) -> Dict[str, Any]:
        return self.sts_client.assume_role(**kwargs)

    def get_caller_identity(self) -> Dict[str, Any]:
        return self.sts_client.get_caller_identity()

    def get_role_credentials(self, **kwargs) -> Dict[str, Any]:
        return self.sso_client.get_role_credentials(**kwargs)


@dataclass
class CredentialRecord:
    """Temporary credentials for a single invocation; never persisted"""

    access_key_id: str
    secret_access_key: str
    session_token: Optional[str] = None
    expiration: Optional[datetime] = None

    def __repr__(self) -> str:
        return (f"CredentialRecord(access_key_id={self.access_key_id[:4]}..., "
                f"session_token={'set' if self.session_token else 'unset'}, "
                f"expiration={self.expiration})")


@dataclass(frozen=True)
class CallerIdentity:
    account: str
    arn: str
    user_id: str


def parse_expiration(value: Any, epoch_unit: float = 1.0) -> Optional[datetime]:
    """Normalize a provider expiration to a timezone-aware datetime

    Args:
        value: datetime, epoch number or ISO 8601 string
        epoch_unit: Divisor for epoch numbers (1000 for milliseconds)
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / epoch_unit, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError as e:
            raise CloudProviderError(f"Unrecognized credential expiration: {value!r}") from e
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise CloudProviderError(f"Unrecognized credential expiration: {value!r}")


def is_access_denied(error: CloudProviderError) -> bool:
    """Whether a provider error means the caller lacks permission"""
    if error.error_code is not None:
        return error.error_code in ACCESS_DENIED_CODES
    # Errors without a code are matched on their message text
    text = str(error).lower()
    return any(marker in text for marker in ACCESS_DENIED_MARKERS)


def _wrap_provider_error(action: str, error: Exception) -> CloudProviderError:
    if isinstance(error, ClientError):
        details = error.response.get('Error', {})
        code = details.get('Code')
        message = details.get('Message') or str(error)
        return CloudProviderError(f"Failed to {action}: {code} - {message}", error_code=code)
    return CloudProviderError(f"Failed to {action}: {error}")


class CredentialClient(LoggerMixin):
    """Acquires and verifies AWS credentials for configured roles"""

    def __init__(self, provider: IdentityProvider,
                 profile_provider: Optional[Callable[[str], IdentityProvider]] = None):
        self.provider = provider
        self.profile_provider = profile_provider

    @classmethod
    def from_region(cls, region: str) -> 'CredentialClient':
        """Create a client using the ambient boto3 credential chain

        Raises:
            CloudProviderError: If boto3 cannot be initialized
        """
        def build(profile_name: Optional[str] = None) -> IdentityProvider:
            try:
                session = boto3.Session(profile_name=profile_name, region_name=region)
                return BotoIdentityProvider(session, region)
            except (BotoCoreError, ClientError) as e:
                target = f"profile '{profile_name}'" if profile_name else 'default credentials'
                raise _wrap_provider_error(f"initialize AWS client for {target}", e) from e

        return cls(build(), profile_provider=build)

    def _provider_for(self, role: RoleDefinition) -> IdentityProvider:
        if role.source_profile and self.profile_provider is not None:
            self.logger.debug(f"Using source profile '{role.source_profile}' for role {role.name}")
            return self.profile_provider(role.source_profile)
        return self.provider

    def assume_role(self, role: RoleDefinition, duration: Optional[int] = None) -> CredentialRecord:
        """
        Assume a configured role and get temporary credentials

        Args:
            role: The role definition to assume
            duration: Session duration override in seconds

        Raises:
            CloudProviderError: If the call fails or returns no credentials
        """
        if duration is None:
            duration = role.effective_duration
        provider = self._provider_for(role)

        assume_role_params = {
            'RoleArn': role.role_arn,
            'RoleSessionName': SESSION_NAME,
            'DurationSeconds': duration,
        }

        try:
            response = provider.assume_role(**assume_role_params)
        except CloudProviderError:
            raise
        except Exception as e:
            self.logger.debug(f"AssumeRole failed for {role.role_arn}: {e}")
            raise _wrap_provider_error('assume role', e) from e

        credentials = (response or {}).get('Credentials')
        if not credentials:
            raise CloudProviderError("Failed to assume role: no credentials returned")

        record = CredentialRecord(
            access_key_id=credentials.get('AccessKeyId') or '',
            secret_access_key=credentials.get('SecretAccessKey') or '',
            session_token=credentials.get('SessionToken'),
            expiration=parse_expiration(credentials.get('Expiration')),
        )

        self.logger.info(f"Successfully assumed role: {role.role_arn} (duration {duration}s)")
        return record

    def test_assume_role(self, role: RoleDefinition) -> bool:
        """Check whether the current credentials may assume a role

        Returns False only for authorization denials; other failures raise.
        """
        try:
            self.assume_role(role, PROBE_DURATION)
        except CloudProviderError as e:
            if is_access_denied(e):
                self.logger.info(f"Access denied assuming {role.role_arn}")
                return False
            raise
        return True

    def verify_current_identity(self) -> CallerIdentity:
        """Get the identity behind the current credentials"""
        try:
            response = self.provider.get_caller_identity()
        except Exception as e:
            raise _wrap_provider_error('get caller identity', e) from e

        identity = CallerIdentity(
            account=response.get('Account', ''),
            arn=response.get('Arn', ''),
            user_id=response.get('UserId', ''),
        )
        self.logger.info(f"Current identity: {identity.arn} (account {identity.account})")
        return identity

    def get_sso_credentials(self, account_id: str, role_name: str, access_token: str) -> CredentialRecord:
        """Get role credentials through AWS IAM Identity Center (SSO)"""
        try:
            response = self.provider.get_role_credentials(
                roleName=role_name,
                accountId=account_id,
                accessToken=access_token,
            )
        except Exception as e:
            raise _wrap_provider_error('get SSO role credentials', e) from e

        credentials = (response or {}).get('roleCredentials')
        if not credentials:
            raise CloudProviderError("Failed to get SSO role credentials: no credentials returned")

        return CredentialRecord(
            access_key_id=credentials.get('accessKeyId') or '',
            secret_access_key=credentials.get('secretAccessKey') or '',
            session_token=credentials.get('sessionToken'),
            # SSO reports expiration in epoch milliseconds
            expiration=parse_expiration(credentials.get('expiration'), epoch_unit=1000.0),
        )

    @staticmethod
    def check_tool_available(tool: str = 'aws', runner: Callable[..., Any] = subprocess.run) -> bool:
        """Check whether an auxiliary command-line tool can be run"""
        try:
            result = runner([tool, '--version'], capture_output=True, text=True, check=False)
        except OSError:
            return False
        return result.returncode == 0
