"""
Main AWS Assume Role manager
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from aws_assume_role.aws.environments import RuntimeEnvironment
from aws_assume_role.core.config import ConfigStore, RoleDefinition
from aws_assume_role.core.errors import CliError, CloudProviderError
from aws_assume_role.core.verification import VerificationReport, VerificationWorkflow
from aws_assume_role.roles.assume_role import CredentialClient, CredentialRecord
from aws_assume_role.utils.logging import LoggerMixin


@dataclass
class ConfigureResult:
    role: RoleDefinition
    saved: bool
    # True, False (denied) or None when access could not be determined
    verified: Optional[bool]
    message: str


class AWSAssumeRoleManager(LoggerMixin):
    """Coordinates the role store and AWS client for each command"""

    def __init__(self, environment: RuntimeEnvironment,
                 store: Optional[ConfigStore] = None,
                 client_factory: Optional[Callable[[], CredentialClient]] = None,
                 tool_probe: Callable[[], bool] = CredentialClient.check_tool_available):
        self.environment = environment
        self.store = store if store is not None else ConfigStore.load(environment.config_path())
        self.client_factory = client_factory or (lambda: CredentialClient.from_region(environment.region))
        self.tool_probe = tool_probe
        self._client = None

    @property
    def client(self) -> CredentialClient:
        """Lazily created AWS client"""
        if self._client is None:
            if self.environment.region_from_fallback:
                self.logger.info(f"No AWS region configured, using {self.environment.region}")
            self._client = self.client_factory()
        return self._client

    def configure_role(self, role: RoleDefinition, verify: bool = True,
                       confirm: Optional[Callable[[str], bool]] = None) -> ConfigureResult:
        """
        Add or update a role after checking that it can be assumed

        Args:
            role: Role definition to store
            verify: Probe role access before saving
            confirm: Asked whether to save anyway when access is denied

        A probe that fails for reasons other than a denial does not block
        saving; the role is stored so the user can troubleshoot later.
        """
        verified = None
        if not verify:
            message = f"Role '{role.name}' configured successfully (verification skipped)"
        else:
            try:
                verified = self.client.test_assume_role(role)
            except CloudProviderError as e:
                self.logger.warning(f"Could not verify role {role.name}: {e}")
                message = (f"Role '{role.name}' configured successfully, but could not verify "
                           f"role access: {e}")
            else:
                if verified:
                    message = f"Role '{role.name}' configured successfully and access verified"
                else:
                    prompt = (f"Current credentials cannot assume {role.role_arn}. "
                              f"Save role '{role.name}' anyway?")
                    if confirm is None or not confirm(prompt):
                        return ConfigureResult(role, False, False,
                                               f"Role '{role.name}' was not saved")
                    message = (f"Role '{role.name}' configured, but access was denied. "
                               f"Check the role's trust policy.")

        self.store.add_role(role)
        self.store.save()
        return ConfigureResult(role, True, verified, message)

    def get_role(self, name: str) -> RoleDefinition:
        role = self.store.get_role(name)
        if role is None:
            raise CliError(f"Role '{name}' not found")
        return role

    def assume_role(self, name: str, duration: Optional[int] = None) -> CredentialRecord:
        """Assume a configured role by name"""
        role = self.get_role(name)
        return self.client.assume_role(role, duration)

    def list_roles(self) -> List[RoleDefinition]:
        return list(self.store.roles)

    def remove_role(self, name: str) -> bool:
        """Remove a role and persist the change"""
        if not self.store.remove_role(name):
            return False
        self.store.save()
        return True

    def verify(self, role_name: Optional[str] = None) -> VerificationReport:
        workflow = VerificationWorkflow(
            self.store,
            client_factory=lambda: self.client,
            tool_probe=self.tool_probe,
        )
        return workflow.run(role_name)
