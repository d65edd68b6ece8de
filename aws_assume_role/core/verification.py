"""
Prerequisite verification

Runs a fixed checklist (AWS CLI, client setup, current identity, role
access) and collects a pass/fail result for each step.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from aws_assume_role.core.config import ConfigStore, RoleDefinition
from aws_assume_role.core.errors import CloudProviderError
from aws_assume_role.roles.assume_role import CredentialClient
from aws_assume_role.utils.logging import LoggerMixin


@dataclass
class CheckResult:
    check: str
    passed: bool
    detail: str
    informational: bool = False


@dataclass
class VerificationReport:
    checks: List[CheckResult] = field(default_factory=list)
    aborted: bool = False

    @property
    def passed(self) -> bool:
        return not self.aborted and all(c.passed for c in self.checks if not c.informational)

    def add(self, check: str, passed: bool, detail: str, informational: bool = False) -> CheckResult:
        result = CheckResult(check, passed, detail, informational)
        self.checks.append(result)
        return result


class VerificationWorkflow(LoggerMixin):
    """Diagnostic pass over the role store and AWS access

    Args:
        store: Configured roles
        client_factory: Builds the CredentialClient; may raise CloudProviderError
        tool_probe: Returns whether the AWS CLI is usable
    """

    def __init__(self, store: ConfigStore,
                 client_factory: Callable[[], CredentialClient],
                 tool_probe: Callable[[], bool] = CredentialClient.check_tool_available):
        self.store = store
        self.client_factory = client_factory
        self.tool_probe = tool_probe

    def run(self, role_name: Optional[str] = None) -> VerificationReport:
        report = VerificationReport()

        # The AWS CLI is optional for this tool, so a missing binary only warns
        if self.tool_probe():
            report.add('aws-cli', True, 'AWS CLI is installed')
        else:
            report.add('aws-cli', False, 'AWS CLI not found on PATH (optional, but recommended)')

        try:
            client = self.client_factory()
        except CloudProviderError as e:
            report.add('aws-client', False, f'Could not initialize AWS client: {e}')
            report.aborted = True
            self.logger.error(f"Verification aborted: {e}")
            return report
        report.add('aws-client', True, 'AWS client initialized')

        try:
            identity = client.verify_current_identity()
            report.add('identity', True, f'Authenticated as {identity.arn} (account {identity.account})')
        except CloudProviderError as e:
            report.add('identity', False, f'Could not verify current AWS credentials: {e}')

        for role in self._roles_in_scope(role_name, report):
            self._check_role(client, role, report)

        self.logger.info(f"Verification finished: {'passed' if report.passed else 'failed'}")
        return report

    def _roles_in_scope(self, role_name: Optional[str], report: VerificationReport) -> List[RoleDefinition]:
        if role_name is not None:
            role = self.store.get_role(role_name)
            if role is None:
                report.add(f'role:{role_name}', False, f"Role '{role_name}' is not configured")
                return []
            return [role]

        if self.store.is_empty():
            report.add('roles', True, "No roles configured. Use 'configure' to add one.", informational=True)
        return list(self.store.roles)

    def _check_role(self, client: CredentialClient, role: RoleDefinition, report: VerificationReport) -> None:
        check = f'role:{role.name}'
        try:
            allowed = client.test_assume_role(role)
        except CloudProviderError as e:
            report.add(check, False, f'Could not determine access to {role.role_arn}: {e}')
            return

        if allowed:
            report.add(check, True, f'Can assume {role.role_arn}')
        else:
            report.add(check, False, f'Access denied: current credentials cannot assume {role.role_arn}')


def format_report(report: VerificationReport) -> str:
    """Human readable rendering of a verification report"""
    lines = ["🔍 Verifying prerequisites...", ""]
    for result in report.checks:
        if result.informational:
            icon = "ℹ️ "
        elif result.passed:
            icon = "✅"
        else:
            icon = "❌"
        lines.append(f"{icon} {result.detail}")

    lines.append("")
    if report.aborted:
        lines.append("❌ Verification aborted")
    elif report.passed:
        lines.append("✅ All checks passed")
    else:
        lines.append("⚠️  Some checks failed")
    return '\n'.join(lines)
