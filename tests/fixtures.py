"""Test doubles shared across the test suite."""

from botocore.exceptions import ClientError, ConnectTimeoutError


class StubProvider:
    """In-memory stand-in for the STS/SSO clients.

    Each operation returns the configured response, or raises the configured
    error. Calls are recorded for assertions.
    """

    def __init__(self, assume_response=None, assume_error=None,
                 identity_response=None, identity_error=None,
                 sso_response=None, sso_error=None):
        self.assume_response = assume_response
        self.assume_error = assume_error
        self.identity_response = identity_response
        self.identity_error = identity_error
        self.sso_response = sso_response
        self.sso_error = sso_error
        self.assume_calls = []
        self.identity_calls = 0
        self.sso_calls = []

    def assume_role(self, **kwargs):
        self.assume_calls.append(kwargs)
        if self.assume_error is not None:
            raise self.assume_error
        return self.assume_response

    def get_caller_identity(self):
        self.identity_calls += 1
        if self.identity_error is not None:
            raise self.identity_error
        return self.identity_response

    def get_role_credentials(self, **kwargs):
        self.sso_calls.append(kwargs)
        if self.sso_error is not None:
            raise self.sso_error
        return self.sso_response


def client_error(code, message, operation="AssumeRole"):
    """Build a botocore ClientError like the ones STS raises."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def access_denied_error():
    return client_error(
        "AccessDenied",
        "User: arn:aws:iam::123456789012:user/alice is not authorized to perform: "
        "sts:AssumeRole on resource: arn:aws:iam::123456789012:role/DevRole",
    )


def timeout_error():
    return ConnectTimeoutError(endpoint_url="https://sts.us-east-1.amazonaws.com/")
