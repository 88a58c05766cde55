"""Custom exceptions for configuration, ranking and service errors."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Base exception for configuration errors with optional suggestions."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[Configuration Error] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class MissingCredentialsError(ConfigurationError):
    """Error when a third-party credential is missing."""

    def __init__(self, service: str, env_vars: tuple[str, ...]) -> None:
        super().__init__(
            f"{service} credentials not configured",
            f"Set {', '.join(env_vars)} or add them to the config file.",
        )


class ContestError(Exception):
    """Base exception for contest domain errors."""


class InvalidArgumentError(ContestError, ValueError):
    """Malformed input: unknown role filter, out-of-range score, bad scope."""


class UpstreamUnavailableError(ContestError):
    """A vote, role or submission source failed to respond."""


class OtpError(ContestError):
    """Base exception for one-time password failures."""


class InvalidPhoneError(OtpError, InvalidArgumentError):
    """Phone number does not normalize to ten digits."""

    def __init__(self, phone: str) -> None:
        self.phone = phone
        super().__init__(f"Invalid phone number: {phone!r}")


class OtpNotFoundError(OtpError):
    """No outstanding code exists for the phone number."""

    def __init__(self) -> None:
        super().__init__("No OTP found. Please request a new one.")


class OtpExpiredError(OtpError):
    """The outstanding code is past its expiry."""

    def __init__(self) -> None:
        super().__init__("OTP has expired. Please request a new one.")


class OtpMismatchError(OtpError):
    """The supplied code does not match the outstanding one."""

    def __init__(self) -> None:
        super().__init__("Invalid OTP. Please try again.")


class PaymentGatewayError(ContestError):
    """The payment gateway rejected a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
