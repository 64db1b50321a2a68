"""Exception taxonomy for the quote update pipeline.

Validator-stage errors are never raised across the pipeline boundary. Stages
return them inside `Failure` and the facade turns them into a
`ValidationResult`. Only configuration and registry mistakes raise.
"""


class QuotePipelineError(Exception):
    """Base exception for all quote pipeline errors."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        rule: str | None = None,
        excerpt: str | None = None,
    ) -> None:
        """Initialize with a message and optional diagnostic context.

        Args:
            message: Human-readable description of the failure.
            field: Name of the offending field, when one exists.
            rule: Name of the violated rule (e.g. ``"maximum"``).
            excerpt: Bounded excerpt of the offending text, never the full input.
        """
        self.message = message
        self.field = field
        self.rule = rule
        self.excerpt = excerpt
        super().__init__(message)


class NoCandidateFound(QuotePipelineError):
    """No payload-shaped block was found in the text. Expected, not a fault."""


class PayloadRejectedError(QuotePipelineError):
    """Base for every validator-stage rejection. The payload is discarded whole."""


class SizeExceeded(PayloadRejectedError):
    """Raised when a payload exceeds a configured size or count bound."""


class ParseError(PayloadRejectedError):
    """Raised when the candidate is not strict JSON."""


class ShapeError(PayloadRejectedError):
    """Raised when the parsed value has the wrong structural shape."""


class VersionError(PayloadRejectedError):
    """Raised when the discriminator or schema version is not supported."""


class UnknownFieldError(PayloadRejectedError):
    """Raised when a key is not in the allow-list for the declared version."""


class FieldConstraintError(PayloadRejectedError):
    """Raised when a known field violates its FieldSpec."""


class RegistryError(QuotePipelineError):
    """Raised when schema registry data is invalid or a version would be replaced."""


class RegistryFileError(RegistryError):
    """Raised when a registry file cannot be read or parsed."""

    def __init__(self, file_path, message: str, cause: Exception | None = None) -> None:
        """Initialize with file path, message, and optional cause.

        Args:
            file_path: The file that failed to load
            message: Human-readable error message
            cause: The underlying exception that caused the failure
        """
        self.file_path = file_path
        self.cause = cause
        super().__init__(f"Registry file error in {file_path}: {message}")
