"""Custom exceptions for endpointgen.

This module defines the hierarchy of exceptions used throughout endpointgen to
report the different ways a generation run can fail. Fatal errors propagate to
the CLI and end the run with a non-zero exit code; failures inside optional
phases are wrapped in :class:`PhaseError` and recorded instead.
"""


class EndpointGenError(Exception):
    """Base exception for all endpointgen errors.

    All exceptions raised by endpointgen inherit from this class, making it
    easy to catch all endpointgen-related errors with a single except clause.

    Example:
        try:
            codegen.generate()
        except EndpointGenError as e:
            print(f"endpointgen error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class DeclarationLoadError(EndpointGenError):
    """Failed to load endpoint declarations from a module.

    Raised when the declaration module cannot be read, or when neither the
    structural pass nor the textual fallback discovers a single endpoint.
    This is always fatal: nothing has been written when it is raised.

    Attributes:
        source: Path of the declaration module.
        reason: Explanation of what went wrong.
        cause: The underlying exception, if any.
    """

    def __init__(
        self, source: str, reason: str | None = None, cause: Exception | None = None
    ):
        self.source = source
        self.reason = reason
        self.cause = cause
        message = f"Failed to load endpoints from '{source}'"
        if reason:
            message += f': {reason}'
        if cause:
            message += f' ({cause})'
        super().__init__(message)


class InvalidStoreConfigError(EndpointGenError):
    """A store-backed endpoint has an inconsistent configuration.

    For example a ``GetItem`` endpoint declared with an ``indexName``: a
    direct key lookup has no index concept. The whole run is aborted.

    Attributes:
        endpoint: Name of the offending endpoint.
        reason: What is wrong with its configuration.
    """

    def __init__(self, endpoint: str, reason: str):
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(f"Invalid store configuration for endpoint '{endpoint}': {reason}")


class CodeGenerationError(EndpointGenError):
    """Error during code generation.

    Attributes:
        context: Additional context about what was being generated.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self, message: str, context: str | None = None, cause: Exception | None = None
    ):
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f'{message} (while generating {context})'
        if cause:
            full_message += f': {cause}'
        super().__init__(full_message)


class ConfigurationError(EndpointGenError):
    """Error in configuration.

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)


class OutputError(EndpointGenError):
    """Error writing generated output.

    Raised when a directory cannot be created or cleared, or a file cannot be
    copied or written.

    Attributes:
        output_path: The path where output was being written.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, output_path: str, cause: Exception | None = None):
        self.output_path = output_path
        self.cause = cause
        message = f"Failed to write output to '{output_path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class PhaseError(EndpointGenError):
    """An optional pipeline phase failed.

    Optional phases (mocks, templates, contract tests) never abort the run.
    Their failures are wrapped in this exception and recorded on the
    generation result so the caller can report them.

    Attributes:
        phase: Name of the phase that failed.
        cause: The underlying exception.
    """

    def __init__(self, phase: str, cause: Exception | None = None):
        self.phase = phase
        self.cause = cause
        message = f"Phase '{phase}' failed"
        if cause:
            message += f': {cause}'
        super().__init__(message)
