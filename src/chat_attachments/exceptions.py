"""Custom exceptions for chat attachment ingestion."""


class AttachmentException(Exception):
    """Base exception for chat attachment ingestion.

    All custom exceptions in this package should inherit from this base class.
    """

    pass


class InvalidEncodingException(AttachmentException):
    """Raised when attachment content cannot be decoded.

    This exception is raised when:
    - The content is not a string
    - The base64 payload length is not a multiple of 4
    - The payload contains characters outside the base64 alphabet

    Attributes:
        label: The attachment label the error refers to
    """

    def __init__(self, message: str, label: str | None = None):
        super().__init__(message)
        self.label = label


class SizeExceededException(AttachmentException):
    """Raised when a decoded attachment is empty or larger than allowed.

    Attributes:
        label: The attachment label the error refers to
        size_bytes: Decoded size of the attachment
        max_bytes: The ceiling that was applied
    """

    def __init__(
        self,
        message: str,
        label: str | None = None,
        size_bytes: int | None = None,
        max_bytes: int | None = None,
    ):
        super().__init__(message)
        self.label = label
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes


class UnsupportedAttachmentException(AttachmentException):
    """Raised by the legacy builder for attachments that are not images.

    Attributes:
        label: The attachment label the error refers to
        mime_type: The claimed MIME type that was rejected
    """

    def __init__(
        self, message: str, label: str | None = None, mime_type: str | None = None
    ):
        super().__init__(message)
        self.label = label
        self.mime_type = mime_type


class PersistenceException(AttachmentException):
    """Raised when a non-image attachment cannot be written to disk.

    Callers inside the pipeline catch this and degrade the reference block.

    Attributes:
        label: The attachment label the error refers to
        path: The target path, when one was derived
        original_error: The underlying OS error
    """

    def __init__(
        self,
        message: str,
        label: str | None = None,
        path: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.label = label
        self.path = path
        self.original_error = original_error


class ExtractionException(AttachmentException):
    """Raised when text extraction is unsupported or fails.

    This exception is raised when:
    - The MIME type is not in the allowed extraction set
    - The payload exceeds the extraction byte ceiling
    - An optional extraction backend (``pypdf``) is not installed
    - The backend fails while reading the document

    Attributes:
        mime_type: The MIME type extraction was attempted for
        original_error: The underlying backend error, if any
    """

    def __init__(
        self,
        message: str,
        mime_type: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.mime_type = mime_type
        self.original_error = original_error


class ConfigurationException(AttachmentException):
    """Raised when configuration errors occur.

    This exception is raised when:
    - An environment override is not a valid integer
    - Invalid configuration values are provided

    Attributes:
        config_key: The configuration key that caused the error
        config_value: The invalid configuration value
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        config_value: str | None = None,
    ):
        super().__init__(message)
        self.config_key = config_key
        self.config_value = config_value
