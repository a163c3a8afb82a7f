"""Error taxonomy for the webhook pipeline.

Everything raised after a webhook is authenticated derives from
``ProcessingError`` so the HTTP layer can map it to a single generic failure.
Numeric coercion problems are never raised; they default to zero.
"""


class InvoicerError(Exception):
    """Base class for all invoicer errors."""


class ConfigError(InvoicerError):
    """Required configuration is missing or invalid."""


class AuthenticationError(InvoicerError):
    """The webhook signature did not match the shared secret."""


class ProcessingError(InvoicerError):
    """A pipeline step failed after the webhook was authenticated."""


class RemoteStoreError(ProcessingError):
    """A remote file store operation failed."""


class DiscoveryError(RemoteStoreError):
    """Listing the input folder failed."""


class DownloadError(RemoteStoreError):
    """Fetching a download link or file content failed."""


class UploadError(RemoteStoreError):
    """Uploading a buffer to the remote store failed."""


class MoveError(RemoteStoreError):
    """Moving or renaming a remote file failed."""


class SourceMissingError(MoveError):
    """The file to move no longer exists at its source path."""


class ParseError(ProcessingError):
    """The CSV text could not be split into rows."""


class TemplateError(ProcessingError):
    """The invoice template could not be loaded as a workbook."""
