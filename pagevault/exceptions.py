"""Custom exception classes for the PageVault server."""


class PageVaultException(Exception):
    """
    Base exception class for all PageVault errors.
    """
    pass


class ValidationError(PageVaultException):
    """
    Raised when request input is rejected before anything is written.
    """
    pass


class QuotaExceededError(PageVaultException):
    """
    Raised when an upload would take a user past their storage limit.
    """
    pass


class StorageError(PageVaultException):
    """
    Raised when the object store is unreachable or rejects an operation.
    """
    pass


class IndexDegradedError(PageVaultException):
    """
    Raised when the embedding backend or vector index fails.

    Never surfaced to API callers; search falls back to metadata and
    indexing failures are logged.
    """
    pass


class AdoptionSkipped(PageVaultException):
    """
    Raised when a root-level object cannot be adopted because no admin exists.
    """
    pass


class InvalidAPIKeyError(PageVaultException):
    """
    Raised when an API Key is missing, malformed or unknown.
    """
    pass


class AccountRestrictedError(PageVaultException):
    """
    Raised when a locked account makes any request or a pending account writes.
    """
    pass


class FileNotFoundError(PageVaultException):
    """
    Raised when a requested file does not exist or belongs to another user.
    """
    pass


class UnauthorizedAccessError(PageVaultException):
    """
    Raised when a user touches a resource they don't own.
    """
    pass


class TagNotFoundError(PageVaultException):
    """
    Raised when a requested tag does not exist for the user.
    """
    pass


class TagAlreadyExistsError(PageVaultException):
    """
    Raised when creating or renaming a tag to a name the user already has.
    """
    pass


class ShareNotFoundError(PageVaultException):
    """
    Raised when a share id is unknown or the share is disabled.
    """
    pass


class SyncInProgressError(PageVaultException):
    """
    Raised when a reconciliation sweep is requested while one is running.
    """
    pass
