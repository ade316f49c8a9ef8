"""Common business exceptions for RBAC role provisioning.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from enum import IntEnum, unique

from errors import BaseDomainException


@unique
class ErrorCodes(IntEnum):
    """Error codes."""

    BASE_ERROR = 0
    NOT_FOUND_ERROR = 1
    ROLE_NOT_FOUND_ERROR = 2
    TRUSTEE_NOT_FOUND_ERROR = 3
    ALREADY_EXISTS_ERROR = 4
    RESOLUTION_ERROR = 5
    SCHEMA_RESOLUTION_ERROR = 6
    INVALID_INPUT_ERROR = 7
    INVALID_PATH_ERROR = 8
    DIRECTORY_QUERY_ERROR = 9
    SECURITY_DESCRIPTOR_FORMAT_ERROR = 10
    DIRECTORY_WRITE_ERROR = 11
    ACL_COMMIT_ERROR = 12


class RBACError(BaseDomainException):
    """Base exception for all RBAC provisioning errors."""

    code: ErrorCodes = ErrorCodes.BASE_ERROR


class NotFoundError(RBACError):
    """Raised when a directory object is absent."""

    code: ErrorCodes = ErrorCodes.NOT_FOUND_ERROR


class RoleNotFoundError(NotFoundError):
    """Raised when the role group does not exist."""

    code: ErrorCodes = ErrorCodes.ROLE_NOT_FOUND_ERROR


class ResolutionError(RBACError):
    """Raised when a schema or trustee lookup fails."""

    code: ErrorCodes = ErrorCodes.RESOLUTION_ERROR


class TrusteeNotFoundError(ResolutionError, NotFoundError):
    """Raised when a trustee group does not exist in the directory."""

    code: ErrorCodes = ErrorCodes.TRUSTEE_NOT_FOUND_ERROR


class SchemaResolutionError(ResolutionError):
    """Raised when a schema GUID cannot be resolved."""

    code: ErrorCodes = ErrorCodes.SCHEMA_RESOLUTION_ERROR


class AlreadyExistsError(RBACError):
    """Raised when a group with the requested name already exists."""

    code: ErrorCodes = ErrorCodes.ALREADY_EXISTS_ERROR


class InvalidInputError(RBACError):
    """Raised when a role name or path is malformed."""

    code: ErrorCodes = ErrorCodes.INVALID_INPUT_ERROR


class InvalidPathError(InvalidInputError):
    """Raised when the role container path is malformed or absent."""

    code: ErrorCodes = ErrorCodes.INVALID_PATH_ERROR


class DirectoryQueryError(RBACError):
    """Raised when a directory read fails."""

    code: ErrorCodes = ErrorCodes.DIRECTORY_QUERY_ERROR


class SecurityDescriptorFormatError(DirectoryQueryError):
    """Raised when a security descriptor cannot be decoded."""

    code: ErrorCodes = ErrorCodes.SECURITY_DESCRIPTOR_FORMAT_ERROR


class DirectoryWriteError(RBACError):
    """Raised when the directory rejects a write."""

    code: ErrorCodes = ErrorCodes.DIRECTORY_WRITE_ERROR


class ACLCommitError(DirectoryWriteError):
    """Raised when the security descriptor write is rejected."""

    code: ErrorCodes = ErrorCodes.ACL_COMMIT_ERROR
