"""Utils for RBAC provisioning.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

import functools
from pathlib import Path
from typing import Any, Callable

from ldap3.core.exceptions import LDAPInvalidDnError
from ldap3.utils.dn import escape_rdn, parse_dn
from loguru import logger as loguru_logger

from .constants import (
    DS_GENERIC_MAPPING,
    INVALID_NAME_CHARACTERS,
    MAX_GROUP_NAME_LENGTH,
)
from .exceptions import InvalidInputError, InvalidPathError, RBACError

LOGGER_NAME = "rbac"

log = loguru_logger.bind(name=LOGGER_NAME)


def setup_logging(log_dir: str | Path, debug: bool = False) -> int:
    """Add the provisioning file sink.

    :param log_dir: directory for the daily log files
    :param debug: log DEBUG records as well
    :return: loguru handler id
    """
    return loguru_logger.add(
        Path(log_dir) / "rbac_{time:DD-MM-YYYY}.log",
        filter=lambda rec: rec["extra"].get("name") == LOGGER_NAME,
        level="DEBUG" if debug else "INFO",
        retention="10 days",
        rotation="1d",
        colorize=False,
    )


def logger_wraps(is_stub: bool = False) -> Callable:
    """Log directory gateway calls."""

    def wrapper(func: Callable) -> Callable:
        name = func.__name__
        bus_type = " stub " if is_stub else " "

        @functools.wraps(func)
        def wrapped(*args: Any, **kwargs: Any) -> Any:
            logger = log.opt(depth=1)

            logger.debug(f"Calling{bus_type}'{name}'")
            try:
                result = func(*args, **kwargs)
            except RBACError as err:
                logger.error(f"{name} call raised: {err}")
                raise

            else:
                if not is_stub:
                    logger.debug(f"Executed {name}")
            return result

        return wrapped

    return wrapper


def map_generic_rights(mask: int) -> int:
    """Replace generic rights bits with the rights they stand for."""
    mapped = mask
    for generic, specific in DS_GENERIC_MAPPING.items():
        if mask & generic:
            mapped = (mapped & ~int(generic)) | specific
    return mapped


def validate_role_name(name: str) -> str:
    """Check a group name is usable as ``cn`` and ``sAMAccountName``."""
    if not name or not name.strip():
        raise InvalidInputError("Role name must not be empty")

    if name != name.strip():
        raise InvalidInputError(
            f"Role name {name!r} has leading or trailing spaces",
        )

    if len(name) > MAX_GROUP_NAME_LENGTH:
        raise InvalidInputError(
            f"Role name is longer than {MAX_GROUP_NAME_LENGTH} characters",
        )

    if bad := sorted(INVALID_NAME_CHARACTERS.intersection(name)):
        raise InvalidInputError(
            f"Role name {name!r} contains forbidden characters: "
            f"{''.join(bad)}",
        )

    return name


def validate_container_dn(container_dn: str) -> str:
    """Check the container path is a well formed distinguished name."""
    if not container_dn or not container_dn.strip():
        raise InvalidPathError("Role container path must not be empty")

    try:
        parse_dn(container_dn)
    except LDAPInvalidDnError as err:
        raise InvalidPathError(
            f"Role container path {container_dn!r} is not a valid DN",
        ) from err

    return container_dn


def build_group_dn(name: str, container_dn: str) -> str:
    """Distinguished name of a group created in the container."""
    return f"CN={escape_rdn(name)},{container_dn}"
