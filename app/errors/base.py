"""Errors base.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from enum import IntEnum


class BaseDomainException(Exception):  # noqa N818
    """Base exception.

    Every subclass must declare a ``code``. Raised without arguments the
    exception renders its own docstring summary.
    """

    code: IntEnum

    def __init_subclass__(cls) -> None:
        """Initialize subclass."""
        super().__init_subclass__()

        if not hasattr(cls, "code"):
            raise AttributeError("code must be set")

    def __str__(self) -> str:
        """Return message or docstring summary."""
        if self.args:
            return super().__str__()
        return (self.__doc__ or self.kind).strip().splitlines()[0]

    @property
    def kind(self) -> str:
        """Exception class name, stable across releases."""
        return type(self).__name__
