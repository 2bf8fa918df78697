"""Service protocols defining interfaces for dependency injection."""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

T_contra = TypeVar("T_contra", contravariant=True)
R_co = TypeVar("R_co", covariant=True)


class ItemHandler(Protocol[T_contra, R_co]):
    """Per-item operation run by the bulk processor.

    Returning means success; raising any Exception means the attempt failed.
    """

    def __call__(self, item: T_contra, /) -> R_co: ...


class ItemSenderProtocol(Protocol):
    """Protocol for clients that deliver one item to an external system."""

    def send(self, item: Any) -> dict[str, Any]: ...

    def close(self) -> None: ...
