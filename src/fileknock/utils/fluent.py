"""Single-use fluent builder base."""

from typing import Generic, TypeVar

T = TypeVar("T")


class FluentBuilder(Generic[T]):
    """
    Base for builders whose setters return ``self``.

    A builder is finished by ``build()``; setters called afterwards raise,
    so a built object is never changed behind its owner's back.

    Example:
        data = Settings().health_check(10).log_level("DEBUG").build()
    """

    def __init__(self) -> None:
        self._built = False

    def _check_not_built(self) -> None:
        if self._built:
            raise RuntimeError(f"{type(self).__name__} was already built")

    def _mark_built(self) -> None:
        self._built = True
