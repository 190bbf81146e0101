"""
Policy configuration for simulations.

A Config is an immutable record of independent strictness flags. It is
built once and passed explicitly to every run.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    """
    Strictness policy consumed by the protocol checker.

    Attributes:
        ignore_abort_order: Relaxed. Any abort is an acceptable release
            error or return while an abort is recorded, and exceptions
            not raised by the engine count as a user abort instead of
            propagating.
        require_release_on_abort: Pedantic. When an abort escapes the
            scenario, every acquired resource must have been released.
        skip_errors: Soft-fail. Violations are logged and only end the
            current execution; enumeration continues.
    """

    ignore_abort_order: bool = False
    require_release_on_abort: bool = False
    skip_errors: bool = False

    def __or__(self, other: Config) -> Config:
        """Compose two configs by enabling every flag set in either."""
        if not isinstance(other, Config):
            return NotImplemented
        return Config(
            ignore_abort_order=self.ignore_abort_order or other.ignore_abort_order,
            require_release_on_abort=(
                self.require_release_on_abort or other.require_release_on_abort
            ),
            skip_errors=self.skip_errors or other.skip_errors,
        )


DEFAULT = Config()

PEDANTIC = Config(require_release_on_abort=True)

RELAXED = Config(ignore_abort_order=True)

SKIP_ERRORS = Config(skip_errors=True)
