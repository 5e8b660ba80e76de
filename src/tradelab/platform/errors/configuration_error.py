from __future__ import annotations

from typing import Mapping, Sequence


class ConfigurationError(ValueError):
    """
    Raised when strategy setup violates a construction-time contract.

    Covers invalid indicator windows, negative rule percentages, indicators bound to a
    series other than the simulated one, invalid numeric modes and execution parameters.
    Always raised before the first bar of a run is visited.

    Docs:
      - docs/architecture/backtest-engine.md (section 7.1, error taxonomy)
    Related:
      - src/tradelab/contexts/backtest/application/use_cases/errors.py
      - src/tradelab/platform/errors/tradelab_error.py
    """

    def __init__(
        self,
        message: str,
        *,
        errors: Sequence[Mapping[str, str]] | None = None,
    ) -> None:
        """
        Build configuration error with optional deterministic item payload.

        Args:
            message: Human-readable configuration failure description.
            errors: Optional detailed items (`path`, `code`, `message`).
        Returns:
            None.
        Assumptions:
            Missing item fields are normalized to deterministic fallback values.
        Raises:
            None.
        Side Effects:
            Stores normalized immutable items for the error mapping layer.
        """
        super().__init__(message)
        normalized_errors: list[dict[str, str]] = []
        if errors is not None:
            for item in errors:
                normalized_errors.append(
                    {
                        "path": str(item.get("path", "unknown")),
                        "code": str(item.get("code", "configuration_error")),
                        "message": str(item.get("message", message)),
                    }
                )
        self._errors = tuple(normalized_errors)

    @property
    def errors(self) -> tuple[Mapping[str, str], ...]:
        """
        Return immutable normalized configuration error items.

        Args:
            None.
        Returns:
            tuple[Mapping[str, str], ...]: Stable normalized error details.
        Assumptions:
            Items were normalized during initialization.
        Raises:
            None.
        Side Effects:
            None.
        """
        return self._errors


def configuration_error(*, path: str, message: str) -> ConfigurationError:
    """
    Build single-item configuration error pointing at one offending parameter.

    Args:
        path: Dotted parameter path, for example `SMAIndicator.window`.
        message: Human-readable failure description.
    Returns:
        ConfigurationError: Error with one `invalid_value` item.
    Assumptions:
        None.
    Raises:
        None.
    Side Effects:
        None.
    """
    return ConfigurationError(
        message,
        errors=({"path": path, "code": "invalid_value", "message": message},),
    )
