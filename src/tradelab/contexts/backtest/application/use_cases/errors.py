from __future__ import annotations

from typing import Any, Mapping, Sequence

from tradelab.platform.errors import ConfigurationError, TradelabError


def validation_error(
    *,
    message: str,
    errors: Sequence[Mapping[str, str]] | None = None,
) -> TradelabError:
    """
    Build canonical `validation_error` TradelabError with deterministic item ordering.

    Args:
        message: Human-readable validation failure message.
        errors: Optional validation items list.
    Returns:
        TradelabError: Canonical deterministic validation error.
    Assumptions:
        Validation item entries contain `path`, `code`, and `message`.
    Raises:
        None.
    Side Effects:
        None.
    """
    details: dict[str, Any] = {}
    if errors is not None:
        details["errors"] = _sorted_error_items(items=errors, default_code="validation_error")
    return TradelabError(
        code="validation_error",
        message=message,
        details=details,
    )


def configuration_failure(*, error: ConfigurationError) -> TradelabError:
    """
    Build canonical `configuration_error` TradelabError from raised configuration error.

    Args:
        error: Configuration error raised by strategy setup or runner validation.
    Returns:
        TradelabError: Canonical error carrying sorted offending-parameter items.
    Assumptions:
        Items were normalized by `ConfigurationError`.
    Raises:
        None.
    Side Effects:
        None.
    """
    details: dict[str, Any] = {}
    if len(error.errors) > 0:
        details["errors"] = _sorted_error_items(
            items=error.errors,
            default_code="configuration_error",
        )
    return TradelabError(
        code="configuration_error",
        message=str(error),
        details=details,
    )


def map_backtest_exception(*, error: Exception) -> TradelabError:
    """
    Map backtest failures to canonical TradelabError contract.

    Args:
        error: Caught exception.
    Returns:
        TradelabError: Canonical mapped error.
    Assumptions:
        `ConfigurationError` is checked before generic `ValueError` because it subclasses it.
        Unknown exceptions are mapped to generic `unexpected_error`.
    Raises:
        None.
    Side Effects:
        None.
    """
    if isinstance(error, TradelabError):
        return error

    if isinstance(error, ConfigurationError):
        return configuration_failure(error=error)

    if isinstance(error, ValueError):
        return validation_error(message=str(error) or "Backtest validation failed")

    return TradelabError(
        code="unexpected_error",
        message="Unexpected backtest operation error",
        details={"reason": str(error), "type": type(error).__name__},
    )


def _sorted_error_items(
    *,
    items: Sequence[Mapping[str, str]],
    default_code: str,
) -> list[dict[str, str]]:
    """
    Normalize and deterministically sort error item list by path/code/message.

    Args:
        items: Error item sequence.
        default_code: Code used when an item has none.
    Returns:
        list[dict[str, str]]: Deterministically sorted normalized list.
    Assumptions:
        Missing fields are replaced with deterministic fallback literals.
    Raises:
        None.
    Side Effects:
        None.
    """
    normalized_items: list[dict[str, str]] = []
    for item in items:
        normalized_items.append(
            {
                "path": str(item.get("path", "unknown")),
                "code": str(item.get("code", default_code)),
                "message": str(item.get("message", "Validation error")),
            }
        )

    return sorted(
        normalized_items,
        key=lambda row: (row["path"], row["code"], row["message"]),
    )
