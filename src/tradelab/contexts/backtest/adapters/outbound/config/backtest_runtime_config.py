from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping

import yaml

from tradelab.contexts.backtest.domain.value_objects import EndOfSeriesPolicy, ExecutionParams
from tradelab.contexts.strategy.domain.value_objects import SmaCrossoverParams
from tradelab.platform.numeric import NumericPolicy, build_numeric_policy
from tradelab.shared_kernel.primitives import PositionSide

log = logging.getLogger(__name__)

_ENV_NAME_KEY = "TRADELAB_ENV"
_BACKTEST_CONFIG_PATH_KEY = "TRADELAB_BACKTEST_CONFIG"
_ALLOWED_ENVS = ("dev", "prod", "test")

_NUMERIC_MODE_DEFAULT = "decimal"
_NUMERIC_SCALE_DEFAULT = 8
_NUMERIC_ROUNDING_DEFAULT = "ROUND_HALF_UP"
_NUMERIC_BITS_DEFAULT = 64

_SMA_DEFAULTS = SmaCrossoverParams()


@dataclass(frozen=True, slots=True)
class BacktestNumericRuntimeConfig:
    """
    Numeric representation settings (`backtest.numeric`) for bar series and criteria.

    Docs:
      - docs/architecture/backtest-engine.md (sections 4.0 and 7.2)
    Related:
      - configs/dev/backtest.yaml
      - src/tradelab/platform/numeric/numeric_policy.py
    """

    mode: str = _NUMERIC_MODE_DEFAULT
    scale: int = _NUMERIC_SCALE_DEFAULT
    rounding: str = _NUMERIC_ROUNDING_DEFAULT
    bits: int = _NUMERIC_BITS_DEFAULT

    def __post_init__(self) -> None:
        """
        Validate numeric settings by building the policy once.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Settings irrelevant for selected mode are still type-checked by the loader.
        Raises:
            ConfigurationError: If mode, scale, rounding or bits are invalid.
        Side Effects:
            Normalizes `mode` literal to lowercase stripped representation.
        """
        object.__setattr__(self, "mode", str(self.mode).strip().lower())
        self.build_policy()

    def build_policy(self) -> NumericPolicy:
        return build_numeric_policy(
            mode=self.mode,
            scale=self.scale,
            rounding=self.rounding,
            bits=self.bits,
        )


@dataclass(frozen=True, slots=True)
class BacktestRuntimeConfig:
    """
    Backtest runtime config v1 loaded from `configs/<env>/backtest.yaml`.

    Docs:
      - docs/architecture/backtest-engine.md (section 7.2)
    Related:
      - configs/dev/backtest.yaml
      - configs/test/backtest.yaml
      - configs/prod/backtest.yaml
    """

    version: int
    numeric: BacktestNumericRuntimeConfig = field(default_factory=BacktestNumericRuntimeConfig)
    execution: ExecutionParams = field(default_factory=ExecutionParams)
    sma_crossover: SmaCrossoverParams = field(default_factory=SmaCrossoverParams)

    def __post_init__(self) -> None:
        """
        Validate runtime config invariants for fail-fast startup behavior.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Version remains fixed to `1`.
        Raises:
            ValueError: If version is not 1 or a section is missing.
        Side Effects:
            None.
        """
        if self.version != 1:
            raise ValueError(f"backtest config version must be 1, got {self.version!r}")
        if self.numeric is None:  # type: ignore[truthy-bool]
            raise ValueError("backtest.numeric section must be configured")
        if self.execution is None:  # type: ignore[truthy-bool]
            raise ValueError("backtest.execution section must be configured")
        if self.sma_crossover is None:  # type: ignore[truthy-bool]
            raise ValueError("backtest.strategy.sma_crossover section must be configured")

    def numeric_policy(self) -> NumericPolicy:
        return self.numeric.build_policy()


def resolve_backtest_config_path(
    *,
    environ: Mapping[str, str],
) -> Path:
    """
    Resolve runtime config path using env override precedence contract.

    Args:
        environ: Runtime environment mapping.
    Returns:
        Path: Resolved `backtest.yaml` path.
    Assumptions:
        Precedence is `TRADELAB_BACKTEST_CONFIG` > `configs/<TRADELAB_ENV>/backtest.yaml`.
    Raises:
        ValueError: If `TRADELAB_ENV` value is unsupported.
    Side Effects:
        None.
    """
    override_path = environ.get(_BACKTEST_CONFIG_PATH_KEY, "").strip()
    if override_path:
        return Path(override_path)

    env_name = _resolve_env_name(environ=environ)
    return Path("configs") / env_name / "backtest.yaml"


def load_backtest_runtime_config(path: str | Path) -> BacktestRuntimeConfig:
    """
    Load and validate backtest runtime YAML configuration.

    Args:
        path: Path to `backtest.yaml`.
    Returns:
        BacktestRuntimeConfig: Parsed validated config object.
    Assumptions:
        Missing optional sections and keys fall back to documented defaults; an explicit
        `null` disables the optional strategy threshold or stop.
    Raises:
        FileNotFoundError: If path does not exist.
        ValueError: If YAML shape or values are invalid.
    Side Effects:
        Reads one UTF-8 YAML file from filesystem.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"backtest config not found: {config_path}")

    payload = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise ValueError("backtest config must be mapping at top-level")

    version = _get_int(payload, "version", required=True)
    backtest_map = _get_mapping(payload, "backtest", required=False)
    numeric_map = _get_mapping(backtest_map, "numeric", required=False)
    execution_map = _get_mapping(backtest_map, "execution", required=False)
    strategy_map = _get_mapping(backtest_map, "strategy", required=False)
    sma_map = _get_mapping(strategy_map, "sma_crossover", required=False)

    numeric = BacktestNumericRuntimeConfig(
        mode=_get_str_with_default(numeric_map, "mode", default=_NUMERIC_MODE_DEFAULT),
        scale=_get_int_with_default(numeric_map, "scale", default=_NUMERIC_SCALE_DEFAULT),
        rounding=_get_str_with_default(
            numeric_map,
            "rounding",
            default=_NUMERIC_ROUNDING_DEFAULT,
        ),
        bits=_get_int_with_default(numeric_map, "bits", default=_NUMERIC_BITS_DEFAULT),
    )
    execution = ExecutionParams(
        side=PositionSide.parse(
            _get_str_with_default(execution_map, "side", default=PositionSide.LONG.value)
        ),
        amount=_get_number_with_default(execution_map, "amount", default=1),
        end_of_series_policy=EndOfSeriesPolicy.parse(
            _get_str_with_default(
                execution_map,
                "end_of_series_policy",
                default=EndOfSeriesPolicy.FORCE_CLOSE.value,
            )
        ),
        start_index=_get_optional_int(execution_map, "start_index"),
        finish_index=_get_optional_int(execution_map, "finish_index"),
    )
    sma_crossover = SmaCrossoverParams(
        short_window=_get_int_with_default(
            sma_map,
            "short_window",
            default=_SMA_DEFAULTS.short_window,
        ),
        long_window=_get_int_with_default(
            sma_map,
            "long_window",
            default=_SMA_DEFAULTS.long_window,
        ),
        entry_price_threshold=_get_nullable_number_with_default(
            sma_map,
            "entry_price_threshold",
            default=_SMA_DEFAULTS.entry_price_threshold,
        ),
        stop_loss_pct=_get_nullable_number_with_default(
            sma_map,
            "stop_loss_pct",
            default=_SMA_DEFAULTS.stop_loss_pct,
        ),
        stop_gain_pct=_get_nullable_number_with_default(
            sma_map,
            "stop_gain_pct",
            default=_SMA_DEFAULTS.stop_gain_pct,
        ),
    )

    return BacktestRuntimeConfig(
        version=version,
        numeric=numeric,
        execution=execution,
        sma_crossover=sma_crossover,
    )


def load_backtest_runtime_config_from_env(
    *,
    environ: Mapping[str, str] | None = None,
) -> BacktestRuntimeConfig:
    """
    Resolve config path from environment and load it.

    Args:
        environ: Runtime environment mapping; defaults to `os.environ`.
    Returns:
        BacktestRuntimeConfig: Parsed validated config object.
    Assumptions:
        Relative fallback path is resolved against the current working directory.
    Raises:
        FileNotFoundError: If resolved path does not exist.
        ValueError: If env name, YAML shape or values are invalid.
    Side Effects:
        Reads one YAML file and logs the resolved path at INFO.
    """
    effective_environ = environ if environ is not None else os.environ
    config_path = resolve_backtest_config_path(environ=effective_environ)
    log.info("loading backtest runtime config from %s", config_path)
    return load_backtest_runtime_config(config_path)


def _resolve_env_name(*, environ: Mapping[str, str]) -> str:
    """
    Resolve normalized runtime environment name for fallback path generation.

    Args:
        environ: Runtime environment mapping.
    Returns:
        str: One of `dev`, `prod`, or `test`.
    Assumptions:
        Missing `TRADELAB_ENV` defaults to `dev`.
    Raises:
        ValueError: If runtime env value is unsupported.
    Side Effects:
        None.
    """
    raw_env_name = environ.get(_ENV_NAME_KEY, "dev").strip().lower()
    if raw_env_name not in _ALLOWED_ENVS:
        raise ValueError(
            f"{_ENV_NAME_KEY} must be one of {_ALLOWED_ENVS}, got {raw_env_name!r}"
        )
    return raw_env_name


def _get_mapping(data: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """
    Read nested mapping from YAML payload.

    Args:
        data: Source mapping.
        key: Mapping key.
        required: Whether key is mandatory.
    Returns:
        Mapping[str, Any]: Nested mapping or empty mapping.
    Assumptions:
        Optional missing mapping sections are represented as empty mapping.
    Raises:
        ValueError: If required key missing or value is not mapping.
    Side Effects:
        None.
    """
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f"missing required key: {key}")
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"expected mapping at key '{key}', got {type(value).__name__}")
    return value


def _get_int(data: Mapping[str, Any], key: str, *, required: bool) -> int:
    """
    Read integer value from payload while rejecting bools.

    Raises:
        ValueError: If missing required key or value type is invalid.
    """
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f"missing required key: {key}")
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected int at key '{key}', got {type(value).__name__}")
    return value


def _get_optional_int(data: Mapping[str, Any], key: str) -> int | None:
    if data.get(key) is None:
        return None
    return _get_int(data, key, required=True)


def _get_int_with_default(data: Mapping[str, Any], key: str, *, default: int) -> int:
    if key not in data:
        return default
    return _get_int(data, key, required=True)


def _get_str_with_default(data: Mapping[str, Any], key: str, *, default: str) -> str:
    """
    Read optional non-empty string with explicit fallback default.

    Raises:
        ValueError: If provided value is not a non-empty string.
    """
    if key not in data:
        return default
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"expected non-empty string at key '{key}', got {value!r}")
    return value.strip()


def _get_number(data: Mapping[str, Any], key: str) -> int | Decimal:
    """
    Read numeric scalar keeping integers exact and floats as their decimal text.

    Args:
        data: Source mapping.
        key: Numeric key name.
    Returns:
        int | Decimal: Parsed value; floats become `Decimal(repr(value))`.
    Assumptions:
        Numeric strings are accepted so that YAML can carry exact decimals (`"0.5"`).
    Raises:
        ValueError: If value is missing, bool or non-numeric.
    Side Effects:
        None.
    """
    value = data.get(key)
    if value is None:
        raise ValueError(f"missing required key: {key}")
    if isinstance(value, bool):
        raise ValueError(f"expected number at key '{key}', got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except ArithmeticError as error:
            raise ValueError(f"expected number at key '{key}', got {value!r}") from error
    raise ValueError(f"expected number at key '{key}', got {type(value).__name__}")


def _get_number_with_default(
    data: Mapping[str, Any],
    key: str,
    *,
    default: int | Decimal,
) -> int | Decimal:
    if key not in data:
        return default
    return _get_number(data, key)


def _get_nullable_number_with_default(
    data: Mapping[str, Any],
    key: str,
    *,
    default: Any,
) -> int | Decimal | None:
    """
    Read optional number where explicit `null` disables the setting.

    Raises:
        ValueError: If provided value is not numeric.
    """
    if key not in data:
        return default
    if data.get(key) is None:
        return None
    return _get_number(data, key)
