from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Callable


LOGGER = logging.getLogger(__name__)

DEFAULT_REGION = "kenya"


@dataclass(slots=True, frozen=True)
class RegionConfig:
    label: str
    flag: str
    currency: str
    currency_symbol: str
    locale: str
    price_max: float
    price_step: float


REGION_CONFIGS: dict[str, RegionConfig] = {
    "kenya": RegionConfig(
        label="Kenya",
        flag="\U0001F1F0\U0001F1EA",
        currency="KES",
        currency_symbol="KSh",
        locale="en-KE",
        price_max=50000,
        price_step=500,
    ),
    "usa": RegionConfig(
        label="USA",
        flag="\U0001F1FA\U0001F1F8",
        currency="USD",
        currency_symbol="$",
        locale="en-US",
        price_max=500,
        price_step=10,
    ),
}


def get_region_config(region: str) -> RegionConfig:
    try:
        return REGION_CONFIGS[region]
    except KeyError:
        raise ValueError(f"Unknown region: {region!r}") from None


def format_price(amount: float, region: str) -> str:
    config = get_region_config(region)
    rounded = f"{int(Decimal(str(amount)).quantize(Decimal(1), rounding=ROUND_HALF_UP)):,}"
    # Multi-letter symbols are separated from the amount ("KSh 1,500"), "$" is not.
    if len(config.currency_symbol) > 1:
        return f"{config.currency_symbol} {rounded}"
    return f"{config.currency_symbol}{rounded}"


class RegionContext:
    """
    Selected market/currency, persisted between runs in a small JSON state file.

    Construct once and pass to consumers; call load() to pick up the saved
    preference and subscribe() to react to set_region().
    """

    def __init__(self, state_path: Path | str | None = None, region: str = DEFAULT_REGION) -> None:
        self.state_path = Path(state_path) if state_path else None
        self._region = region if region in REGION_CONFIGS else DEFAULT_REGION
        self._subscribers: list[Callable[[str], None]] = []

    @property
    def region(self) -> str:
        return self._region

    @property
    def config(self) -> RegionConfig:
        return REGION_CONFIGS[self._region]

    def load(self) -> str:
        saved = _read_saved_region(self.state_path)
        self._region = saved if saved in REGION_CONFIGS else DEFAULT_REGION
        return self._region

    def set_region(self, region: str) -> None:
        get_region_config(region)
        self._region = region
        self._persist()
        for callback in list(self._subscribers):
            callback(region)

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def format_price(self, amount: float) -> str:
        return format_price(amount, self._region)

    def _persist(self) -> None:
        if self.state_path is None:
            return
        state = _read_state(self.state_path)
        state["region"] = self._region
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        self.state_path.write_text(json.dumps(state, sort_keys=True), encoding="utf-8")


def _read_saved_region(path: Path | None) -> str | None:
    if path is None:
        return None
    value = _read_state(path).get("region")
    return value if isinstance(value, str) else None


def _read_state(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        LOGGER.warning("Ignoring unreadable state file %s", path)
        return {}
    return data if isinstance(data, dict) else {}
