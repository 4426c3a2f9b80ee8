from dataclasses import dataclass
from typing import Any, Mapping

import httpx
import structlog

from ccstatus.models import Usage

logger = structlog.get_logger()

LITELLM_PRICING_URL = (
    "https://raw.githubusercontent.com/BerriAI/litellm/main/"
    "model_prices_and_context_window.json"
)


@dataclass(frozen=True, slots=True)
class ModelPricing:
    """
    ModelPricing holds the USD price of a single token
    for each of the four usage counters.
    """

    input_tokens: "float"
    output_tokens: "float"
    cache_write_tokens: "float"
    cache_read_tokens: "float"

    def cost(self, usage: "Usage") -> "float":
        return (
            usage.input_tokens * self.input_tokens
            + usage.output_tokens * self.output_tokens
            + usage.cache_write_tokens * self.cache_write_tokens
            + usage.cache_read_tokens * self.cache_read_tokens
        )


def _per_million(
    input_: "float", output: "float", cache_write: "float", cache_read: "float"
) -> "ModelPricing":
    return ModelPricing(
        input_tokens=input_ / 1_000_000,
        output_tokens=output / 1_000_000,
        cache_write_tokens=cache_write / 1_000_000,
        cache_read_tokens=cache_read / 1_000_000,
    )


# list prices in USD per million tokens, keyed by model id
DEFAULT_PRICING: "dict[str, ModelPricing]" = {
    "claude-opus-4-5-20251101": _per_million(5, 25, 6.25, 0.5),
    "claude-opus-4-1-20250805": _per_million(15, 75, 18.75, 1.5),
    "claude-opus-4-20250514": _per_million(15, 75, 18.75, 1.5),
    "claude-sonnet-4-5-20250929": _per_million(3, 15, 3.75, 0.3),
    "claude-sonnet-4-20250514": _per_million(3, 15, 3.75, 0.3),
    "claude-3-7-sonnet-20250219": _per_million(3, 15, 3.75, 0.3),
    "claude-haiku-4-5-20251001": _per_million(1, 5, 1.25, 0.1),
    "claude-3-5-haiku-20241022": _per_million(0.8, 4, 1, 0.08),
}


class PricingTable:
    """
    PricingTable resolves model ids to prices. Models missing
    from the table cost nothing.
    """

    def __init__(self, prices: "Mapping[str, ModelPricing] | None" = None) -> "None":
        self._prices: "dict[str, ModelPricing]" = dict(
            DEFAULT_PRICING if prices is None else prices
        )
        # models already reported as unknown
        self._unknown: "set[str]" = set()

    def __len__(self) -> "int":
        return len(self._prices)

    def lookup(self, model: "str") -> "ModelPricing | None":
        pricing = self._prices.get(model)
        if pricing is None and model not in self._unknown:
            self._unknown.add(model)
            logger.debug("pricing_unknown_model", model=model)
        return pricing

    def cost(self, usages: "Mapping[str, Usage]") -> "float":
        """
        sums the cost of per-model usage, skipping unknown models.
        """
        total = 0.0
        for model, usage in usages.items():
            pricing = self.lookup(model)
            if pricing is not None:
                total += pricing.cost(usage)
        return total


def parse_litellm_pricing(data: "Any") -> "dict[str, ModelPricing]":
    """
    extracts per-token prices from a LiteLLM price map. Entries
    without both input and output prices are skipped.
    """
    if not isinstance(data, dict):
        raise ValueError("pricing document is not a JSON object")

    prices: "dict[str, ModelPricing]" = {}
    for model, entry in data.items():
        if not isinstance(entry, dict):
            continue
        if "input_cost_per_token" not in entry or "output_cost_per_token" not in entry:
            continue
        try:
            prices[model] = ModelPricing(
                input_tokens=float(entry["input_cost_per_token"]),
                output_tokens=float(entry["output_cost_per_token"]),
                cache_write_tokens=float(
                    entry.get("cache_creation_input_token_cost") or 0.0
                ),
                cache_read_tokens=float(entry.get("cache_read_input_token_cost") or 0.0),
            )
        except (TypeError, ValueError):
            logger.debug("pricing_entry_skipped", model=model)
    return prices


async def fetch_litellm_pricing(
    client: "httpx.AsyncClient",
    url: "str" = LITELLM_PRICING_URL,
) -> "dict[str, ModelPricing]":
    """
    downloads and parses a LiteLLM price map.
    """
    logger.debug("pricing_fetch", url=url)
    resp = await client.get(url)
    resp.raise_for_status()
    prices = parse_litellm_pricing(resp.json())
    logger.debug("pricing_fetch_done", models=len(prices))
    return prices


async def load_pricing(url: "str" = "", timeout: "float" = 5.0) -> "PricingTable":
    """
    builds the pricing table: the static prices, overlaid with the
    ones fetched from url when one is given. Fetch failures fall
    back to the static prices.
    """
    if not url:
        return PricingTable()

    async with httpx.AsyncClient(timeout=timeout) as client:
        try:
            fetched = await fetch_litellm_pricing(client, url)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("pricing_fetch_failed", url=url, error=str(exc))
            return PricingTable()

    return PricingTable({**DEFAULT_PRICING, **fetched})
