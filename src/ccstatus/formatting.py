from typing import Mapping

from ccstatus.models import Usage
from ccstatus.pricing import PricingTable

_GREEN = "\033[32m"
_BOLD = "\033[1m"
_RESET = "\033[0m"

PART_SEPARATOR = " / "
UNAVAILABLE = "unavailable"


def green(text: "str") -> "str":
    return f"{_GREEN}{text}{_RESET}"


def bold(text: "str") -> "str":
    return f"{_BOLD}{text}{_RESET}"


def format_tokens(tokens: "int") -> "str":
    """
    renders a token count with a K/M/B magnitude suffix,
    e.g. 999t, 1.5Kt, 2.0Mt.
    """
    if tokens < 1_000:
        return f"{tokens}t"
    if tokens < 1_000_000:
        return f"{tokens / 1_000:.1f}Kt"
    if tokens < 1_000_000_000:
        return f"{tokens / 1_000_000:.1f}Mt"
    return f"{tokens / 1_000_000_000:.1f}Bt"


def format_usage(
    title: "str",
    usages: "Mapping[str, Usage]",
    pricing: "PricingTable",
) -> "str":
    """
    renders combined tokens and estimated cost of all models,
    e.g. "day 12.3Kt $0.4".
    """
    tokens = sum(u.total() for u in usages.values())
    cost = pricing.cost(usages)
    return f"{title} {format_tokens(tokens)}" + green(f" ${cost:.1f}")


def format_unavailable(title: "str") -> "str":
    return f"{title} {UNAVAILABLE}"
