from typing import Mapping

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    write_to_textfile,
)

from ccstatus.models import Usage
from ccstatus.pricing import PricingTable


class MetricsUpdater:
    """
    applies aggregated usage to Prometheus gauges so it can be
    exported through the node exporter textfile collector.
    """

    def __init__(self, registry: "CollectorRegistry" = REGISTRY) -> "None":
        self._registry: "CollectorRegistry" = registry
        self._tokens: "Gauge" = Gauge(
            "ccstatus_tokens",
            "Tokens used in the reporting window",
            ["window", "model", "kind"],
            registry=registry,
        )
        self._cost: "Gauge" = Gauge(
            "ccstatus_cost_usd",
            "Estimated cost in USD for the reporting window",
            ["window", "model"],
            registry=registry,
        )
        self._load_seconds: "Gauge" = Gauge(
            "ccstatus_transcript_load_seconds",
            "Time spent loading and parsing transcripts",
            registry=registry,
        )
        self._load_errors: "Counter" = Counter(
            "ccstatus_transcript_load_errors_total",
            "Total number of failed transcript loads by error kind",
            ["kind"],
            registry=registry,
        )

    def update_usage(
        self,
        window: "str",
        usages: "Mapping[str, Usage]",
        pricing: "PricingTable",
    ) -> "None":
        """
        sets the token and cost gauges of every model in the window.
        """
        for model, usage in usages.items():
            labels = {"window": window, "model": model}
            self._tokens.labels(**labels, kind="input").set(usage.input_tokens)
            self._tokens.labels(**labels, kind="output").set(usage.output_tokens)
            self._tokens.labels(**labels, kind="cache_write").set(
                usage.cache_write_tokens
            )
            self._tokens.labels(**labels, kind="cache_read").set(
                usage.cache_read_tokens
            )
            self._cost.labels(**labels).set(pricing.cost({model: usage}))

    def observe_load_duration(self, duration_seconds: "float") -> "None":
        self._load_seconds.set(duration_seconds)

    def inc_load_error(self, kind: "str") -> "None":
        self._load_errors.labels(kind=kind).inc()

    def write_textfile(self, path: "str") -> "None":
        """
        writes the registry atomically in the text exposition format.
        """
        write_to_textfile(path, self._registry)
