import argparse

from ccstatus.config import Config


def parse_args(argv: "list[str] | None" = None) -> "Config":
    parser = argparse.ArgumentParser(
        prog="ccstatus",
        description=(
            "Status line usage reporter: reads the hook payload on stdin "
            "and prints token usage and cost"
        ),
    )
    parser.add_argument(
        "--projects.dir",
        dest="projects_dir",
        default=None,
        help="Transcripts directory (default: ~/.claude/projects)",
    )
    parser.add_argument(
        "--pricing.url",
        dest="pricing_url",
        default=None,
        help="LiteLLM price map URL to overlay on built-in prices",
    )
    parser.add_argument(
        "--metrics.textfile",
        dest="metrics_textfile",
        default=None,
        help="Write Prometheus metrics to this textfile",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: warning)",
    )

    args = parser.parse_args(argv)
    config = Config.from_env()
    # flags override the environment only when given
    if args.projects_dir is not None:
        config.projects_dir = args.projects_dir
    if args.pricing_url is not None:
        config.pricing_url = args.pricing_url
    if args.metrics_textfile is not None:
        config.metrics_textfile = args.metrics_textfile
    config.log_level = args.log_level
    return config
