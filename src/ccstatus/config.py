import os
from dataclasses import dataclass


def _projects_dir_from_env() -> "str":
    """
    an explicit CCSTATUS_PROJECTS_DIR wins, then the projects
    folder of CLAUDE_CONFIG_DIR. Empty means the default under
    the user's home.
    """
    projects_dir = os.environ.get("CCSTATUS_PROJECTS_DIR", "")
    if projects_dir:
        return projects_dir

    config_dir = os.environ.get("CLAUDE_CONFIG_DIR", "")
    if config_dir:
        return os.path.join(config_dir, "projects")

    return ""


@dataclass
class Config:
    log_level: "str" = "warning"
    # root of the transcript tree, empty for ~/.claude/projects
    projects_dir: "str" = ""
    # LiteLLM price map to overlay on the built-in prices
    pricing_url: "str" = ""
    # Prometheus textfile to write after rendering, empty disables it
    metrics_textfile: "str" = ""

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            projects_dir=_projects_dir_from_env(),
            pricing_url=os.environ.get("CCSTATUS_PRICING_URL", ""),
            metrics_textfile=os.environ.get("CCSTATUS_METRICS_TEXTFILE", ""),
        )

    @property
    def metrics_enabled(self) -> "bool":
        return bool(self.metrics_textfile)
