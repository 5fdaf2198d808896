"""
okrlint configuration file.

Loads ~/.okra/conf.yaml (or the file given with --conf). Every key is
optional:

    projects:                 # KRs to pre-fill in a new report
      - "Improve latency (PLAT123)"
      - title: "Reduce build times (PLAT124)"
        items:
          - "Cached dependencies in CI"
    locations:                # where activity is collected from
      - "my-org"
    footer: "Sent from okrlint"

If the file does not exist the defaults are used.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from okrlint.lib import validate

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_TITLE = "TODO ADD KR (ID)"


class ConfError(Exception):
    """Configuration file could not be read or is invalid."""

    def __init__(self, message: str):
        super().__init__(f"Okra Conf Error: {message}")


@dataclass
class ConfProject:
    """A KR to pre-fill in generated reports."""
    title: str
    items: list[str] = field(default_factory=list)


def _default_projects() -> list[ConfProject]:
    return [ConfProject(title=DEFAULT_PROJECT_TITLE)]


@dataclass
class Conf:
    """Configuration from conf.yaml."""
    projects: list[ConfProject] = field(default_factory=_default_projects)
    locations: list[str] = field(default_factory=list)
    footer: str | None = None


def default_conf_path() -> Path:
    home = os.environ.get("HOME")
    if not home:
        raise ConfError("$HOME is not set!")
    return Path(home) / ".okra" / "conf.yaml"


def conf_from_dict(data: dict | None) -> Conf:
    """Build a Conf from parsed YAML, applying defaults for missing keys.

    Raises:
        ConfError: if the data doesn't match the conf schema
    """
    if data is None:
        return Conf()
    if not isinstance(data, dict):
        raise ConfError("Expected a mapping at the top level")

    # An empty key ("projects:") means the same as a missing one
    data = {key: value for key, value in data.items() if value is not None}

    try:
        validate.validate(data, "conf")
    except validate.ValidationError as e:
        raise ConfError(str(e)) from None

    conf = Conf()
    if "projects" in data:
        conf.projects = [
            ConfProject(title=p) if isinstance(p, str)
            else ConfProject(title=p["title"], items=list(p.get("items", [])))
            for p in data["projects"]
        ]
    conf.locations = list(data.get("locations", []))
    conf.footer = data.get("footer")
    return conf


def load_conf(path: Path | None = None) -> Conf:
    """Load configuration, returning defaults if the file doesn't exist.

    Raises:
        ConfError: if the file can't be read, isn't YAML or is invalid
    """
    if path is None:
        path = default_conf_path()

    if not path.exists():
        logger.debug(f"No configuration at {path}, using defaults")
        return Conf()

    try:
        data = yaml.safe_load(path.read_text())
    except OSError as e:
        raise ConfError(f"Cannot read {path}: {e}") from None
    except yaml.YAMLError as e:
        raise ConfError(f"Invalid YAML in {path}: {e}") from None

    return conf_from_dict(data)
