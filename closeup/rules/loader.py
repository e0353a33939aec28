import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from closeup.rules.models import Rules

logger = logging.getLogger(__name__)

RULES_PATH_ENV = "CLOSEUP_RULES_PATH"
DEFAULT_RULES_PATH = "rules.yaml"


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path) as f:
        content = f.read()

    # Rules may be kept inside a markdown document; use the first ```yaml block
    lines = content.splitlines()
    yaml_lines = []
    in_block = False
    found_block = False

    for line in lines:
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and s_line.startswith("```"):
            break

        if in_block:
            yaml_lines.append(line)

    clean_content = "\n".join(yaml_lines) if found_block else content

    try:
        data = yaml.safe_load(clean_content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    # An empty file means "all defaults"
    if data is None:
        data = {}

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e


def resolve_rules_path(explicit: str | None = None) -> Path:
    """Pick the rules file: explicit argument, then $CLOSEUP_RULES_PATH, then ./rules.yaml."""
    return Path(explicit or os.environ.get(RULES_PATH_ENV, DEFAULT_RULES_PATH))


def load_rules_or_default(explicit: str | None = None) -> Rules:
    path = resolve_rules_path(explicit)
    if not path.exists():
        logger.info("No rules file at %s, using built-in defaults", path)
        return Rules()
    return load_rules(path)
