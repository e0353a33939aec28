from pathlib import Path

import pytest

from closeup.components.editor import Editor
from closeup.rules.loader import load_rules
from closeup.rules.models import Rules


@pytest.fixture
def rules() -> Rules:
    """Load the REAL rules from the project root."""
    rules_path = Path(__file__).resolve().parent.parent / "rules.yaml"
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)


@pytest.fixture
def editor(rules: Rules) -> Editor:
    """Editor over an empty document."""
    return Editor(rules.editor)
