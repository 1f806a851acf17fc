"""Builds the instruction text sent to the inference service.

The field list in the bundled preamble is the contract ``parse_analysis_result``
depends on; change both together.
"""

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

from docflow.exceptions import ConfigurationError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"
DEFAULT_PREAMBLE_PATH = _DEFAULT_PROMPT_DIR / "invoice_extraction.txt"


@lru_cache(maxsize=8)
def load_preamble(path: Path = DEFAULT_PREAMBLE_PATH) -> tuple[str, ...]:
    """Load the fixed instruction lines that open every analysis prompt.

    Raises:
        ConfigurationError: if the template file cannot be read.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to load prompt template: {exc}") from exc
    return tuple(line.rstrip() for line in text.strip().splitlines())


def build_analysis_prompt(
    document: Mapping[str, object],
    preamble_path: Path = DEFAULT_PREAMBLE_PATH,
) -> str:
    """Build the prompt for ``document`` (``title``, ``description``, ``extractedText``).

    Empty title/description lines are left out entirely.
    """
    title = document.get("title")
    description = document.get("description")
    extracted_text = document.get("extractedText") or ""
    lines = [
        *load_preamble(preamble_path),
        f"Title: {title}" if title else "",
        f"Description: {description}" if description else "",
        f"ExtractedText:\n{extracted_text}",
    ]
    return "\n".join(line for line in lines if line)
