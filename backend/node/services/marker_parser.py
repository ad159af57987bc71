"""
Marker File Parser — patient-side ingestion of gene symbol lists.

Accepts the loose formats patients actually upload: one symbol per line,
comma/tab/space separated rows, and '#' comment lines. Parsing happens on
the patient node only; the raw list never leaves it.

Rules:
    - Tokens must match [A-Za-z0-9\\-_.]+ ; anything else is reported invalid.
    - Valid tokens are upper-cased and de-duplicated in first-seen order.
    - Parsing stops once max_markers unique symbols are collected and a
      further new symbol appears; exceeded_limit is then set.
"""

import logging
import re
from pathlib import Path
from typing import List, Set, Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_MAX_MARKERS: int = 700
_TOKEN_RE = re.compile(r"^[A-Za-z0-9\-_.]+$")
_SEPARATORS_RE = re.compile(r"[,\t ]+")


class InvalidToken(BaseModel):
    line_number: int = Field(..., ge=1)
    value: str
    reason: str


class MarkerParseResult(BaseModel):
    valid: List[str] = Field(default_factory=list)
    invalid: List[InvalidToken] = Field(default_factory=list)
    exceeded_limit: bool = False

    @property
    def count(self) -> int:
        return len(self.valid)


def parse_marker_text(text: str, max_markers: int = DEFAULT_MAX_MARKERS) -> MarkerParseResult:
    """Parse marker symbols out of free-form text."""
    if max_markers < 1:
        raise ValueError("max_markers must be at least 1")

    valid: List[str] = []
    seen: Set[str] = set()
    invalid: List[InvalidToken] = []
    exceeded = False

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        for token in _SEPARATORS_RE.split(line):
            if not token:
                continue
            if not _TOKEN_RE.match(token):
                invalid.append(InvalidToken(
                    line_number=line_number,
                    value=token,
                    reason="Invalid characters in gene symbol",
                ))
                continue

            symbol = token.upper()
            if symbol in seen:
                continue
            if len(valid) >= max_markers:
                exceeded = True
                invalid.append(InvalidToken(
                    line_number=line_number,
                    value=token,
                    reason=f"Gene limit exceeded (max {max_markers})",
                ))
                break
            seen.add(symbol)
            valid.append(symbol)

        if exceeded:
            break

    logger.info(
        f"[NODE] Parsed {len(valid)} marker(s), {len(invalid)} invalid token(s)"
        f"{'; limit reached' if exceeded else ''}"
    )
    return MarkerParseResult(valid=valid, invalid=invalid, exceeded_limit=exceeded)


def parse_marker_file(
    path: Union[str, Path], max_markers: int = DEFAULT_MAX_MARKERS
) -> MarkerParseResult:
    """Read a UTF-8 marker file and parse it."""
    text = Path(path).read_text(encoding="utf-8")
    return parse_marker_text(text, max_markers=max_markers)
