"""Strip TypeScript helper boilerplate emitted more than once in a file."""

from __future__ import annotations

import re
from typing import List, Optional, Pattern, Sequence, Tuple

# (start, end) patterns for helpers emitted by the TypeScript compiler.
TS_BOILERPLATE: Tuple[Tuple[Pattern[str], Pattern[str]], ...] = (
    (re.compile(r"^var __extends"), re.compile(r"^}\)\(\);$")),
    (re.compile(r"^var __assign"), re.compile(r"^};$")),
    (re.compile(r"^var __decorate"), re.compile(r"^};$")),
    (re.compile(r"^var __metadata"), re.compile(r"^};$")),
    (re.compile(r"^var __param"), re.compile(r"^};$")),
    (re.compile(r"^var __awaiter"), re.compile(r"^};$")),
    (re.compile(r"^var __generator"), re.compile(r"^};$")),
    (re.compile(r"^var __createBinding"), re.compile(r"^}\)\);$")),
    (re.compile(r"^var __setModuleDefault"), re.compile(r"^}\);$")),
    (re.compile(r"^var __importStar"), re.compile(r"^};$")),
)

_LINE_BREAK = re.compile(r"\r\n|\n|\r")


def remove_duplicate_ts_boilerplate(source: str, seen: Optional[Sequence[bool]] = None) -> str:
    """Blank out every repeated helper block after its first occurrence.

    Removed lines are replaced by empty lines so line numbers (and therefore
    source maps) stay valid. ``seen`` pre-marks helpers as already emitted.
    """

    already_seen: List[bool] = list(seen or [])
    already_seen.extend([False] * (len(TS_BOILERPLATE) - len(already_seen)))

    result: List[str] = []
    end_pattern: Optional[Pattern[str]] = None
    for line in _LINE_BREAK.split(source):
        if end_pattern is not None:
            result.append("")
            if end_pattern.search(line):
                end_pattern = None
            continue

        for index, (start, end) in enumerate(TS_BOILERPLATE):
            if not start.search(line):
                continue
            if already_seen[index]:
                end_pattern = end
            else:
                already_seen[index] = True

        result.append("" if end_pattern is not None else line)
    return "\n".join(result)


def remove_all_ts_boilerplate(source: str) -> str:
    return remove_duplicate_ts_boilerplate(source, [True] * len(TS_BOILERPLATE))
