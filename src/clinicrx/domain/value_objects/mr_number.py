"""
Medical record number value object.
Format: MR-YYYYMMDD-NNNN
"""

import random
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

MR_NUMBER_PATTERN = re.compile(r"^MR-\d{8}-\d{4}$")


@dataclass(frozen=True)
class MRNumber:
    """Immutable medical record number."""

    value: str

    def __post_init__(self) -> None:
        """Validate MR number format."""
        if not self.value:
            raise ValueError("MR number cannot be empty")

        if not isinstance(self.value, str):
            raise ValueError("MR number must be a string")

        if not MR_NUMBER_PATTERN.match(self.value):
            raise ValueError("MR number must follow format: MR-YYYYMMDD-NNNN")

    def __str__(self) -> str:
        return self.value

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, MRNumber):
            return False
        return self.value == other.value

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def generate(cls, date: Optional[datetime] = None) -> "MRNumber":
        """Generate a new MR number for a registration on ``date``."""
        if date is None:
            date = datetime.now()

        date_str = date.strftime("%Y%m%d")
        # Collisions are checked by the registration use case
        sequence = str(random.randint(1, 9999)).zfill(4)

        return cls(f"MR-{date_str}-{sequence}")
