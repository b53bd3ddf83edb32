"""Processor and pipeline version numbers."""

from dataclasses import dataclass

from trifonius.errors import ValidationError


@dataclass(frozen=True, order=True)
class Version:
    """Semantic version; ``"1"`` and ``"1.2"`` are accepted as ``1.0.0`` and ``1.2.0``."""

    major: int
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, representation) -> "Version":
        parts = str(representation).strip().split(".")
        if not 1 <= len(parts) <= 3:
            raise ValidationError(f"illegal version ({representation})")
        numbers = []
        for name, part in zip(("major", "minor", "patch"), parts):
            if not part.isdigit():
                raise ValidationError(f"illegal version ({representation}), {name} is not a number")
            numbers.append(int(part))
        return cls(*numbers)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"
