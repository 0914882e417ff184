from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_PARAM_PREFIX_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class CompilerConfig:
    quote_char: str = '"'
    param_prefix: str = "p"
    inline_literals: bool = False
    backslash_escapes: bool = False
    max_identifier_length: int = 64
    chunk_size: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if len(self.quote_char) != 1 or self.quote_char.isalnum():
            raise ValueError(
                f"quote_char must be a single non-alphanumeric character, got {self.quote_char!r}"
            )
        if not _PARAM_PREFIX_RE.fullmatch(self.param_prefix):
            raise ValueError(
                f"param_prefix {self.param_prefix!r} must be a valid bind parameter name"
            )
        if self.max_identifier_length <= 0:
            raise ValueError("max_identifier_length must be > 0")
        if self.chunk_size is not None and self.chunk_size <= 0:
            raise ValueError(
                "chunk_size must be > 0; use None to compile the whole batch as one statement"
            )

    @classmethod
    def for_dialect(cls, dialect_name: str, **overrides) -> "CompilerConfig":
        """
        Preset for a SQLAlchemy dialect name (``engine.dialect.name``).

        MySQL quotes identifiers with backticks and treats backslash as an
        escape inside string literals; PostgreSQL truncates identifiers at 63
        characters. Everything else gets ANSI double quotes.
        """
        name = dialect_name.lower()
        if name in ("mysql", "mariadb"):
            preset = {"quote_char": "`", "backslash_escapes": True, "max_identifier_length": 64}
        elif name == "postgresql":
            preset = {"quote_char": '"', "max_identifier_length": 63}
        else:
            preset = {"quote_char": '"'}
        preset.update(overrides)
        return cls(**preset)
