"""
Intel 8080 Toolchain - Configuration
====================================

Settings for assembly and disassembly runs. Configuration can come from:
- Default values (defined here)
- Environment variables (``from_env``)
- Command-line flags, which the CLIs apply on top of the above

Environment variables that fail to parse are ignored and the default is kept.
"""

from dataclasses import dataclass
from typing import Optional
import os


_TRUE_VALUES = ("1", "true", "yes", "on")


def parse_int(text: str) -> int:
    """
    Parse an integer given as decimal, 0x-prefixed hex, or H-suffixed hex.

    Raises:
        ValueError: If the text is not a number in any of those forms
    """
    text = text.strip()
    if text.lower().startswith("0x"):
        return int(text[2:], 16)
    if text[-1:] in ("h", "H"):
        return int(text[:-1], 16)
    return int(text, 10)


@dataclass
class AssemblerConfig:
    """
    Configuration for an assembly run.

    Attributes:
        fill_byte: Value of every byte in the image never explicitly written
                   (default: 0x00, the NOP opcode)
        image_size: Minimum image size in bytes; the image is padded with
                    fill_byte up to this size but never truncated (default: None)
        case_sensitive_labels: Keep label case instead of folding to upper
                               case (default: False)
    """

    fill_byte: int = 0x00
    image_size: Optional[int] = None
    case_sensitive_labels: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.fill_byte <= 0xFF:
            raise ValueError(f"fill byte must be 0-255, got {self.fill_byte}")
        if self.image_size is not None and not 0 <= self.image_size <= 0x10000:
            raise ValueError(f"image size must be 0-65536, got {self.image_size}")

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create AssemblerConfig from environment variables.

        Environment variables (all optional):
            I8080_FILL_BYTE: Fill byte (decimal, 0x.. or ..H)
            I8080_IMAGE_SIZE: Minimum image size in bytes
            I8080_CASE_SENSITIVE_LABELS: 1/true/yes to keep label case
        """
        config = cls()

        if fill := os.environ.get("I8080_FILL_BYTE"):
            try:
                value = parse_int(fill)
            except ValueError:
                value = None
            if value is not None and 0 <= value <= 0xFF:
                config.fill_byte = value

        if size := os.environ.get("I8080_IMAGE_SIZE"):
            try:
                value = parse_int(size)
            except ValueError:
                value = None
            if value is not None and 0 <= value <= 0x10000:
                config.image_size = value

        if case := os.environ.get("I8080_CASE_SENSITIVE_LABELS"):
            config.case_sensitive_labels = case.strip().lower() in _TRUE_VALUES

        return config


@dataclass
class DisassemblerConfig:
    """
    Configuration for a disassembly run.

    Attributes:
        start_address: Address of the first byte of the input (default: 0)
        show_bytes: Append an address/bytes comment to each line (default: True)
        strict: Raise on the first undecodable byte instead of emitting
                a DB record for it (default: False)
    """

    start_address: int = 0
    show_bytes: bool = True
    strict: bool = False

    @classmethod
    def from_env(cls) -> "DisassemblerConfig":
        """
        Create DisassemblerConfig from environment variables.

        Environment variables (all optional):
            I8080_DIS_START: Start address (decimal, 0x.. or ..H)
            I8080_DIS_STRICT: 1/true/yes to stop at the first decode error
        """
        config = cls()

        if start := os.environ.get("I8080_DIS_START"):
            try:
                value = parse_int(start)
            except ValueError:
                value = None
            if value is not None and 0 <= value <= 0xFFFF:
                config.start_address = value

        if strict := os.environ.get("I8080_DIS_STRICT"):
            config.strict = strict.strip().lower() in _TRUE_VALUES

        return config
