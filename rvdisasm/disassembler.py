"""Front end: parse hex text, pick the instruction length and decode."""

from __future__ import annotations

import argparse
import re
import sys
from typing import Sequence

from .decode16 import decode_compressed
from .decode32 import decode_standard
from .formats import DecodeError, Instruction, Xlen

__all__ = ["instruction_length", "parse_hex", "decode", "disassemble", "main"]

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


def instruction_length(word: int) -> int:
    """Length in bytes of the instruction whose low bits are ``word``.

    A word whose two lowest bits are both set is a 4-byte standard
    instruction; anything else is a 2-byte compressed one.
    """
    if word < 0:
        raise ValueError(f"instruction word must be non-negative, got {word}")
    return 4 if word & 0b11 == 0b11 else 2


def parse_hex(text: str) -> int:
    """Parse a hexadecimal instruction word, with or without a ``0x`` prefix."""
    digits = text.strip()
    if digits[:2].lower() == "0x":
        digits = digits[2:]
    if not _HEX_DIGITS.fullmatch(digits):
        raise ValueError(f"not a hexadecimal number: {text!r}")
    return int(digits, 16)


def decode(word: int, xlen: Xlen | int = Xlen.X32) -> Instruction:
    """Decode one instruction word, 16 or 32 bits long, for register width ``xlen``.

    Raises DecodeError if the word is not a recognised instruction.
    """
    width = Xlen(xlen)
    if instruction_length(word) == 2:
        if word > 0xFFFF:
            raise DecodeError(
                f"{word:#x} is a 16-bit instruction but has more than 16 bits"
            )
        return decode_compressed(word, width)
    return decode_standard(word, width)


def disassemble(text: str, xlen: Xlen | int = Xlen.X32) -> str:
    """Disassemble one hexadecimal instruction word into assembly text.

    Raises ValueError for text that is not hexadecimal and DecodeError for
    a word that is not a recognised instruction.
    """
    return decode(parse_hex(text), xlen).disassembly()


def main(argv: Sequence[str] | None = None) -> int:
    """Disassemble the hexadecimal words given on the command line."""
    parser = argparse.ArgumentParser(
        prog="rvdisasm", description="Disassemble RISC-V instruction words."
    )
    parser.add_argument(
        "--xlen",
        type=int,
        choices=[int(x) for x in Xlen],
        default=int(Xlen.X32),
        help="base integer register width (default: 32)",
    )
    parser.add_argument("words", nargs="+", help="instruction words in hexadecimal")
    args = parser.parse_args(argv)

    status = 0
    for text in args.words:
        try:
            print(disassemble(text, args.xlen))
        except ValueError as error:
            print(f"Error: {error}", file=sys.stderr)
            status = 1
    return status