"""Disassembler for RISC-V base, M, A, F, Zicsr and compressed instructions."""

__version__ = "0.1.0"
__all__ = [
    "base",
    "compressed",
    "decode16",
    "decode32",
    "disassembler",
    "extensions",
    "formats",
]