"""Instruction operand layouts, immediates and register names."""

from __future__ import annotations

import enum
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

__all__ = [
    "DecodeError",
    "Xlen",
    "Imm",
    "Uimm",
    "Instruction",
    "UType",
    "JType",
    "IType",
    "SType",
    "BType",
    "RType",
    "CRType",
    "CIType",
    "CSSType",
    "CIWType",
    "CLType",
    "CSType",
    "CAType",
    "CBType",
    "CJType",
    "CsrRType",
    "CsrIType",
    "R4Type",
    "register_name",
    "from_register",
]


class DecodeError(ValueError):
    """Raised when a bit pattern is not a recognised instruction."""


class Xlen(enum.IntEnum):
    """Base integer register width."""

    X32 = 32
    X64 = 64
    X128 = 128


def _check_field(value: int, width: int) -> None:
    if width <= 0:
        raise ValueError(f"immediate width must be positive, got {width}")
    if value < 0:
        raise ValueError(f"immediate bits must be non-negative, got {value}")


@dataclass(frozen=True)
class Imm:
    """A sign-extended immediate held as its raw bits and field width."""

    value: int
    width: int

    def __post_init__(self) -> None:
        _check_field(self.value, self.width)

    def signed(self) -> int:
        """The immediate sign-extended from its top bit."""
        bits = self.value & ((1 << self.width) - 1)
        if bits >> (self.width - 1) & 1:
            return bits - (1 << self.width)
        return bits

    def low_u32(self) -> int:
        """The low 32 bits of the sign-extended value, as an unsigned number."""
        return self.signed() & 0xFFFF_FFFF

    def __str__(self) -> str:
        return str(self.signed())


@dataclass(frozen=True)
class Uimm:
    """A zero-extended immediate held as its raw bits and field width."""

    value: int
    width: int

    def __post_init__(self) -> None:
        _check_field(self.value, self.width)

    def __int__(self) -> int:
        return self.value & ((1 << self.width) - 1)

    def __str__(self) -> str:
        return str(int(self))


class Instruction(ABC):
    """A decoded instruction that can render itself as assembly text."""

    @abstractmethod
    def disassembly(self) -> str:
        """The instruction in assembly syntax."""

    def __str__(self) -> str:
        return self.disassembly()


@dataclass(frozen=True)
class UType:
    rd: int
    imm: Imm


@dataclass(frozen=True)
class JType:
    rd: int
    imm: Imm


@dataclass(frozen=True)
class IType:
    rd: int
    rs1: int
    funct3: int
    imm: Imm


@dataclass(frozen=True)
class SType:
    rs1: int
    rs2: int
    funct3: int
    imm: Imm


@dataclass(frozen=True)
class BType:
    rs1: int
    rs2: int
    funct3: int
    imm: Imm


@dataclass(frozen=True)
class RType:
    rd: int
    rs1: int
    rs2: int
    funct3: int
    funct7: int


@dataclass(frozen=True)
class CRType:
    rdrs1: int
    rs2: int
    funct4: int


@dataclass(frozen=True)
class CIType:
    rdrs1: int
    funct3: int
    imm: Imm


@dataclass(frozen=True)
class CSSType:
    rs2: int
    funct3: int
    imm: Imm


@dataclass(frozen=True)
class CIWType:
    rd: int
    funct3: int
    uimm: Uimm


@dataclass(frozen=True)
class CLType:
    rd: int
    rs1: int
    funct3: int
    imm: Imm


@dataclass(frozen=True)
class CSType:
    rs1: int
    rs2: int
    funct3: int
    imm: Imm


@dataclass(frozen=True)
class CAType:
    rdrs1: int
    rs2: int
    funct2: int
    funct6: int


@dataclass(frozen=True)
class CBType:
    rs1: int
    funct3: int
    off: Imm


@dataclass(frozen=True)
class CJType:
    funct3: int
    target: Imm


@dataclass(frozen=True)
class CsrRType:
    rd: int
    rs1: int
    funct3: int
    csr: int


@dataclass(frozen=True)
class CsrIType:
    rd: int
    uimm: Uimm
    funct3: int
    csr: int


@dataclass(frozen=True)
class R4Type:
    rd: int
    rs1: int
    rs2: int
    rs3: int
    funct3: int
    funct2: int


_ABI_NAMES = (
    "zero", "ra", "sp", "gp", "tp", "t0", "t1", "t2",
    "s0", "s1", "a0", "a1", "a2", "a3", "a4", "a5",
    "a6", "a7", "s2", "s3", "s4", "s5", "s6", "s7",
    "s8", "s9", "s10", "s11", "t3", "t4", "t5", "t6",
)

_ABI_LOOKUP = {name: index for index, name in enumerate(_ABI_NAMES)}
_ABI_LOOKUP["fp"] = 8

_NUMERIC_REGISTER = re.compile(r"x\+?([0-9]+)")


def register_name(index: int) -> str:
    """ABI name of integer register ``index``, or ``"unknown"`` if out of range."""
    if 0 <= index < len(_ABI_NAMES):
        return _ABI_NAMES[index]
    return "unknown"


def from_register(name: str) -> int | None:
    """Register number for an ``xN`` or ABI name, or None if not a register."""
    text = name.strip().lower()
    match = _NUMERIC_REGISTER.fullmatch(text)
    if match:
        number = int(match.group(1))
        if number <= 31:
            return number
    return _ABI_LOOKUP.get(text)