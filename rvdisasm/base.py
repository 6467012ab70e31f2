"""The RV32I/RV32M and RV64I base instruction sets."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from .formats import (
    BType,
    Instruction,
    IType,
    JType,
    RType,
    SType,
    UType,
    register_name,
)

__all__ = ["RV32IOp", "RV32I", "RV64IOp", "RV64I"]

Operands = Union[UType, JType, IType, SType, BType, RType, None]


class RV32IOp(enum.Enum):
    """RV32I and RV32M operations, valued by their mnemonic."""

    LUI = "lui"
    AUIPC = "auipc"
    JAL = "jal"
    JALR = "jalr"

    BEQ = "beq"
    BNE = "bne"
    BLT = "blt"
    BGE = "bge"
    BLTU = "bltu"
    BGEU = "bgeu"

    LB = "lb"
    LH = "lh"
    LW = "lw"
    LBU = "lbu"
    LHU = "lhu"
    SB = "sb"
    SH = "sh"
    SW = "sw"

    ADDI = "addi"
    SLTI = "slti"
    SLTIU = "sltiu"
    XORI = "xori"
    ORI = "ori"
    ANDI = "andi"
    SLLI = "slli"
    SRLI = "srli"
    SRAI = "srai"

    ADD = "add"
    SUB = "sub"
    SLL = "sll"
    SLT = "slt"
    SLTU = "sltu"
    XOR = "xor"
    SRL = "srl"
    SRA = "sra"
    OR = "or"
    AND = "and"

    MUL = "mul"
    MULH = "mulh"
    MULHSU = "mulhsu"
    MULHU = "mulhu"
    DIV = "div"
    DIVU = "divu"
    REM = "rem"
    REMU = "remu"

    FENCE = "fence"
    FENCE_I = "fence.i"
    ECALL = "ecall"
    EBREAK = "ebreak"


class RV64IOp(enum.Enum):
    """RV64I operations, valued by their mnemonic."""

    LWU = "lwu"
    LD = "ld"
    SD = "sd"

    SLL = "sll"
    SRL = "srl"
    SRA = "sra"

    SLLI = "slli"
    SRLI = "srli"
    SRAI = "srai"

    ADDIW = "addiw"
    SLLIW = "slliw"
    SRLIW = "srliw"
    SRAIW = "sraiw"

    ADDW = "addw"
    SUBW = "subw"
    SLLW = "sllw"
    SRLW = "srlw"
    SRAW = "sraw"


# Text layouts shared by both sets.
def _upper(mnemonic: str, ops: UType | JType) -> str:
    return f"{mnemonic} {register_name(ops.rd)}, {ops.imm}"


def _load(mnemonic: str, ops: IType) -> str:
    return f"{mnemonic} {register_name(ops.rd)}, {ops.imm}({register_name(ops.rs1)})"


def _store(mnemonic: str, ops: SType) -> str:
    return f"{mnemonic} {register_name(ops.rs2)}, {ops.imm}({register_name(ops.rs1)})"


def _branch(mnemonic: str, ops: BType) -> str:
    return f"{mnemonic} {register_name(ops.rs1)}, {register_name(ops.rs2)}, {ops.imm}"


def _register(mnemonic: str, ops: RType) -> str:
    return (
        f"{mnemonic} {register_name(ops.rd)}, "
        f"{register_name(ops.rs1)}, {register_name(ops.rs2)}"
    )


def _immediate(mnemonic: str, ops: IType, value: object) -> str:
    return f"{mnemonic} {register_name(ops.rd)}, {register_name(ops.rs1)}, {value}"


def _check_operands(op: enum.Enum, operands: object, expected: type | None) -> None:
    if expected is None:
        if operands is not None:
            raise TypeError(f"{op.value} takes no operands")
    elif not isinstance(operands, expected):
        raise TypeError(
            f"{op.value} needs {expected.__name__} operands, "
            f"got {type(operands).__name__}"
        )


_R32 = RV32IOp
_RV32_UPPER = frozenset({_R32.LUI, _R32.AUIPC, _R32.JAL})
_RV32_LOAD = frozenset({_R32.JALR, _R32.LB, _R32.LH, _R32.LW, _R32.LBU, _R32.LHU})
_RV32_STORE = frozenset({_R32.SB, _R32.SH, _R32.SW})
_RV32_BRANCH = frozenset(
    {_R32.BEQ, _R32.BNE, _R32.BLT, _R32.BGE, _R32.BLTU, _R32.BGEU}
)
_RV32_IMMEDIATE = frozenset(
    {_R32.ADDI, _R32.SLTI, _R32.SLTIU, _R32.XORI, _R32.ORI, _R32.ANDI}
)
_RV32_SHIFT = frozenset({_R32.SLLI, _R32.SRLI, _R32.SRAI})
_RV32_SYSTEM = frozenset({_R32.FENCE, _R32.FENCE_I, _R32.ECALL, _R32.EBREAK})
_RV32_REGISTER = frozenset(RV32IOp) - (
    _RV32_UPPER | _RV32_LOAD | _RV32_STORE | _RV32_BRANCH
    | _RV32_IMMEDIATE | _RV32_SHIFT | _RV32_SYSTEM
)

_RV32_OPERANDS: dict[RV32IOp, type | None] = {
    **{op: UType for op in (_R32.LUI, _R32.AUIPC)},
    _R32.JAL: JType,
    **{op: IType for op in _RV32_LOAD | _RV32_IMMEDIATE | _RV32_SHIFT},
    **{op: SType for op in _RV32_STORE},
    **{op: BType for op in _RV32_BRANCH},
    **{op: RType for op in _RV32_REGISTER},
    **{op: None for op in _RV32_SYSTEM},
}


@dataclass(frozen=True)
class RV32I(Instruction):
    """An RV32I or RV32M instruction."""

    op: RV32IOp
    operands: Operands = None

    def __post_init__(self) -> None:
        _check_operands(self.op, self.operands, _RV32_OPERANDS[self.op])

    def disassembly(self) -> str:
        op, ops, mnemonic = self.op, self.operands, self.op.value
        if op in _RV32_SYSTEM:
            return mnemonic
        if op in _RV32_UPPER:
            return _upper(mnemonic, ops)
        if op in _RV32_LOAD:
            return _load(mnemonic, ops)
        if op in _RV32_STORE:
            return _store(mnemonic, ops)
        if op in _RV32_BRANCH:
            return _branch(mnemonic, ops)
        if op in _RV32_IMMEDIATE:
            return _immediate(mnemonic, ops, ops.imm)
        if op in _RV32_SHIFT:
            return _immediate(mnemonic, ops, ops.imm.low_u32() & 0x1F)
        return _register(mnemonic, ops)


_R64 = RV64IOp
_RV64_LOAD = frozenset({_R64.LWU, _R64.LD})
_RV64_STORE = frozenset({_R64.SD})
_RV64_REGISTER = frozenset(
    {_R64.SLL, _R64.SRL, _R64.SRA, _R64.ADDW, _R64.SUBW, _R64.SLLW, _R64.SRLW, _R64.SRAW}
)
_RV64_IMMEDIATE = frozenset(RV64IOp) - (_RV64_LOAD | _RV64_STORE | _RV64_REGISTER)

_RV64_OPERANDS: dict[RV64IOp, type] = {
    **{op: IType for op in _RV64_LOAD | _RV64_IMMEDIATE},
    **{op: SType for op in _RV64_STORE},
    **{op: RType for op in _RV64_REGISTER},
}


@dataclass(frozen=True)
class RV64I(Instruction):
    """An instruction added or widened by RV64I."""

    op: RV64IOp
    operands: Operands = None

    def __post_init__(self) -> None:
        _check_operands(self.op, self.operands, _RV64_OPERANDS[self.op])

    def disassembly(self) -> str:
        op, ops, mnemonic = self.op, self.operands, self.op.value
        if op in _RV64_LOAD:
            return _load(mnemonic, ops)
        if op in _RV64_STORE:
            return _store(mnemonic, ops)
        if op in _RV64_REGISTER:
            return _register(mnemonic, ops)
        return _immediate(mnemonic, ops, ops.imm)