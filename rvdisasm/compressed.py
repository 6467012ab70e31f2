"""The C (compressed, 16-bit) instruction set."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from .formats import (
    CAType,
    CBType,
    CIType,
    CIWType,
    CJType,
    CLType,
    CRType,
    CSSType,
    CSType,
    Instruction,
    register_name,
)

__all__ = ["RVCOp", "RVC"]

Operands = Union[CIWType, CLType, CSType, CIType, CJType, CAType, CBType, CRType, CSSType]

_SP = register_name(2)
_ZERO = register_name(0)
_RA = register_name(1)


class RVCOp(enum.Enum):
    """Compressed operations, valued by their mnemonic."""

    ADDI4SPN = "c.addi4spn"
    FLD = "c.fld"
    LQ = "c.lq"
    LW = "c.lw"
    FLW = "c.flw"
    LD = "c.ld"
    FSD = "c.fsd"
    SQ = "c.sq"
    SW = "c.sw"
    FSW = "c.fsw"
    SD = "c.sd"

    NOP = "c.nop"
    ADDI = "c.addi"
    JAL = "c.jal"
    ADDIW = "c.addiw"
    LI = "c.li"
    ADDI16SP = "c.addi16sp"
    LUI = "c.lui"
    SRLI = "c.srli"
    SRLI64 = "c.srli64"
    SRAI = "c.srai"
    SRAI64 = "c.srai64"
    ANDI = "c.andi"
    SUB = "c.sub"
    XOR = "c.xor"
    OR = "c.or"
    AND = "c.and"
    SUBW = "c.subw"
    ADDW = "c.addw"
    J = "c.j"
    BEQZ = "c.beqz"
    BNEZ = "c.bnez"

    SLLI = "c.slli"
    SLLI64 = "c.slli64"
    FLDSP = "c.fldsp"
    LQSP = "c.lqsp"
    LWSP = "c.lwsp"
    FLWSP = "c.flwsp"
    LDSP = "c.ldsp"
    JR = "c.jr"
    MV = "c.mv"
    EBREAK = "c.ebreak"
    JALR = "c.jalr"
    ADD = "c.add"
    FSDSP = "c.fsdsp"
    SQSP = "c.sqsp"
    SWSP = "c.swsp"
    FSWSP = "c.fswsp"
    SDSP = "c.sdsp"


_C = RVCOp
_LOADS = frozenset({_C.FLD, _C.LQ, _C.LW, _C.FLW, _C.LD})
_STORES = frozenset({_C.FSD, _C.SQ, _C.SW, _C.FSW, _C.SD})
_SELF_IMMEDIATE = frozenset(
    {
        _C.ADDI, _C.ADDIW, _C.SRLI, _C.SRLI64, _C.SRAI, _C.SRAI64,
        _C.ANDI, _C.SLLI, _C.SLLI64,
    }
)
_REG_IMMEDIATE = frozenset({_C.LI, _C.LUI})
_ARITHMETIC = frozenset({_C.SUB, _C.XOR, _C.OR, _C.AND, _C.SUBW, _C.ADDW})
_BRANCHES = frozenset({_C.BEQZ, _C.BNEZ})
_STACK_LOADS = frozenset({_C.FLDSP, _C.LQSP, _C.LWSP, _C.FLWSP, _C.LDSP})
_STACK_STORES = frozenset({_C.FSDSP, _C.SQSP, _C.SWSP, _C.FSWSP, _C.SDSP})
_REGISTER_OPS = frozenset({_C.JR, _C.MV, _C.EBREAK, _C.JALR, _C.ADD})

_OPERANDS: dict[RVCOp, type] = {
    _C.ADDI4SPN: CIWType,
    **{op: CLType for op in _LOADS},
    **{op: CSType for op in _STORES},
    **{
        op: CIType
        for op in _SELF_IMMEDIATE | _REG_IMMEDIATE | _STACK_LOADS | {_C.NOP, _C.ADDI16SP}
    },
    **{op: CJType for op in (_C.JAL, _C.J)},
    **{op: CAType for op in _ARITHMETIC},
    **{op: CBType for op in _BRANCHES},
    **{op: CRType for op in _REGISTER_OPS},
    **{op: CSSType for op in _STACK_STORES},
}


@dataclass(frozen=True)
class RVC(Instruction):
    """A compressed instruction."""

    op: RVCOp
    operands: Operands

    def __post_init__(self) -> None:
        expected = _OPERANDS[self.op]
        if not isinstance(self.operands, expected):
            raise TypeError(
                f"{self.op.value} needs {expected.__name__} operands, "
                f"got {type(self.operands).__name__}"
            )

    def disassembly(self) -> str:
        op, ops, mnemonic = self.op, self.operands, self.op.value
        if op is RVCOp.ADDI4SPN:
            return f"c.addi {register_name(ops.rd)}, {_SP}, {ops.uimm}"
        if op in _LOADS:
            return f"{mnemonic} {register_name(ops.rd)}, {ops.imm}({register_name(ops.rs1)})"
        if op in _STORES:
            return f"{mnemonic} {register_name(ops.rs2)}, {ops.imm}({register_name(ops.rs1)})"
        if op in (RVCOp.NOP, RVCOp.EBREAK):
            return mnemonic
        if op in _SELF_IMMEDIATE:
            reg = register_name(ops.rdrs1)
            return f"{mnemonic} {reg}, {reg}, {ops.imm}"
        if op in _REG_IMMEDIATE:
            return f"{mnemonic} {register_name(ops.rdrs1)}, {ops.imm}"
        if op is RVCOp.JAL:
            return f"{mnemonic} {_ZERO},{ops.target}"
        if op is RVCOp.J:
            return f"{mnemonic} {_ZERO}, {ops.target}"
        if op is RVCOp.ADDI16SP:
            return f"{mnemonic} {_SP}, {_SP}, {ops.imm}"
        if op in _ARITHMETIC or op is RVCOp.ADD:
            reg = register_name(ops.rdrs1)
            return f"{mnemonic} {reg}, {reg}, {register_name(ops.rs2)}"
        if op in _BRANCHES:
            return f"{mnemonic} {register_name(ops.rs1)}, {_ZERO}, {ops.off}"
        if op in _STACK_LOADS:
            return f"{mnemonic} {register_name(ops.rdrs1)}, {ops.imm}({_SP})"
        if op in _STACK_STORES:
            return f"{mnemonic} {register_name(ops.rs2)}, {ops.imm}({_SP})"
        if op is RVCOp.JR:
            return f"{mnemonic} {_ZERO}, 0({register_name(ops.rdrs1)})"
        if op is RVCOp.JALR:
            return f"{mnemonic} {_RA}, 0({register_name(ops.rdrs1)})"
        # c.mv
        return f"{mnemonic} {register_name(ops.rdrs1)}, {_ZERO}, {register_name(ops.rs2)}"