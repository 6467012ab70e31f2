"""The A (atomic), Zicsr and F (single-precision float) extensions."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from .formats import (
    CsrIType,
    CsrRType,
    Instruction,
    IType,
    R4Type,
    RType,
    SType,
    register_name,
)

__all__ = [
    "AtomicOp",
    "AtomicWidth",
    "Atomic",
    "CsrOp",
    "RVZicsr",
    "FloatOp",
    "RVF",
    "fp_register_name",
]


def fp_register_name(index: int) -> str:
    """Name of floating-point register ``index``, or ``"unknown"`` if out of range."""
    if 0 <= index <= 31:
        return f"f{index}"
    return "unknown"


def _require(mnemonic: str, operands: object, expected: type) -> None:
    if not isinstance(operands, expected):
        raise TypeError(
            f"{mnemonic} needs {expected.__name__} operands, "
            f"got {type(operands).__name__}"
        )


class AtomicOp(enum.Enum):
    """Atomic memory operations, valued by their mnemonic stem."""

    LR = "lr"
    SC = "sc"
    AMOSWAP = "amoswap"
    AMOADD = "amoadd"
    AMOXOR = "amoxor"
    AMOAND = "amoand"
    AMOOR = "amoor"
    AMOMIN = "amomin"
    AMOMAX = "amomax"
    AMOMINU = "amominu"
    AMOMAXU = "amomaxu"


class AtomicWidth(enum.Enum):
    """Access width of an atomic operation, valued by its mnemonic suffix."""

    W = "w"
    D = "d"
    Q = "q"


@dataclass(frozen=True)
class Atomic(Instruction):
    """An RV32A, RV64A or RV128A instruction."""

    op: AtomicOp
    width: AtomicWidth
    operands: RType

    def __post_init__(self) -> None:
        _require(self.mnemonic, self.operands, RType)

    @property
    def mnemonic(self) -> str:
        return f"{self.op.value}.{self.width.value}"

    def disassembly(self) -> str:
        r = self.operands
        rd, rs1, rs2 = register_name(r.rd), register_name(r.rs1), register_name(r.rs2)
        if self.op is AtomicOp.LR:
            return f"{self.mnemonic} {rd}, {rs1}"
        if self.op is AtomicOp.SC or self.width is AtomicWidth.W:
            return f"{self.mnemonic} {rs2}, {rs1}"
        return f"{self.mnemonic} {rd} ,{rs2}, {rs1}"


class CsrOp(enum.Enum):
    """Control and status register operations, valued by their mnemonic."""

    CSRRW = "csrrw"
    CSRRS = "csrrs"
    CSRRC = "csrrc"
    CSRRWI = "csrrwi"
    CSRRSI = "csrrsi"
    CSRRCI = "csrrci"

    @property
    def takes_immediate(self) -> bool:
        return self.value.endswith("i")


@dataclass(frozen=True)
class RVZicsr(Instruction):
    """A Zicsr instruction."""

    op: CsrOp
    operands: Union[CsrRType, CsrIType]

    def __post_init__(self) -> None:
        expected = CsrIType if self.op.takes_immediate else CsrRType
        _require(self.op.value, self.operands, expected)

    def disassembly(self) -> str:
        ops = self.operands
        source = ops.uimm if isinstance(ops, CsrIType) else register_name(ops.rs1)
        return f"{self.op.value} {register_name(ops.rd)}, {ops.csr:#x}, {source}"


class FloatOp(enum.Enum):
    """RV32F and RV64F operations, valued by their mnemonic."""

    FLW = "flw"
    FSW = "fsw"
    FMADD_S = "fmadd.s"
    FMSUB_S = "fmsub.s"
    FNMADD_S = "fnmadd.s"
    FNMSUB_S = "fnmsub.s"
    FADD_S = "fadd.s"
    FSUB_S = "fsub.s"
    FMUL_S = "fmul.s"
    FDIV_S = "fdiv.s"
    FSQRT_S = "fsqrt.s"
    FSGNJ_S = "fsgnj.s"
    FSGNJN_S = "fsgnjn.s"
    FSGNJX_S = "fsgnjx.s"
    FMIN_S = "fmin.s"
    FMAX_S = "fmax.s"
    FCVT_W_S = "fcvt.w.s"
    FCVT_WU_S = "fcvt.wu.s"
    FMV_X_W = "fmv.x.w"
    FEQ_S = "feq.s"
    FLT_S = "flt.s"
    FLE_S = "fle.s"
    FCLASS_S = "fclass.s"
    FCVT_S_W = "fcvt.s.w"
    FCVT_S_WU = "fcvt.s.wu"
    FMV_W_X = "fmv.w.x"
    FCVT_L_S = "fcvt.l.s"
    FCVT_LU_S = "fcvt.lu.s"
    FCVT_S_L = "fcvt.s.l"
    FCVT_S_LU = "fcvt.s.lu"


_F = FloatOp
_FUSED = frozenset({_F.FMADD_S, _F.FMSUB_S, _F.FNMADD_S, _F.FNMSUB_S})
_FP_THREE = frozenset(
    {
        _F.FADD_S, _F.FSUB_S, _F.FMUL_S, _F.FDIV_S, _F.FMIN_S, _F.FMAX_S,
        _F.FSGNJ_S, _F.FSGNJN_S, _F.FSGNJX_S,
    }
)
_COMPARE = frozenset({_F.FEQ_S, _F.FLT_S, _F.FLE_S})
_FP_TO_INT = frozenset(
    {_F.FCVT_W_S, _F.FCVT_WU_S, _F.FMV_X_W, _F.FCLASS_S, _F.FCVT_L_S, _F.FCVT_LU_S}
)
_INT_TO_FP = frozenset(
    {_F.FCVT_S_W, _F.FCVT_S_WU, _F.FMV_W_X, _F.FCVT_S_L, _F.FCVT_S_LU}
)


def _float_operand_type(op: FloatOp) -> type:
    if op is FloatOp.FLW:
        return IType
    if op is FloatOp.FSW:
        return SType
    if op in _FUSED:
        return R4Type
    return RType


@dataclass(frozen=True)
class RVF(Instruction):
    """A single-precision floating-point instruction."""

    op: FloatOp
    operands: Union[IType, SType, RType, R4Type]

    def __post_init__(self) -> None:
        _require(self.op.value, self.operands, _float_operand_type(self.op))

    def disassembly(self) -> str:
        op, ops, mnemonic = self.op, self.operands, self.op.value
        if op is FloatOp.FLW:
            return (
                f"{mnemonic} {fp_register_name(ops.rd)}, "
                f"{ops.imm}({register_name(ops.rs1)})"
            )
        if op is FloatOp.FSW:
            return (
                f"{mnemonic} {fp_register_name(ops.rs2)}, "
                f"{ops.imm}({register_name(ops.rs1)})"
            )
        if op in _FUSED:
            names = (ops.rd, ops.rs1, ops.rs2, ops.rs3)
            return f"{mnemonic} " + ", ".join(fp_register_name(n) for n in names)
        if op in _FP_THREE:
            names = (ops.rd, ops.rs1, ops.rs2)
            return f"{mnemonic} " + ", ".join(fp_register_name(n) for n in names)
        if op is FloatOp.FSQRT_S:
            return f"{mnemonic} {fp_register_name(ops.rd)}, {fp_register_name(ops.rs1)}"
        if op in _COMPARE:
            return (
                f"{mnemonic} {register_name(ops.rd)}, "
                f"{fp_register_name(ops.rs1)}, {fp_register_name(ops.rs2)}"
            )
        if op in _FP_TO_INT:
            return f"{mnemonic} {register_name(ops.rd)}, {fp_register_name(ops.rs1)}"
        return f"{mnemonic} {fp_register_name(ops.rd)}, {register_name(ops.rs1)}"