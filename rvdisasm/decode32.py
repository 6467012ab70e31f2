"""Decoding of 32-bit standard-length instructions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .base import RV32I, RV32IOp, RV64I, RV64IOp
from .extensions import Atomic, AtomicOp, AtomicWidth, CsrOp, FloatOp, RVF, RVZicsr
from .formats import (
    BType,
    CsrIType,
    CsrRType,
    DecodeError,
    Imm,
    Instruction,
    IType,
    JType,
    R4Type,
    RType,
    SType,
    Uimm,
    UType,
    Xlen,
)

__all__ = ["decode_standard"]

_OPCODE_LOAD = 0b000_0011
_OPCODE_LOAD_FP = 0b000_0111
_OPCODE_MISC_MEM = 0b000_1111
_OPCODE_OP_IMM = 0b001_0011
_OPCODE_AUIPC = 0b001_0111
_OPCODE_OP_IMM32 = 0b001_1011
_OPCODE_STORE = 0b010_0011
_OPCODE_STORE_FP = 0b010_0111
_OPCODE_A = 0b010_1111
_OPCODE_OP = 0b011_0011
_OPCODE_LUI = 0b011_0111
_OPCODE_OP_32 = 0b011_1011
_OPCODE_FMADD = 0b100_0011
_OPCODE_FMSUB = 0b100_0111
_OPCODE_FNMSUB = 0b100_1011
_OPCODE_FNMADD = 0b100_1111
_OPCODE_FP = 0b101_0011
_OPCODE_BRANCH = 0b110_0011
_OPCODE_JALR = 0b110_0111
_OPCODE_JAL = 0b110_1111
_OPCODE_SYSTEM = 0b111_0011

_FUNCT7_ADD_SRL = 0b000_0000
_FUNCT7_SUB_SRA = 0b010_0000
_FUNCT7_MULDIV = 0b000_0001
_SHIFT64_MASK = 0b111_1110

_FUNCT3_WIDTH_W = 0b010
_FUNCT2_FMT_S = 0b00


@dataclass(frozen=True)
class _Word:
    """Field views of a 32-bit instruction word."""

    ins: int

    def _bits(self, shift: int, mask: int) -> int:
        return (self.ins >> shift) & mask

    @property
    def opcode(self) -> int:
        return self._bits(0, 0b111_1111)

    @property
    def rd(self) -> int:
        return self._bits(7, 0b1_1111)

    @property
    def rs1(self) -> int:
        return self._bits(15, 0b1_1111)

    @property
    def rs2(self) -> int:
        return self._bits(20, 0b1_1111)

    @property
    def rs3(self) -> int:
        return self._bits(27, 0b1_1111)

    @property
    def funct2(self) -> int:
        return self._bits(25, 0b11)

    @property
    def funct3(self) -> int:
        return self._bits(12, 0b111)

    @property
    def funct5(self) -> int:
        return self._bits(27, 0b1_1111)

    @property
    def funct7(self) -> int:
        return self._bits(25, 0b111_1111)

    @property
    def funct12(self) -> int:
        return self._bits(20, 0xFFF)

    @property
    def csr(self) -> int:
        return self._bits(20, 0xFFF)

    @property
    def u_type(self) -> UType:
        return UType(rd=self.rd, imm=Imm(self.ins & 0xFFFF_F000, 32))

    @property
    def j_type(self) -> JType:
        value = (
            (self._bits(31, 0b1) << 20)
            | (self._bits(21, 0b11_1111_1111) << 1)
            | (self._bits(20, 0b1) << 11)
            | (self._bits(12, 0b1111_1111) << 12)
        )
        return JType(rd=self.rd, imm=Imm(value, 12))

    @property
    def i_type(self) -> IType:
        return IType(
            rd=self.rd, rs1=self.rs1, funct3=self.funct3, imm=Imm(self._bits(20, 0xFFF), 12)
        )

    @property
    def s_type(self) -> SType:
        value = self._bits(7, 0b1_1111) | (self._bits(25, 0b111_1111) << 5)
        return SType(rs1=self.rs1, rs2=self.rs2, funct3=self.funct3, imm=Imm(value, 12))

    @property
    def b_type(self) -> BType:
        value = (
            (self._bits(7, 0b1) << 11)
            | (self._bits(8, 0b1111) << 1)
            | (self._bits(25, 0b11_1111) << 5)
            | (self._bits(31, 0b1) << 12)
        )
        return BType(rs1=self.rs1, rs2=self.rs2, funct3=self.funct3, imm=Imm(value, 12))

    @property
    def r_type(self) -> RType:
        return RType(
            rd=self.rd, rs1=self.rs1, rs2=self.rs2, funct3=self.funct3, funct7=self.funct7
        )

    @property
    def r4_type(self) -> R4Type:
        return R4Type(
            rd=self.rd,
            rs1=self.rs1,
            rs2=self.rs2,
            rs3=self.rs3,
            funct3=self.funct3,
            funct2=self.funct2,
        )

    @property
    def csr_r_type(self) -> CsrRType:
        return CsrRType(rd=self.rd, rs1=self.rs1, funct3=self.funct3, csr=self.csr)

    @property
    def csr_i_type(self) -> CsrIType:
        return CsrIType(
            rd=self.rd,
            uimm=Uimm(self._bits(15, 0b1_1111), 5),
            funct3=self.funct3,
            csr=self.csr,
        )


class _Unknown(Exception):
    """Internal signal that no encoding matched."""


_R32 = RV32IOp
_R64 = RV64IOp

_BRANCHES = {
    0b000: _R32.BEQ,
    0b001: _R32.BNE,
    0b100: _R32.BLT,
    0b101: _R32.BGE,
    0b110: _R32.BLTU,
    0b111: _R32.BGEU,
}

# funct3 -> (instruction class, op, needs a 64-bit or wider base)
_LOADS: dict[int, tuple[type, object, bool]] = {
    0b000: (RV32I, _R32.LB, False),
    0b001: (RV32I, _R32.LH, False),
    0b010: (RV32I, _R32.LW, False),
    0b011: (RV64I, _R64.LD, True),
    0b100: (RV32I, _R32.LBU, False),
    0b101: (RV32I, _R32.LHU, False),
    0b110: (RV64I, _R64.LWU, True),
}

_STORES: dict[int, tuple[type, object, bool]] = {
    0b000: (RV32I, _R32.SB, False),
    0b001: (RV32I, _R32.SH, False),
    0b010: (RV32I, _R32.SW, False),
    0b011: (RV64I, _R64.SD, True),
}

_FENCES = {0b000: _R32.FENCE, 0b001: _R32.FENCE_I}

_CSR_OPS = {
    0b001: CsrOp.CSRRW,
    0b010: CsrOp.CSRRS,
    0b011: CsrOp.CSRRC,
    0b101: CsrOp.CSRRWI,
    0b110: CsrOp.CSRRSI,
    0b111: CsrOp.CSRRCI,
}

_PRIVILEGED = {0: _R32.ECALL, 1: _R32.EBREAK}

_IMMEDIATE_OPS = {
    0b000: _R32.ADDI,
    0b010: _R32.SLTI,
    0b011: _R32.SLTIU,
    0b100: _R32.XORI,
    0b110: _R32.ORI,
    0b111: _R32.ANDI,
}

_REGISTER_OPS = {
    (0b000, _FUNCT7_ADD_SRL): _R32.ADD,
    (0b000, _FUNCT7_SUB_SRA): _R32.SUB,
    (0b000, _FUNCT7_MULDIV): _R32.MUL,
    (0b001, _FUNCT7_ADD_SRL): _R32.SLL,
    (0b001, _FUNCT7_MULDIV): _R32.MULH,
    (0b010, _FUNCT7_ADD_SRL): _R32.SLT,
    (0b011, _FUNCT7_ADD_SRL): _R32.SLTU,
    (0b100, _FUNCT7_ADD_SRL): _R32.XOR,
    (0b100, _FUNCT7_MULDIV): _R32.MULHSU,
    (0b101, _FUNCT7_ADD_SRL): _R32.SRL,
    (0b101, _FUNCT7_SUB_SRA): _R32.SRA,
    (0b101, _FUNCT7_MULDIV): _R32.DIV,
    (0b110, _FUNCT7_ADD_SRL): _R32.OR,
    (0b110, _FUNCT7_MULDIV): _R32.DIVU,
    (0b111, _FUNCT7_ADD_SRL): _R32.AND,
}

_REMAINDER_OPS = {Xlen.X32: _R32.REM, Xlen.X64: _R32.REMU}

_WORD_IMMEDIATE_OPS = {
    (0b001, _FUNCT7_ADD_SRL): _R64.SLLIW,
    (0b101, _FUNCT7_ADD_SRL): _R64.SRLIW,
    (0b101, _FUNCT7_SUB_SRA): _R64.SRAIW,
}

_WORD_REGISTER_OPS = {
    (0b000, _FUNCT7_ADD_SRL): _R64.ADDW,
    (0b000, _FUNCT7_SUB_SRA): _R64.SUBW,
    (0b001, _FUNCT7_ADD_SRL): _R64.SLLW,
    (0b101, _FUNCT7_ADD_SRL): _R64.SRLW,
    (0b101, _FUNCT7_SUB_SRA): _R64.SRAW,
}

_FUSED_OPS = {
    _OPCODE_FMADD: FloatOp.FMADD_S,
    _OPCODE_FMSUB: FloatOp.FMSUB_S,
    _OPCODE_FNMSUB: FloatOp.FNMSUB_S,
    _OPCODE_FNMADD: FloatOp.FNMADD_S,
}

_RS3_FP_ADD = 0b00000
_RS3_FP_SUB = 0b00001
_RS3_FP_MUL = 0b00010
_RS3_FP_DIV = 0b00011
_RS3_FP_SGNJ = 0b00100
_RS3_FP_MIN_MAX = 0b00101
_RS3_FP_SQRT = 0b01011
_RS3_FP_CMP = 0b10100
_RS3_FP_FCVTX = 0b11000
_RS3_FP_XCVTF = 0b11010
_RS3_FP_FMVX_CLASS = 0b11100
_RS3_FP_XMVF = 0b11110

_FP_ARITHMETIC = {
    _RS3_FP_ADD: FloatOp.FADD_S,
    _RS3_FP_SUB: FloatOp.FSUB_S,
    _RS3_FP_MUL: FloatOp.FMUL_S,
    _RS3_FP_DIV: FloatOp.FDIV_S,
}

# rs3 -> funct3 -> op
_FP_BY_FUNCT3 = {
    _RS3_FP_MIN_MAX: {0b000: FloatOp.FMIN_S, 0b001: FloatOp.FMAX_S},
    _RS3_FP_SGNJ: {
        0b000: FloatOp.FSGNJ_S,
        0b001: FloatOp.FSGNJN_S,
        0b010: FloatOp.FSGNJX_S,
    },
    _RS3_FP_CMP: {0b010: FloatOp.FEQ_S, 0b001: FloatOp.FLT_S, 0b000: FloatOp.FLE_S},
}

# rs3 -> rs2 -> (op, needs a 64-bit or wider base)
_FP_CONVERSIONS = {
    _RS3_FP_FCVTX: {
        0: (FloatOp.FCVT_W_S, False),
        1: (FloatOp.FCVT_WU_S, False),
        2: (FloatOp.FCVT_L_S, True),
        3: (FloatOp.FCVT_LU_S, True),
    },
    _RS3_FP_XCVTF: {
        0: (FloatOp.FCVT_S_W, False),
        1: (FloatOp.FCVT_S_WU, False),
        2: (FloatOp.FCVT_S_L, True),
        3: (FloatOp.FCVT_S_LU, True),
    },
}

# (rs3, funct3) -> op, valid only with rs2 == 0
_FP_MOVES = {
    (_RS3_FP_FMVX_CLASS, 0b000): FloatOp.FMV_X_W,
    (_RS3_FP_FMVX_CLASS, 0b001): FloatOp.FCLASS_S,
    (_RS3_FP_XMVF, 0b000): FloatOp.FMV_W_X,
}

_ATOMIC_OPS = {
    0b00010: AtomicOp.LR,
    0b00011: AtomicOp.SC,
    0b00001: AtomicOp.AMOSWAP,
    0b00000: AtomicOp.AMOADD,
    0b00100: AtomicOp.AMOXOR,
    0b01100: AtomicOp.AMOAND,
    0b01000: AtomicOp.AMOOR,
    0b10000: AtomicOp.AMOMIN,
    0b10100: AtomicOp.AMOMAX,
    0b11000: AtomicOp.AMOMINU,
    0b11100: AtomicOp.AMOMAXU,
}

_ATOMIC_WIDTHS = {0b010: AtomicWidth.W, 0b011: AtomicWidth.D, 0b100: AtomicWidth.Q}


def _lookup(table: dict, key: object):
    try:
        return table[key]
    except KeyError:
        raise _Unknown from None


def _memory(table: dict, word: _Word, xlen: Xlen, operands: object) -> Instruction:
    cls, op, needs_wide = _lookup(table, word.funct3)
    if needs_wide and xlen is Xlen.X32:
        raise _Unknown
    return cls(op, operands)


def _load(word: _Word, xlen: Xlen) -> Instruction:
    return _memory(_LOADS, word, xlen, word.i_type)


def _store(word: _Word, xlen: Xlen) -> Instruction:
    return _memory(_STORES, word, xlen, word.s_type)


def _branch(word: _Word, xlen: Xlen) -> Instruction:
    return RV32I(_lookup(_BRANCHES, word.funct3), word.b_type)


def _misc_mem(word: _Word, xlen: Xlen) -> Instruction:
    return RV32I(_lookup(_FENCES, word.funct3))


def _system(word: _Word, xlen: Xlen) -> Instruction:
    if word.funct3 == 0b000:
        if word.rs1 != 0 or word.rd != 0:
            raise _Unknown
        return RV32I(_lookup(_PRIVILEGED, word.funct12))
    op = _lookup(_CSR_OPS, word.funct3)
    operands = word.csr_i_type if op.takes_immediate else word.csr_r_type
    return RVZicsr(op, operands)


def _op_imm(word: _Word, xlen: Xlen) -> Instruction:
    funct3, funct7, operands = word.funct3, word.funct7, word.i_type
    if funct3 in _IMMEDIATE_OPS:
        return RV32I(_IMMEDIATE_OPS[funct3], operands)
    if funct3 == 0b001:
        if funct7 == 0 and xlen is Xlen.X32:
            return RV32I(_R32.SLLI, operands)
        if funct7 & _SHIFT64_MASK == 0 and xlen is Xlen.X64:
            return RV64I(_R64.SLLI, operands)
    elif funct3 == 0b101:
        if xlen is Xlen.X32:
            if funct7 == _FUNCT7_ADD_SRL:
                return RV32I(_R32.SRLI, operands)
            if funct7 == _FUNCT7_SUB_SRA:
                return RV32I(_R32.SRAI, operands)
        elif xlen is Xlen.X64:
            if funct7 & _SHIFT64_MASK == _FUNCT7_ADD_SRL:
                return RV64I(_R64.SRLI, operands)
            if funct7 & _SHIFT64_MASK == _FUNCT7_SUB_SRA:
                return RV64I(_R64.SRAI, operands)
    raise _Unknown


def _op(word: _Word, xlen: Xlen) -> Instruction:
    key = (word.funct3, word.funct7)
    if key == (0b111, _FUNCT7_MULDIV):
        return RV32I(_lookup(_REMAINDER_OPS, xlen), word.r_type)
    return RV32I(_lookup(_REGISTER_OPS, key), word.r_type)


def _op_imm32(word: _Word, xlen: Xlen) -> Instruction:
    if xlen is not Xlen.X64:
        raise _Unknown
    if word.funct3 == 0b000:
        return RV64I(_R64.ADDIW, word.i_type)
    return RV64I(_lookup(_WORD_IMMEDIATE_OPS, (word.funct3, word.funct7)), word.i_type)


def _op_32(word: _Word, xlen: Xlen) -> Instruction:
    if xlen is not Xlen.X64:
        raise _Unknown
    return RV64I(_lookup(_WORD_REGISTER_OPS, (word.funct3, word.funct7)), word.r_type)


def _load_fp(word: _Word, xlen: Xlen) -> Instruction:
    if word.funct3 != _FUNCT3_WIDTH_W:
        raise _Unknown
    return RVF(FloatOp.FLW, word.i_type)


def _store_fp(word: _Word, xlen: Xlen) -> Instruction:
    if word.funct3 != _FUNCT3_WIDTH_W:
        raise _Unknown
    return RVF(FloatOp.FSW, word.s_type)


def _fused(word: _Word, xlen: Xlen) -> Instruction:
    if word.funct2 != _FUNCT2_FMT_S:
        raise _Unknown
    return RVF(_FUSED_OPS[word.opcode], word.r4_type)


def _float_op(word: _Word, xlen: Xlen) -> FloatOp:
    rs3, rs2 = word.rs3, word.rs2
    if rs3 in _FP_ARITHMETIC:
        return _FP_ARITHMETIC[rs3]
    if rs3 == _RS3_FP_SQRT and rs2 == 0:
        return FloatOp.FSQRT_S
    if rs3 in _FP_BY_FUNCT3:
        return _lookup(_FP_BY_FUNCT3[rs3], word.funct3)
    if rs3 in _FP_CONVERSIONS:
        op, needs_wide = _lookup(_FP_CONVERSIONS[rs3], rs2)
        if needs_wide and xlen is Xlen.X32:
            raise _Unknown
        return op
    if rs2 == 0:
        return _lookup(_FP_MOVES, (rs3, word.funct3))
    raise _Unknown


def _fp(word: _Word, xlen: Xlen) -> Instruction:
    op = _float_op(word, xlen)
    if word.funct2 != _FUNCT2_FMT_S:
        raise _Unknown
    return RVF(op, word.r_type)


def _atomic(word: _Word, xlen: Xlen) -> Instruction:
    width = _lookup(_ATOMIC_WIDTHS, word.funct3)
    if width is AtomicWidth.Q and xlen is not Xlen.X128:
        raise _Unknown
    return Atomic(_lookup(_ATOMIC_OPS, word.funct5), width, word.r_type)


_Handler = Callable[[_Word, Xlen], Instruction]

_HANDLERS: dict[int, _Handler] = {
    _OPCODE_LUI: lambda word, xlen: RV32I(_R32.LUI, word.u_type),
    _OPCODE_AUIPC: lambda word, xlen: RV32I(_R32.AUIPC, word.u_type),
    _OPCODE_JAL: lambda word, xlen: RV32I(_R32.JAL, word.j_type),
    _OPCODE_JALR: lambda word, xlen: RV32I(_R32.JALR, word.i_type),
    _OPCODE_BRANCH: _branch,
    _OPCODE_LOAD: _load,
    _OPCODE_STORE: _store,
    _OPCODE_MISC_MEM: _misc_mem,
    _OPCODE_SYSTEM: _system,
    _OPCODE_OP_IMM: _op_imm,
    _OPCODE_OP: _op,
    _OPCODE_OP_IMM32: _op_imm32,
    _OPCODE_OP_32: _op_32,
    _OPCODE_LOAD_FP: _load_fp,
    _OPCODE_STORE_FP: _store_fp,
    **{opcode: _fused for opcode in _FUSED_OPS},
    _OPCODE_FP: _fp,
    _OPCODE_A: _atomic,
}


def decode_standard(ins: int, xlen: Xlen | int) -> Instruction:
    """Decode a 32-bit instruction word for the given register width.

    Raises DecodeError if the word is not a recognised instruction.
    """
    if not 0 <= ins <= 0xFFFF_FFFF:
        raise DecodeError(f"{ins:#x} does not fit in 32 bits")
    width = Xlen(xlen)
    word = _Word(ins)
    handler = _HANDLERS.get(word.opcode)
    try:
        if handler is None:
            raise _Unknown
        return handler(word, width)
    except _Unknown:
        raise DecodeError(f"unknown instruction {ins:#010x}") from None