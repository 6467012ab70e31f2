"""Decoding of 16-bit compressed instructions."""

from __future__ import annotations

from .compressed import RVC, RVCOp
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
    DecodeError,
    Imm,
    Uimm,
    Xlen,
)

__all__ = ["decode_compressed"]

_OPCODE_C0 = 0b00
_OPCODE_C1 = 0b01
_OPCODE_C2 = 0b10


def _bits(ins: int, shift: int, mask: int) -> int:
    return (ins >> shift) & mask


def _c_reg(index: int) -> int:
    """Map a 3-bit compressed register field onto x8..x15."""
    return index + 8


def _fail(ins: int) -> DecodeError:
    return DecodeError(f"unknown compressed instruction {ins:#06x}")


def _quadrant0(ins: int, xlen: Xlen) -> RVC:
    funct3 = _bits(ins, 13, 0b111)
    rd = _c_reg(_bits(ins, 2, 0b111))
    rs1 = _c_reg(_bits(ins, 7, 0b111))
    nzuimm549623 = (
        (_bits(ins, 11, 0b11) << 4)
        | (_bits(ins, 7, 0b1111) << 6)
        | (_bits(ins, 6, 0b1) << 2)
        | (_bits(ins, 5, 0b1) << 3)
    )
    uimm5376 = (_bits(ins, 10, 0b111) << 3) | (_bits(ins, 5, 0b11) << 6)
    uimm54876 = (
        (_bits(ins, 11, 0b11) << 4)
        | (_bits(ins, 10, 0b1) << 8)
        | (_bits(ins, 5, 0b11) << 6)
    )
    uimm5326 = (
        (_bits(ins, 11, 0b111) << 3)
        | (_bits(ins, 5, 0b1) << 6)
        | (_bits(ins, 6, 0b1) << 2)
    )
    narrow = xlen in (Xlen.X32, Xlen.X64)
    wide = xlen in (Xlen.X64, Xlen.X128)

    def load(op: RVCOp, value: int, width: int) -> RVC:
        return RVC(op, CLType(rd=rd, rs1=rs1, funct3=funct3, imm=Imm(value, width)))

    def store(op: RVCOp, value: int, width: int) -> RVC:
        return RVC(op, CSType(rs1=rs1, rs2=rd, funct3=funct3, imm=Imm(value, width)))

    if funct3 == 0b000 and nzuimm549623 != 0:
        return RVC(
            RVCOp.ADDI4SPN,
            CIWType(rd=rd, funct3=funct3, uimm=Uimm(nzuimm549623, 10)),
        )
    if funct3 == 0b001:
        if narrow:
            return load(RVCOp.FLD, uimm5376, 8)
        if xlen is Xlen.X128:
            return load(RVCOp.LQ, uimm54876, 9)
    if funct3 == 0b010:
        return load(RVCOp.LW, uimm5326, 7)
    if funct3 == 0b011:
        if xlen is Xlen.X32:
            return load(RVCOp.FLW, uimm5326, 7)
        if wide:
            return load(RVCOp.LD, uimm5376, 8)
    if funct3 == 0b101:
        if narrow:
            return store(RVCOp.FSD, uimm5376, 8)
        if xlen is Xlen.X128:
            return store(RVCOp.SQ, uimm54876, 9)
    if funct3 == 0b110:
        return store(RVCOp.SW, uimm5326, 7)
    if funct3 == 0b111:
        if xlen is Xlen.X32:
            return store(RVCOp.FSW, uimm5326, 7)
        if wide:
            return store(RVCOp.SD, uimm5376, 8)
    raise _fail(ins)


def _arith_quadrant(ins: int, xlen: Xlen, funct3: int) -> RVC:
    """The C1 funct3=100 group: shifts, andi and register arithmetic."""
    funct2 = _bits(ins, 5, 0b11)
    funct6 = _bits(ins, 10, 0b111111)
    ins12 = bool(_bits(ins, 12, 0b1))
    nzuimm540 = _bits(ins, 2, 0b11111) | (_bits(ins, 12, 0b1) << 5)
    rdrs1 = _c_reg(_bits(ins, 7, 0b111))
    rs2 = _c_reg(_bits(ins, 2, 0b111))
    selector = funct6 & 0b11

    def immediate(op: RVCOp) -> RVC:
        return RVC(op, CIType(rdrs1=rdrs1, funct3=funct3, imm=Imm(nzuimm540, 6)))

    def register(op: RVCOp) -> RVC:
        return RVC(op, CAType(rdrs1=rdrs1, rs2=rs2, funct2=funct2, funct6=funct6))

    shift_ok = not (xlen is Xlen.X32 and ins12) and nzuimm540 != 0
    shift64_ok = xlen is Xlen.X128 and nzuimm540 == 0
    if selector == 0b00:
        if shift_ok:
            return immediate(RVCOp.SRLI)
        if shift64_ok:
            return immediate(RVCOp.SRLI64)
    elif selector == 0b01:
        if shift_ok:
            return immediate(RVCOp.SRAI)
        if shift64_ok:
            return immediate(RVCOp.SRAI64)
    elif selector == 0b10:
        return immediate(RVCOp.ANDI)
    elif not ins12:
        return register((RVCOp.SUB, RVCOp.XOR, RVCOp.OR, RVCOp.AND)[funct2])
    elif xlen in (Xlen.X64, Xlen.X128) and funct2 in (0b00, 0b01):
        return register(RVCOp.SUBW if funct2 == 0b00 else RVCOp.ADDW)
    raise _fail(ins)


def _quadrant1(ins: int, xlen: Xlen) -> RVC:
    funct3 = _bits(ins, 13, 0b111)
    rdrs1 = _bits(ins, 7, 0b11111)
    imm540 = _bits(ins, 2, 0b11111) | (_bits(ins, 12, 0b1) << 5)
    jump_target = (
        (_bits(ins, 3, 0b11) << 1)
        | (_bits(ins, 11, 0b1) << 3)
        | (_bits(ins, 2, 0b1) << 4)
        | (_bits(ins, 7, 0b1) << 5)
        | (_bits(ins, 6, 0b1) << 6)
        | (_bits(ins, 9, 0b11) << 8)
        | (_bits(ins, 8, 0b1) << 9)
        | (_bits(ins, 11, 0b1) << 10)
    )
    nzimm946875 = (
        (_bits(ins, 12, 0b1) << 9)
        | (_bits(ins, 6, 0b1) << 4)
        | (_bits(ins, 5, 0b1) << 6)
        | (_bits(ins, 3, 0b11) << 7)
        | (_bits(ins, 2, 0b1) << 5)
    )
    nzuimm171612 = (_bits(ins, 12, 0b1) << 17) | (_bits(ins, 2, 0b11111) << 12)
    branch_offset = (
        (_bits(ins, 12, 0b1) << 8)
        | (_bits(ins, 10, 0b11) << 3)
        | (_bits(ins, 5, 0b11) << 6)
        | (_bits(ins, 3, 0b11) << 1)
        | (_bits(ins, 2, 0b11) << 5)
    )

    def ci(op: RVCOp, value: int, width: int) -> RVC:
        return RVC(op, CIType(rdrs1=rdrs1, funct3=funct3, imm=Imm(value, width)))

    def cj(op: RVCOp) -> RVC:
        return RVC(op, CJType(funct3=funct3, target=Imm(jump_target, 12)))

    def cb(op: RVCOp) -> RVC:
        rs1 = _c_reg(_bits(ins, 7, 0b111))
        return RVC(op, CBType(rs1=rs1, funct3=funct3, off=Imm(branch_offset, 9)))

    if funct3 == 0b000:
        return ci(RVCOp.NOP if rdrs1 == 0 else RVCOp.ADDI, imm540, 6)
    if funct3 == 0b001:
        if xlen is Xlen.X32:
            return cj(RVCOp.JAL)
        return ci(RVCOp.ADDIW, imm540, 6)
    if funct3 == 0b010 and rdrs1 != 0:
        return ci(RVCOp.LI, imm540, 6)
    if funct3 == 0b011:
        if rdrs1 == 2:
            return ci(RVCOp.ADDI16SP, nzimm946875, 10)
        if rdrs1 != 0 and nzuimm171612 != 0:
            return ci(RVCOp.LUI, nzuimm171612, 18)
    if funct3 == 0b100:
        return _arith_quadrant(ins, xlen, funct3)
    if funct3 == 0b101:
        return cj(RVCOp.J)
    if funct3 == 0b110:
        return cb(RVCOp.BEQZ)
    if funct3 == 0b111:
        return cb(RVCOp.BNEZ)
    raise _fail(ins)


def _register_quadrant(ins: int) -> RVC:
    """The C2 funct3=100 group: jr, mv, ebreak, jalr and add."""
    funct4 = _bits(ins, 12, 0b1111)
    ins12 = bool(_bits(ins, 12, 0b1))
    rdrs1 = _bits(ins, 7, 0b11111)
    rs2 = _bits(ins, 2, 0b11111)
    operands = CRType(rdrs1=rdrs1, rs2=rs2, funct4=funct4)
    if not ins12:
        if rdrs1 != 0:
            return RVC(RVCOp.JR if rs2 == 0 else RVCOp.MV, operands)
    elif rs2 == 0:
        return RVC(RVCOp.EBREAK if rdrs1 == 0 else RVCOp.JALR, operands)
    elif rdrs1 != 0:
        return RVC(RVCOp.ADD, operands)
    raise _fail(ins)


def _quadrant2(ins: int, xlen: Xlen) -> RVC:
    funct3 = _bits(ins, 13, 0b111)
    rdrs1 = _bits(ins, 7, 0b11111)
    rs2 = _bits(ins, 2, 0b11111)
    ins12 = bool(_bits(ins, 12, 0b1))
    nzuimm540 = _bits(ins, 2, 0b11111) | (_bits(ins, 12, 0b1) << 5)
    uimm54386 = (
        (_bits(ins, 12, 0b1) << 5)
        | (_bits(ins, 5, 0b11) << 3)
        | (_bits(ins, 2, 0b111) << 6)
    )
    uimm5_4_96 = (
        (_bits(ins, 12, 0b1) << 5)
        | (_bits(ins, 6, 0b1) << 4)
        | (_bits(ins, 2, 0b1111) << 6)
    )
    uimm54276 = (
        (_bits(ins, 12, 0b1) << 5)
        | (_bits(ins, 4, 0b111) << 2)
        | (_bits(ins, 2, 0b111) << 6)
    )
    uimm5386 = (_bits(ins, 10, 0b111) << 3) | (_bits(ins, 7, 0b111) << 6)
    uimm54_96 = (_bits(ins, 11, 0b11) << 4) | (_bits(ins, 7, 0b1111) << 6)
    uimm5276 = (_bits(ins, 9, 0b1111) << 3) | (_bits(ins, 7, 0b11) << 6)
    narrow = xlen in (Xlen.X32, Xlen.X64)
    wide = xlen in (Xlen.X64, Xlen.X128)

    def ci(op: RVCOp, value: int, width: int) -> RVC:
        return RVC(op, CIType(rdrs1=rdrs1, funct3=funct3, imm=Imm(value, width)))

    def css(op: RVCOp, value: int, width: int) -> RVC:
        return RVC(op, CSSType(rs2=rs2, funct3=funct3, imm=Imm(value, width)))

    if funct3 == 0b000 and rdrs1 != 0:
        if not (xlen is Xlen.X32 and ins12) and nzuimm540 != 0:
            return ci(RVCOp.SLLI, nzuimm540, 6)
        if xlen is Xlen.X128 and nzuimm540 == 0:
            return ci(RVCOp.SLLI64, nzuimm540, 6)
    if funct3 == 0b001:
        if narrow:
            return ci(RVCOp.FLDSP, uimm54386, 9)
        if xlen is Xlen.X128 and rdrs1 != 0:
            return ci(RVCOp.LQSP, uimm5_4_96, 10)
    if funct3 == 0b010 and rdrs1 != 0:
        return ci(RVCOp.LWSP, uimm54276, 8)
    if funct3 == 0b011:
        if xlen is Xlen.X32:
            return ci(RVCOp.FLWSP, uimm54276, 8)
        if wide and rdrs1 != 0:
            return ci(RVCOp.LDSP, uimm54386, 9)
    if funct3 == 0b100:
        return _register_quadrant(ins)
    if funct3 == 0b101:
        if narrow:
            return css(RVCOp.FSDSP, uimm5386, 9)
        if xlen is Xlen.X128:
            return css(RVCOp.SQSP, uimm54_96, 10)
    if funct3 == 0b110:
        return css(RVCOp.SWSP, uimm5276, 8)
    if funct3 == 0b111:
        if xlen is Xlen.X32:
            return css(RVCOp.FSWSP, uimm5276, 8)
        if wide:
            return css(RVCOp.SDSP, uimm5386, 9)
    raise _fail(ins)


_QUADRANTS = {
    _OPCODE_C0: _quadrant0,
    _OPCODE_C1: _quadrant1,
    _OPCODE_C2: _quadrant2,
}


def decode_compressed(ins: int, xlen: Xlen | int) -> RVC:
    """Decode a 16-bit compressed instruction for the given register width.

    Raises DecodeError if the halfword is not a valid compressed instruction.
    """
    if not 0 <= ins <= 0xFFFF:
        raise DecodeError(f"{ins:#x} does not fit in 16 bits")
    width = Xlen(xlen)
    decoder = _QUADRANTS.get(ins & 0b11)
    if decoder is None:
        raise DecodeError(f"{ins:#06x} is not a compressed instruction")
    return decoder(ins, width)