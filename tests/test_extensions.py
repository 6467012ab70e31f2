import pytest

from rvdisasm.extensions import (
    Atomic,
    AtomicOp,
    AtomicWidth,
    CsrOp,
    FloatOp,
    RVF,
    RVZicsr,
    fp_register_name,
)
from rvdisasm.formats import (
    CsrIType,
    CsrRType,
    Imm,
    IType,
    R4Type,
    RType,
    SType,
    Uimm,
    from_register,
)


def _parse(text):
    mnemonic, _, rest = text.partition(" ")
    return mnemonic, [part.strip() for part in rest.split(",")] if rest else []


def _fp_index(token):
    assert token.startswith("f")
    return int(token[1:])


def _rtype(rd=10, rs1=11, rs2=12):
    return RType(rd=rd, rs1=rs1, rs2=rs2, funct3=0, funct7=0)


# fp_register_name

def test_fp_register_name_bounds():
    assert fp_register_name(0) == "f0"
    assert fp_register_name(31) == "f31"
    assert fp_register_name(32) == "unknown"


def test_fp_register_names_distinct_and_parse_back():
    names = [fp_register_name(i) for i in range(32)]
    assert len(set(names)) == 32
    assert [_fp_index(name) for name in names] == list(range(32))


# Atomic

def test_lr_word_text():
    ins = Atomic(AtomicOp.LR, AtomicWidth.W, _rtype(rd=1, rs1=2, rs2=0))
    assert ins.disassembly() == "lr.w ra, sp"


def test_amo_double_text_keeps_spacing():
    ins = Atomic(AtomicOp.AMOADD, AtomicWidth.D, _rtype(rd=1, rs1=2, rs2=3))
    assert ins.disassembly() == "amoadd.d ra ,gp, sp"


@pytest.mark.parametrize("width", list(AtomicWidth))
@pytest.mark.parametrize("op", list(AtomicOp))
def test_atomic_operands(op, width):
    text = Atomic(op, width, _rtype()).disassembly()
    mnemonic, operands = _parse(text)
    assert mnemonic == f"{op.value}.{width.value}"
    indices = [from_register(tok) for tok in operands]
    if op is AtomicOp.LR:
        assert indices == [10, 11]
    elif op is AtomicOp.SC or width is AtomicWidth.W:
        assert indices == [12, 11]
    else:
        assert indices == [10, 12, 11]


def test_atomic_str_matches_disassembly():
    ins = Atomic(AtomicOp.SC, AtomicWidth.Q, _rtype())
    assert str(ins) == ins.disassembly()


def test_atomic_rejects_wrong_operands():
    with pytest.raises(TypeError):
        Atomic(AtomicOp.LR, AtomicWidth.W, IType(rd=1, rs1=2, funct3=2, imm=Imm(0, 12)))


# Zicsr

def test_csrrw_text():
    ins = RVZicsr(CsrOp.CSRRW, CsrRType(rd=1, rs1=2, funct3=1, csr=0x305))
    assert ins.disassembly() == "csrrw ra, 0x305, sp"


@pytest.mark.parametrize("op", [CsrOp.CSRRW, CsrOp.CSRRS, CsrOp.CSRRC])
def test_csr_register_forms(op):
    text = RVZicsr(op, CsrRType(rd=10, rs1=11, funct3=0, csr=0xC00)).disassembly()
    mnemonic, operands = _parse(text)
    assert mnemonic == op.value
    assert from_register(operands[0]) == 10
    assert int(operands[1], 16) == 0xC00
    assert operands[1].startswith("0x")
    assert from_register(operands[2]) == 11


@pytest.mark.parametrize("op", [CsrOp.CSRRWI, CsrOp.CSRRSI, CsrOp.CSRRCI])
def test_csr_immediate_forms(op):
    ops = CsrIType(rd=10, uimm=Uimm(3, 5), funct3=5, csr=0x305)
    mnemonic, operands = _parse(RVZicsr(op, ops).disassembly())
    assert mnemonic == op.value
    assert from_register(operands[0]) == 10
    assert int(operands[1], 16) == 0x305
    assert int(operands[2]) == 3


def test_csr_operand_kind_checked():
    with pytest.raises(TypeError):
        RVZicsr(CsrOp.CSRRWI, CsrRType(rd=1, rs1=2, funct3=5, csr=0x305))
    with pytest.raises(TypeError):
        RVZicsr(CsrOp.CSRRW, CsrIType(rd=1, uimm=Uimm(3, 5), funct3=1, csr=0x305))


# F extension

_FP, _INT = "fp", "int"

_THREE_REG_KINDS = {
    FloatOp.FADD_S: (_FP, _FP, _FP),
    FloatOp.FSUB_S: (_FP, _FP, _FP),
    FloatOp.FMUL_S: (_FP, _FP, _FP),
    FloatOp.FDIV_S: (_FP, _FP, _FP),
    FloatOp.FMIN_S: (_FP, _FP, _FP),
    FloatOp.FMAX_S: (_FP, _FP, _FP),
    FloatOp.FSGNJ_S: (_FP, _FP, _FP),
    FloatOp.FSGNJN_S: (_FP, _FP, _FP),
    FloatOp.FSGNJX_S: (_FP, _FP, _FP),
    FloatOp.FEQ_S: (_INT, _FP, _FP),
    FloatOp.FLT_S: (_INT, _FP, _FP),
    FloatOp.FLE_S: (_INT, _FP, _FP),
    FloatOp.FSQRT_S: (_FP, _FP),
    FloatOp.FCVT_W_S: (_INT, _FP),
    FloatOp.FCVT_WU_S: (_INT, _FP),
    FloatOp.FMV_X_W: (_INT, _FP),
    FloatOp.FCLASS_S: (_INT, _FP),
    FloatOp.FCVT_L_S: (_INT, _FP),
    FloatOp.FCVT_LU_S: (_INT, _FP),
    FloatOp.FCVT_S_W: (_FP, _INT),
    FloatOp.FCVT_S_WU: (_FP, _INT),
    FloatOp.FMV_W_X: (_FP, _INT),
    FloatOp.FCVT_S_L: (_FP, _INT),
    FloatOp.FCVT_S_LU: (_FP, _INT),
}

_FUSED = (FloatOp.FMADD_S, FloatOp.FMSUB_S, FloatOp.FNMADD_S, FloatOp.FNMSUB_S)


@pytest.mark.parametrize("op,kinds", list(_THREE_REG_KINDS.items()))
def test_float_register_forms(op, kinds):
    text = RVF(op, _rtype(rd=10, rs1=11, rs2=12)).disassembly()
    mnemonic, operands = _parse(text)
    assert mnemonic == op.value
    assert len(operands) == len(kinds)
    for token, kind, index in zip(operands, kinds, (10, 11, 12)):
        if kind == _FP:
            assert _fp_index(token) == index
        else:
            assert from_register(token) == index


@pytest.mark.parametrize("op", _FUSED)
def test_fused_forms(op):
    ops = R4Type(rd=1, rs1=2, rs2=3, rs3=4, funct3=0, funct2=0)
    mnemonic, operands = _parse(RVF(op, ops).disassembly())
    assert mnemonic == op.value
    assert [_fp_index(tok) for tok in operands] == [1, 2, 3, 4]


def test_flw_and_fsw_memory_forms():
    load = RVF(FloatOp.FLW, IType(rd=5, rs1=2, funct3=2, imm=Imm(0xFFC, 12)))
    mnemonic, operands = _parse(load.disassembly())
    assert mnemonic == "flw"
    assert _fp_index(operands[0]) == 5
    offset, base = operands[1].rstrip(")").split("(")
    assert int(offset) == Imm(0xFFC, 12).signed()
    assert from_register(base) == 2

    store = RVF(FloatOp.FSW, SType(rs1=2, rs2=7, funct3=2, imm=Imm(4, 12)))
    mnemonic, operands = _parse(store.disassembly())
    assert mnemonic == "fsw"
    assert _fp_index(operands[0]) == 7
    offset, base = operands[1].rstrip(")").split("(")
    assert int(offset) == 4
    assert from_register(base) == 2


def _operands_for(op):
    if op is FloatOp.FLW:
        return IType(rd=1, rs1=2, funct3=2, imm=Imm(0, 12))
    if op is FloatOp.FSW:
        return SType(rs1=2, rs2=1, funct3=2, imm=Imm(0, 12))
    if op in _FUSED:
        return R4Type(rd=1, rs1=2, rs2=3, rs3=4, funct3=0, funct2=0)
    return _rtype()


def test_float_every_op_covered():
    rendered = {}
    for op in FloatOp:
        mnemonic, operands = _parse(RVF(op, _operands_for(op)).disassembly())
        assert operands
        rendered[op] = mnemonic
    assert rendered == {op: op.value for op in FloatOp}
    assert set(_THREE_REG_KINDS) | set(_FUSED) | {FloatOp.FLW, FloatOp.FSW} == set(rendered)


def test_float_operand_kind_checked():
    with pytest.raises(TypeError):
        RVF(FloatOp.FLW, _rtype())
    with pytest.raises(TypeError):
        RVF(FloatOp.FMADD_S, _rtype())
    with pytest.raises(TypeError):
        RVF(FloatOp.FADD_S, R4Type(rd=1, rs1=2, rs2=3, rs3=4, funct3=0, funct2=0))


def test_float_str_matches_disassembly():
    ins = RVF(FloatOp.FADD_S, _rtype())
    assert str(ins) == ins.disassembly()