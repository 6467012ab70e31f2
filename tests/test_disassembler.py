import pytest

from rvdisasm.disassembler import (
    decode,
    disassemble,
    instruction_length,
    main,
    parse_hex,
)
from rvdisasm.formats import DecodeError, Xlen


RV32I_CASES = [
    ("12345037", "lui"),
    ("12345117", "auipc"),
    ("008000ef", "jal"),
    ("004100e7", "jalr"),
    ("00410083", "lb"),
    ("00411083", "lh"),
    ("00412083", "lw"),
    ("00414083", "lbu"),
    ("00415083", "lhu"),
    ("06410093", "addi"),
    ("06412093", "slti"),
    ("06413093", "sltiu"),
    ("06414093", "xori"),
    ("06416093", "ori"),
    ("06417093", "andi"),
    ("00511093", "slli"),
    ("00515093", "srli"),
    ("40515093", "srai"),
    ("00208463", "beq"),
    ("00209463", "bne"),
    ("0020c463", "blt"),
    ("0020d463", "bge"),
    ("0020e463", "bltu"),
    ("0020f463", "bgeu"),
    ("00110223", "sb"),
    ("00111223", "sh"),
    ("00112223", "sw"),
    ("003100b3", "add"),
    ("403100b3", "sub"),
    ("003110b3", "sll"),
    ("003120b3", "slt"),
    ("003130b3", "sltu"),
    ("003140b3", "xor"),
    ("003150b3", "srl"),
    ("403150b3", "sra"),
    ("003160b3", "or"),
    ("003170b3", "and"),
    ("0000000f", "fence"),
    ("0000100f", "fence.i"),
    ("00000073", "ecall"),
    ("00100073", "ebreak"),
]


@pytest.mark.parametrize("text,mnemonic", RV32I_CASES)
def test_rv32i_mnemonics(text, mnemonic):
    result = disassemble(text)
    assert result.split(" ")[0] == mnemonic


@pytest.mark.parametrize(
    "text,expected",
    [
        ("12345037", "lui zero, 305418240"),
        ("00208463", "beq ra, sp, 8"),
        ("06410093", "addi ra, sp, 100"),
        ("00412083", "lw ra, 4(sp)"),
        ("00112223", "sw ra, 4(sp)"),
        ("003100b3", "add ra, sp, gp"),
        ("40515093", "srai ra, sp, 5"),
        ("00000073", "ecall"),
        ("0000100f", "fence.i"),
        ("305110f3", "csrrw ra, 0x305, sp"),
    ],
)
def test_rv32i_full_text(text, expected):
    assert disassemble(text) == expected


def test_remainder_depends_on_xlen():
    assert disassemble("02007033", 32).split(" ")[0] == "rem"
    assert disassemble("02007033", 64).split(" ")[0] == "remu"


def test_rv32i_error_cases():
    with pytest.raises(DecodeError):
        disassemble("0000001b")
    with pytest.raises(ValueError):
        disassemble("invalid_hex")


RV32A_CASES = [
    ("100120af", "lr.w"),
    ("183120af", "sc.w"),
    ("083120af", "amoswap.w"),
    ("003120af", "amoadd.w"),
    ("203120af", "amoxor.w"),
    ("603120af", "amoand.w"),
    ("403120af", "amoor.w"),
    ("803120af", "amomin.w"),
    ("a03120af", "amomax.w"),
    ("c03120af", "amominu.w"),
    ("e03120af", "amomaxu.w"),
    ("140120af", "lr.w"),
    ("1a3120af", "sc.w"),
    ("0e3120af", "amoswap.w"),
    ("0050aaaf", "amoadd.w"),
    ("100f20af", "lr.w"),
]


@pytest.mark.parametrize("text,mnemonic", RV32A_CASES)
def test_rv32a(text, mnemonic):
    assert disassemble(text).split(" ")[0] == mnemonic


def test_rv32a_text():
    assert disassemble("100120af") == "lr.w ra, sp"
    assert disassemble("183120af") == "sc.w gp, sp"


def test_rv32a_error_cases():
    with pytest.raises(DecodeError):
        disassemble("f83120af")
    with pytest.raises(ValueError):
        disassemble("invalid_hex")


RV64A_CASES = [
    ("100130af", "lr.d"),
    ("183130af", "sc.d"),
    ("083130af", "amoswap.d"),
    ("003130af", "amoadd.d"),
    ("203130af", "amoxor.d"),
    ("603130af", "amoand.d"),
    ("403130af", "amoor.d"),
    ("803130af", "amomin.d"),
    ("a03130af", "amomax.d"),
    ("c03130af", "amominu.d"),
    ("e03130af", "amomaxu.d"),
    ("140130af", "lr.d"),
    ("1a3130af", "sc.d"),
    ("0e3130af", "amoswap.d"),
    ("0050baaf", "amoadd.d"),
    ("100f30af", "lr.d"),
]


@pytest.mark.parametrize("text,mnemonic", RV64A_CASES)
def test_rv64a(text, mnemonic):
    assert disassemble(text).split(" ")[0] == mnemonic


def test_rv64a_text():
    assert disassemble("003130af") == "amoadd.d ra ,gp, sp"


def test_rv64a_error_cases():
    with pytest.raises(DecodeError):
        disassemble("f83130af")
    with pytest.raises(DecodeError):
        disassemble("003140af")
    with pytest.raises(ValueError):
        disassemble("invalid_hex")


RV128A_CASES = [
    ("1001402f", "lr.q"),
    ("1831402f", "sc.q"),
    ("0831402f", "amoswap.q"),
    ("0031402f", "amoadd.q"),
    ("2031402f", "amoxor.q"),
    ("6031402f", "amoand.q"),
    ("4031402f", "amoor.q"),
    ("8031402f", "amomin.q"),
    ("a031402f", "amomax.q"),
    ("c031402f", "amominu.q"),
    ("e031402f", "amomaxu.q"),
    ("1401402f", "lr.q"),
    ("1a31402f", "sc.q"),
    ("0e31402f", "amoswap.q"),
    ("0050caaf", "amoadd.q"),
    ("100f402f", "lr.q"),
]


@pytest.mark.parametrize("text,mnemonic", RV128A_CASES)
def test_rv128a(text, mnemonic):
    assert disassemble(text, 128).split(" ")[0] == mnemonic


def test_rv128a_error_cases():
    with pytest.raises(DecodeError):
        disassemble("f831402f", 128)
    with pytest.raises(DecodeError):
        disassemble("0031502f", 128)
    with pytest.raises(ValueError):
        disassemble("invalid_hex", 128)


@pytest.mark.parametrize(
    "text,mnemonic",
    [
        ("0x4398", "c.lw"),
        ("0xc398", "c.sw"),
        ("0x0001", "c.nop"),
        ("0x0505", "c.addi"),
        ("0x4501", "c.li"),
        ("0xa001", "c.j"),
        ("0x4082", "c.lwsp"),
        ("0xc006", "c.swsp"),
        ("0x8082", "c.jr"),
        ("0x9002", "c.ebreak"),
    ],
)
def test_compressed_quadrants(text, mnemonic):
    assert disassemble(text).split(" ")[0] == mnemonic


def test_compressed_addi4spn_decodes():
    assert disassemble("0x1000").startswith("c.addi ")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("0x0001", "c.nop"),
        ("0x9002", "c.ebreak"),
        ("0x8082", "c.jr zero, 0(ra)"),
        ("0x0505", "c.addi a0, a0, 1"),
        ("0x4501", "c.li a0, 0"),
    ],
)
def test_compressed_full_text(text, expected):
    assert disassemble(text) == expected


def test_compressed_error_cases():
    with pytest.raises(DecodeError):
        disassemble("0x0000")
    with pytest.raises(ValueError):
        disassemble("invalid")


def test_compressed_with_high_bits_is_rejected():
    with pytest.raises(DecodeError):
        decode(0x12340001)


@pytest.mark.parametrize(
    "word,length",
    [(0x0001, 2), (0x4082, 2), (0x8000, 2), (0x00000013, 4), (0x00100093, 4)],
)
def test_instruction_length(word, length):
    assert instruction_length(word) == length


def test_instruction_length_rejects_negative():
    with pytest.raises(ValueError):
        instruction_length(-1)


@pytest.mark.parametrize(
    "text,value",
    [("0x1000", 0x1000), ("0X00a10093", 0x00A10093), (" 00000073 ", 0x73), ("ff", 255)],
)
def test_parse_hex(text, value):
    assert parse_hex(text) == value


@pytest.mark.parametrize("text", ["", "0x", "invalid_hex", "12_34", "-1"])
def test_parse_hex_rejects(text):
    with pytest.raises(ValueError):
        parse_hex(text)


def test_decode_accepts_int_xlen():
    assert decode(0x0015051B, 64).disassembly() == "addiw a0, a0, 1"
    assert decode(0x0015051B, Xlen.X64).disassembly() == "addiw a0, a0, 1"


def test_decode_word_only_valid_on_rv64():
    with pytest.raises(DecodeError):
        decode(0x00013083, 32)
    assert decode(0x00013083, 64).disassembly() == "ld ra, 0(sp)"


def test_decode_rejects_unknown_xlen():
    with pytest.raises(ValueError):
        decode(0x00000073, 16)


def test_main_prints_disassembly(capsys):
    assert main(["--xlen", "32", "00000073", "0x0001"]) == 0
    out = capsys.readouterr().out
    assert out.splitlines() == ["ecall", "c.nop"]


def test_main_reports_errors(capsys):
    assert main(["0x0000", "00100073"]) == 1
    captured = capsys.readouterr()
    assert captured.err.startswith("Error:")
    assert captured.out.splitlines() == ["ebreak"]