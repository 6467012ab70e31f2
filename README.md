# rvdisasm

A small, dependency-free disassembler for RISC-V machine code. It turns one
hexadecimal instruction word into its assembly text and covers:

- RV32I and RV64I base integer instructions, including the `M`
  multiply/divide group
- the `A` atomic extension (`.w` and `.d` widths, and `.q` for 128-bit targets)
- single-precision floating point (`F`), including the RV64F conversions
- control and status register access (`Zicsr`)
- 16-bit compressed instructions (`C`)

The register width (32, 64 or 128 bits) selects which encodings are valid;
for example `ld` is rejected on a 32-bit target, and `c.jal` exists only on
a 32-bit one.

## Installation

```
pip install rvdisasm
```

## Command line

```
rvdisasm 00a10093
rvdisasm --xlen 64 0x0015051b
rvdisasm 0x4082 0x8082
```

Each argument is one instruction word in hexadecimal, with or without a
`0x` prefix. `--xlen` takes 32, 64 or 128 and defaults to 32. The
instruction length is taken from the low bits of the word: if both of the
two lowest bits are set it is a 32-bit instruction, otherwise a 16-bit
compressed one. Each decoded word is printed on its own line; a word that
is not hexadecimal or does not decode is reported on standard error as
`Error: ...`, and the command then exits with status 1.

## Library use

```python
from rvdisasm.disassembler import disassemble, decode, parse_hex
from rvdisasm.formats import Xlen, DecodeError

print(disassemble("00a10093", Xlen.X32))   # addi ra, sp, 10
print(disassemble("1001402f", Xlen.X128))  # lr.q ra, sp

instruction = decode(parse_hex("0x4082"), Xlen.X32)
print(instruction.disassembly())           # c.lwsp ra, 0(sp)

try:
    disassemble("0x0000", Xlen.X32)
except DecodeError as exc:
    print("not an instruction:", exc)
```

`disassemble` raises `ValueError` for text that is not hexadecimal and
`DecodeError` (a subclass of `ValueError`) for a word that is not a
recognised instruction. `instruction_length` gives the length in bytes (2
or 4) that the low bits of a word imply.

Lower-level entry points are `rvdisasm.decode16.decode_compressed` for
16-bit words and `rvdisasm.decode32.decode_standard` for 32-bit words. Both
return an instruction object (`RV32I`, `RV64I`, `Atomic`, `RVZicsr`, `RVF`
or `RVC`) holding an operation enum and its operand fields; its
`disassembly()` method, and `str()`, give the text.

Register names follow the standard ABI (`zero`, `ra`, `sp`, `a0`, ...).
`rvdisasm.formats.register_name` turns a register number into its name
(`"unknown"` outside 0 to 31), and `rvdisasm.formats.from_register` turns a
name back into a number, also accepting `xN` and `fp`, and returns `None`
for anything else. Floating-point registers are shown as `f0` to `f31`.

## What it does not do

- It decodes single instruction words only; it does not read object files
  or raw binary images, and it does not follow addresses or resolve branch
  targets to labels.
- It does not assemble text back into machine code.
- Double- and quad-precision floating-point instructions (`D`, `Q`) outside
  the compressed set, vector and other extensions are not decoded.