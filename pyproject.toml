[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rvdisasm"
version = "0.1.0"
description = "Disassembler for RISC-V machine code: RV32I/RV64I, M, A, F, Zicsr and compressed instructions"
requires-python = ">=3.10"
dependencies = []
keywords = ["risc-v", "riscv", "disassembler", "isa", "rvc", "assembly"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Disassemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rvdisasm = "rvdisasm.disassembler:main"

[tool.hatch.build.targets.wheel]
packages = ["rvdisasm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
