"""
LC-3 Virtual Machine: Instruction Decoder

Maps a 16-bit instruction word to one of a closed set of instruction
variants. Bits 15-12 select the opcode; the remaining fields depend on
the opcode:

  opcode  mnem   layout (bit ranges)
  0000    BR     n z p (11-9)   PCoffset9 (8-0)
  0001    ADD    DR (11-9) SR1 (8-6) 0 00 SR2 (2-0)  |  1 imm5 (4-0)
  0010    LD     DR (11-9) PCoffset9
  0011    ST     SR (11-9) PCoffset9
  0100    JSR    1 PCoffset11 (10-0)  |  0 00 BaseR (8-6) 000000
  0101    AND    same as ADD
  0110    LDR    DR (11-9) BaseR (8-6) offset6 (5-0)
  0111    STR    SR (11-9) BaseR (8-6) offset6 (5-0)
  1000    RTI    unused: no supervisor mode
  1001    NOT    DR (11-9) SR (8-6) 111111
  1010    LDI    DR (11-9) PCoffset9
  1011    STI    SR (11-9) PCoffset9
  1100    JMP    000 BaseR (8-6) 000000   (RET = JMP R7)
  1101    RES    reserved
  1110    LEA    DR (11-9) PCoffset9
  1111    TRAP   0000 trapvect8 (7-0)

Offsets and immediates are sign-extended here, once, so the executor
only ever sees 16-bit words.
"""

from dataclasses import dataclass

from .alu import sign_extend, field

# Opcodes
OP_BR   = 0x0
OP_ADD  = 0x1
OP_LD   = 0x2
OP_ST   = 0x3
OP_JSR  = 0x4
OP_AND  = 0x5
OP_LDR  = 0x6
OP_STR  = 0x7
OP_RTI  = 0x8
OP_NOT  = 0x9
OP_LDI  = 0xA
OP_STI  = 0xB
OP_JMP  = 0xC
OP_RES  = 0xD
OP_LEA  = 0xE
OP_TRAP = 0xF

MNEMONICS = ('BR', 'ADD', 'LD', 'ST', 'JSR', 'AND', 'LDR', 'STR',
             'RTI', 'NOT', 'LDI', 'STI', 'JMP', 'RES', 'LEA', 'TRAP')


# ──────────────────────────────────────────────
# Instruction variants
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Instruction:
    word: int

    @property
    def mnemonic(self) -> str:
        return MNEMONICS[self.word >> 12]


@dataclass(frozen=True)
class Add(Instruction):
    dr: int
    sr1: int
    imm: bool
    sr2: int = 0
    imm5: int = 0


@dataclass(frozen=True)
class And(Instruction):
    dr: int
    sr1: int
    imm: bool
    sr2: int = 0
    imm5: int = 0


@dataclass(frozen=True)
class Not(Instruction):
    dr: int
    sr: int


@dataclass(frozen=True)
class Br(Instruction):
    cond: int       # n z p mask, same bit order as COND
    offset: int


@dataclass(frozen=True)
class Jmp(Instruction):
    base: int


@dataclass(frozen=True)
class Jsr(Instruction):
    long: bool      # True: PC-relative JSR, False: JSRR through BaseR
    offset: int = 0
    base: int = 0


@dataclass(frozen=True)
class Ld(Instruction):
    dr: int
    offset: int


@dataclass(frozen=True)
class Ldi(Instruction):
    dr: int
    offset: int


@dataclass(frozen=True)
class Ldr(Instruction):
    dr: int
    base: int
    offset: int


@dataclass(frozen=True)
class Lea(Instruction):
    dr: int
    offset: int


@dataclass(frozen=True)
class St(Instruction):
    sr: int
    offset: int


@dataclass(frozen=True)
class Sti(Instruction):
    sr: int
    offset: int


@dataclass(frozen=True)
class Str(Instruction):
    sr: int
    base: int
    offset: int


@dataclass(frozen=True)
class Trap(Instruction):
    vector: int


@dataclass(frozen=True)
class Illegal(Instruction):
    """RTI or the reserved opcode. Executing it is fatal."""
    opcode: int


# ──────────────────────────────────────────────
# Field decoders, one per opcode
# ──────────────────────────────────────────────

def _alu_fields(word: int) -> dict:
    imm = bool(field(word, 5, 5))
    fields = dict(word=word, dr=field(word, 11, 9), sr1=field(word, 8, 6), imm=imm)
    if imm:
        fields['imm5'] = sign_extend(word, 5)
    else:
        fields['sr2'] = field(word, 2, 0)
    return fields


def _decode_add(word):
    return Add(**_alu_fields(word))


def _decode_and(word):
    return And(**_alu_fields(word))


def _decode_not(word):
    return Not(word, dr=field(word, 11, 9), sr=field(word, 8, 6))


def _decode_br(word):
    return Br(word, cond=field(word, 11, 9), offset=sign_extend(word, 9))


def _decode_jmp(word):
    return Jmp(word, base=field(word, 8, 6))


def _decode_jsr(word):
    if field(word, 11, 11):
        return Jsr(word, long=True, offset=sign_extend(word, 11))
    return Jsr(word, long=False, base=field(word, 8, 6))


def _pc_relative(cls):
    def decode_fn(word):
        return cls(word, field(word, 11, 9), sign_extend(word, 9))
    return decode_fn


def _base_relative(cls):
    def decode_fn(word):
        return cls(word, field(word, 11, 9), field(word, 8, 6), sign_extend(word, 6))
    return decode_fn


def _decode_trap(word):
    return Trap(word, vector=field(word, 7, 0))


def _decode_illegal(word):
    return Illegal(word, opcode=word >> 12)


_DECODERS = (
    _decode_br,                 # 0x0 BR
    _decode_add,                # 0x1 ADD
    _pc_relative(Ld),           # 0x2 LD
    _pc_relative(St),           # 0x3 ST
    _decode_jsr,                # 0x4 JSR
    _decode_and,                # 0x5 AND
    _base_relative(Ldr),        # 0x6 LDR
    _base_relative(Str),        # 0x7 STR
    _decode_illegal,            # 0x8 RTI
    _decode_not,                # 0x9 NOT
    _pc_relative(Ldi),          # 0xA LDI
    _pc_relative(Sti),          # 0xB STI
    _decode_jmp,                # 0xC JMP
    _decode_illegal,            # 0xD RES
    _pc_relative(Lea),          # 0xE LEA
    _decode_trap,               # 0xF TRAP
)


def decode(word: int) -> Instruction:
    """Decode a 16-bit instruction word into its variant."""
    word &= 0xFFFF
    return _DECODERS[word >> 12](word)
