# tests/arch/mos6502/test_instructions.py
"""
MOS 6502 命令ハンドラの単体テスト。
命令列を$0600に配置し、Mos6502Cpuで1命令ずつ実行して結果を検証します。
"""
import pytest

from retro6502.transport.bus import Bus, RAM
from retro6502.arch.mos6502.cpu import Mos6502Cpu

# @intent:test_suite 命令ファミリごとのレジスタ・フラグ・メモリへの作用を検証します。

ORIGIN = 0x0600

@pytest.fixture
def cpu():
    bus = Bus()
    bus.register_device(0x0000, 0xFFFF, RAM(0x10000))
    return Mos6502Cpu(bus)

def run(cpu, program, steps=1, **registers):
    for i, value in enumerate(program):
        cpu.write_byte(ORIGIN + i, value)
    state = cpu.get_state()
    state.pc = ORIGIN
    for name, value in registers.items():
        setattr(state, name, value)
    cpu.restore_state(state)
    for _ in range(steps):
        cpu.step_instruction()
    return cpu.get_state()


class TestLoadStore:
    # @intent:test_case_load 0x00のロードでZセット・Nクリア、0x80でZクリア・Nセットになることを検証します。
    @pytest.mark.parametrize("value, zero, negative", [(0x00, True, False), (0x80, False, True), (0x55, False, False)])
    def test_lda_immediate_flags(self, cpu, value, zero, negative):
        state = run(cpu, [0xA9, value])
        assert state.a == value
        assert state.flag_z is zero
        assert state.flag_n is negative
        assert state.pc == 0x0602

    def test_ldx_zeropage(self, cpu):
        cpu.write_byte(0x0010, 0x80)
        state = run(cpu, [0xA6, 0x10])
        assert state.x == 0x80
        assert state.flag_n

    def test_ldy_absolute_x(self, cpu):
        cpu.write_byte(0x1235, 0x01)
        state = run(cpu, [0xBC, 0x34, 0x12], x=0x01)
        assert state.y == 0x01

    def test_lda_indirect_indexed(self, cpu):
        cpu.write_byte(0x0040, 0x00)
        cpu.write_byte(0x0041, 0x30)
        cpu.write_byte(0x3005, 0x77)
        state = run(cpu, [0xB1, 0x40], y=0x05)
        assert state.a == 0x77

    # @intent:test_case_store ストア命令はフラグに影響しないことを検証します。
    def test_sta_stx_sty(self, cpu):
        state = run(cpu, [0x85, 0x20, 0x8E, 0x00, 0x30, 0x94, 0x10], steps=3, a=0x00, x=0x81, y=0x7F)
        assert cpu.read_byte(0x0020) == 0x00
        assert cpu.read_byte(0x3000) == 0x81
        assert cpu.read_byte(0x0010 + 0x81) == 0x7F
        assert state.p == 0


class TestTransfers:
    def test_tax_tay(self, cpu):
        state = run(cpu, [0xAA, 0xA8], steps=2, a=0x80)
        assert state.x == 0x80
        assert state.y == 0x80
        assert state.flag_n

    def test_txa_tya(self, cpu):
        state = run(cpu, [0x8A], x=0x00, a=0x10)
        assert state.a == 0x00
        assert state.flag_z
        state = run(cpu, [0x98], y=0x42)
        assert state.a == 0x42
        assert not state.flag_z

    def test_tsx(self, cpu):
        state = run(cpu, [0xBA], sp=0xF0)
        assert state.x == 0xF0
        assert state.flag_n

    # @intent:test_case_txs TXSはSPにXをコピーし、Xの値でN, Zを更新することを検証します。
    def test_txs_updates_flags(self, cpu):
        state = run(cpu, [0x9A], x=0x00)
        assert state.sp == 0x00
        assert state.flag_z


class TestArithmetic:
    def test_adc_binary(self, cpu):
        state = run(cpu, [0x18, 0xA9, 0x10, 0x69, 0x20], steps=3)
        assert state.a == 0x30
        assert not state.flag_c
        assert not state.flag_z
        assert not state.flag_v

    # @intent:test_case_adc_carry C=1, A=0xFF, M=0x01 で A=0x01, Cセット, Z/Vクリアとなることを検証します。
    def test_adc_with_carry_in(self, cpu):
        state = run(cpu, [0x38, 0x69, 0x01], steps=2, a=0xFF)
        assert state.a == 0x01
        assert state.flag_c
        assert not state.flag_z
        assert not state.flag_v
        assert not state.flag_n

    def test_adc_zero_result(self, cpu):
        state = run(cpu, [0x69, 0x01], a=0xFF)
        assert state.a == 0x00
        assert state.flag_c
        assert state.flag_z

    @pytest.mark.parametrize("a, m, result, overflow", [
        (0x50, 0x50, 0xA0, True),
        (0xD0, 0x90, 0x60, True),
        (0x50, 0x90, 0xE0, False),
        (0x7F, 0x01, 0x80, True),
    ])
    def test_adc_overflow(self, cpu, a, m, result, overflow):
        state = run(cpu, [0x69, m], a=a)
        assert state.a == result
        assert state.flag_v is overflow

    def test_adc_bcd(self, cpu):
        # SED, CLC, LDA #$09, ADC #$01 -> $10
        state = run(cpu, [0xF8, 0x18, 0xA9, 0x09, 0x69, 0x01], steps=4)
        assert state.flag_d
        assert state.a == 0x10
        assert not state.flag_c

    def test_adc_bcd_carry_out(self, cpu):
        # 58 + 46 = 104 -> A=$04, C=1
        state = run(cpu, [0x69, 0x46], a=0x58, p=0x08)
        assert state.a == 0x04
        assert state.flag_c

    def test_sbc_binary(self, cpu):
        # SEC, SBC #$10 : 0x50 - 0x10 = 0x40
        state = run(cpu, [0x38, 0xE9, 0x10], steps=2, a=0x50)
        assert state.a == 0x40
        assert state.flag_c
        assert not state.flag_v

    # @intent:test_case_sbc 借りが発生するとCがクリアされ、結果がAに格納されることを検証します。
    def test_sbc_borrow(self, cpu):
        state = run(cpu, [0x38, 0xE9, 0x02], steps=2, a=0x01)
        assert state.a == 0xFF
        assert not state.flag_c
        assert state.flag_n

    def test_sbc_without_carry_subtracts_one_more(self, cpu):
        state = run(cpu, [0x18, 0xE9, 0x01], steps=2, a=0x05)
        assert state.a == 0x03
        assert state.flag_c

    def test_sbc_overflow(self, cpu):
        state = run(cpu, [0x38, 0xE9, 0x01], steps=2, a=0x80)
        assert state.a == 0x7F
        assert state.flag_v
        assert state.flag_c

    def test_sbc_bcd(self, cpu):
        # SED, SEC, $42 - $13 = $29
        state = run(cpu, [0xF8, 0x38, 0xE9, 0x13], steps=3, a=0x42)
        assert state.a == 0x29
        assert state.flag_c


class TestLogical:
    def test_and_ora_eor(self, cpu):
        state = run(cpu, [0x29, 0x0F], a=0xF3)
        assert state.a == 0x03
        state = run(cpu, [0x09, 0x80], a=0x01)
        assert state.a == 0x81
        assert state.flag_n
        state = run(cpu, [0x49, 0xFF], a=0xFF)
        assert state.a == 0x00
        assert state.flag_z

    # @intent:test_case_bit BITはAを変更せず、Z=A&M, V=M.6, N=M.7 を設定することを検証します。
    def test_bit(self, cpu):
        cpu.write_byte(0x0030, 0xC0)
        state = run(cpu, [0x24, 0x30], a=0x01)
        assert state.a == 0x01
        assert state.flag_z
        assert state.flag_v
        assert state.flag_n


class TestCompare:
    @pytest.mark.parametrize("a, m, carry, zero, negative", [
        (0x40, 0x40, True, True, False),
        (0x41, 0x40, True, False, False),
        (0x40, 0x41, False, False, True),
        (0x00, 0x80, False, False, True),
    ])
    def test_cmp(self, cpu, a, m, carry, zero, negative):
        state = run(cpu, [0xC9, m], a=a)
        assert state.flag_c is carry
        assert state.flag_z is zero
        assert state.flag_n is negative
        assert state.a == a

    def test_cpx_cpy(self, cpu):
        state = run(cpu, [0xE0, 0x10], x=0x10)
        assert state.flag_z and state.flag_c
        state = run(cpu, [0xC0, 0x20], y=0x10)
        assert not state.flag_c
        assert state.flag_n


class TestShifts:
    def test_asl_accumulator(self, cpu):
        state = run(cpu, [0x0A], a=0x81)
        assert state.a == 0x02
        assert state.flag_c
        assert not state.flag_n

    def test_lsr_memory(self, cpu):
        cpu.write_byte(0x0050, 0x01)
        state = run(cpu, [0x46, 0x50])
        assert cpu.read_byte(0x0050) == 0x00
        assert state.flag_c
        assert state.flag_z

    # @intent:test_case_rotate ROL/RORは旧Cを空いたビットに注入することを検証します。
    def test_rol_injects_carry(self, cpu):
        state = run(cpu, [0x38, 0x2A], steps=2, a=0x40)
        assert state.a == 0x81
        assert not state.flag_c
        assert state.flag_n

    def test_ror_injects_carry(self, cpu):
        cpu.write_byte(0x2000, 0x02)
        state = run(cpu, [0x38, 0x6E, 0x00, 0x20], steps=2)
        assert cpu.read_byte(0x2000) == 0x81
        assert not state.flag_c
        assert state.flag_n

    def test_ror_accumulator_carry_out(self, cpu):
        state = run(cpu, [0x18, 0x6A], steps=2, a=0x01)
        assert state.a == 0x00
        assert state.flag_c
        assert state.flag_z


class TestIncDec:
    def test_inc_dec_memory_wrap(self, cpu):
        cpu.write_byte(0x0060, 0xFF)
        state = run(cpu, [0xE6, 0x60])
        assert cpu.read_byte(0x0060) == 0x00
        assert state.flag_z
        state = run(cpu, [0xC6, 0x60])
        assert cpu.read_byte(0x0060) == 0xFF
        assert state.flag_n

    # @intent:test_case_incdec INX/DEX等はCに影響しないことを検証します。
    def test_register_inc_dec_does_not_touch_carry(self, cpu):
        state = run(cpu, [0xE8, 0xC8, 0xCA, 0xCA, 0x88], steps=5, x=0xFF, y=0x00, p=0x01)
        assert state.x == 0xFE
        assert state.y == 0x00
        assert state.flag_z
        assert state.flag_c


class TestBranches:
    # @intent:test_case_branch 条件成立時は分岐先へ、不成立時はオペランド直後へ進むことを検証します。
    @pytest.mark.parametrize("opcode, p, taken", [
        (0x90, 0x00, True),   # BCC
        (0x90, 0x01, False),
        (0xB0, 0x01, True),   # BCS
        (0xF0, 0x02, True),   # BEQ
        (0xD0, 0x02, False),  # BNE
        (0x30, 0x80, True),   # BMI
        (0x10, 0x80, False),  # BPL
        (0x50, 0x00, True),   # BVC
        (0x70, 0x00, False),  # BVS
    ])
    def test_branch(self, cpu, opcode, p, taken):
        state = run(cpu, [opcode, 0x10], p=p)
        assert state.pc == (0x0612 if taken else 0x0602)
        assert state.p == p

    def test_branch_backwards(self, cpu):
        state = run(cpu, [0xD0, 0xFC])
        assert state.pc == 0x05FE


class TestJumpsAndStack:
    def test_jmp_absolute(self, cpu):
        state = run(cpu, [0x4C, 0x00, 0x30])
        assert state.pc == 0x3000

    def test_jmp_indirect(self, cpu):
        cpu.write_byte(0x0200, 0x00)
        cpu.write_byte(0x0201, 0x40)
        state = run(cpu, [0x6C, 0x00, 0x02])
        assert state.pc == 0x4000

    # @intent:test_case_jsr_rts JSR直後のRTSでJSRの次の命令へ戻ることを検証します。
    def test_jsr_then_rts(self, cpu):
        cpu.write_byte(0x3000, 0x60)  # RTS
        state = run(cpu, [0x20, 0x00, 0x30], steps=1)
        assert state.pc == 0x3000
        assert state.sp == 0xFD
        assert cpu.read_byte(0x01FF) == 0x06  # (PC-1) の上位
        assert cpu.read_byte(0x01FE) == 0x02  # (PC-1) の下位
        cpu.step_instruction()
        state = cpu.get_state()
        assert state.pc == 0x0603
        assert state.sp == 0xFF

    def test_pha_pla(self, cpu):
        state = run(cpu, [0x48, 0xA9, 0x00, 0x68], steps=3, a=0x90)
        assert state.a == 0x90
        assert state.flag_n
        assert not state.flag_z
        assert state.sp == 0xFF

    # @intent:test_case_php_plp PHP/PLPはステータスレジスタをそのまま退避・復元することを検証します。
    def test_php_plp_verbatim(self, cpu):
        state = run(cpu, [0x08, 0x18, 0x28], steps=3, p=0xC3)
        assert cpu.read_byte(0x01FF) == 0xC3
        assert state.p == 0xC3

    # @intent:test_case_stack_wrap SP=0x00でのプッシュは0xFFへ、SP=0xFFでのポップは0x00へラップすることを検証します。
    def test_stack_wraparound(self, cpu):
        state = run(cpu, [0x48], a=0xAB, sp=0x00)
        assert cpu.read_byte(0x0100) == 0xAB
        assert state.sp == 0xFF

        cpu.write_byte(0x0100, 0x5A)
        state = run(cpu, [0x68], sp=0xFF)
        assert state.sp == 0x00
        assert state.a == 0x5A


class TestFlagInstructions:
    @pytest.mark.parametrize("opcode, initial, expected", [
        (0x18, 0xFF, 0xFE),  # CLC
        (0x38, 0x00, 0x01),  # SEC
        (0x58, 0xFF, 0xFB),  # CLI
        (0x78, 0x00, 0x04),  # SEI
        (0xB8, 0xFF, 0xBF),  # CLV
        (0xD8, 0xFF, 0xF7),  # CLD
        (0xF8, 0x00, 0x08),  # SED
    ])
    def test_set_clear(self, cpu, opcode, initial, expected):
        state = run(cpu, [opcode], p=initial)
        assert state.p == expected

    def test_nop(self, cpu):
        before = run(cpu, [0xEA], steps=0, a=0x12, x=0x34, p=0x81)
        after = run(cpu, [0xEA], a=0x12, x=0x34, p=0x81)
        assert after.replace(pc=before.pc) == before
        assert after.pc == 0x0601


class TestInterrupts:
    # @intent:test_case_brk BRKはPC+1とPを積み、Bをセットして$FFFEのベクタへ飛ぶことを検証します。
    def test_brk(self, cpu):
        cpu.write_byte(0xFFFE, 0x00)
        cpu.write_byte(0xFFFF, 0x80)
        state = run(cpu, [0x00], p=0x01)
        assert state.pc == 0x8000
        assert state.flag_b
        assert not state.flag_i
        assert state.sp == 0xFC
        assert cpu.read_byte(0x01FF) == 0x06
        assert cpu.read_byte(0x01FE) == 0x02
        assert cpu.read_byte(0x01FD) == 0x11

    def test_brk_then_rti(self, cpu):
        cpu.write_byte(0xFFFE, 0x00)
        cpu.write_byte(0xFFFF, 0x80)
        cpu.write_byte(0x8000, 0x40)  # RTI
        run(cpu, [0x00], steps=2, p=0x00)
        state = cpu.get_state()
        assert state.pc == 0x0602
        assert state.sp == 0xFF
        assert state.p == 0x10
