# tests/i8080/test_instructions_load.py
"""
8080 データ転送命令およびスタック命令のテスト。
"""
import pytest

from i8080_tracer.core.errors import OutOfBoundsAddress
from i8080_tracer.transport.bus import Bus, RAM
from i8080_tracer.i8080.cpu import I8080Cpu


class TestMove:
    def test_mov_register_to_register(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x41]) # MOV B,C
        cpu.get_state().c = 0x99

        cpu.step()
        assert cpu.get_state().b == 0x99

    # @intent:test_case_m_register Mは毎回HLが指すメモリに解決されることを検証します。
    def test_mov_through_m(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x77, 0x23, 0x7E]) # MOV M,A ; INX H ; MOV A,M
        bus.write(0x4001, 0x5A)
        state = cpu.get_state()
        state.a = 0xA5
        state.hl = 0x4000

        cpu.step()
        assert bus.peek(0x4000) == 0xA5
        cpu.step()
        cpu.step()
        assert state.a == 0x5A

    def test_mvi(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x06, 0x12, 0x36, 0x34]) # MVI B,12h ; MVI M,34h
        cpu.get_state().hl = 0x2000

        cpu.step()
        assert cpu.get_state().b == 0x12
        assert cpu.get_state().pc == 0x0002
        cpu.step()
        assert bus.peek(0x2000) == 0x34

    def test_lxi(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x21, 0x34, 0x12, 0x31, 0x00, 0xF0]) # LXI H,1234h ; LXI SP,F000h
        cpu.step()
        cpu.step()
        assert cpu.get_state().hl == 0x1234
        assert cpu.get_state().sp == 0xF000
        assert cpu.get_state().pc == 0x0006

    # @intent:test_case_m_oob Mの実効アドレスがメモリ外の場合、OutOfBoundsAddressが発生することを検証します。
    def test_m_out_of_bounds(self):
        bus = Bus()
        bus.register_device(0x0000, 0x0FFF, RAM(0x1000))
        cpu = I8080Cpu(bus)
        bus.write(0x0000, 0x7E) # MOV A,M
        cpu.get_state().hl = 0x2000

        with pytest.raises(OutOfBoundsAddress) as excinfo:
            cpu.step()
        assert excinfo.value.address == 0x2000
        assert cpu.get_state().pc == 0x0000


class TestDirectAndIndirect:
    def test_lda_sta(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x3A, 0x00, 0x30, 0x32, 0x01, 0x30]) # LDA 3000h ; STA 3001h
        bus.write(0x3000, 0x77)

        cpu.step()
        assert cpu.get_state().a == 0x77
        cpu.step()
        assert bus.peek(0x3001) == 0x77

    def test_lhld_shld(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x2A, 0x00, 0x30, 0x22, 0x10, 0x30]) # LHLD 3000h ; SHLD 3010h
        bus.write(0x3000, 0xCD)
        bus.write(0x3001, 0xAB)

        cpu.step()
        assert cpu.get_state().hl == 0xABCD
        cpu.step()
        assert bus.peek(0x3010) == 0xCD
        assert bus.peek(0x3011) == 0xAB

    def test_ldax_stax(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x0A, 0x12]) # LDAX B ; STAX D
        state = cpu.get_state()
        state.bc = 0x3000
        state.de = 0x3100
        bus.write(0x3000, 0x42)

        cpu.step()
        assert state.a == 0x42
        cpu.step()
        assert bus.peek(0x3100) == 0x42

    def test_xchg(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0xEB]) # XCHG
        state = cpu.get_state()
        state.hl, state.de = 0x1111, 0x2222

        cpu.step()
        assert state.hl == 0x2222
        assert state.de == 0x1111


class TestStack:
    # @intent:test_case_push_pop PUSHの直後にPOPすると、ペアの値とSPが元に戻ることを検証します。
    @pytest.mark.parametrize("push, pop, attr", [
        (0xC5, 0xC1, "bc"),
        (0xD5, 0xD1, "de"),
        (0xE5, 0xE1, "hl"),
    ])
    def test_push_pop_round_trip(self, machine, load_program, push, pop, attr):
        cpu, bus = machine
        load_program(cpu, bus, [push, pop])
        state = cpu.get_state()
        state.sp = 0xF000
        setattr(state, attr, 0xBEEF)

        cpu.step()
        assert state.sp == 0xEFFE
        setattr(state, attr, 0x0000)
        cpu.step()
        assert getattr(state, attr) == 0xBEEF
        assert state.sp == 0xF000

    # @intent:test_case_byte_order PUSHは上位バイトをSP-1、下位バイトをSP-2に置くことを検証します。
    def test_push_byte_order(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0xC5]) # PUSH B
        state = cpu.get_state()
        state.sp = 0x2000
        state.bc = 0x1234

        cpu.step()
        assert bus.peek(0x1FFF) == 0x12
        assert bus.peek(0x1FFE) == 0x34
        assert state.sp == 0x1FFE

    def test_push_pop_psw(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0xF5, 0xF1]) # PUSH PSW ; POP PSW
        state = cpu.get_state()
        state.sp = 0x2000
        state.a = 0x80
        state.flag_s = True
        state.flag_cy = True

        cpu.step()
        assert bus.peek(0x1FFF) == 0x80
        assert bus.peek(0x1FFE) == 0x83 # S | 常に1のビット | CY
        state.a = 0
        state.f = 0
        cpu.step()
        assert state.a == 0x80
        assert state.flag_s
        assert state.flag_cy
        assert not state.flag_z

    def test_xthl(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0xE3]) # XTHL
        state = cpu.get_state()
        state.sp = 0x2000
        state.hl = 0x1234
        bus.write(0x2000, 0xCD)
        bus.write(0x2001, 0xAB)

        cpu.step()
        assert state.hl == 0xABCD
        assert bus.peek(0x2000) == 0x34
        assert bus.peek(0x2001) == 0x12
        assert state.sp == 0x2000

    def test_sphl(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0xF9]) # SPHL
        cpu.get_state().hl = 0x4321

        cpu.step()
        assert cpu.get_state().sp == 0x4321

    # @intent:test_case_sp_wrap SPの演算はメモリサイズを法として回り込むことを検証します。
    def test_push_wraps_stack_pointer(self):
        bus = Bus()
        bus.register_device(0x0000, 0x0FFF, RAM(0x1000))
        cpu = I8080Cpu(bus)
        bus.write(0x0000, 0xC5) # PUSH B
        state = cpu.get_state()
        state.sp = 0x0000
        state.bc = 0xAABB

        cpu.step()
        assert state.sp == 0x0FFE
        assert bus.peek(0x0FFF) == 0xAA
        assert bus.peek(0x0FFE) == 0xBB
