# tests/i8080/test_instructions_alu.py
"""
8080 算術論理演算命令のテスト。
"""
import pytest


class TestArithmetic:
    # @intent:test_case_add ADD B: 結果がAに入り、全フラグが更新されることを検証します。
    def test_add_register(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x80]) # ADD B
        state = cpu.get_state()
        state.a, state.b = 0xF0, 0x20

        cpu.step()
        assert state.a == 0x10
        assert state.flag_cy
        assert not state.flag_z
        assert state.pc == 0x0001

    def test_adc_uses_carry(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x88]) # ADC B
        state = cpu.get_state()
        state.a, state.b = 0x01, 0x01
        state.flag_cy = True

        cpu.step()
        assert state.a == 0x03
        assert not state.flag_cy

    def test_add_memory(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x86]) # ADD M
        bus.write(0x2000, 0x05)
        state = cpu.get_state()
        state.hl = 0x2000
        state.a = 0x03

        cpu.step()
        assert state.a == 0x08

    def test_sub_and_sbb(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x90, 0x98]) # SUB B ; SBB B
        state = cpu.get_state()
        state.a, state.b = 0x02, 0x03

        cpu.step()
        assert state.a == 0xFF
        assert state.flag_cy
        assert state.flag_s

        cpu.step() # 0xFF - 0x03 - 1
        assert state.a == 0xFB
        assert not state.flag_cy

    # @intent:test_case_cmp CMP A は Z=1, CY=0 となり、Aは変化しないことを検証します。
    def test_compare_self(self, machine, load_program):
        cpu, bus = machine
        state = cpu.get_state()
        for value in range(0x100):
            load_program(cpu, bus, [0xBF]) # CMP A
            state.a = value
            state.flag_cy = True

            cpu.step()
            assert state.a == value
            assert state.flag_z
            assert not state.flag_cy

    def test_compare_immediate(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0xFE, 0x50]) # CPI 50h
        state = cpu.get_state()
        state.a = 0x40

        cpu.step()
        assert state.a == 0x40
        assert state.flag_cy # A < data
        assert not state.flag_z
        assert state.pc == 0x0002

    @pytest.mark.parametrize("program, a, expected, cy", [
        ([0xC6, 0x01], 0xFF, 0x00, True),   # ADI
        ([0xCE, 0x01], 0x10, 0x12, None),   # ACI (CY=1)
        ([0xD6, 0x01], 0x00, 0xFF, True),   # SUI
        ([0xDE, 0x01], 0x05, 0x03, False),  # SBI (CY=1)
        ([0xE6, 0x0F], 0xAB, 0x0B, False),  # ANI
        ([0xEE, 0xFF], 0xAA, 0x55, False),  # XRI
        ([0xF6, 0x0F], 0xA0, 0xAF, False),  # ORI
    ])
    def test_immediate_operations(self, machine, load_program, program, a, expected, cy):
        cpu, bus = machine
        load_program(cpu, bus, program)
        state = cpu.get_state()
        state.a = a
        state.flag_cy = True

        cpu.step()
        assert state.a == expected
        if cy is not None:
            assert state.flag_cy == cy
        assert state.pc == 0x0002


class TestLogical:
    # @intent:test_case_logic 論理演算はCYとACをクリアすることを検証します。
    @pytest.mark.parametrize("opcode, expected", [(0xA0, 0x0C), (0xA8, 0x30), (0xB0, 0x3C)]) # ANA B, XRA B, ORA B
    def test_logical_register(self, machine, load_program, opcode, expected):
        cpu, bus = machine
        load_program(cpu, bus, [opcode])
        state = cpu.get_state()
        state.a, state.b = 0x0C, 0x3C
        state.flag_cy = True
        state.flag_ac = True

        cpu.step()
        assert state.a == expected
        assert not state.flag_cy
        assert not state.flag_ac

    def test_xra_a_clears_accumulator(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0xAF]) # XRA A
        state = cpu.get_state()
        state.a = 0x5A

        cpu.step()
        assert state.a == 0
        assert state.flag_z
        assert state.flag_p


class TestIncrementDecrement:
    # @intent:test_case_inr_dcr INRとDCRは互いに打ち消し合い、CYを変化させないことを検証します。
    @pytest.mark.parametrize("carry", [False, True])
    def test_inr_then_dcr_restores_value(self, machine, load_program, carry):
        cpu, bus = machine
        for value in range(0x100):
            load_program(cpu, bus, [0x04, 0x05]) # INR B ; DCR B
            state = cpu.get_state()
            state.b = value
            state.flag_cy = carry

            cpu.step()
            assert state.flag_cy == carry
            cpu.step()
            assert state.b == value
            assert state.flag_cy == carry

    def test_inr_memory(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x34]) # INR M
        bus.write(0x3000, 0xFF)
        cpu.get_state().hl = 0x3000

        cpu.step()
        assert bus.peek(0x3000) == 0x00
        assert cpu.get_state().flag_z

    def test_inx_dcx(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x03, 0x1B, 0x33]) # INX B ; DCX D ; INX SP
        state = cpu.get_state()
        state.bc = 0xFFFF
        state.de = 0x0000
        state.sp = 0xFFFF
        state.flag_z = False

        cpu.step()
        cpu.step()
        cpu.step()
        assert state.bc == 0x0000
        assert state.de == 0xFFFF
        assert state.sp == 0x0000
        assert not state.flag_z # INX/DCXはフラグを変化させない

    def test_dad_sets_only_carry(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x09, 0x29]) # DAD B ; DAD H
        state = cpu.get_state()
        state.hl = 0xFFFF
        state.bc = 0x0001
        state.flag_z = True

        cpu.step()
        assert state.hl == 0x0000
        assert state.flag_cy
        assert state.flag_z

        state.hl = 0x1234
        cpu.step()
        assert state.hl == 0x2468
        assert not state.flag_cy


class TestRotateAndCarry:
    def test_rlc_rrc(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x07, 0x0F]) # RLC ; RRC
        state = cpu.get_state()
        state.a = 0x81

        cpu.step()
        assert state.a == 0x03
        assert state.flag_cy
        cpu.step()
        assert state.a == 0x81
        assert state.flag_cy

    def test_ral_rar(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x17, 0x1F]) # RAL ; RAR
        state = cpu.get_state()
        state.a = 0x80
        state.flag_cy = False

        cpu.step()
        assert state.a == 0x00
        assert state.flag_cy
        cpu.step()
        assert state.a == 0x80
        assert not state.flag_cy

    def test_cma_stc_cmc(self, machine, load_program):
        cpu, bus = machine
        load_program(cpu, bus, [0x2F, 0x37, 0x3F]) # CMA ; STC ; CMC
        state = cpu.get_state()
        state.a = 0x0F

        cpu.step()
        assert state.a == 0xF0
        assert not state.flag_cy
        cpu.step()
        assert state.flag_cy
        cpu.step()
        assert not state.flag_cy
