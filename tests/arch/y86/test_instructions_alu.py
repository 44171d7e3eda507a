import unittest
from y86_core_tracer.common.types import to_unsigned64
from y86_core_tracer.core.errors import InstructionError
from y86_core_tracer.core.state import create_initial_state
from y86_core_tracer.transport.memory import Memory
from y86_core_tracer.arch.y86.cpu import Y86Cpu
from y86_core_tracer.arch.y86.instructions.alu import alu_compute
from y86_core_tracer.common.types import AluOp

INT64_MAX = 0x7FFFFFFFFFFFFFFF
INT64_MIN = -0x8000000000000000

class TestY86AluInstructions(unittest.TestCase):
    def setUp(self):
        self.memory = Memory(0x1000)
        self.state = create_initial_state(self.memory, 0)
        self.cpu = Y86Cpu(self.state)

    def _execute(self, opcode, operands):
        self.memory.write(0x0000, opcode)
        for i, b in enumerate(operands):
            self.memory.write(0x0001 + i, b)
        self.state.pc = 0x0000
        return self.cpu.step()

    def test_addq(self):
        self.state.registers.rax = 3
        self.state.registers.rbx = 4
        # addq %rbx, %rax
        op = self._execute(0x60, [0x30])
        self.assertEqual(op.text, "addq %rbx, %rax")
        self.assertEqual(self.state.registers.rax, 7)
        self.assertEqual(self.state.registers.rbx, 4)
        self.assertFalse(self.state.flags.zf)
        self.assertFalse(self.state.flags.sf)
        self.assertFalse(self.state.flags.of)
        self.assertEqual(self.state.pc, 2)

    def test_addq_overflow(self):
        self.state.registers.rax = INT64_MAX
        self.state.registers.rbx = 1
        # addq %rbx, %rax -> 0x8000000000000000
        self._execute(0x60, [0x30])
        self.assertEqual(to_unsigned64(self.state.registers.rax), 0x8000000000000000)
        self.assertTrue(self.state.flags.of)
        self.assertTrue(self.state.flags.sf)
        self.assertFalse(self.state.flags.zf)

    def test_subq(self):
        self.state.registers.rax = 5
        self.state.registers.rcx = 7
        # subq %rcx, %rax -> rax = 5 - 7
        op = self._execute(0x61, [0x10])
        self.assertEqual(op.mnemonic, "subq")
        self.assertEqual(self.state.registers.rax, -2)
        self.assertTrue(self.state.flags.sf)
        self.assertFalse(self.state.flags.of)

    def test_subq_zero(self):
        self.state.flags.zf = False
        self.state.registers.rax = 9
        self.state.registers.rcx = 9
        self._execute(0x61, [0x10])
        self.assertEqual(self.state.registers.rax, 0)
        self.assertTrue(self.state.flags.zf)

    def test_subq_overflow(self):
        self.state.registers.rax = INT64_MIN
        self.state.registers.rcx = 1
        # INT64_MIN - 1 -> INT64_MAX (Signed overflow)
        self._execute(0x61, [0x10])
        self.assertEqual(self.state.registers.rax, INT64_MAX)
        self.assertTrue(self.state.flags.of)
        self.assertFalse(self.state.flags.sf)

    def test_andq_clears_overflow(self):
        self.state.flags.of = True
        self.state.registers.rax = 0b1100
        self.state.registers.rdx = 0b1010
        # andq %rdx, %rax
        self._execute(0x62, [0x20])
        self.assertEqual(self.state.registers.rax, 0b1000)
        self.assertFalse(self.state.flags.of)

    def test_xorq_self(self):
        self.state.registers.rax = 0x1234
        # xorq %rax, %rax
        self._execute(0x63, [0x00])
        self.assertEqual(self.state.registers.rax, 0)
        self.assertTrue(self.state.flags.zf)
        self.assertFalse(self.state.flags.sf)

    def test_invalid_function_code(self):
        with self.assertRaises(InstructionError):
            self._execute(0x64, [0x00])
        self.assertEqual(self.state.pc, 0)

    def test_rnone_operand(self):
        with self.assertRaises(InstructionError):
            self._execute(0x60, [0xF0])

    def test_alu_compute_overflow_property(self):
        # 結果の符号が両オペランドと異なる場合だけOFが立つ
        for a, b in [(INT64_MAX, INT64_MAX), (INT64_MIN, -1), (1, 2), (-1, -2), (INT64_MAX, INT64_MIN)]:
            result, overflow = alu_compute(AluOp.ADD, a, b)
            expected = not (INT64_MIN <= a + b <= INT64_MAX)
            self.assertEqual(overflow, expected, (a, b))

if __name__ == '__main__':
    unittest.main()
