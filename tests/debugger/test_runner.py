# tests/debugger/test_runner.py
"""
y86_core_tracer.debugger.runnerモジュールの単体テスト。
QTimerによる連続実行を、QCoreApplicationのイベントループ上で検証します。
"""
import pytest
from PySide6.QtCore import QCoreApplication, QEventLoop, QTimer

from y86_core_tracer.common.types import StatusCode
from y86_core_tracer.debugger.debugger import Debugger, SessionState
from y86_core_tracer.debugger.runner import DEFAULT_TICK_INTERVAL_MS, RunClock

# 0x000: irmovq $10, %rax / 0x00a: nop / 0x00b: nop / 0x00c: halt
NOP_PROGRAM = "0x000: 30f00a00000000000000\n0x00a: 10\n0x00b: 10\n0x00c: 00"


@pytest.fixture(scope="module")
def app():
    return QCoreApplication.instance() or QCoreApplication([])


def wait_for_finished(clock, timeout_ms=5000):
    loop = QEventLoop()
    clock.finished.connect(loop.quit)
    QTimer.singleShot(timeout_ms, loop.quit)
    loop.exec()


class TestRunClock:
    @pytest.fixture
    def debugger(self):
        return Debugger()

    def test_default_interval(self):
        assert DEFAULT_TICK_INTERVAL_MS == 100

    # @intent:test_case_start 進められない状態ではタイマーが起動しないことを検証します。
    def test_start_without_program(self, app, debugger):
        clock = RunClock(debugger, interval_ms=0)
        assert clock.start() is False
        assert clock.is_active() is False

    # @intent:test_case_run ティックごとにstepped、停止時にfinishedが通知されることを検証します。
    def test_runs_to_halt(self, app, debugger):
        debugger.load_program(NOP_PROGRAM)
        clock = RunClock(debugger, interval_ms=0)
        cycles = []
        clock.stepped.connect(cycles.append)

        assert clock.start() is True
        wait_for_finished(clock)

        assert cycles == [1, 2, 3, 4]
        assert clock.is_active() is False
        assert debugger.get_status() == StatusCode.HLT
        assert debugger.is_run_active() is False

    # @intent:test_case_breakpoint ブレークポイントで連続実行が終了することを検証します。
    def test_stops_at_breakpoint(self, app, debugger):
        debugger.load_program(NOP_PROGRAM)
        debugger.add_breakpoint(0x00B)
        clock = RunClock(debugger, interval_ms=0)
        clock.start()
        wait_for_finished(clock)

        assert debugger.get_pc() == 0x00B
        assert debugger.get_session_state() == SessionState.BREAKPOINT_PAUSED

    # @intent:test_case_pause pause()でタイマーとデバッガの連続実行が両方停止することを検証します。
    def test_pause(self, app, debugger):
        debugger.load_program(NOP_PROGRAM)
        clock = RunClock(debugger, interval_ms=1000)
        clock.start()
        assert clock.is_active() is True
        clock.pause()
        assert clock.is_active() is False
        assert debugger.is_run_active() is False
        assert debugger.get_cycle() == 0

    # @intent:test_case_build SystemBuilderが設定のティック間隔でRunClockを構築することを検証します。
    def test_build_system(self, app):
        from y86_core_tracer.config.builder import SystemBuilder
        from y86_core_tracer.config.models import SimulatorConfig

        debugger, clock = SystemBuilder().build_system(SimulatorConfig(tick_interval_ms=0))
        debugger.load_program(NOP_PROGRAM)
        assert clock.start() is True
        wait_for_finished(clock)
        assert debugger.get_status() == StatusCode.HLT
