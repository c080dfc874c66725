# tests/utils/test_readiness.py
import pytest

from kubeplane.services import exceptions as service_exceptions
from kubeplane.services.exceptions import TerminalError, TransientError
from kubeplane.utils.readiness import CancelToken, PollCancelledError, PollTimeoutError, ReadinessPoller

# ===================================================================
#  테스트용 check 함수
# ===================================================================

class ScriptedCheck:
    """미리 정한 (transient, terminal) 결과를 차례로 반환하고, 마지막 결과를 계속 반복합니다."""
    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]

NOT_READY = (TransientError("not ready"), None)
READY = (None, None)

@pytest.fixture
def poller(fake_clock) -> ReadinessPoller:
    return ReadinessPoller(clock=fake_clock)

# ===================================================================
#  ReadinessPoller 테스트 스위트
# ===================================================================
class TestReadinessPoller:
    def test_succeeds_after_three_transient_failures(self, poller, fake_clock, clocked_token):
        """일시적 실패 3번 후 성공하는 check는 약 3 단위 시간 뒤 성공합니다."""
        # === Arrange ===
        check = ScriptedCheck(NOT_READY, NOT_READY, NOT_READY, READY)

        # === Act ===
        poller.poll_immediate(check, interval=1, timeout=10, cancel_token=clocked_token)

        # === Assert ===
        assert check.calls == 4
        assert fake_clock.now == pytest.approx(3)

    def test_poll_waits_one_interval_before_first_check(self, poller, fake_clock, clocked_token):
        """기본 poll은 첫 check 전에 한 번 기다립니다."""
        check = ScriptedCheck(READY)

        poller.poll(check, interval=2, timeout=10, cancel_token=clocked_token)

        assert check.calls == 1
        assert clocked_token.waits == [2]
        assert fake_clock.now == 2

    def test_poll_immediate_fast_path_does_not_wait(self, poller, fake_clock, clocked_token):
        """이미 준비된 조건이면 poll_immediate는 전혀 기다리지 않습니다."""
        check = ScriptedCheck(READY)

        poller.poll_immediate(check, interval=5, timeout=10, cancel_token=clocked_token)

        assert check.calls == 1
        assert clocked_token.waits == []

    def test_terminal_error_returns_on_first_invocation(self, poller, fake_clock, clocked_token):
        """terminal 오류는 남은 시간과 상관없이 첫 호출에서 바로 반환됩니다."""
        # === Arrange ===
        fatal = TerminalError("cluster is gone")
        check = ScriptedCheck((None, fatal))

        # === Act & Assert ===
        with pytest.raises(TerminalError) as exc_info:
            poller.poll_immediate(check, interval=1, timeout=10, cancel_token=clocked_token)

        assert exc_info.value is fatal
        assert check.calls == 1
        assert fake_clock.now == 0

    def test_terminal_error_wins_over_transient(self, poller, clocked_token):
        check = ScriptedCheck((TransientError("slow"), TerminalError("broken")))

        with pytest.raises(TerminalError, match="broken"):
            poller.poll_immediate(check, interval=1, timeout=10, cancel_token=clocked_token)

        assert check.calls == 1

    @pytest.mark.parametrize("interval, timeout", [(1, 10), (3, 10), (4, 4)])
    def test_always_transient_times_out_within_one_interval(self, poller, fake_clock, clocked_token, interval, timeout):
        """계속 일시적 오류면 timeout 이상, timeout + interval 이하의 시점에 Timeout이 발생합니다."""
        # === Arrange ===
        last = TransientError("still provisioning")
        check = ScriptedCheck((last, None))

        # === Act ===
        with pytest.raises(PollTimeoutError) as exc_info:
            poller.poll(check, interval=interval, timeout=timeout, cancel_token=clocked_token)

        # === Assert ===
        assert timeout <= fake_clock.now <= timeout + interval
        assert exc_info.value.last_error is last
        assert exc_info.value.__cause__ is last

    def test_cancelled_token_stops_before_next_check(self, poller, clocked_token):
        """check 도중 취소되면 다음 check 없이 Cancelled가 발생합니다."""
        # === Arrange ===
        # 시나리오: 두 번째 check가 진행되는 동안 호출자가 취소
        calls = []
        def check():
            calls.append(1)
            if len(calls) == 2:
                clocked_token.cancel()
            return NOT_READY

        # === Act & Assert ===
        with pytest.raises(PollCancelledError):
            poller.poll_immediate(check, interval=1, timeout=100, cancel_token=clocked_token)
        assert len(calls) == 2

    def test_cancellation_is_distinct_from_timeout(self, poller, clocked_token):
        clocked_token.cancel()
        check = ScriptedCheck(NOT_READY)

        with pytest.raises(PollCancelledError) as exc_info:
            poller.poll(check, interval=1, timeout=0, cancel_token=clocked_token)

        assert not isinstance(exc_info.value, PollTimeoutError)
        assert check.calls == 0

    def test_real_token_wakes_up_on_cancel(self):
        """실제 CancelToken은 대기 중 취소되면 interval을 다 채우지 않고 깨어납니다."""
        import threading
        import time

        token = CancelToken()
        threading.Timer(0.05, token.cancel).start()
        started = time.monotonic()

        with pytest.raises(PollCancelledError):
            ReadinessPoller().poll(ScriptedCheck(NOT_READY), interval=30, timeout=60, cancel_token=token)

        assert time.monotonic() - started < 5

def test_poll_errors_are_shared_with_service_layer():
    """서비스 계층은 폴러가 정의한 예외 클래스를 그대로 노출합니다."""
    assert service_exceptions.PollTimeoutError is PollTimeoutError
    assert service_exceptions.PollCancelledError is PollCancelledError
