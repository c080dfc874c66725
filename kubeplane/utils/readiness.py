# kubeplane/utils/readiness.py
import logging
import threading
import time
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

# check()는 (transient, terminal) 쌍을 반환합니다. 둘 다 None이면 조건 충족.
CheckResult = Tuple[Optional[BaseException], Optional[BaseException]]
Check = Callable[[], CheckResult]


class PollTimeoutError(Exception):
    """일시적인 오류만 관측된 채로 대기 시간이 초과되었을 때"""
    def __init__(self, message: str, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.last_error = last_error


class PollCancelledError(Exception):
    """호출자가 대기를 취소했을 때"""
    pass


class CancelToken:
    """
    프로비저닝 실행을 취소하기 위한 토큰.

    threading.Event를 감싸므로 wait()는 바쁜 대기(busy-wait) 없이 잠들어 있다가
    cancel()이 호출되는 즉시 깨어납니다.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """최대 seconds 동안 대기합니다. 대기 중 취소되었으면 True를 반환합니다."""
        return self._event.wait(seconds)


class ReadinessPoller:
    """
    조건이 충족되거나 시간이 초과될 때까지 check를 반복 호출합니다.

    공유 상태를 갖지 않으며, 시계(clock)만 생성자로 주입받습니다.
    나머지 값(check, interval, timeout, 취소 토큰)은 매 호출마다 명시적으로 전달합니다.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock

    def poll(self, check: Check, interval: float, timeout: float,
             cancel_token: Optional[CancelToken] = None, description: str = "condition") -> None:
        """
        interval만큼 기다린 뒤 첫 check를 호출하고, 이후 조건이 충족될 때까지 반복합니다.

        Args:
            check: (transient, terminal) 오류 쌍을 반환하는 함수.
            interval: 재시도 간격 (초).
            timeout: 전체 대기 시간 한도 (초).
            cancel_token: 취소 토큰. None이면 취소되지 않습니다.
            description: 로그에 남길 대기 대상 설명.

        Raises:
            PollTimeoutError: 일시적 오류만 관측된 채로 timeout이 지났을 때.
            PollCancelledError: cancel_token이 취소되었을 때.
            Exception: check가 반환한 terminal 오류 그대로.
        """
        self._run(check, interval, timeout, cancel_token, description, immediate=False)

    def poll_immediate(self, check: Check, interval: float, timeout: float,
                       cancel_token: Optional[CancelToken] = None, description: str = "condition") -> None:
        """poll()과 같지만 첫 대기 전에 check를 한 번 즉시 호출합니다."""
        self._run(check, interval, timeout, cancel_token, description, immediate=True)

    def _run(self, check, interval, timeout, cancel_token, description, immediate):
        token = cancel_token or CancelToken()
        start = self.clock()
        attempt = 0

        if not immediate and token.wait(interval):
            raise PollCancelledError(f"waiting for {description} was cancelled")

        while True:
            if token.cancelled:
                raise PollCancelledError(f"waiting for {description} was cancelled")

            attempt += 1
            transient, terminal = check()
            if terminal is not None:
                logger.warning("Waiting for %s failed permanently after %d attempt(s): %s",
                               description, attempt, terminal)
                raise terminal
            if transient is None:
                logger.info("%s reached after %d attempt(s)", description, attempt)
                return

            elapsed = self.clock() - start
            logger.debug("Waiting for %s (attempt %d, %.1fs elapsed): %s",
                         description, attempt, elapsed, transient)
            if elapsed >= timeout:
                raise PollTimeoutError(
                    f"timed out after {elapsed:.1f}s waiting for {description}: {transient}",
                    last_error=transient,
                ) from transient

            if token.wait(interval):
                raise PollCancelledError(f"waiting for {description} was cancelled")
