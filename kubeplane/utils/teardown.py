# kubeplane/utils/teardown.py
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class CompensationFailure:
    description: str
    error: Exception


class TeardownStack:
    """
    보상(compensation) 작업을 LIFO 순서로 보관합니다.

    파이프라인의 각 단계는 성공 직후 자신을 되돌리는 작업을 push하고,
    실패하거나 명시적으로 해제할 때 unwind_all()이 마지막에 넣은 것부터 실행합니다.
    """

    def __init__(self):
        self._stack: List[Tuple[str, Callable[[], object]]] = []

    def __len__(self):
        return len(self._stack)

    def push(self, compensation: Callable[[], object], description: Optional[str] = None):
        self._stack.append((description or getattr(compensation, "__name__", "compensation"), compensation))

    def unwind_all(self) -> List[CompensationFailure]:
        """
        쌓인 보상 작업을 역순으로 모두 실행합니다.

        하나가 실패해도 나머지는 계속 실행되며, 실패는 로그로 남기고
        반환 목록에 기록할 뿐 다시 raise하지 않습니다.

        Returns:
            실패한 보상 작업의 목록. 모두 성공했다면 빈 리스트.
        """
        failures = []
        while self._stack:
            description, compensation = self._stack.pop()
            logger.info("Running compensation: %s", description)
            try:
                compensation()
            except Exception as e:
                logger.warning("Compensation '%s' failed: %s", description, e, exc_info=True)
                failures.append(CompensationFailure(description, e))
        return failures
