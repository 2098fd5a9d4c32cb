"""
Illustrative seed data.

Used on the very first start, when no snapshot exists yet. Tests should
pass an explicit seed instead of relying on these records.
"""

import datetime as dt
from typing import Callable, Optional

from bizbook.models.finance import VENDOR_CATEGORY, Expense, FinanceState, Revenue, Vendor
from bizbook.models.task import Task, TaskPriority, TaskState, TaskStatus


def sample_finance_state(id_factory: Callable[[], str]) -> FinanceState:
    vendors = (
        Vendor(id=id_factory(), name="국내 공급업체", category="주요 거래처", contact_info="010-1234-5678"),
        Vendor(id=id_factory(), name="해외 공급업체", category="주요 거래처", contact_info="+1-234-567-8900"),
        Vendor(id=id_factory(), name="물류 서비스", category="서비스 제공업체", contact_info="02-345-6789"),
    )

    expenses = (
        Expense(
            id=id_factory(),
            date=dt.date(2025, 6, 20),
            amount=150000,
            category=VENDOR_CATEGORY,
            vendor_id=vendors[0].id,
            vendor_name=vendors[0].name,
            description="원자재 구매",
        ),
        Expense(
            id=id_factory(),
            date=dt.date(2025, 6, 18),
            amount=80000,
            category="공과금",
            description="6월 전기요금",
        ),
        Expense(
            id=id_factory(),
            date=dt.date(2025, 6, 15),
            amount=200000,
            category=VENDOR_CATEGORY,
            vendor_id=vendors[1].id,
            vendor_name=vendors[1].name,
            description="월간 서비스 이용료",
        ),
    )

    revenues = (
        Revenue(id=id_factory(), date=dt.date(2025, 6, 22), amount=450000,
                category="제품 판매", description="온라인 판매"),
        Revenue(id=id_factory(), date=dt.date(2025, 6, 21), amount=350000,
                category="서비스 제공", description="컨설팅 서비스"),
        Revenue(id=id_factory(), date=dt.date(2025, 6, 19), amount=520000,
                category="제품 판매", description="오프라인 매장 판매"),
    )

    return FinanceState(expenses=expenses, revenues=revenues, vendors=vendors)


def sample_task_state(
    id_factory: Callable[[], str],
    today: Optional[dt.date] = None,
) -> TaskState:
    """Sample tasks with due dates relative to `today`."""
    today = today or dt.date.today()

    def days(n: int) -> dt.date:
        return today + dt.timedelta(days=n)

    tasks = (
        Task(
            id=id_factory(),
            title="프로젝트 계획서 작성",
            description="다음 분기 프로젝트 계획서를 작성하고 팀과 공유해야 합니다.",
            priority=TaskPriority.HIGH,
            status=TaskStatus.IN_PROGRESS,
            due_date=days(2),
            category="업무",
        ),
        Task(
            id=id_factory(),
            title="주간 회의 준비",
            description="내일 주간 회의 자료를 준비하고 참석자들에게 의제를 공유합니다.",
            priority=TaskPriority.MEDIUM,
            status=TaskStatus.PENDING,
            due_date=days(1),
            category="회의",
        ),
        Task(
            id=id_factory(),
            title="운동 가기",
            description="오후 7시에 헬스장에서 1시간 운동하기",
            priority=TaskPriority.LOW,
            status=TaskStatus.PENDING,
            due_date=days(0),
            category="건강",
        ),
        Task(
            id=id_factory(),
            title="식료품 쇼핑",
            description="주중 식사를 위한 식료품 쇼핑하기",
            priority=TaskPriority.MEDIUM,
            status=TaskStatus.COMPLETED,
            due_date=days(-1),
            category="개인",
        ),
        Task(
            id=id_factory(),
            title="프론트엔드 버그 수정",
            description="사용자 프로필 페이지에서 발생하는 렌더링 문제 해결하기",
            priority=TaskPriority.HIGH,
            status=TaskStatus.PENDING,
            due_date=days(3),
            category="개발",
        ),
    )
    return TaskState(tasks=tasks)
