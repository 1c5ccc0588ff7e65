"""
检查（并可选修复）资产 status 与占用中分配记录之间的偏差。

运行方式：
    python -m app.scripts.reconcile_item_status          # 只报告
    python -m app.scripts.reconcile_item_status --fix    # 修复 assigned <-> in_stock 偏差
"""

import argparse
from typing import List, Optional

from app.core.logging_config import setup_logging
from app.db.session import SessionLocal
from app.services.assignment_service import AssignmentService


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Reconcile item status with holding assignments")
    parser.add_argument("--fix", action="store_true", help="repair assigned/in_stock drift")
    parser.add_argument("--operator", default="system", help="operator recorded in the activity log")
    args = parser.parse_args(argv)

    setup_logging()
    db = SessionLocal()
    try:
        report = AssignmentService(db).reconcile(fix=args.fix, actor=args.operator)
    finally:
        db.close()

    print(f"检查资产数: {report.checked_items}")
    for drift in report.drift:
        print(
            f"  [DRIFT] {drift.item_type}:{drift.item_id} status={drift.status} "
            f"expected={drift.expected_status} holders={drift.holding_assignment_ids}"
        )
    for holders in report.multiple_holders:
        print(
            f"  [MULTI] {holders.item_type}:{holders.item_id} "
            f"holders={holders.holding_assignment_ids}"
        )
    if args.fix:
        print(f"已修复: {report.fixed}")

    unresolved = len(report.multiple_holders) + (0 if args.fix else len(report.drift))
    return 1 if unresolved else 0


if __name__ == "__main__":
    raise SystemExit(main())
