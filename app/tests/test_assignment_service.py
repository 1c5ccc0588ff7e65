"""
服务层测试：使用文件型SQLite，两个独立会话模拟并发请求
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.constants.operation_types import AssignmentStatus, ItemStatus
from app.core.exceptions import ConflictError
from app.db.session import Base
from app.models.inventory_models import Assignment, Hardware
from app.schemas.assignment_schemas import AssignmentCreate, AssignmentUpdate
from app.services.assignment_service import AssignmentService


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture
def hardware_id(session_factory):
    db = session_factory()
    try:
        hardware = Hardware(name="Race laptop", type="laptop", serial_number="RACE-1")
        db.add(hardware)
        db.commit()
        return hardware.id
    finally:
        db.close()


def test_concurrent_assignments_only_one_wins(session_factory, hardware_id):
    db_a = session_factory()
    db_b = session_factory()
    try:
        service_a = AssignmentService(db_a)
        service_b = AssignmentService(db_b)

        # B 先读到 in_stock 状态（随后变为过期数据）
        stale = db_b.query(Hardware).filter(Hardware.id == hardware_id).one()
        assert stale.status == ItemStatus.IN_STOCK

        winner = service_a.create_assignment(
            AssignmentCreate(hardware_id=hardware_id, assigned_to="Alice"), "tech-a",
        )
        assert winner.status == AssignmentStatus.ACTIVE

        with pytest.raises(ConflictError):
            service_b.create_assignment(
                AssignmentCreate(hardware_id=hardware_id, assigned_to="Bob"), "tech-b",
            )
    finally:
        db_a.close()
        db_b.close()

    db = session_factory()
    try:
        rows = db.query(Assignment).filter(Assignment.hardware_id == hardware_id).all()
        assert [(r.assigned_to, r.status) for r in rows] == [("Alice", AssignmentStatus.ACTIVE)]
        item = db.query(Hardware).filter(Hardware.id == hardware_id).one()
        assert item.status == ItemStatus.ASSIGNED
    finally:
        db.close()


def test_failed_status_claim_rolls_back_assignment(session_factory, hardware_id, monkeypatch):
    db = session_factory()
    try:
        service = AssignmentService(db)
        rows_seen_by_claim = []

        def lose_claim(*args, **kwargs):
            # 分配记录已写入当前事务，占用失败后必须随事务回滚
            rows_seen_by_claim.append(db.query(Assignment).count())
            return False

        monkeypatch.setattr(service, "_set_item_status", lose_claim)

        with pytest.raises(ConflictError):
            service.create_assignment(AssignmentCreate(hardware_id=hardware_id, assigned_to="Alice"), "admin")

        assert rows_seen_by_claim == [1]
        assert db.query(Assignment).count() == 0
        assert db.query(Hardware).filter(Hardware.id == hardware_id).one().status == ItemStatus.IN_STOCK
    finally:
        db.close()


def test_actor_is_written_to_activity_log(session_factory, hardware_id):
    db = session_factory()
    try:
        service = AssignmentService(db)
        assignment = service.create_assignment(
            AssignmentCreate(hardware_id=hardware_id, assigned_to="Alice"), "jdoe",
        )
        service.return_item(assignment.id, "msmith")

        entries = service.activity_log.list()
        assert {entry.user_id for entry in entries} == {"jdoe", "msmith"}
        actions = [(entry.user_id, entry.action, entry.item_type) for entry in entries]
        assert ("jdoe", "assign", "assignment") in actions
        assert ("msmith", "update", "assignment") in actions
    finally:
        db.close()


def test_stale_release_cannot_free_reassigned_item(session_factory, hardware_id):
    db_a = session_factory()
    db_b = session_factory()
    db_c = session_factory()
    try:
        service_a = AssignmentService(db_a)
        first = service_a.create_assignment(
            AssignmentCreate(hardware_id=hardware_id, assigned_to="Alice"), "tech-a",
        )
        first_id = first.id

        # B、C 读到的分配记录仍是 active
        service_b = AssignmentService(db_b)
        service_c = AssignmentService(db_c)
        assert service_b.get_or_404(first_id).status == AssignmentStatus.ACTIVE
        assert service_c.get_or_404(first_id).status == AssignmentStatus.ACTIVE

        service_a.return_item(first_id, "tech-a")
        second = service_a.create_assignment(
            AssignmentCreate(hardware_id=hardware_id, assigned_to="Bob"), "tech-a",
        )
        second_id = second.id

        with pytest.raises(ConflictError):
            service_b.update_assignment(first_id, AssignmentUpdate(status="returned"), "tech-b")
        with pytest.raises(ConflictError):
            service_c.delete_assignment(first_id, "tech-c")
    finally:
        db_a.close()
        db_b.close()
        db_c.close()

    db = session_factory()
    try:
        item = db.query(Hardware).filter(Hardware.id == hardware_id).one()
        assert item.status == ItemStatus.ASSIGNED
        holders = (
            db.query(Assignment)
            .filter(Assignment.hardware_id == hardware_id, Assignment.status == AssignmentStatus.ACTIVE)
            .all()
        )
        assert [h.id for h in holders] == [second_id]
        assert db.query(Assignment).filter(Assignment.id == first_id).one().status == AssignmentStatus.RETURNED
    finally:
        db.close()
