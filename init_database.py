#!/usr/bin/env python3
"""
IT资产台账系统 - 数据库初始化脚本
用于创建数据库表，可选写入少量示例数据
"""

import sys
import argparse
from pathlib import Path

# 添加项目根目录到Python路径
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from app.db.session import engine, SessionLocal, Base
from app import models  # noqa: F401  导入所有模型
from app.schemas.inventory_schemas import GeneralInventoryCreate, HardwareCreate, VlanCreate
from app.services.registry_service import GeneralInventoryService, HardwareService, VlanService


def create_tables():
    """创建数据库表"""
    print("[INFO] 正在创建数据库表...")
    Base.metadata.create_all(bind=engine)
    print("[SUCCESS] 数据库表创建完成")


def init_sample_data(operator: str = "system"):
    """初始化示例数据（表为空时才写入）"""
    print("[INFO] 正在初始化示例数据...")

    db = SessionLocal()
    try:
        hardware_service = HardwareService(db)
        if hardware_service.list(limit=1):
            print("[SKIP] 已存在硬件数据，跳过示例数据初始化")
            return

        samples = [
            HardwareCreate(name="Dell Latitude 5440", type="laptop", serial_number="SAMPLE-LT-0001",
                           manufacturer="Dell", model="Latitude 5440", location="IT Storage"),
            HardwareCreate(name="HP EliteDisplay E24", type="monitor", serial_number="SAMPLE-MN-0001",
                           manufacturer="HP", model="E24 G5", location="IT Storage"),
        ]
        for data in samples:
            hardware_service.create(data, operator)

        GeneralInventoryService(db).create(
            GeneralInventoryCreate(name="USB-C Dock", category="Accessories", quantity=5,
                                   serial_number="SAMPLE-GI-0001", location="IT Storage"),
            operator,
        )
        VlanService(db).create(
            VlanCreate(vlan_id=10, name="Office", subnet="10.0.10.0/24", description="Office workstations"),
            operator,
        )
        print("[SUCCESS] 示例数据初始化完成")
    finally:
        db.close()


def main():
    """主函数"""
    parser = argparse.ArgumentParser(description="Initialize the inventory database")
    parser.add_argument("--with-samples", action="store_true", help="insert a few sample records")
    args = parser.parse_args()

    print("=" * 60)
    print("开始初始化IT资产台账数据库...")
    print("=" * 60)

    create_tables()
    if args.with_samples:
        init_sample_data()

    print("=" * 60)
    print("[SUCCESS] 数据库初始化完成！")
    print("\n启动应用:")
    print("  uvicorn app.main:app --reload")
    print("\nAPI文档:")
    print("  http://localhost:8000/docs")
    print("=" * 60)


if __name__ == "__main__":
    main()
