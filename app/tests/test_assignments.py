import pytest


def _item_status(client, hardware_id):
    return client.get(f"/api/hardware/{hardware_id}").json()["status"]


# =====================================================
# 创建
# =====================================================

def test_create_assignment_marks_item_assigned(client, make_hardware, make_assignment):
    hardware = make_hardware()

    assignment = make_assignment(hardwareId=hardware["id"], assignedTo="Alice", department="IT")

    assert assignment["status"] == "active"
    assert assignment["hardwareId"] == hardware["id"]
    assert assignment["itemType"] == "hardware"
    assert assignment["itemId"] == hardware["id"]
    assert assignment["assignmentDate"]
    assert assignment["returnDate"] is None
    assert _item_status(client, hardware["id"]) == "assigned"

    listing = client.get("/api/assignments", params={"itemType": "hardware", "itemId": hardware["id"]})
    assert [a["id"] for a in listing.json()] == [assignment["id"]]


@pytest.mark.parametrize("status", ["maintenance", "retired"])
def test_create_assignment_for_unavailable_item_conflict(client, make_hardware, status):
    hardware = make_hardware(status=status)

    response = client.post("/api/assignments", json={"hardwareId": hardware["id"], "assignedTo": "Alice"})

    assert response.status_code == 409
    assert client.get("/api/assignments").json() == []
    assert _item_status(client, hardware["id"]) == status


def test_second_assignment_for_same_item_conflict(client, make_hardware, make_assignment):
    hardware = make_hardware()
    make_assignment(hardwareId=hardware["id"], assignedTo="Alice")

    response = client.post("/api/assignments", json={"hardwareId": hardware["id"], "assignedTo": "Bob"})

    assert response.status_code == 409
    active = client.get("/api/assignments", params={"status": "active", "itemType": "hardware",
                                                    "itemId": hardware["id"]}).json()
    assert [a["assignedTo"] for a in active] == ["Alice"]


def test_create_assignment_missing_item_not_found(client):
    response = client.post("/api/assignments", json={"hardwareId": 12345, "assignedTo": "Alice"})
    assert response.status_code == 404
    assert client.get("/api/assignments").json() == []


@pytest.mark.parametrize("payload", [
    {"assignedTo": "Alice"},
    {"hardwareId": 1, "networkDeviceId": 1, "assignedTo": "Alice"},
    {"hardwareId": 1},
    {"hardwareId": 1, "assignedTo": ""},
    {"hardwareId": 1, "assignedTo": "Alice", "status": "returned"},
])
def test_create_assignment_validation_error(client, make_hardware, payload):
    make_hardware()
    response = client.post("/api/assignments", json=payload)
    assert response.status_code == 400
    assert client.get("/api/assignments").json() == []
    assert _item_status(client, 1) == "in_stock"


def test_pending_assignment_holds_item(client, make_hardware, make_assignment):
    hardware = make_hardware()
    assignment = make_assignment(hardwareId=hardware["id"], status="pending")
    assert assignment["status"] == "pending"
    assert _item_status(client, hardware["id"]) == "assigned"

    response = client.patch(f"/api/assignments/{assignment['id']}", json={"status": "active"})
    assert response.status_code == 200
    assert response.json()["status"] == "active"
    assert _item_status(client, hardware["id"]) == "assigned"


def test_assign_network_device_and_general_inventory(client, make_assignment):
    device = client.post("/api/network-devices", json={"name": "core-sw-1", "type": "switch"}).json()
    stock = client.post("/api/general-inventory", json={"name": "Dock", "category": "accessory"}).json()

    make_assignment(networkDeviceId=device["id"])
    make_assignment(generalInventoryId=stock["id"])

    assert client.get(f"/api/network-devices/{device['id']}").json()["status"] == "assigned"
    assert client.get(f"/api/general-inventory/{stock['id']}").json()["status"] == "assigned"
    kinds = {a["itemType"] for a in client.get("/api/assignments").json()}
    assert kinds == {"network_device", "general_inventory"}


# =====================================================
# 更新 / 归还
# =====================================================

def test_update_to_returned_releases_item(client, make_hardware, make_assignment):
    hardware = make_hardware()
    assignment = make_assignment(hardwareId=hardware["id"])

    response = client.patch(f"/api/assignments/{assignment['id']}", json={"status": "returned"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "returned"
    assert data["returnDate"] is not None
    assert _item_status(client, hardware["id"]) == "in_stock"


def test_update_to_returned_keeps_supplied_return_date(client, make_hardware, make_assignment):
    hardware = make_hardware()
    assignment = make_assignment(hardwareId=hardware["id"])

    response = client.put(f"/api/assignments/{assignment['id']}", json={
        "status": "returned", "returnDate": "2025-01-31T09:00:00",
    })
    assert response.status_code == 200
    assert response.json()["returnDate"].startswith("2025-01-31T09:00:00")


def test_return_item_round_trip(client, make_hardware, make_assignment):
    hardware = make_hardware()
    assignment = make_assignment(hardwareId=hardware["id"])

    response = client.post(f"/api/assignments/{assignment['id']}/return", json={"notes": "all good"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "returned"
    assert data["notes"] == "all good"
    assert data["returnDate"] is not None
    assert _item_status(client, hardware["id"]) == "in_stock"
    # 记录保留
    assert client.get(f"/api/assignments/{assignment['id']}").status_code == 200

    # 归还后可再次分配
    make_assignment(hardwareId=hardware["id"], assignedTo="Bob")
    assert _item_status(client, hardware["id"]) == "assigned"


def test_return_twice_conflict(client, make_hardware, make_assignment):
    hardware = make_hardware()
    assignment = make_assignment(hardwareId=hardware["id"])
    first = client.post(f"/api/assignments/{assignment['id']}/return").json()

    response = client.post(f"/api/assignments/{assignment['id']}/return")

    assert response.status_code == 409
    again = client.get(f"/api/assignments/{assignment['id']}").json()
    assert again["returnDate"] == first["returnDate"]
    assert _item_status(client, hardware["id"]) == "in_stock"


def test_returned_item_reassigned_then_old_row_cannot_reopen(client, make_hardware, make_assignment):
    hardware = make_hardware()
    old = make_assignment(hardwareId=hardware["id"], assignedTo="Alice")
    client.post(f"/api/assignments/{old['id']}/return")
    make_assignment(hardwareId=hardware["id"], assignedTo="Bob")

    response = client.patch(f"/api/assignments/{old['id']}", json={"status": "active"})

    assert response.status_code == 409
    active = client.get("/api/assignments", params={"status": "active"}).json()
    assert [a["assignedTo"] for a in active] == ["Bob"]


def test_pending_cannot_be_returned_directly(client, make_hardware, make_assignment):
    hardware = make_hardware()
    assignment = make_assignment(hardwareId=hardware["id"], status="pending")

    response = client.patch(f"/api/assignments/{assignment['id']}", json={"status": "returned"})

    assert response.status_code == 409
    assert _item_status(client, hardware["id"]) == "assigned"


def test_update_non_status_fields(client, make_hardware, make_assignment):
    hardware = make_hardware()
    assignment = make_assignment(hardwareId=hardware["id"])

    response = client.patch(f"/api/assignments/{assignment['id']}", json={
        "assignedTo": "Carol", "department": "Finance", "status": "active",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["assignedTo"] == "Carol"
    assert data["department"] == "Finance"
    assert data["status"] == "active"
    assert _item_status(client, hardware["id"]) == "assigned"


def test_update_cannot_repoint_item(client, make_hardware, make_assignment):
    first = make_hardware()
    second = make_hardware()
    assignment = make_assignment(hardwareId=first["id"])

    response = client.patch(f"/api/assignments/{assignment['id']}", json={"hardwareId": second["id"]})
    assert response.status_code == 400
    assert _item_status(client, second["id"]) == "in_stock"

    # 重复当前值允许
    response = client.patch(f"/api/assignments/{assignment['id']}", json={"hardwareId": first["id"]})
    assert response.status_code == 200


def test_update_rejects_null_status(client, make_hardware, make_assignment):
    hardware = make_hardware()
    assignment = make_assignment(hardwareId=hardware["id"])
    response = client.patch(f"/api/assignments/{assignment['id']}", json={"status": None})
    assert response.status_code == 400


def test_update_missing_assignment_not_found(client):
    assert client.patch("/api/assignments/77", json={"notes": "x"}).status_code == 404
    assert client.post("/api/assignments/77/return").status_code == 404


# =====================================================
# 删除
# =====================================================

def test_delete_active_assignment_reverts_item(client, make_hardware, make_assignment):
    hardware = make_hardware()
    assignment = make_assignment(hardwareId=hardware["id"])

    response = client.delete(f"/api/assignments/{assignment['id']}")

    assert response.status_code == 204
    assert client.get(f"/api/assignments/{assignment['id']}").status_code == 404
    assert _item_status(client, hardware["id"]) == "in_stock"


def test_delete_returned_assignment_leaves_new_holder(client, make_hardware, make_assignment):
    hardware = make_hardware()
    old = make_assignment(hardwareId=hardware["id"], assignedTo="Alice")
    client.post(f"/api/assignments/{old['id']}/return")
    make_assignment(hardwareId=hardware["id"], assignedTo="Bob")

    assert client.delete(f"/api/assignments/{old['id']}").status_code == 204
    assert _item_status(client, hardware["id"]) == "assigned"


def test_delete_missing_assignment_not_found(client):
    assert client.delete("/api/assignments/5").status_code == 404


# =====================================================
# 列表过滤
# =====================================================

def test_list_assignments_filters(client, make_hardware, make_assignment):
    a = make_assignment(hardwareId=make_hardware()["id"], assignedTo="Alice")
    b = make_assignment(hardwareId=make_hardware()["id"], assignedTo="Bob")
    client.post(f"/api/assignments/{b['id']}/return")

    by_person = client.get("/api/assignments", params={"assignedTo": "Alice"}).json()
    assert [x["id"] for x in by_person] == [a["id"]]

    returned = client.get("/api/assignments", params={"status": "returned"}).json()
    assert [x["id"] for x in returned] == [b["id"]]

    assert client.get("/api/assignments", params={"status": "lost"}).status_code == 400
    assert client.get("/api/assignments", params={"limit": 1}).json().__len__() == 1
