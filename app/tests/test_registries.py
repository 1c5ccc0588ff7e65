import pytest


# =====================================================
# 网络设备 / 通用库存
# =====================================================

def test_network_device_crud(client):
    response = client.post("/api/network-devices", json={
        "name": "core-sw-1",
        "type": "switch",
        "ipAddress": "10.0.0.2",
        "macAddress": "00:11:22:33:44:55",
        "serialNumber": "NET-1",
    })
    assert response.status_code == 201
    device = response.json()
    assert device["status"] == "in_stock"
    assert device["ipAddress"] == "10.0.0.2"

    response = client.patch(f"/api/network-devices/{device['id']}", json={"location": "Rack A3"})
    assert response.status_code == 200
    assert response.json()["location"] == "Rack A3"

    duplicate = client.post("/api/network-devices", json={"name": "x", "type": "router", "serialNumber": "NET-1"})
    assert duplicate.status_code == 409

    assert client.delete(f"/api/network-devices/{device['id']}").status_code == 204
    assert client.get(f"/api/network-devices/{device['id']}").status_code == 404


def test_serial_number_unique_per_kind_only(client, make_hardware):
    make_hardware(serialNumber="SHARED-1")
    response = client.post("/api/network-devices", json={
        "name": "edge-fw", "type": "firewall", "serialNumber": "SHARED-1",
    })
    assert response.status_code == 201


def test_general_inventory_quantity_validation(client):
    response = client.post("/api/general-inventory", json={"name": "Cables", "category": "cabling", "quantity": 0})
    assert response.status_code == 400

    response = client.post("/api/general-inventory", json={"name": "Cables", "category": "cabling"})
    assert response.status_code == 201
    item = response.json()
    assert item["quantity"] == 1

    response = client.patch(f"/api/general-inventory/{item['id']}", json={"quantity": 12})
    assert response.status_code == 200
    assert response.json()["quantity"] == 12


def test_general_inventory_delete_while_assigned_conflict(client, make_assignment):
    item = client.post("/api/general-inventory", json={"name": "Projector", "category": "av"}).json()
    make_assignment(generalInventoryId=item["id"])
    assert client.delete(f"/api/general-inventory/{item['id']}").status_code == 409


# =====================================================
# VLAN
# =====================================================

def test_vlan_crud(client):
    response = client.post("/api/vlans", json={"vlanId": 100, "name": "Servers", "subnet": "10.1.0.0/24"})
    assert response.status_code == 201
    vlan = response.json()
    assert vlan["vlanId"] == 100

    response = client.put(f"/api/vlans/{vlan['id']}", json={"description": "server segment"})
    assert response.status_code == 200
    assert response.json()["description"] == "server segment"

    assert len(client.get("/api/vlans").json()) == 1
    assert client.delete(f"/api/vlans/{vlan['id']}").status_code == 204
    assert client.get("/api/vlans").json() == []


def test_vlan_id_unique(client):
    client.post("/api/vlans", json={"vlanId": 20, "name": "Voice"})
    response = client.post("/api/vlans", json={"vlanId": 20, "name": "Voice 2"})
    assert response.status_code == 409


@pytest.mark.parametrize("vlan_id", [0, 4095])
def test_vlan_id_range(client, vlan_id):
    response = client.post("/api/vlans", json={"vlanId": vlan_id, "name": "Bad"})
    assert response.status_code == 400


# =====================================================
# 凭据
# =====================================================

def test_credential_crud(client):
    response = client.post("/api/credentials", json={
        "name": "Core switch admin",
        "type": "network",
        "username": "admin",
        "password": "s3cret",
        "expirationDate": "2026-12-31",
    })
    assert response.status_code == 201
    credential = response.json()
    assert credential["password"] == "s3cret"
    assert credential["expirationDate"] == "2026-12-31"

    response = client.patch(f"/api/credentials/{credential['id']}", json={"password": "n3w"})
    assert response.status_code == 200
    assert response.json()["password"] == "n3w"

    assert client.delete(f"/api/credentials/{credential['id']}").status_code == 204


def test_credential_type_validation(client):
    response = client.post("/api/credentials", json={
        "name": "x", "type": "ssh-key", "username": "u", "password": "p",
    })
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "type"
