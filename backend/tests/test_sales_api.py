"""
Sales, analytics and low-stock API tests.
"""

from shopdesk.models import ActiveItem


def test_record_sale(client, employee_headers, employee_user, make_active_item, db_session):
    item = make_active_item("A001", name="Notebook", price="100.00", quantity=3)
    item_id = item.id

    resp = client.post("/api/sales", json={
        "customerName": "Asha",
        "customerContact": "9999900000",
        "itemsSold": [{"item": "A001", "quantity": 3}],
        "discount": 10,
        "discountAmount": 30,
    }, headers=employee_headers)

    assert resp.status_code == 201
    data = resp.json
    assert data["billNumber"] == "BILL001"
    assert data["subTotal"] == "300.00"
    assert data["gstAmount"] == "0.00"
    assert data["discountAmount"] == "30.00"
    assert data["totalAmount"] == "270.00"
    assert data["billedBy"] == employee_user.id
    assert data["itemsSold"] == [{
        "item": item_id,
        "uniqueCode": "A001",
        "name": "Notebook",
        "isTaxable": False,
        "quantity": 3,
        "priceAtSale": "100.00",
        "lineTotal": "300.00",
        "gstAmount": "0.00",
    }]
    assert db_session.get(ActiveItem, item_id) is None


def test_record_sale_by_item_id_with_gst(client, employee_headers, make_active_item):
    item = make_active_item(price="100.00", quantity=10, is_taxable=True)

    resp = client.post("/api/sales", json={
        "customerName": "Ravi",
        "itemsSold": [{"item": item.id, "quantity": 3}],
    }, headers=employee_headers)

    assert resp.status_code == 201
    assert resp.json["gstAmount"] == "54.00"
    assert resp.json["totalAmount"] == "354.00"


def test_record_sale_insufficient_stock(client, employee_headers, make_active_item, db_session):
    item = make_active_item("LOW", quantity=1)

    resp = client.post("/api/sales", json={
        "customerName": "Ravi",
        "itemsSold": [{"item": "LOW", "quantity": 2}],
    }, headers=employee_headers)

    assert resp.status_code == 400
    assert resp.json["details"]["uniqueCode"] == "LOW"
    assert db_session.get(ActiveItem, item.id).quantity == 1


def test_record_sale_unknown_item(client, employee_headers, db_session):
    resp = client.post("/api/sales", json={
        "customerName": "Ravi",
        "itemsSold": [{"item": "MISSING", "quantity": 1}],
    }, headers=employee_headers)
    assert resp.status_code == 404


def test_record_sale_validation(client, employee_headers, make_active_item):
    make_active_item("V1", quantity=5)

    bodies = [
        {"customerName": "Ravi", "itemsSold": []},
        {"customerName": "Ravi"},
        {"customerName": "Ravi", "itemsSold": [{"quantity": 1}]},
        {"customerName": "Ravi", "itemsSold": [{"item": "V1", "quantity": 0}]},
        {"customerName": "Ravi", "itemsSold": [{"item": "V1", "quantity": "two"}]},
        {"customerName": "", "itemsSold": [{"item": "V1", "quantity": 1}]},
        {"customerName": "Ravi", "itemsSold": [{"item": "V1", "quantity": 1}], "discount": 101},
        {"customerName": "Ravi", "itemsSold": [{"item": "V1", "quantity": 1}], "discountAmount": -5},
    ]
    for body in bodies:
        resp = client.post("/api/sales", json=body, headers=employee_headers)
        assert resp.status_code == 400, body


def test_history_and_detail(client, employee_headers, make_active_item):
    make_active_item("H1", quantity=5)
    created = client.post("/api/sales", json={
        "customerName": "Meera",
        "itemsSold": [{"item": "H1", "quantity": 1}],
    }, headers=employee_headers).json

    listing = client.get("/api/sales", headers=employee_headers)
    assert listing.status_code == 200
    assert [s["billNumber"] for s in listing.json] == [created["billNumber"]]

    day = created["saleDate"][:10]
    assert len(client.get(f"/api/sales?date={day}", headers=employee_headers).json) == 1
    assert client.get("/api/sales?date=2000-01-01", headers=employee_headers).json == []
    assert client.get("/api/sales?date=yesterday", headers=employee_headers).status_code == 400

    detail = client.get(f"/api/sales/{created['id']}", headers=employee_headers)
    assert detail.status_code == 200
    assert detail.json["customerName"] == "Meera"
    assert client.get("/api/sales/999999", headers=employee_headers).status_code == 404


def test_analytics(client, admin_headers, employee_headers, make_active_item):
    make_active_item("AN1", price="40.00", quantity=10)
    client.post("/api/sales", json={
        "customerName": "Meera",
        "itemsSold": [{"item": "AN1", "quantity": 2}],
    }, headers=employee_headers)

    resp = client.get("/api/sales/analytics", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json["totalSales"] == "40.00"
    assert resp.json["grossSales"] == "80.00"
    assert resp.json["totalItemsSold"] == 2
    assert resp.json["totalBills"] == 1

    assert client.get("/api/sales/analytics?month=13", headers=admin_headers).status_code == 400
    assert client.get("/api/sales/analytics?year=abc", headers=admin_headers).status_code == 400


def test_low_stock(client, admin_headers, make_active_item):
    for qty in (2, 5, 6, 10):
        make_active_item(quantity=qty)

    resp = client.get("/api/sales/lowstock", headers=admin_headers)
    assert resp.status_code == 200
    assert [i["quantity"] for i in resp.json] == [2, 5]

    resp = client.get("/api/sales/lowstock?threshold=6", headers=admin_headers)
    assert [i["quantity"] for i in resp.json] == [2, 5, 6]

    assert client.get("/api/sales/lowstock?threshold=-1", headers=admin_headers).status_code == 400


def test_record_sale_rejects_non_string_customer_fields(client, employee_headers, make_active_item, db_session):
    item = make_active_item("TYPED", quantity=5)

    bodies = [
        {"customerName": 42, "itemsSold": [{"item": "TYPED", "quantity": 1}]},
        {"customerName": "Ravi", "customerContact": 9876543210, "itemsSold": [{"item": "TYPED", "quantity": 1}]},
    ]
    for body in bodies:
        resp = client.post("/api/sales", json=body, headers=employee_headers)
        assert resp.status_code == 400, body
        assert "must be a string" in resp.json["error"]

    assert db_session.get(ActiveItem, item.id).quantity == 5


def test_record_sale_rejects_discount_precision(client, employee_headers, make_active_item):
    make_active_item("PREC", quantity=5)

    resp = client.post("/api/sales", json={
        "customerName": "Ravi",
        "itemsSold": [{"item": "PREC", "quantity": 1}],
        "discount": "12.345",
    }, headers=employee_headers)
    assert resp.status_code == 400
    assert resp.json["error"] == "discount must have at most 2 decimal places"

    resp = client.post("/api/sales", json={
        "customerName": "Ravi",
        "itemsSold": [{"item": "PREC", "quantity": 1}],
        "discount": 12.35,
    }, headers=employee_headers)
    assert resp.status_code == 201
    assert resp.json["discountPercent"] == "12.35"
