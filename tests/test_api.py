from decimal import Decimal


API = "/api/v1"


def dec(value) -> Decimal:
    return Decimal(str(value))


def post_cash_in(client, amount="500", customer_id="C1"):
    response = client.post(f"{API}/transactions", json={
        "type": "cash_in",
        "customerId": customer_id,
        "amount": amount,
    })
    assert response.status_code == 201, response.text
    return response.json()["records"]


class TestTransactionRoutes:

    def test_post_cash_in_and_read_balances(self, client):
        records = post_cash_in(client)

        assert [r["documentNumber"] for r in records] == ["2024-0001", "2024-0001-1", "2024-0001-2"]
        assert dec(records[0]["amount"]) == Decimal("-500")
        assert records[0]["isMainDocument"] is True

        balances = client.get(f"{API}/balances/C1").json()
        assert balances["accountId"] == "C1"
        assert {k: dec(v) for k, v in balances["cashBalances"].items()} == {"IQD": Decimal("-500")}

        cash_box = client.get(f"{API}/balances/default-cash-safe").json()
        assert {k: dec(v) for k, v in cash_box["cashBalances"].items()} == {"IQD": Decimal("500")}

    def test_snake_case_fields_are_accepted(self, client):
        response = client.post(f"{API}/transactions", json={
            "type": "product_purchase",
            "customer_id": "C1",
            "product_type_id": "P1",
            "weight": "10",
            "unit_price": "200",
        })

        assert response.status_code == 201
        assert dec(response.json()["records"][0]["amount"]) == Decimal("2000")

    def test_validation_error_uses_the_error_envelope(self, client):
        response = client.post(f"{API}/transactions", json={"type": "cash_in", "amount": "10"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "MissingCustomer"
        assert body["status_code"] == 400
        assert client.get(f"{API}/transactions").json()["total"] == 0

    def test_unknown_type_is_rejected_by_request_validation(self, client):
        response = client.post(f"{API}/transactions", json={"type": "transfer", "customerId": "C1"})

        assert response.status_code == 422

    def test_listing_returns_top_level_documents_newest_first(self, client):
        post_cash_in(client)
        client.post(f"{API}/transactions", json={
            "type": "payable", "customerId": "C2", "amount": "30", "date": "2024-06-01T10:00:00",
        })

        body = client.get(f"{API}/transactions").json()

        assert body["total"] == 2
        assert [t["documentNumber"] for t in body["transactions"]] == ["2024-0002", "2024-0001"]

        filtered = client.get(f"{API}/transactions", params={"customer_id": "C2"}).json()
        assert [t["documentNumber"] for t in filtered["transactions"]] == ["2024-0002"]

        by_date = client.get(f"{API}/transactions", params={"start_date": "2024-06-01", "end_date": "2024-06-01"}).json()
        assert by_date["total"] == 1

    def test_subdocuments_and_totals(self, client):
        main_id = post_cash_in(client)[0]["id"]

        children = client.get(f"{API}/transactions/{main_id}/subdocuments").json()
        assert [c["documentNumber"] for c in children["transactions"]] == ["2024-0001-1", "2024-0001-2"]

        totals = client.get(f"{API}/transactions/{main_id}/totals").json()
        assert {k: dec(v) for k, v in totals["moneyIn"].items()} == {"IQD": Decimal("500")}

    def test_edit_and_delete(self, client):
        main_id = post_cash_in(client)[0]["id"]

        response = client.put(f"{API}/transactions/{main_id}", json={
            "type": "cash_in", "customerId": "C1", "amount": "800",
        })
        assert response.status_code == 200
        assert dec(response.json()["records"][0]["amount"]) == Decimal("-800")
        assert response.json()["records"][0]["documentNumber"] == "2024-0001"

        assert client.delete(f"{API}/transactions/{main_id}").status_code == 200

        missing = client.get(f"{API}/transactions/{main_id}")
        assert missing.status_code == 404
        assert missing.json()["success"] is False
        assert client.get(f"{API}/balances/C1").json()["cashBalances"] == {}

    def test_editing_or_deleting_a_missing_document_is_not_found(self, client):
        assert client.put(f"{API}/transactions/nope", json={"type": "income", "customerId": "C1"}).status_code == 404
        assert client.delete(f"{API}/transactions/nope").status_code == 404

    def test_batch_posting(self, client):
        response = client.post(f"{API}/transactions/batch", json={
            "customerId": "C1",
            "items": [
                {"type": "product_sale", "productTypeId": "P2", "quantity": 4, "unitPrice": "5"},
                {"type": "receivable", "amount": "-12"},
            ],
        })

        assert response.status_code == 201
        records = response.json()["records"]
        assert [r["documentNumber"] for r in records] == ["2024-0001", "2024-0001-1", "2024-0001-2"]
        assert dec(records[2]["amount"]) == Decimal("12")


class TestDocumentRoutes:

    def test_next_number(self, client):
        assert client.get(f"{API}/documents/next-number").json() == {"documentNumber": "2024-0001"}
        post_cash_in(client)
        assert client.get(f"{API}/documents/next-number").json() == {"documentNumber": "2024-0002"}

    def test_orphans_are_found_and_repaired(self, client):
        post_cash_in(client)
        orphan = {
            "id": "orphan-1",
            "documentNumber": "2023-0004-1",
            "type": "expense",
            "customerId": "C1",
            "amount": "5",
            "date": "2023-12-01T00:00:00",
            "createdAt": "2023-12-01T00:00:00",
            "parentDocumentId": "deleted-main",
        }
        stored = client.get(f"{API}/data").json()["transactions"]
        assert client.post(f"{API}/data", json={"transactions": stored + [orphan]}).status_code == 200

        orphans = client.get(f"{API}/documents/orphans").json()
        assert [o["id"] for o in orphans["transactions"]] == ["orphan-1"]

        repaired = client.post(f"{API}/documents/repair").json()
        assert repaired == {"removed": 1, "removedIds": ["orphan-1"]}
        assert client.get(f"{API}/data").json()["transactions"] == stored


class TestReportRoutes:

    def test_cash_inventory(self, client):
        post_cash_in(client, customer_id="C2")

        body = client.get(f"{API}/reports/cash-inventory").json()

        assert body["positions"][0]["currencyId"] == "IQD"
        assert dec(body["positions"][0]["totalCashDebt"]) == Decimal("500")
        assert [t["accountId"] for t in body["treasury"]] == ["default-cash-safe", "B1"]

    def test_period_summary(self, client):
        post_cash_in(client)

        body = client.get(f"{API}/reports/period-summary", params={
            "start_date": "2024-05-10", "end_date": "2024-05-10",
        }).json()

        assert body["recordCount"] == 1
        assert {k: dec(v) for k, v in body["cashIn"].items()} == {"IQD": Decimal("500")}

    def test_period_summary_rejects_reversed_range(self, client):
        response = client.get(f"{API}/reports/period-summary", params={
            "start_date": "2024-05-10", "end_date": "2024-05-01",
        })

        assert response.status_code == 400


class TestReferenceRoutes:

    def test_customer_lifecycle(self, client):
        response = client.post(f"{API}/customers", json={"name": "Omar", "customerCode": "K-1"})
        assert response.status_code == 201
        customer = response.json()
        assert customer["id"].startswith("CUS-")

        duplicate = client.post(f"{API}/customers", json={"name": "Other", "customerCode": "K-1"})
        assert duplicate.status_code == 400

        listing = client.get(f"{API}/customers", params={"search": "omar"}).json()
        assert [c["id"] for c in listing["customers"]] == [customer["id"]]

        assert client.delete(f"{API}/customers/{customer['id']}").status_code == 200
        assert client.delete(f"{API}/customers/{customer['id']}").status_code == 404

    def test_protected_or_referenced_customer_cannot_be_deleted(self, client):
        post_cash_in(client)

        assert client.delete(f"{API}/customers/CP").status_code == 400
        assert client.delete(f"{API}/customers/C1").status_code == 400
        assert client.delete(f"{API}/customers/C2").status_code == 200

    def test_new_base_currency_replaces_the_old_one(self, client):
        created = client.post(f"{API}/currencies", json={"name": "Euro", "symbol": "EUR", "isBase": True}).json()

        currencies = client.get(f"{API}/currencies").json()["currencies"]
        assert [c["id"] for c in currencies if c["isBase"]] == [created["id"]]
        assert client.get(f"{API}/data").json()["settings"]["baseCurrencyId"] == created["id"]

    def test_bank_account_needs_a_known_currency(self, client):
        response = client.post(f"{API}/bank-accounts", json={
            "bankName": "Ashur", "accountNumber": "77", "currencyId": "XXX",
        })
        assert response.status_code == 400

        response = client.post(f"{API}/bank-accounts", json={
            "bankName": "Ashur", "accountNumber": "77", "currencyId": "IQD", "initialBalance": "250",
        })
        assert response.status_code == 201
        assert client.get(f"{API}/bank-accounts").json()["total"] == 2

    def test_product_type_in_use_cannot_be_deleted(self, client):
        client.post(f"{API}/transactions", json={
            "type": "product_in", "customerId": "C1", "productTypeId": "P1", "weight": "1",
        })

        assert client.delete(f"{API}/product-types/P1").status_code == 400
        assert client.delete(f"{API}/product-types/P2").status_code == 200
        created = client.post(f"{API}/product-types", json={"name": "Bran", "measurementType": "weight"})
        assert created.status_code == 201
        assert [p["name"] for p in client.get(f"{API}/product-types").json()["productTypes"]] == ["Flour", "Bran"]

    def test_customer_group_lifecycle(self, client):
        response = client.post(f"{API}/customer-groups", json={"name": "Retail", "description": "Walk-in buyers"})
        assert response.status_code == 201
        group = response.json()
        assert group["id"].startswith("GRP-")
        assert group["isProtected"] is False

        listing = client.get(f"{API}/customer-groups").json()
        assert listing["total"] == 3
        assert [g["name"] for g in listing["customerGroups"]] == ["System Accounts", "Wholesale", "Retail"]

        assert client.delete(f"{API}/customer-groups/{group['id']}").status_code == 200
        assert client.delete(f"{API}/customer-groups/{group['id']}").status_code == 404

    def test_protected_or_used_customer_group_cannot_be_deleted(self, client):
        protected = client.delete(f"{API}/customer-groups/G0")
        assert protected.status_code == 400
        assert "protected" in protected.json()["message"]

        assert client.delete(f"{API}/customer-groups/G1").status_code == 400

        assert client.delete(f"{API}/customers/C2").status_code == 200
        assert client.delete(f"{API}/customer-groups/G1").status_code == 200

    def test_customer_needs_a_known_group(self, client):
        response = client.post(f"{API}/customers", json={"name": "Omar", "groupId": "GRP-MISSING"})
        assert response.status_code == 400

        response = client.post(f"{API}/customers", json={"name": "Omar", "groupId": "G1"})
        assert response.status_code == 201
        assert response.json()["groupId"] == "G1"


class TestDataRoutes:

    def test_import_keeps_customer_groups(self, client):
        exported = client.get(f"{API}/data").json()
        groups = exported["customerGroups"] + [{
            "id": "G2", "name": "Exporters", "isProtected": True, "createdAt": "2024-02-01T00:00:00",
        }]

        response = client.post(f"{API}/data", json={"customerGroups": groups})

        assert response.status_code == 200
        stored = client.get(f"{API}/data").json()["customerGroups"]
        assert [g["id"] for g in stored] == ["G0", "G1", "G2"]
        assert stored[2]["isProtected"] is True

    def test_invalid_import_is_a_client_error_and_saves_nothing(self, client):
        post_cash_in(client)
        before = client.get(f"{API}/data").json()
        bad_record = {
            "id": "bad-1",
            "documentNumber": "2024-0099",
            "type": "bogus",
            "customerId": "C1",
            "amount": "5",
            "date": "2024-05-01T00:00:00",
            "createdAt": "2024-05-01T00:00:00",
        }

        response = client.post(f"{API}/data", json={"transactions": [bad_record]})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "InvalidSnapshot"
        assert client.get(f"{API}/data").json()["transactions"] == before["transactions"]
