"""
Integration tests for the Bank Portal API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from bank_portal.api import create_app
from bank_portal.api.system import BankingSystem
from bank_portal.storage import InMemoryStorage


API = "/api"


@pytest.fixture
def system():
    """Banking system over in-memory storage"""
    return BankingSystem(InMemoryStorage())


@pytest.fixture
def client(system):
    """Test client bound to the in-memory banking system"""
    return TestClient(create_app(system))


def create_customer(client, email="meron@example.com", name="Meron Haile"):
    r = client.post(f"{API}/admin/customers", json={
        "full_name": name,
        "email": email,
        "phone": "+251911445566",
        "city": "Addis Ababa",
        "sub_city": "Kirkos",
        "woreda": "08",
        "house_number": "512",
        "zone": "3"
    })
    assert r.status_code == 201
    return r.json()["data"]


def open_account(client, customer_id, branch="Kazanchis", initial_balance="0"):
    r = client.post(f"{API}/admin/accounts", json={
        "customer_id": customer_id,
        "account_type": "SAVINGS",
        "branch_name": branch,
        "initial_balance": initial_balance
    })
    assert r.status_code == 201
    return r.json()["data"]


@pytest.fixture
def funded(client):
    """A branch, a customer and an account holding 5000"""
    client.post(f"{API}/admin/branch", json={"branch_name": "Kazanchis", "city": "Addis Ababa"})
    customer = create_customer(client)
    account = open_account(client, customer["id"], initial_balance="5000")
    return customer, account


class TestHealthEndpoints:
    """Test basic health and root endpoints"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        data = r.json()
        assert data["name"] == "Bank Portal API"
        assert "endpoints" in data


class TestAdminEndpoints:
    """Customer, branch, department and employee administration"""

    def test_customer_crud(self, client):
        customer = create_customer(client)

        r = client.get(f"{API}/admin/customers")
        assert r.json()["status"] == "success"
        assert len(r.json()["data"]) == 1

        r = client.put(f"{API}/admin/customers/{customer['id']}", json={"city": "Hawassa"})
        assert r.status_code == 200
        assert r.json()["data"]["city"] == "Hawassa"

        r = client.get(f"{API}/user/{customer['id']}/details")
        assert r.json()["data"] == {
            "id": customer["id"], "email": "meron@example.com", "full_name": "Meron Haile"
        }

        r = client.delete(f"{API}/admin/customers/{customer['id']}")
        assert r.status_code == 200

        r = client.get(f"{API}/admin/customers/{customer['id']}")
        assert r.status_code == 404
        assert r.json() == {"status": "error", "message": "Customer not found"}

    def test_duplicate_customer_conflict(self, client):
        create_customer(client)
        r = client.post(f"{API}/admin/customers", json={
            "full_name": "Copy", "email": "meron@example.com", "phone": "1", "city": "c",
            "sub_city": "s", "woreda": "w", "house_number": "h", "zone": "z"
        })
        assert r.status_code == 409

    def test_missing_fields_are_rejected(self, client):
        r = client.post(f"{API}/admin/customers", json={"full_name": "Nobody"})
        assert r.status_code == 422

    def test_branch_department_employee(self, client):
        r = client.post(f"{API}/admin/branch", json={"branch_name": "Merkato", "city": "Addis Ababa"})
        assert r.status_code == 201
        assert r.json()["data"]["total_deposits"] == "0.00"

        assert client.post(f"{API}/admin/branch", json={"branch_name": "Merkato"}).status_code == 409

        r = client.post(f"{API}/admin/department", json={
            "name": "Credit", "floor_number": "3", "building_number": "HQ"
        })
        assert r.status_code == 201
        assert client.get(f"{API}/admin/department/Credit").status_code == 200

        r = client.post(f"{API}/admin/employee", json={
            "full_name": "Yonas Tadesse",
            "email": "yonas@example.com",
            "branch_name": "Merkato",
            "department_name": "Credit",
            "position": "Loan Officer",
            "salary": "18000"
        })
        assert r.status_code == 201
        employee = r.json()["data"]
        assert employee["salary"] == "18000.00"

        r = client.post(f"{API}/admin/employee", json={
            "full_name": "Liya Mekonnen",
            "email": "liya@example.com",
            "branch_name": "Merkato",
            "department_name": "Credit",
            "supervisor_id": employee["id"]
        })
        assert r.json()["data"]["supervisor"]["full_name"] == "Yonas Tadesse"

        r = client.put(f"{API}/admin/employee/{employee['id']}", json={"branch_name": "Nowhere"})
        assert r.status_code == 404

        r = client.delete(f"{API}/admin/branch/Merkato")
        assert r.status_code == 200
        r = client.get(f"{API}/admin/employee/{employee['id']}")
        assert r.json()["data"]["branch_name"] is None


class TestMoneyMovementFlow:
    """Deposits, withdrawals, transfers and statements"""

    def test_account_listing_includes_holder(self, client, funded):
        customer, account = funded
        r = client.get(f"{API}/admin/accounts")
        listed = r.json()["data"][0]
        assert listed["customer_name"] == "Meron Haile"
        assert listed["balance"] == "5000.00"
        assert len(listed["account_number"]) == 10

    def test_customer_without_accounts(self, client):
        customer = create_customer(client)
        r = client.get(f"{API}/user/{customer['id']}/accounts")
        assert r.status_code == 404

    def test_deposit_withdraw_transfer(self, client, funded):
        customer, account = funded
        number = account["account_number"]
        other_customer = create_customer(client, email="abel@example.com", name="Abel Tsegaye")
        other = open_account(client, other_customer["id"])

        r = client.post(f"{API}/admin/deposit", json={"account_number": number, "amount": "250.75"})
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["balance"] == "5250.75"
        assert data["account_type"] == "SAVINGS"
        assert data["branch_name"] == "Kazanchis"

        r = client.post(f"{API}/user/withdraw", json={"account_number": number, "amount": "50.75"})
        assert r.json()["data"]["balance"] == "5200.00"

        r = client.post(f"{API}/user/transfer", json={
            "from_account_number": number,
            "to_account_number": other["account_number"],
            "amount": "200"
        })
        assert r.status_code == 200
        assert r.json()["data"]["transaction_group_id"].startswith("TX-")
        assert r.json()["data"]["from_balance"] == "5000.00"

        r = client.get(f"{API}/user/{customer['id']}/transactions/{number}")
        statement = r.json()["data"]
        assert [t["transaction_type"] for t in statement] == ["transfer", "withdrawal", "deposit", "deposit"]

        r = client.get(f"{API}/admin/transactions")
        assert len(r.json()["data"]) == 5

        r = client.get(f"{API}/admin/branch/Kazanchis")
        branch = r.json()["data"]
        assert branch["total_deposits"] == "5250.75"
        assert branch["total_withdrawals"] == "50.75"

    def test_error_statuses(self, client, funded):
        customer, account = funded
        number = account["account_number"]

        r = client.post(f"{API}/admin/deposit", json={"account_number": number, "amount": "995000.01"})
        assert r.status_code == 406

        r = client.post(f"{API}/user/withdraw", json={"account_number": number, "amount": "0"})
        assert r.status_code == 400

        r = client.post(f"{API}/user/withdraw", json={"account_number": number, "amount": "5000.01"})
        assert r.status_code == 400
        assert r.json()["status"] == "error"

        r = client.post(f"{API}/user/transfer", json={
            "from_account_number": number, "to_account_number": "0000000000", "amount": "1"
        })
        assert r.status_code == 404
        assert r.json()["message"] == "Destination account not found"

    def test_oversized_amounts_are_rejected(self, client, funded):
        customer, account = funded
        number = account["account_number"]

        r = client.post(f"{API}/admin/deposit", json={"account_number": number, "amount": "1e30"})
        assert r.status_code == 400
        assert r.json()["status"] == "error"

        r = client.post(f"{API}/user/withdraw", json={"account_number": number, "amount": "1e30"})
        assert r.status_code == 400

        r = client.get(f"{API}/admin/accounts/{number}")
        assert r.json()["data"]["balance"] == "5000.00"


class TestLoanFlow:
    """Loan request through repayment"""

    def test_full_loan_lifecycle(self, client, funded):
        customer, account = funded
        number = account["account_number"]

        r = client.post(f"{API}/user/loanRequest", json={
            "customer_id": customer["id"],
            "account_number": number,
            "amount": "12000",
            "purpose": "Inventory",
            "loan_duration": 12,
            "monthly_income": "9000",
            "loan_type": "business",
            "employment_status": "business-owner"
        })
        assert r.status_code == 201
        loan_request = r.json()["data"]
        assert loan_request["status"] == "PENDING"
        assert loan_request["requested_at"] == loan_request["created_at"]

        r = client.get(f"{API}/user/{customer['id']}/loanRequests/{number}")
        assert len(r.json()["data"]) == 1
        assert r.json()["data"][0]["requested_at"] == loan_request["requested_at"]

        r = client.get(f"{API}/admin/loans/loanRequests", params={"status": "PENDING"})
        assert [lr["id"] for lr in r.json()["data"]] == [loan_request["id"]]
        assert r.json()["data"][0]["requested_at"] == loan_request["requested_at"]

        r = client.put(f"{API}/admin/loans/loanRequests/accept", json={
            "loan_request_id": loan_request["id"], "loan_duration_in_months": 0
        })
        assert r.status_code == 400

        r = client.put(f"{API}/admin/loans/loanRequests/accept", json={
            "loan_request_id": loan_request["id"],
            "loan_duration_in_months": 12,
            "approved_by": "Yonas Tadesse"
        })
        assert r.status_code == 200
        loan = r.json()["data"]["loan"]
        assert loan["monthly_payment"] == "1038.32"
        assert loan["total_payable"] == "12459.84"
        assert loan["status"] == "IN_PROGRESS"
        assert len(r.json()["data"]["payments"]) == 12

        r = client.put(f"{API}/admin/loans/loanRequests/accept", json={"loan_request_id": loan_request["id"]})
        assert r.status_code == 400

        r = client.get(f"{API}/user/payments/{loan['id']}")
        schedule = r.json()["data"]
        assert schedule[0]["customer_name"] == "Meron Haile"
        assert schedule[0]["account_number"] == number

        r = client.post(f"{API}/admin/jobs/reminders")
        assert r.json()["data"]["reminded"] == 1

        r = client.post(f"{API}/user/payment", json={
            "payment_id": schedule[0]["id"], "account_number": number
        })
        assert r.status_code == 200
        assert r.json()["data"]["payment"]["is_paid"] is True
        assert r.json()["data"]["loan_status"] == "IN_PROGRESS"

        r = client.post(f"{API}/user/payment", json={
            "payment_id": schedule[0]["id"], "account_number": number
        })
        assert r.status_code == 400
        assert r.json()["message"] == "Payment already made"

        r = client.get(f"{API}/user/{customer['id']}/loans")
        assert r.json()["data"][0]["id"] == loan["id"]

        r = client.get(f"{API}/admin/dashboard")
        dashboard = r.json()["data"]
        assert dashboard["total_loans"] == 1
        assert dashboard["total_loan_amount"] == "12000.00"

        r = client.post(f"{API}/admin/jobs/overdue")
        assert r.json()["data"]["flagged"] == 0

    def test_ineligible_loan_request(self, client, funded):
        customer, account = funded
        r = client.post(f"{API}/user/loanRequest", json={
            "customer_id": customer["id"],
            "account_number": account["account_number"],
            "amount": "50000.01",
            "purpose": "Too much",
            "loan_duration": 12,
            "monthly_income": "9000"
        })
        assert r.status_code == 406

    def test_reject_loan_request(self, client, funded):
        customer, account = funded
        r = client.post(f"{API}/user/loanRequest", json={
            "customer_id": customer["id"],
            "account_number": account["account_number"],
            "amount": "1000",
            "purpose": "Travel",
            "loan_duration": 3,
            "monthly_income": "9000"
        })
        loan_request_id = r.json()["data"]["id"]

        r = client.put(f"{API}/admin/loans/loanRequests/reject", json={
            "loan_request_id": loan_request_id, "reason": "Incomplete documents"
        })
        assert r.status_code == 200
        assert r.json()["data"]["status"] == "REJECTED"
        assert "requested_at" in r.json()["data"]


class TestNotificationEndpoints:

    def test_notification_feed(self, client, funded):
        customer, account = funded
        client.post(f"{API}/admin/deposit", json={"account_number": account["account_number"], "amount": "10"})
        client.post(f"{API}/user/withdraw", json={"account_number": account["account_number"], "amount": "5"})

        r = client.get(f"{API}/user/{customer['id']}/notifications")
        feed = r.json()["data"]
        assert feed["unread_count"] == 2
        assert len(feed["notifications"]) == 2

        first_id = feed["notifications"][0]["id"]
        r = client.put(f"{API}/user/notifications/{first_id}/read")
        assert r.json()["data"]["is_read"] is True

        r = client.get(f"{API}/user/{customer['id']}/notifications", params={"unread_only": True})
        assert len(r.json()["data"]["notifications"]) == 1

        r = client.put(f"{API}/user/{customer['id']}/notifications/read-all")
        assert r.json()["data"]["updated"] == 1

        r = client.delete(f"{API}/user/notifications/{first_id}")
        assert r.status_code == 200
        r = client.delete(f"{API}/user/notifications/{first_id}")
        assert r.status_code == 404
