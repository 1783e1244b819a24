from fastapi.testclient import TestClient

from ..core.config import Settings
from ..main import create_app
from ..services import LedgerService


def _create(client: TestClient, number: int, name: str, balance=0) -> dict:
    response = client.post(
        "/api/accounts",
        json={"account_number": number, "name": name, "balance": balance},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health_reports_memory_storage(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "storage": "memory", "durable": False}


def test_create_account_deposit_withdraw(client: TestClient) -> None:
    account = _create(client, 100, "Alice")
    assert account["account_number"] == 100
    assert account["balance"] == "0.00"

    deposit = client.post("/api/accounts/100/deposit", json={"amount": 50})
    assert deposit.status_code == 200
    body = deposit.json()
    assert body["new_balance"] == "50.00"
    assert body["account"]["balance"] == "50.00"
    assert body["message"] == "Deposit successful! New Balance: $50.00"

    withdraw = client.post("/api/accounts/100/withdraw", json={"amount": "12.50"})
    assert withdraw.status_code == 200
    assert withdraw.json()["new_balance"] == "37.50"
    assert withdraw.json()["message"] == "Withdrawal successful! New Balance: $37.50"

    snapshot = client.get("/api/accounts/100")
    assert snapshot.status_code == 200
    assert snapshot.json()["balance"] == "37.50"


def test_get_missing_account_returns_404(client: TestClient) -> None:
    response = client.get("/api/accounts/404")
    assert response.status_code == 404
    assert response.json()["detail"] == "Account 404 not found"


def test_duplicate_account_returns_409(client: TestClient) -> None:
    _create(client, 7, "Bob")
    response = client.post("/api/accounts", json={"account_number": 7, "name": "Eve"})
    assert response.status_code == 409
    assert response.json()["detail"] == "Account 7 already exists"
    assert client.get("/api/accounts/7").json()["name"] == "Bob"


def test_create_account_validates_payload(client: TestClient) -> None:
    assert client.post("/api/accounts", json={"account_number": 0, "name": "A"}).status_code == 422
    assert client.post("/api/accounts", json={"account_number": 1, "name": ""}).status_code == 422
    assert (
        client.post(
            "/api/accounts", json={"account_number": 1, "name": "A", "balance": -1}
        ).status_code
        == 422
    )
    blank = client.post("/api/accounts", json={"account_number": 1, "name": "   "})
    assert blank.status_code == 400
    assert client.get("/api/accounts").json() == []


def test_withdraw_insufficient_funds(client: TestClient) -> None:
    _create(client, 200, "Bob")

    response = client.post("/api/accounts/200/withdraw", json={"amount": 10})
    assert response.status_code == 409
    assert response.json()["detail"] == "Insufficient funds"
    assert client.get("/api/accounts/200").json()["balance"] == "0.00"


def test_deposit_to_missing_account(client: TestClient) -> None:
    response = client.post("/api/accounts/5/deposit", json={"amount": 10})
    assert response.status_code == 404


def test_deposit_rejects_non_positive_amount(client: TestClient) -> None:
    _create(client, 1, "Carol")
    assert client.post("/api/accounts/1/deposit", json={"amount": 0}).status_code == 422
    assert client.post("/api/accounts/1/deposit", json={"amount": "1.234"}).status_code == 422


def test_non_positive_account_number_in_path(client: TestClient) -> None:
    response = client.post("/api/accounts/-1/deposit", json={"amount": 10})
    assert response.status_code == 400


def test_transfer(client: TestClient) -> None:
    _create(client, 1, "Carol", 100)
    _create(client, 2, "Dave")

    response = client.post(
        "/api/accounts/transfer",
        json={"from_account_number": 1, "to_account_number": 2, "amount": 40},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["from_account"]["balance"] == "60.00"
    assert payload["to_account"]["balance"] == "40.00"
    assert payload["message"] == (
        "Transfer successful! Sender Balance: $60.00 | Receiver Balance: $40.00"
    )


def test_transfer_rejects_self_transfer(client: TestClient) -> None:
    _create(client, 1, "Carol", 100)

    response = client.post(
        "/api/accounts/transfer",
        json={"from_account_number": 1, "to_account_number": 1, "amount": 10},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot transfer to the same account"


def test_transfer_insufficient_funds(client: TestClient) -> None:
    _create(client, 1, "Carol", 5)
    _create(client, 2, "Dave")

    response = client.post(
        "/api/accounts/transfer",
        json={"from_account_number": 1, "to_account_number": 2, "amount": 10},
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "Insufficient funds in source account"
    assert client.get("/api/accounts/1").json()["balance"] == "5.00"
    assert client.get("/api/accounts/2").json()["balance"] == "0.00"


def test_transfer_missing_account(client: TestClient) -> None:
    _create(client, 1, "Carol", 5)

    response = client.post(
        "/api/accounts/transfer",
        json={"from_account_number": 1, "to_account_number": 9, "amount": 1},
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Account 9 not found"


def test_list_accounts_sorted(client: TestClient) -> None:
    for number in (3, 1, 2):
        _create(client, number, f"Holder {number}")

    response = client.get("/api/accounts")
    assert response.status_code == 200
    assert [a["account_number"] for a in response.json()] == [1, 2, 3]


def test_recent_transactions(client: TestClient) -> None:
    _create(client, 1, "Carol", 100)
    _create(client, 2, "Dave")
    client.post(
        "/api/accounts/transfer",
        json={"from_account_number": 1, "to_account_number": 2, "amount": 25},
    )

    response = client.get("/api/transactions/recent")
    assert response.status_code == 200
    items = response.json()
    assert [item["type"] for item in items] == ["transfer", "deposit"]
    assert items[0]["amount"] == "25.00"
    assert items[0]["from_account"] == {"account_number": 1, "name": "Carol"}
    assert items[0]["to_account"] == {"account_number": 2, "name": "Dave"}
    assert items[1]["from_account_id"] is None
    assert items[1]["from_account"] is None

    limited = client.get("/api/transactions/recent", params={"limit": 1})
    assert len(limited.json()) == 1


def test_recent_transactions_rejects_negative_limit(client: TestClient) -> None:
    response = client.get("/api/transactions/recent", params={"limit": -1})
    assert response.status_code == 400


def test_dashboard_stats(client: TestClient) -> None:
    _create(client, 1, "Carol")
    client.post("/api/accounts/1/deposit", json={"amount": 1250})
    client.post("/api/accounts/1/withdraw", json={"amount": 10})

    first = client.get("/api/dashboard/stats")
    second = client.get("/api/dashboard/stats")
    assert first.status_code == 200
    assert first.json() == second.json()
    assert first.json() == {
        "total_accounts": 1,
        "total_deposits": "1250.00",
        "total_withdrawals": "10.00",
        "active_transfers": 0,
        "total_deposits_display": "$1,250.00",
        "total_withdrawals_display": "$10.00",
    }


def test_non_positive_account_lookup_returns_404(client: TestClient) -> None:
    response = client.get("/api/accounts/0")
    assert response.status_code == 404
    assert response.json()["detail"] == "Account 0 not found"


def test_name_length_follows_settings() -> None:
    ledger = LedgerService(max_name_length=100)
    app = create_app(Settings(database_url=None, max_name_length=100), service=ledger)
    long_name = "x" * 80

    with TestClient(app) as client:
        created = client.post("/api/accounts", json={"account_number": 1, "name": long_name})
        assert created.status_code == 201
        assert created.json()["name"] == long_name

        too_long = client.post("/api/accounts", json={"account_number": 2, "name": "x" * 101})
        assert too_long.status_code == 400


def test_default_name_limit_enforced_by_ledger(client: TestClient) -> None:
    response = client.post("/api/accounts", json={"account_number": 1, "name": "x" * 51})
    assert response.status_code == 400
    assert response.json()["detail"] == "name must be at most 50 characters"


def test_amount_above_limit_rejected(client: TestClient) -> None:
    _create(client, 1, "Carol")
    response = client.post("/api/accounts/1/deposit", json={"amount": "90000000000000000000000000"})
    assert response.status_code == 400
    assert client.get("/api/accounts/1").json()["balance"] == "0.00"
