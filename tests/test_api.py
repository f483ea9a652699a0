"""API endpoint tests."""

from datetime import timedelta

from ipgeo_api.models.user import User
from ipgeo_api.services.tokens import TokenService

TEST_PASSWORD = "testpass123"


def register(client, email="newuser@example.com", password="password123", confirm=None):
    return client.post(
        "/api/register",
        json={
            "email": email,
            "password": password,
            "confirmPassword": password if confirm is None else confirm,
        },
    )


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["status"] == "healthy"
    assert data["environment"] == "test"


def test_security_headers_present(client):
    """Every response carries the hardening headers."""
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "X-Process-Time" in response.headers


def test_register_user(client):
    """Test user registration."""
    response = register(client)
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Registration successful"
    assert data["user"]["email"] == "newuser@example.com"
    assert isinstance(data["user"]["id"], int)
    assert data["token"]


def test_register_never_returns_password_hash(client):
    """Neither the password nor its hash appears in the response."""
    response = register(client)
    body = response.text
    assert "password" not in response.json()["user"]
    assert "password123" not in body
    assert "$2b$" not in body


def test_register_duplicate_email(client, auth_headers, db):
    """Registering the same email twice fails and stores one user."""
    response = register(client, email=auth_headers.email)
    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Email already registered",
        "error": "Email already registered",
    }
    assert db.query(User).filter(User.email == auth_headers.email).count() == 1


def test_register_reports_all_violations(client):
    """Invalid email and short password are reported together."""
    response = client.post("/api/register", json={"email": "not-an-email", "password": "ab"})
    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["message"] == "Validation failed"
    assert data["errors"] == [
        {"field": "email", "message": "Invalid email format"},
        {"field": "password", "message": "Password must be at least 6 characters"},
    ]


def test_register_password_mismatch(client):
    """Mismatched confirmation is reported against confirmPassword."""
    response = register(client, confirm="different123")
    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "confirmPassword", "message": "Passwords do not match"},
    ]


def test_register_malformed_json(client):
    """A body that is not JSON is a validation failure."""
    response = client.post(
        "/api/register",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "body", "message": "Malformed JSON body"}]


def test_login(client, auth_headers):
    """Test user login."""
    response = client.post(
        "/api/login", json={"email": auth_headers.email, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["user"] == {"id": auth_headers.user_id, "email": auth_headers.email}
    assert data["token"]


def test_login_is_case_sensitive_on_email(client, auth_headers):
    """Emails are matched exactly as stored."""
    response = client.post(
        "/api/login", json={"email": auth_headers.email.upper(), "password": TEST_PASSWORD}
    )
    assert response.status_code == 401


def test_login_wrong_password_matches_unknown_email(client, auth_headers):
    """Wrong password and unknown email produce identical responses."""
    wrong_password = client.post(
        "/api/login", json={"email": auth_headers.email, "password": "wrongpass"}
    )
    unknown_email = client.post(
        "/api/login", json={"email": "nobody@example.com", "password": "wrongpass"}
    )
    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["message"] == "Invalid email or password"


def test_register_login_validate_round_trip(client):
    """Tokens from register and login are both accepted by validate-token."""
    register_token = register(client).json()["token"]
    login_token = client.post(
        "/api/login", json={"email": "newuser@example.com", "password": "password123"}
    ).json()["token"]

    for token in (register_token, login_token):
        response = client.get(
            "/api/validate-token", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Token is valid"
        assert data["user"]["email"] == "newuser@example.com"
        assert "createdAt" in data["user"]


def test_validate_token_missing_header(client):
    """No Authorization header is a 401."""
    response = client.get("/api/validate-token")
    assert response.status_code == 401
    assert response.json()["message"] == "Access token required"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_validate_token_wrong_scheme(client):
    """A non-Bearer Authorization header counts as missing."""
    response = client.get("/api/validate-token", headers={"Authorization": "Basic abc123"})
    assert response.status_code == 401


def test_validate_token_garbage(client):
    """A garbage bearer token is a 403."""
    response = client.get("/api/validate-token", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 403
    assert response.json()["message"] == "Invalid token"


def test_validate_token_expired_differs_from_forged(client, app, auth_headers):
    """Expired and forged tokens are both 403 with different messages."""
    expired = app.state.token_service.issue(
        auth_headers.user_id, auth_headers.email, ttl=timedelta(seconds=-60)
    )
    forged = TokenService("some-other-secret").issue(auth_headers.user_id, auth_headers.email)

    expired_response = client.get(
        "/api/validate-token", headers={"Authorization": f"Bearer {expired}"}
    )
    forged_response = client.get(
        "/api/validate-token", headers={"Authorization": f"Bearer {forged}"}
    )

    assert expired_response.status_code == 403
    assert forged_response.status_code == 403
    assert expired_response.json()["message"] == "Token has expired"
    assert forged_response.json()["message"] == "Invalid token"


def test_validate_token_for_deleted_user(client, auth_headers, db):
    """A still-valid token for a removed user is a 404."""
    db.query(User).filter(User.id == auth_headers.user_id).delete()
    db.commit()

    response = client.get("/api/validate-token", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


def test_login_rate_limit(client):
    """The sixth login attempt within the window is rejected."""
    statuses = [
        client.post("/api/login", json={"email": "a@b.com", "password": "x"}).status_code
        for _ in range(6)
    ]
    assert all(code != 429 for code in statuses[:5])
    assert statuses[5] == 429


def test_rate_limit_response(client):
    """Rejected requests get the envelope and retry headers."""
    for _ in range(5):
        client.post("/api/login", json={"email": "a@b.com", "password": "password123"})

    response = client.post("/api/login", json={"email": "a@b.com", "password": "password123"})
    assert response.status_code == 429
    assert response.json()["message"] == "Too many attempts, please try again later"
    assert int(response.headers["Retry-After"]) > 0
    assert response.headers["RateLimit-Remaining"] == "0"


def test_auth_limit_shared_by_register_and_login(client):
    """Register and login draw from the same auth budget."""
    for i in range(5):
        register(client, email=f"user{i}@example.com")

    response = client.post(
        "/api/login", json={"email": "user0@example.com", "password": "password123"}
    )
    assert response.status_code == 429


def test_general_limit_is_separate(client):
    """Exhausting the auth budget leaves general routes untouched."""
    for _ in range(6):
        client.post("/api/login", json={"email": "a@b.com", "password": "x"})

    response = client.get("/health")
    assert response.status_code == 200
    assert response.headers["RateLimit-Limit"] == "100"


def test_unknown_route(client):
    """Unknown routes use the error envelope."""
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["message"] == "Route not found"


def test_rate_limit_headers_on_rejected_requests(client):
    """Requests refused after the limiter still report the remaining budget."""
    invalid = client.post("/api/login", json={"email": "nope", "password": "x"})
    assert invalid.status_code == 400
    assert invalid.headers["RateLimit-Limit"] == "5"
    assert invalid.headers["RateLimit-Remaining"] == "4"

    unauthenticated = client.get("/api/validate-token")
    assert unauthenticated.status_code == 401
    assert unauthenticated.headers["RateLimit-Limit"] == "100"
    assert unauthenticated.headers["WWW-Authenticate"] == "Bearer"
