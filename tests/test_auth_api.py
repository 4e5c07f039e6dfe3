from fastapi import status

from conftest import make_token, make_user
from minutemate.models import UserProfile

SIGN_UP_PAYLOAD = {
    "first_name": "  Grace ",
    "last_name": "Hopper",
    "email": "Grace@Example.com",
    "password": "supersecret",
    "user_type": "expert",
    "agree_to_terms": True,
}


# ============================================================================
# SIGN UP
# ============================================================================


def test_sign_up_expert_requires_confirmation(client, db_session, fake_supabase):
    """Unconfirmed experts are sent to the confirm-email page and start at step 1."""
    fake_supabase.email_confirmed = False

    response = client.post("/auth/sign-up", json=SIGN_UP_PAYLOAD)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["requires_email_confirmation"] is True
    assert data["redirect_to"] == "/confirm-email?email=grace%40example.com&type=expert"

    _, email, metadata, redirect_to = fake_supabase.calls[0]
    assert email == "grace@example.com"
    assert metadata == {"first_name": "Grace", "last_name": "Hopper", "user_type": "expert"}
    assert redirect_to == "http://localhost:3000/auth/callback"

    profile = db_session.query(UserProfile).filter(UserProfile.id == fake_supabase.user_id).first()
    assert profile.onboarding_step == 1
    assert profile.onboarding_completed is False


def test_sign_up_confirmed_client_goes_home(client, db_session, fake_supabase):
    response = client.post("/auth/sign-up", json={**SIGN_UP_PAYLOAD, "user_type": "client"})
    assert response.status_code == 200
    data = response.json()
    assert data["requires_email_confirmation"] is False
    assert data["redirect_to"] == "/"

    profile = db_session.query(UserProfile).filter(UserProfile.id == fake_supabase.user_id).first()
    assert profile.onboarding_completed is True
    assert profile.onboarding_step is None


def test_sign_up_requires_terms(client):
    response = client.post("/auth/sign-up", json={**SIGN_UP_PAYLOAD, "agree_to_terms": False})
    assert response.status_code == 422


def test_sign_up_rejects_short_password(client):
    response = client.post("/auth/sign-up", json={**SIGN_UP_PAYLOAD, "password": "short"})
    assert response.status_code == 422


def test_sign_up_provider_error(client, fake_supabase):
    fake_supabase.sign_up_error = Exception("User already registered")
    response = client.post("/auth/sign-up", json=SIGN_UP_PAYLOAD)
    assert response.status_code == 400
    assert response.json()["detail"] == "User already registered"


# ============================================================================
# SIGN IN
# ============================================================================


def test_sign_in_invalid_credentials(client, fake_supabase):
    fake_supabase.sign_in_error = Exception("Invalid login credentials")
    response = client.post("/auth/sign-in", json={"email": "a@b.co", "password": "nope"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == (
        "Invalid email or password. Please check your credentials and try again."
    )


def test_sign_in_email_not_confirmed(client, fake_supabase):
    fake_supabase.sign_in_error = Exception("Email not confirmed")
    response = client.post("/auth/sign-in", json={"email": "a@b.co", "password": "secret"})
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert "confirmation link" in response.json()["detail"]


def test_sign_in_redirects_expert_to_current_step(client, db_session, fake_supabase):
    user = make_user(db_session, "expert", step=3)
    fake_supabase.user_id = user.id

    response = client.post("/auth/sign-in", json={"email": user.email, "password": "secret"})
    assert response.status_code == 200
    data = response.json()
    assert data["access_token"] == "access"
    assert data["redirect_to"] == "/expert/onboarding/availability"


def test_sign_in_completed_expert_goes_to_dashboard(client, db_session, fake_supabase):
    user = make_user(db_session, "expert", step=6)
    user.onboarding_completed = True
    db_session.commit()
    fake_supabase.user_id = user.id

    response = client.post("/auth/sign-in", json={"email": user.email, "password": "secret"})
    assert response.json()["redirect_to"] == "/expert/dashboard"


def test_sign_in_unconfirmed_user_is_sent_to_confirm_page(client, db_session, fake_supabase):
    user = make_user(db_session, "client")
    fake_supabase.user_id = user.id
    fake_supabase.email_confirmed = False

    response = client.post("/auth/sign-in", json={"email": user.email, "password": "secret"})
    data = response.json()
    assert data["requires_email_confirmation"] is True
    assert data["redirect_to"].startswith("/confirm-email?")
    assert data["access_token"] is None


# ============================================================================
# RESEND CONFIRMATION
# ============================================================================


def test_resend_confirmation_success(client, fake_supabase):
    response = client.post("/auth/resend-confirmation", json={"email": "grace@example.com"})
    assert response.status_code == 200
    assert response.json()["message"] == "Confirmation email sent successfully. Please check your inbox."
    assert fake_supabase.calls[-1][0] == "resend"


def test_resend_confirmation_missing_email(client):
    response = client.post("/auth/resend-confirmation", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "Email address is required"


def test_resend_confirmation_invalid_email(client):
    response = client.post("/auth/resend-confirmation", json={"email": "not-an-email"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Please provide a valid email address"


def test_resend_confirmation_malformed_body(client):
    response = client.post(
        "/auth/resend-confirmation",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid request format"


def test_resend_confirmation_upstream_errors(client, fake_supabase):
    cases = [
        (Exception("Email rate limit exceeded"), 429, "Too many requests"),
        (Exception("User not found"), 404, "Email address not found"),
        (Exception("already_confirmed"), 409, "already been confirmed"),
    ]
    for error, expected_status, expected_text in cases:
        fake_supabase.resend_error = error
        response = client.post("/auth/resend-confirmation", json={"email": "grace@example.com"})
        assert response.status_code == expected_status
        assert expected_text in response.json()["detail"]


def test_resend_confirmation_unexpected_error(client, fake_supabase):
    fake_supabase.resend_error = Exception("")
    response = client.post("/auth/resend-confirmation", json={"email": "grace@example.com"})
    assert response.status_code == 500
    assert response.json()["detail"] == "An unexpected error occurred. Please try again."


# ============================================================================
# EMAIL CONFIRMATION
# ============================================================================


def test_confirm_email_redirects_by_profile(client, db_session, fake_supabase):
    user = make_user(db_session, "expert", step=2)
    fake_supabase.user_id = user.id

    response = client.post("/auth/confirm", json={"token_hash": "abc123", "type": "email"})
    assert response.status_code == 200
    assert response.json()["redirect_to"] == "/expert/onboarding/calendly"
    assert ("verify", "abc123", "email") in fake_supabase.calls


def test_confirm_email_invalid_link(client, fake_supabase):
    fake_supabase.verify_error = Exception("Token has expired or is invalid")
    response = client.post("/auth/confirm", json={"token_hash": "abc123"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Email confirmation failed. Please try again."


def test_confirm_email_incomplete(client, fake_supabase):
    fake_supabase.email_confirmed = False
    response = client.post("/auth/confirm", json={"token_hash": "abc123"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Email confirmation incomplete. Please check your email again."


# ============================================================================
# CURRENT USER
# ============================================================================


def test_me_reports_confirmation_status(client, expert_user, auth_headers, fake_supabase):
    fake_supabase.email_confirmed = False
    response = client.get("/auth/me", headers=auth_headers(expert_user))
    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == expert_user.id
    assert data["email_confirmed"] is False
    assert data["needs_email_confirmation"] is True
    assert data["redirect_to"] == "/expert/onboarding/profile"


def test_me_creates_missing_profile_from_token(client, db_session):
    """A profile insert that failed during sign-up is recovered on first request."""
    user_id = "5b1f6f9e-1d1a-4f5e-9d59-1b7e8b0f2c11"
    token = make_token(
        user_id,
        "late@example.com",
        user_metadata={"first_name": "Late", "last_name": "Comer", "user_type": "expert"},
    )

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    profile = db_session.query(UserProfile).filter(UserProfile.id == user_id).first()
    assert profile.first_name == "Late"
    assert profile.onboarding_step == 1


def test_expired_token_is_rejected(client, expert_user):
    token = make_token(expert_user.id, expires_in=-60)
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token expired"


def test_token_signed_with_other_secret_is_rejected(client, expert_user):
    token = make_token(expert_user.id, secret="another-secret")
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_malformed_token_is_rejected(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token format"
