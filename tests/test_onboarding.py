import pytest

from conftest import make_user
from minutemate.domain.onboarding.service import OnboardingService
from minutemate.domain.onboarding.steps import get_redirect_path


@pytest.mark.parametrize(
    "user_type,completed,step,expected",
    [
        ("client", True, None, "/"),
        ("expert", True, 6, "/expert/dashboard"),
        ("expert", False, 1, "/expert/onboarding/profile"),
        ("expert", False, 2, "/expert/onboarding/calendly"),
        ("expert", False, 3, "/expert/onboarding/availability"),
        ("expert", False, 4, "/expert/onboarding/session-details"),
        ("expert", False, 5, "/expert/onboarding/processing"),
        ("expert", False, None, "/expert/onboarding/profile"),
        ("expert", False, 42, "/expert/onboarding/profile"),
    ],
)
def test_redirect_paths(user_type, completed, step, expected):
    assert get_redirect_path(user_type, completed, step) == expected


def test_get_status(client, expert_user, auth_headers):
    response = client.get(
        "/onboarding/status", params={"user_id": expert_user.id}, headers=auth_headers(expert_user)
    )
    assert response.status_code == 200
    data = response.json()
    assert data["onboarding_step"] == 1
    assert data["redirect_to"] == "/expert/onboarding/profile"
    assert [s["id"] for s in data["steps"]] == [
        "profile",
        "calendly",
        "availability",
        "session-details",
        "processing",
    ]


def test_update_status_sets_values(client, expert_user, auth_headers):
    response = client.put(
        "/onboarding/status",
        json={"user_id": expert_user.id, "step": 4},
        headers=auth_headers(expert_user),
    )
    assert response.status_code == 200
    assert response.json()["onboarding_step"] == 4
    assert response.json()["redirect_to"] == "/expert/onboarding/session-details"


def test_update_status_rejects_out_of_range_step(client, expert_user, auth_headers):
    response = client.put(
        "/onboarding/status",
        json={"user_id": expert_user.id, "step": 7},
        headers=auth_headers(expert_user),
    )
    assert response.status_code == 422


def test_cannot_read_another_users_status(client, db_session, expert_user, auth_headers):
    other = make_user(db_session, "expert")
    response = client.get(
        "/onboarding/status", params={"user_id": other.id}, headers=auth_headers(expert_user)
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "You can only access your own data"


def test_advance_never_rewinds(db_session):
    user = make_user(db_session, "expert", step=4)
    service = OnboardingService(db_session)

    service.advance(user.id, 2)
    db_session.refresh(user)
    assert user.onboarding_step == 4

    service.advance(user.id, 5)
    db_session.refresh(user)
    assert user.onboarding_step == 5


def test_advance_ignores_clients(db_session):
    user = make_user(db_session, "client")
    OnboardingService(db_session).advance(user.id, 3)
    db_session.refresh(user)
    assert user.onboarding_step is None


def test_complete_marks_onboarding_done(db_session):
    user = make_user(db_session, "expert", step=5)
    OnboardingService(db_session).complete(user.id)
    db_session.refresh(user)
    assert user.onboarding_step == 6
    assert user.onboarding_completed is True
