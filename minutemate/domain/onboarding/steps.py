"""Expert onboarding wizard steps and post-login redirects"""

from typing import Optional

PROFILE_STEP = 1
CALENDLY_STEP = 2
AVAILABILITY_STEP = 3
SESSION_DETAILS_STEP = 4
PROCESSING_STEP = 5
COMPLETED_STEP = 6

ONBOARDING_STEPS = [
    {"id": "profile", "step": PROFILE_STEP, "title": "Build Your Profile", "path": "/expert/onboarding/profile"},
    {"id": "calendly", "step": CALENDLY_STEP, "title": "Connect Calendly", "path": "/expert/onboarding/calendly"},
    {
        "id": "availability",
        "step": AVAILABILITY_STEP,
        "title": "Set Your Availability",
        "path": "/expert/onboarding/availability",
    },
    {
        "id": "session-details",
        "step": SESSION_DETAILS_STEP,
        "title": "Set Your Rates",
        "path": "/expert/onboarding/session-details",
    },
    {
        "id": "processing",
        "step": PROCESSING_STEP,
        "title": "Review & Launch",
        "path": "/expert/onboarding/processing",
    },
]

STEP_PATHS = {s["step"]: s["path"] for s in ONBOARDING_STEPS}

CLIENT_HOME_PATH = "/"
EXPERT_DASHBOARD_PATH = "/expert/dashboard"


def get_redirect_path(user_type: Optional[str], onboarding_completed: bool, onboarding_step: Optional[int]) -> str:
    """Where to send a user after sign-in or email confirmation"""
    if user_type != "expert":
        return CLIENT_HOME_PATH
    if onboarding_completed:
        return EXPERT_DASHBOARD_PATH
    return STEP_PATHS.get(onboarding_step, STEP_PATHS[PROFILE_STEP])
