"""Mixed marketplace workload scenario.

Sellers onboarding and buyers checking out at the same time, weighted
towards checkout traffic. This is the recommended scenario for a load
baseline.
"""

from locust import HttpUser, between

from loadtests.scenarios.checkout import CheckoutJourney
from loadtests.scenarios.onboarding import SellerOnboardingJourney


class MixedWorkloadUser(HttpUser):
    """Roughly one seller onboarding for every four buyer journeys."""

    wait_time = between(0.5, 3.0)
    tasks = {
        SellerOnboardingJourney: 1,
        CheckoutJourney: 4,
    }
