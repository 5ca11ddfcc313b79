from __future__ import annotations

from hypothesis import HealthCheck, settings
from hypothesis.errors import InvalidArgument

_PROPERTY_PROFILE = "slaegauss_property_ci"


def pytest_configure(config: object) -> None:
    del config
    try:
        settings.get_profile(_PROPERTY_PROFILE)
    except InvalidArgument:
        # singular and ill-conditioned draws are discarded with assume()
        settings.register_profile(
            _PROPERTY_PROFILE,
            settings(
                derandomize=True,
                max_examples=60,
                deadline=None,
                print_blob=True,
                suppress_health_check=(HealthCheck.filter_too_much, HealthCheck.too_slow),
            ),
        )
    settings.load_profile(_PROPERTY_PROFILE)
