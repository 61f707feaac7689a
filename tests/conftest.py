import pytest

from apptopology.iac_types import InputParameters


@pytest.fixture
def backend_params():
    def make(**overrides):
        values = dict(
            app_name="svc",
            project_type="backend",
            runtime_stack="python",
            tier="standard",
        )
        values.update(overrides)
        return InputParameters(**values)

    return make


@pytest.fixture
def frontend_params():
    def make(**overrides):
        values = dict(app_name="site", project_type="frontend")
        values.update(overrides)
        return InputParameters(**values)

    return make
