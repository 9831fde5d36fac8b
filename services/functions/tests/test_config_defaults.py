"""
Where: services/functions/tests/test_config_defaults.py
What: Validate default FunctionsConfig values and environment overrides.
Why: Keep timeout and runtime version defaults stable.
"""

from services.functions.config import FunctionsConfig
from services.functions.models import ExecutionEnvironment


def test_defaults(monkeypatch):
    for name in (
        "FUNCTIONS_TIMEOUT_SYNCHRONOUS",
        "FUNCTIONS_TIMEOUT_BACKGROUND",
        "V2_MIN_RUNTIME_VERSION",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    config = FunctionsConfig(_env_file=None)

    assert config.FUNCTIONS_TIMEOUT_SYNCHRONOUS == 30
    assert config.FUNCTIONS_TIMEOUT_BACKGROUND == 900
    assert config.V2_MIN_RUNTIME_VERSION == "18.14.0"
    assert config.LOG_LEVEL == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FUNCTIONS_TIMEOUT_SYNCHRONOUS", "10")
    monkeypatch.setenv("RUNTIME_VERSION", "v18.13.0")

    config = FunctionsConfig(_env_file=None)

    assert config.FUNCTIONS_TIMEOUT_SYNCHRONOUS == 10
    assert ExecutionEnvironment.from_config(config) == ExecutionEnvironment(
        version="v18.13.0", v2_min_version="18.14.0"
    )


def test_function_uses_configured_timeouts(make_runtime, monkeypatch):
    from services.functions.services import function as function_module

    config = FunctionsConfig(_env_file=None, FUNCTIONS_TIMEOUT_SYNCHRONOUS=5)
    monkeypatch.setattr(function_module, "functions_config", config)

    func = function_module.LocalFunction(
        name="hello",
        main_file="/src/hello.mjs",
        directory="/src",
        project_root="/",
        runtime=make_runtime(),
    )

    assert func.timeout_synchronous == 5
    assert func.timeout_background == config.FUNCTIONS_TIMEOUT_BACKGROUND
    assert func.environment == ExecutionEnvironment.from_config(config)
