import pytest

from sebnf_ll1.config.analysis_config import analysis_config


@pytest.fixture(autouse=True)
def reset_config():
    """每个测试结束后恢复全局配置"""
    yield
    analysis_config.reset()
