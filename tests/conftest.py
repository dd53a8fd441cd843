import pytest

from rsacert_crypto import generate

MESSAGE = "1234567890北京掌舵者科技有限公司0987654321"


@pytest.fixture(scope="session")
def keystore():
    return generate(1024)


@pytest.fixture(scope="session")
def other_keystore():
    return generate(1024)
