import pytest

from fingerprint_core import FingerprintConfig, FingerprintCore

SECRET = "DQgjVucwuG2GEEME7muh38CPFWrQXUtNPuNvcCeLR2NWwzyaNcL7BpbKe4XY5k5b"
ROTATED_SECRET = "previous-secret-kept-during-rotation"
USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:142.0) Gecko/20100101 Firefox/142.0"
ALLOWED_IP = "89.184.88.123"


@pytest.fixture
def config():
    return FingerprintConfig(
        enabled=True,
        secrets=[SECRET, ROTATED_SECRET],
        allowed_ips=[ALLOWED_IP],
        whitelisted_paths=["/api/health", "/api/user/:id", "/api/orders/:orderId/items/:itemId"],
        asset_prefixes=["/static", "/public"],
        signature_header="x-request-uuid",
    )


@pytest.fixture
def fingerprint(config):
    return FingerprintCore(config)


@pytest.fixture
def disabled_fingerprint(config):
    return FingerprintCore(FingerprintConfig(
        enabled=False,
        secrets=config.secrets,
        allowed_ips=config.allowed_ips,
        whitelisted_paths=config.whitelisted_paths,
        asset_prefixes=config.asset_prefixes,
    ))
