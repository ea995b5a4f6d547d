import pytest

from alfa_core.config import AlfaConfig
from alfa_core.models import SearchSuccess, TransportFailure


class StubDocsClient:
    """Deterministic stand-in for AlfaUpstreamClient."""

    def __init__(self, search_outcome=None, docs_outcome=None):
        self.search_outcome = search_outcome if search_outcome is not None else SearchSuccess()
        self.docs_outcome = docs_outcome if docs_outcome is not None else TransportFailure()
        self.queries = []
        self.requests = []

    def search(self, query):
        self.queries.append(query)
        return self.search_outcome

    def fetch_documentation(self, request):
        self.requests.append(request)
        return self.docs_outcome


@pytest.fixture
def config() -> AlfaConfig:
    return AlfaConfig(
        base_url="https://crawler.test/api",
        api_key="secret-key",
        minimum_tokens=5000,
    )


@pytest.fixture
def stub_client() -> StubDocsClient:
    return StubDocsClient()
