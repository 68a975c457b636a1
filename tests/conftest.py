import json
from unittest.mock import MagicMock

import pytest
import requests

from library_client.auth import IdentityProvider
from library_client.client import LibraryApiClient


BASE_URL = "https://api.test/dev"


def make_response(status_code=200, data=None, reason="OK", raw=None):
    """Build a real requests.Response carrying ``data`` as JSON."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.url = BASE_URL
    response.encoding = "utf-8"
    if raw is not None:
        response._content = raw.encode("utf-8")
    elif data is not None:
        response._content = json.dumps(data).encode("utf-8")
    else:
        response._content = b""
    return response


def proxy_wrapped(data, status_code=200):
    """Lambda-proxy style envelope: payload as a JSON string in ``body``."""
    return {"statusCode": status_code, "body": json.dumps(data)}


@pytest.fixture
def identity():
    provider = MagicMock(spec=IdentityProvider)
    provider.get_id_token.return_value = "id-token-123"
    return provider


@pytest.fixture
def client(identity):
    api = LibraryApiClient(
        BASE_URL,
        identity=identity,
        mock_latency=0,
        use_mock_catalog=False
    )
    api.session = MagicMock()
    api.session.request.return_value = make_response(200, [])
    yield api
    api.close()


def sent_request(api):
    """(method, url, headers, json) of the last request the client made."""
    args, kwargs = api.session.request.call_args
    return args[0], args[1], kwargs["headers"], kwargs["json"]
