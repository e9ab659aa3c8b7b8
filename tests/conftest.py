from unittest import mock

import pytest
from rest_framework.test import APIClient

from countries.models import Country

COUNTRIES_URL = "https://countries.test/all"
RATES_URL = "https://rates.test/latest/USD"

COUNTRIES_PAYLOAD = [
    {
        "name": "Nigeria",
        "capital": "Abuja",
        "region": "Africa",
        "population": 206139589,
        "flag": "https://flagcdn.com/ng.svg",
        "currencies": [{"code": "NGN", "name": "Nigerian naira", "symbol": "₦"}],
    },
    {
        "name": "Ghana",
        "capital": "Accra",
        "region": "Africa",
        "population": 31072940,
        "flag": "https://flagcdn.com/gh.svg",
        "currencies": [{"code": "GHS", "name": "Ghanaian cedi", "symbol": "₵"}],
    },
    {
        "name": "Germany",
        "capital": "Berlin",
        "region": "Europe",
        "population": 83240525,
        "flag": "https://flagcdn.com/de.svg",
        "currencies": [{"code": "EUR", "name": "Euro", "symbol": "€"}],
    },
    {
        # currency without a quoted rate
        "name": "Atlantis",
        "capital": "Poseidonia",
        "region": "Oceania",
        "population": 1000,
        "flag": "https://flagcdn.com/aq.svg",
        "currencies": [{"code": "ATL", "name": "Atlantean drachma"}],
    },
    {
        # no currency at all
        "name": "Antarctica",
        "region": "Polar",
        "population": 1000,
        "flag": "https://flagcdn.com/aq.svg",
    },
]

RATES_PAYLOAD = {
    "result": "success",
    "base_code": "USD",
    "rates": {"USD": 1, "NGN": 1600.5, "GHS": 15.2, "EUR": 0.92},
}


def make_response(payload, status_code=200):
    resp = mock.Mock(status_code=status_code)
    resp.json.return_value = payload
    return resp


@pytest.fixture(autouse=True)
def upstream_settings(settings, tmp_path):
    settings.COUNTRIES_API_URL = COUNTRIES_URL
    settings.EXCHANGE_API_URL = RATES_URL
    settings.CACHE_DIR = str(tmp_path / "cache")
    return settings


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def upstream():
    """Patch requests.get; tests tweak `responses` to simulate failures."""
    responses = {
        COUNTRIES_URL: make_response(COUNTRIES_PAYLOAD),
        RATES_URL: make_response(RATES_PAYLOAD),
    }

    def fake_get(url, timeout=None):
        return responses[url]

    with mock.patch("countries.utils.requests.get", side_effect=fake_get) as get:
        get.responses = responses
        yield get


@pytest.fixture
def sample_countries(db):
    return [
        Country.objects.create(name="Nigeria", capital="Abuja", region="Africa", population=206139589,
                               currency_code="NGN", exchange_rate=1600.5, estimated_gdp=193000000),
        Country.objects.create(name="Ghana", capital="Accra", region="Africa", population=31072940,
                               currency_code="GHS", exchange_rate=15.2, estimated_gdp=3100000000),
        Country.objects.create(name="Germany", capital="Berlin", region="Europe", population=83240525,
                               currency_code="EUR", exchange_rate=0.92, estimated_gdp=135000000000),
        Country.objects.create(name="Atlantis", region="Oceania", population=1000,
                               currency_code="ATL"),
    ]
