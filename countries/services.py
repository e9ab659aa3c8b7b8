import logging

from .models import Country
from .serializers import collect_errors
from . import utils

logger = logging.getLogger(__name__)


def build_countries(countries_data, rates, multiplier):
    """
    Turn upstream country records into unsaved Country rows.

    currency_code is the first listed currency (or None); exchange_rate and
    estimated_gdp are filled only when that currency has a usable rate.
    Records missing a name or population are skipped.
    """
    rows = []
    for item in countries_data:
        name = item.get("name")
        population = item.get("population")

        errors = collect_errors({"name": name, "population": population})
        if errors:
            logger.warning("Skipping country record %r: %s", name, errors)
            continue

        currencies = item.get("currencies") or []
        first_currency = currencies[0] if currencies else None
        currency_code = (first_currency or {}).get("code")

        exchange_rate, estimated_gdp = None, None
        if currency_code:
            exchange_rate, estimated_gdp = utils.estimate_gdp(population, rates.get(currency_code), multiplier)

        rows.append(Country(
            name=name,
            capital=item.get("capital"),
            region=item.get("region"),
            population=population,
            flag_url=item.get("flag"),
            currency_code=currency_code,
            exchange_rate=exchange_rate,
            estimated_gdp=estimated_gdp,
        ))
    return rows


def regenerate_summary_image():
    """Render the summary PNG from what is currently stored."""
    summary = Country.objects.status_summary()
    last_refreshed = summary["last_refreshed_at"]
    return utils.generate_summary_image(
        summary["total_countries"],
        list(Country.objects.top_by_gdp(5)),
        last_refreshed.isoformat() if last_refreshed else None,
    )


def refresh_countries(multiplier=None):
    """
    Fetch countries and exchange rates, then replace the stored table.

    Raises utils.ExternalAPIError before touching the database when either
    upstream call fails. Returns the rows that were inserted.
    """
    countries_data = utils.fetch_countries()
    rates = utils.fetch_exchange_rates()

    if multiplier is None:
        multiplier = utils.make_multiplier()
    logger.info("Refreshing %d countries with GDP multiplier %.4f", len(countries_data), multiplier)

    rows = build_countries(countries_data, rates, multiplier)
    created = Country.objects.replace_all(rows)
    logger.info("Stored %d countries", len(created))

    regenerate_summary_image()
    return created
