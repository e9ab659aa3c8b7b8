from rest_framework import serializers
from .models import Country

# placeholder codes some upstream records carry instead of a real currency
SENTINEL_CURRENCY_CODES = {"N/A"}


def collect_errors(data, context_type="refresh"):
    """
    Validation rules for Country:
    - name and population are always required
    - currency_code may be null (countries without a currency)
    - on lookup (context_type='lookup') a sentinel currency_code is invalid
    """
    errors = {}
    if not data.get("name"):
        errors["name"] = "is required"
    if data.get("population") is None:
        errors["population"] = "is required"

    if context_type == "lookup" and data.get("currency_code") in SENTINEL_CURRENCY_CODES:
        errors["currency_code"] = "is invalid"
    return errors


class CountrySerializer(serializers.ModelSerializer):
    class Meta:
        model = Country
        fields = [
            'id', 'name', 'capital', 'region', 'population',
            'currency_code', 'exchange_rate', 'estimated_gdp',
            'flag_url', 'last_refreshed_at'
        ]
        read_only_fields = fields


class StatusSerializer(serializers.Serializer):
    total_countries = serializers.IntegerField()
    last_refreshed_at = serializers.DateTimeField(allow_null=True)


class RefreshedCountrySerializer(CountrySerializer):
    """Rows straight from bulk_create; MySQL does not hand back their ids."""

    class Meta(CountrySerializer.Meta):
        fields = [f for f in CountrySerializer.Meta.fields if f != 'id']
        read_only_fields = fields
